"""
Application DI Container (dependency-injector).

Wires settings → lookup client → delivery gate → source adapters →
orchestrator → scoring engine → feedback → service.

Usage::

    from retail_search.config import Settings
    from retail_search.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict(Settings.from_env().to_dict())

    service = container.service()

    # In tests, override any provider:
    container.adapters.override(providers.Object({"amazon": fake_adapter}))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

from retail_search.application.feedback import FeedbackAggregator, InMemoryFeedbackStore
from retail_search.application.search import (
    IntentParser,
    RelevancePenaltyPolicy,
    ScoringConfig,
    ScoringEngine,
    SearchOrchestrator,
)
from retail_search.application.service import RetailSearchService
from retail_search.config import Settings
from retail_search.infrastructure.cache import ExpiringCache
from retail_search.infrastructure.delivery import DeliveryGate, PostalLookupClient

logger = logging.getLogger(__name__)


def _create_adapters(sources: list[str]) -> object:
    """Lazy factory for the demo catalogue adapters."""
    from retail_search.infrastructure.sources import build_demo_adapters

    logger.info(f"Configuring demo catalogue for sources: {', '.join(sources)}")
    return build_demo_adapters(sources)


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for Retail Search.

    Manages creation and lifecycle of all core services:
    - ``lookup_client``: pincode directory client (owns an httpx client)
    - ``delivery_gate``: location validation with a 24 h expiring cache
    - ``orchestrator``: parallel per-source search
    - ``scoring_engine``: ranking with feedback-driven penalties
    - ``feedback_aggregator``: feedback ingestion and analytics
    - ``service``: facade used by the CLI and outer layers
    """

    config = providers.Configuration()

    lookup_client = providers.Singleton(
        PostalLookupClient,
        base_url=config.lookup_url,
        timeout=config.lookup_timeout,
    )

    delivery_cache = providers.Singleton(
        ExpiringCache,
        ttl=config.delivery_cache_ttl,
        max_size=config.delivery_cache_size,
    )

    delivery_gate = providers.Singleton(
        DeliveryGate,
        lookup=lookup_client,
        cache=delivery_cache,
    )

    adapters = providers.Singleton(
        _create_adapters,
        sources=config.sources,
    )

    orchestrator = providers.Singleton(
        SearchOrchestrator,
        adapters=adapters,
        delivery_gate=delivery_gate,
        source_timeout=config.source_timeout,
    )

    scoring_config = providers.Factory(ScoringConfig)

    feedback_policy = providers.Singleton(RelevancePenaltyPolicy)

    scoring_engine = providers.Singleton(
        ScoringEngine,
        config=scoring_config,
        feedback_policy=feedback_policy,
    )

    feedback_store = providers.Singleton(InMemoryFeedbackStore)

    feedback_aggregator = providers.Singleton(
        FeedbackAggregator,
        store=feedback_store,
    )

    intent_parser = providers.Singleton(IntentParser)

    service = providers.Singleton(
        RetailSearchService,
        orchestrator=orchestrator,
        scoring=scoring_engine,
        delivery_gate=delivery_gate,
        feedback=feedback_aggregator,
        intent_parser=intent_parser,
    )


def create_container(settings: Settings | None = None) -> ApplicationContainer:
    """Container configured from ``settings`` (environment when omitted)."""
    container = ApplicationContainer()
    container.config.from_dict((settings or Settings.from_env()).to_dict())
    return container


__all__ = ["ApplicationContainer", "create_container"]
