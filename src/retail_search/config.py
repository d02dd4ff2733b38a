"""
Runtime settings read from ``RETAIL_SEARCH_*`` environment variables.

    RETAIL_SEARCH_SOURCES              comma-separated source names
    RETAIL_SEARCH_SOURCE_TIMEOUT       per-source deadline (seconds)
    RETAIL_SEARCH_DELIVERY_CACHE_TTL   location lookup cache TTL (seconds)
    RETAIL_SEARCH_DELIVERY_CACHE_SIZE  location lookup cache capacity
    RETAIL_SEARCH_LOOKUP_URL           pincode directory base URL
    RETAIL_SEARCH_LOOKUP_TIMEOUT       pincode directory timeout (seconds)
    RETAIL_SEARCH_LOG_LEVEL            logging level name
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from retail_search.infrastructure.delivery.postal_client import DEFAULT_LOOKUP_TIMEOUT, DEFAULT_LOOKUP_URL
from retail_search.shared.exceptions import ConfigurationError, ErrorContext

ENV_PREFIX = "RETAIL_SEARCH_"
DEFAULT_SOURCES = ("amazon", "flipkart", "myntra", "meesho")


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        value = -1.0
    if value <= 0:
        msg = f"{ENV_PREFIX}{name} must be a positive number, got {raw!r}"
        raise ConfigurationError(msg, context=ErrorContext(operation="load_settings", input_value=raw))
    return value


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        value = -1
    if value <= 0:
        msg = f"{ENV_PREFIX}{name} must be a positive integer, got {raw!r}"
        raise ConfigurationError(msg, context=ErrorContext(operation="load_settings", input_value=raw))
    return value


@dataclass(frozen=True)
class Settings:
    """Application settings; defaults run the demo catalogue."""

    sources: tuple[str, ...] = field(default=DEFAULT_SOURCES)
    source_timeout: float = 10.0
    delivery_cache_ttl: float = 24 * 60 * 60
    delivery_cache_size: int = 10_000
    lookup_url: str = DEFAULT_LOOKUP_URL
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """
        Build settings from the environment.

        Raises:
            ConfigurationError: a variable is present but invalid
        """
        env = os.environ if environ is None else environ

        sources = DEFAULT_SOURCES
        raw_sources = env.get(ENV_PREFIX + "SOURCES")
        if raw_sources is not None and raw_sources.strip():
            sources = tuple(dict.fromkeys(s.strip().lower() for s in raw_sources.split(",") if s.strip()))
            if not sources:
                msg = f"{ENV_PREFIX}SOURCES must name at least one source"
                raise ConfigurationError(msg)

        log_level = env.get(ENV_PREFIX + "LOG_LEVEL", "INFO").strip().upper() or "INFO"
        if not isinstance(logging.getLevelName(log_level), int):
            msg = f"{ENV_PREFIX}LOG_LEVEL is not a logging level: {log_level!r}"
            raise ConfigurationError(msg)

        return cls(
            sources=sources,
            source_timeout=_positive_float(env, "SOURCE_TIMEOUT", cls.source_timeout),
            delivery_cache_ttl=_positive_float(env, "DELIVERY_CACHE_TTL", cls.delivery_cache_ttl),
            delivery_cache_size=_positive_int(env, "DELIVERY_CACHE_SIZE", cls.delivery_cache_size),
            lookup_url=env.get(ENV_PREFIX + "LOOKUP_URL", "").strip() or DEFAULT_LOOKUP_URL,
            lookup_timeout=_positive_float(env, "LOOKUP_TIMEOUT", cls.lookup_timeout),
            log_level=log_level,
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for ``container.config.from_dict``."""
        data = asdict(self)
        data["sources"] = list(self.sources)
        return data
