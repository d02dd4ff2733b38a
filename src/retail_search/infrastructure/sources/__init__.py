"""
Source Adapters

- SourceAdapter: protocol the orchestrator depends on
- CatalogSourceAdapter: deterministic in-memory catalogue
- HttpSourceAdapter: JSON search endpoint over httpx
"""

from .base import SourceAdapter
from .catalog import CatalogSourceAdapter, build_demo_adapters, demo_catalog
from .http_adapter import HttpSourceAdapter

__all__ = [
    "SourceAdapter",
    "CatalogSourceAdapter",
    "HttpSourceAdapter",
    "build_demo_adapters",
    "demo_catalog",
]
