"""
Search Result Entities - Per-Source Outcomes of One Search

Key Entities:
    - SourceStatus: pending / success / error / not_deliverable
    - SourceResult: Outcome for one source (replaced wholesale, never mutated)
    - SearchResultSet: Read-only mapping source -> SourceResult covering
      exactly the configured sources
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .product import Item


class SourceStatus(Enum):
    """Lifecycle status of one source within a search."""

    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"
    NOT_DELIVERABLE = "not_deliverable"


@dataclass(frozen=True)
class SourceResult:
    """Outcome of one source for one search."""

    status: SourceStatus
    items: tuple[Item, ...] = ()
    error: str | None = None

    @classmethod
    def pending(cls) -> SourceResult:
        return cls(SourceStatus.PENDING)

    @classmethod
    def succeeded(cls, items: Iterable[Item]) -> SourceResult:
        return cls(SourceStatus.SUCCESS, tuple(items))

    @classmethod
    def failed(cls, message: str) -> SourceResult:
        return cls(SourceStatus.ERROR, (), message)

    @classmethod
    def not_deliverable(cls, message: str | None = None) -> SourceResult:
        return cls(SourceStatus.NOT_DELIVERABLE, (), message)

    @property
    def ok(self) -> bool:
        return self.status is SourceStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": self.status.value,
            "items": [item.to_dict() for item in self.items],
        }
        if self.error:
            data["error"] = self.error
        return data


class SearchResultSet(Mapping[str, SourceResult]):
    """
    Per-source outcomes for one search.

    Created with every configured source set to ``pending`` so callers can
    render all source slots immediately. The key set is fixed at creation;
    ``settle`` replaces a slot and refuses unknown sources.
    """

    __slots__ = ("_results",)

    def __init__(self, results: Mapping[str, SourceResult]) -> None:
        self._results: dict[str, SourceResult] = dict(results)

    @classmethod
    def pending(cls, sources: Iterable[str]) -> SearchResultSet:
        return cls({source: SourceResult.pending() for source in sources})

    def __getitem__(self, source: str) -> SourceResult:
        return self._results[source]

    def __iter__(self) -> Iterator[str]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def __repr__(self) -> str:
        return f"SearchResultSet({self.counts()!r})"

    def settle(self, source: str, result: SourceResult) -> None:
        """Replace the slot for ``source`` with its final result."""
        if source not in self._results:
            msg = f"Unknown source: {source!r}"
            raise KeyError(msg)
        self._results[source] = result

    def copy(self) -> SearchResultSet:
        return SearchResultSet(self._results)

    def successful_items(self) -> list[Item]:
        """All items from sources that settled with ``success``."""
        return [item for result in self._results.values() if result.ok for item in result.items]

    def counts(self) -> dict[str, dict[str, Any]]:
        """Status and item count per source (used for logging)."""
        return {
            source: {"status": result.status.value, "count": len(result.items)}
            for source, result in self._results.items()
        }

    @property
    def is_complete(self) -> bool:
        return all(r.status is not SourceStatus.PENDING for r in self._results.values())

    def to_dict(self) -> dict[str, Any]:
        return {source: result.to_dict() for source, result in self._results.items()}
