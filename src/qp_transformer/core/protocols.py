"""Protocols (interfaces) for transformer collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from qp_transformer.core.types import KindFilter, SearchResults


@runtime_checkable
class SearchBackend(Protocol):
    """Remote lookup capability: exact and fuzzy candidates for a phrase."""

    async def search(
        self,
        phrase: str,
        language: str,
        limit: int,
        kind_filter: KindFilter,
    ) -> SearchResults:
        """Search for candidates matching a phrase, restricted by kind."""
        ...
