"""
Search backend interface.

A backend executes the query and serves the matching records page by page
through an opaque cursor handle. The export pipeline only ever talks to a
backend through these three calls.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


@dataclass
class Record:
    """
    One search hit.

    Attributes:
        id: Record identifier
        source: Field mapping, possibly nested
    """

    id: Optional[str]
    source: Dict[str, Any] = field(default_factory=dict)


Batch = Tuple[List[Record], bool]


class SearchBackend(ABC):
    """Abstract base class for paginated search backends."""

    @abstractmethod
    async def open_cursor(
        self,
        index: str,
        query: Optional[Mapping[str, Any]],
        sort: Optional[Sequence[Any]],
        batch_size: int,
        doc_type: Optional[str] = None,
    ) -> Any:
        """
        Start a paginated search.

        Args:
            index: Index (or comma-separated indices) to search
            query: Query clause, None meaning match-all
            sort: Sort clause, None meaning backend default order
            batch_size: Records per page
            doc_type: Optional document type restriction

        Returns:
            Opaque cursor handle
        """
        pass

    @abstractmethod
    async def fetch_next(self, handle: Any) -> Batch:
        """
        Fetch the next page.

        Returns:
            Tuple of (records, more_available)
        """
        pass

    @abstractmethod
    async def release(self, handle: Any) -> None:
        """Free the server-side pagination state behind a handle."""
        pass
