"""
Scoped cursor over a search backend.

Wraps a backend cursor handle so that it is released exactly once, whether
iteration finishes, raises, or the surrounding task is cancelled. Always
use the cursor as an async context manager::

    async with await Cursor.open(backend, "dataset", query, sort) as cursor:
        async for batch in cursor:
            ...
"""

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence

from .backends.base import Record, SearchBackend
from .constants import DEFAULT_BATCH_SIZE
from .exceptions import BackendError, CursorClosedError, ExportError

logger = logging.getLogger(__name__)


class Cursor:
    """
    Async iterator of record batches backed by a server-side cursor.

    Iteration yields non-empty batches in backend order and stops when the
    backend reports no more data or returns an empty batch.
    """

    def __init__(
        self,
        backend: SearchBackend,
        handle: Any,
        page_callback: Optional[Callable[[int, int], None]] = None,
    ) -> None:
        """
        Args:
            backend: Backend that issued the handle
            handle: Opaque cursor handle
            page_callback: Called with (page_number, total_records) after each page
        """
        self.backend = backend
        self.handle = handle
        self.page_callback = page_callback
        self.page_number = 0
        self.total_records = 0
        self._exhausted = False
        self._released = False

    @classmethod
    async def open(
        cls,
        backend: SearchBackend,
        index: str,
        query: Optional[Mapping[str, Any]] = None,
        sort: Optional[Sequence[Any]] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        doc_type: Optional[str] = None,
        page_callback: Optional[Callable[[int, int], None]] = None,
    ) -> "Cursor":
        """
        Open a cursor on the backend.

        Raises:
            BackendError: If the backend cannot execute the query
        """
        try:
            handle = await backend.open_cursor(index, query, sort, batch_size, doc_type)
        except ExportError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to open cursor on '{index}': {e}") from e
        return cls(backend, handle, page_callback=page_callback)

    @property
    def released(self) -> bool:
        return self._released

    async def fetch_batch(self) -> List[Record]:
        """
        Fetch the next page.

        Returns:
            Records of the page, or an empty list once exhausted

        Raises:
            CursorClosedError: If the cursor was already released
            BackendError: If the backend fails to serve the page
        """
        if self._released:
            raise CursorClosedError("Cursor has been released")
        if self._exhausted:
            return []

        try:
            records, more = await self.backend.fetch_next(self.handle)
        except ExportError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to fetch page {self.page_number + 1}: {e}") from e

        if not records or not more:
            self._exhausted = True
        if records:
            self.page_number += 1
            self.total_records += len(records)
            if self.page_callback:
                self.page_callback(self.page_number, self.total_records)
        return list(records)

    def __aiter__(self) -> "Cursor":
        return self

    async def __anext__(self) -> List[Record]:
        batch = await self.fetch_batch()
        if not batch:
            raise StopAsyncIteration
        return batch

    async def release(self) -> None:
        """
        Release the server-side cursor.

        Idempotent: only the first call reaches the backend. Failures are
        logged and not raised, so they never replace an error that is
        already propagating.
        """
        if self._released:
            return
        self._released = True
        try:
            await self.backend.release(self.handle)
        except Exception as e:
            logger.warning(f"Failed to release cursor after {self.total_records} records: {e}")

    async def __aenter__(self) -> "Cursor":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.release()
