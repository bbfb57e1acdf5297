"""
Elasticsearch search backend.

Pages through results with the scroll API of an AsyncElasticsearch client:
the first page comes from search(scroll=...), later pages from scroll(),
and clear_scroll() frees the server-side context.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from elasticsearch import ApiError, AsyncElasticsearch, TransportError

from ..constants import DEFAULT_SCROLL_KEEP_ALIVE
from ..exceptions import BackendError
from ..request import thaw_clause
from .base import Batch, Record, SearchBackend

logger = logging.getLogger(__name__)


@dataclass
class ScrollHandle:
    """Scroll state for one open cursor."""

    scroll_id: Optional[str]
    pending: List[Dict[str, Any]] = field(default_factory=list)
    total_seen: int = 0
    exhausted: bool = False


def _scroll_id(response: Any, default: Optional[str] = None) -> Optional[str]:
    try:
        return response["_scroll_id"]
    except KeyError:
        return default


def _to_record(hit: Dict[str, Any]) -> Record:
    return Record(id=hit.get("_id"), source=hit.get("_source") or {})


class ElasticsearchBackend(SearchBackend):
    """
    Scroll-based backend over an AsyncElasticsearch client.

    The client is owned by the caller; this backend never closes it.
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        keep_alive: str = DEFAULT_SCROLL_KEEP_ALIVE,
    ) -> None:
        """
        Args:
            client: Connected AsyncElasticsearch client
            keep_alive: How long the scroll context survives between pages

        Raises:
            ValueError: If client doesn't have required methods
        """
        for method in ("search", "scroll", "clear_scroll"):
            if not hasattr(client, method):
                raise ValueError(
                    f"Client must provide '{method}'. "
                    "Please use an AsyncElasticsearch client from elasticsearch."
                )
        self.client = client
        self.keep_alive = keep_alive

    async def open_cursor(
        self,
        index: str,
        query: Optional[Mapping[str, Any]],
        sort: Optional[Sequence[Any]],
        batch_size: int,
        doc_type: Optional[str] = None,
    ) -> ScrollHandle:
        # Mapping types no longer exist server side; doc_type only labels output
        try:
            response = await self.client.search(
                index=index,
                query=thaw_clause(query) if query else {"match_all": {}},
                sort=thaw_clause(sort) if sort else ["_doc"],
                size=batch_size,
                scroll=self.keep_alive,
            )
        except (ApiError, TransportError) as e:
            raise BackendError(f"Search on '{index}' failed: {e}") from e

        hits = response["hits"]["hits"]
        handle = ScrollHandle(scroll_id=_scroll_id(response), pending=list(hits))
        logger.debug(f"Opened scroll on '{index}' with first page of {len(hits)} hits")
        return handle

    async def fetch_next(self, handle: ScrollHandle) -> Batch:
        if handle.pending:
            hits, handle.pending = handle.pending, []
        elif handle.exhausted or not handle.scroll_id:
            return [], False
        else:
            try:
                response = await self.client.scroll(
                    scroll_id=handle.scroll_id, scroll=self.keep_alive
                )
            except (ApiError, TransportError) as e:
                raise BackendError(f"Scroll request failed: {e}") from e
            handle.scroll_id = _scroll_id(response, handle.scroll_id)
            hits = response["hits"]["hits"]

        handle.total_seen += len(hits)
        if not hits:
            handle.exhausted = True
        return [_to_record(hit) for hit in hits], bool(hits)

    async def release(self, handle: ScrollHandle) -> None:
        if not handle.scroll_id:
            return
        try:
            await self.client.clear_scroll(scroll_id=handle.scroll_id)
        except (ApiError, TransportError) as e:
            raise BackendError(f"Failed to clear scroll: {e}") from e
        finally:
            handle.scroll_id = None
        logger.debug(f"Cleared scroll after {handle.total_seen} hits")
