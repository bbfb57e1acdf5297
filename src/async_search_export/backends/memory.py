"""
In-memory search backend.

Serves records held in process memory through the same cursor protocol as
a real search cluster. Understands the common subset of the query DSL
(match_all, term, terms, ids, exists, range and bool) and field sorting,
which is enough to drive exports in tests and local tooling.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..exceptions import BackendError
from .base import Batch, Record, SearchBackend

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class _CursorState:
    records: List[Record]
    batch_size: int
    position: int = 0


class InMemoryBackend(SearchBackend):
    """
    Search backend over documents stored in memory.

    Documents are kept per index in insertion order, which is also the
    default result order when no sort is requested.
    """

    def __init__(self) -> None:
        self._indices: Dict[str, List[Tuple[Optional[str], Record]]] = {}
        self._cursors: Dict[str, _CursorState] = {}
        self.opened_count = 0
        self.released_count = 0

    @property
    def open_cursors(self) -> int:
        """Number of cursors opened but not yet released."""
        return len(self._cursors)

    def index_document(
        self,
        index: str,
        source: Dict[str, Any],
        doc_id: Optional[str] = None,
        doc_type: Optional[str] = None,
    ) -> Record:
        """
        Store a document.

        Args:
            index: Index name
            source: Document fields
            doc_id: Document id (default: sequential number within the index)
            doc_type: Optional document type

        Returns:
            The stored record
        """
        documents = self._indices.setdefault(index, [])
        if doc_id is None:
            doc_id = str(len(documents) + 1)
        record = Record(id=str(doc_id), source=source)
        documents.append((doc_type, record))
        return record

    def _select(self, index: str, doc_type: Optional[str]) -> List[Record]:
        selected: List[Record] = []
        for name in (part.strip() for part in index.split(",")):
            if name not in self._indices:
                raise BackendError(f"No such index: {name}")
            selected.extend(
                record
                for record_type, record in self._indices[name]
                if doc_type is None or record_type == doc_type
            )
        return selected

    async def open_cursor(
        self,
        index: str,
        query: Optional[Mapping[str, Any]],
        sort: Optional[Sequence[Any]],
        batch_size: int,
        doc_type: Optional[str] = None,
    ) -> str:
        records = [r for r in self._select(index, doc_type) if matches(query, r)]
        if sort:
            records = sort_records(records, sort)

        handle = uuid.uuid4().hex
        self._cursors[handle] = _CursorState(records=records, batch_size=batch_size)
        self.opened_count += 1
        logger.debug(f"Opened in-memory cursor {handle} over {len(records)} records")
        return handle

    async def fetch_next(self, handle: str) -> Batch:
        state = self._cursors.get(handle)
        if state is None:
            raise BackendError(f"Cursor {handle} not found or already released")

        # Yield to the loop like a network round trip would
        await asyncio.sleep(0)

        start = state.position
        state.position = min(start + state.batch_size, len(state.records))
        batch = state.records[start : state.position]
        return batch, state.position < len(state.records)

    async def release(self, handle: str) -> None:
        if self._cursors.pop(handle, None) is None:
            raise BackendError(f"Cursor {handle} not found or already released")
        self.released_count += 1
        logger.debug(f"Released in-memory cursor {handle}")


def lookup(source: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted field path in a nested source, or return _MISSING."""
    if path in source:
        return source[path]
    current: Any = source
    for part in path.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return _MISSING
    return current


def _values(record: Record, field: str) -> List[Any]:
    if field == "_id":
        return [record.id]
    value = lookup(record.source, field)
    if value is _MISSING or value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _coerce(bound: Any, sample: Any) -> Any:
    """Bring a query bound to the type of the stored value (``"100"`` vs ``100``)."""
    if isinstance(sample, (int, float)) and not isinstance(sample, bool) and isinstance(bound, str):
        try:
            return float(bound)
        except ValueError:
            return bound
    if isinstance(sample, str) and not isinstance(bound, str):
        return str(bound)
    return bound


def _in_range(value: Any, spec: Mapping[str, Any]) -> bool:
    lower_inclusive = spec.get("include_lower", True)
    upper_inclusive = spec.get("include_upper", True)
    checks: List[Tuple[str, Callable[[Any, Any], bool]]] = []

    if "gte" in spec:
        checks.append(("gte", lambda v, b: v >= b))
    if "gt" in spec:
        checks.append(("gt", lambda v, b: v > b))
    if spec.get("from") is not None:
        checks.append(("from", (lambda v, b: v >= b) if lower_inclusive else (lambda v, b: v > b)))
    if "lte" in spec:
        checks.append(("lte", lambda v, b: v <= b))
    if "lt" in spec:
        checks.append(("lt", lambda v, b: v < b))
    if spec.get("to") is not None:
        checks.append(("to", (lambda v, b: v <= b) if upper_inclusive else (lambda v, b: v < b)))

    try:
        return all(check(value, _coerce(spec[key], value)) for key, check in checks)
    except TypeError:
        return False


def matches(query: Optional[Mapping[str, Any]], record: Record) -> bool:
    """
    Evaluate a query clause against one record.

    Raises:
        BackendError: If the clause is not supported
    """
    if not query:
        return True
    if len(query) != 1:
        raise BackendError(f"Query clause must have exactly one key, got {sorted(query)}")

    kind, body = next(iter(query.items()))

    if kind == "match_all":
        return True

    if kind == "bool":
        return _matches_bool(body, record)

    if kind == "ids":
        return record.id in {str(v) for v in body.get("values", [])}

    if kind == "exists":
        return bool(_values(record, body["field"]))

    if kind in ("term", "terms", "range"):
        if not isinstance(body, Mapping) or len(body) != 1:
            raise BackendError(f"'{kind}' clause must name exactly one field")
        field, spec = next(iter(body.items()))
        values = _values(record, field)

        if kind == "term":
            expected = spec.get("value") if isinstance(spec, Mapping) else spec
            return any(v == _coerce(expected, v) for v in values)
        if kind == "terms":
            return any(v == _coerce(e, v) for v in values for e in spec)
        return any(_in_range(v, spec) for v in values)

    raise BackendError(f"Unsupported query clause: {kind}")


def _clauses(body: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    clauses = body.get(key) or []
    if isinstance(clauses, Mapping):
        return [clauses]
    return list(clauses)


def _matches_bool(body: Mapping[str, Any], record: Record) -> bool:
    required = _clauses(body, "must") + _clauses(body, "filter")
    if not all(matches(clause, record) for clause in required):
        return False
    if any(matches(clause, record) for clause in _clauses(body, "must_not")):
        return False
    should = _clauses(body, "should")
    if should and not required:
        return any(matches(clause, record) for clause in should)
    return True


def _sort_keys(sort: List[Any]) -> List[Tuple[str, bool]]:
    keys: List[Tuple[str, bool]] = []
    for entry in sort:
        if isinstance(entry, str):
            field, order = entry, "asc"
        elif isinstance(entry, Mapping) and len(entry) == 1:
            field, spec = next(iter(entry.items()))
            order = spec.get("order", "asc") if isinstance(spec, Mapping) else spec
        else:
            raise BackendError(f"Unsupported sort clause: {entry!r}")
        if field in ("_doc", "_score"):
            continue
        keys.append((field, str(order).lower() == "desc"))
    return keys


def sort_records(records: List[Record], sort: Sequence[Any]) -> List[Record]:
    """
    Sort records by a sort clause. Records missing a sort field go last.

    Raises:
        BackendError: On unsupported clauses or incomparable field values
    """
    ordered = list(records)
    # Stable sort applied from the least significant key
    for field, descending in reversed(_sort_keys(sort)):

        def key(record: Record, field: str = field, descending: bool = descending) -> Any:
            values = _values(record, field)
            if not values:
                return (0, 0) if descending else (1, 0)
            value = min(values) if not descending else max(values)
            return (1, value) if descending else (0, value)

        try:
            ordered.sort(key=key, reverse=descending)
        except TypeError as e:
            raise BackendError(f"Cannot sort on field '{field}': {e}") from e
    return ordered
