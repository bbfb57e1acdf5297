"""
Export request parsing and validation.

An ExportRequest is built once from the incoming call parameters and is
read-only for the life of the export. All validation happens here, before
any cursor is opened.
"""

import json
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .exceptions import BadRequestError
from .schema import ColumnSchema, parse_field_list


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    JSON = "json"
    XLS = "xls"

    @classmethod
    def parse(cls, value: Union[str, "ExportFormat", None]) -> "ExportFormat":
        """
        Resolve a format tag, defaulting to CSV when absent.

        Raises:
            BadRequestError: If the tag is not a supported format
        """
        if value is None or value == "":
            return cls.CSV
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            supported = ", ".join(fmt.value for fmt in cls)
            raise BadRequestError(
                f"Unsupported format '{value}'. Supported formats: {supported}"
            ) from None


@dataclass(frozen=True)
class ExportRequest:
    """
    Immutable description of one export.

    Attributes:
        index: Target index (or comma-separated indices) to read from
        format: Output format
        fields: Explicit column list, or None to infer from the first record
        query: Backend query clause (read-only view), or None for match-all
        sort: Backend sort clauses as a tuple, forwarded in order
        doc_type: Optional document type, echoed in bulk action lines
    """

    index: str
    format: ExportFormat = ExportFormat.CSV
    fields: Optional[Tuple[str, ...]] = None
    query: Optional[Mapping[str, Any]] = None
    sort: Optional[Sequence[Any]] = None
    doc_type: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.index or not str(self.index).strip():
            raise BadRequestError("Index must not be empty")
        if not isinstance(self.format, ExportFormat):
            object.__setattr__(self, "format", ExportFormat.parse(self.format))
        if self.fields is not None:
            if not self.fields:
                raise BadRequestError("Field list must not be empty")
            object.__setattr__(self, "fields", tuple(self.fields))
        if self.query is not None:
            if not isinstance(self.query, Mapping):
                raise BadRequestError("Query must be an object")
            object.__setattr__(self, "query", freeze_clause(self.query))
        if self.sort is not None:
            object.__setattr__(self, "sort", freeze_clause(_normalize_sort(self.sort)))

    @property
    def explicit_schema(self) -> Optional[ColumnSchema]:
        """Schema declared by the caller, or None in inferred mode."""
        if self.fields is None:
            return None
        return ColumnSchema.explicit_from(self.fields)

    @classmethod
    def from_params(
        cls,
        index: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Union[str, bytes, Mapping[str, Any], None] = None,
        doc_type: Optional[str] = None,
    ) -> "ExportRequest":
        """
        Build a request from call parameters and an optional body.

        Args:
            index: Target index
            params: Query-string style parameters: ``format`` (csv, json or
                xls; default csv) and ``fl`` (comma-separated field list)
            body: JSON text or mapping with optional ``query`` and ``sort``
            doc_type: Optional document type

        Raises:
            BadRequestError: On unknown format, malformed field list or body
        """
        params = params or {}
        export_format = ExportFormat.parse(params.get("format"))

        fields = None
        if params.get("fl") is not None:
            fields = parse_field_list(params["fl"])

        query, sort = _parse_body(body)

        return cls(
            index=index,
            format=export_format,
            fields=fields,
            query=query,
            sort=sort,
            doc_type=doc_type,
        )


def _parse_body(
    body: Union[str, bytes, Mapping[str, Any], None],
) -> Tuple[Optional[Dict[str, Any]], Optional[List[Any]]]:
    """Extract query and sort clauses from a request body."""
    if body is None:
        return None, None

    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BadRequestError("Request body must be UTF-8 encoded JSON") from e

    if isinstance(body, str):
        if not body.strip():
            return None, None
        try:
            body = json.loads(body)
        except json.JSONDecodeError as e:
            raise BadRequestError(f"Malformed query body: {e}") from e

    if not isinstance(body, Mapping):
        raise BadRequestError("Query body must be a JSON object")

    query = body.get("query")
    if query is not None and not isinstance(query, Mapping):
        raise BadRequestError("'query' must be an object")

    sort = body.get("sort")
    if sort is not None:
        sort = _normalize_sort(sort)

    return (dict(query) if query is not None else None), sort


def _normalize_sort(sort: Any) -> List[Any]:
    """Wrap a single sort clause in a list."""
    if isinstance(sort, (str, Mapping)):
        return [sort]
    if not isinstance(sort, (list, tuple)):
        raise BadRequestError("'sort' must be a string, object or list")
    return list(sort)


def freeze_clause(value: Any) -> Any:
    """
    Return a read-only copy of a JSON-style clause.

    Mappings become MappingProxyType views over a private copy and lists
    become tuples, recursively. Scalars are returned unchanged.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze_clause(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_clause(item) for item in value)
    return value


def thaw_clause(value: Any) -> Any:
    """Return a plain dict/list copy of a clause, for clients that need JSON types."""
    if isinstance(value, Mapping):
        return {key: thaw_clause(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw_clause(item) for item in value]
    return value
