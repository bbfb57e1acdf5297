"""
Flattening of nested search hits into dotted-path rows.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from .constants import FIELD_SEPARATOR
from .serializers import Cell, SerializerRegistry, get_global_registry

logger = logging.getLogger(__name__)

FlatRow = Dict[str, Cell]


def flatten_record(
    source: Mapping[str, Any],
    registry: Optional[SerializerRegistry] = None,
    separator: str = FIELD_SEPARATOR,
) -> FlatRow:
    """
    Flatten one record source into an ordered dotted-path row.

    Nested mappings are walked depth-first in their own key order, so
    ``{"aaa": 1, "eee": {"fff": 2}, "bbb": 3}`` yields the keys
    ``aaa, eee.fff, bbb``. Scalar values are classified into cells through
    the serializer registry; arrays become a single string cell.

    Args:
        source: The record's field mapping
        registry: Serializer registry (default: global registry)
        separator: String joining parent and child field names

    Returns:
        Ordered mapping of dotted column path to cell
    """
    registry = registry or get_global_registry()
    row: FlatRow = {}
    _flatten_into(row, source, "", registry, separator)
    return row


def _flatten_into(
    row: FlatRow,
    source: Mapping[str, Any],
    prefix: str,
    registry: SerializerRegistry,
    separator: str,
) -> None:
    for key, value in source.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping):
            _flatten_into(row, value, f"{path}{separator}", registry, separator)
        elif path in row:
            # e.g. {"a.b": 1, "a": {"b": 2}}: first occurrence wins
            logger.warning(f"Duplicate field path '{path}' in record, keeping first value")
        else:
            row[path] = registry.serialize(value)
