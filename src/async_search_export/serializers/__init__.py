"""
Value classification for exported rows.

Turns raw values from search hits into tagged cells (string, number or
null) that every exporter encodes the same way.
"""

from .base import NULL_CELL, Cell, CellKind, TypeSerializer, number_text
from .registry import (
    SerializerRegistry,
    get_default_registry,
    get_global_registry,
    reset_global_registry,
)

__all__ = [
    "Cell",
    "CellKind",
    "NULL_CELL",
    "TypeSerializer",
    "number_text",
    "SerializerRegistry",
    "get_default_registry",
    "get_global_registry",
    "reset_global_registry",
]
