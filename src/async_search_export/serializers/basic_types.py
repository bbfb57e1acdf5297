"""
Serializers for scalar values found in search hits.

Search backends hand back JSON-decoded sources, so most values are str,
int, float, bool or None. Client-side backends may also produce dates,
decimals, UUIDs and bytes; those are covered here too.
"""

import base64
import math
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from .base import Cell, TypeSerializer

if TYPE_CHECKING:
    from .registry import SerializerRegistry


class NullSerializer(TypeSerializer):
    """Serializer for NULL/None values."""

    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        if value is not None:
            raise ValueError(f"NullSerializer can only handle None, got {type(value)}")
        return Cell.null()

    def can_handle(self, value: Any) -> bool:
        """Check if value is None."""
        return value is None


class BooleanSerializer(TypeSerializer):
    """
    Serializer for boolean values.

    Booleans are not numbers in the exported formats: CSV and the
    spreadsheet get "true"/"false", the bulk JSON keeps a real boolean.
    """

    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        return Cell.string(bool(value), "true" if value else "false")

    def can_handle(self, value: Any) -> bool:
        return isinstance(value, bool)


class IntegerSerializer(TypeSerializer):
    """Serializer for integers."""

    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        return Cell.number(int(value))

    def can_handle(self, value: Any) -> bool:
        # bool is an int subclass
        return isinstance(value, int) and not isinstance(value, bool)


class FloatSerializer(TypeSerializer):
    """Serializer for floating point values."""

    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        # NaN and infinities have no portable numeric form
        if math.isnan(value):
            return Cell.string("NaN")
        if math.isinf(value):
            return Cell.string("Infinity" if value > 0 else "-Infinity")
        return Cell.number(float(value))

    def can_handle(self, value: Any) -> bool:
        return isinstance(value, float)


class DecimalSerializer(TypeSerializer):
    """Serializer for Decimal values."""

    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        if not value.is_finite():
            return Cell.string(str(value))
        return Cell.number(value)

    def can_handle(self, value: Any) -> bool:
        return isinstance(value, Decimal)


class StringSerializer(TypeSerializer):
    """Serializer for strings, including date-like strings from the backend."""

    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        return Cell.string(str(value))

    def can_handle(self, value: Any) -> bool:
        return isinstance(value, str)


class TemporalSerializer(TypeSerializer):
    """Serializer for datetime, date and time values (ISO-8601 text)."""

    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        return Cell.string(value.isoformat())

    def can_handle(self, value: Any) -> bool:
        return isinstance(value, (datetime, date, time))


class UUIDSerializer(TypeSerializer):
    """Serializer for UUID values."""

    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        return Cell.string(str(value))

    def can_handle(self, value: Any) -> bool:
        return isinstance(value, UUID)


class BinarySerializer(TypeSerializer):
    """Serializer for binary values, exported as base64 text."""

    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        return Cell.string(base64.b64encode(bytes(value)).decode("ascii"))

    def can_handle(self, value: Any) -> bool:
        return isinstance(value, (bytes, bytearray))
