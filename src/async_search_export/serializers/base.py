"""
Base serializer interface and the tagged cell type.

Every scalar read from a search hit is classified once into a Cell so that
exporters branch on the cell kind rather than inspecting Python types.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .registry import SerializerRegistry


def number_text(value: Any) -> str:
    """
    Render a number in positional decimal notation, never scientific.

    Integers render as-is. Floats render from their shortest round-trip
    form and always keep a fractional part (``2.0``, ``10000000000000000.0``,
    ``0.0000001``). Decimals keep their own digits and scale (``2.50``).
    """
    if isinstance(value, float):
        text = format(Decimal(repr(value)), "f")
        return text if "." in text else f"{text}.0"
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


class CellKind(str, Enum):
    """Kind tag carried by every exported value."""

    STRING = "string"
    NUMBER = "number"
    NULL = "null"


@dataclass(frozen=True)
class Cell:
    """
    A single exported value.

    Attributes:
        kind: How exporters should encode the value
        value: JSON-ready Python value (str, int, float, Decimal, bool, list or None)
        rendered: Optional canonical text when it differs from the default
    """

    kind: CellKind
    value: Any = None
    rendered: Any = None

    @property
    def text(self) -> str:
        """Canonical text form used by the delimited and spreadsheet formats."""
        if self.kind is CellKind.NULL:
            return ""
        if self.rendered is not None:
            return str(self.rendered)
        if self.kind is CellKind.NUMBER:
            return number_text(self.value)
        return str(self.value)

    @property
    def is_number(self) -> bool:
        return self.kind is CellKind.NUMBER

    @property
    def is_null(self) -> bool:
        return self.kind is CellKind.NULL

    @classmethod
    def null(cls) -> "Cell":
        return NULL_CELL

    @classmethod
    def string(cls, value: Any, rendered: Any = None) -> "Cell":
        return cls(CellKind.STRING, value, rendered)

    @classmethod
    def number(cls, value: Any) -> "Cell":
        return cls(CellKind.NUMBER, value)


NULL_CELL = Cell(CellKind.NULL)


class TypeSerializer(ABC):
    """
    Abstract base class for type serializers.

    Each serializer knows how to recognise one family of Python values and
    turn it into a Cell.
    """

    @abstractmethod
    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        """
        Convert a value into a tagged cell.

        Args:
            value: The value to serialize (can be None)
            registry: Registry dispatching nested values (container serializers only)

        Returns:
            Cell describing the value
        """
        pass

    @abstractmethod
    def can_handle(self, value: Any) -> bool:
        """
        Check if this serializer can handle the given value.

        Args:
            value: The value to check

        Returns:
            True if this serializer can handle the value type
        """
        pass

    def __repr__(self) -> str:
        """String representation of the serializer."""
        return f"{self.__class__.__name__}()"
