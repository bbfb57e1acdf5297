"""
Serializer registry for managing type serializers.

Provides a central registry for looking up appropriate serializers
based on value types and handles serialization dispatch.
"""

from typing import Any, Dict, List, Optional, Type

from .base import Cell, TypeSerializer
from .basic_types import (
    BinarySerializer,
    BooleanSerializer,
    DecimalSerializer,
    FloatSerializer,
    IntegerSerializer,
    NullSerializer,
    StringSerializer,
    TemporalSerializer,
    UUIDSerializer,
)
from .collection_types import ListSerializer


class SerializerRegistry:
    """
    Registry for type serializers.

    Manages serializer lookup and provides a central point for turning
    raw values into tagged cells.
    """

    def __init__(self) -> None:
        """Initialize the registry with empty serializer list."""
        self._serializers: List[TypeSerializer] = []
        self._type_cache: Dict[Type, TypeSerializer] = {}

    def register(self, serializer: TypeSerializer) -> None:
        """
        Register a type serializer.

        Args:
            serializer: The serializer to register
        """
        self._serializers.append(serializer)
        # Clear cache when registry changes
        self._type_cache.clear()

    def find_serializer(self, value: Any) -> Optional[TypeSerializer]:
        """
        Find appropriate serializer for a value.

        Args:
            value: The value to find a serializer for

        Returns:
            Appropriate serializer or None if not found
        """
        value_type = type(value)
        if value_type in self._type_cache:
            return self._type_cache[value_type]

        for serializer in self._serializers:
            if serializer.can_handle(value):
                self._type_cache[value_type] = serializer
                return serializer

        return None

    def serialize(self, value: Any) -> Cell:
        """
        Serialize a value using the appropriate serializer.

        Values no serializer recognises are exported as their string form.
        """
        serializer = self.find_serializer(value)
        if serializer is None:
            return Cell.string(str(value))
        return serializer.serialize(value, self)


def get_default_registry() -> SerializerRegistry:
    """
    Get a registry with all default serializers registered.

    Returns:
        Registry with all built-in serializers
    """
    registry = SerializerRegistry()

    # Null first (most specific)
    registry.register(NullSerializer())

    # Boolean must precede Integer (bool is an int subclass)
    registry.register(BooleanSerializer())
    registry.register(IntegerSerializer())
    registry.register(FloatSerializer())
    registry.register(DecimalSerializer())
    registry.register(StringSerializer())
    registry.register(BinarySerializer())
    registry.register(UUIDSerializer())
    registry.register(TemporalSerializer())

    registry.register(ListSerializer())

    return registry


# Global default registry
_default_registry = None


def get_global_registry() -> SerializerRegistry:
    """
    Get the global default registry (singleton).

    Returns:
        The global registry instance
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = get_default_registry()
    return _default_registry


def reset_global_registry() -> None:
    """Reset the global registry (mainly for testing)."""
    global _default_registry
    _default_registry = None
