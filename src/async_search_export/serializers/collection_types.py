"""
Serializers for array values.

Arrays are not expanded into columns. An array-valued field becomes a single
STRING cell: the bulk JSON exporter re-emits the array itself, the CSV and
spreadsheet exporters write its compact JSON text.
"""

import json
from typing import TYPE_CHECKING, Any, Optional

from .base import Cell, TypeSerializer

if TYPE_CHECKING:
    from .registry import SerializerRegistry


class ListSerializer(TypeSerializer):
    """
    Serializer for list, tuple, set and frozenset values.

    Elements are classified through the registry that dispatched the array,
    so custom serializers apply inside arrays too.
    """

    def serialize(self, value: Any, registry: Optional["SerializerRegistry"] = None) -> Cell:
        if not self.can_handle(value):
            raise ValueError(f"ListSerializer expects a sequence or set, got {type(value)}")

        if registry is None:
            # Import here to avoid circular import
            from .registry import get_global_registry

            registry = get_global_registry()

        items = self._to_json_ready(value, registry)
        text = json.dumps(items, ensure_ascii=False, separators=(",", ":"), default=str)
        return Cell.string(items, text)

    def _to_json_ready(self, value: Any, registry: "SerializerRegistry") -> Any:
        if isinstance(value, dict):
            return {str(k): self._to_json_ready(v, registry) for k, v in value.items()}
        if isinstance(value, (set, frozenset)):
            # Sets have no order of their own
            return [self._to_json_ready(item, registry) for item in sorted(value, key=str)]
        if isinstance(value, (list, tuple)):
            return [self._to_json_ready(item, registry) for item in value]
        return registry.serialize(value).value

    def can_handle(self, value: Any) -> bool:
        return isinstance(value, (list, tuple, set, frozenset))
