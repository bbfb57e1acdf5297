"""
Bulk JSON exporter implementation.

Writes newline-delimited JSON in bulk-ingest framing: every row is an
action line followed by the row itself, so the output can be replayed
against a compatible search backend.
"""

import json
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..serializers import Cell, number_text
from ..sinks import ByteSink
from .base import BaseExporter


def _json_default(obj: Any) -> Any:
    """Encode values the stdlib encoder does not know."""
    return str(obj)


class BulkJSONExporter(BaseExporter):
    """
    Bulk (action + source) JSON exporter.

    Produces two lines per row::

        {"index":{"_index":"dataset","_id":"1"}}
        {"aaa":"test 1","eee.ggg":1}

    Keys are the flat dotted column names in schema order. No header is
    written; the schema is implicit in each record's keys.
    """

    content_type = "application/x-ndjson"
    file_extension = "json"

    def __init__(self, sink: ByteSink, options: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize bulk JSON exporter.

        Args:
            sink: Destination for the encoded output
            options: JSON-specific options:
                - index: Target index named in action lines (required)
                - doc_type: Document type named in action lines (default: None)
                - action: Bulk action name (default: 'index')
                - include_id: Emit the record id in action lines (default: True)

        Raises:
            ValueError: If no target index is configured
        """
        super().__init__(sink, options)

        self.index = self.options.get("index")
        if not self.index:
            raise ValueError("Bulk JSON export requires an 'index' option")
        self.doc_type = self.options.get("doc_type")
        self.action = self.options.get("action", "index")
        self.include_id = self.options.get("include_id", True)

    def _dumps(self, obj: Any) -> str:
        return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=_json_default)

    def _encode(self, value: Any) -> str:
        """
        Encode one value as JSON text.

        Finite decimals are written as JSON numbers with all their digits;
        the stdlib encoder would have to go through float and round them.
        """
        if isinstance(value, Decimal):
            if value.is_finite():
                return number_text(value)
            return self._dumps(str(value))
        if isinstance(value, dict):
            members = (f"{self._dumps(str(k))}:{self._encode(v)}" for k, v in value.items())
            return "{" + ",".join(members) + "}"
        if isinstance(value, (list, tuple)):
            return "[" + ",".join(self._encode(item) for item in value) + "]"
        return self._dumps(value)

    def _action_line(self, record_id: Optional[str]) -> str:
        meta: Dict[str, Any] = {"_index": self.index}
        if self.doc_type:
            meta["_type"] = self.doc_type
        if self.include_id and record_id is not None:
            meta["_id"] = record_id
        return self._dumps({self.action: meta})

    async def write_header(self, columns: Sequence[str]) -> None:
        """
        Remember the columns.

        Note:
            Bulk JSON has no header line
        """
        self.columns = list(columns)

    async def write_row(self, cells: Sequence[Cell], record_id: Optional[str] = None) -> None:
        """Write the action line and the flat source line for one row."""
        source = {column: cell.value for column, cell in zip(self.columns, cells)}
        await self._emit(self._action_line(record_id) + "\n" + self._encode(source) + "\n")
        self.rows_written += 1

    async def write_footer(self) -> None:
        """
        Write JSON footer.

        Note:
            Each line pair is self-contained, nothing to close
        """
        pass
