"""
CSV exporter implementation.

Every field is quoted except numbers, which are written bare in positional
decimal notation (never scientific). Quotes inside values are doubled.
"""

import csv
import io
from typing import Any, Dict, List, Optional, Sequence

from ..serializers import Cell
from ..sinks import ByteSink
from .base import BaseExporter


class _BareNumber:
    """
    Pre-rendered number text.

    Defines __float__ so csv.writer treats it as numeric under
    QUOTE_NONNUMERIC and writes str() of it unquoted.
    """

    __slots__ = ("text",)

    def __init__(self, text: str) -> None:
        self.text = text

    def __float__(self) -> float:
        return float(self.text)

    def __str__(self) -> str:
        return self.text


class CSVExporter(BaseExporter):
    """
    CSV format exporter.

    Rows are encoded one at a time through the stdlib csv writer and flushed
    to the sink immediately; at most one row is buffered.
    """

    content_type = "text/csv"
    file_extension = "csv"

    def __init__(self, sink: ByteSink, options: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize CSV exporter with formatting options.

        Args:
            sink: Destination for the encoded output
            options: CSV-specific options:
                - delimiter: Field delimiter (default: ',')
                - quote_char: Quote character (default: '"')
                - include_header: Write header row (default: True)
                - null_value: Text for missing values (default: '')
                - encoding: Output encoding (default: 'utf-8')
        """
        super().__init__(sink, options)

        self.delimiter = self.options.get("delimiter", ",")
        self.quote_char = self.options.get("quote_char", '"')
        self.include_header = self.options.get("include_header", True)
        self.null_value = self.options.get("null_value", "")

        self._buffer = io.StringIO()
        # QUOTE_NONNUMERIC leaves numeric objects bare and quotes everything else
        self._writer = csv.writer(
            self._buffer,
            delimiter=self.delimiter,
            quotechar=self.quote_char,
            doublequote=True,
            quoting=csv.QUOTE_NONNUMERIC,
            lineterminator="\n",
        )

    def _convert_cell(self, cell: Cell) -> Any:
        if cell.is_number:
            return _BareNumber(cell.text)
        if cell.is_null:
            return self.null_value
        return cell.text

    async def _flush_line(self, values: List[Any]) -> None:
        self._writer.writerow(values)
        content = self._buffer.getvalue()
        self._buffer.seek(0)
        self._buffer.truncate(0)
        await self._emit(content)

    async def write_header(self, columns: Sequence[str]) -> None:
        """
        Write CSV header with column names.

        Note:
            Skipped when include_header is False or there are no columns
        """
        self.columns = list(columns)
        if self.include_header and self.columns:
            await self._flush_line(self.columns)

    async def write_row(self, cells: Sequence[Cell], record_id: Optional[str] = None) -> None:
        """Write a single row to CSV."""
        if not cells:
            return
        await self._flush_line([self._convert_cell(cell) for cell in cells])
        self.rows_written += 1

    async def write_footer(self) -> None:
        """
        Write CSV footer.

        Note:
            CSV files don't have footers, so this does nothing
        """
        pass  # CSV has no footer
