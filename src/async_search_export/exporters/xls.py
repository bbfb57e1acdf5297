"""
Spreadsheet exporter implementation.

Builds a single-sheet workbook with openpyxl. Unlike the text formats the
workbook container can only be serialized once it is complete, so every
row is held in memory until write_footer. Very large result sets should
be exported as CSV instead.
"""

import io
from typing import Any, Dict, Optional, Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font

from ..constants import DEFAULT_SHEET_NAME
from ..serializers import Cell
from ..sinks import ByteSink
from .base import BaseExporter


class SpreadsheetExporter(BaseExporter):
    """
    Workbook exporter.

    The first sheet row holds the column names; every following row holds
    one record. Number cells are written as numeric cells, everything else
    as text. Missing values leave the cell blank.
    """

    content_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    file_extension = "xlsx"

    def __init__(self, sink: ByteSink, options: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize spreadsheet exporter.

        Args:
            sink: Destination for the serialized workbook
            options: Spreadsheet-specific options:
                - sheet_name: Worksheet title (default: 'Sheet1')
                - bold_header: Render the header row in bold (default: True)
        """
        super().__init__(sink, options)

        self.sheet_name = self.options.get("sheet_name", DEFAULT_SHEET_NAME)
        self.bold_header = self.options.get("bold_header", True)

        self._workbook = Workbook()
        self._sheet = self._workbook.active
        self._sheet.title = self.sheet_name

    @staticmethod
    def _clean_text(text: str) -> str:
        # Control characters are not allowed in the workbook XML
        return ILLEGAL_CHARACTERS_RE.sub("", text)

    def _convert_cell(self, cell: Cell) -> Any:
        if cell.is_number:
            return cell.value
        if cell.is_null:
            return None
        return self._clean_text(cell.text)

    async def write_header(self, columns: Sequence[str]) -> None:
        """Write column names to the first sheet row."""
        self.columns = list(columns)
        if not self.columns:
            return

        self._sheet.append([self._clean_text(name) for name in self.columns])
        if self.bold_header:
            for cell in self._sheet[1]:
                cell.font = Font(bold=True)

    async def write_row(self, cells: Sequence[Cell], record_id: Optional[str] = None) -> None:
        """Append one row to the in-memory sheet."""
        self._sheet.append([self._convert_cell(cell) for cell in cells])
        self.rows_written += 1

    async def write_footer(self) -> None:
        """Serialize the finished workbook and send it to the sink."""
        output = io.BytesIO()
        self._workbook.save(output)
        await self._emit(output.getvalue())
