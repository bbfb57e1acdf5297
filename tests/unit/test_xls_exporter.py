"""
Test spreadsheet exporter functionality.

What this tests:
---------------
1. Header row and data rows in a single sheet
2. Numeric cells vs text cells
3. Buffering until write_footer
4. Sheet options and illegal character cleanup

Why this matters:
----------------
- Spreadsheet users sort and sum numeric columns
- The workbook container is only valid once complete
"""

import io

import pytest
from openpyxl import load_workbook

from async_search_export.exporters.xls import SpreadsheetExporter
from async_search_export.serializers import NULL_CELL, Cell
from async_search_export.sinks import MemorySink


def read_sheet(sink: MemorySink):
    workbook = load_workbook(io.BytesIO(sink.getvalue()))
    return workbook.worksheets[0]


class TestSpreadsheetExporter:
    """Test workbook generation."""

    def test_defaults(self):
        exporter = SpreadsheetExporter(MemorySink())

        assert exporter.sheet_name == "Sheet1"
        assert exporter.bold_header is True
        assert exporter.file_extension == "xlsx"

    @pytest.mark.asyncio
    async def test_nothing_written_before_footer(self):
        """
        Test that rows are buffered until the workbook is finished.

        What this tests:
        ---------------
        1. write_header and write_row produce no sink output
        2. write_footer emits the whole workbook at once

        Why this matters:
        ----------------
        - A partial workbook is not a readable file
        """
        sink = MemorySink()
        exporter = SpreadsheetExporter(sink)

        await exporter.write_header(["a"])
        await exporter.write_row([Cell.number(1)])
        assert sink.getvalue() == b""

        await exporter.write_footer()
        assert sink.getvalue()[:2] == b"PK"
        assert exporter.bytes_written == len(sink.getvalue())

    @pytest.mark.asyncio
    async def test_header_and_typed_cells(self):
        sink = MemorySink()
        exporter = SpreadsheetExporter(sink)
        await exporter.write_header(["eee.ggg", "aaa", "flag", "missing"])

        await exporter.write_row(
            [Cell.number(100), Cell.string("test 100"), Cell.string(True, "true"), NULL_CELL]
        )
        await exporter.write_footer()

        sheet = read_sheet(sink)
        assert sheet.max_row == 2
        assert [c.value for c in sheet[1]] == ["eee.ggg", "aaa", "flag", "missing"]
        assert sheet["A2"].value == 100
        assert sheet["A2"].data_type == "n"
        assert sheet["B2"].value == "test 100"
        assert sheet["B2"].data_type == "s"
        assert sheet["C2"].value == "true"
        assert sheet["D2"].value is None
        assert sheet["A1"].font.bold is True

    @pytest.mark.asyncio
    async def test_sheet_name_option(self):
        sink = MemorySink()
        exporter = SpreadsheetExporter(sink, {"sheet_name": "dataset", "bold_header": False})
        await exporter.write_header(["a"])
        await exporter.write_footer()

        sheet = read_sheet(sink)
        assert sheet.title == "dataset"
        assert not sheet["A1"].font.bold

    @pytest.mark.asyncio
    async def test_control_characters_removed(self):
        sink = MemorySink()
        exporter = SpreadsheetExporter(sink)
        await exporter.write_header(["a"])

        await exporter.write_row([Cell.string("bad\x01value")])
        await exporter.write_footer()

        assert read_sheet(sink)["A2"].value == "badvalue"

    @pytest.mark.asyncio
    async def test_empty_schema_gives_empty_sheet(self):
        sink = MemorySink()
        exporter = SpreadsheetExporter(sink)

        await exporter.write_header([])
        await exporter.write_footer()

        sheet = read_sheet(sink)
        assert sheet["A1"].value is None
