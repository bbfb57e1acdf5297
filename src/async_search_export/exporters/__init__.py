"""
Exporters for the supported output formats.

Provides the CSV, bulk JSON and spreadsheet exporters and the lookup from
format tag to exporter class.
"""

from typing import Dict, Type

from ..request import ExportFormat
from .base import BaseExporter
from .csv import CSVExporter
from .json import BulkJSONExporter
from .xls import SpreadsheetExporter

EXPORTERS: Dict[ExportFormat, Type[BaseExporter]] = {
    ExportFormat.CSV: CSVExporter,
    ExportFormat.JSON: BulkJSONExporter,
    ExportFormat.XLS: SpreadsheetExporter,
}


def get_exporter_class(export_format: ExportFormat) -> Type[BaseExporter]:
    """
    Look up the exporter class for a format.

    Raises:
        ValueError: If format is not supported
    """
    try:
        return EXPORTERS[ExportFormat.parse(export_format)]
    except KeyError:
        raise ValueError(f"Unsupported export format: {export_format}") from None


__all__ = [
    "BaseExporter",
    "CSVExporter",
    "BulkJSONExporter",
    "SpreadsheetExporter",
    "EXPORTERS",
    "get_exporter_class",
]
