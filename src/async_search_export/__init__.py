"""async-search-export - Streaming export of search results to CSV, bulk JSON and spreadsheets."""

from importlib.metadata import PackageNotFoundError, version

from .backends import ElasticsearchBackend, InMemoryBackend, Record, SearchBackend
from .cursor import Cursor
from .exceptions import BackendError, BadRequestError, CursorClosedError, ExportError
from .exporters import BaseExporter, BulkJSONExporter, CSVExporter, SpreadsheetExporter
from .flattener import flatten_record
from .pipeline import ExportPipeline
from .request import ExportFormat, ExportRequest
from .schema import ColumnSchema
from .serializers import Cell, CellKind
from .sinks import ByteSink, FileSink, MemorySink, QueueSink
from .utils.stats import ExportStats

try:
    __version__ = version("async-search-export")
except PackageNotFoundError:
    # Package is not installed
    __version__ = "0.0.0+unknown"


__all__ = [
    "ExportPipeline",
    "ExportRequest",
    "ExportFormat",
    "ColumnSchema",
    "Cell",
    "CellKind",
    "Cursor",
    "flatten_record",
    "BaseExporter",
    "CSVExporter",
    "BulkJSONExporter",
    "SpreadsheetExporter",
    "SearchBackend",
    "Record",
    "InMemoryBackend",
    "ElasticsearchBackend",
    "ByteSink",
    "MemorySink",
    "FileSink",
    "QueueSink",
    "ExportStats",
    "ExportError",
    "BadRequestError",
    "BackendError",
    "CursorClosedError",
    "__version__",
]
