"""
Base exporter abstract class.

Defines the interface shared by all output formats. The export pipeline
drives every exporter the same way: write_header once, write_row per
record, write_footer once. Subclasses implement format-specific encoding.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from ..serializers import Cell
from ..sinks import ByteSink


class BaseExporter(ABC):
    """
    Abstract base class for format exporters.

    Provides sink handling and byte accounting common to every format.
    Subclasses must implement the three write methods.
    """

    content_type = "application/octet-stream"
    file_extension = "bin"

    def __init__(self, sink: ByteSink, options: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize exporter with output configuration.

        Args:
            sink: Destination for the encoded output
            options: Format-specific options

        Raises:
            ValueError: If sink is None
        """
        if sink is None:
            raise ValueError("sink cannot be None")

        self.sink = sink
        self.options = options or {}
        self.encoding = self.options.get("encoding", "utf-8")
        self.columns: List[str] = []
        self.bytes_written = 0
        self.rows_written = 0

    async def _emit(self, data: Any) -> None:
        """Encode text if needed and append it to the sink."""
        if isinstance(data, str):
            data = data.encode(self.encoding)
        if not data:
            return
        await self.sink.write(data)
        self.bytes_written += len(data)

    @abstractmethod
    async def write_header(self, columns: Sequence[str]) -> None:
        """
        Write file header with column information.

        Args:
            columns: Column names in output order

        Note:
            Called exactly once, before any row
        """
        pass

    @abstractmethod
    async def write_row(self, cells: Sequence[Cell], record_id: Optional[str] = None) -> None:
        """
        Write a single row of data.

        Args:
            cells: One cell per column, in header order
            record_id: Identifier of the source record
        """
        pass

    @abstractmethod
    async def write_footer(self) -> None:
        """
        Write file footer and finalize output.

        Note:
            Formats that need the complete structure serialize here
        """
        pass
