"""
Output sinks for exported bytes.

Exporters never touch files or sockets directly; they append encoded
chunks to a sink. A sink's write may suspend, which is how downstream
backpressure reaches the export loop.
"""

import asyncio
import io
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

import aiofiles

from .constants import DEFAULT_STREAM_QUEUE_SIZE


class ByteSink(ABC):
    """Append-only asynchronous byte destination."""

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Append a chunk of bytes. May suspend until the consumer catches up."""
        pass

    async def close(self) -> None:
        """Flush and release the sink. Safe to call more than once."""
        pass

    async def __aenter__(self) -> "ByteSink":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class MemorySink(ByteSink):
    """Collects output in memory. Intended for tests and small exports."""

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self.closed = False

    async def write(self, data: bytes) -> None:
        if self.closed:
            raise ValueError("write to closed MemorySink")
        self._buffer.write(data)

    async def close(self) -> None:
        self.closed = True

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()


class FileSink(ByteSink):
    """
    Writes output to a file using aiofiles.

    The file (and any missing parent directories) is created on first
    write, so a request rejected before any output leaves no empty file.
    """

    def __init__(self, output_path: str) -> None:
        """
        Args:
            output_path: Path where to write the exported data

        Raises:
            ValueError: If output_path is empty or None
        """
        if not output_path:
            raise ValueError("output_path cannot be empty")

        self.output_path = output_path
        self._file: Any = None

    async def _ensure_file_open(self) -> None:
        if self._file is None:
            Path(self.output_path).parent.mkdir(parents=True, exist_ok=True)
            self._file = await aiofiles.open(self.output_path, mode="wb")

    async def write(self, data: bytes) -> None:
        await self._ensure_file_open()
        await self._file.write(data)

    async def close(self) -> None:
        if self._file is not None:
            await self._file.close()
            self._file = None


class QueueSink(ByteSink):
    """
    Hands chunks to a consumer through a bounded asyncio queue.

    When the queue is full, write() suspends until the consumer takes a
    chunk, so a slow reader throttles the export instead of growing memory.
    """

    def __init__(self, maxsize: int = DEFAULT_STREAM_QUEUE_SIZE) -> None:
        self.queue: "asyncio.Queue[bytes]" = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    async def write(self, data: bytes) -> None:
        if self.closed:
            raise ValueError("write to closed QueueSink")
        if data:
            await self.queue.put(data)

    async def close(self) -> None:
        self.closed = True

    def get_nowait(self) -> Optional[bytes]:
        """Return the next buffered chunk, or None if the queue is empty."""
        try:
            return self.queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
