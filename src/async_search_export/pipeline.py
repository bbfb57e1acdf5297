"""
Export pipeline.

Drives a cursor over the matching records, flattens each record, builds
the column schema once, projects every row onto it and feeds the chosen
exporter. Memory stays bounded by one batch for the text formats; the
spreadsheet format holds the whole workbook until it is serialized.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Dict, Optional

from .backends.base import SearchBackend
from .constants import DEFAULT_BATCH_SIZE, DEFAULT_STREAM_QUEUE_SIZE, MAX_BATCH_SIZE
from .cursor import Cursor
from .exporters import BaseExporter, get_exporter_class
from .flattener import flatten_record
from .request import ExportFormat, ExportRequest
from .schema import ColumnSchema
from .serializers import SerializerRegistry, get_global_registry
from .sinks import ByteSink, FileSink, QueueSink
from .utils.stats import ExportStats

logger = logging.getLogger(__name__)


class ExportPipeline:
    """
    Runs exports of search results against one backend.

    One pipeline can serve many exports, sequentially or concurrently;
    each run owns its own cursor, schema, exporter and statistics.
    """

    def __init__(
        self,
        backend: SearchBackend,
        batch_size: int = DEFAULT_BATCH_SIZE,
        progress_callback: Optional[Callable[[ExportStats], None]] = None,
        csv_options: Optional[Dict[str, Any]] = None,
        json_options: Optional[Dict[str, Any]] = None,
        xls_options: Optional[Dict[str, Any]] = None,
        registry: Optional[SerializerRegistry] = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            backend: Search backend serving cursors
            batch_size: Records requested per cursor page
            progress_callback: Called with current stats after each batch
            csv_options: CSV-specific options
            json_options: Bulk JSON-specific options
            xls_options: Spreadsheet-specific options
            registry: Serializer registry used to classify values

        Raises:
            ValueError: If backend is missing or batch_size is out of range
        """
        if backend is None:
            raise ValueError("backend cannot be None")
        if not 1 <= batch_size <= MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}, got {batch_size}")

        self.backend = backend
        self.batch_size = batch_size
        self.progress_callback = progress_callback
        self.csv_options = csv_options or {}
        self.json_options = json_options or {}
        self.xls_options = xls_options or {}
        self.registry = registry or get_global_registry()

    def create_exporter(self, request: ExportRequest, sink: ByteSink) -> BaseExporter:
        """Build the exporter for the request's format, writing to sink."""
        exporter_class = get_exporter_class(request.format)

        if request.format is ExportFormat.CSV:
            options = dict(self.csv_options)
        elif request.format is ExportFormat.JSON:
            options = {"index": request.index, "doc_type": request.doc_type}
            options.update(self.json_options)
        else:
            options = dict(self.xls_options)

        return exporter_class(sink, options)

    async def run(self, request: ExportRequest, sink: ByteSink) -> ExportStats:
        """
        Export all records matching the request into sink.

        The cursor is released before this method returns or raises, including
        when the calling task is cancelled. Bytes already written to the sink
        stay written.

        Args:
            request: Validated export request
            sink: Destination for the encoded output

        Returns:
            Export statistics

        Raises:
            BackendError: If the backend fails while opening or paging
            asyncio.CancelledError: If the export task is cancelled
        """
        exporter = self.create_exporter(request, sink)
        stats = ExportStats()
        schema = request.explicit_schema
        header_written = False

        logger.info(
            f"Starting {request.format.value} export of '{request.index}' "
            f"({'inferred' if schema is None else 'explicit'} columns)"
        )

        try:
            async with await Cursor.open(
                self.backend,
                request.index,
                query=request.query,
                sort=request.sort,
                batch_size=self.batch_size,
                doc_type=request.doc_type,
            ) as cursor:
                async for batch in cursor:
                    stats.batches_fetched += 1
                    logger.debug(f"Processing batch {stats.batches_fetched} ({len(batch)} records)")

                    for record in batch:
                        row = flatten_record(record.source, self.registry)
                        if schema is None:
                            schema = ColumnSchema.infer(row)
                            if not schema.columns:
                                logger.warning(
                                    f"First record of '{request.index}' has no fields; "
                                    "inferred schema is empty and rows will carry no values"
                                )
                        if not header_written:
                            stats.columns = list(schema.columns)
                            await exporter.write_header(schema.columns)
                            header_written = True

                        await exporter.write_row(schema.project(row), record.id)
                        stats.rows_processed += 1

                    stats.bytes_written = exporter.bytes_written
                    if self.progress_callback:
                        self.progress_callback(stats)

                if not header_written:
                    if schema is None:
                        schema = ColumnSchema.empty()
                    stats.columns = list(schema.columns)
                    await exporter.write_header(schema.columns)

                await exporter.write_footer()

        except asyncio.CancelledError:
            logger.warning(f"Export of '{request.index}' cancelled after {stats.rows_processed} rows")
            self._finish(stats, exporter)
            raise
        except Exception as e:
            logger.error(f"Export of '{request.index}' failed: {e}")
            stats.errors.append(e)
            self._finish(stats, exporter)
            raise

        self._finish(stats, exporter)
        logger.info(f"Export of '{request.index}' completed: {stats.summary()}")
        return stats

    @staticmethod
    def _finish(stats: ExportStats, exporter: BaseExporter) -> None:
        stats.bytes_written = exporter.bytes_written
        stats.end_time = datetime.now().timestamp()

    async def export_to_file(self, request: ExportRequest, output_path: str) -> ExportStats:
        """
        Export into a file.

        Args:
            request: Validated export request
            output_path: Path where to write the exported data

        Returns:
            Export statistics
        """
        async with FileSink(output_path) as sink:
            return await self.run(request, sink)

    async def stream(
        self, request: ExportRequest, queue_size: int = DEFAULT_STREAM_QUEUE_SIZE
    ) -> AsyncIterator[bytes]:
        """
        Export as an async stream of byte chunks.

        The export runs in a separate task writing into a bounded queue, so
        a slow consumer throttles the cursor. Closing the iterator early
        (or cancelling the consuming task) cancels the export, which
        releases the cursor. Export errors are re-raised to the consumer
        after the chunks produced before the failure.

        Args:
            request: Validated export request
            queue_size: Maximum number of chunks buffered ahead of the consumer

        Yields:
            Encoded output chunks
        """
        sink = QueueSink(maxsize=queue_size)
        producer = asyncio.ensure_future(self.run(request, sink))
        getter: Optional["asyncio.Future[bytes]"] = None
        try:
            while True:
                getter = asyncio.ensure_future(sink.queue.get())
                await asyncio.wait({getter, producer}, return_when=asyncio.FIRST_COMPLETED)

                if getter.done():
                    yield getter.result()
                    continue

                getter.cancel()
                # Producer finished: drain what it left behind, then surface its outcome
                chunk = sink.get_nowait()
                while chunk is not None:
                    yield chunk
                    chunk = sink.get_nowait()
                producer.result()
                break
        finally:
            if getter is not None and not getter.done():
                getter.cancel()
            if not producer.done():
                logger.debug(f"Stream of '{request.index}' closed early, cancelling export")
                producer.cancel()
                try:
                    await producer
                except asyncio.CancelledError:
                    pass
            await sink.close()
