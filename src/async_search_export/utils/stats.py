"""
Statistics tracking for export runs.

Provides progress and throughput metrics for a single export, including
error tracking for failed or cancelled runs.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ExportStats:
    """
    Statistics tracker for one export.

    Tracks rows and batches read from the cursor, bytes handed to the sink,
    and any error that aborted the export.
    """

    rows_processed: int = 0
    batches_fetched: int = 0
    bytes_written: int = 0
    columns: List[str] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    errors: List[BaseException] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        """
        Calculate export duration in seconds.

        Uses end_time if the export has finished, otherwise current time.
        """
        if self.end_time:
            return self.end_time - self.start_time
        return time.time() - self.start_time

    @property
    def rows_per_second(self) -> float:
        """
        Calculate export throughput.

        Returns 0 if duration is zero to avoid division errors.
        """
        duration = self.duration_seconds
        if duration > 0:
            return self.rows_processed / duration
        return 0

    @property
    def is_complete(self) -> bool:
        """Check if the export finished without errors."""
        return self.end_time is not None and not self.errors

    @property
    def error_count(self) -> int:
        """Get total number of errors encountered."""
        return len(self.errors)

    def summary(self) -> str:
        """
        Generate human-readable summary of statistics.

        Returns:
            Formatted string with key metrics
        """
        parts = [
            f"Exported {self.rows_processed} rows",
            f"Batches: {self.batches_fetched}",
            f"Columns: {len(self.columns)}",
            f"Bytes: {self.bytes_written}",
            f"Rate: {self.rows_per_second:.1f} rows/sec",
            f"Duration: {self.duration_seconds:.1f} seconds",
        ]

        if self.error_count > 0:
            parts.append(f"Errors: {self.error_count}")

        return " | ".join(parts)

    def as_dict(self) -> Dict[str, Any]:
        """
        Export statistics as dictionary.

        Useful for JSON serialization and logging.

        Returns:
            Dictionary containing all statistics
        """
        return {
            "rows_processed": self.rows_processed,
            "batches_fetched": self.batches_fetched,
            "bytes_written": self.bytes_written,
            "columns": list(self.columns),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_seconds": self.duration_seconds,
            "rows_per_second": self.rows_per_second,
            "error_count": self.error_count,
            "is_complete": self.is_complete,
        }
