"""
Search backends serving paginated cursors to the export pipeline.
"""

from .base import Batch, Record, SearchBackend
from .elasticsearch import ElasticsearchBackend, ScrollHandle
from .memory import InMemoryBackend

__all__ = [
    "Batch",
    "Record",
    "SearchBackend",
    "ElasticsearchBackend",
    "ScrollHandle",
    "InMemoryBackend",
]
