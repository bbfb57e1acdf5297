"""
Constants used throughout async-search-export.

This module defines default values and limits used across the library
to avoid hardcoding magic numbers in multiple places.
"""

# Default number of records requested per cursor page
DEFAULT_BATCH_SIZE = 1000

# Upper bound for batch_size (larger pages trade memory for round trips)
MAX_BATCH_SIZE = 10000

# How long the backend keeps an idle scroll context alive between pages
DEFAULT_SCROLL_KEEP_ALIVE = "1m"

# Number of chunks buffered between the export task and a stream() consumer
DEFAULT_STREAM_QUEUE_SIZE = 16

# Worksheet title used by the spreadsheet exporter
DEFAULT_SHEET_NAME = "Sheet1"

# Separator joining nested field names into a column path
FIELD_SEPARATOR = "."
