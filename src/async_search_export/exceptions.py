"""
Exception classes for async-search-export.
"""


class ExportError(Exception):
    """Base exception for all export errors."""

    pass


class BadRequestError(ExportError):
    """
    Raised when an export request cannot be executed as given.

    Covers unknown format tags, malformed field lists and malformed
    query bodies. Always raised before a cursor is opened.
    """

    pass


class BackendError(ExportError):
    """Raised when the search backend fails to open, page or execute a query."""

    pass


class CursorClosedError(ExportError):
    """Raised when a cursor is used after it has been released."""

    pass
