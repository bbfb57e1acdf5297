"""Utility helpers for export runs."""

from .stats import ExportStats

__all__ = ["ExportStats"]
