"""
NYC Shooting Report - Exceptions

Errors raised by the report pipeline. Record-level data-quality problems are
handled by dropping the record; these exceptions cover the cases that stop a
stage outright.
"""

from __future__ import annotations


class ReportError(Exception):
    """Base error for the shooting report."""


class SchemaError(ReportError):
    """Raised when a table does not have the expected shape."""

    def __init__(self, message: str, missing_columns: list[str] | None = None):
        super().__init__(message)
        self.missing_columns = missing_columns or []


class DataQualityError(ReportError):
    """Raised when a table violates a data-quality rule that filtering cannot fix."""
