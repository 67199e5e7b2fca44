"""Errors raised while reading and processing bulk uploads."""

from __future__ import annotations


class InvalidUploadError(ValueError):
    """The uploaded file could not be read as tabular data."""


class UnsupportedFileTypeError(InvalidUploadError):
    """The uploaded file is neither CSV nor XLSX."""


class NoValidRowsError(ValueError):
    """The upload parsed, but no row carries a usable location."""


class BulkProcessingError(Exception):
    """An unexpected failure stopped a bulk run."""
