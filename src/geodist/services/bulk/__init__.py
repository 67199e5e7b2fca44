"""Bulk distance processing."""

from ..errors import BulkProcessingError, InvalidUploadError, NoValidRowsError, UnsupportedFileTypeError
from .pipeline import BulkOutcome, BulkPipeline
from .scheduler import run_batches
from .session import BulkSession

__all__ = [
    "BulkOutcome",
    "BulkPipeline",
    "BulkProcessingError",
    "BulkSession",
    "InvalidUploadError",
    "NoValidRowsError",
    "UnsupportedFileTypeError",
    "run_batches",
]
