"""Shelf data models."""

from shelf.models.file_record import CATEGORIES, Category, FileContent, FileRecord, ScanResult, normalize_category
from shelf.models.cleanup_result import CleanupItem, CleanupReason, CleanupResult
from shelf.models.bulk_result import BulkDeleteError, BulkDeleteResult

__all__ = [
    "BulkDeleteError",
    "BulkDeleteResult",
    "CATEGORIES",
    "Category",
    "CleanupItem",
    "CleanupReason",
    "CleanupResult",
    "FileContent",
    "FileRecord",
    "ScanResult",
    "normalize_category",
]
