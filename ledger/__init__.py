"""Core ledger engine for the expense ledger."""

from .categories import DEFAULT_CATEGORIES, CategoryRegistry
from .exceptions import (
    DuplicateError,
    LedgerImportError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .interchange import ImportResult, export_csv, parse_csv
from .models import Category, ExpenseRecord
from .query import FilterSpec, LedgerView, SortOrder, derive_view
from .session import LedgerSession
from .storage import FileStorage, MemoryStorage
from .store import LedgerStore

__all__ = [
    "Category",
    "CategoryRegistry",
    "DEFAULT_CATEGORIES",
    "DuplicateError",
    "ExpenseRecord",
    "FileStorage",
    "FilterSpec",
    "ImportResult",
    "LedgerImportError",
    "LedgerSession",
    "LedgerStore",
    "LedgerView",
    "MemoryStorage",
    "NotFoundError",
    "PersistenceError",
    "SortOrder",
    "ValidationError",
    "derive_view",
    "export_csv",
    "parse_csv",
]
