"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage:
in-memory, a local JSON file, and Google Sheets.
"""

from finplanner.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from finplanner.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
)
from finplanner.services.storage.local_file import (
    LocalFileAuditStorage,
    LocalFileBudgetStorage,
)
from finplanner.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BudgetStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryBudgetStorage",
    "LocalFileAuditStorage",
    "LocalFileBudgetStorage",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsBudgetStorage",
    "GoogleSheetsClient",
]
