"""Services package."""

from finplanner.services.storage import (
    AuditStorageInterface,
    BudgetStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    LocalFileAuditStorage,
    LocalFileBudgetStorage,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsBudgetStorage",
    "GoogleSheetsClient",
    "InMemoryAuditStorage",
    "InMemoryBudgetStorage",
    "LocalFileAuditStorage",
    "LocalFileBudgetStorage",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
]
