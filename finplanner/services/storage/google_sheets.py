"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a shared storage backend because:
1. Users can view their budget history directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions: a save rewrites the whole Periods sheet
- Each period is stored as one JSON cell; the other columns are for
  humans browsing the sheet

The implementation follows the abstract interface, so the rest of the
application does not know which backend it is talking to.
"""

import json
from datetime import datetime
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from finplanner.calculations.totals import calculate_totals
from finplanner.config import GoogleSheetsSettings, get_settings
from finplanner.models.audit import AuditEvent, AuditEventType, AuditSeverity
from finplanner.models.budget import BudgetPeriod
from finplanner.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    StorageConnectionError,
    StorageError,
)


logger = structlog.get_logger("finplanner.storage.google_sheets")


# Column mappings for Periods sheet
PERIOD_COLUMNS = [
    "id",
    "label",
    "created",
    "saved_at",
    "total_income",
    "total_out",
    "left_to_spend",
    "period_json",
]

# Key/value rows in the State sheet
STATE_COLUMNS = ["key", "value"]
CURRENT_PERIOD_KEY = "current_period_id"

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_periods_sheet(self) -> gspread.Worksheet:
        """Get or create the Periods worksheet."""
        return self._get_or_create_sheet(
            self._settings.periods_sheet_name, PERIOD_COLUMNS, rows=500
        )

    def get_state_sheet(self) -> gspread.Worksheet:
        """Get or create the State worksheet."""
        return self._get_or_create_sheet(
            self._settings.state_sheet_name, STATE_COLUMNS, rows=20
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


class GoogleSheetsBudgetStorage(BudgetStorageInterface):
    """
    Google Sheets implementation of budget storage.

    One period per row. The full period is JSON-serialized in the last
    column; the summary columns are written for readability only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _period_to_row(self, period: BudgetPeriod, saved_at: datetime) -> list:
        """Convert a BudgetPeriod to a spreadsheet row."""
        totals = calculate_totals(period)
        return [
            period.id,
            period.label,
            period.created.isoformat(),
            saved_at.isoformat(),
            f"{totals.total_income:.2f}",
            f"{totals.total_out:.2f}",
            f"{totals.left_to_spend:.2f}",
            period.model_dump_json(),
        ]

    def _row_to_period(self, row: list) -> BudgetPeriod:
        """Convert a spreadsheet row to a BudgetPeriod."""
        payload = row[PERIOD_COLUMNS.index("period_json")]
        return BudgetPeriod.model_validate_json(payload)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def load_periods(self) -> list[BudgetPeriod]:
        """Load every period stored in the Periods sheet."""
        try:
            sheet = self._client.get_periods_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except Exception as e:
            raise StorageError(f"Failed to load periods: {e}")

        periods = []
        for row in all_rows:
            if len(row) < len(PERIOD_COLUMNS) or not row[0]:
                continue
            try:
                periods.append(self._row_to_period(row))
            except ValueError as e:
                logger.warning("period_row_skipped", period_id=row[0], error=str(e))
        return periods

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_periods(self, periods: list[BudgetPeriod]) -> bool:
        """
        Rewrite the Periods sheet with `periods`.

        The previous contents are put back if the rewrite fails part way,
        so a failed save never leaves the sheet empty.
        """
        try:
            sheet = self._client.get_periods_sheet()
            saved_at = datetime.utcnow()
            rows = [self._period_to_row(p, saved_at) for p in periods]
            previous = sheet.get_all_values()
        except Exception as e:
            raise StorageError(f"Failed to save periods: {e}")

        try:
            sheet.clear()
            sheet.append_rows([PERIOD_COLUMNS, *rows], value_input_option="RAW")
            return True
        except Exception as e:
            self._restore_rows(sheet, previous)
            raise StorageError(f"Failed to save periods: {e}")

    def _restore_rows(self, sheet, rows: list[list]) -> None:
        """Put back what a failed rewrite removed."""
        try:
            sheet.clear()
            sheet.append_rows(rows or [PERIOD_COLUMNS], value_input_option="RAW")
        except Exception as e:
            logger.error("periods_restore_failed", rows=len(rows), error=str(e))

    async def get_current_period_id(self) -> Optional[str]:
        """Read the current period id from the State sheet."""
        try:
            sheet = self._client.get_state_sheet()
            for row in sheet.get_all_values()[1:]:
                if len(row) >= 2 and row[0] == CURRENT_PERIOD_KEY:
                    return row[1] or None
            return None
        except Exception as e:
            raise StorageError(f"Failed to read current period id: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def set_current_period_id(self, period_id: str) -> bool:
        """Write the current period id to the State sheet."""
        try:
            sheet = self._client.get_state_sheet()
            all_rows = sheet.get_all_values()

            # Start from 2 (row 1 is header)
            for idx, row in enumerate(all_rows[1:], start=2):
                if row and row[0] == CURRENT_PERIOD_KEY:
                    sheet.update_cell(idx, 2, period_id)
                    return True

            sheet.append_row([CURRENT_PERIOD_KEY, period_id], value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write current period id: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=safe_get(5) or None,
            correlation_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def _read_events(self) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except ValueError as e:
                logger.warning("audit_row_skipped", event_id=row[0], error=str(e))
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            # Audit logging must not break the main flow
            logger.warning(
                "audit_write_failed",
                event_id=str(event.event_id),
                error=str(e),
            )
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by correlation ID."""
        try:
            events = [
                e for e in self._read_events()
                if e.correlation_id == correlation_id
            ]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            events = self._read_events()
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
