"""
Tests for the storage backends.

Google Sheets is exercised through a fake client that keeps worksheet
rows in memory; no network calls are made.
"""

import asyncio
import json
from datetime import datetime
from uuid import uuid4

import pytest
from tenacity import wait_none

from finplanner.models import AuditEventBuilder, BillItem, BudgetPeriod, IncomeItem
from finplanner.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    LocalFileAuditStorage,
    LocalFileBudgetStorage,
    StorageError,
)
from finplanner.services.storage.google_sheets import (
    AUDIT_COLUMNS,
    CURRENT_PERIOD_KEY,
    PERIOD_COLUMNS,
    STATE_COLUMNS,
)


def sample_periods() -> list[BudgetPeriod]:
    return [
        BudgetPeriod(
            id="jan",
            month=1,
            year=2025,
            income=[IncomeItem(id="inc1", name="Salary", actual=3000)],
            created=datetime(2025, 1, 1),
        ),
        BudgetPeriod(
            id="feb",
            month=2,
            year=2025,
            bills=[BillItem(id="bill1", name="Rent", amount=1200, due_date="2025-02-01")],
            created=datetime(2025, 2, 1),
        ),
    ]


class FakeWorksheet:
    """Minimal stand-in for gspread.Worksheet."""

    def __init__(self, header: list[str]):
        self.rows = [list(header)]

    def get_all_values(self):
        return [list(r) for r in self.rows]

    def clear(self):
        self.rows = []

    def append_row(self, values, value_input_option=None):
        self.rows.append([str(v) for v in values])

    def append_rows(self, values, value_input_option=None):
        for row in values:
            self.append_row(row)

    def update_cell(self, row, col, value):
        self.rows[row - 1][col - 1] = str(value)


class FakeSheetsClient:
    """Stand-in for GoogleSheetsClient with in-memory worksheets."""

    def __init__(self):
        self.periods = FakeWorksheet(PERIOD_COLUMNS)
        self.state = FakeWorksheet(STATE_COLUMNS)
        self.audit = FakeWorksheet(AUDIT_COLUMNS)

    def get_periods_sheet(self):
        return self.periods

    def get_state_sheet(self):
        return self.state

    def get_audit_sheet(self):
        return self.audit


class QuotaLimitedWorksheet(FakeWorksheet):
    """Worksheet that rejects any write containing a given period id."""

    def __init__(self, header, rejected_id):
        super().__init__(header)
        self.rejected_id = rejected_id

    def append_rows(self, values, value_input_option=None):
        if any(row and row[0] == self.rejected_id for row in values):
            raise ConnectionError("quota exceeded")
        super().append_rows(values, value_input_option)


class BrokenSheetsClient(FakeSheetsClient):
    def get_audit_sheet(self):
        raise ConnectionError("quota exceeded")


class TestInMemoryStorage:
    """Tests for the in-memory backend."""

    def test_round_trip(self):
        """Saved periods load back equal."""
        storage = InMemoryBudgetStorage()
        asyncio.run(storage.save_periods(sample_periods()))
        asyncio.run(storage.set_current_period_id("feb"))

        assert asyncio.run(storage.load_periods()) == sample_periods()
        assert asyncio.run(storage.get_current_period_id()) == "feb"

    def test_loaded_periods_are_copies(self):
        """Mutating a loaded period does not change what is stored."""
        storage = InMemoryBudgetStorage(sample_periods())
        loaded = asyncio.run(storage.load_periods())
        loaded[0].income[0].actual = 0

        assert asyncio.run(storage.load_periods())[0].income[0].actual == 3000

    def test_audit_queries(self):
        """Events are retrievable by correlation id and recency."""
        storage = InMemoryAuditStorage()
        correlation_id = uuid4()
        asyncio.run(storage.append_event(
            AuditEventBuilder.period_saved("jan", "January 2025", correlation_id)
        ))
        asyncio.run(storage.append_event(AuditEventBuilder.period_saved("feb", "February 2025")))

        related = asyncio.run(storage.get_events_by_correlation_id(correlation_id))
        assert [e.entity_id for e in related] == ["jan"]
        assert len(asyncio.run(storage.get_recent_events(limit=1))) == 1


class TestLocalFileStorage:
    """Tests for the JSON file backend."""

    def test_missing_file_is_empty(self, tmp_path):
        """A first run has no periods and no current id."""
        storage = LocalFileBudgetStorage(tmp_path / "data.json")
        assert asyncio.run(storage.load_periods()) == []
        assert asyncio.run(storage.get_current_period_id()) is None

    def test_round_trip(self, tmp_path):
        """Periods and current id share one document."""
        path = tmp_path / "nested" / "data.json"
        storage = LocalFileBudgetStorage(path)
        asyncio.run(storage.save_periods(sample_periods()))
        asyncio.run(storage.set_current_period_id("jan"))

        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["current_period_id"] == "jan"
        assert len(document["periods"]) == 2
        assert not (tmp_path / "nested" / "data.json.tmp").exists()

        reopened = LocalFileBudgetStorage(path)
        assert asyncio.run(reopened.load_periods()) == sample_periods()
        assert asyncio.run(reopened.get_current_period_id()) == "jan"

    def test_invalid_period_is_skipped(self, tmp_path):
        """One broken period does not lose the rest."""
        path = tmp_path / "data.json"
        good = sample_periods()[0].model_dump(mode="json")
        path.write_text(json.dumps({"periods": [good, {"month": 99}]}), encoding="utf-8")

        periods = asyncio.run(LocalFileBudgetStorage(path).load_periods())
        assert [p.id for p in periods] == ["jan"]

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        """Unreadable JSON surfaces as a StorageError."""
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            asyncio.run(LocalFileBudgetStorage(path).load_periods())

    def test_audit_log_appends_lines(self, tmp_path):
        """Each event is one JSON line."""
        path = tmp_path / "audit.jsonl"
        storage = LocalFileAuditStorage(path)
        correlation_id = uuid4()
        asyncio.run(storage.append_event(
            AuditEventBuilder.rollover_confirmed("jan", 120.0, correlation_id)
        ))
        asyncio.run(storage.append_event(AuditEventBuilder.period_saved("feb", "February 2025")))

        assert len(path.read_text(encoding="utf-8").splitlines()) == 2
        related = asyncio.run(storage.get_events_by_correlation_id(correlation_id))
        assert related[0].details["amount"] == 120.0


class TestGoogleSheetsStorage:
    """Tests for the Google Sheets backend against a fake client."""

    def test_save_rewrites_sheet(self):
        """Saving replaces all rows under a fresh header."""
        client = FakeSheetsClient()
        storage = GoogleSheetsBudgetStorage(client)

        asyncio.run(storage.save_periods(sample_periods()))
        asyncio.run(storage.save_periods(sample_periods()[:1]))

        rows = client.periods.get_all_values()
        assert rows[0] == PERIOD_COLUMNS
        assert len(rows) == 2
        assert rows[1][0] == "jan"
        assert rows[1][1] == "January 2025"
        assert rows[1][4] == "3000.00"

    def test_failed_save_keeps_previous_periods(self, monkeypatch):
        """A write that fails part way leaves the stored history in place."""
        monkeypatch.setattr(GoogleSheetsBudgetStorage.save_periods.retry, "wait", wait_none())
        client = FakeSheetsClient()
        client.periods = QuotaLimitedWorksheet(PERIOD_COLUMNS, rejected_id="mar")
        storage = GoogleSheetsBudgetStorage(client)
        asyncio.run(storage.save_periods(sample_periods()))

        march = BudgetPeriod(id="mar", month=3, year=2025, created=datetime(2025, 3, 1))
        with pytest.raises(StorageError):
            asyncio.run(storage.save_periods([*sample_periods(), march]))

        assert asyncio.run(storage.load_periods()) == sample_periods()

    def test_round_trip(self):
        """Periods load back from their JSON column."""
        client = FakeSheetsClient()
        storage = GoogleSheetsBudgetStorage(client)
        asyncio.run(storage.save_periods(sample_periods()))

        assert asyncio.run(storage.load_periods()) == sample_periods()

    def test_short_rows_are_skipped(self):
        """Rows typed by hand without the JSON column are ignored."""
        client = FakeSheetsClient()
        client.periods.rows.append(["x", "note"])
        storage = GoogleSheetsBudgetStorage(client)

        assert asyncio.run(storage.load_periods()) == []

    def test_current_period_id(self):
        """The state sheet is appended once, then updated in place."""
        client = FakeSheetsClient()
        storage = GoogleSheetsBudgetStorage(client)

        assert asyncio.run(storage.get_current_period_id()) is None
        asyncio.run(storage.set_current_period_id("jan"))
        asyncio.run(storage.set_current_period_id("feb"))

        assert client.state.get_all_values()[1:] == [[CURRENT_PERIOD_KEY, "feb"]]
        assert asyncio.run(storage.get_current_period_id()) == "feb"

    def test_audit_round_trip(self):
        """Audit rows parse back into events."""
        client = FakeSheetsClient()
        storage = GoogleSheetsAuditStorage(client)
        correlation_id = uuid4()
        event = AuditEventBuilder.storage_failed("save", "disk full", correlation_id)

        assert asyncio.run(storage.append_event(event)) is True
        related = asyncio.run(storage.get_events_by_correlation_id(correlation_id))

        assert len(related) == 1
        assert related[0].event_id == event.event_id
        assert related[0].error_message == "disk full"
        assert related[0].details == {"operation": "save"}

    def test_audit_write_failure_does_not_raise(self):
        """A failing audit sheet returns False instead of raising."""
        storage = GoogleSheetsAuditStorage(BrokenSheetsClient())
        event = AuditEventBuilder.period_saved("jan", "January 2025")

        assert asyncio.run(storage.append_event(event)) is False
