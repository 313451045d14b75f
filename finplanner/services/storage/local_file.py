"""
Local JSON File Storage Implementation

DESIGN DECISION: The default backend is a single JSON document on disk,
the desktop analogue of browser local storage:

    {"current_period_id": "...", "periods": [{...}, ...]}

Writes go to a temporary file that then replaces the original, so an
interrupted save never leaves a half-written document behind. The audit
log is a separate JSON-lines file, one event per line, append-only.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from finplanner.models.audit import AuditEvent
from finplanner.models.budget import BudgetPeriod
from finplanner.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    StorageError,
)


logger = structlog.get_logger("finplanner.storage.local_file")


class LocalFileBudgetStorage(BudgetStorageInterface):
    """Budget storage in one JSON file."""

    def __init__(self, path: Path):
        self._path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {"current_period_id": None, "periods": []}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self._path}: {e}")
        if not isinstance(document, dict):
            raise StorageError(f"Unexpected data format in {self._path}")
        return document

    def _write(self, document: dict[str, Any]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")

    async def load_periods(self) -> list[BudgetPeriod]:
        periods = []
        for raw in self._read().get("periods") or []:
            try:
                periods.append(BudgetPeriod.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    "period_skipped",
                    period_id=raw.get("id") if isinstance(raw, dict) else None,
                    error=str(e),
                )
        return periods

    async def save_periods(self, periods: list[BudgetPeriod]) -> bool:
        document = self._read()
        document["periods"] = [p.model_dump(mode="json") for p in periods]
        self._write(document)
        return True

    async def get_current_period_id(self) -> Optional[str]:
        value = self._read().get("current_period_id")
        return str(value) if value else None

    async def set_current_period_id(self, period_id: str) -> bool:
        document = self._read()
        document["current_period_id"] = period_id
        self._write(document)
        return True


class LocalFileAuditStorage(AuditStorageInterface):
    """Append-only audit log in a JSON-lines file."""

    def __init__(self, path: Path):
        self._path = Path(path)

    def _read_events(self) -> list[AuditEvent]:
        if not self._path.exists():
            return []
        events = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line in f:
                    if not line.strip():
                        continue
                    try:
                        events.append(AuditEvent.model_validate_json(line))
                    except ValidationError as e:
                        logger.warning("audit_line_skipped", error=str(e))
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(event.model_dump_json() + "\n")
            return True
        except OSError as e:
            logger.warning("audit_write_failed", event_id=str(event.event_id), error=str(e))
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        related = [e for e in self._read_events() if e.correlation_id == correlation_id]
        return sorted(related, key=lambda e: e.timestamp)

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return sorted(self._read_events(), key=lambda e: e.timestamp, reverse=True)[:limit]
