"""
JSON file store for the report collection.

One file per key under the data directory:
  street_voice_reports.json      full Report array
  street_voice_last_update.json  ISO timestamp of the last successful save
  street_voice_settings.json     reserved, removed by clear_all

Persistence is best effort. Nothing in this module raises to callers:
  - save failures are logged and reported as False
  - missing or corrupt files load as an empty collection / None

Writes are atomic via temp + os.replace so a crash never leaves a
half-written collection behind.
"""

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from services.api.reports.types import Report, find_duplicate_id, parse_timestamp

logger = logging.getLogger(__name__)

REPORTS_KEY = "street_voice_reports"
LAST_UPDATE_KEY = "street_voice_last_update"
SETTINGS_KEY = "street_voice_settings"
STORAGE_KEYS = (REPORTS_KEY, LAST_UPDATE_KEY, SETTINGS_KEY)

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024

_reports_adapter = TypeAdapter(list[Report])


@dataclass
class StorageInfo:
    used: int  # bytes across all store files
    available: int  # advisory quota


class ReportStore:
    """Key -> JSON file persistence for reports and the last-update stamp."""

    def __init__(self, data_dir: str | Path, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        self.data_dir = Path(data_dir)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    # -- raw key access -----------------------------------------------------

    def _read(self, key: str) -> Any | None:
        """Read one key. Returns None on missing/corrupt file."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            logger.warning("Corrupt store file %s, ignoring", path)
            return None

    def _write_atomic(self, key: str, data: Any) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(str(tmp), str(path))

    # -- public API -----------------------------------------------------------

    def save_reports(self, reports: Sequence[Report]) -> bool:
        """Persist the full collection and stamp the update time."""
        payload = [r.model_dump(mode="json", exclude_none=True) for r in reports]
        try:
            self._write_atomic(REPORTS_KEY, payload)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save %d reports to %s: %s", len(payload), self.data_dir, exc)
            return False
        logger.info("Saved %d reports to %s", len(payload), self.data_dir)

        # The collection is on disk; a missing stamp only affects last_update
        try:
            self._write_atomic(LAST_UPDATE_KEY, datetime.now(timezone.utc).isoformat())
        except OSError as exc:
            logger.warning("Saved reports but failed to write %s: %s", LAST_UPDATE_KEY, exc)
        return True

    def load_reports(self) -> list[Report]:
        """
        Load the collection; [] when absent, not a valid Report array, or
        when two stored reports share an id.
        """
        raw = self._read(REPORTS_KEY)
        if raw is None:
            return []
        try:
            reports = _reports_adapter.validate_python(raw)
        except ValidationError as exc:
            logger.warning(
                "Stored reports failed validation (%d errors), ignoring",
                exc.error_count(),
            )
            return []

        duplicate = find_duplicate_id(reports)
        if duplicate is not None:
            logger.warning("Stored reports contain duplicate id %r, ignoring", duplicate)
            return []
        return reports

    def get_last_update(self) -> Optional[datetime]:
        raw = self._read(LAST_UPDATE_KEY)
        if not isinstance(raw, str):
            return None
        return parse_timestamp(raw)

    def clear_all(self) -> None:
        for key in STORAGE_KEYS:
            path = self._path(key)
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.error("Failed to remove %s: %s", path, exc)

    def storage_info(self) -> StorageInfo:
        used = 0
        for key in STORAGE_KEYS:
            path = self._path(key)
            if path.exists():
                used += path.stat().st_size
        return StorageInfo(used=used, available=self.quota_bytes)
