"""
Export / import documents for the report collection.

Document shape (version "1.0"):
    {"reports": [Report, ...], "exportDate": "<ISO-8601>", "version": "1.0"}

Import accepts any JSON object carrying a "reports" array; other keys
(exportDate, version) are informational. Anything else is rejected with
ImportValidationError and nothing is applied.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from services.api.reports.types import Report, find_duplicate_id

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"

_reports_adapter = TypeAdapter(list[Report])


class ImportValidationError(ValueError):
    """Import document is not a usable report collection."""


def export_document(
    reports: Sequence[Report],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    return {
        "reports": [r.model_dump(mode="json", exclude_none=True) for r in reports],
        "exportDate": now.isoformat(),
        "version": EXPORT_VERSION,
    }


def export_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"street-voice-data-{now.date().isoformat()}.json"


def import_document(document: str | bytes | dict[str, Any]) -> list[Report]:
    """
    Validate an import document and return its reports.

    Accepts raw JSON text/bytes or an already-decoded object. Raises
    ImportValidationError when the JSON is malformed, the top level is
    not an object with a "reports" list, any report fails validation, or
    two reports share an id.
    """
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ImportValidationError(f"Import file is not valid JSON: {exc}") from exc

    if not isinstance(document, dict):
        raise ImportValidationError("Import document must be a JSON object")

    raw_reports = document.get("reports")
    if not isinstance(raw_reports, list):
        raise ImportValidationError('Import document must contain a "reports" array')

    try:
        reports = _reports_adapter.validate_python(raw_reports)
    except ValidationError as exc:
        raise ImportValidationError(
            f"Import document has {exc.error_count()} invalid report field(s)"
        ) from exc

    duplicate = find_duplicate_id(reports)
    if duplicate is not None:
        raise ImportValidationError(f"Duplicate report id in import: {duplicate!r}")

    logger.info(
        "Validated import of %d reports (version=%s)",
        len(reports), document.get("version", "unknown"),
    )
    return reports
