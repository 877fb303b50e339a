"""
Cross-batch merge and batch analysis over the report collection.

merge_reports      existing + incoming records whose id is not yet held
                   (first occurrence wins, also within incoming)
analyze_reports    classify every unanalyzed report, keyed by report id
apply_analysis     write results back onto the matching reports in place
prioritize_reports newest first by timestamp

Within-batch dedup of raw posts belongs to the relevance filter; this is
the only place duplicates across fetches are suppressed.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Sequence

from services.api.classification import AnalysisResult, classify
from services.api.reports.types import Report, parse_timestamp

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def merge_reports(existing: Sequence[Report], incoming: Sequence[Report]) -> List[Report]:
    seen = {report.id for report in existing}
    merged = list(existing)
    for report in incoming:
        if report.id in seen:
            continue
        seen.add(report.id)
        merged.append(report)
    return merged


def analyze_reports(reports: Sequence[Report]) -> Dict[str, AnalysisResult]:
    """Classify unanalyzed reports. Result order is irrelevant; callers map by id."""
    results: Dict[str, AnalysisResult] = {}
    for report in reports:
        if report.analyzed:
            continue
        results[report.id] = classify(report.text)
    return results


def apply_analysis(reports: Sequence[Report], results: Mapping[str, AnalysisResult]) -> int:
    """Set analysis fields in place. Returns the number of reports updated."""
    updated = 0
    for report in reports:
        result = results.get(report.id)
        if result is None:
            continue
        report.category = result.category
        report.sentiment = result.sentiment
        report.emotion = result.emotion
        report.severity = result.severity
        report.analyzed = True
        updated += 1
    if updated != len(results):
        logger.warning(
            "apply_analysis: %d results, %d matched a report", len(results), updated
        )
    return updated


def prioritize_reports(reports: Sequence[Report]) -> List[Report]:
    """Newest first. Unparseable timestamps sort last."""
    return sorted(reports, key=_sort_key, reverse=True)


def _sort_key(report: Report) -> datetime:
    return parse_timestamp(report.timestamp) or _EPOCH
