"""
Read-only views over the report collection.

Filtering and per-district statistics feed the table and the map; the
summary, category, severity and timeline views feed the dashboard cards
and charts. Everything here is recomputed from the current collection on
each call. Nothing is cached and no input report is modified.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from services.api.reports.types import (
    ALL,
    DistrictStats,
    FilterState,
    Report,
    SummaryStats,
    parse_timestamp,
)

CRITICAL_SEVERITY = 8
RECENT_WINDOW = timedelta(hours=24)
DEFAULT_TIMELINE_DAYS = 14

# (label, low, high) inclusive
SEVERITY_BUCKETS: tuple[tuple[str, int, int], ...] = (
    ("Low (1-3)", 1, 3),
    ("Medium (4-6)", 4, 6),
    ("High (7-10)", 7, 10),
)


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def matches_filters(report: Report, filters: FilterState) -> bool:
    category_ok = filters.category == ALL or report.category == filters.category
    sentiment_ok = filters.sentiment == ALL or report.sentiment == filters.sentiment
    district_ok = filters.district == ALL or report.district == filters.district
    search_ok = filters.search.lower() in report.text.lower()
    return category_ok and sentiment_ok and district_ok and search_ok


def filter_reports(reports: Sequence[Report], filters: FilterState) -> list[Report]:
    """AND of the category, sentiment, district and free-text predicates."""
    return [report for report in reports if matches_filters(report, filters)]


# ---------------------------------------------------------------------------
# District statistics
# ---------------------------------------------------------------------------

def district_stats(reports: Sequence[Report]) -> list[DistrictStats]:
    """
    Group by district, in first-seen order.

    Histograms only count reports that carry the field; the coordinate is
    the first report seen in the district.
    """
    stats: dict[str, DistrictStats] = {}
    for report in reports:
        entry = stats.get(report.district)
        if entry is None:
            entry = DistrictStats(
                district=report.district,
                total_reports=0,
                coordinates=report.coordinates,
            )
            stats[report.district] = entry

        entry.total_reports += 1
        if report.category:
            entry.categories[report.category] = entry.categories.get(report.category, 0) + 1
        if report.sentiment:
            entry.sentiments[report.sentiment] = entry.sentiments.get(report.sentiment, 0) + 1

    return list(stats.values())


# ---------------------------------------------------------------------------
# Dashboard summary and chart data
# ---------------------------------------------------------------------------

def summary_stats(
    reports: Sequence[Report],
    now: Optional[datetime] = None,
) -> SummaryStats:
    now = now or datetime.now(timezone.utc)
    total = len(reports)
    positive = sum(1 for r in reports if r.sentiment == "positive")
    negative = sum(1 for r in reports if r.sentiment == "negative")
    severities = [r.severity for r in reports if r.severity]

    recent_cutoff = now - RECENT_WINDOW
    recent = 0
    for report in reports:
        created = parse_timestamp(report.timestamp)
        if created is not None and created > recent_cutoff:
            recent += 1

    return SummaryStats(
        total_reports=total,
        analyzed_reports=sum(1 for r in reports if r.analyzed),
        positive_reports=positive,
        negative_reports=negative,
        positive_percentage=round(positive / total * 100, 1) if total else 0.0,
        negative_percentage=round(negative / total * 100, 1) if total else 0.0,
        unique_districts=len({r.district for r in reports}),
        average_severity=round(sum(severities) / len(severities), 1) if severities else 0.0,
        recent_reports=recent,
        critical_reports=sum(1 for s in severities if s >= CRITICAL_SEVERITY),
    )


def category_breakdown(reports: Sequence[Report]) -> dict[str, int]:
    """Report count per present category, first-seen order."""
    return dict(Counter(r.category for r in reports if r.category))


def severity_buckets(reports: Sequence[Report]) -> dict[str, int]:
    buckets = {label: 0 for label, _, _ in SEVERITY_BUCKETS}
    for report in reports:
        if not report.severity:
            continue
        for label, low, high in SEVERITY_BUCKETS:
            if low <= report.severity <= high:
                buckets[label] += 1
                break
    return buckets


def timeline(
    reports: Sequence[Report],
    days: int = DEFAULT_TIMELINE_DAYS,
) -> list[dict]:
    """Reports per UTC calendar date, the most recent `days` dates, ascending."""
    counts: Counter = Counter()
    for report in reports:
        created = parse_timestamp(report.timestamp)
        if created is None:
            continue
        counts[created.date()] += 1

    dates = sorted(counts)[-days:] if days > 0 else []
    return [{"date": d.isoformat(), "count": counts[d]} for d in dates]


def filter_options(reports: Sequence[Report]) -> dict[str, list[str]]:
    """Distinct districts and present categories, first-seen order."""
    districts = list(dict.fromkeys(r.district for r in reports))
    categories = list(dict.fromkeys(r.category for r in reports if r.category))
    return {"districts": districts, "categories": categories}
