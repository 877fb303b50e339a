"""
Report, RawPost and derived-view types.

Report is the canonical record held by ReportService and serialized to
the store and to export documents. RawPost is the fixed inbound shape
from the Reddit fetch collaborator. DistrictStats and SummaryStats are
recomputed on every read and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Sequence

from pydantic import BaseModel, Field, field_validator

Sentiment = Literal["positive", "negative", "neutral"]

ALL = "all"


class Report(BaseModel):
    """A normalized, analyzable record derived from one source post."""

    id: str = Field(min_length=1)
    text: str
    location: str
    district: str
    coordinates: tuple[float, float]
    """(latitude, longitude), jittered around the city reference point."""
    timestamp: str
    """ISO-8601, from the source post creation time."""
    category: str | None = None
    sentiment: Sentiment | None = None
    emotion: str | None = None
    severity: int | None = Field(default=None, ge=1, le=10)
    analyzed: bool = False


class RawPost(BaseModel):
    """Reddit post as returned by the public listing/search endpoints."""

    id: str = Field(min_length=1)
    title: str = ""
    selftext: str = ""
    author: str = "[deleted]"
    created_utc: float = 0
    score: int = 0
    num_comments: int = 0
    subreddit: str = ""
    permalink: str = ""
    url: str = ""

    model_config = {"extra": "ignore"}

    @field_validator("title", "selftext", "author", "subreddit", "permalink", "url", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v


class FilterState(BaseModel):
    """User-selected dashboard filters. "all" disables a predicate."""

    category: str = ALL
    sentiment: str = ALL
    district: str = ALL
    search: str = ""


@dataclass
class DistrictStats:
    district: str
    total_reports: int
    categories: dict[str, int] = field(default_factory=dict)
    sentiments: dict[str, int] = field(default_factory=dict)
    coordinates: tuple[float, float] = (0.0, 0.0)
    """First-seen report's coordinate in the district, not a centroid."""


@dataclass
class SummaryStats:
    total_reports: int = 0
    analyzed_reports: int = 0
    positive_reports: int = 0
    negative_reports: int = 0
    positive_percentage: float = 0.0
    negative_percentage: float = 0.0
    unique_districts: int = 0
    average_severity: float = 0.0
    recent_reports: int = 0
    critical_reports: int = 0


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp ("Z" accepted) to an aware UTC datetime."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def find_duplicate_id(reports: Sequence[Report]) -> str | None:
    """First id that appears more than once, or None when ids are unique."""
    seen: set[str] = set()
    for report in reports:
        if report.id in seen:
            return report.id
        seen.add(report.id)
    return None
