"""
Ingestion orchestration: raw posts -> relevance filter -> normalizer -> merge.

Pure with respect to the collection: the caller's list is not modified,
a new merged list is returned alongside run stats. ReportService is the
only caller that swaps the result into the held collection.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from services.api.pipeline.merge import merge_reports
from services.api.pipeline.normalizer import Normalizer
from services.api.pipeline.relevance_filter import filter_relevant
from services.api.reports.types import RawPost, Report

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

@dataclass
class IngestStats:
    """Summary of one ingestion run."""
    posts_received: int = 0
    posts_relevant: int = 0
    reports_added: int = 0
    duplicates_skipped: int = 0  # already held from an earlier fetch
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


def ingest_posts(
    existing: Sequence[Report],
    posts: Sequence[RawPost],
    normalizer: Optional[Normalizer] = None,
) -> tuple[List[Report], IngestStats]:
    """Run one batch through the pipeline and merge it into a copy of existing."""
    normalizer = normalizer or Normalizer()
    stats = IngestStats(
        posts_received=len(posts),
        started_at=datetime.now(timezone.utc),
    )

    relevant = filter_relevant(posts)
    stats.posts_relevant = len(relevant)

    incoming = [normalizer.normalize(post) for post in relevant]
    merged = merge_reports(existing, incoming)

    stats.reports_added = len(merged) - len(existing)
    stats.duplicates_skipped = len(incoming) - stats.reports_added
    stats.finished_at = datetime.now(timezone.utc)

    logger.info(
        "Ingest: %d posts, %d relevant, %d added, %d duplicates skipped",
        stats.posts_received, stats.posts_relevant,
        stats.reports_added, stats.duplicates_skipped,
    )
    return merged, stats
