"""
ReportService: the single owner and writer of the report collection.

Every other component reads snapshots (copies of the list) and hands
back new values; only this class swaps them in. Two operations are
guarded by an "in progress" flag each:

  ingest   fetch -> filter -> normalize -> merge
  analyze  classify every unanalyzed report and apply results

Starting either while the same kind is running raises
OperationInProgressError. There is no cancellation: a started operation
runs to completion. A failed fetch leaves the collection untouched.

When autosave is on the collection is written to the store after every
successful mutation (ingest that added reports, analyze, import).
"""

from __future__ import annotations

import logging
import random
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Iterator, Optional, Sequence

from services.api.config import Settings
from services.api.pipeline.ingest import IngestStats, ingest_posts
from services.api.pipeline.merge import analyze_reports, apply_analysis
from services.api.pipeline.normalizer import Normalizer
from services.api.reports.store import ReportStore, StorageInfo
from services.api.reports.types import RawPost, Report
from services.api.scrapers.base import FetchResult

logger = logging.getLogger(__name__)

OP_INGEST = "ingest"
OP_ANALYZE = "analyze"


class OperationInProgressError(RuntimeError):
    """An operation of the same kind is already running."""

    def __init__(self, operation: str):
        super().__init__(f"{operation} already in progress")
        self.operation = operation


@dataclass
class IngestOutcome:
    stats: IngestStats
    error: Optional[str] = None


class ReportService:
    def __init__(
        self,
        store: ReportStore,
        normalizer: Optional[Normalizer] = None,
        autosave: bool = True,
    ):
        self.store = store
        self.normalizer = normalizer or Normalizer()
        self.autosave = autosave
        self._reports: list[Report] = []
        self._in_progress: set[str] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReportService":
        rng = random.Random(settings.random_seed)
        return cls(
            store=ReportStore(settings.data_dir, settings.storage_quota_bytes),
            normalizer=Normalizer(district_fallback=settings.district_fallback, rng=rng),
            autosave=settings.autosave,
        )

    # -- reads ------------------------------------------------------------------

    @property
    def reports(self) -> list[Report]:
        """Snapshot of the collection; mutating it does not affect the service."""
        return list(self._reports)

    def is_running(self, operation: str) -> bool:
        return operation in self._in_progress

    def last_update(self) -> Optional[datetime]:
        return self.store.get_last_update()

    def storage_info(self) -> StorageInfo:
        return self.store.storage_info()

    # -- operation guard ----------------------------------------------------------

    @contextmanager
    def _operation(self, operation: str) -> Iterator[None]:
        if operation in self._in_progress:
            raise OperationInProgressError(operation)
        self._in_progress.add(operation)
        try:
            yield
        finally:
            self._in_progress.discard(operation)

    def _autosave(self) -> None:
        if self.autosave:
            self.store.save_reports(self._reports)

    # -- mutations --------------------------------------------------------------

    def ingest(self, posts: Sequence[RawPost]) -> IngestStats:
        """Ingest an already-fetched batch of raw posts."""
        with self._operation(OP_INGEST):
            return self._ingest(posts)

    async def ingest_from(self, fetch: Callable[[], Awaitable[FetchResult]]) -> IngestOutcome:
        """
        Run a fetch and ingest its posts, holding the ingest flag throughout.

        A fetch that reports an error still ingests whatever posts it
        returned; an empty failed fetch changes nothing.
        """
        with self._operation(OP_INGEST):
            result = await fetch()
            if result.error:
                logger.warning("Fetch reported error: %s", result.error)
            stats = self._ingest(result.posts)
            return IngestOutcome(stats=stats, error=result.error)

    def _ingest(self, posts: Sequence[RawPost]) -> IngestStats:
        merged, stats = ingest_posts(self._reports, posts, self.normalizer)
        if stats.reports_added:
            self._reports = merged
            self._autosave()
        return stats

    def analyze(self) -> int:
        """Classify all unanalyzed reports. Returns how many were updated."""
        with self._operation(OP_ANALYZE):
            results = analyze_reports(self._reports)
            if not results:
                logger.info("Analyze: nothing to analyze")
                return 0
            updated = apply_analysis(self._reports, results)
            logger.info("Analyze: %d reports classified", updated)
            self._autosave()
            return updated

    def replace(self, reports: Sequence[Report]) -> None:
        """Swap in a whole collection (import). Always persisted."""
        self._reports = list(reports)
        self.store.save_reports(self._reports)
        logger.info("Collection replaced with %d reports", len(self._reports))

    def save(self) -> bool:
        return self.store.save_reports(self._reports)

    def load(self) -> int:
        """Replace the collection with the stored one. Returns the count loaded."""
        self._reports = self.store.load_reports()
        logger.info("Loaded %d reports from store", len(self._reports))
        return len(self._reports)

    def clear(self) -> None:
        """Drop every report from memory and the store."""
        self._reports = []
        self.store.clear_all()
        logger.info("Collection and store cleared")
