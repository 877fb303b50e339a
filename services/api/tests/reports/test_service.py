"""
Tests for services.api.reports.service.ReportService.
"""

import asyncio

import pytest

from services.api.config import Settings
from services.api.reports.service import (
    OP_ANALYZE,
    OP_INGEST,
    OperationInProgressError,
    ReportService,
)
from services.api.reports.store import ReportStore
from services.api.scrapers.base import FetchResult
from services.api.tests.conftest import make_analyzed_report, make_raw_post, make_report


class TestIngest:
    def test_ingest_adds_reports_and_autosaves(self, service, store):
        stats = service.ingest([make_raw_post(id="a"), make_raw_post(id="b")])
        assert stats.reports_added == 2
        assert [r.id for r in service.reports] == ["reddit_a", "reddit_b"]
        assert [r.id for r in store.load_reports()] == ["reddit_a", "reddit_b"]

    def test_duplicate_across_fetches_kept_once(self, service):
        service.ingest([make_raw_post(id="a", title="Broken streetlight first")])
        service.ingest([make_raw_post(id="a", title="Broken streetlight second")])
        reports = service.reports
        assert len(reports) == 1
        assert reports[0].text.startswith("Broken streetlight first")

    def test_no_autosave_when_disabled(self, store, normalizer):
        service = ReportService(store=store, normalizer=normalizer, autosave=False)
        service.ingest([make_raw_post()])
        assert store.load_reports() == []

    def test_snapshot_is_a_copy(self, service):
        service.ingest([make_raw_post(id="a")])
        snapshot = service.reports
        snapshot.clear()
        assert len(service.reports) == 1

    async def test_ingest_from_fetch(self, service):
        async def fetch():
            return FetchResult(posts=[make_raw_post(id="x")])

        outcome = await service.ingest_from(fetch)
        assert outcome.error is None
        assert outcome.stats.reports_added == 1
        assert not service.is_running(OP_INGEST)

    async def test_failed_fetch_leaves_collection_untouched(self, service):
        service.ingest([make_raw_post(id="a")])
        before = service.reports

        async def fetch():
            return FetchResult(posts=[], error="HTTP 503")

        outcome = await service.ingest_from(fetch)
        assert outcome.error == "HTTP 503"
        assert outcome.stats.reports_added == 0
        assert service.reports == before

    async def test_concurrent_ingest_rejected(self, service):
        gate = asyncio.Event()

        async def slow_fetch():
            await gate.wait()
            return FetchResult(posts=[make_raw_post(id="slow")])

        task = asyncio.create_task(service.ingest_from(slow_fetch))
        await asyncio.sleep(0)
        assert service.is_running(OP_INGEST)

        with pytest.raises(OperationInProgressError) as exc_info:
            service.ingest([make_raw_post(id="other")])
        assert exc_info.value.operation == OP_INGEST

        gate.set()
        await task
        assert not service.is_running(OP_INGEST)
        assert [r.id for r in service.reports] == ["reddit_slow"]

    async def test_flag_cleared_when_fetch_raises(self, service):
        async def broken_fetch():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await service.ingest_from(broken_fetch)
        assert not service.is_running(OP_INGEST)


class TestAnalyze:
    def test_analyze_classifies_unanalyzed(self, service):
        service.ingest([make_raw_post(id="a", title="Massive pothole damaged my tire", selftext="")])
        assert service.analyze() == 1
        report = service.reports[0]
        assert report.analyzed
        assert report.category == "Roads"

    def test_analyze_twice_is_noop(self, service):
        service.ingest([make_raw_post(id="a")])
        service.analyze()
        assert service.analyze() == 0

    def test_analyze_persists(self, service, store):
        service.ingest([make_raw_post(id="a")])
        service.analyze()
        assert store.load_reports()[0].analyzed is True

    def test_analyze_while_running_rejected(self, service):
        service._in_progress.add(OP_ANALYZE)
        with pytest.raises(OperationInProgressError):
            service.analyze()


class TestPersistenceOps:
    def test_replace_saves(self, service, store):
        reports = [make_report(id="i1"), make_analyzed_report(id="i2")]
        service.replace(reports)
        assert service.reports == reports
        assert store.load_reports() == reports

    def test_save_and_load(self, service, store):
        service.ingest([make_raw_post(id="a")])
        service.clear()
        assert service.reports == []
        store.save_reports([make_report(id="stored")])
        assert service.load() == 1
        assert [r.id for r in service.reports] == ["stored"]

    def test_clear_wipes_store(self, service, store):
        service.ingest([make_raw_post(id="a")])
        service.clear()
        assert service.reports == []
        assert store.load_reports() == []
        assert service.last_update() is None

    def test_save_returns_status(self, service):
        assert service.save() is True
        assert service.last_update() is not None
        assert service.storage_info().used > 0


class TestFromSettings:
    def test_builds_from_settings(self, tmp_path):
        config = Settings(data_dir=str(tmp_path), autosave=False,
                          district_fallback="unknown", random_seed=42)
        service = ReportService.from_settings(config)
        assert isinstance(service.store, ReportStore)
        assert service.autosave is False
        assert service.normalizer.district_fallback == "unknown"
        service.ingest([make_raw_post(id="a")])
        assert service.reports[0].district == "Unknown"

    def test_seed_makes_ingest_reproducible(self, tmp_path):
        config = Settings(data_dir=str(tmp_path), autosave=False, random_seed=42)
        a = ReportService.from_settings(config)
        b = ReportService.from_settings(config)
        a.ingest([make_raw_post(id="a")])
        b.ingest([make_raw_post(id="a")])
        assert a.reports == b.reports
