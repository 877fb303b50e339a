"""
Tests for services.api.reports.aggregation.
"""

from datetime import datetime, timezone

import pytest

from services.api.reports.aggregation import (
    category_breakdown,
    district_stats,
    filter_options,
    filter_reports,
    severity_buckets,
    summary_stats,
    timeline,
)
from services.api.reports.types import FilterState, SummaryStats
from services.api.tests.conftest import make_analyzed_report, make_report


@pytest.fixture
def reports():
    return [
        make_analyzed_report(id="r1", district="Manhattan", category="Roads",
                             sentiment="negative", severity=8,
                             text="Pothole on Canal Street", coordinates=(40.71, -74.0)),
        make_analyzed_report(id="r2", district="Brooklyn", category="Transport",
                             sentiment="neutral", severity=4,
                             text="Subway delays on the L", coordinates=(40.68, -73.95)),
        make_analyzed_report(id="r3", district="Manhattan", category="Roads",
                             sentiment="positive", severity=2,
                             text="Road finally fixed", coordinates=(40.72, -74.01)),
        make_report(id="r4", district="Queens", text="Broken POTHOLE near school",
                    coordinates=(40.73, -73.8)),
    ]


class TestFilterReports:
    def test_all_wildcards_return_everything(self, reports):
        assert filter_reports(reports, FilterState()) == reports

    def test_category_only(self, reports):
        result = filter_reports(reports, FilterState(category="Roads"))
        assert [r.id for r in result] == ["r1", "r3"]
        assert all(r.category == "Roads" for r in result)

    def test_and_semantics(self, reports):
        result = filter_reports(reports, FilterState(category="Roads", sentiment="negative"))
        assert [r.id for r in result] == ["r1"]

    def test_district(self, reports):
        assert [r.id for r in filter_reports(reports, FilterState(district="Brooklyn"))] == ["r2"]

    def test_search_is_case_insensitive_substring(self, reports):
        result = filter_reports(reports, FilterState(search="pothole"))
        assert [r.id for r in result] == ["r1", "r4"]

    def test_unanalyzed_excluded_by_category_filter(self, reports):
        result = filter_reports(reports, FilterState(category="Roads", search="pothole"))
        assert [r.id for r in result] == ["r1"]

    def test_no_match(self, reports):
        assert filter_reports(reports, FilterState(district="Bronx")) == []


class TestDistrictStats:
    def test_groups_in_first_seen_order(self, reports):
        stats = district_stats(reports)
        assert [s.district for s in stats] == ["Manhattan", "Brooklyn", "Queens"]

    def test_histograms_and_totals(self, reports):
        manhattan = district_stats(reports)[0]
        assert manhattan.total_reports == 2
        assert manhattan.categories == {"Roads": 2}
        assert manhattan.sentiments == {"negative": 1, "positive": 1}

    def test_representative_coordinate_is_first_seen(self, reports):
        manhattan = district_stats(reports)[0]
        assert manhattan.coordinates == (40.71, -74.0)

    def test_unanalyzed_counted_but_not_histogrammed(self, reports):
        queens = district_stats(reports)[2]
        assert queens.total_reports == 1
        assert queens.categories == {}
        assert queens.sentiments == {}

    def test_empty(self):
        assert district_stats([]) == []


class TestSummaryStats:
    NOW = datetime(2024, 3, 2, 0, 0, tzinfo=timezone.utc)

    def test_counts(self, reports):
        stats = summary_stats(reports, now=self.NOW)
        assert stats.total_reports == 4
        assert stats.analyzed_reports == 3
        assert stats.positive_reports == 1
        assert stats.negative_reports == 1
        assert stats.positive_percentage == 25.0
        assert stats.negative_percentage == 25.0
        assert stats.unique_districts == 3
        assert stats.average_severity == round((8 + 4 + 2) / 3, 1)
        assert stats.critical_reports == 1

    def test_recent_window_is_24_hours(self):
        now = datetime(2024, 3, 2, 12, 0, tzinfo=timezone.utc)
        recent = make_report(timestamp="2024-03-02T00:00:00+00:00")
        old = make_report(timestamp="2024-02-28T00:00:00+00:00")
        broken = make_report(timestamp="yesterday")
        assert summary_stats([recent, old, broken], now=now).recent_reports == 1

    def test_empty(self):
        assert summary_stats([]) == SummaryStats()


class TestChartData:
    def test_category_breakdown(self, reports):
        assert category_breakdown(reports) == {"Roads": 2, "Transport": 1}

    def test_severity_buckets(self, reports):
        assert severity_buckets(reports) == {
            "Low (1-3)": 1,
            "Medium (4-6)": 1,
            "High (7-10)": 1,
        }

    def test_severity_buckets_empty(self):
        assert severity_buckets([]) == {"Low (1-3)": 0, "Medium (4-6)": 0, "High (7-10)": 0}

    def test_timeline_groups_by_utc_date_ascending(self):
        reports = [
            make_report(timestamp="2024-03-02T10:00:00+00:00"),
            make_report(timestamp="2024-03-01T23:30:00-05:00"),  # 2024-03-02 UTC
            make_report(timestamp="2024-02-28T08:00:00Z"),
        ]
        assert timeline(reports) == [
            {"date": "2024-02-28", "count": 1},
            {"date": "2024-03-02", "count": 2},
        ]

    def test_timeline_keeps_last_n_dates(self):
        reports = [make_report(timestamp=f"2024-01-{day:02d}T12:00:00+00:00") for day in range(1, 21)]
        result = timeline(reports, days=14)
        assert len(result) == 14
        assert result[0]["date"] == "2024-01-07"
        assert result[-1]["date"] == "2024-01-20"

    def test_filter_options(self, reports):
        assert filter_options(reports) == {
            "districts": ["Manhattan", "Brooklyn", "Queens"],
            "categories": ["Roads", "Transport"],
        }
