"""
Report collection: types, aggregation views, persistence and transfer.

Modules
-------
types         Report / RawPost / FilterState / DistrictStats / SummaryStats
aggregation   Filtering, per-district statistics and dashboard chart data
store         JSON file store (save / load / clear / storage info)
transfer      Export and import documents
solutions     Rule-based remediation suggestions per report and city-wide
service       ReportService, sole owner and writer of the in-memory collection
"""
