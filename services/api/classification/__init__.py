"""
Report classification for Street Voice.

Keyword-table heuristics only, no model calls. Used by:
  - batch analysis of ingested reports (ReportService.analyze)
  - the ad-hoc POST /classify endpoint

No I/O in this package: pure text-in / result-out.
"""

from services.api.classification.classifier import (
    AnalysisResult,
    classify,
    extract_keywords,
    infer_category,
    infer_emotion,
    infer_sentiment,
    score_severity,
)
from services.api.classification.taxonomy import DEFAULT_TAXONOMY, Taxonomy

__all__ = [
    "AnalysisResult",
    "DEFAULT_TAXONOMY",
    "Taxonomy",
    "classify",
    "extract_keywords",
    "infer_category",
    "infer_emotion",
    "infer_sentiment",
    "score_severity",
]
