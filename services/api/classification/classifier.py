"""
Heuristic report classifier: category, sentiment, emotion, severity, keywords.

Pure text-in / result-out. No I/O, no hidden state: the same text and
taxonomy always produce the same AnalysisResult, and every input
(including "") yields a complete result.

Scoring rules:
  category   keyword hits + 1.5 x negative-indicator hits per category;
             strictly highest wins, ties go to the earlier-declared
             category, all-zero falls back to "Other"
  sentiment  negative = 2 x indicator hits (all categories)
                        + intensifier hits + negative-word hits
             positive = positive-word hits
             negative if negative > positive + 1 (complaint-corpus bias),
             positive if positive > negative, else neutral
  severity   3 + 4/critical + 3/high + 2/medium - 1/low + 1/intensifier,
             clamped to [1, 10]
  keywords   top 5 non-stop-word tokens (len > 2) by frequency,
             ties in first-occurrence order
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field

from services.api.classification.taxonomy import (
    CRITICAL_WEIGHT,
    DEFAULT_TAXONOMY,
    HIGH_WEIGHT,
    INDICATOR_SENTIMENT_WEIGHT,
    INTENSIFIER_WEIGHT,
    LOW_WEIGHT,
    MEDIUM_WEIGHT,
    SENTIMENT_DEFAULT_EMOTION,
    SEVERITY_BASELINE,
    SEVERITY_MAX,
    SEVERITY_MIN,
    Taxonomy,
)

NEGATIVE_INDICATOR_WEIGHT = 1.5
SENTIMENT_NEGATIVE_BIAS = 1
MAX_KEYWORDS = 5
MIN_TOKEN_LENGTH = 3

_PUNCTUATION_RE = re.compile(r"[^\w\s]")


@dataclass
class AnalysisResult:
    """Classifier output for a single report text."""
    category: str
    sentiment: str  # positive | negative | neutral
    emotion: str
    severity: int  # 1-10
    keywords: list[str] = field(default_factory=list)


def _count_hits(text_lower: str, terms) -> int:
    """Number of distinct terms contained in text (substring match)."""
    return sum(1 for term in terms if term in text_lower)


# ---------------------------------------------------------------------------
# Individual scorers
# ---------------------------------------------------------------------------

def category_scores(text: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> dict[str, float]:
    """Score every category in declaration order."""
    text_lower = text.lower()
    return {
        rule.name: (
            _count_hits(text_lower, rule.keywords)
            + NEGATIVE_INDICATOR_WEIGHT * _count_hits(text_lower, rule.negative_indicators)
        )
        for rule in taxonomy.categories
    }


def infer_category(text: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    best_name = taxonomy.fallback_category
    best_score = 0.0
    for name, score in category_scores(text, taxonomy).items():
        # strict ">" keeps the earliest-declared category on ties
        if score > best_score:
            best_name = name
            best_score = score
    return best_name


def sentiment_scores(text: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> tuple[int, int]:
    """Return (negative_score, positive_score)."""
    text_lower = text.lower()
    negative = (
        INDICATOR_SENTIMENT_WEIGHT * _count_hits(text_lower, taxonomy.all_negative_indicators)
        + _count_hits(text_lower, taxonomy.negative_intensifiers)
        + _count_hits(text_lower, taxonomy.negative_words)
    )
    positive = _count_hits(text_lower, taxonomy.positive_words)
    return negative, positive


def infer_sentiment(text: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    negative, positive = sentiment_scores(text, taxonomy)
    if negative > positive + SENTIMENT_NEGATIVE_BIAS:
        return "negative"
    if positive > negative:
        return "positive"
    return "neutral"


def score_severity(text: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> int:
    text_lower = text.lower()
    tiers = taxonomy.severity
    score = (
        SEVERITY_BASELINE
        + CRITICAL_WEIGHT * _count_hits(text_lower, tiers.critical)
        + HIGH_WEIGHT * _count_hits(text_lower, tiers.high)
        + MEDIUM_WEIGHT * _count_hits(text_lower, tiers.medium)
        + LOW_WEIGHT * _count_hits(text_lower, tiers.low)
        + INTENSIFIER_WEIGHT * _count_hits(text_lower, taxonomy.negative_intensifiers)
    )
    return max(SEVERITY_MIN, min(SEVERITY_MAX, score))


def infer_emotion(
    text: str,
    sentiment: str,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> str:
    """
    Pick the emotion with the most keyword hits.

    With no hits the emotion follows the sentiment:
    negative -> frustration, positive -> satisfaction, neutral -> neutral.
    """
    text_lower = text.lower()
    best_emotion = None
    best_hits = 0
    for emotion, terms in taxonomy.emotions.items():
        hits = _count_hits(text_lower, terms)
        if hits > best_hits:
            best_emotion = emotion
            best_hits = hits
    if best_emotion is None:
        return SENTIMENT_DEFAULT_EMOTION.get(sentiment, "neutral")
    return best_emotion


def extract_keywords(
    text: str,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
    limit: int = MAX_KEYWORDS,
) -> list[str]:
    tokens = _PUNCTUATION_RE.sub("", text.lower()).split()
    counts = Counter(
        token
        for token in tokens
        if len(token) >= MIN_TOKEN_LENGTH and token not in taxonomy.stop_words
    )
    # Counter keeps first-occurrence order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [token for token, _ in ranked[:limit]]


# ---------------------------------------------------------------------------
# Public entrypoint
# ---------------------------------------------------------------------------

def classify(text: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> AnalysisResult:
    """Classify one report text. Never raises for string input."""
    text = text or ""
    sentiment = infer_sentiment(text, taxonomy)
    return AnalysisResult(
        category=infer_category(text, taxonomy),
        sentiment=sentiment,
        emotion=infer_emotion(text, sentiment, taxonomy),
        severity=score_severity(text, taxonomy),
        keywords=extract_keywords(text, taxonomy),
    )
