"""
Keyword taxonomy: static lookup tables that drive report classification.

Category rules (declaration order is the tie-break order):
  Housing, Roads, Transport, Safety, Education, Healthcare,
  Environment, Urban Development  (fallback: Other)

Severity tiers:
  critical  +4 per match
  high      +3 per match
  medium    +2 per match
  low       -1 per match

All matching against these tables is case-insensitive substring
containment, not word-boundary matching. "rat" (Environment) therefore
also fires inside "moderate" or "separate". Tables are immutable and
built once at import; callers receive them by reference.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class CategoryRule:
    """Keywords and negative indicators for one report category."""
    name: str
    keywords: tuple[str, ...]
    negative_indicators: tuple[str, ...]


@dataclass(frozen=True)
class SeverityTiers:
    critical: tuple[str, ...]
    high: tuple[str, ...]
    medium: tuple[str, ...]
    low: tuple[str, ...]


@dataclass(frozen=True)
class Taxonomy:
    """Everything the classifier needs, bundled so it can be swapped in tests."""
    categories: tuple[CategoryRule, ...]
    fallback_category: str
    severity: SeverityTiers
    negative_intensifiers: tuple[str, ...]
    negative_words: tuple[str, ...]
    positive_words: tuple[str, ...]
    emotions: Mapping[str, tuple[str, ...]]
    stop_words: frozenset[str]

    @property
    def category_names(self) -> tuple[str, ...]:
        return tuple(rule.name for rule in self.categories)

    @property
    def all_negative_indicators(self) -> tuple[str, ...]:
        """Negative indicators across every category, in declaration order."""
        return tuple(
            indicator
            for rule in self.categories
            for indicator in rule.negative_indicators
        )


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

FALLBACK_CATEGORY = "Other"

CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        name="Housing",
        keywords=(
            "apartment", "rent", "landlord", "tenant", "housing", "building",
            "elevator", "heating", "plumbing", "eviction", "utilities",
        ),
        negative_indicators=(
            "no heat", "no hot water", "broken elevator", "leaking",
            "evicted", "mold", "roaches",
        ),
    ),
    CategoryRule(
        name="Roads",
        keywords=(
            "pothole", "road", "street", "pavement", "asphalt", "sidewalk",
            "crosswalk", "intersection", "highway", "bridge", "curb",
        ),
        negative_indicators=(
            "damaged", "cracked", "crumbling", "uneven", "flat tire", "sinkhole",
        ),
    ),
    CategoryRule(
        name="Transport",
        keywords=(
            "subway", "bus", "train", "metro", "transit", "commute",
            "station", "parking", "traffic", "tram",
        ),
        negative_indicators=(
            "delayed", "delays", "cancelled", "overcrowded",
            "no announcements", "stuck in traffic",
        ),
    ),
    CategoryRule(
        name="Safety",
        keywords=(
            "crime", "police", "robbery", "theft", "stolen", "assault",
            "streetlight", "lighting", "violence", "shooting", "break-in",
        ),
        negative_indicators=(
            "unsafe", "dangerous", "threatening", "mugged", "harassed",
            "vandalized",
        ),
    ),
    CategoryRule(
        name="Education",
        keywords=(
            "school", "teacher", "student", "classroom", "university",
            "college", "library", "tuition", "kindergarten", "education",
        ),
        negative_indicators=(
            "underfunded", "no teachers", "closed school",
        ),
    ),
    CategoryRule(
        name="Healthcare",
        keywords=(
            "hospital", "clinic", "doctor", "ambulance", "medical", "health",
            "pharmacy", "nurse", "emergency room", "patient",
        ),
        negative_indicators=(
            "waiting list", "understaffed", "no appointment", "turned away",
        ),
    ),
    CategoryRule(
        name="Environment",
        keywords=(
            "trash", "garbage", "litter", "pollution", "noise", "smell",
            "air quality", "recycling", "rat", "sewage", "dumping",
        ),
        negative_indicators=(
            "overflowing", "stinks", "contaminated", "polluted", "infested",
        ),
    ),
    CategoryRule(
        name="Urban Development",
        keywords=(
            "construction", "development", "zoning", "permit", "planning",
            "infrastructure", "renovation", "playground", "public park",
            "bench",
        ),
        negative_indicators=(
            "abandoned", "eyesore", "unfinished", "neglected", "boarded up",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Severity tiers
# ---------------------------------------------------------------------------

SEVERITY_BASELINE = 3
SEVERITY_MIN = 1
SEVERITY_MAX = 10

CRITICAL_WEIGHT = 4
HIGH_WEIGHT = 3
MEDIUM_WEIGHT = 2
LOW_WEIGHT = -1
INTENSIFIER_WEIGHT = 1

SEVERITY_TIERS = SeverityTiers(
    critical=(
        "emergency", "injured", "injury", "fire", "collapse", "gas leak",
        "explosion", "flooding", "no water", "no heat", "power outage",
        "death", "died",
    ),
    high=(
        "damaged", "broken", "dangerous", "unsafe", "accident", "crash",
        "blocked", "leak", "outage", "stolen", "theft", "assault",
    ),
    medium=(
        "delay", "late", "dirty", "noise", "loud", "pothole", "crack",
        "smell", "trash", "garbage", "repair", "fix", "slow", "crowded",
    ),
    low=(
        "minor", "small", "slight", "suggestion", "would be nice", "idea",
        "cosmetic",
    ),
)


# ---------------------------------------------------------------------------
# Sentiment lexicons
# ---------------------------------------------------------------------------

# Weights: cross-category negative indicator 2, everything below 1.
INDICATOR_SENTIMENT_WEIGHT = 2

NEGATIVE_INTENSIFIERS: tuple[str, ...] = (
    "asap", "urgent", "immediately", "unacceptable", "ridiculous",
    "nightmare", "every day", "for weeks", "for months", "again", "still",
    "massive", "huge", "fed up", "sick of",
)

NEGATIVE_WORDS: tuple[str, ...] = (
    "bad", "terrible", "awful", "horrible", "worst", "broken", "problem",
    "issue", "complaint", "annoying", "frustrat", "disappoint", "hate",
    "poor", "fail", "dirty", "angry", "disgusting",
)

POSITIVE_WORDS: tuple[str, ...] = (
    "good", "great", "excellent", "thank", "love", "nice", "clean",
    "safer", "improved", "happy", "appreciate", "helpful", "wonderful",
    "awesome", "finally fixed", "better",
)


# ---------------------------------------------------------------------------
# Emotion lexicon; declaration order breaks ties
# ---------------------------------------------------------------------------

EMOTION_LEXICON: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "anger": (
        "angry", "furious", "outrageous", "unacceptable", "ridiculous",
        "pissed", "fed up", "sick of",
    ),
    "frustration": (
        "frustrat", "annoying", "again", "still", "every day", "waiting",
        "nightmare",
    ),
    "disappointment": (
        "disappoint", "expected better", "let down", "shame",
    ),
    "concern": (
        "worried", "concern", "afraid", "scared", "dangerous", "unsafe",
        "risk",
    ),
    "satisfaction": (
        "thank", "finally fixed", "improved", "appreciate", "satisfied",
        "resolved",
    ),
    "joy": (
        "love", "happy", "wonderful", "awesome", "amazing",
    ),
})

# Used when no emotion keyword fires
SENTIMENT_DEFAULT_EMOTION: Mapping[str, str] = MappingProxyType({
    "negative": "frustration",
    "positive": "satisfaction",
    "neutral": "neutral",
})

VALID_EMOTIONS: frozenset[str] = frozenset(EMOTION_LEXICON) | {"neutral"}
VALID_SENTIMENTS: frozenset[str] = frozenset({"positive", "negative", "neutral"})


# ---------------------------------------------------------------------------
# Keyword extraction stop words (tokens of length <= 2 are dropped anyway)
# ---------------------------------------------------------------------------

STOP_WORDS: frozenset[str] = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "any", "can",
    "had", "her", "was", "one", "our", "out", "has", "have", "this", "that",
    "with", "they", "been", "from", "will", "just", "what", "when", "your",
    "there", "their", "about", "would", "could", "should", "into", "than",
    "then", "them", "some", "very", "also", "more", "these", "those",
    "were", "which", "while", "where", "who", "why", "how", "its", "his",
    "she", "him", "did", "does", "doing", "being", "because", "over",
    "under", "after", "before", "get", "got", "anyone", "else", "even",
    "only", "other", "such", "here", "like", "really", "every", "since",
    "dont", "cant", "ive", "thats",
})


# ---------------------------------------------------------------------------
# Ingestion relevance keywords
# ---------------------------------------------------------------------------

RELEVANCE_KEYWORDS: tuple[str, ...] = (
    # General issues
    "problem", "issue", "complaint", "broken", "not working", "terrible",
    "awful", "dirty", "trash", "garbage", "maintenance", "repair", "fix",
    "flooding",
    # Transport
    "traffic", "subway", "bus", "train", "parking", "road", "construction",
    "delayed", "cancelled", "metro", "transit",
    # City services
    "power outage", "blackout", "water", "heat", "heating",
    "air conditioning", "elevator", "lift", "building", "apartment", "rent",
    "landlord",
    # Safety and lighting
    "lighting", "streetlight", "safety", "crime", "noise", "loud",
    # Infrastructure
    "pothole", "sidewalk", "crosswalk", "bridge", "tunnel", "wifi",
    "internet", "cell service", "phone service",
)


DEFAULT_TAXONOMY = Taxonomy(
    categories=CATEGORY_RULES,
    fallback_category=FALLBACK_CATEGORY,
    severity=SEVERITY_TIERS,
    negative_intensifiers=NEGATIVE_INTENSIFIERS,
    negative_words=NEGATIVE_WORDS,
    positive_words=POSITIVE_WORDS,
    emotions=EMOTION_LEXICON,
    stop_words=STOP_WORDS,
)

VALID_CATEGORIES: frozenset[str] = frozenset(DEFAULT_TAXONOMY.category_names) | {
    FALLBACK_CATEGORY
}
