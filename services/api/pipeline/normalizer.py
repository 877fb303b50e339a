"""
Raw post -> Report normalization.

  - subreddit -> (city, districts) via city_configs, "Unknown" when unmapped
  - district: first configured district named in the post text
    (case-insensitive substring), otherwise the fallback policy
  - coordinates: city reference point + independent uniform offset in
    [-0.05, 0.05] degrees per axis. These are scatter positions for the
    map, not geocoded locations of the reported problem.
  - text: title + ". " + body (when body non-empty), cut to 500 chars
  - id: "reddit_" + source id; analyzed=False, analysis fields unset

District fallback policies:
  random   uniform pick from the city's districts (original behaviour)
  unknown  leave the district as "Unknown"

Randomness comes from an injectable random.Random so tests and
reproducible runs can seed it.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from services.api.pipeline.city_configs import UNKNOWN, CityConfig, resolve_subreddit
from services.api.reports.types import RawPost, Report

logger = logging.getLogger(__name__)

ID_PREFIX = "reddit_"
MAX_TEXT_LENGTH = 500
JITTER_DEGREES = 0.05

FALLBACK_RANDOM = "random"
FALLBACK_UNKNOWN = "unknown"
VALID_FALLBACKS = frozenset({FALLBACK_RANDOM, FALLBACK_UNKNOWN})


@dataclass
class Normalizer:
    """Converts RawPosts to Reports with a fixed fallback policy and RNG."""
    district_fallback: str = FALLBACK_RANDOM
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self) -> None:
        if self.district_fallback not in VALID_FALLBACKS:
            raise ValueError(
                f"district_fallback must be one of {sorted(VALID_FALLBACKS)}, "
                f"got {self.district_fallback!r}"
            )

    def choose_district(self, text: str, city: CityConfig) -> str:
        if not city.districts:
            return UNKNOWN

        text_lower = text.lower()
        for district in city.districts:
            if district.lower() in text_lower:
                return district

        if self.district_fallback == FALLBACK_UNKNOWN:
            return UNKNOWN
        return self.rng.choice(city.districts)

    def jitter(self, reference: tuple[float, float]) -> tuple[float, float]:
        lat, lng = reference
        return (
            lat + self.rng.uniform(-JITTER_DEGREES, JITTER_DEGREES),
            lng + self.rng.uniform(-JITTER_DEGREES, JITTER_DEGREES),
        )

    def normalize(self, post: RawPost) -> Report:
        city = resolve_subreddit(post.subreddit)
        if city.name == UNKNOWN:
            logger.debug("Unmapped subreddit %r for post %s", post.subreddit, post.id)

        district = self.choose_district(f"{post.title} {post.selftext}", city)

        return Report(
            id=f"{ID_PREFIX}{post.id}",
            text=build_text(post.title, post.selftext),
            location=f"{city.name}, {district}",
            district=district,
            coordinates=self.jitter(city.reference_point),
            timestamp=utc_iso(post.created_utc),
            analyzed=False,
        )


def build_text(title: str, body: str) -> str:
    full_text = f"{title}. {body}" if body else title
    return full_text[:MAX_TEXT_LENGTH]


def utc_iso(created_utc: float) -> str:
    return datetime.fromtimestamp(created_utc, tz=timezone.utc).isoformat()


def normalize(
    post: RawPost,
    *,
    district_fallback: str = FALLBACK_RANDOM,
    rng: Optional[random.Random] = None,
) -> Report:
    """One-shot convenience wrapper around Normalizer."""
    normalizer = Normalizer(
        district_fallback=district_fallback,
        rng=rng if rng is not None else random.Random(),
    )
    return normalizer.normalize(post)
