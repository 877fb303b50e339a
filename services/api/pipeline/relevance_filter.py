"""
Relevance gate for raw posts, applied before normalization.

A post is kept when all of these hold:
  1. lowercased "title selftext" contains a relevance keyword
  2. that combined text is longer than 20 characters
  3. score > -5
  4. title longer than 5 characters, or a non-empty body

Within a batch only the first post seen for each source id survives.
Inputs are never mutated and output order follows input order.
"""

import logging
from typing import Iterable, List, Sequence

from services.api.classification.taxonomy import RELEVANCE_KEYWORDS
from services.api.reports.types import RawPost

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 20
MIN_SCORE_EXCLUSIVE = -5
MIN_TITLE_LENGTH = 5


def combined_text(post: RawPost) -> str:
    return f"{post.title} {post.selftext}".lower()


def has_relevant_keyword(
    text_lower: str,
    keywords: Sequence[str] = RELEVANCE_KEYWORDS,
) -> bool:
    return any(keyword in text_lower for keyword in keywords)


def is_relevant_post(
    post: RawPost,
    keywords: Sequence[str] = RELEVANCE_KEYWORDS,
) -> bool:
    """Apply the four relevance predicates to one post."""
    text = combined_text(post)
    has_keyword = has_relevant_keyword(text, keywords)
    has_min_length = len(text) > MIN_TEXT_LENGTH
    has_decent_score = post.score > MIN_SCORE_EXCLUSIVE
    # Image-only posts have a short title and no body
    has_text = len(post.title) > MIN_TITLE_LENGTH or len(post.selftext) > 0
    return has_keyword and has_min_length and has_decent_score and has_text


def dedupe_posts(posts: Iterable[RawPost]) -> List[RawPost]:
    """Keep the first occurrence of each source post id."""
    seen: set[str] = set()
    unique: List[RawPost] = []
    for post in posts:
        if post.id in seen:
            continue
        seen.add(post.id)
        unique.append(post)
    return unique


def filter_relevant(
    posts: Sequence[RawPost],
    keywords: Sequence[str] = RELEVANCE_KEYWORDS,
) -> List[RawPost]:
    """Relevance filter plus within-batch dedup by source id."""
    relevant = [post for post in posts if is_relevant_post(post, keywords)]
    unique = dedupe_posts(relevant)
    logger.info(
        "Relevance filter: %d posts in, %d relevant, %d after dedup",
        len(posts), len(relevant), len(unique),
    )
    return unique
