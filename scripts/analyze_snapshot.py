#!/usr/bin/env python3
"""
Offline report analysis for a saved Reddit snapshot.

Reads raw posts from a JSON file, runs them through the same pipeline the
service uses (relevance filter -> normalizer -> merge -> classifier) and
writes an export document the dashboard can import.

Accepted input shapes:
  - a list of post objects
  - a Reddit listing: {"data": {"children": [{"data": {...}}, ...]}}
  - a list of listings

Usage:
    python scripts/analyze_snapshot.py snapshot.json
    python scripts/analyze_snapshot.py snapshot.json -o reports.json --seed 42
    python scripts/analyze_snapshot.py snapshot.json --district-fallback unknown
    python scripts/analyze_snapshot.py snapshot.json --merge-into previous_export.json
"""

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from services.api.pipeline.ingest import ingest_posts
from services.api.pipeline.merge import analyze_reports, apply_analysis, prioritize_reports
from services.api.pipeline.normalizer import FALLBACK_RANDOM, VALID_FALLBACKS, Normalizer
from services.api.reports.aggregation import summary_stats
from services.api.reports.transfer import ImportValidationError, export_document, import_document
from services.api.reports.types import RawPost, Report

logger = logging.getLogger(__name__)


def _listing_children(data: Any) -> list[dict]:
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        children = data["data"].get("children") or []
        return [c["data"] for c in children if isinstance(c, dict) and isinstance(c.get("data"), dict)]
    if isinstance(data, dict):
        return [data]
    return []


def extract_posts(data: Any) -> list[RawPost]:
    """Flatten any accepted input shape into RawPosts, skipping invalid items."""
    items: list[dict] = []
    if isinstance(data, list):
        for entry in data:
            items.extend(_listing_children(entry))
    else:
        items.extend(_listing_children(data))

    posts = []
    skipped = 0
    for item in items:
        try:
            posts.append(RawPost.model_validate(item))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("Skipped %d malformed posts", skipped)
    return posts


def analyze_snapshot(
    posts: list[RawPost],
    existing: list[Report] | None = None,
    normalizer: Normalizer | None = None,
) -> list[Report]:
    """Ingest and classify posts; returns the collection newest first."""
    merged, _stats = ingest_posts(existing or [], posts, normalizer)
    apply_analysis(merged, analyze_reports(merged))
    return prioritize_reports(merged)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Classify a Reddit snapshot into a StreetVoice export document"
    )
    parser.add_argument("input", type=Path, help="JSON file of raw posts or Reddit listings")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Output path (default: stdout)")
    parser.add_argument("--merge-into", type=Path, default=None,
                        help="Existing export document to merge new reports into")
    parser.add_argument("--district-fallback", choices=sorted(VALID_FALLBACKS),
                        default=FALLBACK_RANDOM)
    parser.add_argument("--seed", type=int, default=None, help="Seed for district/jitter randomness")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        with open(args.input, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Cannot read %s: %s", args.input, exc)
        return 1

    existing: list[Report] = []
    if args.merge_into is not None:
        try:
            existing = import_document(args.merge_into.read_bytes())
        except (OSError, ImportValidationError) as exc:
            logger.error("Cannot merge into %s: %s", args.merge_into, exc)
            return 1

    normalizer = Normalizer(
        district_fallback=args.district_fallback,
        rng=random.Random(args.seed),
    )
    reports = analyze_snapshot(extract_posts(data), existing, normalizer)

    stats = summary_stats(reports)
    logger.info(
        "Snapshot analyzed: %d reports (%d negative, %d critical, avg severity %.1f)",
        stats.total_reports, stats.negative_reports,
        stats.critical_reports, stats.average_severity,
    )

    document = json.dumps(export_document(reports), indent=2)
    if args.output is None:
        sys.stdout.write(document + "\n")
    else:
        args.output.write_text(document + "\n", encoding="utf-8")
        logger.info("Wrote %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
