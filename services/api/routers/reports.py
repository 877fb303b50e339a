"""
Report collection endpoints.

Reads:
  GET    /reports            filtered list (category, sentiment, district, search)
  GET    /reports/options    distinct districts and categories for filter dropdowns
  GET    /reports/stats      summary cards
  GET    /reports/districts  per-district statistics (map + district chart)
  GET    /reports/charts     category / severity / timeline chart data
  GET    /reports/export     export document as a JSON attachment
  GET    /reports/storage    store usage and last update

Mutations (all go through ReportService):
  POST   /reports/ingest     fetch from reddit / mock, or ingest inline posts
  POST   /reports/analyze    classify every unanalyzed report
  POST   /reports/import     replace the collection with an export document
  POST   /reports/save       persist the collection
  POST   /reports/load       reload the collection from the store
  DELETE /reports            clear memory and store
"""

import logging
from dataclasses import asdict
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, model_validator

from services.api.reports.aggregation import (
    DEFAULT_TIMELINE_DAYS,
    category_breakdown,
    district_stats,
    filter_options,
    filter_reports,
    severity_buckets,
    summary_stats,
    timeline,
)
from services.api.reports.transfer import export_document, export_filename, import_document
from services.api.reports.types import ALL, FilterState, RawPost
from services.api.scrapers.base import FetchResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

MAX_INLINE_POSTS = 500


class IngestRequest(BaseModel):
    """Request body for POST /reports/ingest."""

    source: Literal["reddit", "mock", "payload"] = "mock"
    posts: list[RawPost] = Field(default_factory=list, max_length=MAX_INLINE_POSTS)

    @model_validator(mode="after")
    def posts_only_with_payload(self) -> "IngestRequest":
        if self.source == "payload" and not self.posts:
            raise ValueError('source "payload" requires a non-empty posts list')
        if self.source != "payload" and self.posts:
            raise ValueError('posts are only accepted with source "payload"')
        return self


def _envelope(request: Request, data) -> dict:
    return {"success": True, "data": data, "requestId": request.state.request_id}


def _dump(reports) -> list[dict]:
    return [r.model_dump(mode="json", exclude_none=True) for r in reports]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

@router.get("")
async def list_reports(
    request: Request,
    category: str = Query(ALL, max_length=100),
    sentiment: str = Query(ALL, max_length=20),
    district: str = Query(ALL, max_length=100),
    search: str = Query("", max_length=500),
) -> dict:
    filters = FilterState(category=category, sentiment=sentiment, district=district, search=search)
    reports = request.app.state.report_service.reports
    filtered = filter_reports(reports, filters)
    return _envelope(request, {
        "reports": _dump(filtered),
        "count": len(filtered),
        "total": len(reports),
    })


@router.get("/options")
async def report_filter_options(request: Request) -> dict:
    return _envelope(request, filter_options(request.app.state.report_service.reports))


@router.get("/stats")
async def report_stats(request: Request) -> dict:
    stats = summary_stats(request.app.state.report_service.reports)
    return _envelope(request, asdict(stats))


@router.get("/districts")
async def report_districts(request: Request) -> dict:
    stats = district_stats(request.app.state.report_service.reports)
    return _envelope(request, [asdict(s) for s in stats])


@router.get("/charts")
async def report_charts(
    request: Request,
    days: int = Query(DEFAULT_TIMELINE_DAYS, ge=1, le=365),
) -> dict:
    reports = request.app.state.report_service.reports
    return _envelope(request, {
        "categories": category_breakdown(reports),
        "severity": severity_buckets(reports),
        "timeline": timeline(reports, days=days),
    })


@router.get("/export")
async def export_reports(request: Request) -> JSONResponse:
    document = export_document(request.app.state.report_service.reports)
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.get("/storage")
async def storage_status(request: Request) -> dict:
    service = request.app.state.report_service
    info = service.storage_info()
    last_update = service.last_update()
    return _envelope(request, {
        "used": info.used,
        "available": info.available,
        "lastUpdate": last_update.isoformat() if last_update else None,
    })


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

@router.post("/ingest")
async def ingest_reports(body: IngestRequest, request: Request) -> dict:
    service = request.app.state.report_service

    if body.source == "reddit":
        fetch = request.app.state.reddit_client.get_city_complaints
    elif body.source == "mock":
        fetch = request.app.state.reddit_client.get_mock_city_complaints
    else:
        posts = body.posts

        async def fetch() -> FetchResult:
            return FetchResult(posts=posts)

    outcome = await service.ingest_from(fetch)
    stats = outcome.stats
    return _envelope(request, {
        "source": body.source,
        "postsReceived": stats.posts_received,
        "postsRelevant": stats.posts_relevant,
        "reportsAdded": stats.reports_added,
        "duplicatesSkipped": stats.duplicates_skipped,
        "total": len(service.reports),
        "error": outcome.error,
    })


@router.post("/analyze")
async def analyze_collection(request: Request) -> dict:
    service = request.app.state.report_service
    analyzed = service.analyze()
    return _envelope(request, {"analyzed": analyzed, "total": len(service.reports)})


async def _read_limited_body(request: Request, max_bytes: int) -> bytes:
    """Read the request body, rejecting it with 413 once it exceeds max_bytes."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise HTTPException(status_code=413, detail=f"Import body exceeds {max_bytes} bytes")

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise HTTPException(status_code=413, detail=f"Import body exceeds {max_bytes} bytes")
    return bytes(body)


@router.post("/import")
async def import_reports(request: Request) -> dict:
    # Raw body so malformed JSON maps to INVALID_IMPORT rather than a 422
    max_bytes = request.app.state.settings.import_max_bytes
    reports = import_document(await _read_limited_body(request, max_bytes))
    request.app.state.report_service.replace(reports)
    return _envelope(request, {"imported": len(reports)})


@router.post("/save")
async def save_reports(request: Request) -> dict:
    service = request.app.state.report_service
    return _envelope(request, {"saved": service.save(), "count": len(service.reports)})


@router.post("/load")
async def load_reports(request: Request) -> dict:
    return _envelope(request, {"loaded": request.app.state.report_service.load()})


@router.delete("")
async def clear_reports(request: Request) -> dict:
    request.app.state.report_service.clear()
    return _envelope(request, {"cleared": True})
