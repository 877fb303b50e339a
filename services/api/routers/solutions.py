"""
Solutions endpoints.

GET /solutions              per-report plans for analyzed, categorised
                            reports plus city-wide initiatives
GET /solutions/{report_id}  plan for a single report
"""

from fastapi import APIRouter, HTTPException, Request

from services.api.reports.solutions import (
    generate_batch_solutions,
    generate_city_wide_solutions,
    generate_solution,
)

router = APIRouter(prefix="/solutions", tags=["solutions"])


@router.get("")
async def list_solutions(request: Request) -> dict:
    reports = request.app.state.report_service.reports
    return {
        "success": True,
        "data": {
            "reports": [s.to_dict() for s in generate_batch_solutions(reports)],
            "cityWide": [s.to_dict() for s in generate_city_wide_solutions(reports)],
        },
        "requestId": request.state.request_id,
    }


@router.get("/{report_id}")
async def report_solution(report_id: str, request: Request) -> dict:
    reports = request.app.state.report_service.reports
    report = next((r for r in reports if r.id == report_id), None)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return {
        "success": True,
        "data": generate_solution(report).to_dict(),
        "requestId": request.state.request_id,
    }
