"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> dict:
    service = request.app.state.report_service
    last_update = service.last_update()
    return {
        "success": True,
        "data": {
            "status": "healthy",
            "version": request.app.state.settings.app_version,
            "reports": len(service.reports),
            "lastUpdate": last_update.isoformat() if last_update else None,
        },
        "requestId": request.state.request_id,
    }
