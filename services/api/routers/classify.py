"""
Classification endpoint: POST /classify

Runs the heuristic classifier on arbitrary text without touching the
report collection. Useful for checking how a phrase will be scored.
"""

from dataclasses import asdict

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from services.api.classification import classify

router = APIRouter(tags=["classify"])

MAX_TEXT_LENGTH = 10_000


class ClassifyRequest(BaseModel):
    text: str = Field(max_length=MAX_TEXT_LENGTH)


@router.post("/classify")
async def classify_text(body: ClassifyRequest, request: Request) -> dict:
    return {
        "success": True,
        "data": asdict(classify(body.text)),
        "requestId": request.state.request_id,
    }
