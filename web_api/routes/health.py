"""
Health routes.

Endpoints:
- GET /health - Composite health report (200 when everything is ok, 503 otherwise)
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.health.aggregator import check_health

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Each field is "ok" or "error: <description>"."""

    database: str
    notifier: str
    audit: str
    bot: str


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def health(request: Request) -> JSONResponse:
    """Report database, notifier, audit and bot status."""
    report = await check_health(request.app.state.health_signals)
    body = HealthResponse(**report.to_dict())
    return JSONResponse(status_code=report.status_code, content=body.model_dump())
