"""
Liveness and readiness probes.

/health answers as long as the process is up. /health/ready also says
whether visitors can get past the config error page and whether anyone
can reach the coach dashboard.
"""

import logging
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ...config.settings import Settings
from ..dependencies import SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    name: str
    status: str  # "ok" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


def _configuration_check(settings: Settings) -> ReadinessCheck:
    missing = settings.validate_required_fields()
    if missing:
        return ReadinessCheck(
            name="configuration",
            status="error",
            error=f"Missing required fields: {', '.join(missing)}",
        )
    return ReadinessCheck(name="configuration", status="ok")


def _backend_check(settings: Settings) -> ReadinessCheck:
    if settings.supabase_mock_mode:
        return ReadinessCheck(name="backend", status="ok", error="mock mode")
    if settings.is_backend_configured:
        return ReadinessCheck(name="backend", status="ok")
    return ReadinessCheck(
        name="backend",
        status="error",
        error="Supabase URL and anon key not configured",
    )


@router.get(
    "",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="200 while the process is running. Touches nothing external.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        details={
            "mock_mode": settings.supabase_mock_mode,
            "backend_configured": settings.is_backend_configured,
            "demo_access": settings.demo_access_enabled,
        }
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="200 when the portal can serve signed-in users, 503 otherwise.",
    responses={503: {"description": "Not ready", "model": ReadinessResponse}},
)
async def readiness_check(settings: SettingsDep, response: Response) -> ReadinessResponse:
    checks = [_configuration_check(settings), _backend_check(settings)]

    ready = all(check.status == "ok" for check in checks)
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={"failed": [c.name for c in checks if c.status != "ok"]}
        )

    return ReadinessResponse(
        status="ready" if ready else "not_ready",
        version=__version__,
        checks=checks,
    )
