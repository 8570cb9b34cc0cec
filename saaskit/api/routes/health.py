"""
Health Check Routes - liveness and readiness probes.

- GET /health       : the process is up
- GET /health/ready : the database answers
"""
from datetime import datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from saaskit import __version__
from saaskit.core.logging_config import get_logger
from saaskit.database.connection import get_database
from saaskit.models.chat import HealthResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


@router.get("", response_model=HealthResponse, summary="Liveness check")
async def health_check() -> HealthResponse:
    """Returns 200 as long as the API process is responsive."""
    logger.debug("Health check requested")
    return HealthResponse(status="healthy", version=__version__, timestamp=datetime.utcnow())


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness check",
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
)
def readiness_check():
    """Returns 200 when the database answers ``SELECT 1``, 503 otherwise."""
    database_ok = get_database().check_connection()
    response = HealthResponse(
        status="ready" if database_ok else "unavailable",
        version=__version__,
        database=database_ok,
        timestamp=datetime.utcnow(),
    )
    if not database_ok:
        logger.warning("Readiness check failed: database unreachable")
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))
    return response
