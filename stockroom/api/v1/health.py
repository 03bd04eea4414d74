"""Health check endpoint with optional database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockroom.api.v1.auth import get_app_settings
from stockroom.core.config import Settings
from stockroom.core.database import check_db_connected, get_db
from stockroom.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        auth_role_source=settings.AUTH_ROLE_SOURCE,
        database=db_status,
    )
