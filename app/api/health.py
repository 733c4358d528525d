"""Liveness endpoint reporting environment and database reachability."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Used by load balancers; the user store must answer SELECT 1 to report connected."""
    return HealthResponse(
        service="auth",
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
    )
