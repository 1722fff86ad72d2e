"""Health check: database connectivity and token subsystem readiness."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(request: Request, db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """Used by load balancers and monitoring."""
    db_status = "connected" if check_db_connected(db) else "disconnected"
    token_status = (
        "ready" if getattr(request.app.state, "token_provider", None) is not None else "unavailable"
    )
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        tokens=token_status,
    )
