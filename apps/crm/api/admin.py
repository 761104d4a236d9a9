"""Admin endpoints for one-shot bootstrap."""

import secrets
from datetime import datetime, timedelta
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from apps.crm.api.deps import get_app_settings
from apps.crm.config import Settings
from apps.crm.database import get_db
from apps.crm.schemas import ApiResponse, SeedRequest, SeedResult
from apps.crm.services.seed import seed_demo_data

logger = structlog.get_logger()
router = APIRouter()


@router.post("/seed", response_model=ApiResponse[SeedResult])
async def seed_database(
    request: Request,
    body: Optional[SeedRequest] = None,
    secret: Optional[str] = Query(None, description="Seed secret (alternative to the body field)"),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
):
    """
    Seed demo data once after deployment.

    Guarded by ``SEED_SECRET`` and only allowed within ``SEED_WINDOW_MINUTES``
    of process start. Running it again is a no-op once any user exists.

    Returns:
        Seed summary
    """
    if not settings.seed_secret:
        raise HTTPException(status_code=403, detail="Seeding is disabled")

    deadline = request.app.state.started_at + timedelta(minutes=settings.seed_window_minutes)
    if datetime.utcnow() > deadline:
        logger.warning("Rejected seed request after window closed", deadline=deadline.isoformat())
        raise HTTPException(status_code=403, detail="Seeding window has closed")

    provided = (body.secret if body else None) or secret or ""
    if not secrets.compare_digest(provided.encode(), settings.seed_secret.encode()):
        logger.warning("Rejected seed request with invalid secret")
        raise HTTPException(status_code=401, detail="Invalid seed secret")

    result = seed_demo_data(db, settings.default_user_email, settings.default_user_name)
    message = "Demo data created" if result.seeded else "Database already contains data, skipped"
    return ApiResponse(data=result, message=message)
