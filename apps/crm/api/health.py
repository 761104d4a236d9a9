"""Health check endpoint."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apps.crm.database import get_db

logger = structlog.get_logger()
router = APIRouter()


@router.get("/healthz")
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint."""
    try:
        # Test database connection
        db.execute(text("SELECT 1"))

        return {"status": "ok", "database": "connected"}
    except SQLAlchemyError as e:
        logger.error("Health check failed", error=str(e))
        return {"status": "error", "database": "disconnected"}
