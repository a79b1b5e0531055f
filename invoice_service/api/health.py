"""
Health check endpoint
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from datetime import datetime, timezone

from invoice_service import __version__
from invoice_service.database import get_db
from invoice_service.config import settings
from invoice_service.storage.artifact_store import ArtifactStore, get_artifact_store

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(
    db: Session = Depends(get_db),
    store: ArtifactStore = Depends(get_artifact_store)
):
    """
    Health check endpoint

    Checks:
    - Service status
    - Database connectivity
    - Artifact storage availability
    """
    # Check database
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    storage_status = "healthy" if store.is_available() else "unhealthy: storage directory unavailable"

    overall_status = "healthy" if (db_status == "healthy" and storage_status == "healthy") else "unhealthy"

    return {
        "service": settings.SERVICE_NAME,
        "status": overall_status,
        "database": db_status,
        "storage": storage_status,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/")
def root():
    """Root endpoint"""
    return {
        "service": settings.SERVICE_NAME,
        "version": __version__,
        "docs": "/docs"
    }
