"""
Health check endpoints
"""

import psutil
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from skillverse.core.config import settings
from skillverse.core.database import DatabaseHealthCheck, get_db

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.APP_VERSION,
    }


@router.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """Detailed health check"""
    health_status = {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "checks": {},
    }

    database = DatabaseHealthCheck.check_connection(db)
    health_status["checks"]["database"] = database
    if database.get("status") != "healthy":
        health_status["status"] = "degraded"

    health_status["checks"]["integrations"] = {
        "cloudinary": settings.cloudinary_configured(),
        "stripe": bool(settings.STRIPE_SECRET_KEY),
        "smtp": settings.smtp_configured(),
        "google": bool(settings.GOOGLE_CLIENT_ID),
    }

    # Check system resources
    memory = psutil.virtual_memory()
    health_status["checks"]["resources"] = {
        "cpu_percent": psutil.cpu_percent(interval=None),
        "memory_percent": memory.percent,
        "memory_available_mb": round(memory.available / (1024 * 1024), 1),
    }

    return health_status
