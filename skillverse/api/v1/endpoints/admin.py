"""
Admin endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from skillverse.api.deps import require_admin
from skillverse.core.database import get_db
from skillverse.models import User
from skillverse.services.admin import AdminService

router = APIRouter()


@router.delete("/clear-data")
async def clear_data(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    """Delete all courses and blogs"""
    return AdminService.clear_data(db, admin)
