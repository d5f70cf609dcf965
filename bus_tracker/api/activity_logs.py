from fastapi import APIRouter, Depends
from typing import List
from ..schemas import User, ActivityLog
from ..storage import Storage, get_storage
from ..core.permissions import get_current_user

router = APIRouter(prefix="/api", tags=["activity-logs"])


@router.get("/activity-logs", response_model=List[ActivityLog])
def get_activity_logs(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Audit trail, newest first"""
    return storage.get_activity_logs()
