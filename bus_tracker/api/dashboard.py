from fastapi import APIRouter, Depends, Request
from ..schemas import User, DashboardStats
from ..storage import Storage, get_storage
from ..core.permissions import get_current_user

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    request: Request,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Headline counts and the latest notifications for the admin dashboard"""
    recent = request.app.state.settings.dashboard_recent_notifications
    return storage.get_dashboard_stats(recent=recent)
