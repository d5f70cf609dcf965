from fastapi import APIRouter, BackgroundTasks, Depends, status
from typing import List, Optional
from ..schemas import User, Notification, NotificationCreate
from ..storage import Storage, get_storage
from ..core import activity
from ..core.activity import record_activity
from ..core.permissions import get_current_user

router = APIRouter(prefix="/api", tags=["notifications"])


@router.get("/notifications", response_model=List[Notification])
def get_notifications(
    recipient_id: Optional[int] = None,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Notifications, newest first"""
    return storage.get_notifications(recipient_id)


@router.post("/notifications", response_model=Notification, status_code=status.HTTP_201_CREATED)
def send_notification(
    notification: NotificationCreate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Send a notification; the sender defaults to the current user"""
    if notification.sender_id is None:
        notification = notification.model_copy(update={"sender_id": current_user.id})

    db_notification = storage.create_notification(notification)
    background_tasks.add_task(
        record_activity, storage, activity.SEND_NOTIFICATION,
        {"notification_id": db_notification.id, "type": db_notification.type}, current_user.id
    )
    return db_notification
