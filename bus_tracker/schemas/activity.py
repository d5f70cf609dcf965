from pydantic import BaseModel, Field
from typing import Optional, Literal, Dict, Any, List
from datetime import datetime

NotificationType = Literal[
    "arrival",
    "will_arrive",
    "delay",
    "round_started",
    "round_completed",
    "absent",
    "student_on_bus",
    "student_off_bus",
    "arrived_to_school",
    "general",
]


# Notification schemas
class NotificationBase(BaseModel):
    type: NotificationType
    message: str
    round_id: Optional[int] = None
    bus_id: Optional[int] = None
    student_id: Optional[int] = None
    sender_id: Optional[int] = None
    recipient_id: Optional[int] = None


class NotificationCreate(NotificationBase):
    pass


class Notification(NotificationBase):
    id: int
    timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True


# Activity log schemas
class ActivityLogBase(BaseModel):
    action: str
    details: Optional[Dict[str, Any]] = Field(default_factory=dict)
    user_id: Optional[int] = None


class ActivityLogCreate(ActivityLogBase):
    pass


class ActivityLog(ActivityLogBase):
    id: int
    timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True


# Dashboard summary
class DashboardStats(BaseModel):
    total_students: int
    total_parents: int
    total_drivers: int
    total_buses: int
    active_rounds: int
    recent_notifications: List[Notification]
