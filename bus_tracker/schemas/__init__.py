from .user import User, UserCreate, UserUpdate, UserResponse, Token
from .student import Student, StudentCreate, Absence, AbsenceCreate
from .bus import (
    Bus, BusCreate,
    BusRound, BusRoundCreate,
    RoundStudent, RoundStudentCreate, RoundStudentAssign,
    Location, LocationCreate
)
from .activity import (
    Notification, NotificationCreate,
    ActivityLog, ActivityLogCreate,
    DashboardStats
)
from .validation import validate_insertable, format_errors

__all__ = [
    "User", "UserCreate", "UserUpdate", "UserResponse", "Token",
    "Student", "StudentCreate", "Absence", "AbsenceCreate",
    # Fleet and routing
    "Bus", "BusCreate",
    "BusRound", "BusRoundCreate",
    "RoundStudent", "RoundStudentCreate", "RoundStudentAssign",
    "Location", "LocationCreate",
    # Messaging and audit
    "Notification", "NotificationCreate",
    "ActivityLog", "ActivityLogCreate",
    "DashboardStats",
    "validate_insertable", "format_errors"
]
