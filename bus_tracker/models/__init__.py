from ..database import Base
from .user import User
from .student import Student, Absence
from .bus import Bus, BusRound, RoundStudent, Location
from .activity import Notification, ActivityLog

__all__ = [
    "Base",
    "User",
    "Student",
    "Absence",
    # Fleet and routing
    "Bus",
    "BusRound",
    "RoundStudent",
    "Location",
    # Messaging and audit
    "Notification",
    "ActivityLog"
]
