"""
Persistence contract shared by every storage backend.

Reads return pydantic records from ``bus_tracker.schemas`` so callers never
see backend objects. Missing ids come back as ``None``; deleting a missing id
is a no-op. Update methods take a dict holding only the fields to change.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .. import schemas


class StorageError(Exception):
    """Backend failure; the message is safe to log but not to show to clients."""


class IntegrityViolation(StorageError):
    """A uniqueness or foreign key constraint would be broken."""

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"{entity} conflicts with existing data")


class Storage(ABC):

    # Users
    @abstractmethod
    def get_user(self, id: int) -> Optional[schemas.User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[schemas.User]: ...

    @abstractmethod
    def get_users(self, role: Optional[str] = None) -> List[schemas.User]: ...

    @abstractmethod
    def create_user(self, data: schemas.UserCreate) -> schemas.User: ...

    @abstractmethod
    def update_user(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.User]: ...

    @abstractmethod
    def delete_user(self, id: int) -> None: ...

    # Students
    @abstractmethod
    def get_student(self, id: int) -> Optional[schemas.Student]: ...

    @abstractmethod
    def get_students(self, parent_id: Optional[int] = None) -> List[schemas.Student]: ...

    @abstractmethod
    def create_student(self, data: schemas.StudentCreate) -> schemas.Student: ...

    @abstractmethod
    def update_student(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.Student]: ...

    @abstractmethod
    def delete_student(self, id: int) -> None: ...

    # Buses
    @abstractmethod
    def get_bus(self, id: int) -> Optional[schemas.Bus]: ...

    @abstractmethod
    def get_buses(self) -> List[schemas.Bus]: ...

    @abstractmethod
    def create_bus(self, data: schemas.BusCreate) -> schemas.Bus: ...

    @abstractmethod
    def update_bus(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.Bus]: ...

    @abstractmethod
    def delete_bus(self, id: int) -> None: ...

    # Bus rounds
    @abstractmethod
    def get_bus_round(self, id: int) -> Optional[schemas.BusRound]: ...

    @abstractmethod
    def get_bus_rounds(self, status: Optional[str] = None) -> List[schemas.BusRound]: ...

    @abstractmethod
    def create_bus_round(self, data: schemas.BusRoundCreate) -> schemas.BusRound: ...

    @abstractmethod
    def update_bus_round(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.BusRound]: ...

    @abstractmethod
    def delete_bus_round(self, id: int) -> None: ...

    # Round students
    @abstractmethod
    def get_round_students(self, round_id: int) -> List[schemas.RoundStudent]: ...

    @abstractmethod
    def assign_student_to_round(self, data: schemas.RoundStudentCreate) -> schemas.RoundStudent: ...

    @abstractmethod
    def remove_student_from_round(self, round_id: int, student_id: int) -> None: ...

    # Location tracking
    @abstractmethod
    def record_location(self, data: schemas.LocationCreate) -> schemas.Location: ...

    @abstractmethod
    def get_latest_bus_location(self, bus_id: int) -> Optional[schemas.Location]: ...

    @abstractmethod
    def get_bus_locations(self, bus_id: int, limit: int = 50) -> List[schemas.Location]:
        """Location history for a bus, newest first."""

    # Notifications
    @abstractmethod
    def create_notification(self, data: schemas.NotificationCreate) -> schemas.Notification: ...

    @abstractmethod
    def get_notifications(self, recipient_id: Optional[int] = None) -> List[schemas.Notification]:
        """Newest first."""

    # Absences
    @abstractmethod
    def record_absence(self, data: schemas.AbsenceCreate) -> schemas.Absence: ...

    @abstractmethod
    def get_absences(self, student_id: Optional[int] = None, date: Optional[str] = None) -> List[schemas.Absence]: ...

    # Activity logs
    @abstractmethod
    def log_activity(self, action: str, details: Optional[Dict[str, Any]] = None,
                     user_id: Optional[int] = None) -> schemas.ActivityLog: ...

    @abstractmethod
    def get_activity_logs(self) -> List[schemas.ActivityLog]:
        """Newest first."""

    # Dashboard
    @abstractmethod
    def get_dashboard_stats(self, recent: int = 5) -> schemas.DashboardStats: ...
