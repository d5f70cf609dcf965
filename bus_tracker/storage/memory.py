import itertools
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .. import schemas
from ..core.logger import get_logger
from .base import Storage, IntegrityViolation

logger = get_logger(__name__)

CASCADE = "cascade"
SET_NULL = "set_null"

_RECORDS = {
    "users": schemas.User,
    "students": schemas.Student,
    "buses": schemas.Bus,
    "bus_rounds": schemas.BusRound,
    "round_students": schemas.RoundStudent,
    "locations": schemas.Location,
    "notifications": schemas.Notification,
    "absences": schemas.Absence,
    "activity_logs": schemas.ActivityLog,
}

# Tables stamped with `timestamp` instead of `created_at`
_TIMESTAMPED = {"locations", "notifications", "activity_logs"}

_UNIQUE = {
    "users": ("username",),
    "students": ("student_id",),
    "buses": ("bus_number",),
}

# (table, column, referenced table, action when the referenced row is deleted);
# mirrors the ON DELETE clauses of the relational schema
_REFERENCES = [
    ("students", "parent_id", "users", SET_NULL),
    ("buses", "driver_id", "users", SET_NULL),
    ("bus_rounds", "bus_id", "buses", SET_NULL),
    ("round_students", "round_id", "bus_rounds", CASCADE),
    ("round_students", "student_id", "students", CASCADE),
    ("locations", "bus_id", "buses", CASCADE),
    ("notifications", "round_id", "bus_rounds", SET_NULL),
    ("notifications", "bus_id", "buses", SET_NULL),
    ("notifications", "student_id", "students", SET_NULL),
    ("notifications", "sender_id", "users", SET_NULL),
    ("notifications", "recipient_id", "users", SET_NULL),
    ("absences", "student_id", "students", CASCADE),
    ("absences", "reported_by", "users", SET_NULL),
    ("activity_logs", "user_id", "users", SET_NULL),
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _newest_first(records):
    return sorted(records, key=lambda r: (r.timestamp, r.id), reverse=True)


class MemStorage(Storage):
    """Process-lifetime storage: one dict per table, one id counter per table.

    Build exactly one per process and hand it to the app; nothing here is
    module-level state. Routes run in a thread pool, so every table access
    holds ``_lock``.
    """

    def __init__(self):
        self._tables: Dict[str, Dict[int, Any]] = {name: {} for name in _RECORDS}
        self._counters = {name: itertools.count(1) for name in _RECORDS}
        self._lock = threading.RLock()

    # -- generic table helpers -------------------------------------------------

    def _out(self, record):
        return record.model_copy(deep=True) if record is not None else None

    def _rows(self, table: str) -> List[Any]:
        with self._lock:
            return [self._out(r) for r in self._tables[table].values()]

    def _get(self, table: str, row_id: int):
        with self._lock:
            return self._out(self._tables[table].get(row_id))

    def _check_constraints(self, table: str, values: Dict[str, Any], exclude_id: Optional[int] = None):
        entity = _RECORDS[table].__name__
        for column in _UNIQUE.get(table, ()):
            if column not in values:
                continue
            for row in self._tables[table].values():
                if row.id != exclude_id and getattr(row, column) == values[column]:
                    raise IntegrityViolation(entity)
        for child, column, target, _ in _REFERENCES:
            if child != table or values.get(column) is None:
                continue
            if values[column] not in self._tables[target]:
                raise IntegrityViolation(entity)

    def _insert(self, table: str, values: Dict[str, Any]):
        with self._lock:
            self._check_constraints(table, values)
            row_id = next(self._counters[table])
            stamp = "timestamp" if table in _TIMESTAMPED else "created_at"
            record = _RECORDS[table].model_validate({**values, "id": row_id, stamp: _utcnow()})
            self._tables[table][row_id] = record
        logger.debug(f"Created {_RECORDS[table].__name__}: {row_id}")
        return self._out(record)

    def _update(self, table: str, row_id: int, fields: Dict[str, Any]):
        fields = {k: v for k, v in fields.items() if k not in ("id", "created_at", "timestamp")}
        with self._lock:
            current = self._tables[table].get(row_id)
            if current is None:
                return None
            self._check_constraints(table, fields, exclude_id=row_id)
            updated = current.model_copy(update=fields)
            self._tables[table][row_id] = updated
        return self._out(updated)

    def _delete(self, table: str, row_id: int) -> None:
        with self._lock:
            if self._tables[table].pop(row_id, None) is None:
                return
            for child, column, target, action in _REFERENCES:
                if target != table:
                    continue
                for child_id, row in list(self._tables[child].items()):
                    if getattr(row, column) != row_id:
                        continue
                    if action == CASCADE:
                        self._delete(child, child_id)
                    else:
                        self._tables[child][child_id] = row.model_copy(update={column: None})

    # -- users -----------------------------------------------------------------

    def get_user(self, id: int) -> Optional[schemas.User]:
        return self._get("users", id)

    def get_user_by_username(self, username: str) -> Optional[schemas.User]:
        for user in self._rows("users"):
            if user.username == username:
                return user
        return None

    def get_users(self, role: Optional[str] = None) -> List[schemas.User]:
        users = self._rows("users")
        if role:
            return [u for u in users if u.role == role]
        return users

    def create_user(self, data: schemas.UserCreate) -> schemas.User:
        return self._insert("users", data.model_dump())

    def update_user(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.User]:
        return self._update("users", id, fields)

    def delete_user(self, id: int) -> None:
        self._delete("users", id)

    # -- students --------------------------------------------------------------

    def get_student(self, id: int) -> Optional[schemas.Student]:
        return self._get("students", id)

    def get_students(self, parent_id: Optional[int] = None) -> List[schemas.Student]:
        students = self._rows("students")
        if parent_id is not None:
            return [s for s in students if s.parent_id == parent_id]
        return students

    def create_student(self, data: schemas.StudentCreate) -> schemas.Student:
        return self._insert("students", data.model_dump())

    def update_student(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.Student]:
        return self._update("students", id, fields)

    def delete_student(self, id: int) -> None:
        self._delete("students", id)

    # -- buses -----------------------------------------------------------------

    def get_bus(self, id: int) -> Optional[schemas.Bus]:
        return self._get("buses", id)

    def get_buses(self) -> List[schemas.Bus]:
        return self._rows("buses")

    def create_bus(self, data: schemas.BusCreate) -> schemas.Bus:
        return self._insert("buses", data.model_dump())

    def update_bus(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.Bus]:
        return self._update("buses", id, fields)

    def delete_bus(self, id: int) -> None:
        self._delete("buses", id)

    # -- bus rounds ------------------------------------------------------------

    def get_bus_round(self, id: int) -> Optional[schemas.BusRound]:
        return self._get("bus_rounds", id)

    def get_bus_rounds(self, status: Optional[str] = None) -> List[schemas.BusRound]:
        rounds = self._rows("bus_rounds")
        if status:
            return [r for r in rounds if r.status == status]
        return rounds

    def create_bus_round(self, data: schemas.BusRoundCreate) -> schemas.BusRound:
        return self._insert("bus_rounds", data.model_dump())

    def update_bus_round(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.BusRound]:
        return self._update("bus_rounds", id, fields)

    def delete_bus_round(self, id: int) -> None:
        self._delete("bus_rounds", id)

    # -- round students --------------------------------------------------------

    def get_round_students(self, round_id: int) -> List[schemas.RoundStudent]:
        return [rs for rs in self._rows("round_students") if rs.round_id == round_id]

    def assign_student_to_round(self, data: schemas.RoundStudentCreate) -> schemas.RoundStudent:
        return self._insert("round_students", data.model_dump())

    def remove_student_from_round(self, round_id: int, student_id: int) -> None:
        with self._lock:
            for row_id, assignment in list(self._tables["round_students"].items()):
                if assignment.round_id == round_id and assignment.student_id == student_id:
                    self._delete("round_students", row_id)
                    break

    # -- locations -------------------------------------------------------------

    def record_location(self, data: schemas.LocationCreate) -> schemas.Location:
        return self._insert("locations", data.model_dump())

    def get_latest_bus_location(self, bus_id: int) -> Optional[schemas.Location]:
        history = self.get_bus_locations(bus_id, limit=1)
        return history[0] if history else None

    def get_bus_locations(self, bus_id: int, limit: int = 50) -> List[schemas.Location]:
        rows = [loc for loc in self._rows("locations") if loc.bus_id == bus_id]
        return _newest_first(rows)[:limit]

    # -- notifications ---------------------------------------------------------

    def create_notification(self, data: schemas.NotificationCreate) -> schemas.Notification:
        return self._insert("notifications", data.model_dump())

    def get_notifications(self, recipient_id: Optional[int] = None) -> List[schemas.Notification]:
        notifications = _newest_first(self._rows("notifications"))
        if recipient_id is not None:
            return [n for n in notifications if n.recipient_id == recipient_id]
        return notifications

    # -- absences --------------------------------------------------------------

    def record_absence(self, data: schemas.AbsenceCreate) -> schemas.Absence:
        return self._insert("absences", data.model_dump())

    def get_absences(self, student_id: Optional[int] = None, date: Optional[str] = None) -> List[schemas.Absence]:
        absences = self._rows("absences")
        if student_id is not None:
            absences = [a for a in absences if a.student_id == student_id]
        if date:
            absences = [a for a in absences if a.date == date]
        return absences

    # -- activity logs ---------------------------------------------------------

    def log_activity(self, action: str, details: Optional[Dict[str, Any]] = None,
                     user_id: Optional[int] = None) -> schemas.ActivityLog:
        return self._insert("activity_logs", {"action": action, "details": details or {}, "user_id": user_id})

    def get_activity_logs(self) -> List[schemas.ActivityLog]:
        return _newest_first(self._rows("activity_logs"))

    # -- dashboard -------------------------------------------------------------

    def get_dashboard_stats(self, recent: int = 5) -> schemas.DashboardStats:
        with self._lock:
            users = list(self._tables["users"].values())
            return schemas.DashboardStats(
                total_students=len(self._tables["students"]),
                total_parents=sum(1 for u in users if u.role == "parent"),
                total_drivers=sum(1 for u in users if u.role == "driver"),
                total_buses=len(self._tables["buses"]),
                active_rounds=sum(1 for r in self._tables["bus_rounds"].values() if r.status == "in_progress"),
                recent_notifications=self.get_notifications()[:recent],
            )
