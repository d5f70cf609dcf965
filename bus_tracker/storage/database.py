from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .. import models, schemas
from ..core.logger import get_logger
from .base import Storage, StorageError, IntegrityViolation

logger = get_logger(__name__)

_IMMUTABLE = ("id", "created_at", "timestamp")


class DatabaseStorage(Storage):
    """Relational storage; every call runs in its own short-lived session."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def create_tables(self) -> None:
        """Create any missing tables on the bound engine; alembic handles changes."""
        with self._session(models.User) as db:
            models.Base.metadata.create_all(bind=db.get_bind())

    @contextmanager
    def _session(self, model):
        db = self._session_factory()
        try:
            yield db
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Integrity violation on {model.__name__}: {e.orig}")
            raise IntegrityViolation(model.__name__) from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database error on {model.__name__}: {e}")
            raise StorageError(f"{model.__name__} operation failed") from e
        finally:
            db.close()

    # -- generic helpers -------------------------------------------------------

    def _get(self, model, record, id: int):
        with self._session(model) as db:
            row = db.get(model, id)
            return record.model_validate(row) if row is not None else None

    def _list(self, model, record, *criteria, order_by=None, limit=None):
        with self._session(model) as db:
            stmt = select(model).where(*criteria)
            if order_by is None:
                stmt = stmt.order_by(model.id)
            else:
                stmt = stmt.order_by(*order_by)
            if limit is not None:
                stmt = stmt.limit(limit)
            return [record.model_validate(row) for row in db.scalars(stmt).all()]

    def _create(self, model, record, values: Dict[str, Any]):
        with self._session(model) as db:
            row = model(**values)
            db.add(row)
            db.commit()
            db.refresh(row)
            logger.debug(f"Created {model.__name__}: {row.id}")
            return record.model_validate(row)

    def _update(self, model, record, id: int, fields: Dict[str, Any]):
        with self._session(model) as db:
            row = db.get(model, id)
            if row is None:
                return None
            for key, value in fields.items():
                if key not in _IMMUTABLE and hasattr(row, key):
                    setattr(row, key, value)
            db.commit()
            db.refresh(row)
            return record.model_validate(row)

    def _delete(self, model, *criteria):
        with self._session(model) as db:
            db.execute(delete(model).where(*criteria))
            db.commit()

    @staticmethod
    def _newest_first(model):
        return (desc(model.timestamp), desc(model.id))

    # -- users -----------------------------------------------------------------

    def get_user(self, id: int) -> Optional[schemas.User]:
        return self._get(models.User, schemas.User, id)

    def get_user_by_username(self, username: str) -> Optional[schemas.User]:
        users = self._list(models.User, schemas.User, models.User.username == username)
        return users[0] if users else None

    def get_users(self, role: Optional[str] = None) -> List[schemas.User]:
        criteria = [models.User.role == role] if role else []
        return self._list(models.User, schemas.User, *criteria)

    def create_user(self, data: schemas.UserCreate) -> schemas.User:
        return self._create(models.User, schemas.User, data.model_dump())

    def update_user(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.User]:
        return self._update(models.User, schemas.User, id, fields)

    def delete_user(self, id: int) -> None:
        self._delete(models.User, models.User.id == id)

    # -- students --------------------------------------------------------------

    def get_student(self, id: int) -> Optional[schemas.Student]:
        return self._get(models.Student, schemas.Student, id)

    def get_students(self, parent_id: Optional[int] = None) -> List[schemas.Student]:
        criteria = [models.Student.parent_id == parent_id] if parent_id is not None else []
        return self._list(models.Student, schemas.Student, *criteria)

    def create_student(self, data: schemas.StudentCreate) -> schemas.Student:
        return self._create(models.Student, schemas.Student, data.model_dump())

    def update_student(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.Student]:
        return self._update(models.Student, schemas.Student, id, fields)

    def delete_student(self, id: int) -> None:
        self._delete(models.Student, models.Student.id == id)

    # -- buses -----------------------------------------------------------------

    def get_bus(self, id: int) -> Optional[schemas.Bus]:
        return self._get(models.Bus, schemas.Bus, id)

    def get_buses(self) -> List[schemas.Bus]:
        return self._list(models.Bus, schemas.Bus)

    def create_bus(self, data: schemas.BusCreate) -> schemas.Bus:
        return self._create(models.Bus, schemas.Bus, data.model_dump())

    def update_bus(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.Bus]:
        return self._update(models.Bus, schemas.Bus, id, fields)

    def delete_bus(self, id: int) -> None:
        self._delete(models.Bus, models.Bus.id == id)

    # -- bus rounds ------------------------------------------------------------

    def get_bus_round(self, id: int) -> Optional[schemas.BusRound]:
        return self._get(models.BusRound, schemas.BusRound, id)

    def get_bus_rounds(self, status: Optional[str] = None) -> List[schemas.BusRound]:
        criteria = [models.BusRound.status == status] if status else []
        return self._list(models.BusRound, schemas.BusRound, *criteria)

    def create_bus_round(self, data: schemas.BusRoundCreate) -> schemas.BusRound:
        return self._create(models.BusRound, schemas.BusRound, data.model_dump())

    def update_bus_round(self, id: int, fields: Dict[str, Any]) -> Optional[schemas.BusRound]:
        return self._update(models.BusRound, schemas.BusRound, id, fields)

    def delete_bus_round(self, id: int) -> None:
        self._delete(models.BusRound, models.BusRound.id == id)

    # -- round students --------------------------------------------------------

    def get_round_students(self, round_id: int) -> List[schemas.RoundStudent]:
        return self._list(models.RoundStudent, schemas.RoundStudent, models.RoundStudent.round_id == round_id)

    def assign_student_to_round(self, data: schemas.RoundStudentCreate) -> schemas.RoundStudent:
        return self._create(models.RoundStudent, schemas.RoundStudent, data.model_dump())

    def remove_student_from_round(self, round_id: int, student_id: int) -> None:
        # Only the first matching row goes, like the in-memory store
        with self._session(models.RoundStudent) as db:
            row = db.scalars(
                select(models.RoundStudent)
                .where(models.RoundStudent.round_id == round_id,
                       models.RoundStudent.student_id == student_id)
                .order_by(models.RoundStudent.id)
                .limit(1)
            ).first()
            if row is not None:
                db.delete(row)
                db.commit()

    # -- locations -------------------------------------------------------------

    def record_location(self, data: schemas.LocationCreate) -> schemas.Location:
        return self._create(models.Location, schemas.Location, data.model_dump())

    def get_latest_bus_location(self, bus_id: int) -> Optional[schemas.Location]:
        history = self.get_bus_locations(bus_id, limit=1)
        return history[0] if history else None

    def get_bus_locations(self, bus_id: int, limit: int = 50) -> List[schemas.Location]:
        return self._list(
            models.Location, schemas.Location,
            models.Location.bus_id == bus_id,
            order_by=self._newest_first(models.Location),
            limit=limit,
        )

    # -- notifications ---------------------------------------------------------

    def create_notification(self, data: schemas.NotificationCreate) -> schemas.Notification:
        return self._create(models.Notification, schemas.Notification, data.model_dump())

    def get_notifications(self, recipient_id: Optional[int] = None) -> List[schemas.Notification]:
        criteria = [models.Notification.recipient_id == recipient_id] if recipient_id is not None else []
        return self._list(
            models.Notification, schemas.Notification, *criteria,
            order_by=self._newest_first(models.Notification),
        )

    # -- absences --------------------------------------------------------------

    def record_absence(self, data: schemas.AbsenceCreate) -> schemas.Absence:
        return self._create(models.Absence, schemas.Absence, data.model_dump())

    def get_absences(self, student_id: Optional[int] = None, date: Optional[str] = None) -> List[schemas.Absence]:
        criteria = []
        if student_id is not None:
            criteria.append(models.Absence.student_id == student_id)
        if date:
            criteria.append(models.Absence.date == date)
        return self._list(models.Absence, schemas.Absence, *criteria)

    # -- activity logs ---------------------------------------------------------

    def log_activity(self, action: str, details: Optional[Dict[str, Any]] = None,
                     user_id: Optional[int] = None) -> schemas.ActivityLog:
        values = {"action": action, "details": details or {}, "user_id": user_id}
        return self._create(models.ActivityLog, schemas.ActivityLog, values)

    def get_activity_logs(self) -> List[schemas.ActivityLog]:
        return self._list(
            models.ActivityLog, schemas.ActivityLog,
            order_by=self._newest_first(models.ActivityLog),
        )

    # -- dashboard -------------------------------------------------------------

    def _count(self, db, model, *criteria) -> int:
        return db.scalar(select(func.count()).select_from(model).where(*criteria))

    def get_dashboard_stats(self, recent: int = 5) -> schemas.DashboardStats:
        with self._session(models.User) as db:
            counts = {
                "total_students": self._count(db, models.Student),
                "total_parents": self._count(db, models.User, models.User.role == "parent"),
                "total_drivers": self._count(db, models.User, models.User.role == "driver"),
                "total_buses": self._count(db, models.Bus),
                "active_rounds": self._count(db, models.BusRound, models.BusRound.status == "in_progress"),
            }
        recent_notifications = self._list(
            models.Notification, schemas.Notification,
            order_by=self._newest_first(models.Notification),
            limit=recent,
        )
        return schemas.DashboardStats(recent_notifications=recent_notifications, **counts)
