from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from ..database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Text, nullable=False)  # arrival, delay, round_started, ...
    message = Column(Text, nullable=False)
    round_id = Column(Integer, ForeignKey("bus_rounds.id", ondelete="SET NULL"))
    bus_id = Column(Integer, ForeignKey("buses.id", ondelete="SET NULL"))
    student_id = Column(Integer, ForeignKey("students.id", ondelete="SET NULL"))
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    timestamp = Column(DateTime, server_default=func.now())


class ActivityLog(Base):
    """Append-only audit trail; rows are never updated or deleted."""
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(Text, nullable=False)
    details = Column(JSON)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    timestamp = Column(DateTime, server_default=func.now())
