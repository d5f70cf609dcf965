from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Text, unique=True, index=True, nullable=False)  # school-issued, e.g. "ST-1"
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    grade = Column(Text, nullable=False)
    parent_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    parent = relationship("User", back_populates="children")
    round_assignments = relationship("RoundStudent", back_populates="student", passive_deletes=True)
    absences = relationship("Absence", back_populates="student", passive_deletes=True)


class Absence(Base):
    __tablename__ = "absences"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"))
    date = Column(Text, nullable=False)  # kept as entered, e.g. "2024-09-02"
    reason = Column(Text)
    reported_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, server_default=func.now())

    student = relationship("Student", back_populates="absences")
