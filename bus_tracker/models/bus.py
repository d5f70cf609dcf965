from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Bus(Base):
    __tablename__ = "buses"

    id = Column(Integer, primary_key=True, index=True)
    bus_number = Column(Text, unique=True, index=True, nullable=False)
    license_number = Column(Text, nullable=False)
    capacity = Column(Integer, nullable=False)
    driver_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    driver = relationship("User", back_populates="buses")
    rounds = relationship("BusRound", back_populates="bus", passive_deletes=True)
    locations = relationship("Location", back_populates="bus", passive_deletes=True)


class BusRound(Base):
    __tablename__ = "bus_rounds"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    type = Column(String(20), nullable=False)  # morning, afternoon
    start_time = Column(Text, nullable=False)  # free text, e.g. "07:15"
    end_time = Column(Text, nullable=False)
    bus_id = Column(Integer, ForeignKey("buses.id", ondelete="SET NULL"))
    status = Column(String(20), nullable=False, default="pending")  # pending, in_progress, completed
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    bus = relationship("Bus", back_populates="rounds")
    students = relationship("RoundStudent", back_populates="round", passive_deletes=True)


class RoundStudent(Base):
    __tablename__ = "round_students"

    id = Column(Integer, primary_key=True, index=True)
    round_id = Column(Integer, ForeignKey("bus_rounds.id", ondelete="CASCADE"))
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"))
    order = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    round = relationship("BusRound", back_populates="students")
    student = relationship("Student", back_populates="round_assignments")


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    bus_id = Column(Integer, ForeignKey("buses.id", ondelete="CASCADE"))
    latitude = Column(Text, nullable=False)
    longitude = Column(Text, nullable=False)
    timestamp = Column(DateTime, server_default=func.now())

    bus = relationship("Bus", back_populates="locations")
