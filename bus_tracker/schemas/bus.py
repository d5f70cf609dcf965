from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime

RoundType = Literal["morning", "afternoon"]
RoundStatus = Literal["pending", "in_progress", "completed"]


# Bus schemas
class BusBase(BaseModel):
    bus_number: str
    license_number: str
    capacity: int = Field(..., gt=0)
    driver_id: Optional[int] = None


class BusCreate(BusBase):
    pass


class Bus(BusBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Bus round schemas
class BusRoundBase(BaseModel):
    name: str
    type: RoundType
    start_time: str  # free text, e.g. "07:15"
    end_time: str
    bus_id: Optional[int] = None
    status: RoundStatus = "pending"


class BusRoundCreate(BusRoundBase):
    pass


class BusRound(BusRoundBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Round/student assignment schemas
class RoundStudentAssign(BaseModel):
    """Body of POST /api/bus-rounds/{round_id}/students"""
    student_id: int
    order: int


class RoundStudentCreate(RoundStudentAssign):
    round_id: int


class RoundStudent(RoundStudentCreate):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Location schemas
class LocationBase(BaseModel):
    bus_id: int
    latitude: str
    longitude: str

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coordinates_as_text(cls, value):
        # Coordinates are stored as text; accept numbers from GPS clients
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class LocationCreate(LocationBase):
    pass


class Location(LocationBase):
    id: int
    timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True
