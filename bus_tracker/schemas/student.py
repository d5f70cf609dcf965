from pydantic import BaseModel
from typing import Optional
from datetime import datetime


# Student schemas
class StudentBase(BaseModel):
    student_id: str
    first_name: str
    last_name: str
    grade: str
    parent_id: Optional[int] = None


class StudentCreate(StudentBase):
    pass


class Student(StudentBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Absence schemas
class AbsenceBase(BaseModel):
    student_id: int
    date: str
    reason: Optional[str] = None
    reported_by: Optional[int] = None


class AbsenceCreate(AbsenceBase):
    pass


class Absence(AbsenceBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
