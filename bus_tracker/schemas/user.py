from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

Role = Literal["admin", "parent", "driver"]


class UserBase(BaseModel):
    username: str = Field(..., min_length=1)
    email: str
    full_name: str
    phone: Optional[str] = None
    role: Role = "admin"


class UserCreate(UserBase):
    password: str = Field(..., min_length=1)


class UserUpdate(UserBase):
    # Leaving the password out keeps the current one
    password: Optional[str] = Field(None, min_length=1)


class User(UserCreate):
    """Full user record as stored; `password` holds the hash."""
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserResponse(UserBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str
