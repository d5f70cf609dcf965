from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(Text, unique=True, index=True, nullable=False)
    password = Column(Text, nullable=False)  # salted hash, never plain text
    email = Column(Text, nullable=False)
    full_name = Column(Text, nullable=False)
    phone = Column(Text)
    role = Column(String(20), nullable=False, default="admin")  # admin, parent, driver
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    children = relationship("Student", back_populates="parent", passive_deletes=True)
    buses = relationship("Bus", back_populates="driver", passive_deletes=True)
