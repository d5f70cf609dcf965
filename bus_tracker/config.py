from pydantic_settings import BaseSettings
from typing import List
import os


class Settings(BaseSettings):
    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./bus_tracker.db")
    storage_backend: str = os.getenv("STORAGE_BACKEND", "database")  # database, memory

    # Security
    secret_key: str = os.getenv("SECRET_KEY", "your-secret-key-change-this-in-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    password_salt: str = os.getenv("PASSWORD_SALT", "bus_tracker_salt_2024")

    # Bootstrap admin account, created on startup when missing
    admin_username: str = "admin"
    admin_password: str = "password"
    admin_email: str = "admin@school.edu"
    admin_full_name: str = "School Administrator"
    admin_phone: str = "555-123-4567"

    # App
    app_name: str = "School Bus Tracker"
    debug: bool = os.getenv("DEBUG", "False").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: List[str] = ["*"]

    # Rounds and dashboard
    strict_round_transitions: bool = False
    dashboard_recent_notifications: int = 5

    # Simulated tracking: random points around this centre
    tracking_center_latitude: float = 37.7749
    tracking_center_longitude: float = -122.4194
    tracking_jitter: float = 0.01

    class Config:
        env_file = ".env"


settings = Settings()
