from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
import hashlib
import hmac
from ..config import Settings, settings


def verify_password(plain_password: str, hashed_password: str, app_settings: Optional[Settings] = None) -> bool:
    """Verify a password against its hash"""
    return hmac.compare_digest(get_password_hash(plain_password, app_settings), hashed_password)


def get_password_hash(password: str, app_settings: Optional[Settings] = None) -> str:
    """Hash a password using SHA-256 with the configured salt"""
    salt = (app_settings or settings).password_salt
    return hashlib.sha256((password + salt).encode('utf-8')).hexdigest()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None,
                        app_settings: Optional[Settings] = None):
    """Create JWT access token"""
    config = app_settings or settings
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=config.access_token_expire_minutes)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, config.secret_key, algorithm=config.algorithm)
    return encoded_jwt


def verify_token(token: str, app_settings: Optional[Settings] = None) -> Optional[str]:
    """Verify JWT token and return username"""
    config = app_settings or settings
    try:
        payload = jwt.decode(token, config.secret_key, algorithms=[config.algorithm])
        username: str = payload.get("sub")
        if username is None:
            return None
        return username
    except JWTError:
        return None
