from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from ..config import Settings
from ..schemas import User, UserResponse, Token
from ..storage import Storage, get_storage
from ..core.security import verify_password, create_access_token
from ..core.permissions import get_current_user, get_settings
from ..core.logger import get_logger

router = APIRouter(prefix="/api/auth", tags=["authentication"])
logger = get_logger(__name__)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    storage: Storage = Depends(get_storage),
    app_settings: Settings = Depends(get_settings)
):
    """Login and get access token"""
    user = storage.get_user_by_username(form_data.username)

    if not user or not verify_password(form_data.password, user.password, app_settings):
        logger.info(f"Failed login for {form_data.username!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token_expires = timedelta(minutes=app_settings.access_token_expire_minutes)
    access_token = create_access_token(
        data={"sub": user.username, "role": user.role},
        expires_delta=access_token_expires,
        app_settings=app_settings,
    )

    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return current_user
