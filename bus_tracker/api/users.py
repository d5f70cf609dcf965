from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from typing import List, Optional
from ..config import Settings
from ..schemas import User, UserCreate, UserUpdate, UserResponse
from ..schemas.user import Role
from ..storage import Storage, get_storage
from ..core import activity
from ..core.activity import record_activity
from ..core.permissions import get_current_user, get_settings, require_admin
from ..core.security import get_password_hash

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users", response_model=List[UserResponse])
def get_users(
    role: Optional[Role] = None,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """List users, optionally only one role (parents, drivers, admins)"""
    return storage.get_users(role)


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    app_settings: Settings = Depends(get_settings),
    current_user: User = Depends(require_admin)
):
    """Create a parent, driver or admin account"""
    if storage.get_user_by_username(user.username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already registered")

    hashed = get_password_hash(user.password, app_settings)
    db_user = storage.create_user(user.model_copy(update={"password": hashed}))

    background_tasks.add_task(
        record_activity, storage, activity.CREATE_USER,
        {"user_id": db_user.id, "role": db_user.role}, current_user.id
    )
    return db_user


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    app_settings: Settings = Depends(get_settings),
    current_user: User = Depends(require_admin)
):
    """Update an account; the password only changes when one is sent"""
    fields = user_update.model_dump(exclude_unset=True)
    password = fields.pop("password", None)
    if password:
        fields["password"] = get_password_hash(password, app_settings)

    db_user = storage.update_user(user_id, fields)
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")

    background_tasks.add_task(
        record_activity, storage, activity.UPDATE_USER, {"user_id": user_id}, current_user.id
    )
    return db_user


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_admin)
):
    if not storage.get_user(user_id):
        raise HTTPException(status_code=404, detail="User not found")

    storage.delete_user(user_id)

    # An admin removing their own account leaves no user row to point at
    actor_id = None if user_id == current_user.id else current_user.id
    background_tasks.add_task(
        record_activity, storage, activity.DELETE_USER, {"user_id": user_id}, actor_id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
