"""User routes"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from focusflow.db.database import get_db
from focusflow.core.auth import get_current_user, get_password_hash
from focusflow.core.registry import TimerRegistry, get_timer_registry
from focusflow.core.timer import ConfigurationError
from focusflow.schemas.users import User, UserUpdate
from focusflow.schemas.settings import UserSettings, UserSettingsUpdate
from focusflow.db.repositories import users as users_repository

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me/settings", response_model=UserSettings)
def read_user_settings(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Get user settings"""
    settings = users_repository.get_user_settings(db, current_user.id)
    if not settings:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Settings not found"
        )
    return settings


@router.put("/me/settings", response_model=UserSettings)
@router.patch("/me/settings", response_model=UserSettings)
def update_user_settings(
    settings_update: UserSettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    registry: TimerRegistry = Depends(get_timer_registry),
):
    """Update user settings; an idle timer picks them up immediately"""
    settings = users_repository.update_user_settings(
        db,
        current_user.id,
        settings_update.model_dump(exclude_unset=True, exclude_none=True),
    )
    if not settings:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Settings not found"
        )

    try:
        registry.refresh_config(current_user.id)
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return settings


@router.put("/me", response_model=User)
def update_user_me(
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update current user"""
    if user_update.username and user_update.username != current_user.username:
        if users_repository.get_user_by_username(db, user_update.username):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username already registered",
            )

    if user_update.email and user_update.email != current_user.email:
        if users_repository.get_user_by_email(db, user_update.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )

    update_data = {}
    if user_update.username:
        update_data["username"] = user_update.username
    if user_update.email:
        update_data["email"] = user_update.email
    if user_update.password:
        update_data["password_hash"] = get_password_hash(user_update.password)

    return users_repository.update_user(db, current_user.id, **update_data)
