"""Sign-in, the current user's own account, and staff account administration."""

from fastapi import APIRouter

from app.core.database import DbSession
from app.core.dependencies import AdminUser, CurrentUser
from app.models.user import UserRole
from app.schemas.auth import (
    AdminUserUpdate,
    CurrentUserResponse,
    LoginRequest,
    PasswordChange,
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
)
from app.schemas.calendar import ReminderPreferenceUpdate
from app.schemas.common import MessageResponse
from app.services.auth import AuthService

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: DbSession):
    return AuthService(db).login(request)


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(request: RefreshTokenRequest, db: DbSession):
    """Trade a refresh token for a fresh token pair."""
    return AuthService(db).refresh_tokens(request.refresh_token)


@router.get("/me", response_model=CurrentUserResponse)
def get_current_user_info(current_user: CurrentUser, db: DbSession):
    """The current user, the grade they are class teacher of, and the open academic year."""
    return AuthService(db).get_current_user_info(current_user)


@router.post("/change-password", response_model=MessageResponse)
def change_password(request: PasswordChange, current_user: CurrentUser, db: DbSession):
    AuthService(db).change_password(current_user, request.current_password, request.new_password)
    return MessageResponse(message="Password changed successfully")


@router.put("/me/reminders", response_model=UserResponse)
def update_reminder_preference(
    request: ReminderPreferenceUpdate,
    current_user: CurrentUser,
    db: DbSession,
):
    """Days before an event that reminders fire; -1 disables them."""
    return AuthService(db).update_reminder_preference(current_user, request)


@router.post("/users", response_model=UserResponse)
def create_user(request: UserCreate, admin: AdminUser, db: DbSession):
    return AuthService(db).create_user(request)


@router.get("/users", response_model=list[UserResponse])
def list_users(admin: AdminUser, db: DbSession, role: UserRole | None = None):
    return AuthService(db).list_users(role)


@router.patch("/users/{user_id}", response_model=UserResponse)
def update_user(user_id: int, request: AdminUserUpdate, admin: AdminUser, db: DbSession):
    return AuthService(db).update_user(user_id, request, admin)
