"""Login, token and user account schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from app.models.student import Grade
from app.models.user import UserRole
from app.schemas.common import BaseSchema, reject_null


def _normalize_username(value: str) -> str:
    return value.strip().lower()


class LoginRequest(BaseSchema):
    username: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)

    _username = field_validator("username")(_normalize_username)


class TokenResponse(BaseSchema):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class RefreshTokenRequest(BaseSchema):
    refresh_token: str


class UserCreate(BaseSchema):
    """New staff account; usernames are stored lower-case."""

    name: str = Field(..., min_length=2, max_length=255)
    username: str = Field(..., min_length=3, max_length=255, pattern=r"^[A-Za-z0-9_.\-]+$")
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.TEACHER

    _username = field_validator("username")(_normalize_username)


class UserResponse(BaseSchema):
    id: int
    name: str
    username: str
    role: UserRole
    is_active: bool
    reminder_lead_days: int
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


class CurrentUserResponse(BaseSchema):
    """The signed-in user plus the session context the UI needs on start-up."""

    user: UserResponse
    class_teacher_of: Grade | None = None
    academic_year: str | None = None


class AdminUserUpdate(BaseSchema):
    name: str | None = Field(None, min_length=2, max_length=255)
    role: UserRole | None = None
    is_active: bool | None = None
    password: str | None = Field(None, min_length=8)

    _required = field_validator("name", "role", "is_active")(reject_null)


class PasswordChange(BaseSchema):
    current_password: str
    new_password: str = Field(..., min_length=8)
