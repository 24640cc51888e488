"""Staff accounts: sign-in, token refresh and account administration."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from app.core.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_refresh_token,
)
from app.models.base import utcnow
from app.models.user import User, UserRole
from app.schemas.auth import (
    AdminUserUpdate,
    CurrentUserResponse,
    LoginRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
)
from app.schemas.calendar import ReminderPreferenceUpdate
from app.services.settings import SettingsService

logger = logging.getLogger(__name__)

BAD_CREDENTIALS = "Invalid username or password"


def issue_tokens(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id, user.username, user.role.value),
        refresh_token=create_refresh_token(user.id),
        expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def _by_username(self, username: str) -> User | None:
        return self.db.execute(select(User).where(User.username == username)).scalar_one_or_none()

    def login(self, request: LoginRequest) -> TokenResponse:
        """Check the credentials of an active account and stamp ``last_login_at``.

        Unknown usernames and wrong passwords get the same message.
        """
        user = self._by_username(request.username)
        if user is None or not verify_password(request.password, user.password_hash):
            logger.warning(f"Failed login for {request.username!r}")
            raise AuthenticationError(BAD_CREDENTIALS)
        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        user.last_login_at = utcnow()
        self.db.flush()
        logger.info(f"User logged in: {user.username}")
        return issue_tokens(user)

    def refresh_tokens(self, refresh_token: str) -> TokenResponse:
        payload = verify_refresh_token(refresh_token)
        if not payload:
            raise AuthenticationError("Invalid or expired refresh token")

        try:
            user = self.db.get(User, int(payload.get("sub", "")))
        except ValueError:
            raise AuthenticationError("Invalid token payload")
        if user is None or not user.is_active:
            raise AuthenticationError("User not found or deactivated")
        return issue_tokens(user)

    def get_user_by_id(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        return user

    def get_current_user_info(self, user: User) -> CurrentUserResponse:
        school = SettingsService(self.db).get_config()
        class_teacher_of = next(
            (
                grade
                for grade, definition in school.grade_definitions.items()
                if definition.class_teacher_id == user.id
            ),
            None,
        )
        return CurrentUserResponse(
            user=UserResponse.model_validate(user),
            class_teacher_of=class_teacher_of,
            academic_year=school.academic_year,
        )

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        user.password_hash = hash_password(new_password)
        self.db.flush()
        logger.info(f"Password changed for {user.username}")

    def update_reminder_preference(self, user: User, request: ReminderPreferenceUpdate) -> UserResponse:
        """Set how many days ahead of an event reminders fire; -1 turns them off."""
        user.reminder_lead_days = request.reminder_lead_days
        self.db.flush()
        return UserResponse.model_validate(user)

    def create_user(self, request: UserCreate) -> UserResponse:
        if self._by_username(request.username) is not None:
            raise ConflictError("Username already registered", details={"username": request.username})

        user = User(
            name=request.name,
            username=request.username,
            password_hash=hash_password(request.password),
            role=request.role,
            is_active=True,
            reminder_lead_days=settings.DEFAULT_REMINDER_LEAD_DAYS,
        )
        self.db.add(user)
        self.db.flush()
        self.db.refresh(user)

        logger.info(f"User created: {user.username} ({user.role.value})")
        return UserResponse.model_validate(user)

    def list_users(self, role: UserRole | None = None) -> list[UserResponse]:
        query = select(User).order_by(User.name)
        if role is not None:
            query = query.where(User.role == role)
        return [UserResponse.model_validate(u) for u in self.db.execute(query).scalars()]

    def update_user(self, user_id: int, request: AdminUserUpdate, acting_user: User) -> UserResponse:
        """Admin edit of another account.

        An admin cannot lock themselves out, and an account that stops being
        an active teacher loses its class.
        """
        user = self.get_user_by_id(user_id)
        changes = request.model_dump(exclude_unset=True)

        demoting = changes.get("role") not in (None, UserRole.ADMIN)
        if user.id == acting_user.id and (changes.get("is_active") is False or demoting):
            raise ValidationError("You cannot deactivate or demote your own account")

        password = changes.pop("password", None)
        if password:
            user.password_hash = hash_password(password)
        for field, value in changes.items():
            setattr(user, field, value)

        if user.role != UserRole.TEACHER or not user.is_active:
            SettingsService(self.db).assign_class_teacher(user.id, None)

        self.db.flush()
        self.db.refresh(user)
        return UserResponse.model_validate(user)
