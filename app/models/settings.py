"""School-wide settings stored as key/value rows."""

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.base import JSONType, TimestampMixin


class SchoolSetting(Base, TimestampMixin):
    """Single named setting.

    Read and written only through ``SettingsService``.
    """

    __tablename__ = "school_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[Any] = mapped_column(JSONType, nullable=True)

    def __repr__(self) -> str:
        return f"<SchoolSetting(key={self.key})>"
