"""School settings service.

Owns the academic year and the per-grade subject configuration. Other
services receive a ``SchoolConfig`` snapshot from here instead of reading
the settings rows themselves.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.constants import DEFAULT_GRADE_DEFINITIONS
from app.core.exceptions import AcademicYearNotSetError, NotFoundError, ValidationError
from app.models.settings import SchoolSetting
from app.models.student import Grade
from app.models.user import User, UserRole
from app.schemas.settings import AcademicYearUpdate, GradeDefinition, SchoolConfig

logger = logging.getLogger(__name__)

ACADEMIC_YEAR_KEY = "academic_year"
GRADE_DEFINITIONS_KEY = "grade_definitions"


class SettingsService:
    """Read and update school-wide settings."""

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, key: str) -> SchoolSetting | None:
        result = self.db.execute(select(SchoolSetting).where(SchoolSetting.key == key))
        return result.scalar_one_or_none()

    def _put(self, key: str, value) -> None:
        row = self._get_row(key)
        if row:
            row.value = value
        else:
            self.db.add(SchoolSetting(key=key, value=value))
        self.db.flush()

    def _load_grade_definitions(self) -> dict[Grade, GradeDefinition]:
        row = self._get_row(GRADE_DEFINITIONS_KEY)
        stored = row.value if row and row.value else {}

        definitions: dict[Grade, GradeDefinition] = {}
        for grade in Grade.ordered():
            raw = stored.get(grade.value, DEFAULT_GRADE_DEFINITIONS[grade])
            definitions[grade] = GradeDefinition.model_validate(raw)
        return definitions

    def _store_grade_definitions(self, definitions: dict[Grade, GradeDefinition]) -> None:
        self._put(
            GRADE_DEFINITIONS_KEY,
            {grade.value: d.model_dump(mode="json") for grade, d in definitions.items()},
        )

    def get_config(self) -> SchoolConfig:
        """Get the current configuration snapshot."""
        row = self._get_row(ACADEMIC_YEAR_KEY)
        return SchoolConfig(
            academic_year=row.value if row else None,
            grade_definitions=self._load_grade_definitions(),
        )

    def get_academic_year(self) -> str | None:
        row = self._get_row(ACADEMIC_YEAR_KEY)
        return row.value if row else None

    def require_academic_year(self) -> str:
        """Get the academic year, failing when no session is open."""
        year = self.get_academic_year()
        if not year:
            raise AcademicYearNotSetError()
        return year

    def set_academic_year(self, request: AcademicYearUpdate) -> str:
        self._put(ACADEMIC_YEAR_KEY, request.academic_year)
        logger.info(f"Academic year set to {request.academic_year}")
        return request.academic_year

    def clear_academic_year(self) -> None:
        """Close the session; the year must be set again before further use."""
        self._put(ACADEMIC_YEAR_KEY, None)
        logger.info("Academic year cleared")

    def get_grade_definition(self, grade: Grade) -> GradeDefinition:
        return self._load_grade_definitions()[grade]

    def update_grade_definition(self, grade: Grade, definition: GradeDefinition) -> GradeDefinition:
        """Replace the subject configuration of a grade."""
        definitions = self._load_grade_definitions()
        if definition.class_teacher_id is not None:
            self._get_teacher(definition.class_teacher_id)
            # A teacher leads at most one class
            for other_grade, other in definitions.items():
                if other_grade != grade and other.class_teacher_id == definition.class_teacher_id:
                    other.class_teacher_id = None
        definitions[grade] = definition
        self._store_grade_definitions(definitions)
        return definition

    def assign_class_teacher(self, user_id: int, grade: Grade | None) -> dict[Grade, GradeDefinition]:
        """Make a teacher the class teacher of ``grade``, or unassign them."""
        if grade is not None:
            self._get_teacher(user_id)
        definitions = self._load_grade_definitions()

        for definition in definitions.values():
            if definition.class_teacher_id == user_id:
                definition.class_teacher_id = None
        if grade is not None:
            definitions[grade].class_teacher_id = user_id

        self._store_grade_definitions(definitions)
        return definitions

    def _get_teacher(self, user_id: int) -> User:
        result = self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("User", str(user_id))
        if user.role != UserRole.TEACHER or not user.is_active:
            raise ValidationError("Class teacher must be an active teacher account")
        return user
