"""School settings schemas."""

import enum
import re

from pydantic import Field, field_validator

from app.models.student import Grade
from app.schemas.common import BaseSchema

ACADEMIC_YEAR_PATTERN = re.compile(r"^(\d{4})-(\d{4})$")


class GradingMode(str, enum.Enum):
    """How a subject is assessed."""

    MARKS = "marks"
    GRADE = "grade"  # four-tier qualitative scale


class SubjectDefinition(BaseSchema):
    """Single subject of a grade with its full-mark ceilings."""

    name: str = Field(..., min_length=1, max_length=100)
    exam_full_marks: int = Field(100, ge=0)
    activity_full_marks: int = Field(0, ge=0)
    grading_mode: GradingMode = GradingMode.MARKS


class GradeDefinition(BaseSchema):
    """Subjects taught in a grade and its class teacher."""

    subjects: list[SubjectDefinition] = []
    class_teacher_id: int | None = None

    @field_validator("subjects")
    @classmethod
    def validate_unique_subjects(cls, v: list[SubjectDefinition]) -> list[SubjectDefinition]:
        names = [s.name for s in v]
        if len(names) != len(set(names)):
            raise ValueError("Subject names must be unique within a grade")
        return v

    @property
    def has_activity_marks(self) -> bool:
        """Whether the grade splits marks into exam and activity components."""
        return any(s.activity_full_marks > 0 for s in self.subjects)

    def subject(self, name: str) -> SubjectDefinition | None:
        return next((s for s in self.subjects if s.name == name), None)


class SchoolConfig(BaseSchema):
    """Explicit school configuration passed to the result evaluator."""

    academic_year: str | None = None
    grade_definitions: dict[Grade, GradeDefinition]

    def definition_for(self, grade: Grade) -> GradeDefinition | None:
        return self.grade_definitions.get(grade)


class AcademicYearUpdate(BaseSchema):
    """Start a new academic session, e.g. ``2025-2026``."""

    academic_year: str

    @field_validator("academic_year")
    @classmethod
    def validate_academic_year(cls, v: str) -> str:
        match = ACADEMIC_YEAR_PATTERN.match(v)
        if not match or int(match.group(2)) != int(match.group(1)) + 1:
            raise ValueError("Academic year must look like 2025-2026 with consecutive years")
        return v


class ClassTeacherAssignment(BaseSchema):
    """Assign a teacher to a grade, or unassign with ``grade=None``."""

    user_id: int
    grade: Grade | None = None
