"""Exam marks and result schemas."""

import enum
from decimal import Decimal

from pydantic import Field, field_validator

from app.core.constants import QUALITATIVE_GRADES, TERMINAL_EXAM_IDS
from app.models.student import Grade
from app.schemas.common import BaseSchema


def _validate_exam_id(v: str) -> str:
    if v not in TERMINAL_EXAM_IDS:
        raise ValueError(f"exam_id must be one of {', '.join(TERMINAL_EXAM_IDS)}")
    return v


# ==========================================
# Marks
# ==========================================

class SubjectMark(BaseSchema):
    """Marks of one subject.

    Which fields are set depends on the grade configuration; absent fields
    mean no mark was entered.
    """

    subject: str = Field(..., min_length=1, max_length=100)
    marks: Decimal | None = Field(None, ge=0)
    exam_marks: Decimal | None = Field(None, ge=0)
    activity_marks: Decimal | None = Field(None, ge=0)
    grade: str | None = None

    @field_validator("grade")
    @classmethod
    def validate_grade(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.upper()
        if v not in QUALITATIVE_GRADES:
            raise ValueError(f"grade must be one of {', '.join(QUALITATIVE_GRADES)}")
        return v

    @property
    def is_blank(self) -> bool:
        return (
            self.marks is None
            and self.exam_marks is None
            and self.activity_marks is None
            and self.grade is None
        )


class StudentMarksUpdate(BaseSchema):
    """Replace a student's marks for one exam."""

    exam_id: str
    results: list[SubjectMark]

    @field_validator("exam_id")
    @classmethod
    def validate_exam_id(cls, v: str) -> str:
        return _validate_exam_id(v)


class StudentMarksEntry(BaseSchema):
    """One student's marks inside a class batch."""

    student_id: int
    results: list[SubjectMark]


class ClassMarksUpdate(BaseSchema):
    """Replace marks for several students of a grade in one batch."""

    exam_id: str
    entries: list[StudentMarksEntry] = Field(..., min_length=1)

    @field_validator("exam_id")
    @classmethod
    def validate_exam_id(cls, v: str) -> str:
        return _validate_exam_id(v)


class ClassMarksResult(BaseSchema):
    """Result of a class marks batch."""

    exam_id: str
    grade: Grade
    students_updated: int
    message: str


# ==========================================
# Results
# ==========================================

class ResultOutcome(str, enum.Enum):
    """Outcome of a terminal exam."""

    PASS = "PASS"
    SIMPLE_PASS = "SIMPLE PASS"  # exactly one failed subject, still promoted
    FAIL = "FAIL"


class ResultEvaluation(BaseSchema):
    """Computed result of one student for one exam."""

    outcome: ResultOutcome
    failed_subjects: list[str] = []
    missing: bool = False

    @property
    def passed(self) -> bool:
        return self.outcome != ResultOutcome.FAIL


class SubjectResultLine(BaseSchema):
    """One row of a report card."""

    subject: str
    full_marks: int
    marks: SubjectMark | None
    obtained: Decimal | None
    failed: bool


class ReportCard(BaseSchema):
    """Student marks for one exam with the evaluated result."""

    student_id: int
    student_name: str
    roll_no: int
    grade: Grade
    exam_id: str
    exam_name: str
    lines: list[SubjectResultLine]
    total_obtained: Decimal
    total_full_marks: int
    percentage: Decimal | None
    evaluation: ResultEvaluation
    rank: int | None = None
    remarks: str


class ClassMarkStatementRow(BaseSchema):
    """A student's row in the class mark statement."""

    student_id: int
    roll_no: int
    student_name: str
    results: list[SubjectMark]
    total_obtained: Decimal
    evaluation: ResultEvaluation
    rank: int | None = None


class ClassMarkStatement(BaseSchema):
    """Marks of every active student of a grade for one exam."""

    grade: Grade
    exam_id: str
    exam_name: str
    subjects: list[str]
    rows: list[ClassMarkStatementRow]
