"""Year-end promotion schemas."""

import enum
from datetime import date

from app.models.student import Grade, StudentStatus
from app.schemas.common import BaseSchema
from app.schemas.exam import ResultEvaluation, SubjectMark


class PromotionAction(str, enum.Enum):
    """What happens to a student at year end."""

    PROMOTE = "promote"
    DETAIN = "detain"
    GRADUATE = "graduate"
    SKIP = "skip"


class StudentSnapshot(BaseSchema):
    """The parts of a student the promotion planner looks at.

    ``final_results`` is None when no final-exam result was recorded.
    """

    student_id: int
    grade: Grade
    status: StudentStatus
    final_results: list[SubjectMark] | None = None


class PromotionDecision(BaseSchema):
    """Planned outcome for one student."""

    student_id: int
    grade: Grade
    action: PromotionAction
    next_grade: Grade | None = None
    evaluation: ResultEvaluation | None = None


class GradePromotionSummary(BaseSchema):
    """Counts per grade for the promotion preview."""

    grade: Grade
    total: int = 0
    to_promote: int = 0
    to_detain: int = 0
    to_graduate: int = 0


class PromotionPreview(BaseSchema):
    """What promotion would do, without changing anything."""

    academic_year: str
    grades: list[GradePromotionSummary]


class PromotionResult(BaseSchema):
    """Outcome of a completed promotion."""

    academic_year: str
    promotion_date: date
    promoted: int
    detained: int
    graduated: int
    skipped: int
    message: str
