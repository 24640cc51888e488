"""Result evaluation and year-end promotion.

The evaluation functions are pure and work on already-loaded data;
``PromotionService`` loads the students, applies the plan inside the
request transaction and closes the academic session.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.constants import (
    FINAL_EXAM_ID,
    MIDDLE_GRADES,
    PASS_MARK,
    SPLIT_MARKS_EXAM_PASS_MARK,
)
from app.models.hostel import HostelResident
from app.models.student import Grade, Student, StudentStatus
from app.schemas.exam import ResultEvaluation, ResultOutcome, SubjectMark
from app.schemas.promotion import (
    GradePromotionSummary,
    PromotionAction,
    PromotionDecision,
    PromotionPreview,
    PromotionResult,
    StudentSnapshot,
)
from app.schemas.settings import GradeDefinition, GradingMode, SchoolConfig, SubjectDefinition
from app.services.fee import default_fee_payments
from app.services.settings import SettingsService

logger = logging.getLogger(__name__)

NO_DATA = "No data"


# ==========================================
# Result evaluation
# ==========================================

def _mark(value: Decimal | None) -> Decimal:
    return value if value is not None else Decimal(0)


def subject_full_marks(subject: SubjectDefinition, split_marks: bool) -> int:
    """Full marks of a subject; activity marks only count in split-mark grades."""
    return subject.exam_full_marks + (subject.activity_full_marks if split_marks else 0)


def obtained_marks(mark: SubjectMark | None, split_marks: bool) -> Decimal:
    """Marks obtained in a subject, treating missing values as zero."""
    if mark is None:
        return Decimal(0)
    if split_marks:
        return _mark(mark.exam_marks) + _mark(mark.activity_marks)
    return _mark(mark.marks)


def subject_failed(mark: SubjectMark | None, grade: Grade, split_marks: bool) -> bool:
    """Apply the pass rule of the grade band to one subject."""
    if grade in MIDDLE_GRADES:
        # Classes III-VIII pass on the written exam component alone
        if split_marks:
            return _mark(mark.exam_marks if mark else None) < SPLIT_MARKS_EXAM_PASS_MARK
        return _mark(mark.marks if mark else None) < PASS_MARK
    return obtained_marks(mark, split_marks) < PASS_MARK


def evaluate_result(
    results: Sequence[SubjectMark] | None,
    definition: GradeDefinition | None,
    grade: Grade,
) -> ResultEvaluation:
    """Evaluate one exam result against the grade's subject configuration.

    Two or more failed subjects is a FAIL, exactly one is a SIMPLE PASS.
    A missing result or grade definition is a FAIL.
    """
    if not results or definition is None:
        return ResultEvaluation(
            outcome=ResultOutcome.FAIL,
            failed_subjects=[NO_DATA],
            missing=True,
        )

    split_marks = definition.has_activity_marks
    by_subject = {m.subject: m for m in results}
    failed_subjects: list[str] = []

    for subject in definition.subjects:
        if subject.grading_mode == GradingMode.GRADE:
            continue
        if subject_full_marks(subject, split_marks) <= 0:
            continue
        if subject_failed(by_subject.get(subject.name), grade, split_marks):
            failed_subjects.append(subject.name)

    if len(failed_subjects) > 1:
        outcome = ResultOutcome.FAIL
    elif len(failed_subjects) == 1:
        outcome = ResultOutcome.SIMPLE_PASS
    else:
        outcome = ResultOutcome.PASS

    return ResultEvaluation(outcome=outcome, failed_subjects=failed_subjects)


def final_verdict(
    results: Sequence[SubjectMark] | None,
    definition: GradeDefinition | None,
    grade: Grade,
) -> ResultOutcome:
    """Collapse an evaluation to PASS or FAIL for promotion."""
    evaluation = evaluate_result(results, definition, grade)
    return ResultOutcome.PASS if evaluation.passed else ResultOutcome.FAIL


# ==========================================
# Promotion planning
# ==========================================

def decide_promotion(student: StudentSnapshot, config: SchoolConfig) -> PromotionDecision:
    """Decide what promotion does to a single student."""
    if student.status != StudentStatus.ACTIVE:
        return PromotionDecision(
            student_id=student.student_id,
            grade=student.grade,
            action=PromotionAction.SKIP,
        )

    evaluation = evaluate_result(
        student.final_results,
        config.definition_for(student.grade),
        student.grade,
    )
    if not evaluation.passed:
        action = PromotionAction.DETAIN
        next_grade = None
    elif student.grade.is_terminal:
        action = PromotionAction.GRADUATE
        next_grade = None
    else:
        action = PromotionAction.PROMOTE
        next_grade = student.grade.next_grade()

    return PromotionDecision(
        student_id=student.student_id,
        grade=student.grade,
        action=action,
        next_grade=next_grade,
        evaluation=evaluation,
    )


def plan_promotion(
    students: Iterable[StudentSnapshot],
    config: SchoolConfig,
) -> list[PromotionDecision]:
    return [decide_promotion(s, config) for s in students]


def summarize(decisions: Iterable[PromotionDecision]) -> list[GradePromotionSummary]:
    """Per-grade counts of active students, in grade order, empty grades omitted."""
    summaries = {grade: GradePromotionSummary(grade=grade) for grade in Grade.ordered()}
    for decision in decisions:
        if decision.action == PromotionAction.SKIP:
            continue
        summary = summaries[decision.grade]
        summary.total += 1
        if decision.action == PromotionAction.PROMOTE:
            summary.to_promote += 1
        elif decision.action == PromotionAction.DETAIN:
            summary.to_detain += 1
        elif decision.action == PromotionAction.GRADUATE:
            summary.to_graduate += 1
    return [s for s in summaries.values() if s.total > 0]


def snapshot_student(student: Student) -> StudentSnapshot:
    """Build the planner's view of a stored student."""
    final_results = [
        SubjectMark.model_validate(r)
        for r in student.exam_results
        if r.exam_id == FINAL_EXAM_ID
    ]
    return StudentSnapshot(
        student_id=student.id,
        grade=student.grade,
        status=student.status,
        final_results=final_results or None,
    )


# ==========================================
# Service
# ==========================================

class PromotionService:
    """Year-end promotion of all students."""

    def __init__(self, db: Session):
        self.db = db
        self.settings = SettingsService(db)

    def _load_students(self) -> list[Student]:
        result = self.db.execute(select(Student).order_by(Student.id))
        return list(result.scalars().all())

    def preview(self) -> PromotionPreview:
        """Per-grade counts of what promotion would do."""
        academic_year = self.settings.require_academic_year()
        config = self.settings.get_config()
        decisions = plan_promotion(
            (snapshot_student(s) for s in self._load_students()),
            config,
        )
        return PromotionPreview(academic_year=academic_year, grades=summarize(decisions))

    def promote(self, today: date) -> PromotionResult:
        """Promote, detain and graduate every active student, then close the session.

        All changes are made in the caller's transaction so the batch commits
        or rolls back as a whole.
        """
        academic_year = self.settings.require_academic_year()
        config = self.settings.get_config()
        students = {s.id: s for s in self._load_students()}
        decisions = plan_promotion((snapshot_student(s) for s in students.values()), config)

        counts = {action: 0 for action in PromotionAction}
        for decision in decisions:
            counts[decision.action] += 1
            if decision.action == PromotionAction.SKIP:
                continue
            self._apply(students[decision.student_id], decision, today)

        self.db.flush()

        # Closing the session forces a new academic year to be entered before
        # the system is used again.
        self.settings.clear_academic_year()

        logger.info(
            f"Promotion for {academic_year} completed: "
            f"{counts[PromotionAction.PROMOTE]} promoted, "
            f"{counts[PromotionAction.DETAIN]} detained, "
            f"{counts[PromotionAction.GRADUATE]} graduated"
        )

        return PromotionResult(
            academic_year=academic_year,
            promotion_date=today,
            promoted=counts[PromotionAction.PROMOTE],
            detained=counts[PromotionAction.DETAIN],
            graduated=counts[PromotionAction.GRADUATE],
            skipped=counts[PromotionAction.SKIP],
            message=f"Session {academic_year} concluded. Set the new academic year to continue.",
        )

    def _apply(self, student: Student, decision: PromotionDecision, today: date) -> None:
        student.exam_results.clear()
        student.fee_payments = default_fee_payments().model_dump()

        if decision.action == PromotionAction.PROMOTE:
            student.grade = decision.next_grade
            student.roll_no = 0
        elif decision.action == PromotionAction.GRADUATE:
            student.status = StudentStatus.TRANSFERRED
            student.exit_date = today
            self.db.execute(delete(HostelResident).where(HostelResident.student_id == student.id))
