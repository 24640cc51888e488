from datetime import date
from decimal import Decimal

import pytest

from app.core.constants import DEFAULT_GRADE_DEFINITIONS
from app.core.exceptions import AcademicYearNotSetError
from app.models.exam import ExamResult
from app.models.hostel import HostelBlock, HostelResident, HostelRoom, RoomType
from app.models.student import Grade, StudentStatus
from app.schemas.exam import ResultOutcome, SubjectMark
from app.schemas.promotion import PromotionAction, StudentSnapshot
from app.schemas.settings import GradeDefinition, SchoolConfig, SubjectDefinition
from app.services.fee import default_fee_payments
from app.services.promotion import (
    NO_DATA,
    PromotionService,
    decide_promotion,
    evaluate_result,
    final_verdict,
    plan_promotion,
    summarize,
)
from app.services.settings import SettingsService
from tests.conftest import make_student

SENIOR = GradeDefinition.model_validate(DEFAULT_GRADE_DEFINITIONS[Grade.X])
MIDDLE = GradeDefinition.model_validate(DEFAULT_GRADE_DEFINITIONS[Grade.V])


def single_marks(definition: GradeDefinition, value, **overrides) -> list[SubjectMark]:
    return [
        SubjectMark(subject=s.name, marks=Decimal(overrides.get(s.name, value)))
        for s in definition.subjects
    ]


def split_marks(definition: GradeDefinition, exam, activity, **overrides) -> list[SubjectMark]:
    return [
        SubjectMark(
            subject=s.name,
            exam_marks=Decimal(overrides.get(s.name, exam)),
            activity_marks=Decimal(activity),
        )
        for s in definition.subjects
    ]


def config() -> SchoolConfig:
    return SchoolConfig(
        academic_year="2025-2026",
        grade_definitions={
            grade: GradeDefinition.model_validate(raw)
            for grade, raw in DEFAULT_GRADE_DEFINITIONS.items()
        },
    )


# ==========================================
# evaluate_result
# ==========================================

class TestEvaluateResult:
    def test_missing_results_fail(self):
        evaluation = evaluate_result(None, SENIOR, Grade.X)
        assert evaluation.outcome == ResultOutcome.FAIL
        assert evaluation.failed_subjects == [NO_DATA]
        assert evaluation.missing is True

    def test_empty_results_fail(self):
        assert evaluate_result([], SENIOR, Grade.X).outcome == ResultOutcome.FAIL

    def test_missing_definition_fails(self):
        results = single_marks(SENIOR, 80)
        assert evaluate_result(results, None, Grade.X).missing is True

    def test_all_subjects_passed(self):
        evaluation = evaluate_result(single_marks(SENIOR, 60), SENIOR, Grade.X)
        assert evaluation.outcome == ResultOutcome.PASS
        assert evaluation.failed_subjects == []

    def test_one_failed_subject_is_simple_pass(self):
        results = single_marks(SENIOR, 60, Mathematics=20)
        evaluation = evaluate_result(results, SENIOR, Grade.X)
        assert evaluation.outcome == ResultOutcome.SIMPLE_PASS
        assert evaluation.failed_subjects == ["Mathematics"]
        assert evaluation.passed

    def test_two_failed_subjects_fail(self):
        results = single_marks(SENIOR, 60, Mathematics=20, Science=32)
        evaluation = evaluate_result(results, SENIOR, Grade.X)
        assert evaluation.outcome == ResultOutcome.FAIL
        assert evaluation.failed_subjects == ["Mathematics", "Science"]

    def test_pass_mark_is_inclusive(self):
        assert evaluate_result(single_marks(SENIOR, 33), SENIOR, Grade.X).outcome == ResultOutcome.PASS

    def test_subject_without_marks_counts_as_zero(self):
        results = single_marks(SENIOR, 60)[:-1]
        evaluation = evaluate_result(results, SENIOR, Grade.X)
        assert evaluation.failed_subjects == [SENIOR.subjects[-1].name]

    def test_middle_grade_passes_on_exam_component(self):
        # 19 + 40 = 59 overall, but the written exam alone is below 20
        results = split_marks(MIDDLE, 40, 20, English=19, Mathematics=19)
        evaluation = evaluate_result(results, MIDDLE, Grade.V)
        assert evaluation.outcome == ResultOutcome.FAIL
        assert evaluation.failed_subjects == ["English", "Mathematics"]

    def test_middle_grade_activity_marks_do_not_rescue(self):
        results = split_marks(MIDDLE, 20, 0)
        assert evaluate_result(results, MIDDLE, Grade.V).outcome == ResultOutcome.PASS

    def test_qualitative_subjects_ignored(self):
        definition = GradeDefinition(
            subjects=[
                SubjectDefinition(name="English", exam_full_marks=100),
                SubjectDefinition(name="Art", grading_mode="grade"),
            ]
        )
        results = [
            SubjectMark(subject="English", marks=Decimal(70)),
            SubjectMark(subject="Art", grade="D"),
        ]
        assert evaluate_result(results, definition, Grade.IX).outcome == ResultOutcome.PASS

    def test_zero_full_mark_subjects_ignored(self):
        definition = GradeDefinition(
            subjects=[
                SubjectDefinition(name="English", exam_full_marks=100),
                SubjectDefinition(name="Games", exam_full_marks=0),
            ]
        )
        results = [SubjectMark(subject="English", marks=Decimal(50))]
        assert evaluate_result(results, definition, Grade.X).outcome == ResultOutcome.PASS

    def test_final_verdict_collapses_simple_pass(self):
        results = single_marks(SENIOR, 60, Mathematics=10)
        assert final_verdict(results, SENIOR, Grade.X) == ResultOutcome.PASS
        assert final_verdict(None, SENIOR, Grade.X) == ResultOutcome.FAIL


# ==========================================
# Planning
# ==========================================

class TestPlanPromotion:
    def test_inactive_student_skipped(self):
        snapshot = StudentSnapshot(student_id=1, grade=Grade.V, status=StudentStatus.TRANSFERRED)
        assert decide_promotion(snapshot, config()).action == PromotionAction.SKIP

    def test_missing_result_detained(self):
        snapshot = StudentSnapshot(student_id=1, grade=Grade.V, status=StudentStatus.ACTIVE)
        decision = decide_promotion(snapshot, config())
        assert decision.action == PromotionAction.DETAIN
        assert decision.next_grade is None

    def test_passing_student_promoted_one_level(self):
        snapshot = StudentSnapshot(
            student_id=1,
            grade=Grade.V,
            status=StudentStatus.ACTIVE,
            final_results=split_marks(MIDDLE, 50, 30),
        )
        decision = decide_promotion(snapshot, config())
        assert decision.action == PromotionAction.PROMOTE
        assert decision.next_grade == Grade.VI

    def test_passing_terminal_student_graduates(self):
        snapshot = StudentSnapshot(
            student_id=1,
            grade=Grade.X,
            status=StudentStatus.ACTIVE,
            final_results=single_marks(SENIOR, 70),
        )
        assert decide_promotion(snapshot, config()).action == PromotionAction.GRADUATE

    def test_summary_counts_per_grade(self):
        snapshots = [
            StudentSnapshot(student_id=1, grade=Grade.X, status=StudentStatus.ACTIVE,
                            final_results=single_marks(SENIOR, 70)),
            StudentSnapshot(student_id=2, grade=Grade.X, status=StudentStatus.ACTIVE),
            StudentSnapshot(student_id=3, grade=Grade.V, status=StudentStatus.TRANSFERRED),
        ]
        summaries = summarize(plan_promotion(snapshots, config()))
        assert len(summaries) == 1
        assert summaries[0].grade == Grade.X
        assert (summaries[0].total, summaries[0].to_graduate, summaries[0].to_detain) == (2, 1, 1)


# ==========================================
# PromotionService
# ==========================================

def add_final_results(db, student, results: list[SubjectMark]):
    for mark in results:
        student.exam_results.append(
            ExamResult(
                exam_id="terminal3",
                subject=mark.subject,
                marks=mark.marks,
                exam_marks=mark.exam_marks,
                activity_marks=mark.activity_marks,
            )
        )
    db.commit()


class TestPromotionService:
    def test_requires_academic_year(self, db):
        with pytest.raises(AcademicYearNotSetError):
            PromotionService(db).promote(date(2026, 3, 31))

    def test_promotion_properties(self, db, academic_year):
        passing = make_student(db, "Passing Student", grade=Grade.V, roll_no=4)
        add_final_results(db, passing, split_marks(MIDDLE, 50, 30))

        failing = make_student(db, "Failing Student", grade=Grade.V, roll_no=5,
                               fee_payments={"admission_fee_paid": False})
        add_final_results(db, failing, split_marks(MIDDLE, 10, 30))

        missing = make_student(db, "Missing Student", grade=Grade.V, roll_no=6)

        graduate = make_student(db, "Graduate Student", grade=Grade.X, roll_no=1)
        add_final_results(db, graduate, single_marks(SENIOR, 80))

        left = make_student(db, "Left Student", grade=Grade.VII, roll_no=2,
                            status=StudentStatus.TRANSFERRED, exit_date=date(2025, 9, 1))
        add_final_results(db, left, single_marks(SENIOR, 10))

        result = PromotionService(db).promote(date(2026, 3, 31))
        db.commit()

        assert (result.promoted, result.detained, result.graduated, result.skipped) == (1, 2, 1, 1)
        assert result.academic_year == academic_year

        assert passing.grade == Grade.VI
        assert passing.roll_no == 0
        assert passing.exam_results == []

        for detained in (failing, missing):
            assert detained.grade == Grade.V
            assert detained.exam_results == []
            assert detained.fee_payments == default_fee_payments().model_dump()
        assert failing.roll_no == 5

        assert graduate.status == StudentStatus.TRANSFERRED
        assert graduate.exit_date == date(2026, 3, 31)
        assert graduate.grade == Grade.X

        assert left.status == StudentStatus.TRANSFERRED
        assert left.exit_date == date(2025, 9, 1)
        assert len(left.exam_results) == len(SENIOR.subjects)

    def test_promotion_closes_session(self, db, academic_year):
        make_student(db, "Someone", grade=Grade.I)
        PromotionService(db).promote(date(2026, 3, 31))
        db.commit()
        assert SettingsService(db).get_academic_year() is None

    def test_graduates_leave_the_hostel(self, db, academic_year):
        graduate = make_student(db, "Boarding Graduate", grade=Grade.X, roll_no=1)
        add_final_results(db, graduate, single_marks(SENIOR, 80))
        detained = make_student(db, "Boarding Junior", grade=Grade.IX, roll_no=1)
        room = HostelRoom(block=HostelBlock.A, room_number=101, room_type=RoomType.DOUBLE, capacity=2)
        db.add(room)
        db.flush()
        for number, student in enumerate((graduate, detained), start=1):
            db.add(HostelResident(
                student_id=student.id, room_id=room.id,
                registration_id=f"BMS-H-{number:03d}", date_of_joining=date(2025, 6, 1),
            ))
        db.commit()

        PromotionService(db).promote(date(2026, 3, 31))
        db.commit()

        assert [r.student_id for r in db.query(HostelResident).all()] == [detained.id]

    def test_preview_changes_nothing(self, db, academic_year):
        student = make_student(db, "Preview Student", grade=Grade.X)
        add_final_results(db, student, single_marks(SENIOR, 80))

        preview = PromotionService(db).preview()

        assert preview.grades[0].to_graduate == 1
        assert student.status == StudentStatus.ACTIVE
        assert SettingsService(db).get_academic_year() == academic_year


class TestPromotionEndpoints:
    def test_teacher_cannot_promote(self, client, teacher_headers, academic_year):
        response = client.post("/api/v1/promotion", headers=teacher_headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PERMISSION_DENIED"

    def test_promote_then_gate(self, client, admin_headers, academic_year):
        response = client.post("/api/v1/promotion", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["academic_year"] == academic_year

        response = client.get("/api/v1/promotion/preview", headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ACADEMIC_YEAR_NOT_SET"
