from decimal import Decimal
from io import BytesIO

import pytest
from openpyxl import load_workbook

from app.core.exceptions import ValidationError
from app.models.student import Grade, StudentStatus
from app.schemas.exam import ResultOutcome, StudentMarksUpdate, SubjectMark
from app.schemas.settings import GradeDefinition, SubjectDefinition
from app.services.exam import ExamService, calculate_ranks, performance_remarks, validate_marks
from app.services.settings import SettingsService
from tests.conftest import make_student

SPLIT = GradeDefinition(
    subjects=[
        SubjectDefinition(name="English", exam_full_marks=60, activity_full_marks=40),
        SubjectDefinition(name="Mathematics", exam_full_marks=60, activity_full_marks=40),
        SubjectDefinition(name="Art", exam_full_marks=0, grading_mode="grade"),
    ]
)
SINGLE = GradeDefinition(
    subjects=[
        SubjectDefinition(name="English", exam_full_marks=100),
        SubjectDefinition(name="Mathematics", exam_full_marks=100),
    ]
)


class TestValidateMarks:
    def test_blank_entries_dropped(self):
        cleaned = validate_marks(
            [SubjectMark(subject="English", marks=Decimal(50)), SubjectMark(subject="Mathematics")],
            SINGLE,
        )
        assert [m.subject for m in cleaned] == ["English"]

    def test_ceiling_enforced(self):
        with pytest.raises(ValidationError) as exc:
            validate_marks([SubjectMark(subject="English", marks=Decimal(101))], SINGLE)
        assert exc.value.details["full_marks"] == 100

    def test_split_ceilings(self):
        validate_marks(
            [SubjectMark(subject="English", exam_marks=Decimal(60), activity_marks=Decimal(40))],
            SPLIT,
        )
        with pytest.raises(ValidationError):
            validate_marks(
                [SubjectMark(subject="English", exam_marks=Decimal(50), activity_marks=Decimal(41))],
                SPLIT,
            )

    def test_split_grade_rejects_single_mark(self):
        with pytest.raises(ValidationError):
            validate_marks([SubjectMark(subject="English", marks=Decimal(50))], SPLIT)

    def test_qualitative_subject_takes_letter_only(self):
        validate_marks([SubjectMark(subject="Art", grade="b")], SPLIT)
        with pytest.raises(ValidationError):
            validate_marks([SubjectMark(subject="Art", marks=Decimal(5))], SPLIT)
        with pytest.raises(ValidationError):
            validate_marks([SubjectMark(subject="English", grade="A")], SINGLE)

    def test_unknown_and_duplicate_subjects(self):
        with pytest.raises(ValidationError):
            validate_marks([SubjectMark(subject="Latin", marks=Decimal(10))], SINGLE)
        with pytest.raises(ValidationError):
            validate_marks(
                [
                    SubjectMark(subject="English", marks=Decimal(10)),
                    SubjectMark(subject="English", marks=Decimal(20)),
                ],
                SINGLE,
            )


def test_calculate_ranks_shares_ties_and_skips_failures():
    ranks = calculate_ranks([
        (1, Decimal(300), ResultOutcome.PASS),
        (2, Decimal(350), ResultOutcome.PASS),
        (3, Decimal(300), ResultOutcome.SIMPLE_PASS),
        (4, Decimal(400), ResultOutcome.FAIL),
        (5, Decimal(250), ResultOutcome.PASS),
    ])
    assert ranks == {2: 1, 1: 2, 3: 2, 5: 4}


def test_performance_remarks():
    assert performance_remarks(Decimal("92.5"), ResultOutcome.PASS) == "Outstanding"
    assert performance_remarks(Decimal("55"), ResultOutcome.SIMPLE_PASS) == "Satisfactory"
    assert performance_remarks(Decimal("95"), ResultOutcome.FAIL) == "Requires serious attention"


class TestExamService:
    def test_save_and_report_card(self, db):
        top = make_student(db, "Top", grade=Grade.X, roll_no=1)
        second = make_student(db, "Second", grade=Grade.X, roll_no=2)
        service = ExamService(db)
        subjects = [s.name for s in SettingsService(db).get_grade_definition(Grade.X).subjects]

        service.save_student_marks(
            top.id,
            StudentMarksUpdate(
                exam_id="terminal1",
                results=[SubjectMark(subject=s, marks=Decimal(90)) for s in subjects],
            ),
        )
        card = service.save_student_marks(
            second.id,
            StudentMarksUpdate(
                exam_id="terminal1",
                results=[SubjectMark(subject=s, marks=Decimal(60)) for s in subjects],
            ),
        )
        db.commit()

        assert card.total_obtained == Decimal(60 * len(subjects))
        assert card.total_full_marks == 100 * len(subjects)
        assert card.percentage == Decimal("60.00")
        assert card.evaluation.outcome == ResultOutcome.PASS
        assert card.rank == 2
        assert card.remarks == "Good"
        assert service.get_report_card(top.id, "terminal1").rank == 1

    def test_resave_replaces_marks(self, db):
        student = make_student(db, "Resave", grade=Grade.IX, roll_no=1)
        service = ExamService(db)
        service.save_student_marks(
            student.id,
            StudentMarksUpdate(exam_id="terminal2", results=[SubjectMark(subject="English", marks=Decimal(40))]),
        )
        card = service.save_student_marks(
            student.id,
            StudentMarksUpdate(exam_id="terminal2", results=[SubjectMark(subject="English", marks=Decimal(70))]),
        )
        db.commit()

        assert len(student.exam_results) == 1
        english = next(line for line in card.lines if line.subject == "English")
        assert english.obtained == Decimal(70)

    def test_missing_report_card_fails_without_rank(self, db):
        student = make_student(db, "Absent", grade=Grade.IX, roll_no=1)
        card = ExamService(db).get_report_card(student.id, "terminal3")
        assert card.evaluation.missing
        assert card.rank is None


class TestMarksEndpoints:
    def test_class_batch_is_all_or_nothing(self, client, db, admin_headers):
        good = make_student(db, "Good", grade=Grade.IX, roll_no=1)
        bad = make_student(db, "Bad", grade=Grade.IX, roll_no=2)

        response = client.put(
            "/api/v1/exams/classes/Class IX/marks",
            json={
                "exam_id": "terminal1",
                "entries": [
                    {"student_id": good.id, "results": [{"subject": "English", "marks": 80}]},
                    {"student_id": bad.id, "results": [{"subject": "English", "marks": 180}]},
                ],
            },
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"]["details"]["student_id"] == bad.id

        db.expire_all()
        assert good.exam_results == []

    def test_class_batch_rejects_other_grades(self, client, db, admin_headers):
        other = make_student(db, "Other Class", grade=Grade.X, roll_no=1)
        response = client.put(
            "/api/v1/exams/classes/Class IX/marks",
            json={
                "exam_id": "terminal1",
                "entries": [{"student_id": other.id, "results": []}],
            },
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_only_class_teacher_enters_marks(self, client, db, teacher, teacher_headers):
        student = make_student(db, "Pupil", grade=Grade.IX, roll_no=1)
        payload = {"exam_id": "terminal1", "results": [{"subject": "English", "marks": 55}]}
        url = f"/api/v1/exams/students/{student.id}/marks"

        assert client.put(url, json=payload, headers=teacher_headers).status_code == 403

        SettingsService(db).assign_class_teacher(teacher.id, Grade.IX)
        db.commit()

        response = client.put(url, json=payload, headers=teacher_headers)
        assert response.status_code == 200
        assert response.json()["exam_name"] == "First Terminal Exam"

    def test_unknown_exam_rejected(self, client, db, admin_headers):
        student = make_student(db, "Pupil", grade=Grade.IX, roll_no=1)
        response = client.put(
            f"/api/v1/exams/students/{student.id}/marks",
            json={"exam_id": "midterm", "results": []},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_statement_export(self, client, db, admin_headers):
        make_student(db, "Exported", grade=Grade.IX, roll_no=1)
        make_student(db, "Left", grade=Grade.IX, roll_no=2, status=StudentStatus.TRANSFERRED)

        response = client.get(
            "/api/v1/exams/classes/Class IX/statement/terminal1/export",
            headers=admin_headers,
        )
        assert response.status_code == 200

        ws = load_workbook(BytesIO(response.content)).active
        assert ws.cell(row=2, column=1).value == "Roll No"
        assert ws.cell(row=3, column=2).value == "Exported"
        assert ws.cell(row=4, column=2).value is None
