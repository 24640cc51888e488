"""Terminal exam marks, report cards and class mark statements."""

import logging
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.constants import TERMINAL_EXAMS
from app.core.exceptions import NotFoundError, ValidationError
from app.models.exam import ExamResult
from app.models.student import Grade, Student, StudentStatus
from app.schemas.exam import (
    ClassMarksResult,
    ClassMarksUpdate,
    ClassMarkStatement,
    ClassMarkStatementRow,
    ReportCard,
    ResultOutcome,
    StudentMarksUpdate,
    SubjectMark,
    SubjectResultLine,
)
from app.schemas.settings import GradeDefinition, GradingMode
from app.services.promotion import evaluate_result, obtained_marks, subject_full_marks
from app.services.settings import SettingsService

logger = logging.getLogger(__name__)

EXAM_NAMES = {exam["id"]: exam["name"] for exam in TERMINAL_EXAMS}


# ==========================================
# Validation and scoring
# ==========================================

def validate_marks(
    results: Sequence[SubjectMark],
    definition: GradeDefinition,
) -> list[SubjectMark]:
    """Check marks against the grade's subjects and full marks.

    Blank entries are dropped. Raises ``ValidationError`` on unknown or
    repeated subjects, on a mark shape that does not match the subject's
    configuration, or on marks above the full marks.
    """
    split_marks = definition.has_activity_marks
    cleaned: list[SubjectMark] = []
    seen: set[str] = set()

    for mark in results:
        subject = definition.subject(mark.subject)
        if subject is None:
            raise ValidationError(
                f"Unknown subject: {mark.subject}",
                details={"subject": mark.subject},
            )
        if mark.subject in seen:
            raise ValidationError(
                f"Duplicate subject: {mark.subject}",
                details={"subject": mark.subject},
            )
        seen.add(mark.subject)

        if mark.is_blank:
            continue

        if subject.grading_mode == GradingMode.GRADE:
            if mark.marks is not None or mark.exam_marks is not None or mark.activity_marks is not None:
                raise ValidationError(
                    f"{subject.name} is graded A-D, numeric marks are not accepted",
                    details={"subject": subject.name},
                )
        elif mark.grade is not None:
            raise ValidationError(
                f"{subject.name} is graded on marks, a letter grade is not accepted",
                details={"subject": subject.name},
            )
        elif split_marks:
            if mark.marks is not None:
                raise ValidationError(
                    f"{subject.name} takes separate exam and activity marks",
                    details={"subject": subject.name},
                )
            _check_ceiling(subject.name, "exam_marks", mark.exam_marks, subject.exam_full_marks)
            _check_ceiling(subject.name, "activity_marks", mark.activity_marks, subject.activity_full_marks)
        else:
            if mark.exam_marks is not None or mark.activity_marks is not None:
                raise ValidationError(
                    f"{subject.name} takes a single mark",
                    details={"subject": subject.name},
                )
            _check_ceiling(subject.name, "marks", mark.marks, subject.exam_full_marks)

        cleaned.append(mark)

    return cleaned


def _check_ceiling(subject: str, field: str, value: Decimal | None, full_marks: int) -> None:
    if value is not None and value > full_marks:
        raise ValidationError(
            f"{subject}: {field} {value} exceeds full marks {full_marks}",
            details={"subject": subject, "field": field, "full_marks": full_marks},
        )


def calculate_ranks(scores: Iterable[tuple[int, Decimal, ResultOutcome]]) -> dict[int, int]:
    """Class rank by total marks among students who did not fail.

    Equal totals share a rank and the next rank is skipped (1, 2, 2, 4).
    """
    ranked = sorted(
        ((student_id, total) for student_id, total, outcome in scores if outcome != ResultOutcome.FAIL),
        key=lambda item: item[1],
        reverse=True,
    )
    ranks: dict[int, int] = {}
    previous_total = None
    previous_rank = 0
    for position, (student_id, total) in enumerate(ranked, start=1):
        rank = previous_rank if total == previous_total else position
        ranks[student_id] = rank
        previous_total, previous_rank = total, rank
    return ranks


def performance_remarks(percentage: Decimal | None, outcome: ResultOutcome) -> str:
    if outcome == ResultOutcome.FAIL:
        return "Requires serious attention"
    p = percentage or Decimal(0)
    if p >= 90:
        return "Outstanding"
    if p >= 80:
        return "Excellent"
    if p >= 70:
        return "Very Good"
    if p >= 60:
        return "Good"
    if p >= 50:
        return "Satisfactory"
    return "Needs Improvement"


def _percentage(obtained: Decimal, full: int) -> Decimal | None:
    if full <= 0:
        return None
    return (obtained * 100 / full).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def total_obtained(results: Sequence[SubjectMark], definition: GradeDefinition) -> Decimal:
    """Sum of marks over the numerically graded subjects."""
    split_marks = definition.has_activity_marks
    by_subject = {m.subject: m for m in results}
    return sum(
        (
            obtained_marks(by_subject.get(s.name), split_marks)
            for s in definition.subjects
            if s.grading_mode == GradingMode.MARKS
        ),
        Decimal(0),
    )


def _results_for(student: Student, exam_id: str) -> list[SubjectMark]:
    return [SubjectMark.model_validate(r) for r in student.exam_results if r.exam_id == exam_id]


# ==========================================
# Service
# ==========================================

class ExamService:
    """Marks entry and result reporting for terminal exams."""

    def __init__(self, db: Session):
        self.db = db
        self.settings = SettingsService(db)

    def _get_student(self, student_id: int) -> Student:
        result = self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def _get_active_students(self, grade: Grade) -> list[Student]:
        result = self.db.execute(
            select(Student)
            .where(Student.grade == grade, Student.status == StudentStatus.ACTIVE)
            .order_by(Student.roll_no, Student.name, Student.id)
        )
        return list(result.scalars().all())

    def _replace_results(self, student: Student, exam_id: str, marks: list[SubjectMark]) -> None:
        for existing in [r for r in student.exam_results if r.exam_id == exam_id]:
            student.exam_results.remove(existing)
        # Old rows must be gone before the new ones hit the unique constraint
        self.db.flush()

        for mark in marks:
            student.exam_results.append(
                ExamResult(
                    exam_id=exam_id,
                    subject=mark.subject,
                    marks=mark.marks,
                    exam_marks=mark.exam_marks,
                    activity_marks=mark.activity_marks,
                    grade=mark.grade,
                )
            )

    def save_student_marks(self, student_id: int, request: StudentMarksUpdate) -> ReportCard:
        """Replace one student's marks for an exam."""
        student = self._get_student(student_id)
        definition = self.settings.get_grade_definition(student.grade)
        marks = validate_marks(request.results, definition)

        self._replace_results(student, request.exam_id, marks)
        self.db.flush()

        logger.info(f"Marks saved: student={student.id} exam={request.exam_id} subjects={len(marks)}")
        return self.get_report_card(student.id, request.exam_id)

    def save_class_marks(self, grade: Grade, request: ClassMarksUpdate) -> ClassMarksResult:
        """Replace marks for several students of a grade as one batch.

        Every entry is validated before anything is written; one bad entry
        rejects the whole batch.
        """
        definition = self.settings.get_grade_definition(grade)
        students = {s.id: s for s in self._get_active_students(grade)}

        prepared: list[tuple[Student, list[SubjectMark]]] = []
        seen: set[int] = set()
        for entry in request.entries:
            student = students.get(entry.student_id)
            if student is None:
                raise ValidationError(
                    f"Student {entry.student_id} is not an active student of {grade.value}",
                    details={"student_id": entry.student_id},
                )
            if entry.student_id in seen:
                raise ValidationError(
                    f"Student {entry.student_id} appears more than once",
                    details={"student_id": entry.student_id},
                )
            seen.add(entry.student_id)
            try:
                prepared.append((student, validate_marks(entry.results, definition)))
            except ValidationError as e:
                raise ValidationError(
                    f"{student.name}: {e.message}",
                    details={"student_id": student.id, **e.details},
                )

        for student, marks in prepared:
            self._replace_results(student, request.exam_id, marks)
        self.db.flush()

        logger.info(f"Class marks saved: grade={grade.value} exam={request.exam_id} students={len(prepared)}")
        return ClassMarksResult(
            exam_id=request.exam_id,
            grade=grade,
            students_updated=len(prepared),
            message=f"Saved {EXAM_NAMES[request.exam_id]} marks for {len(prepared)} students.",
        )

    def _class_ranks(self, grade: Grade, exam_id: str, definition: GradeDefinition) -> dict[int, int]:
        scores = []
        for s in self._get_active_students(grade):
            results = _results_for(s, exam_id)
            evaluation = evaluate_result(results, definition, grade)
            scores.append((s.id, total_obtained(results, definition), evaluation.outcome))
        return calculate_ranks(scores)

    def get_report_card(self, student_id: int, exam_id: str) -> ReportCard:
        """A student's marks for one exam with totals, result and class rank."""
        if exam_id not in EXAM_NAMES:
            raise NotFoundError("Exam", exam_id)
        student = self._get_student(student_id)
        definition = self.settings.get_grade_definition(student.grade)
        split_marks = definition.has_activity_marks

        results = _results_for(student, exam_id)
        by_subject = {m.subject: m for m in results}
        evaluation = evaluate_result(results, definition, student.grade)

        lines: list[SubjectResultLine] = []
        total_full = 0
        for subject in definition.subjects:
            mark = by_subject.get(subject.name)
            numeric = subject.grading_mode == GradingMode.MARKS
            full = subject_full_marks(subject, split_marks) if numeric else 0
            total_full += full
            lines.append(
                SubjectResultLine(
                    subject=subject.name,
                    full_marks=full,
                    marks=mark,
                    obtained=obtained_marks(mark, split_marks) if numeric and mark else None,
                    failed=subject.name in evaluation.failed_subjects,
                )
            )

        total = total_obtained(results, definition)
        percentage = _percentage(total, total_full)
        rank = None
        if student.is_active and not evaluation.missing:
            rank = self._class_ranks(student.grade, exam_id, definition).get(student.id)

        return ReportCard(
            student_id=student.id,
            student_name=student.name,
            roll_no=student.roll_no,
            grade=student.grade,
            exam_id=exam_id,
            exam_name=EXAM_NAMES[exam_id],
            lines=lines,
            total_obtained=total,
            total_full_marks=total_full,
            percentage=percentage,
            evaluation=evaluation,
            rank=rank,
            remarks=performance_remarks(percentage, evaluation.outcome),
        )

    def class_mark_statement(self, grade: Grade, exam_id: str) -> ClassMarkStatement:
        """Marks and results of every active student of a grade."""
        if exam_id not in EXAM_NAMES:
            raise NotFoundError("Exam", exam_id)
        definition = self.settings.get_grade_definition(grade)

        rows: list[ClassMarkStatementRow] = []
        for student in self._get_active_students(grade):
            results = _results_for(student, exam_id)
            rows.append(
                ClassMarkStatementRow(
                    student_id=student.id,
                    roll_no=student.roll_no,
                    student_name=student.name,
                    results=results,
                    total_obtained=total_obtained(results, definition),
                    evaluation=evaluate_result(results, definition, grade),
                )
            )

        ranks = calculate_ranks((r.student_id, r.total_obtained, r.evaluation.outcome) for r in rows)
        for row in rows:
            row.rank = ranks.get(row.student_id)

        return ClassMarkStatement(
            grade=grade,
            exam_id=exam_id,
            exam_name=EXAM_NAMES[exam_id],
            subjects=[s.name for s in definition.subjects],
            rows=rows,
        )

    def export_class_mark_statement(self, grade: Grade, exam_id: str) -> bytes:
        """Class mark statement as an Excel workbook."""
        statement = self.class_mark_statement(grade, exam_id)
        definition = self.settings.get_grade_definition(grade)
        split_marks = definition.has_activity_marks

        wb = Workbook()
        ws = wb.active
        ws.title = "Mark Statement"

        # Styles
        title_font = Font(bold=True, size=14)
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        fail_fill = PatternFill(start_color="F8CBAD", end_color="F8CBAD", fill_type="solid")
        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )
        center_align = Alignment(horizontal='center', vertical='center')

        headers = ["Roll No", "Name", *statement.subjects, "Total", "Result", "Rank", "Failed Subjects"]

        # Title row
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(headers))
        title_cell = ws.cell(row=1, column=1, value=f"{grade.value} - {statement.exam_name}")
        title_cell.font = title_font
        title_cell.alignment = center_align
        title_cell.fill = PatternFill(start_color="B4C6E7", end_color="B4C6E7", fill_type="solid")

        for col_idx, header in enumerate(headers, start=1):
            cell = ws.cell(row=2, column=col_idx, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.border = thin_border
            cell.alignment = center_align

        subject_defs = {s.name: s for s in definition.subjects}
        for row_idx, row in enumerate(statement.rows, start=3):
            by_subject = {m.subject: m for m in row.results}
            values = [row.roll_no, row.student_name]
            for name in statement.subjects:
                mark = by_subject.get(name)
                if mark is None:
                    values.append("")
                elif subject_defs[name].grading_mode == GradingMode.GRADE:
                    values.append(mark.grade or "")
                else:
                    values.append(float(obtained_marks(mark, split_marks)))
            values.extend([
                float(row.total_obtained),
                row.evaluation.outcome.value,
                row.rank or "",
                ", ".join(row.evaluation.failed_subjects),
            ])

            failed_columns = {
                col_idx
                for col_idx, name in enumerate(statement.subjects, start=3)
                if name in row.evaluation.failed_subjects
            }
            for col_idx, value in enumerate(values, start=1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = thin_border
                if col_idx in failed_columns:
                    cell.fill = fail_fill

        ws.column_dimensions["A"].width = 10
        ws.column_dimensions["B"].width = 25
        for col_idx in range(3, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col_idx)].width = 14
        ws.freeze_panes = "C3"

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output.getvalue()
