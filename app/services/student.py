"""Student management service."""

import logging
from datetime import date, datetime
from io import BytesIO

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, PatternFill
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.models.student import Category, Gender, Grade, Student, StudentStatus
from app.schemas.student import (
    PaginatedStudentResponse,
    StudentBulkUploadResult,
    StudentCreate,
    StudentFilter,
    StudentResponse,
    StudentUpdate,
)
from app.services.fee import default_fee_payments
from app.services.settings import SettingsService

logger = logging.getLogger(__name__)


# Excel template columns for student upload: (field, header, required)
STUDENT_TEMPLATE_COLUMNS = [
    ("roll_no", "Roll No", True),
    ("name", "Name", True),
    ("contact", "Contact", False),
    ("date_of_birth", "DOB (YYYY-MM-DD)", False),
    ("gender", "Gender", False),
    ("address", "Address", False),
    ("aadhaar_number", "Aadhaar", False),
    ("pen", "PEN", False),
    ("category", "Category", False),
    ("religion", "Religion", False),
    ("father_name", "Father Name", False),
    ("mother_name", "Mother Name", False),
    ("guardian_name", "Guardian Name", False),
]


def format_student_id(student: Student, academic_year: str) -> str:
    """School-facing student ID, e.g. ``BMS250501`` for roll 1 of Class V in 2025-2026."""
    year_suffix = academic_year[:4][-2:]
    return f"{settings.SCHOOL_CODE}{year_suffix}{student.grade.code}{student.roll_no:02d}"


def _cell_text(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _parse_date(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid date: '{value}'", details={"column": "DOB (YYYY-MM-DD)"})


def _parse_choice(enum_cls, value: str | None, column: str):
    if not value:
        return None
    for member in enum_cls:
        if member.value.lower() == value.lower():
            return member
    raise ValidationError(f"Invalid {column.lower()}: '{value}'", details={"column": column})


class StudentService:
    """Student management service."""

    def __init__(self, db: Session):
        self.db = db
        self.settings = SettingsService(db)

    def to_response(self, student: Student, academic_year: str | None = None) -> StudentResponse:
        response = StudentResponse.model_validate(student)
        if academic_year:
            response.student_id = format_student_id(student, academic_year)
        return response

    def create_student(self, request: StudentCreate) -> StudentResponse:
        """Create a new student."""
        student = Student(
            **request.model_dump(),
            status=StudentStatus.ACTIVE,
            fee_payments=default_fee_payments().model_dump(),
        )
        self.db.add(student)
        self.db.flush()
        self.db.refresh(student)
        logger.info(f"Student created: {student.name} ({student.grade.value})")
        return self.to_response(student, self.settings.get_academic_year())

    def get_student(self, student_id: int) -> Student:
        """Get student by ID."""
        result = self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def get_student_response(self, student_id: int) -> StudentResponse:
        return self.to_response(self.get_student(student_id), self.settings.get_academic_year())

    def find_by_student_id(self, formatted_id: str) -> Student:
        """Find an active student by formatted ID in the current academic year."""
        academic_year = self.settings.require_academic_year()
        wanted = formatted_id.strip().lower()
        result = self.db.execute(
            select(Student)
            .where(Student.status == StudentStatus.ACTIVE)
            .order_by(Student.id)
        )
        for student in result.scalars().all():
            if format_student_id(student, academic_year).lower() == wanted:
                return student
        raise NotFoundError("Student", formatted_id)

    def update_student(self, student_id: int, request: StudentUpdate) -> StudentResponse:
        """Update a student."""
        student = self.get_student(student_id)
        update_data = request.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(student, field, value)
        self.db.flush()
        self.db.refresh(student)
        return self.to_response(student, self.settings.get_academic_year())

    def delete_student(self, student_id: int) -> None:
        """Delete a student."""
        student = self.get_student(student_id)
        self.db.delete(student)
        self.db.flush()

    def list_students(
        self,
        filters: StudentFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedStudentResponse:
        """List students with filtering and pagination."""
        query = select(Student)

        if filters:
            if filters.grade:
                query = query.where(Student.grade == filters.grade)
            if filters.status:
                query = query.where(Student.status == filters.status)
            if filters.search:
                search_term = f"%{filters.search}%"
                query = query.where(
                    or_(
                        Student.name.ilike(search_term),
                        Student.father_name.ilike(search_term),
                        Student.mother_name.ilike(search_term),
                    )
                )

        # Get total count
        count_query = select(func.count()).select_from(query.subquery())
        total = self.db.execute(count_query).scalar() or 0

        # Apply pagination
        offset = (page - 1) * page_size
        query = query.order_by(Student.roll_no, Student.name, Student.id)
        query = query.offset(offset).limit(page_size)

        students = self.db.execute(query).scalars().all()
        academic_year = self.settings.get_academic_year()

        return PaginatedStudentResponse.build(
            [self.to_response(s, academic_year) for s in students],
            total,
            page,
            page_size,
        )

    def generate_template(self) -> bytes:
        """Generate Excel template for student bulk upload."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Students"

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        required_fill = PatternFill(start_color="C00000", end_color="C00000", fill_type="solid")

        for col_idx, (_, header, required) in enumerate(STUDENT_TEMPLATE_COLUMNS, start=1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.font = header_font
            cell.fill = required_fill if required else header_fill
            ws.column_dimensions[cell.column_letter].width = max(14, len(header) + 4)

        # Add sample row
        sample_data = [
            1, "Asha Devi", "9876543210", "2015-04-12", "Female", "Main Road",
            "", "", "General", "", "Ram Kumar", "Sita Devi", "",
        ]
        for col_idx, value in enumerate(sample_data, start=1):
            ws.cell(row=2, column=col_idx, value=value)

        ws.freeze_panes = "A2"

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output.getvalue()

    def bulk_upload(self, grade: Grade, file_content: bytes) -> StudentBulkUploadResult:
        """Import students into a grade from an Excel file.

        Rows are matched by header name. Roll numbers must be unique within
        the grade and within the file; rows failing validation are reported
        and skipped.
        """
        try:
            wb = load_workbook(BytesIO(file_content), data_only=True)
            ws = wb.active
        except Exception as e:
            raise ValidationError(f"Invalid Excel file: {str(e)}")

        all_rows = list(ws.iter_rows(values_only=True))
        if len(all_rows) < 2:
            raise ValidationError("No data found in Excel file")

        headers = [_cell_text(h) for h in all_rows[0]]
        header_to_field = {header: field for field, header, _ in STUDENT_TEMPLATE_COLUMNS}
        for _, header, required in STUDENT_TEMPLATE_COLUMNS:
            if required and header not in headers:
                raise ValidationError(
                    f'Missing required column: "{header}". Please use the template.',
                    details={"column": header},
                )
        columns = {
            header_to_field[h]: idx for idx, h in enumerate(headers) if h in header_to_field
        }

        existing = self.db.execute(
            select(Student.roll_no).where(
                Student.grade == grade,
                Student.status == StudentStatus.ACTIVE,
            )
        )
        taken_roll_nos = set(existing.scalars().all())

        rows = all_rows[1:]
        errors = []
        successful = 0

        for row_num, row in enumerate(rows, start=2):
            # Skip empty rows
            if not any(v not in (None, "") for v in row):
                continue

            raw = {field: row[idx] if idx < len(row) else None for field, idx in columns.items()}
            values = {field: _cell_text(value) for field, value in raw.items()}

            try:
                try:
                    roll_no = int(values["roll_no"])
                except (TypeError, ValueError):
                    raise ValidationError("Invalid Roll No", details={"column": "Roll No"})
                if roll_no in taken_roll_nos:
                    raise ValidationError(
                        f"Roll No {roll_no} already exists in this class",
                        details={"column": "Roll No"},
                    )
                if not values.get("name"):
                    raise ValidationError("Name is required", details={"column": "Name"})

                student = Student(
                    roll_no=roll_no,
                    name=values["name"],
                    grade=grade,
                    contact=values.get("contact"),
                    date_of_birth=_parse_date(raw.get("date_of_birth")),
                    gender=_parse_choice(Gender, values.get("gender"), "Gender"),
                    address=values.get("address"),
                    aadhaar_number=values.get("aadhaar_number"),
                    pen=values.get("pen"),
                    category=_parse_choice(Category, values.get("category"), "Category"),
                    religion=values.get("religion"),
                    father_name=values.get("father_name"),
                    mother_name=values.get("mother_name"),
                    guardian_name=values.get("guardian_name"),
                    status=StudentStatus.ACTIVE,
                    fee_payments=default_fee_payments().model_dump(),
                )
                self.db.add(student)
                taken_roll_nos.add(roll_no)
                successful += 1

            except ValidationError as e:
                errors.append({
                    "row": row_num,
                    "column": e.details.get("column") if e.details else None,
                    "message": e.message,
                })

        self.db.flush()

        total = successful + len(errors)
        message = f"Uploaded {successful} of {total} students."
        if errors:
            message += f" {len(errors)} rows failed."
        logger.info(f"Bulk upload into {grade.value}: {message}")

        return StudentBulkUploadResult(
            total_rows=total,
            successful_rows=successful,
            failed_rows=len(errors),
            errors=errors,
            message=message,
        )
