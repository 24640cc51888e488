"""Student records, Excel import and school ID lookup."""

from fastapi import APIRouter, File, Query, UploadFile

from app.api.v1.files import read_upload, xlsx_response
from app.core.database import DbSession
from app.core.dependencies import AdminUser, CurrentUser
from app.models.student import Grade, StudentStatus
from app.schemas.common import MessageResponse
from app.schemas.student import (
    PaginatedStudentResponse,
    StudentBulkUploadResult,
    StudentCreate,
    StudentFilter,
    StudentResponse,
    StudentUpdate,
)
from app.services.student import StudentService

router = APIRouter()


@router.post("", response_model=StudentResponse)
def create_student(request: StudentCreate, admin: AdminUser, db: DbSession):
    return StudentService(db).create_student(request)


@router.get("", response_model=PaginatedStudentResponse)
def list_students(
    current_user: CurrentUser,
    db: DbSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    grade: Grade | None = None,
    status: StudentStatus | None = None,
    search: str | None = Query(None, description="Matches student or parent names"),
):
    filters = StudentFilter(grade=grade, status=status, search=search)
    return StudentService(db).list_students(filters, page, page_size)


@router.get("/template")
def download_student_template(admin: AdminUser, db: DbSession):
    """Blank workbook with the column headers the import expects."""
    return xlsx_response(StudentService(db).generate_template(), "students_template.xlsx")


@router.get("/lookup/{formatted_id}", response_model=StudentResponse)
def lookup_student(formatted_id: str, current_user: CurrentUser, db: DbSession):
    """Find an active student by school ID (e.g. BMS250501)."""
    service = StudentService(db)
    student = service.find_by_student_id(formatted_id)
    return service.to_response(student, service.settings.get_academic_year())


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(student_id: int, current_user: CurrentUser, db: DbSession):
    return StudentService(db).get_student_response(student_id)


@router.patch("/{student_id}", response_model=StudentResponse)
def update_student(student_id: int, request: StudentUpdate, admin: AdminUser, db: DbSession):
    return StudentService(db).update_student(student_id, request)


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(student_id: int, admin: AdminUser, db: DbSession):
    StudentService(db).delete_student(student_id)
    return MessageResponse(message="Student deleted successfully")


@router.post("/upload", response_model=StudentBulkUploadResult)
def bulk_upload_students(
    admin: AdminUser,
    db: DbSession,
    grade: Grade = Query(..., description="Grade the students are imported into"),
    file: UploadFile = File(...),
):
    """
    Import students into a grade from an Excel file.

    Rows that fail validation are reported and skipped; the rest are saved.
    """
    return StudentService(db).bulk_upload(grade, read_upload(file))
