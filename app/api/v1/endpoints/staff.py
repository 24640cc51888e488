"""Staff record endpoints. Records carry payroll details, so only admins see other people's."""

from fastapi import APIRouter, Query

from app.core.database import DbSession
from app.core.dependencies import AdminUser, CurrentUser
from app.models.staff import Department, EmploymentStatus, StaffType
from app.schemas.common import MessageResponse
from app.schemas.staff import (
    PaginatedStaffResponse,
    StaffCreate,
    StaffFilter,
    StaffResponse,
    StaffUpdate,
)
from app.services.staff import StaffService

router = APIRouter()


@router.post("", response_model=StaffResponse)
def create_staff(request: StaffCreate, admin: AdminUser, db: DbSession):
    return StaffService(db).create_staff(request)


@router.get("", response_model=PaginatedStaffResponse)
def list_staff(
    admin: AdminUser,
    db: DbSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    staff_type: StaffType | None = None,
    department: Department | None = None,
    status: EmploymentStatus | None = None,
    search: str | None = Query(None, description="Matches names or employee ID"),
):
    filters = StaffFilter(staff_type=staff_type, department=department, status=status, search=search)
    return StaffService(db).list_staff(filters, page, page_size)


@router.get("/me", response_model=StaffResponse)
def get_my_staff_record(current_user: CurrentUser, db: DbSession):
    """The staff record linked to the signed-in account."""
    return StaffResponse.model_validate(StaffService(db).get_staff_for_user(current_user))


@router.get("/{staff_id}", response_model=StaffResponse)
def get_staff(staff_id: int, admin: AdminUser, db: DbSession):
    return StaffResponse.model_validate(StaffService(db).get_staff(staff_id))


@router.patch("/{staff_id}", response_model=StaffResponse)
def update_staff(staff_id: int, request: StaffUpdate, admin: AdminUser, db: DbSession):
    return StaffService(db).update_staff(staff_id, request)


@router.delete("/{staff_id}", response_model=MessageResponse)
def delete_staff(staff_id: int, admin: AdminUser, db: DbSession):
    StaffService(db).delete_staff(staff_id)
    return MessageResponse(message="Staff record deleted successfully")
