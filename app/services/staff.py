"""Staff records service."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.staff import Staff, StaffType
from app.models.user import User
from app.schemas.staff import (
    PaginatedStaffResponse,
    StaffCreate,
    StaffFilter,
    StaffResponse,
    StaffUpdate,
)

logger = logging.getLogger(__name__)


class StaffService:
    """Staff records service."""

    def __init__(self, db: Session):
        self.db = db

    def _check_unique(self, employee_id: str, user_id: int | None, staff_id: int | None = None) -> None:
        query = select(Staff).where(func.lower(Staff.employee_id) == employee_id.lower())
        if staff_id is not None:
            query = query.where(Staff.id != staff_id)
        if self.db.execute(query).scalar_one_or_none():
            raise ConflictError(
                "Employee ID already in use",
                details={"employee_id": employee_id},
            )

        if user_id is None:
            return
        if self.db.get(User, user_id) is None:
            raise ValidationError(f"User {user_id} does not exist", details={"user_id": user_id})
        query = select(Staff).where(Staff.user_id == user_id)
        if staff_id is not None:
            query = query.where(Staff.id != staff_id)
        if self.db.execute(query).scalar_one_or_none():
            raise ConflictError(
                "User account is already linked to another staff record",
                details={"user_id": user_id},
            )

    def create_staff(self, request: StaffCreate) -> StaffResponse:
        self._check_unique(request.employee_id, request.user_id)
        data = request.model_dump()
        if request.staff_type != StaffType.TEACHING:
            # only teaching staff carry subjects
            data["subjects_taught"] = []
            data["teacher_license_number"] = None
        staff = Staff(**data)
        self.db.add(staff)
        self.db.flush()
        self.db.refresh(staff)
        logger.info(f"Staff created: {staff.employee_id} {staff.full_name}")
        return StaffResponse.model_validate(staff)

    def get_staff(self, staff_id: int) -> Staff:
        staff = self.db.get(Staff, staff_id)
        if staff is None:
            raise NotFoundError("Staff", str(staff_id))
        return staff

    def get_staff_for_user(self, user: User) -> Staff:
        """The staff record linked to a sign-in account."""
        staff = self.db.execute(select(Staff).where(Staff.user_id == user.id)).scalar_one_or_none()
        if staff is None:
            raise NotFoundError("Staff profile", user.username)
        return staff

    def update_staff(self, staff_id: int, request: StaffUpdate) -> StaffResponse:
        staff = self.get_staff(staff_id)
        update_data = request.model_dump(exclude_unset=True)
        if "employee_id" in update_data or "user_id" in update_data:
            self._check_unique(
                update_data.get("employee_id", staff.employee_id),
                update_data.get("user_id", staff.user_id),
                staff_id=staff.id,
            )
        for field, value in update_data.items():
            setattr(staff, field, value)
        if staff.staff_type != StaffType.TEACHING:
            staff.subjects_taught = []
            staff.teacher_license_number = None
        self.db.flush()
        self.db.refresh(staff)
        return StaffResponse.model_validate(staff)

    def delete_staff(self, staff_id: int) -> None:
        staff = self.get_staff(staff_id)
        self.db.delete(staff)
        self.db.flush()
        logger.info(f"Staff deleted: {staff.employee_id}")

    def list_staff(
        self,
        filters: StaffFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedStaffResponse:
        """List staff with filtering and pagination, ordered by name."""
        query = select(Staff)

        if filters:
            if filters.staff_type:
                query = query.where(Staff.staff_type == filters.staff_type)
            if filters.department:
                query = query.where(Staff.department == filters.department)
            if filters.status:
                query = query.where(Staff.status == filters.status)
            if filters.search:
                search_term = f"%{filters.search}%"
                query = query.where(
                    or_(
                        Staff.first_name.ilike(search_term),
                        Staff.last_name.ilike(search_term),
                        Staff.employee_id.ilike(search_term),
                    )
                )

        count_query = select(func.count()).select_from(query.subquery())
        total = self.db.execute(count_query).scalar() or 0

        offset = (page - 1) * page_size
        query = query.order_by(Staff.first_name, Staff.last_name, Staff.id)
        query = query.offset(offset).limit(page_size)

        staff = self.db.execute(query).scalars().all()
        return PaginatedStaffResponse.build(
            [StaffResponse.model_validate(s) for s in staff],
            total,
            page,
            page_size,
        )
