"""Year-end promotion endpoints."""

from fastapi import APIRouter

from app.core.database import DbSession
from app.core.dependencies import AdminUser
from app.core.timeutils import local_today
from app.schemas.promotion import PromotionPreview, PromotionResult
from app.services.notification import notify_session_concluded
from app.services.promotion import PromotionService

router = APIRouter()


@router.get("/preview", response_model=PromotionPreview)
def preview_promotion(
    admin: AdminUser,
    db: DbSession,
):
    """Show per-grade counts of students to promote, detain and graduate."""
    service = PromotionService(db)
    return service.preview()


@router.post("", response_model=PromotionResult)
def promote_students(
    admin: AdminUser,
    db: DbSession,
):
    """
    Promote every active student based on the final terminal exam and
    close the academic session.

    Runs as a single transaction. Afterwards the academic year must be set
    again before the system can be used.
    """
    service = PromotionService(db)
    result = service.promote(local_today())
    notify_session_concluded(db, admin.id, result.academic_year)
    return result
