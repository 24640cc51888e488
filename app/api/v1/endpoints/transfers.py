"""Transfer certificate endpoints."""

from fastapi import APIRouter, Query

from app.core.database import DbSession
from app.core.dependencies import AdminUser, CurrentUser
from app.schemas.transfer import (
    PaginatedTransferCertificateResponse,
    TransferCertificateCreate,
    TransferCertificateResponse,
    TransferCertificateUpdate,
)
from app.services.notification import notify_student_transferred
from app.services.transfer import TransferService

router = APIRouter()


@router.post("", response_model=TransferCertificateResponse)
def register_transfer_certificate(
    request: TransferCertificateCreate,
    admin: AdminUser,
    db: DbSession,
):
    """Issue a transfer certificate and mark the student as transferred."""
    service = TransferService(db)
    certificate = service.register(request)
    notify_student_transferred(
        db,
        admin.id,
        certificate.student_details.name,
        certificate.ref_no,
    )
    return certificate


@router.get("", response_model=PaginatedTransferCertificateResponse)
def list_transfer_certificates(
    current_user: CurrentUser,
    db: DbSession,
    search: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
):
    """List issued transfer certificates."""
    service = TransferService(db)
    return service.list_certificates(search, page, page_size)


@router.get("/by-ref", response_model=TransferCertificateResponse)
def get_transfer_certificate_by_ref(
    current_user: CurrentUser,
    db: DbSession,
    ref_no: str = Query(..., min_length=1),
):
    """Find a transfer certificate by reference number."""
    service = TransferService(db)
    return service.get_by_ref(ref_no)


@router.get("/{certificate_id}", response_model=TransferCertificateResponse)
def get_transfer_certificate(
    certificate_id: int,
    current_user: CurrentUser,
    db: DbSession,
):
    """Get a transfer certificate."""
    service = TransferService(db)
    return service.get_response(certificate_id)


@router.patch("/{certificate_id}", response_model=TransferCertificateResponse)
def update_transfer_certificate(
    certificate_id: int,
    request: TransferCertificateUpdate,
    admin: AdminUser,
    db: DbSession,
):
    """Update a transfer certificate."""
    service = TransferService(db)
    return service.update(certificate_id, request)
