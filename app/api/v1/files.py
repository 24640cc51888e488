"""Spreadsheet upload and download helpers for the routers."""

from io import BytesIO
from pathlib import PurePath

from fastapi import UploadFile
from fastapi.responses import StreamingResponse

from app.core.config import settings
from app.core.exceptions import UploadError

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def read_upload(file: UploadFile) -> bytes:
    """Return the uploaded bytes after the extension and size checks."""
    if not file.filename:
        raise UploadError("No file provided")

    extension = PurePath(file.filename).suffix.lower()
    if extension not in settings.ALLOWED_EXTENSIONS:
        raise UploadError(
            f"Only {', '.join(settings.ALLOWED_EXTENSIONS)} files are allowed",
            details={"filename": file.filename},
        )

    content = file.file.read()
    if len(content) > settings.max_upload_bytes:
        raise UploadError(f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")
    return content


def xlsx_response(content: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
