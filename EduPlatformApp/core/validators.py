"""Validation helpers for grades and uploaded files."""

from decimal import Decimal
from typing import Any

from django.core.exceptions import ValidationError

import magic

from EduPlatformApp.core.conf import lifecycle_settings
from EduPlatformApp.domain.grading import GRADE_MIN, GRADE_MAX

ALLOWED_DOCUMENT_MIME: set[str] = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "application/zip",
}
ALLOWED_ATTACHMENT_MIME: set[str] = ALLOWED_DOCUMENT_MIME | {
    "image/png",
    "image/jpeg",
    "image/gif",
}

def validate_grade(value: Decimal | float | int) -> None:
    """Ensure a grade lies within [0, 20]."""
    if value is None or not (GRADE_MIN <= value <= GRADE_MAX):
        raise ValidationError(f"Grade must be between {GRADE_MIN} and {GRADE_MAX}.")

def validate_file_size(file_obj: Any, max_mb: int | None = None) -> None:
    """Ensure file size does not exceed max_mb megabytes."""
    if max_mb is None:
        max_mb = lifecycle_settings().max_upload_mb
    if file_obj and file_obj.size > max_mb * 1024 * 1024:
        raise ValidationError(f"File exceeds {max_mb} MB limit.")

def _sniff_mime(file_obj: Any) -> str | None:
    """Read initial bytes to detect MIME type using libmagic."""
    if not file_obj:
        return None
    header = file_obj.read(4096)
    file_obj.seek(0)
    return magic.from_buffer(header, mime=True)

def validate_instruction_mime(file_obj: Any) -> None:
    """Validate that an instruction file is a document."""
    mime = _sniff_mime(file_obj)
    if mime and mime not in ALLOWED_DOCUMENT_MIME:
        raise ValidationError(f"Unsupported instruction file mime: {mime}")

def validate_attachment_mime(file_obj: Any) -> None:
    """Validate that a submitted file has an allowed MIME type."""
    mime = _sniff_mime(file_obj)
    if mime and mime not in ALLOWED_ATTACHMENT_MIME:
        raise ValidationError(f"Unsupported attachment mime: {mime}")
