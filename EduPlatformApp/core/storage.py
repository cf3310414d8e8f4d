"""File store boundary: uploads go in, opaque references come out.

Lifecycle records only ever hold the returned reference string.
"""

import logging
import uuid
from pathlib import PurePosixPath
from typing import Any

from django.core.files.storage import default_storage

from EduPlatformApp.core.validators import (
    validate_file_size,
    validate_attachment_mime,
    validate_instruction_mime,
)

logger = logging.getLogger(__name__)


def _store(file_obj: Any, folder: str) -> str:
    suffix = PurePosixPath(getattr(file_obj, "name", "") or "").suffix
    name = f"{folder}/{uuid.uuid4().hex}{suffix}"
    ref = default_storage.save(name, file_obj)
    logger.info("Stored file %s (%s bytes)", ref, getattr(file_obj, "size", "?"))
    return ref


def store_submission_file(file_obj: Any) -> str:
    validate_file_size(file_obj)
    validate_attachment_mime(file_obj)
    return _store(file_obj, "submissions")


def store_instruction_file(file_obj: Any) -> str:
    validate_file_size(file_obj)
    validate_instruction_mime(file_obj)
    return _store(file_obj, "instructions")


def file_url(ref: str) -> str | None:
    return default_storage.url(ref) if ref else None


def discard(ref: str) -> None:
    """Remove a stored file whose owning write was rejected."""
    if ref and default_storage.exists(ref):
        default_storage.delete(ref)
        logger.info("Discarded file %s", ref)
