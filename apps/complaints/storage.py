"""
Attachment store adapter.

Complaints keep only the reference returned here. The bytes go to Django's
configured default storage (filesystem in development, whatever STORAGES
points at in deployment).
"""

import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from django.utils import timezone

from apps.core.exceptions import DependencyError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPES = {
    'image/jpeg': ('.jpg', '.jpeg'),
    'image/png': ('.png',),
    'application/pdf': ('.pdf',),
}


def _allowed_types():
    return getattr(settings, 'COMPLAINT_ATTACHMENT_CONTENT_TYPES', DEFAULT_CONTENT_TYPES)


def _max_bytes():
    return getattr(settings, 'COMPLAINT_ATTACHMENT_MAX_BYTES', 5 * 1024 * 1024)


def validate_attachment(upload, field):
    allowed = _allowed_types()
    extension = os.path.splitext(upload.name or '')[1].lower()
    content_type = getattr(upload, 'content_type', None)

    extensions = {ext for exts in allowed.values() for ext in exts}
    if extension not in extensions or (content_type and content_type not in allowed):
        raise ValidationError(
            "Only JPG, PNG and PDF files are allowed",
            field_errors={field: ["Only JPG, PNG and PDF files are allowed"]},
        )

    if upload.size > _max_bytes():
        limit_mb = _max_bytes() // (1024 * 1024)
        raise ValidationError(
            f"File too large. Maximum size is {limit_mb}MB",
            field_errors={field: [f"File too large. Maximum size is {limit_mb}MB"]},
        )


def store_attachment(upload, *, owner_id, field):
    """Persist one upload, already checked by ``validate_attachment``, and return its reference."""
    extension = os.path.splitext(upload.name)[1].lower()
    path = f"complaints/{owner_id}/{timezone.now():%Y%m%d}/{field}_{uuid.uuid4().hex}{extension}"
    try:
        return default_storage.save(path, upload)
    except Exception as exc:
        logger.exception("Attachment store rejected %s for owner %s", field, owner_id)
        raise DependencyError("Attachment upload failed. Please try again later.") from exc


def discard_attachment(reference):
    """Remove an upload whose complaint was never written."""
    try:
        default_storage.delete(reference)
    except Exception:
        logger.exception("Could not remove orphaned attachment %s", reference)


def attachment_url(reference):
    if not reference:
        return None
    return default_storage.url(reference)
