"""
Status rules shared by the lifecycle and remark services.

Statuses settable through forward or remark only move forward along
pending -> in_process -> closed. Repeating the current status is allowed and
changes nothing. ``cancelled`` is reachable only through cancellation.
"""

from django.core.exceptions import ValidationError as DjangoValidationError

from apps.core.exceptions import ConflictError, NotFoundError, ServiceError, ValidationError
from apps.complaints.models import Complaint


def lock_complaint(complaint_id):
    """Fetch a complaint with a row lock for the rest of the transaction."""
    try:
        return Complaint.objects.select_for_update().get(pk=complaint_id)
    except (Complaint.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Complaint not found")


def ensure_mutable(complaint):
    if complaint.status == Complaint.STATUS_CLOSED:
        raise ConflictError(f"Complaint {complaint.report_number} is closed and can no longer be changed")
    if complaint.status == Complaint.STATUS_CANCELLED:
        raise ConflictError(f"Complaint {complaint.report_number} was cancelled and can no longer be changed")


def clean_status(status):
    """Normalise an optional status input; blank means no change."""
    if status in (None, ''):
        return None
    if status not in Complaint.STATUS_PROGRESSION:
        raise ValidationError(
            f"Invalid status: {status}",
            field_errors={'status': [f"Status must be one of: {', '.join(Complaint.STATUS_PROGRESSION)}"]},
        )
    return status


def ensure_transition(complaint, new_status):
    if new_status is None or new_status == complaint.status:
        return
    current = Complaint.STATUS_PROGRESSION.index(complaint.status)
    target = Complaint.STATUS_PROGRESSION.index(new_status)
    if target < current:
        raise ConflictError(
            f"Complaint {complaint.report_number} cannot move from {complaint.status} back to {new_status}"
        )


def apply_status(complaint, new_status, actor, extra_fields=()):
    """Write the new status (if any) and the acting user. Returns True when the status changed."""
    changed = new_status is not None and new_status != complaint.status
    if changed:
        complaint.status = new_status
    complaint.updated_by = actor
    complaint.save(update_fields=['status', 'updated_by', 'updated_at', *extra_fields])
    return changed


def full_clean_or_raise(instance, **kwargs):
    try:
        instance.full_clean(**kwargs)
    except DjangoValidationError as exc:
        raise ServiceError.from_django(exc)
