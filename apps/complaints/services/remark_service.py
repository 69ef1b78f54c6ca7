"""
Remark ledger: technician/admin annotations attached to a complaint.

Remarks are listed oldest-first for the audit trail. The latest remark (by
creation time) supplies the transport/checking note shown on the complaint.
Edits and deletes correct the record and send no notifications.
"""

import logging

from django.conf import settings
from django.db import transaction

from apps.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from apps.complaints.models import Remark
from . import stats_service
from .transitions import apply_status, clean_status, ensure_mutable, ensure_transition, lock_complaint

logger = logging.getLogger(__name__)


def clean_remark_fields(*, status=None, transport_note=None, checking_note=None, remark=None, partial=False):
    """
    Strip and validate remark input.

    With ``partial`` only the keys actually supplied (not None) are returned,
    for edits; otherwise every field is returned and at least one must be set.
    """
    raw = {
        'transport_note': transport_note,
        'checking_note': checking_note,
        'remark': remark,
    }
    fields = {}
    for name, value in raw.items():
        if value is None and partial:
            continue
        fields[name] = (value or '').strip()

    if status is not None or not partial:
        fields['status'] = clean_status(status) or ''

    if not partial and not any(fields.values()):
        raise ValidationError("Provide a status, a transport note, a checking note or a remark")
    if partial and not fields:
        raise ValidationError("Nothing to update")
    return fields


def list_remarks(complaint):
    return complaint.remarks.select_related('author').order_by('created_at', 'id')


def latest_remark(complaint):
    return complaint.remarks.order_by('-created_at', '-id').first()


def _check_remark_limit(complaint):
    limit = getattr(settings, 'COMPLAINT_REMARK_LIMIT', 0)
    if limit and complaint.remarks.count() >= limit:
        raise ConflictError(f"Maximum {limit} remarks allowed per complaint")


def append_remark(*, complaint, author, fields):
    """Add a ledger row. The caller holds the complaint lock and has checked permissions."""
    _check_remark_limit(complaint)
    entry = Remark.objects.create(
        complaint=complaint,
        author=author,
        author_role=author.role,
        transport_note=fields.get('transport_note', ''),
        checking_note=fields.get('checking_note', ''),
        remark=fields.get('remark', ''),
        status=fields.get('status', ''),
    )
    logger.info("Remark %s added to %s by %s", entry.pk, complaint.report_number, author.pk)
    return entry


def _load_for_change(remark_id, actor):
    try:
        entry = Remark.objects.get(pk=remark_id)
    except (Remark.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Remark not found")

    complaint = lock_complaint(entry.complaint_id)

    if not (actor.role == actor.ROLE_ADMIN or entry.author_id == actor.pk):
        raise ForbiddenError("Only the author or an admin can change this remark")

    ensure_mutable(complaint)
    entry.complaint = complaint
    return entry, complaint


@transaction.atomic
def edit_remark(*, remark_id, actor, status=None, transport_note=None, checking_note=None, remark=None):
    """
    Replace the supplied fields of a remark.

    A status carried by the edit is applied to the complaint under the same
    forward-only rule as a new remark.
    """
    entry, complaint = _load_for_change(remark_id, actor)

    fields = clean_remark_fields(
        status=status,
        transport_note=transport_note,
        checking_note=checking_note,
        remark=remark,
        partial=True,
    )
    new_status = fields.get('status') or None
    ensure_transition(complaint, new_status)

    for name, value in fields.items():
        setattr(entry, name, value)
    if not any(getattr(entry, name) for name in Remark.EDITABLE_FIELDS):
        raise ValidationError("A remark cannot be left empty; delete it instead")
    entry.save()

    if new_status:
        apply_status(complaint, new_status, actor)

    stats_service.invalidate_on_commit()
    logger.info("Remark %s on %s edited by %s", entry.pk, complaint.report_number, actor.pk)
    return entry


@transaction.atomic
def delete_remark(*, remark_id, actor):
    entry, complaint = _load_for_change(remark_id, actor)
    entry_id = entry.pk
    entry.delete()
    logger.info("Remark %s on %s deleted by %s", entry_id, complaint.report_number, actor.pk)
