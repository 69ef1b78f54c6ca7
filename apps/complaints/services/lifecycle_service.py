"""
Complaint lifecycle: creation, forwarding, status/remark updates, cancellation.

States: pending -> in_process -> closed, and pending -> cancelled. Closed and
cancelled are terminal. Every mutation locks the complaint row, checks in the
order not found -> forbidden -> conflict -> invalid input, writes, and then
hands the event to the notification dispatcher. A failed notification never
undoes the mutation.
"""

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from apps.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from apps.complaints.filters import ComplaintFilter
from apps.complaints.models import Complaint, ForwardRecord
from apps.complaints import storage
from apps.notifications import services as notification_services
from . import remark_service, report_number_service, stats_service
from .transitions import (
    apply_status,
    clean_status,
    ensure_mutable,
    ensure_transition,
    full_clean_or_raise,
    lock_complaint,
)

logger = logging.getLogger(__name__)

User = get_user_model()


def _emit(event_type, *, actor, **context):
    try:
        notification_services.handle_event(event_type=event_type, actor=actor, context=context)
    except Exception:
        # Do not fail the lifecycle operation if notifications fail
        logger.exception("Notification fan-out failed for %s", event_type)


def _require_role(actor, *roles, message):
    if getattr(actor, 'role', None) not in roles:
        raise ForbiddenError(message)


def _validate_classification(*, category, subcategory, brand, state):
    errors = {}
    if category is None:
        errors['category'] = ["Category is required"]
    if subcategory is None:
        errors['subcategory'] = ["Subcategory is required"]
    elif category is not None and subcategory.category_id != category.pk:
        errors['subcategory'] = ["Subcategory does not belong to the selected category"]
    if brand is None:
        errors['brand'] = ["Brand is required"]
    elif category is not None and not brand.is_available_for(category):
        errors['brand'] = ["Brand is not available for the selected category"]
    if state is None:
        errors['state'] = ["State is required"]
    if errors:
        first = next(iter(errors.values()))[0]
        raise ValidationError(first, field_errors=errors)


def _validate_details(details):
    details = (details or '').strip()
    min_length = getattr(settings, 'COMPLAINT_DETAILS_MIN_LENGTH', 10)
    max_length = getattr(settings, 'COMPLAINT_DETAILS_MAX_LENGTH', 2000)
    if len(details) < min_length:
        raise ValidationError(
            f"Details must be at least {min_length} characters",
            field_errors={'details': [f"Details must be at least {min_length} characters"]},
        )
    if len(details) > max_length:
        raise ValidationError(
            f"Details cannot exceed {max_length} characters",
            field_errors={'details': [f"Details cannot exceed {max_length} characters"]},
        )
    return details


def _validate_attachments(warranty_status, warranty_file, receipt_file):
    if warranty_status not in (Complaint.WARRANTY_UNDER, Complaint.WARRANTY_OVER):
        raise ValidationError(
            f"Invalid warranty status: {warranty_status}",
            field_errors={'warranty_status': ["Must be 'Under Warranty' or 'Over Warranty'"]},
        )
    if warranty_status != Complaint.WARRANTY_UNDER:
        return

    missing = {}
    if not warranty_file:
        missing['warranty_file'] = ["Warranty proof is required for warranty claims"]
    if not receipt_file:
        missing['receipt_file'] = ["Receipt is required for warranty claims"]
    if missing:
        raise ValidationError(
            "Warranty claims need both the warranty proof and the receipt",
            field_errors=missing,
        )


@transaction.atomic
def create_complaint(*, actor, category, subcategory, brand, state, warranty_status, details,
                     model_no='', warranty_file=None, receipt_file=None) -> Complaint:
    """
    Submit a new complaint for the acting customer.

    Rules:
    - Only customers submit complaints.
    - "Under Warranty" needs both attachments; "Over Warranty" takes any subset.
    - Attachments are stored before the row is written; a storage failure
      aborts the create, and a failed insert removes what was stored.
    - The report number is allocated last, retrying on collision.
    """
    _require_role(actor, User.ROLE_CUSTOMER, message="Only customers can submit complaints")

    _validate_classification(category=category, subcategory=subcategory, brand=brand, state=state)
    details = _validate_details(details)
    _validate_attachments(warranty_status, warranty_file, receipt_file)

    if warranty_file:
        storage.validate_attachment(warranty_file, 'warranty_file')
    if receipt_file:
        storage.validate_attachment(receipt_file, 'receipt_file')

    complaint = Complaint(
        customer=actor,
        category=category,
        subcategory=subcategory,
        brand=brand,
        state=state,
        model_no=(model_no or '').strip(),
        warranty_status=warranty_status,
        details=details,
        status=Complaint.STATUS_PENDING,
        created_by=actor,
        updated_by=actor,
    )
    full_clean_or_raise(complaint, exclude=['report_number'])

    stored = []
    try:
        if warranty_file:
            complaint.warranty_file = storage.store_attachment(warranty_file, owner_id=actor.pk, field='warranty_file')
            stored.append(complaint.warranty_file)
        if receipt_file:
            complaint.receipt_file = storage.store_attachment(receipt_file, owner_id=actor.pk, field='receipt_file')
            stored.append(complaint.receipt_file)

        report_number_service.save_with_report_number(complaint)
    except Exception:
        for reference in stored:
            storage.discard_attachment(reference)
        raise

    stats_service.invalidate_on_commit()
    logger.info("Complaint %s created by customer %s", complaint.report_number, actor.pk)

    _emit('complaint_created', actor=actor, complaint=complaint)
    return complaint


def _get_technician(technician_id):
    try:
        return User.objects.get(pk=technician_id, role=User.ROLE_TECHNICIAN, is_active=True)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Technician not found")


@transaction.atomic
def forward_complaint(*, actor, complaint_id, technician_id, status=None) -> Complaint:
    """
    Hand a complaint to a technician.

    Writes a ForwardRecord pointing at the previous assignee (None the first
    time) and applies the optional status override.
    """
    complaint = lock_complaint(complaint_id)
    _require_role(actor, User.ROLE_ADMIN, message="Only admins can forward complaints")
    ensure_mutable(complaint)

    technician = _get_technician(technician_id)
    new_status = clean_status(status)
    ensure_transition(complaint, new_status)

    ForwardRecord.objects.create(
        complaint=complaint,
        previous_assignee=complaint.assigned_to,
        new_assignee=technician,
        forwarded_by=actor,
    )

    complaint.assigned_to = technician
    status_changed = apply_status(complaint, new_status, actor, extra_fields=['assigned_to'])

    stats_service.invalidate_on_commit()
    logger.info(
        "Complaint %s forwarded to technician %s by %s (status %s)",
        complaint.report_number, technician.pk, actor.pk, complaint.status,
    )

    _emit(
        'complaint_forwarded',
        actor=actor,
        complaint=complaint,
        technician=technician,
        status_changed=status_changed,
    )
    return complaint


@transaction.atomic
def update_complaint(*, actor, complaint_id, status=None, transport_note=None,
                     checking_note=None, remark=None):
    """
    Add a remark and optionally move the status; the admin or the assigned technician only.

    Returns the new Remark. The customer receives exactly one notification,
    categorised by which fields were supplied.
    """
    complaint = lock_complaint(complaint_id)

    is_admin = getattr(actor, 'role', None) == User.ROLE_ADMIN
    is_assignee = (
        getattr(actor, 'role', None) == User.ROLE_TECHNICIAN
        and complaint.assigned_to_id is not None
        and complaint.assigned_to_id == actor.pk
    )
    if not (is_admin or is_assignee):
        raise ForbiddenError("Only an admin or the assigned technician can update this complaint")

    ensure_mutable(complaint)

    fields = remark_service.clean_remark_fields(
        status=status,
        transport_note=transport_note,
        checking_note=checking_note,
        remark=remark,
    )
    new_status = fields['status'] or None
    ensure_transition(complaint, new_status)

    entry = remark_service.append_remark(complaint=complaint, author=actor, fields=fields)
    apply_status(complaint, new_status, actor)

    stats_service.invalidate_on_commit()
    logger.info("Complaint %s updated by %s (status %s)", complaint.report_number, actor.pk, complaint.status)

    _emit('remark_added', actor=actor, complaint=complaint, remark=entry)
    return entry


@transaction.atomic
def cancel_complaint(*, actor, complaint_id) -> Complaint:
    """Owner-only cancellation of a complaint nobody has picked up yet."""
    complaint = lock_complaint(complaint_id)

    if getattr(actor, 'role', None) != User.ROLE_CUSTOMER or complaint.customer_id != actor.pk:
        raise ForbiddenError("Only the customer who submitted the complaint can cancel it")

    if complaint.status != Complaint.STATUS_PENDING:
        raise ConflictError("Only pending complaints can be cancelled")

    complaint.status = Complaint.STATUS_CANCELLED
    complaint.updated_by = actor
    complaint.save(update_fields=['status', 'updated_by', 'updated_at'])

    stats_service.invalidate_on_commit()
    logger.info("Complaint %s cancelled by customer %s", complaint.report_number, actor.pk)

    _emit('complaint_cancelled', actor=actor, complaint=complaint)
    return complaint


def complaints_visible_to(actor):
    return Complaint.objects.visible_to(actor).with_relations()


def list_complaints_for_actor(*, actor, filters=None):
    """Scoped complaint list, newest activity first, with optional ComplaintFilter parameters."""
    qs = complaints_visible_to(actor)
    if filters:
        filterset = ComplaintFilter(data=filters, queryset=qs)
        if not filterset.is_valid():
            raise ValidationError("Invalid filter parameters", field_errors=dict(filterset.errors))
        qs = filterset.qs
    return qs.order_by('-updated_at', '-id')


def get_complaint_for_actor(*, actor, complaint_id) -> Complaint:
    try:
        complaint = Complaint.objects.with_relations().get(pk=complaint_id)
    except (Complaint.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Complaint not found")

    if not Complaint.objects.visible_to(actor).filter(pk=complaint.pk).exists():
        raise ForbiddenError("You do not have access to this complaint")
    return complaint
