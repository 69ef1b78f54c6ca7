import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import NotFoundError, ValidationError
from .messages import build_title, format_notification_date, render_message
from .models import Notification, NotificationCategory

User = get_user_model()

logger = logging.getLogger(__name__)


class NotificationService:
    """Turns lifecycle events into per-recipient inbox entries.

    Writes are best effort: ``notify`` never raises and never rolls back the
    caller's transaction. The lifecycle only writes notifications and never
    reads them back.
    """

    @staticmethod
    def notify(*, recipient, recipient_role, category, complaint=None, title=None,
               message=None, message_key='', params=None):
        """Create one notification. Returns the row, or None when the write failed."""
        params = params or {}
        report_number = complaint.report_number if complaint is not None else ''

        try:
            category = NotificationCategory(category)
            title = title or build_title(category, report_number)
            message = message or render_message(message_key, params)
            # Savepoint so a failed insert leaves the outer transaction usable.
            with transaction.atomic():
                notification = Notification.objects.create(
                    recipient=recipient,
                    recipient_role=recipient_role,
                    complaint=complaint,
                    category=category,
                    title=title,
                    message=message,
                    message_key=message_key,
                    params=params,
                )
        except Exception:
            logger.exception(
                "Dropping %s notification for recipient %s (%s) on complaint %s",
                category, getattr(recipient, 'pk', recipient), recipient_role, report_number or '-',
            )
            return None

        logger.info(
            "Notification %s (%s) created for recipient %s (%s)",
            notification.pk, category, notification.recipient_id, recipient_role,
        )
        return notification

    @staticmethod
    def notify_admins(*, category, complaint=None, title=None, message=None, message_key='', params=None):
        """Send the same event to every active admin."""
        recipients = User.objects.filter(is_active=True, role=User.ROLE_ADMIN)

        created = []
        for admin in recipients:
            notification = NotificationService.notify(
                recipient=admin,
                recipient_role=User.ROLE_ADMIN,
                category=category,
                complaint=complaint,
                title=title,
                message=message,
                message_key=message_key,
                params=params,
            )
            if notification is not None:
                created.append(notification)
        return created

    @staticmethod
    def list_for_recipient(*, recipient, recipient_role, limit=None):
        """Newest-first notifications for one address plus its unread count."""
        if limit is None:
            limit = getattr(settings, 'NOTIFICATION_LIST_LIMIT', 50)

        qs = Notification.objects.filter(recipient=recipient, recipient_role=recipient_role)
        notifications = list(qs.order_by('-created_at', '-id')[:limit])
        return notifications, NotificationService.get_unread_count(
            recipient=recipient,
            recipient_role=recipient_role,
        )

    @staticmethod
    def get_unread_count(*, recipient, recipient_role):
        return Notification.objects.filter(
            recipient=recipient,
            recipient_role=recipient_role,
            is_read=False,
        ).count()

    @staticmethod
    def mark_read(*, recipient, recipient_role, notification_id):
        """Mark one notification, or ``"all"``, as read. Returns the number of rows marked."""
        if notification_id == 'all':
            return NotificationService.mark_all_as_read(recipient=recipient, recipient_role=recipient_role)

        try:
            pk = int(notification_id)
        except (TypeError, ValueError):
            raise ValidationError("Notification id must be a number or 'all'")

        try:
            notification = Notification.objects.get(
                pk=pk,
                recipient=recipient,
                recipient_role=recipient_role,
            )
        except Notification.DoesNotExist:
            raise NotFoundError("Notification not found")

        if notification.is_read:
            return 0
        notification.mark_as_read()
        return 1

    @staticmethod
    def mark_all_as_read(*, recipient, recipient_role):
        now = timezone.now()
        return Notification.objects.filter(
            recipient=recipient,
            recipient_role=recipient_role,
            is_read=False,
        ).update(is_read=True, read_at=now, updated_at=now)


def categorize_remark_update(*, status=None, transport_note='', checking_note='', remark=''):
    """
    Pick the single category for a remark update.

    Status alone is ``status_update``; status with any text is
    ``status_update_detailed``; without a status the first of transport,
    checking, remark that is present wins.
    """
    has_text = bool(transport_note or checking_note or remark)
    if status:
        if has_text:
            return NotificationCategory.STATUS_UPDATE_DETAILED
        return NotificationCategory.STATUS_UPDATE
    if transport_note:
        return NotificationCategory.TRANSPORT_UPDATE
    if checking_note:
        return NotificationCategory.CHECKING_UPDATE
    if remark:
        return NotificationCategory.REMARK_UPDATE
    raise ValueError("A remark update needs a status or some text")


_CATEGORY_MESSAGE_KEYS = {
    NotificationCategory.TRANSPORT_UPDATE: 'notif_transport_user',
    NotificationCategory.CHECKING_UPDATE: 'notif_checking_user',
    NotificationCategory.REMARK_UPDATE: 'notif_remark_user',
}

_STATUS_MESSAGE_KEYS = {
    'in_process': 'notif_processing_body',
    'closed': 'notif_completed_body',
}


def _status_message(complaint, status, worker):
    key = _STATUS_MESSAGE_KEYS.get(status, 'notif_status_user')
    params = {
        'id': complaint.report_number,
        'status': status,
        'name': worker.display_name if worker else '',
        'date': format_notification_date(timezone.now()),
    }
    return key, params


class ComplaintEventNotifier:
    """Builds the notifications for each complaint lifecycle event."""

    @staticmethod
    def complaint_created(*, complaint, actor=None):
        # Fan-out on creation is opt-in.
        if not getattr(settings, 'COMPLAINT_NOTIFY_ON_CREATE', False):
            return []

        customer = complaint.customer
        created = NotificationService.notify_admins(
            category=NotificationCategory.STATUS_UPDATE,
            complaint=complaint,
            title=f"New Complaint: {complaint.report_number}",
            message_key='notif_new_complaint_admin',
            params={'id': complaint.report_number, 'name': customer.display_name},
        )
        created.append(NotificationService.notify(
            recipient=customer,
            recipient_role=User.ROLE_CUSTOMER,
            category=NotificationCategory.STATUS_UPDATE,
            complaint=complaint,
            message_key='notif_submitted_user',
            params={'id': complaint.report_number},
        ))
        return [n for n in created if n is not None]

    @staticmethod
    def complaint_forwarded(*, complaint, technician, status_changed, actor=None):
        created = [NotificationService.notify(
            recipient=technician,
            recipient_role=User.ROLE_TECHNICIAN,
            category=NotificationCategory.ASSIGNMENT,
            complaint=complaint,
            message_key='notif_assignment',
            params={'id': complaint.report_number},
        )]

        if status_changed:
            key, params = _status_message(complaint, complaint.status, technician)
            created.append(NotificationService.notify(
                recipient=complaint.customer,
                recipient_role=User.ROLE_CUSTOMER,
                category=NotificationCategory.STATUS_UPDATE,
                complaint=complaint,
                message_key=key,
                params=params,
            ))
        return [n for n in created if n is not None]

    @staticmethod
    def remark_added(*, complaint, remark, actor=None):
        """Exactly one notification to the customer per remark update."""
        category = categorize_remark_update(
            status=remark.status,
            transport_note=remark.transport_note,
            checking_note=remark.checking_note,
            remark=remark.remark,
        )
        if remark.status:
            key, params = _status_message(complaint, remark.status, actor or complaint.assigned_to)
        else:
            key = _CATEGORY_MESSAGE_KEYS[category]
            params = {'id': complaint.report_number}

        notification = NotificationService.notify(
            recipient=complaint.customer,
            recipient_role=User.ROLE_CUSTOMER,
            category=category,
            complaint=complaint,
            message_key=key,
            params=params,
        )
        return [notification] if notification is not None else []

    @staticmethod
    def complaint_cancelled(*, complaint, actor=None):
        return NotificationService.notify_admins(
            category=NotificationCategory.STATUS_UPDATE,
            complaint=complaint,
            message_key='notif_cancelled_admin',
            params={'id': complaint.report_number, 'name': complaint.customer.display_name},
        )


EVENT_HANDLERS = {
    'complaint_created': ComplaintEventNotifier.complaint_created,
    'complaint_forwarded': ComplaintEventNotifier.complaint_forwarded,
    'remark_added': ComplaintEventNotifier.remark_added,
    'complaint_cancelled': ComplaintEventNotifier.complaint_cancelled,
}


def handle_event(*, event_type, actor=None, context=None):
    """Entry point for lifecycle events. Unknown events produce no notifications."""
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.warning("No notification handler for event %s", event_type)
        return []
    return handler(actor=actor, **(context or {}))
