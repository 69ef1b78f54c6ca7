"""
Notification titles and message bodies.

Each notification stores both the rendered English text and the
``message_key``/``params`` pair so that multi-language clients can render
their own wording.
"""

from django.utils import timezone

from .models import NotificationCategory


TITLE_TEMPLATES = {
    NotificationCategory.ASSIGNMENT: 'Job Assigned: {report_number}',
    NotificationCategory.STATUS_UPDATE: 'Status Update: {report_number}',
    NotificationCategory.STATUS_UPDATE_DETAILED: 'Status Update: {report_number}',
    NotificationCategory.TRANSPORT_UPDATE: 'Transport Update: {report_number}',
    NotificationCategory.CHECKING_UPDATE: 'Checking Update: {report_number}',
    NotificationCategory.REMARK_UPDATE: 'New Remark: {report_number}',
    NotificationCategory.SYSTEM: 'System Notice',
}

MESSAGE_TEMPLATES = {
    'notif_assignment': 'Complaint {id} has been assigned to you.',
    'notif_forwarded_user': 'Your complaint {id} has been forwarded to technician {name}.',
    'notif_status_user': "The status of your complaint {id} is now '{status}'.",
    'notif_processing_body': 'Your complaint {id} is being processed by {name} since {date}.',
    'notif_completed_body': 'Your complaint {id} was completed by {name} on {date}.',
    'notif_transport_user': 'There is a transport update for your complaint {id}.',
    'notif_checking_user': 'There is a checking update for your complaint {id}.',
    'notif_remark_user': 'A new remark was added to your complaint {id}.',
    'notif_submitted_user': 'Your complaint {id} has been received and is waiting to be processed.',
    'notif_new_complaint_admin': 'New complaint {id} was submitted by {name}.',
    'notif_cancelled_admin': 'Complaint {id} was cancelled by {name}.',
}


def build_title(category, report_number=''):
    return TITLE_TEMPLATES[NotificationCategory(category)].format(report_number=report_number)


def render_message(message_key, params):
    return MESSAGE_TEMPLATES[message_key].format(**params)


def format_notification_date(value):
    """Format as "03 Feb 2026 at 04:30 PM" in the current time zone."""
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.strftime('%d %b %Y at %I:%M %p')
