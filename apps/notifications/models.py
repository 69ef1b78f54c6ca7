from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.models.base import TimeStampedModel


class NotificationCategory(models.TextChoices):
    """Closed set of notification kinds; every member needs a title in ``messages.TITLE_TEMPLATES``."""

    ASSIGNMENT = 'assignment', 'Assignment'
    STATUS_UPDATE = 'status_update', 'Status Update'
    STATUS_UPDATE_DETAILED = 'status_update_detailed', 'Status Update (Detailed)'
    TRANSPORT_UPDATE = 'transport_update', 'Transport Update'
    CHECKING_UPDATE = 'checking_update', 'Checking Update'
    REMARK_UPDATE = 'remark_update', 'Remark Update'
    SYSTEM = 'system', 'System'


class Notification(TimeStampedModel):
    """
    Recipient-scoped inbox entry.

    The recipient role is part of the address: a row written for a user as
    ``admin`` is not listed for the same user acting in another role.
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
    )
    recipient_role = models.CharField(max_length=20)

    complaint = models.ForeignKey(
        'complaints.Complaint',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications',
    )

    category = models.CharField(max_length=30, choices=NotificationCategory.choices)
    title = models.CharField(max_length=200)
    message = models.TextField()

    # Translatable payload for clients that render their own language.
    message_key = models.CharField(max_length=100, blank=True)
    params = models.JSONField(default=dict, blank=True)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['recipient', 'recipient_role', '-created_at'], name='notif_recipient_created_idx'),
            models.Index(fields=['recipient', 'recipient_role', 'is_read'], name='notif_recipient_unread_idx'),
        ]

    def __str__(self):
        return f"{self.title} - {self.recipient_id} ({self.recipient_role})"

    def mark_as_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at', 'updated_at'])
