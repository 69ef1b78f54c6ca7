"""
Base abstract models for the complaint service.

These models provide common functionality for all domain models:
- Timestamps
- Audit tracking (who created/modified)
"""

from django.db import models
from django.conf import settings


class TimeStampedModel(models.Model):
    """
    Abstract base model carrying creation and modification timestamps.

    Ledger-style rows (remarks, forward history, notifications) only need
    these two columns; the actor is recorded on the row itself.
    """

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class AuditableModel(TimeStampedModel):
    """
    Abstract base model for audit tracking.

    **Tracks:**
    - Who created the record
    - When it was created
    - Who last modified it
    - When it was last modified

    Field-level change history is kept by django-auditlog for the models
    registered in each app's ``apps.py``.
    """

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_created_set',
        help_text="User who created this record"
    )

    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_updated_set',
        help_text="User who last updated this record"
    )

    class Meta:
        abstract = True
