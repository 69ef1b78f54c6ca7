"""
Complaint store: the complaint record, its forward history and remark ledger.

Nothing here is ever physically deleted except a remark removed through
``remark_service.delete_remark``; foreign keys therefore use PROTECT.
"""

from django.conf import settings
from django.db import models

from apps.core.models.base import AuditableModel, TimeStampedModel
from .managers import ComplaintQuerySet


class Complaint(AuditableModel):
    STATUS_PENDING = 'pending'
    STATUS_IN_PROCESS = 'in_process'
    STATUS_CLOSED = 'closed'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_IN_PROCESS, 'In Process'),
        (STATUS_CLOSED, 'Closed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    TERMINAL_STATUSES = (STATUS_CLOSED, STATUS_CANCELLED)

    # Progress order for statuses settable by forward/remark.
    STATUS_PROGRESSION = (STATUS_PENDING, STATUS_IN_PROCESS, STATUS_CLOSED)

    WARRANTY_UNDER = 'Under Warranty'
    WARRANTY_OVER = 'Over Warranty'

    WARRANTY_CHOICES = [
        (WARRANTY_UNDER, 'Under Warranty'),
        (WARRANTY_OVER, 'Over Warranty'),
    ]

    report_number = models.CharField(
        max_length=20,
        unique=True,
        editable=False,
        help_text="Human-facing sequential identifier, e.g. A00001"
    )

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='complaints',
        help_text="Customer who submitted the complaint"
    )

    category = models.ForeignKey('catalog.Category', on_delete=models.PROTECT, related_name='complaints')
    subcategory = models.ForeignKey('catalog.Subcategory', on_delete=models.PROTECT, related_name='complaints')
    brand = models.ForeignKey('catalog.Brand', on_delete=models.PROTECT, related_name='complaints')
    state = models.ForeignKey(
        'catalog.State',
        on_delete=models.PROTECT,
        related_name='complaints',
        help_text="Customer location"
    )
    model_no = models.CharField(max_length=100, blank=True)
    warranty_status = models.CharField(max_length=20, choices=WARRANTY_CHOICES)
    details = models.TextField()

    # Attachment store references, never bytes.
    warranty_file = models.CharField(max_length=500, blank=True)
    receipt_file = models.CharField(max_length=500, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='assigned_complaints',
        help_text="Technician currently working on the complaint"
    )

    objects = ComplaintQuerySet.as_manager()

    class Meta:
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['status', 'assigned_to'], name='complaint_status_assignee_idx'),
            models.Index(fields=['customer', 'status'], name='complaint_customer_status_idx'),
        ]

    def __str__(self):
        return f"{self.report_number} ({self.status})"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    @property
    def is_forwarded(self):
        return self.assigned_to_id is not None

    @property
    def latest_remark(self):
        """Most recent remark by creation time, whatever status it carried."""
        return self.remarks.order_by('-created_at', '-id').first()

    @property
    def current_transport_note(self):
        remark = self.latest_remark
        return remark.transport_note if remark else ''

    @property
    def current_checking_note(self):
        remark = self.latest_remark
        return remark.checking_note if remark else ''


class ForwardRecord(models.Model):
    """One row per hand-off. Append-only."""

    complaint = models.ForeignKey(Complaint, on_delete=models.PROTECT, related_name='forward_history')
    previous_assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
    )
    new_assignee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='+')
    forwarded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        related_name='forwards_made',
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'forward_history'
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.complaint.report_number}: {self.previous_assignee_id} -> {self.new_assignee_id}"


class Remark(TimeStampedModel):
    """Technician or admin annotation; may carry a status snapshot."""

    complaint = models.ForeignKey(Complaint, on_delete=models.PROTECT, related_name='remarks')
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='remarks')
    author_role = models.CharField(max_length=20)

    transport_note = models.TextField(blank=True)
    checking_note = models.TextField(blank=True)
    remark = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Complaint.STATUS_CHOICES, blank=True)

    EDITABLE_FIELDS = ('transport_note', 'checking_note', 'remark', 'status')

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"Remark {self.pk} on {self.complaint.report_number}"
