"""
Custom User model carrying the actor role.

Customers, administrators and technicians are disjoint identity spaces:
every account has exactly one role, supplied at creation, and every service
operation trusts ``user.role`` instead of guessing it from credentials.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.core.exceptions import ValidationError


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    **Business Rules:**
    - Customers submit complaints and may cancel their own pending ones
    - Admins forward complaints to technicians and may update any complaint
    - Technicians work on the complaints currently assigned to them
    """

    ROLE_CUSTOMER = 'customer'
    ROLE_ADMIN = 'admin'
    ROLE_TECHNICIAN = 'technician'

    ROLE_CHOICES = [
        (ROLE_CUSTOMER, 'Customer'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_TECHNICIAN, 'Technician'),
    ]

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=ROLE_CUSTOMER,
        db_index=True,
        help_text="Actor role used for every permission check"
    )

    phone_number = models.CharField(
        max_length=20,
        blank=True,
        help_text="Contact phone number"
    )

    ic_number = models.CharField(
        max_length=20,
        blank=True,
        db_index=True,
        help_text="Identity card number (customers only, searchable by admins)"
    )

    department = models.CharField(
        max_length=100,
        blank=True,
        help_text="Workshop or service department (technicians only)"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['username']
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['role', 'is_active'], name='accounts_user_role_active_idx'),
        ]

    def __str__(self):
        return f"{self.get_full_name() or self.username} ({self.get_role_display()})"

    def clean(self):
        super().clean()

        if self.ic_number and self.role != self.ROLE_CUSTOMER:
            raise ValidationError({
                'ic_number': 'Only customers carry an identity card number.'
            })

        if self.department and self.role != self.ROLE_TECHNICIAN:
            raise ValidationError({
                'department': 'Only technicians belong to a department.'
            })

    @property
    def is_customer(self):
        return self.role == self.ROLE_CUSTOMER

    @property
    def is_complaint_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def is_technician(self):
        return self.role == self.ROLE_TECHNICIAN

    @property
    def display_name(self):
        return self.get_full_name() or self.username
