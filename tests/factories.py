"""
Test factories and helpers for the complaint service.
"""

import factory
from factory.django import DjangoModelFactory
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase

from apps.catalog.models import Brand, Category, State, Subcategory
from apps.complaints.models import Complaint
from apps.complaints.services import lifecycle_service

User = get_user_model()

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64
PDF_BYTES = b'%PDF-1.4\n%test\n'


class UserFactory(DjangoModelFactory):
    """Factory for creating test users."""

    class Meta:
        model = User
        django_get_or_create = ('username',)

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda obj: f"{obj.username}@example.com")
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    is_active = True
    role = User.ROLE_CUSTOMER


class CustomerFactory(UserFactory):
    username = factory.Sequence(lambda n: f"customer{n}")
    role = User.ROLE_CUSTOMER
    ic_number = factory.Sequence(lambda n: f"900101-14-{n:04d}")


class AdminFactory(UserFactory):
    username = factory.Sequence(lambda n: f"admin{n}")
    role = User.ROLE_ADMIN


class TechnicianFactory(UserFactory):
    username = factory.Sequence(lambda n: f"tech{n}")
    role = User.ROLE_TECHNICIAN
    department = 'Home Appliances'


class CategoryFactory(DjangoModelFactory):
    class Meta:
        model = Category
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f"Category {n}")


class SubcategoryFactory(DjangoModelFactory):
    class Meta:
        model = Subcategory

    category = factory.SubFactory(CategoryFactory)
    name = factory.Sequence(lambda n: f"Subcategory {n}")


class BrandFactory(DjangoModelFactory):
    class Meta:
        model = Brand

    category = factory.SubFactory(CategoryFactory)
    name = factory.Sequence(lambda n: f"Brand {n}")


class StateFactory(DjangoModelFactory):
    class Meta:
        model = State
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f"State {n}")


class ComplaintFactory(DjangoModelFactory):
    """Writes rows directly; use ``lifecycle_service.create_complaint`` to exercise the rules."""

    class Meta:
        model = Complaint

    # Outside the allocator pattern so service-created complaints start at A00001.
    report_number = factory.Sequence(lambda n: f"TEST-{n:05d}")
    customer = factory.SubFactory(CustomerFactory)
    category = factory.SubFactory(CategoryFactory)
    subcategory = factory.SubFactory(SubcategoryFactory, category=factory.SelfAttribute('..category'))
    brand = factory.SubFactory(BrandFactory, category=factory.SelfAttribute('..category'))
    state = factory.SubFactory(StateFactory)
    model_no = 'WM-1200'
    warranty_status = Complaint.WARRANTY_OVER
    details = 'The washing machine stopped spinning mid-cycle.'
    status = Complaint.STATUS_PENDING


def png_upload(name='proof.png', size=None):
    content = PNG_BYTES if size is None else b'\x00' * size
    return SimpleUploadedFile(name, content, content_type='image/png')


def pdf_upload(name='receipt.pdf'):
    return SimpleUploadedFile(name, PDF_BYTES, content_type='application/pdf')


class BaseTestCase(TestCase):
    """
    Base test case with one user per role and a small catalog.
    """

    def setUp(self):
        self.customer = CustomerFactory()
        self.admin = AdminFactory()
        self.technician = TechnicianFactory()
        self.category = CategoryFactory(name='Washing Machine')
        self.subcategory = SubcategoryFactory(category=self.category, name='Front Load')
        self.brand = BrandFactory(category=self.category, name='Acme')
        self.state = StateFactory(name='Selangor')

    def submit_complaint(self, customer=None, **kwargs):
        """Create a complaint through the lifecycle service."""
        kwargs.setdefault('category', self.category)
        kwargs.setdefault('subcategory', self.subcategory)
        kwargs.setdefault('brand', self.brand)
        kwargs.setdefault('state', self.state)
        kwargs.setdefault('warranty_status', Complaint.WARRANTY_OVER)
        kwargs.setdefault('details', 'The drum makes a grinding noise when spinning.')
        return lifecycle_service.create_complaint(actor=customer or self.customer, **kwargs)

    def forward(self, complaint, technician=None, status=None):
        return lifecycle_service.forward_complaint(
            actor=self.admin,
            complaint_id=complaint.pk,
            technician_id=(technician or self.technician).pk,
            status=status,
        )

    def login_as(self, user):
        self.client.force_login(user)
        return user
