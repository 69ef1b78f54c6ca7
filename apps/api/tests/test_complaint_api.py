"""
Tests for the REST API.

Validates:
- Status codes for each service error kind
- Role-scoped listing and filters
- Multipart complaint submission
- Forward, remark, cancel, remark edit/delete and stats endpoints
"""

import pytest
from rest_framework.test import APIClient

from apps.complaints.models import Complaint, Remark
from apps.complaints.services import lifecycle_service
from tests.factories import (
    AdminFactory,
    BrandFactory,
    CategoryFactory,
    ComplaintFactory,
    CustomerFactory,
    StateFactory,
    SubcategoryFactory,
    TechnicianFactory,
    pdf_upload,
    png_upload,
)

COMPLAINTS_URL = '/api/v1/complaints/'


@pytest.mark.django_db
class TestComplaintSubmission:

    def test_customer_submits_with_attachments(self, client_for, customer, catalog):
        response = client_for(customer).post(COMPLAINTS_URL, {
            **catalog,
            'warranty_status': 'Under Warranty',
            'details': 'Washing machine leaks from the door seal.',
            'model_no': 'WD-80',
            'warranty_file': png_upload(),
            'receipt_file': pdf_upload(),
        }, format='multipart')

        assert response.status_code == 201
        data = response.json()
        assert data['report_number'] == 'A00001'
        assert data['status'] == 'pending'
        assert data['warranty_file_url'].endswith('.png')
        assert data['receipt_file_url'].endswith('.pdf')
        assert data['remarks'] == []
        assert data['forward_history'] == []

    def test_missing_warranty_documents(self, client_for, customer, catalog):
        response = client_for(customer).post(COMPLAINTS_URL, {
            **catalog,
            'warranty_status': 'Under Warranty',
            'details': 'Washing machine leaks from the door seal.',
        }, format='multipart')

        assert response.status_code == 400
        body = response.json()
        assert body['code'] == 'validation_error'
        assert set(body['fields']) == {'warranty_file', 'receipt_file'}
        assert not Complaint.objects.exists()

    def test_serializer_errors_use_the_same_envelope(self, client_for, customer, catalog):
        response = client_for(customer).post(COMPLAINTS_URL, {
            **catalog,
            'warranty_status': 'Forever',
            'details': 'Washing machine leaks from the door seal.',
        }, format='multipart')

        assert response.status_code == 400
        assert response.json()['error'] == 'Invalid request'
        assert 'warranty_status' in response.json()['fields']

    def test_only_customers_may_submit(self, client_for, admin, catalog):
        response = client_for(admin).post(COMPLAINTS_URL, {
            **catalog,
            'warranty_status': 'Over Warranty',
            'details': 'Washing machine leaks from the door seal.',
        }, format='multipart')
        assert response.status_code == 403

    def test_anonymous_rejected(self):
        response = APIClient().get(COMPLAINTS_URL)
        assert response.status_code == 403
        assert response.json()['code'] == 'forbidden'


@pytest.mark.django_db
class TestComplaintQueries:

    def test_list_is_scoped_to_the_customer(self, client_for, customer):
        own = ComplaintFactory(customer=customer)
        ComplaintFactory()

        response = client_for(customer).get(COMPLAINTS_URL)

        assert response.status_code == 200
        assert response.json()['count'] == 1
        assert response.json()['results'][0]['report_number'] == own.report_number

    def test_admin_filters(self, client_for, admin, technician):
        waiting = ComplaintFactory()
        ComplaintFactory(assigned_to=technician)
        ComplaintFactory(status=Complaint.STATUS_CLOSED, assigned_to=technician)

        client = client_for(admin)
        not_forwarded = client.get(COMPLAINTS_URL, {'status': 'not_forwarded'}).json()
        assert [c['id'] for c in not_forwarded['results']] == [waiting.pk]

        closed = client.get(COMPLAINTS_URL, {'status': 'closed'}).json()
        assert closed['count'] == 1

        by_tech = client.get(COMPLAINTS_URL, {'assigned_to': technician.pk}).json()
        assert by_tech['count'] == 2

    def test_search_by_report_number_and_customer(self, client_for, admin):
        target = ComplaintFactory(customer=CustomerFactory(first_name='Aisyah'))
        ComplaintFactory(customer=CustomerFactory(first_name='Bala'))

        client = client_for(admin)
        assert client.get(COMPLAINTS_URL, {'search': 'aisyah'}).json()['count'] == 1
        assert client.get(COMPLAINTS_URL, {'search': target.report_number}).json()['count'] == 1

    def test_invalid_filter_value(self, client_for, admin):
        response = client_for(admin).get(COMPLAINTS_URL, {'status': 'archived'})
        assert response.status_code == 400

    def test_detail_forbidden_for_other_customer(self, client_for, customer):
        other = ComplaintFactory()
        response = client_for(customer).get(f'{COMPLAINTS_URL}{other.pk}/')
        assert response.status_code == 403
        assert response.json()['error'] == 'Access forbidden'

    def test_detail_not_found(self, client_for, admin):
        response = client_for(admin).get(f'{COMPLAINTS_URL}999999/')
        assert response.status_code == 404
        assert response.json()['code'] == 'not_found'


@pytest.mark.django_db
class TestComplaintActions:

    def test_forward_then_work_the_complaint(self, client_for, admin, technician):
        complaint = ComplaintFactory()

        response = client_for(admin).post(
            f'{COMPLAINTS_URL}{complaint.pk}/forward/',
            {'technician_id': technician.pk, 'status': 'in_process'},
            format='json',
        )
        assert response.status_code == 200
        assert response.json()['assigned_to']['id'] == technician.pk
        assert response.json()['status'] == 'in_process'
        assert response.json()['forward_history'][0]['previous_assignee'] is None

        response = client_for(technician).post(
            f'{COMPLAINTS_URL}{complaint.pk}/remarks/',
            {'checking_note': 'Pump blocked', 'remark': 'Cleaning the filter'},
            format='json',
        )
        assert response.status_code == 201
        assert response.json()['author']['id'] == technician.pk

        detail = client_for(technician).get(f'{COMPLAINTS_URL}{complaint.pk}/').json()
        assert detail['checking_note'] == 'Pump blocked'
        assert len(detail['remarks']) == 1

    def test_customer_cannot_forward(self, client_for, customer, technician):
        complaint = ComplaintFactory(customer=customer)
        response = client_for(customer).post(
            f'{COMPLAINTS_URL}{complaint.pk}/forward/',
            {'technician_id': technician.pk},
            format='json',
        )
        assert response.status_code == 403

    def test_forward_to_unknown_technician(self, client_for, admin):
        complaint = ComplaintFactory()
        response = client_for(admin).post(
            f'{COMPLAINTS_URL}{complaint.pk}/forward/',
            {'technician_id': 999999},
            format='json',
        )
        assert response.status_code == 404

    def test_update_on_closed_complaint_conflicts(self, client_for, admin, technician):
        complaint = ComplaintFactory(assigned_to=technician, status=Complaint.STATUS_CLOSED)
        response = client_for(admin).post(
            f'{COMPLAINTS_URL}{complaint.pk}/remarks/',
            {'remark': 'Reopen please'},
            format='json',
        )
        assert response.status_code == 409
        assert response.json()['code'] == 'conflict'
        assert not Remark.objects.exists()

    def test_empty_remark(self, client_for, technician):
        complaint = ComplaintFactory(assigned_to=technician)
        response = client_for(technician).post(f'{COMPLAINTS_URL}{complaint.pk}/remarks/', {}, format='json')
        assert response.status_code == 400

    def test_cancel(self, client_for, customer):
        complaint = ComplaintFactory(customer=customer)
        response = client_for(customer).post(f'{COMPLAINTS_URL}{complaint.pk}/cancel/')
        assert response.status_code == 200
        assert response.json()['status'] == 'cancelled'

        response = client_for(customer).post(f'{COMPLAINTS_URL}{complaint.pk}/cancel/')
        assert response.status_code == 409


@pytest.mark.django_db
class TestRemarkEndpoints:

    def test_author_edits_and_deletes(self, client_for, technician, remark):
        client = client_for(technician)

        response = client.patch(f'/api/v1/remarks/{remark.pk}/', {'remark': 'Corrected text'}, format='json')
        assert response.status_code == 200
        assert response.json()['remark'] == 'Corrected text'
        assert response.json()['checking_note'] == 'Initial check'

        response = client.delete(f'/api/v1/remarks/{remark.pk}/')
        assert response.status_code == 204
        assert not Remark.objects.filter(pk=remark.pk).exists()

    def test_other_technician_forbidden(self, client_for, remark):
        response = client_for(TechnicianFactory()).patch(
            f'/api/v1/remarks/{remark.pk}/', {'remark': 'Mine now'}, format='json',
        )
        assert response.status_code == 403


@pytest.mark.django_db
class TestStatsEndpoints:

    def test_admin_dashboard(self, client_for, admin, technician):
        ComplaintFactory()
        ComplaintFactory(assigned_to=technician, status=Complaint.STATUS_IN_PROCESS)

        client = client_for(admin)
        dashboard = client.get('/api/v1/stats/dashboard/')
        assert dashboard.status_code == 200
        assert dashboard.json()['total'] == 2
        assert dashboard.json()['not_forwarded'] == 1

        technicians = client.get('/api/v1/stats/technicians/').json()
        assert technicians[0]['in_process'] == 1

    def test_dashboard_is_admin_only(self, client_for, technician):
        assert client_for(technician).get('/api/v1/stats/dashboard/').status_code == 403

    def test_technician_own_stats(self, client_for, technician):
        ComplaintFactory(assigned_to=technician)
        response = client_for(technician).get('/api/v1/stats/mine/')
        assert response.status_code == 200
        assert response.json()['pending'] == 1


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()


@pytest.fixture
def client_for():
    def make(user):
        client = APIClient()
        client.force_login(user)
        return client
    return make


@pytest.fixture
def customer():
    return CustomerFactory()


@pytest.fixture
def admin():
    return AdminFactory()


@pytest.fixture
def technician():
    return TechnicianFactory()


@pytest.fixture
def catalog():
    category = CategoryFactory()
    return {
        'category': category.pk,
        'subcategory': SubcategoryFactory(category=category).pk,
        'brand': BrandFactory(category=category).pk,
        'state': StateFactory().pk,
    }


@pytest.fixture
def remark(admin, technician):
    complaint = ComplaintFactory(assigned_to=technician)
    return lifecycle_service.update_complaint(
        actor=technician,
        complaint_id=complaint.pk,
        checking_note='Initial check',
        remark='First look',
    )
