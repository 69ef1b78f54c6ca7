from unittest import mock

from django.db import DatabaseError
from django.test import override_settings

from apps.catalog.models import Brand
from apps.complaints.models import Complaint, ForwardRecord, Remark
from apps.complaints.services import lifecycle_service, report_number_service
from apps.core.exceptions import (
    ConflictError,
    DependencyError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from apps.notifications.models import Notification
from tests.factories import (
    BaseTestCase,
    CategoryFactory,
    CustomerFactory,
    SubcategoryFactory,
    TechnicianFactory,
    pdf_upload,
    png_upload,
)


class CreateComplaintTests(BaseTestCase):

    def test_customer_submits_pending_complaint(self):
        complaint = self.submit_complaint(model_no='  WM-1200  ')

        self.assertEqual(complaint.report_number, 'A00001')
        self.assertEqual(complaint.status, Complaint.STATUS_PENDING)
        self.assertIsNone(complaint.assigned_to)
        self.assertEqual(complaint.customer, self.customer)
        self.assertEqual(complaint.created_by, self.customer)
        self.assertEqual(complaint.model_no, 'WM-1200')
        self.assertEqual(complaint.warranty_file, '')

    def test_report_numbers_are_sequential(self):
        first = self.submit_complaint()
        second = self.submit_complaint(customer=CustomerFactory())
        self.assertEqual((first.report_number, second.report_number), ('A00001', 'A00002'))

    def test_only_customers_submit(self):
        for actor in (self.admin, self.technician):
            with self.assertRaises(ForbiddenError):
                self.submit_complaint(customer=actor)
        self.assertEqual(Complaint.objects.count(), 0)

    def test_details_length_enforced(self):
        with self.assertRaises(ValidationError) as ctx:
            self.submit_complaint(details='   too short   ')
        self.assertIn('details', ctx.exception.field_errors)

        with override_settings(COMPLAINT_DETAILS_MAX_LENGTH=20):
            with self.assertRaises(ValidationError):
                self.submit_complaint(details='x' * 21)

    def test_subcategory_must_belong_to_category(self):
        other = SubcategoryFactory(category=CategoryFactory(name='Refrigerator'))
        with self.assertRaises(ValidationError) as ctx:
            self.submit_complaint(subcategory=other)
        self.assertIn('subcategory', ctx.exception.field_errors)

    def test_brand_must_be_offered_for_category(self):
        fridge_brand = Brand.objects.create(name='Coldline', category=CategoryFactory(name='Refrigerator'))
        with self.assertRaises(ValidationError):
            self.submit_complaint(brand=fridge_brand)

        universal = Brand.objects.create(name='Generic', category=None)
        complaint = self.submit_complaint(brand=universal)
        self.assertEqual(complaint.brand, universal)

    def test_missing_classification_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.submit_complaint(state=None)
        self.assertIn('state', ctx.exception.field_errors)

    def test_under_warranty_requires_both_attachments(self):
        with self.assertRaises(ValidationError) as ctx:
            self.submit_complaint(warranty_status=Complaint.WARRANTY_UNDER, warranty_file=png_upload())
        self.assertEqual(list(ctx.exception.field_errors), ['receipt_file'])

        with self.assertRaises(ValidationError):
            self.submit_complaint(warranty_status=Complaint.WARRANTY_UNDER)
        self.assertEqual(Complaint.objects.count(), 0)

    def test_under_warranty_stores_attachment_references(self):
        complaint = self.submit_complaint(
            warranty_status=Complaint.WARRANTY_UNDER,
            warranty_file=png_upload(),
            receipt_file=pdf_upload(),
        )
        self.assertTrue(complaint.warranty_file.startswith(f'complaints/{self.customer.pk}/'))
        self.assertTrue(complaint.warranty_file.endswith('.png'))
        self.assertTrue(complaint.receipt_file.endswith('.pdf'))

    def test_over_warranty_accepts_any_subset(self):
        complaint = self.submit_complaint(receipt_file=pdf_upload())
        self.assertEqual(complaint.warranty_file, '')
        self.assertNotEqual(complaint.receipt_file, '')

    def test_invalid_warranty_status_rejected(self):
        with self.assertRaises(ValidationError):
            self.submit_complaint(warranty_status='Extended')

    def test_attachment_store_failure_aborts_create(self):
        with mock.patch('apps.complaints.storage.default_storage') as storage:
            storage.save.side_effect = OSError('bucket unavailable')
            with self.assertRaises(DependencyError) as ctx:
                self.submit_complaint(
                    warranty_status=Complaint.WARRANTY_UNDER,
                    warranty_file=png_upload(),
                    receipt_file=pdf_upload(),
                )
        self.assertNotIn('bucket', ctx.exception.message)
        self.assertEqual(Complaint.objects.count(), 0)

    def test_failed_insert_removes_stored_attachments(self):
        with mock.patch('apps.complaints.storage.default_storage') as store, \
                mock.patch.object(report_number_service, 'save_with_report_number',
                                  side_effect=ConflictError("Could not allocate a report number.")):
            store.save.side_effect = lambda name, content: name
            with self.assertRaises(ConflictError):
                self.submit_complaint(
                    warranty_status=Complaint.WARRANTY_UNDER,
                    warranty_file=png_upload(),
                    receipt_file=pdf_upload(),
                )

        saved = [call.args[0] for call in store.save.call_args_list]
        deleted = [call.args[0] for call in store.delete.call_args_list]
        self.assertEqual(len(saved), 2)
        self.assertEqual(deleted, saved)
        self.assertEqual(Complaint.objects.count(), 0)

    def test_failed_receipt_upload_removes_warranty_proof(self):
        with mock.patch('apps.complaints.storage.default_storage') as store:
            store.save.side_effect = ['complaints/warranty.png', OSError('bucket unavailable')]
            with self.assertRaises(DependencyError):
                self.submit_complaint(
                    warranty_status=Complaint.WARRANTY_UNDER,
                    warranty_file=png_upload(),
                    receipt_file=pdf_upload(),
                )
        store.delete.assert_called_once_with('complaints/warranty.png')

    def test_invalid_attachment_rejected_before_anything_is_stored(self):
        with mock.patch('apps.complaints.storage.default_storage') as store:
            with self.assertRaises(ValidationError):
                self.submit_complaint(
                    warranty_status=Complaint.WARRANTY_UNDER,
                    warranty_file=png_upload(),
                    receipt_file=pdf_upload(name='receipt.exe'),
                )
        store.save.assert_not_called()

    def test_racing_submissions_get_distinct_gapless_numbers(self):
        live_max = report_number_service.current_max_report_number
        # Every racer read the maximum before any of them inserted
        snapshot = live_max()

        def read_stale_first():
            pending = [snapshot]
            return lambda: pending.pop() if pending else live_max()

        numbers = []
        for _ in range(5):
            with mock.patch.object(report_number_service, 'current_max_report_number',
                                   side_effect=read_stale_first()):
                numbers.append(self.submit_complaint().report_number)

        self.assertEqual(numbers, ['A00001', 'A00002', 'A00003', 'A00004', 'A00005'])


class ForwardComplaintTests(BaseTestCase):

    def setUp(self):
        super().setUp()
        self.complaint = self.submit_complaint()

    def test_first_forward_records_no_previous_assignee(self):
        complaint = self.forward(self.complaint)

        self.assertEqual(complaint.assigned_to, self.technician)
        self.assertEqual(complaint.status, Complaint.STATUS_PENDING)
        record = ForwardRecord.objects.get(complaint=complaint)
        self.assertIsNone(record.previous_assignee)
        self.assertEqual(record.new_assignee, self.technician)
        self.assertEqual(record.forwarded_by, self.admin)

    def test_reforward_points_back_to_previous_technician(self):
        second = TechnicianFactory()
        self.forward(self.complaint)
        self.forward(self.complaint, technician=second)

        records = list(self.complaint.forward_history.all())
        self.assertEqual(len(records), 2)
        self.assertEqual(records[1].previous_assignee, self.technician)
        self.assertEqual(records[1].new_assignee, second)
        self.complaint.refresh_from_db()
        self.assertEqual(self.complaint.assigned_to, second)

    def test_status_override_applied(self):
        complaint = self.forward(self.complaint, status=Complaint.STATUS_IN_PROCESS)
        self.assertEqual(complaint.status, Complaint.STATUS_IN_PROCESS)
        self.assertEqual(complaint.updated_by, self.admin)

    def test_only_admins_forward(self):
        for actor in (self.customer, self.technician):
            with self.assertRaises(ForbiddenError):
                lifecycle_service.forward_complaint(
                    actor=actor,
                    complaint_id=self.complaint.pk,
                    technician_id=self.technician.pk,
                )
        self.assertFalse(ForwardRecord.objects.exists())

    def test_missing_complaint_reported_before_role(self):
        with self.assertRaises(NotFoundError):
            lifecycle_service.forward_complaint(
                actor=self.customer,
                complaint_id=999999,
                technician_id=self.technician.pk,
            )

    def test_target_must_be_an_active_technician(self):
        inactive = TechnicianFactory(is_active=False)
        for target in (self.customer, self.admin, inactive):
            with self.assertRaises(NotFoundError):
                self.forward(self.complaint, technician=target)

    def test_terminal_complaints_rejected(self):
        self.forward(self.complaint, status=Complaint.STATUS_CLOSED)
        with self.assertRaises(ConflictError):
            self.forward(self.complaint)

        cancelled = self.submit_complaint()
        lifecycle_service.cancel_complaint(actor=self.customer, complaint_id=cancelled.pk)
        with self.assertRaises(ConflictError):
            self.forward(cancelled)

    def test_status_cannot_move_backwards(self):
        self.forward(self.complaint, status=Complaint.STATUS_IN_PROCESS)
        with self.assertRaises(ConflictError):
            self.forward(self.complaint, status=Complaint.STATUS_PENDING)

    def test_cancelled_is_not_a_forward_status(self):
        with self.assertRaises(ValidationError):
            self.forward(self.complaint, status=Complaint.STATUS_CANCELLED)
        self.complaint.refresh_from_db()
        self.assertIsNone(self.complaint.assigned_to)

    def test_failed_notification_does_not_undo_forward(self):
        with mock.patch('apps.notifications.services.Notification.objects.create', side_effect=DatabaseError):
            complaint = self.forward(self.complaint, status=Complaint.STATUS_IN_PROCESS)

        complaint.refresh_from_db()
        self.assertEqual(complaint.assigned_to, self.technician)
        self.assertEqual(complaint.status, Complaint.STATUS_IN_PROCESS)
        self.assertFalse(Notification.objects.exists())


class UpdateComplaintTests(BaseTestCase):

    def setUp(self):
        super().setUp()
        self.complaint = self.forward(self.submit_complaint())

    def update(self, actor=None, **fields):
        return lifecycle_service.update_complaint(
            actor=actor or self.technician,
            complaint_id=self.complaint.pk,
            **fields
        )

    def test_assigned_technician_adds_remark_and_status(self):
        entry = self.update(status='in_process', checking_note='  Motor brushes worn  ')

        self.assertEqual(entry.author, self.technician)
        self.assertEqual(entry.author_role, 'technician')
        self.assertEqual(entry.checking_note, 'Motor brushes worn')
        self.assertEqual(entry.status, 'in_process')
        self.complaint.refresh_from_db()
        self.assertEqual(self.complaint.status, Complaint.STATUS_IN_PROCESS)
        self.assertEqual(self.complaint.current_checking_note, 'Motor brushes worn')

    def test_remark_without_status_keeps_status(self):
        self.update(remark='Waiting for spare parts')
        self.complaint.refresh_from_db()
        self.assertEqual(self.complaint.status, Complaint.STATUS_PENDING)

    def test_admin_may_update_any_complaint(self):
        entry = self.update(actor=self.admin, transport_note='Pickup booked for Monday')
        self.assertEqual(entry.author_role, 'admin')

    def test_unassigned_technician_and_customer_forbidden(self):
        for actor in (TechnicianFactory(), self.customer):
            with self.assertRaises(ForbiddenError):
                self.update(actor=actor, remark='Not mine')
        self.assertFalse(Remark.objects.exists())

    def test_empty_update_rejected(self):
        with self.assertRaises(ValidationError):
            self.update(status='', remark='   ')

    def test_closed_complaint_is_terminal(self):
        self.update(status='closed', remark='Repaired and returned')
        with self.assertRaises(ConflictError):
            self.update(remark='One more thing')
        self.assertEqual(Remark.objects.count(), 1)

    def test_backward_status_rejected(self):
        self.update(status='in_process')
        with self.assertRaises(ConflictError):
            self.update(status='pending')

    def test_repeating_current_status_is_allowed(self):
        self.update(status='in_process')
        entry = self.update(status='in_process', remark='Still on the bench')
        self.assertEqual(entry.status, 'in_process')

    @override_settings(COMPLAINT_REMARK_LIMIT=2)
    def test_remark_limit(self):
        self.update(remark='First')
        self.update(remark='Second')
        with self.assertRaises(ConflictError):
            self.update(remark='Third')


class CancelComplaintTests(BaseTestCase):

    def setUp(self):
        super().setUp()
        self.complaint = self.submit_complaint()

    def test_owner_cancels_pending_complaint(self):
        complaint = lifecycle_service.cancel_complaint(actor=self.customer, complaint_id=self.complaint.pk)
        self.assertEqual(complaint.status, Complaint.STATUS_CANCELLED)
        self.assertTrue(complaint.is_terminal)

    def test_forwarded_but_pending_can_still_be_cancelled(self):
        self.forward(self.complaint)
        complaint = lifecycle_service.cancel_complaint(actor=self.customer, complaint_id=self.complaint.pk)
        self.assertEqual(complaint.status, Complaint.STATUS_CANCELLED)

    def test_only_the_owner_cancels(self):
        for actor in (CustomerFactory(), self.admin, self.technician):
            with self.assertRaises(ForbiddenError):
                lifecycle_service.cancel_complaint(actor=actor, complaint_id=self.complaint.pk)

    def test_in_process_complaint_cannot_be_cancelled(self):
        self.forward(self.complaint, status=Complaint.STATUS_IN_PROCESS)
        with self.assertRaises(ConflictError):
            lifecycle_service.cancel_complaint(actor=self.customer, complaint_id=self.complaint.pk)

    def test_cancel_twice_conflicts(self):
        lifecycle_service.cancel_complaint(actor=self.customer, complaint_id=self.complaint.pk)
        with self.assertRaises(ConflictError):
            lifecycle_service.cancel_complaint(actor=self.customer, complaint_id=self.complaint.pk)


class ComplaintVisibilityTests(BaseTestCase):

    def setUp(self):
        super().setUp()
        self.mine = self.submit_complaint()
        self.other_customer = CustomerFactory()
        self.theirs = self.submit_complaint(customer=self.other_customer)
        self.forward(self.theirs)

    def test_list_scoping_by_role(self):
        def numbers(actor):
            return set(lifecycle_service.list_complaints_for_actor(actor=actor).values_list('pk', flat=True))

        self.assertEqual(numbers(self.customer), {self.mine.pk})
        self.assertEqual(numbers(self.technician), {self.theirs.pk})
        self.assertEqual(numbers(self.admin), {self.mine.pk, self.theirs.pk})
        self.assertEqual(numbers(TechnicianFactory()), set())

    def test_list_filters(self):
        results = lifecycle_service.list_complaints_for_actor(
            actor=self.admin,
            filters={'status': 'not_forwarded'},
        )
        self.assertEqual([c.pk for c in results], [self.mine.pk])

        with self.assertRaises(ValidationError):
            lifecycle_service.list_complaints_for_actor(actor=self.admin, filters={'status': 'bogus'})

    def test_detail_access(self):
        self.assertEqual(
            lifecycle_service.get_complaint_for_actor(actor=self.customer, complaint_id=self.mine.pk),
            self.mine,
        )
        with self.assertRaises(ForbiddenError):
            lifecycle_service.get_complaint_for_actor(actor=self.customer, complaint_id=self.theirs.pk)
        with self.assertRaises(ForbiddenError):
            lifecycle_service.get_complaint_for_actor(actor=self.technician, complaint_id=self.mine.pk)
        with self.assertRaises(NotFoundError):
            lifecycle_service.get_complaint_for_actor(actor=self.admin, complaint_id=424242)
