import json
from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import RequestFactory, SimpleTestCase, TestCase

from apps.academics.leads.models import Lead
from apps.academics.students.models import Student
from apps.core.records import access, errors
from apps.core.records.payload import request_payload
from apps.core.records.records import LeadRecord, MalformedRow, PaymentRecord, StudentRecord


class AccessLayerTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        self.admin = user_model.objects.create_user(username='studio_admin', password='pass12345', role='admin')
        self.parent = user_model.objects.create_user(username='parent_one', password='pass12345', role='parent')
        self.student = Student.objects.create(
            name='Asha Khan',
            whatsapp='9876543210',
            total_sessions=8,
            fee_amount=Decimal('12000'),
        )

    def test_insert_returns_typed_record(self):
        record = access.insert('leads', {'name': 'Ravi', 'phone': '9123456780'}, actor=self.admin)

        self.assertIsInstance(record, LeadRecord)
        self.assertEqual(record.status, 'new')
        self.assertTrue(Lead.objects.filter(pk=record.id).exists())

    def test_insert_rejects_constraint_violation(self):
        with self.assertRaises(errors.ValidationError) as ctx:
            access.insert(
                'payments',
                {'student_id': self.student.id, 'amount': Decimal('100'), 'installment_no': 3, 'total_installments': 2},
                actor=self.admin,
            )

        self.assertIn('installment_no', ctx.exception.details)

    def test_insert_rejects_unknown_fields(self):
        with self.assertRaises(errors.ValidationError):
            access.insert('leads', {'name': 'Ravi', 'favourite_colour': 'blue'})

    def test_unknown_kind_is_validation_error(self):
        with self.assertRaises(errors.ValidationError):
            access.fetch_all('homework')

    def test_update_missing_row_is_not_found(self):
        with self.assertRaises(errors.NotFoundError):
            access.update('leads', 9999, {'status': 'demo'}, actor=self.admin)

    def test_delete_removes_row(self):
        lead = Lead.objects.create(name='Temp')

        self.assertTrue(access.delete('leads', lead.id, actor=self.admin))
        self.assertFalse(Lead.objects.filter(pk=lead.id).exists())

    def test_parent_can_read_students_but_not_leads_or_write(self):
        students = access.fetch_all('students', actor=self.parent)
        self.assertEqual([s.id for s in students], [self.student.id])

        with self.assertRaises(errors.AuthorizationError):
            access.fetch_all('leads', actor=self.parent)
        with self.assertRaises(errors.AuthorizationError):
            access.update('students', self.student.id, {'name': 'Changed'}, actor=self.parent)

    def test_anonymous_actor_is_unauthenticated(self):
        from django.contrib.auth.models import AnonymousUser

        with self.assertRaises(errors.AuthorizationError) as ctx:
            access.fetch_all('students', actor=AnonymousUser())

        self.assertEqual(ctx.exception.status_code, 401)

    def test_fetch_all_skips_malformed_rows(self):
        good = Lead.objects.create(name='Good Lead')
        Lead.objects.filter(pk=Lead.objects.create(name='placeholder').pk).update(name='')

        with self.assertLogs('apps.core.records.access', level='WARNING'):
            leads = access.fetch_all('leads')

        self.assertEqual([lead.id for lead in leads], [good.id])

    def test_upsert_updates_existing_row(self):
        lookup = {'student_id': self.student.id, 'date': date(2026, 3, 2)}

        first, created = access.upsert('attendance', lookup, {'status': 'absent'})
        second, created_again = access.upsert('attendance', lookup, {'status': 'present'})

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(first.id, second.id)
        self.assertEqual(second.status, 'present')

    def test_student_record_derives_validity(self):
        record = access.fetch_one('students', self.student.id)

        self.assertIsInstance(record, StudentRecord)
        self.assertIsNotNone(record.validity_end)
        self.assertTrue(record.roll_number.startswith('ANA-'))


class RecordMappingTests(SimpleTestCase):
    def test_lead_status_aliases_are_normalized(self):
        self.assertEqual(LeadRecord.from_row({'id': 1, 'name': 'A', 'status': 'follow-up'}).status, 'contacted')
        self.assertEqual(LeadRecord.from_row({'id': 1, 'name': 'A', 'status': 'lost'}).status, 'not-interested')
        self.assertEqual(LeadRecord.from_row({'id': 1, 'name': 'A', 'status': 'weird'}).status, 'new')

    def test_unknown_course_defaults_to_basic(self):
        self.assertEqual(LeadRecord.from_row({'id': 1, 'name': 'A', 'course': 'Sculpture'}).course, 'Basic')

    def test_payment_with_unknown_status_is_rejected(self):
        with self.assertRaises(MalformedRow):
            PaymentRecord.from_row({'id': 1, 'student_id': 1, 'amount': '10', 'date': '2026-01-01', 'status': 'void'})

    def test_payment_amount_must_be_numeric(self):
        with self.assertRaises(MalformedRow):
            PaymentRecord.from_row({'id': 1, 'student_id': 1, 'amount': 'ten', 'date': '2026-01-01', 'status': 'paid'})


class RequestPayloadTests(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_json_body(self):
        request = self.factory.post('/x/', data=json.dumps({'name': 'Asha'}), content_type='application/json')

        self.assertEqual(request_payload(request), {'name': 'Asha'})

    def test_invalid_json_is_validation_error(self):
        request = self.factory.post('/x/', data='{not json', content_type='application/json')

        with self.assertRaises(errors.ValidationError):
            request_payload(request)

    def test_form_body(self):
        request = self.factory.post('/x/', data={'name': 'Asha'})

        self.assertEqual(request_payload(request), {'name': 'Asha'})


class ErrorTaxonomyTests(SimpleTestCase):
    def test_upstream_status_mapping(self):
        self.assertEqual(errors.UpstreamError(upstream_status=429).status_code, 429)
        self.assertEqual(errors.UpstreamError(upstream_status=402).status_code, 402)
        self.assertEqual(errors.UpstreamError(upstream_status=500).status_code, 502)

    def test_error_response_payload(self):
        response = errors.error_response(errors.DuplicateError())

        self.assertEqual(response.status_code, 429)
        self.assertIn('error', json.loads(response.content))
