import json
from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from apps.academics.attendance.models import AttendanceRecord
from apps.core.records.errors import ValidationError
from apps.finance.payments.models import Payment

from .models import Student, StudentParentLink, next_roll_number
from .services import apply_discount, certificate_id, create_student


class StudentModelTests(TestCase):
    def test_roll_numbers_are_sequential_per_year(self):
        first = Student.objects.create(name='One', whatsapp='9000000001', enrollment_date=date(2026, 4, 1))
        second = Student.objects.create(name='Two', whatsapp='9000000002', enrollment_date=date(2026, 5, 1))

        self.assertEqual(first.roll_number, 'ANA-2026-001')
        self.assertEqual(second.roll_number, 'ANA-2026-002')
        self.assertEqual(next_roll_number(date(2027, 1, 1)), 'ANA-2027-001')

    def test_validity_end_derived_from_sessions(self):
        student = Student.objects.create(
            name='Valid',
            whatsapp='9000000003',
            validity_start=date(2026, 1, 1),
            total_sessions=10,
        )

        self.assertEqual(student.validity_end, date(2026, 1, 1) + timedelta(weeks=3))

    def test_explicit_validity_end_is_kept(self):
        student = Student.objects.create(
            name='Override',
            whatsapp='9000000004',
            validity_start=date(2026, 1, 1),
            validity_end=date(2026, 12, 31),
        )

        self.assertEqual(student.validity_end, date(2026, 12, 31))


class StudentServiceTests(TestCase):
    def test_percent_discount_sets_final_fee(self):
        fields = apply_discount({'base_fee': Decimal('12000'), 'discount_percent': Decimal('10')})

        self.assertEqual(fields['fee_amount'], Decimal('10800'))
        self.assertEqual(fields['discount_amount'], Decimal('0'))

    def test_both_discounts_are_rejected(self):
        with self.assertRaises(ValidationError):
            apply_discount({'base_fee': 1000, 'discount_percent': 5, 'discount_amount': 100})

    def test_flat_discount_above_fee_gives_zero(self):
        student = create_student(fields={
            'name': 'Scholar',
            'whatsapp': '9000000005',
            'base_fee': Decimal('1000'),
            'discount_amount': Decimal('1500'),
        })

        self.assertEqual(student.fee_amount, Decimal('0'))

    def test_certificate_id_drops_studio_prefix(self):
        self.assertEqual(certificate_id('ANA-2026-007'), 'ANA-CERT-2026-007')


class StudentViewTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        self.admin = user_model.objects.create_user(username='studio_admin', password='pass12345', role='admin')
        self.parent = user_model.objects.create_user(username='parent_one', password='pass12345', role='parent')
        self.student = Student.objects.create(
            name='Asha Khan',
            whatsapp='9876543210',
            total_sessions=2,
            base_fee=Decimal('12000'),
            fee_amount=Decimal('12000'),
            dob=date(2014, 1, 10),
        )
        self.other = Student.objects.create(name='Other Child', whatsapp='9876500000', total_sessions=4)
        StudentParentLink.objects.create(parent_user=self.parent, student=self.student)

    def test_create_student_derives_fee_and_welcome_link(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.post(
            reverse('student_list'),
            data=json.dumps({
                'name': 'New Learner',
                'whatsapp': '98765 11111',
                'base_fee': '12000',
                'discount_percent': '10',
            }),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(Decimal(body['student']['fee_amount']), Decimal('10800'))
        self.assertTrue(body['student']['roll_number'].startswith('ANA-'))
        self.assertTrue(body['whatsapp']['url'].startswith('https://wa.me/919876511111?text='))

    def test_create_student_rejects_both_discounts(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.post(
            reverse('student_list'),
            data=json.dumps({
                'name': 'Greedy',
                'whatsapp': '9000000009',
                'base_fee': '1000',
                'discount_percent': '10',
                'discount_amount': '50',
            }),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Student.objects.filter(name='Greedy').exists())

    def test_list_search_matches_roll_number(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.get(reverse('student_list'), {'q': self.other.roll_number})

        self.assertEqual([s['id'] for s in response.json()['students']], [self.other.id])

    def test_profile_metrics(self):
        Payment.objects.create(student=self.student, amount=Decimal('4000'), status='paid')
        Payment.objects.create(
            student=self.student,
            amount=Decimal('4000'),
            status='pending',
            date=date.today() + timedelta(days=10),
        )
        AttendanceRecord.objects.create(student=self.student, date=date(2026, 1, 5), status='present')
        AttendanceRecord.objects.create(student=self.student, date=date(2026, 1, 6), status='absent')
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.get(reverse('student_profile', args=[self.student.id]))

        self.assertEqual(response.status_code, 200)
        metrics = response.json()['metrics']
        self.assertEqual(metrics['attendance']['percent'], 50)
        self.assertEqual(metrics['attendance']['sessions_remaining'], 1)
        self.assertEqual(metrics['fees']['progress'], 33)
        self.assertIsNotNone(metrics['fees']['next_due'])
        self.assertFalse(metrics['certificate_eligible'])

    def test_parent_sees_only_linked_student(self):
        self.client.login(username='parent_one', password='pass12345')

        own = self.client.get(reverse('student_profile', args=[self.student.id]))
        other = self.client.get(reverse('student_profile', args=[self.other.id]))

        self.assertEqual(own.status_code, 200)
        self.assertEqual(other.status_code, 403)

    def test_update_recomputes_fee(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.post(
            reverse('student_update', args=[self.student.id]),
            data=json.dumps({'discount_amount': '2000'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200)
        self.student.refresh_from_db()
        self.assertEqual(self.student.fee_amount, Decimal('10000'))

    def test_id_card_png(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.get(reverse('student_id_card', args=[self.student.id]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'image/png')
        self.assertTrue(response.content.startswith(b'\x89PNG'))

    def test_certificate_refused_until_eligible(self):
        self.client.login(username='studio_admin', password='pass12345')
        url = reverse('student_certificate', args=[self.student.id])

        self.assertEqual(self.client.get(url).status_code, 400)

        AttendanceRecord.objects.create(student=self.student, date=date(2026, 2, 1), status='present')
        AttendanceRecord.objects.create(student=self.student, date=date(2026, 2, 2), status='late')
        response = self.client.get(url)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_certificate_list_puts_eligible_first(self):
        AttendanceRecord.objects.create(student=self.other, date=date(2026, 2, 1), status='present')
        for day in range(1, 5):
            AttendanceRecord.objects.create(student=self.other, date=date(2026, 3, day), status='present')
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.get(reverse('certificate_list'))

        body = response.json()
        self.assertEqual(body['eligible_count'], 1)
        self.assertEqual(body['students'][0]['id'], self.other.id)
