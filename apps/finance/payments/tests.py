import json
from datetime import date
from decimal import Decimal
from urllib.parse import unquote

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from apps.academics.students.models import Student

from .models import Payment


class PaymentViewTests(TestCase):
    def setUp(self):
        get_user_model().objects.create_user(username='studio_admin', password='pass12345', role='admin')
        self.student = Student.objects.create(
            name='Asha Khan',
            whatsapp='9876543210',
            father_contact='9811122233',
            fee_amount=Decimal('12000'),
        )
        self.client.login(username='studio_admin', password='pass12345')

    def _post(self, payload):
        return self.client.post(reverse('payment_list'), data=json.dumps(payload), content_type='application/json')

    def test_record_payment_with_defaults(self):
        response = self._post({'student': self.student.id, 'amount': '4000'})

        self.assertEqual(response.status_code, 201)
        payment = Payment.objects.get()
        self.assertEqual(payment.status, 'paid')
        self.assertEqual(payment.method, 'UPI')
        self.assertEqual(payment.installment_no, 1)

    def test_installment_beyond_total_is_rejected(self):
        response = self._post({
            'student': self.student.id,
            'amount': '4000',
            'installment_no': 4,
            'total_installments': 3,
        })

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Payment.objects.exists())

    def test_non_positive_amount_is_rejected(self):
        self.assertEqual(self._post({'student': self.student.id, 'amount': '0'}).status_code, 400)

    def test_list_totals(self):
        Payment.objects.create(student=self.student, amount=Decimal('4000'), status='paid')
        Payment.objects.create(student=self.student, amount=Decimal('2500'), status='pending')

        response = self.client.get(reverse('payment_list'))

        summary = response.json()['summary']
        self.assertEqual(Decimal(summary['total_collected']), Decimal('4000'))
        self.assertEqual(Decimal(summary['total_pending']), Decimal('2500'))
        self.assertEqual(response.json()['payments'][0]['student_name'], 'Asha Khan')

    def test_reminder_goes_to_father_first(self):
        payment = Payment.objects.create(
            student=self.student,
            amount=Decimal('125000'),
            status='pending',
            date=date(2026, 7, 5),
        )

        response = self.client.get(reverse('payment_reminder', args=[payment.id]))

        self.assertEqual(response.status_code, 200)
        link = response.json()['whatsapp']
        self.assertEqual(link['number'], '919811122233')
        message = unquote(link['url'].split('?text=', 1)[1])
        self.assertIn('₹1,25,000', message)
        self.assertIn('5 July 2026', message)

    def test_mark_paid(self):
        payment = Payment.objects.create(student=self.student, amount=Decimal('100'), status='pending')

        response = self.client.post(reverse('payment_mark_paid', args=[payment.id]))

        self.assertEqual(response.status_code, 200)
        payment.refresh_from_db()
        self.assertEqual(payment.status, 'paid')
