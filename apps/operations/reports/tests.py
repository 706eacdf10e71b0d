from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.academics.attendance.models import AttendanceRecord
from apps.academics.leads.models import Lead
from apps.academics.students.models import Student, StudentParentLink
from apps.finance.payments.models import Payment
from apps.operations.communication.models import Notice

from .services import load_resources


class DashboardTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        user_model.objects.create_user(username='studio_admin', password='pass12345', role='admin')
        self.parent = user_model.objects.create_user(username='parent_one', password='pass12345', role='parent')
        today = timezone.localdate()
        self.today = today

        Lead.objects.create(name='Fresh Lead')
        Lead.objects.create(name='Demo Lead', status='demo')
        self.student = Student.objects.create(
            name='Asha',
            whatsapp='9876543210',
            total_sessions=1,
            dob=date(2012, today.month, today.day),
        )
        Student.objects.create(name='Old Timer', whatsapp='9000000001', status='inactive')
        Payment.objects.create(student=self.student, amount=Decimal('5000'), status='paid', date=today)
        Payment.objects.create(
            student=self.student,
            amount=Decimal('2000'),
            status='pending',
            date=today - timedelta(days=1),
        )
        AttendanceRecord.objects.create(student=self.student, date=today, status='present')
        Notice.objects.create(title='Holiday', audience='all')

    def test_dashboard_numbers(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.get(reverse('dashboard'))

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['stats']['total_leads'], 2)
        self.assertEqual(body['stats']['new_leads'], 1)
        self.assertEqual(body['stats']['active_students'], 1)
        self.assertEqual(body['stats']['total_students'], 2)
        self.assertEqual(Decimal(body['stats']['month_revenue']), Decimal('5000'))
        self.assertEqual(body['stats']['present_today'], 1)
        self.assertEqual(body['automation']['overdue_payments'], 1)
        self.assertEqual(body['automation']['certificates_ready'], 1)
        self.assertEqual(len(body['recent_leads']), 2)
        self.assertEqual(body['errors'], {})

    def test_birthday_today_gets_wish_link(self):
        self.client.login(username='studio_admin', password='pass12345')

        birthdays = self.client.get(reverse('dashboard')).json()['upcoming_birthdays']

        self.assertEqual([entry['name'] for entry in birthdays], ['Asha'])
        self.assertEqual(birthdays[0]['days_until'], 0)
        self.assertTrue(birthdays[0]['whatsapp']['url'].startswith('https://wa.me/919876543210?text='))

    def test_parent_cannot_open_dashboard(self):
        self.client.login(username='parent_one', password='pass12345')

        self.assertEqual(self.client.get(reverse('dashboard')).status_code, 403)

    def test_failed_resource_is_reported_without_blocking_others(self):
        data, errors = load_resources({
            'leads': ('leads', None),
            'notices': ('notices', None),
        }, actor=self.parent)

        self.assertEqual(data['leads'], [])
        self.assertIn('leads', errors)
        self.assertEqual([notice.title for notice in data['notices']], ['Holiday'])


class ParentPortalTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        self.parent = user_model.objects.create_user(username='parent_one', password='pass12345', role='parent')
        user_model.objects.create_user(username='parent_two', password='pass12345', role='parent')
        user_model.objects.create_user(username='studio_admin', password='pass12345', role='admin')
        self.child = Student.objects.create(
            name='Riya',
            whatsapp='9000000010',
            total_sessions=4,
            fee_amount=Decimal('8000'),
        )
        Student.objects.create(name='Someone Else', whatsapp='9000000011')
        StudentParentLink.objects.create(parent_user=self.parent, student=self.child)
        Payment.objects.create(student=self.child, amount=Decimal('2000'), status='paid')
        AttendanceRecord.objects.create(student=self.child, date=date(2026, 3, 2), status='present')
        AttendanceRecord.objects.create(student=self.child, date=date(2026, 3, 9), status='absent')
        Notice.objects.create(title='Exhibition', audience='parents')
        Notice.objects.create(title='Staff only', audience='admin')

    def test_portal_lists_only_linked_students(self):
        self.client.login(username='parent_one', password='pass12345')

        response = self.client.get(reverse('parent_portal'))

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([entry['student']['name'] for entry in body['students']], ['Riya'])
        metrics = body['students'][0]['metrics']
        self.assertEqual(metrics['attendance']['percent'], 50)
        self.assertEqual(metrics['attendance']['sessions_remaining'], 3)
        self.assertEqual(metrics['fees']['progress'], 25)
        self.assertEqual([notice['title'] for notice in body['notices']], ['Exhibition'])

    def test_parent_without_links_sees_notices_only(self):
        self.client.login(username='parent_two', password='pass12345')

        body = self.client.get(reverse('parent_portal')).json()

        self.assertEqual(body['students'], [])
        self.assertEqual([notice['title'] for notice in body['notices']], ['Exhibition'])

    def test_admin_is_not_a_portal_user(self):
        self.client.login(username='studio_admin', password='pass12345')

        self.assertEqual(self.client.get(reverse('parent_portal')).status_code, 403)
