import json
from datetime import date
from decimal import Decimal
from urllib.parse import unquote

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from django.urls import reverse

from apps.academics.students.models import Student

from . import notifications
from .models import Notice


class NotificationDispatchTests(SimpleTestCase):
    def test_resolve_target_strips_and_prefixes(self):
        self.assertEqual(notifications.resolve_target('98765 43210'), '919876543210')
        self.assertEqual(notifications.resolve_target('+91-98765-43210'), '919876543210')
        self.assertEqual(notifications.resolve_target('919876543210'), '919876543210')
        self.assertEqual(notifications.resolve_target(''), '')

    def test_number_starting_with_country_code_is_not_prefixed_again(self):
        # A ten-digit mobile that happens to start with 91 is sent as-is.
        self.assertEqual(notifications.resolve_target('9123456789'), '9123456789')
        self.assertEqual(notifications.dispatch('91234 56789').url, 'https://wa.me/9123456789')

    def test_dispatch_encodes_message(self):
        link = notifications.dispatch('9876543210', 'Hi *Asha* & family')

        self.assertEqual(link.url, 'https://wa.me/919876543210?text=Hi%20%2AAsha%2A%20%26%20family')

    def test_dispatch_without_message(self):
        self.assertEqual(notifications.dispatch('9876543210').url, 'https://wa.me/919876543210')

    def test_broadcast_skips_blank_and_duplicate_numbers(self):
        links = notifications.broadcast(['9876543210', '', '+91 98765 43210', '9000000001'], 'Hello')

        self.assertEqual([link.number for link in links], ['919876543210', '919000000001'])

    def test_fee_reminder_uses_indian_grouping_and_long_date(self):
        message = notifications.render_template(
            notifications.FEE_REMINDER,
            student_name='Asha',
            amount=Decimal('125000'),
            due_date=date(2026, 7, 5),
        )

        self.assertIn('₹1,25,000', message)
        self.assertIn('due on 5 July 2026', message)

    def test_fee_reminder_without_due_date(self):
        message = notifications.render_template(notifications.FEE_REMINDER, student_name='Asha', amount=500)

        self.assertIn('is due soon', message)

    def test_welcome_uses_short_batch_label(self):
        message = notifications.render_template(
            notifications.WELCOME,
            student_name='Asha',
            course='Basic',
            batch='Basic 1 (1:00 PM - 2:30 PM)',
        )

        self.assertIn('(Basic 1 batch)', message)

    def test_attendance_alert_labels(self):
        message = notifications.render_template(
            notifications.ATTENDANCE_ALERT,
            student_name='Asha',
            date='01 Apr 2026',
            status='late',
        )

        self.assertIn('⏰ Late', message)

    def test_unknown_template_is_rejected(self):
        with self.assertRaises(notifications.TemplateError):
            notifications.render_template('sms_blast', text='x')

    def test_format_inr(self):
        self.assertEqual(notifications.format_inr(999), '999')
        self.assertEqual(notifications.format_inr(1000), '1,000')
        self.assertEqual(notifications.format_inr(Decimal('12345678.50')), '1,23,45,678.50')


class NoticeViewTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        user_model.objects.create_user(username='studio_admin', password='pass12345', role='admin')
        user_model.objects.create_user(username='parent_one', password='pass12345', role='parent')
        Notice.objects.create(title='Holiday', body='Closed on Monday', audience='all')
        Notice.objects.create(title='Staff meeting', audience='admin')
        Student.objects.create(name='Asha', whatsapp='9876543210')
        Student.objects.create(name='Ravi', whatsapp='9000000001')
        Student.objects.create(name='Gone', whatsapp='9000000002', status='inactive')

    def test_parent_does_not_see_admin_notices(self):
        self.client.login(username='parent_one', password='pass12345')

        response = self.client.get(reverse('notice_list'))

        self.assertEqual([n['title'] for n in response.json()['notices']], ['Holiday'])

    def test_parent_cannot_create_notice(self):
        self.client.login(username='parent_one', password='pass12345')

        response = self.client.post(
            reverse('notice_list'),
            data=json.dumps({'title': 'Hack'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 403)

    def test_admin_creates_notice_with_defaults(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.post(
            reverse('notice_list'),
            data=json.dumps({'title': 'Exhibition', 'body': 'Bring your best work'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 201)
        notice = Notice.objects.get(title='Exhibition')
        self.assertEqual(notice.audience, 'all')
        self.assertEqual(notice.created_by.username, 'studio_admin')

    def test_broadcast_to_active_students(self):
        notice = Notice.objects.get(title='Holiday')
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.post(reverse('notice_broadcast', args=[notice.id]))

        body = response.json()
        self.assertEqual(body['recipients'], 2)
        self.assertIn('Closed on Monday', unquote(body['whatsapp'][0]['url']))

    def test_delete_notice(self):
        notice = Notice.objects.get(title='Holiday')
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.post(reverse('notice_delete', args=[notice.id]))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Notice.objects.filter(pk=notice.id).exists())

    def test_parent_message_to_admin(self):
        self.client.login(username='parent_one', password='pass12345')

        response = self.client.post(
            reverse('admin_whatsapp'),
            data=json.dumps({'message': 'Asha will be absent tomorrow'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['whatsapp']['number'], '919920546217')
