import json
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse

from apps.academics.leads.models import Lead
from apps.academics.students.models import Student, StudentParentLink
from apps.core.users.models import AuditLog

from .models import StudioSettings
from .services import load_studio_config, rotate_api_key


class StudioConfigServiceTests(TestCase):
    def test_first_load_creates_defaults(self):
        config = load_studio_config()

        self.assertEqual(StudioSettings.objects.count(), 1)
        self.assertEqual(config.studio_name, 'Art Neelam Academy')
        self.assertTrue(config.lead_api_key.startswith('nas_live_sk_'))
        self.assertTrue(config.fee_reminders)
        self.assertFalse(config.auto_follow_up)

    def test_rotate_changes_key(self):
        before = load_studio_config().lead_api_key

        after = rotate_api_key().lead_api_key

        self.assertNotEqual(before, after)
        self.assertEqual(StudioSettings.objects.get().lead_api_key, after)


class StudioSettingsViewTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        user_model.objects.create_user(username='studio_admin', password='pass12345', role='admin')
        user_model.objects.create_user(username='parent_one', password='pass12345', role='parent')

    def test_admin_reads_masked_key(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.get(reverse('studio_settings'))

        self.assertEqual(response.status_code, 200)
        key = response.json()['settings']['lead_api_key']
        self.assertTrue(key.startswith('*'))
        self.assertNotEqual(key, StudioSettings.objects.get().lead_api_key)

    def test_partial_update_keeps_other_toggles(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.post(
            reverse('studio_settings'),
            data=json.dumps({'auto_follow_up': True}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200)
        stored = StudioSettings.objects.get()
        self.assertTrue(stored.auto_follow_up)
        self.assertTrue(stored.email_notifications)
        self.assertTrue(AuditLog.objects.filter(action='settings.updated').exists())

    def test_blank_studio_name_is_rejected(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.post(
            reverse('studio_settings'),
            data=json.dumps({'studio_name': '  '}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn('studio_name', response.json()['details'])

    def test_rotate_reveals_new_key(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.post(reverse('studio_rotate_api_key'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['settings']['lead_api_key'], StudioSettings.objects.get().lead_api_key)

    def test_parent_is_forbidden(self):
        self.client.login(username='parent_one', password='pass12345')

        self.assertEqual(self.client.get(reverse('studio_settings')).status_code, 403)

    def test_anonymous_is_unauthorized(self):
        self.assertEqual(self.client.get(reverse('studio_settings')).status_code, 401)


class SeedCommandTests(TestCase):
    def test_seed_creates_demo_data(self):
        call_command('seed', students=3, leads=2, stdout=StringIO())

        self.assertEqual(Student.objects.count(), 3)
        self.assertEqual(Lead.objects.count(), 2)
        self.assertEqual(StudentParentLink.objects.filter(parent_user__username='parent').count(), 1)
        self.assertTrue(all(s.roll_number.startswith('ANA-') for s in Student.objects.all()))
