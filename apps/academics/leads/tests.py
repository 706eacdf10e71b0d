import json
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from apps.core.records.errors import DuplicateError, ValidationError
from apps.core.studio.services import load_studio_config

from .models import Lead
from .services import convert_to_student, move_lead, normalize_phone, register_lead


def _post_json(client, url, payload, **extra):
    return client.post(url, data=json.dumps(payload), content_type='application/json', **extra)


class LeadPipelineServiceTests(TestCase):
    def setUp(self):
        self.lead = Lead.objects.create(
            name='Meera Patil',
            phone='9876543210',
            email='meera@example.com',
            course='Advanced',
            source='Instagram',
            notes='Wants weekend batch',
        )

    def test_converted_lead_can_move_back_to_new(self):
        move_lead(lead_id=self.lead.id, to_status='converted')
        lead = move_lead(lead_id=self.lead.id, to_status='new')

        self.assertEqual(lead.status, 'new')
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.status, 'new')

    def test_follow_up_alias_maps_to_contacted(self):
        self.assertEqual(move_lead(lead_id=self.lead.id, to_status='follow-up').status, 'contacted')

    def test_unknown_status_is_rejected(self):
        with self.assertRaises(ValidationError):
            move_lead(lead_id=self.lead.id, to_status='archived')

    def test_convert_builds_draft_without_touching_lead(self):
        from apps.core.records import access

        draft = convert_to_student(access.fetch_one('leads', self.lead.id))

        self.assertEqual(draft.name, 'Meera Patil')
        self.assertEqual(draft.whatsapp, '9876543210')
        self.assertEqual(draft.course, 'Advanced')
        self.assertEqual(draft.source, 'Instagram')
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.status, 'new')

    def test_normalize_phone(self):
        self.assertEqual(normalize_phone('+91 98765-43210'), '9876543210')
        self.assertEqual(normalize_phone('(987) 654 3210'), '9876543210')


class RegistrationIntakeTests(TestCase):
    def test_second_registration_within_window_is_duplicate(self):
        payload = {'name': 'Kabir Shah', 'phone': '+91 91234 56789', 'course': 'Professional'}

        first = _post_json(self.client, reverse('registration_submit'), payload)
        second = _post_json(self.client, reverse('registration_submit'), {**payload, 'phone': '9123456789'})

        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json()['success'], True)
        self.assertEqual(second.status_code, 429)
        self.assertEqual(Lead.objects.filter(phone='9123456789').count(), 1)

    def test_registration_after_window_is_accepted(self):
        register_lead({'name': 'Kabir Shah', 'phone': '9123456789'})
        Lead.objects.update(created_at=timezone.now() - timedelta(hours=25))

        register_lead({'name': 'Kabir Shah', 'phone': '9123456789'})

        self.assertEqual(Lead.objects.count(), 2)

    def test_service_raises_duplicate(self):
        register_lead({'name': 'Kabir Shah', 'phone': '9123456789'})

        with self.assertRaises(DuplicateError):
            register_lead({'name': 'Kabir Shah', 'phone': '9123456789'})

    def test_defaults_and_truncation(self):
        lead = register_lead({
            'name': '  Riya  ',
            'phone': '7012345678',
            'course': 'Sculpture',
            'notes': 'x' * 600,
        })

        self.assertEqual(lead.name, 'Riya')
        self.assertEqual(lead.course, 'Basic')
        self.assertEqual(lead.source, 'Registration Form')
        self.assertEqual(lead.status, 'new')
        self.assertEqual(len(lead.notes), 500)

    def test_invalid_fields_return_400(self):
        cases = [
            {'name': 'A', 'phone': '9123456789'},
            {'name': 'Asha', 'phone': '5123456789'},
            {'name': 'Asha', 'phone': '912345678'},
            {'name': 'Asha', 'phone': '9123456789', 'email': 'not-an-email'},
        ]
        for payload in cases:
            with self.subTest(payload=payload):
                response = _post_json(self.client, reverse('registration_submit'), payload)
                self.assertEqual(response.status_code, 400)
        self.assertEqual(Lead.objects.count(), 0)


class LeadIngestionTests(TestCase):
    def setUp(self):
        self.api_key = load_studio_config().lead_api_key

    def test_missing_key_is_unauthorized(self):
        response = _post_json(self.client, reverse('lead_receive'), {'name': 'Web Lead'})

        self.assertEqual(response.status_code, 401)
        self.assertFalse(Lead.objects.exists())

    def test_wrong_key_is_unauthorized(self):
        response = _post_json(self.client, reverse('lead_receive'), {'name': 'Web Lead'}, HTTP_X_API_KEY='nope')

        self.assertEqual(response.status_code, 401)

    def test_name_required(self):
        response = _post_json(self.client, reverse('lead_receive'), {'phone': '9876543210'}, HTTP_X_API_KEY=self.api_key)

        self.assertEqual(response.status_code, 400)

    def test_valid_key_creates_lead_with_defaults(self):
        response = _post_json(
            self.client,
            reverse('lead_receive'),
            {'name': 'Web Lead', 'phone': '9876543210'},
            HTTP_X_API_KEY=self.api_key,
        )

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['lead']['source'], 'Website')
        self.assertEqual(body['lead']['course'], 'Basic')

    @override_settings(LEAD_API_KEY='env-configured-key')
    def test_environment_key_is_also_accepted(self):
        response = _post_json(
            self.client,
            reverse('lead_receive'),
            {'name': 'Partner Lead'},
            HTTP_X_API_KEY='env-configured-key',
        )

        self.assertEqual(response.status_code, 201)


class LeadBoardViewTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        user_model.objects.create_user(username='studio_admin', password='pass12345', role='admin')
        user_model.objects.create_user(username='parent_one', password='pass12345', role='parent')
        self.lead = Lead.objects.create(name='Board Lead', phone='9876543210', status='contacted')

    def test_board_groups_leads_by_column(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.get(reverse('lead_board'))

        self.assertEqual(response.status_code, 200)
        columns = response.json()['columns']
        self.assertEqual(list(columns), ['new', 'contacted', 'demo', 'converted', 'not-interested'])
        self.assertEqual([lead['id'] for lead in columns['contacted']], [self.lead.id])

    def test_create_lead_applies_defaults(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = _post_json(self.client, reverse('lead_board'), {'name': 'Walk In', 'phone': '9000000001'})

        self.assertEqual(response.status_code, 201)
        lead = Lead.objects.get(name='Walk In')
        self.assertEqual(lead.source, 'Website')
        self.assertEqual(lead.course, 'Basic')

    def test_move_view(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = _post_json(self.client, reverse('lead_move', args=[self.lead.id]), {'status': 'demo'})

        self.assertEqual(response.status_code, 200)
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.status, 'demo')

    def test_move_missing_lead_is_404(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = _post_json(self.client, reverse('lead_move', args=[9999]), {'status': 'demo'})

        self.assertEqual(response.status_code, 404)

    def test_follow_up_link(self):
        self.client.login(username='studio_admin', password='pass12345')

        response = self.client.get(reverse('lead_follow_up', args=[self.lead.id]))

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['whatsapp']['url'].startswith('https://wa.me/919876543210?text='))

    def test_parent_cannot_see_board(self):
        self.client.login(username='parent_one', password='pass12345')

        self.assertEqual(self.client.get(reverse('lead_board')).status_code, 403)
