import json

from django.contrib.auth import get_user_model
from django.test import Client, RequestFactory, TestCase, override_settings
from django.urls import reverse

from .decorators import role_required
from .models import AuditLog
from .tokens import issue_token, resolve_request_user


class TokenTests(TestCase):
    def setUp(self):
        self.user_model = get_user_model()
        self.admin = self.user_model.objects.create_user(username='studio_admin', password='pass12345', role='admin')

    def test_token_obtain_with_valid_credentials(self):
        response = self.client.post(
            reverse('token_obtain'),
            data=json.dumps({'username': 'studio_admin', 'password': 'pass12345'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['role'], 'admin')
        self.assertTrue(AuditLog.objects.filter(action='user.token_issued', user=self.admin).exists())

    def test_token_obtain_with_bad_password(self):
        response = self.client.post(
            reverse('token_obtain'),
            data=json.dumps({'username': 'studio_admin', 'password': 'wrong'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 401)

    def test_bearer_token_resolves_user(self):
        request = RequestFactory().get('/', HTTP_AUTHORIZATION=f'Bearer {issue_token(self.admin)}')

        self.assertEqual(resolve_request_user(request), self.admin)

    def test_tampered_token_is_rejected(self):
        request = RequestFactory().get('/', HTTP_AUTHORIZATION=f'Bearer {issue_token(self.admin)}x')

        self.assertIsNone(resolve_request_user(request))

    @override_settings(API_TOKEN_MAX_AGE_SECONDS=-1)
    def test_expired_token_is_rejected(self):
        request = RequestFactory().get('/', HTTP_AUTHORIZATION=f'Bearer {issue_token(self.admin)}')

        self.assertIsNone(resolve_request_user(request))

    def test_deactivated_user_token_is_rejected(self):
        token = issue_token(self.admin)
        self.admin.is_active = False
        self.admin.save(update_fields=['is_active'])
        request = RequestFactory().get('/', HTTP_AUTHORIZATION=f'Bearer {token}')

        self.assertIsNone(resolve_request_user(request))


class RoleRequiredTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        self.admin = user_model.objects.create_user(username='studio_admin', password='pass12345', role='admin')
        self.parent = user_model.objects.create_user(username='parent_one', password='pass12345', role='parent')

    def test_anonymous_gets_401(self):
        response = self.client.get(reverse('student_list'))

        self.assertEqual(response.status_code, 401)

    def test_wrong_role_gets_403(self):
        self.client.login(username='parent_one', password='pass12345')

        response = self.client.get(reverse('student_list'))

        self.assertEqual(response.status_code, 403)

    def test_session_and_bearer_both_accepted(self):
        self.client.login(username='studio_admin', password='pass12345')
        self.assertEqual(self.client.get(reverse('student_list')).status_code, 200)

        response = Client().get(reverse('student_list'), HTTP_AUTHORIZATION=f'Bearer {issue_token(self.admin)}')
        self.assertEqual(response.status_code, 200)

    def test_decorator_sets_api_user(self):
        @role_required(['admin', 'parent'])
        def view(request):
            return request.api_user

        request = RequestFactory().get('/', HTTP_AUTHORIZATION=f'Bearer {issue_token(self.parent)}')

        self.assertEqual(view(request), self.parent)


class BearerCsrfTests(TestCase):
    def setUp(self):
        self.admin = get_user_model().objects.create_user(username='studio_admin', password='pass12345', role='admin')

    def test_bearer_post_skips_csrf(self):
        client = Client(enforce_csrf_checks=True)

        response = client.post(
            reverse('notice_list'),
            data=json.dumps({'title': 'From the API'}),
            content_type='application/json',
            HTTP_AUTHORIZATION=f'Bearer {issue_token(self.admin)}',
        )

        self.assertEqual(response.status_code, 201)

    def test_session_post_still_needs_csrf(self):
        client = Client(enforce_csrf_checks=True)
        client.login(username='studio_admin', password='pass12345')

        response = client.post(
            reverse('notice_list'),
            data=json.dumps({'title': 'From the browser'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 403)


class AuditSignalTests(TestCase):
    def test_login_is_audited(self):
        user = get_user_model().objects.create_user(username='studio_admin', password='pass12345', role='admin')

        self.client.post(reverse('login'), {'username': 'studio_admin', 'password': 'pass12345'})

        self.assertTrue(AuditLog.objects.filter(action='user.login', user=user).exists())

    def test_superuser_is_always_admin(self):
        user = get_user_model().objects.create_superuser(username='root', password='pass12345', role='parent')

        self.assertEqual(user.role, 'admin')

    def test_client_login_is_audited_without_http_method(self):
        user = get_user_model().objects.create_user(username='studio_admin', password='pass12345', role='admin')

        self.assertTrue(self.client.login(username='studio_admin', password='pass12345'))

        entry = AuditLog.objects.get(action='user.login', user=user)
        self.assertEqual(entry.method, '')
        self.assertEqual(self.client.get(reverse('student_list')).status_code, 200)
