import json

import httpx
from django.contrib.auth import get_user_model
from django.test import Client, SimpleTestCase, TestCase, override_settings
from django.urls import reverse

from apps.academics.leads.models import Lead
from apps.core.records import access
from apps.core.records.errors import NetworkError, UpstreamError
from apps.core.users.tokens import issue_token

from .scorers import HostedLeadScorer, LeadScorer
from .services import build_scoring_prompt, parse_scores, score_leads


class FixedScorer(LeadScorer):
    def __init__(self, scores=None, error=None):
        self.scores = scores or []
        self.error = error
        self.prompts = []

    def score(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.scores


class DemoBookedScorer(FixedScorer):
    @classmethod
    def from_settings(cls):
        lead = Lead.objects.get(name='Hot Lead')
        return cls([{'id': str(lead.id), 'score': 91, 'reason': 'Demo booked'}])


class RateLimitedScorer(FixedScorer):
    @classmethod
    def from_settings(cls):
        return cls(error=UpstreamError('Rate limit exceeded.', upstream_status=429))


def _gateway_body(scores):
    return {
        'choices': [{
            'message': {
                'tool_calls': [{
                    'function': {'name': 'return_scores', 'arguments': json.dumps({'scores': scores})},
                }],
            },
        }],
    }


def _hosted(handler):
    return HostedLeadScorer(
        api_url='https://gateway.test/v1/chat/completions',
        api_key='test-key',
        model='test-model',
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class ScoreParsingTests(TestCase):
    def setUp(self):
        Lead.objects.create(name='Hot Lead', status='demo', course='Professional')
        Lead.objects.create(name='Cold Lead', status='not-interested')
        self.leads = access.fetch_all('leads')

    def test_unknown_ids_are_dropped_and_scores_clamped(self):
        hot, cold = sorted(self.leads, key=lambda lead: lead.name)
        raw = [
            {'id': str(hot.id), 'score': 140, 'reason': 'Booked demo'},
            {'id': str(cold.id), 'score': -5, 'reason': 'Said no'},
            {'id': '99999', 'score': 50, 'reason': 'Invented'},
            {'id': str(hot.id), 'score': 10, 'reason': 'Duplicate'},
            {'id': str(cold.id), 'score': 'lots'},
        ]

        scores = {score.id: score for score in parse_scores(raw, self.leads)}

        self.assertEqual(set(scores), {hot.id, cold.id})
        self.assertEqual(scores[hot.id].score, 100)
        self.assertEqual(scores[hot.id].tier, 'high')
        self.assertEqual(scores[cold.id].score, 0)

    def test_subset_of_leads_is_fine(self):
        lead = self.leads[0]

        outcome = score_leads(self.leads, FixedScorer([{'id': str(lead.id), 'score': 55, 'reason': 'ok'}]))

        self.assertEqual([s.id for s in outcome.scores], [lead.id])
        self.assertEqual(outcome.scores[0].tier, 'medium')

    def test_scorer_failure_degrades_to_no_scores(self):
        outcome = score_leads(self.leads, FixedScorer(error=NetworkError()))

        self.assertEqual(outcome.scores, [])
        self.assertIsInstance(outcome.error, NetworkError)

    def test_prompt_lists_every_lead(self):
        prompt = build_scoring_prompt(self.leads)

        self.assertIn('"name": "Hot Lead"', prompt)
        self.assertIn('"name": "Cold Lead"', prompt)

    def test_no_leads_skips_the_call(self):
        scorer = FixedScorer()

        self.assertEqual(score_leads([], scorer).scores, [])
        self.assertEqual(scorer.prompts, [])


class HostedLeadScorerTests(SimpleTestCase):
    def test_reads_tool_call_arguments(self):
        captured = {}

        def handler(request):
            captured['auth'] = request.headers['Authorization']
            captured['body'] = json.loads(request.content)
            return httpx.Response(200, json=_gateway_body([{'id': '1', 'score': 80, 'reason': 'Keen'}]))

        scores = _hosted(handler).score('prompt text')

        self.assertEqual(scores, [{'id': '1', 'score': 80, 'reason': 'Keen'}])
        self.assertEqual(captured['auth'], 'Bearer test-key')
        self.assertEqual(captured['body']['tool_choice']['function']['name'], 'return_scores')

    def test_rate_limit_and_quota_are_passed_through(self):
        for status in (429, 402):
            with self.subTest(status=status):
                with self.assertRaises(UpstreamError) as ctx:
                    _hosted(lambda request, status=status: httpx.Response(status)).score('p')
                self.assertEqual(ctx.exception.status_code, status)

    def test_server_error_is_bad_gateway(self):
        with self.assertRaises(UpstreamError) as ctx:
            _hosted(lambda request: httpx.Response(500, text='boom')).score('p')

        self.assertEqual(ctx.exception.status_code, 502)

    def test_malformed_body_gives_empty_list(self):
        self.assertEqual(_hosted(lambda request: httpx.Response(200, json={'choices': []})).score('p'), [])
        self.assertEqual(_hosted(lambda request: httpx.Response(200, text='not json')).score('p'), [])

    def test_connection_error_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError('refused', request=request)

        with self.assertRaises(NetworkError):
            _hosted(handler).score('p')

    def test_missing_api_key(self):
        scorer = HostedLeadScorer(api_url='https://gateway.test', api_key='', model='m')

        with self.assertRaises(UpstreamError):
            scorer.score('p')


class LeadScoreViewTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        self.admin = user_model.objects.create_user(username='studio_admin', password='pass12345', role='admin')
        self.parent = user_model.objects.create_user(username='parent_one', password='pass12345', role='parent')
        self.lead = Lead.objects.create(name='Hot Lead', status='demo')

    def _post(self, token=None):
        headers = {'HTTP_AUTHORIZATION': f'Bearer {token}'} if token else {}
        return self.client.post(reverse('lead_scores'), **headers)

    def test_requires_credentials(self):
        self.assertEqual(self._post().status_code, 401)
        self.assertEqual(self._post('garbage').status_code, 401)

    def test_parent_token_is_forbidden(self):
        self.assertEqual(self._post(issue_token(self.parent)).status_code, 403)

    @override_settings(LEAD_SCORER_CLASS='apps.operations.scoring.tests.DemoBookedScorer')
    def test_admin_gets_scores(self):
        response = self._post(issue_token(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['scores'], [
            {'id': self.lead.id, 'score': 91, 'reason': 'Demo booked', 'tier': 'high'},
        ])

    @override_settings(LEAD_SCORER_CLASS='apps.operations.scoring.tests.RateLimitedScorer')
    def test_upstream_rate_limit_returns_429_with_empty_scores(self):
        response = self._post(issue_token(self.admin))

        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.json()['scores'], [])

    @override_settings(SCORING_API_KEY='')
    def test_unconfigured_gateway_is_bad_gateway(self):
        response = self._post(issue_token(self.admin))

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()['scores'], [])

    @override_settings(LEAD_SCORER_CLASS='apps.operations.scoring.tests.DemoBookedScorer')
    def test_session_post_needs_csrf_token(self):
        client = Client(enforce_csrf_checks=True)
        client.login(username='studio_admin', password='pass12345')

        self.assertEqual(client.post(reverse('lead_scores')).status_code, 403)

        bearer = Client(enforce_csrf_checks=True).post(
            reverse('lead_scores'),
            HTTP_AUTHORIZATION=f'Bearer {issue_token(self.admin)}',
        )
        self.assertEqual(bearer.status_code, 200)
