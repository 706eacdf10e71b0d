"""Clients for the hosted lead-scoring model.

``LeadScorer`` is the seam: views and services only ever see that interface,
so tests can pass a deterministic scorer instead of calling the gateway.
"""
import json
import logging

import httpx
from django.conf import settings

from apps.core.records.errors import NetworkError, UpstreamError

logger = logging.getLogger(__name__)

SCORES_TOOL = {
    'type': 'function',
    'function': {
        'name': 'return_scores',
        'description': 'Return lead scores',
        'parameters': {
            'type': 'object',
            'properties': {
                'scores': {
                    'type': 'array',
                    'items': {
                        'type': 'object',
                        'properties': {
                            'id': {'type': 'string'},
                            'score': {'type': 'number'},
                            'reason': {'type': 'string'},
                        },
                        'required': ['id', 'score', 'reason'],
                        'additionalProperties': False,
                    },
                },
            },
            'required': ['scores'],
            'additionalProperties': False,
        },
    },
}


class LeadScorer:
    """Turns a prompt into the raw ``scores`` list returned by a model."""

    def score(self, prompt):
        raise NotImplementedError


class HostedLeadScorer(LeadScorer):
    def __init__(self, *, api_url, api_key, model, timeout=30.0, transport=None):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = httpx.Timeout(timeout, connect=min(timeout, 10.0))
        self.transport = transport

    @classmethod
    def from_settings(cls):
        return cls(
            api_url=settings.SCORING_API_URL,
            api_key=settings.SCORING_API_KEY,
            model=settings.SCORING_MODEL,
            timeout=settings.SCORING_TIMEOUT_SECONDS,
        )

    def _payload(self, prompt):
        return {
            'model': self.model,
            'messages': [{'role': 'user', 'content': prompt}],
            'tools': [SCORES_TOOL],
            'tool_choice': {'type': 'function', 'function': {'name': 'return_scores'}},
        }

    def score(self, prompt):
        if not self.api_key:
            raise UpstreamError('Lead scoring is not configured.')

        headers = {'Authorization': f"Bearer {self.api_key}"}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.api_url, json=self._payload(prompt), headers=headers)
        except httpx.TimeoutException:
            logger.warning('Scoring gateway timed out after %ss', self.timeout.read)
            raise NetworkError('Lead scoring timed out. Please try again.')
        except httpx.RequestError as exc:
            logger.warning('Scoring gateway unreachable: %s', exc)
            raise NetworkError('Lead scoring service is unreachable.')

        if response.status_code == 429:
            raise UpstreamError('Rate limit exceeded, please try again later.', upstream_status=429)
        if response.status_code == 402:
            raise UpstreamError('AI credits exhausted.', upstream_status=402)
        if response.is_error:
            logger.error('Scoring gateway error %s: %s', response.status_code, response.text[:500])
            raise UpstreamError('Lead scoring failed.', upstream_status=response.status_code)

        try:
            body = response.json()
        except ValueError:
            logger.warning('Scoring gateway returned a non-JSON body')
            return []
        return extract_tool_scores(body)


def extract_tool_scores(body):
    """Pull the ``scores`` list out of a chat-completions tool call."""
    try:
        tool_call = body['choices'][0]['message']['tool_calls'][0]
        arguments = tool_call['function']['arguments']
    except (KeyError, IndexError, TypeError):
        logger.warning('Scoring response had no tool call')
        return []

    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments)
        except ValueError:
            logger.warning('Scoring tool call arguments were not valid JSON')
            return []
    scores = arguments.get('scores') if isinstance(arguments, dict) else None
    return scores if isinstance(scores, list) else []
