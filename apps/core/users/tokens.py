"""Signed bearer tokens for API callers.

Tokens are issued with ``django.core.signing`` and carry only the user id and
role at issue time; the role is re-read from the database on every request.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import signing

logger = logging.getLogger(__name__)

TOKEN_SALT = 'studio_erp.users.api-token'


def issue_token(user) -> str:
    return signing.dumps({'uid': user.pk, 'role': user.role}, salt=TOKEN_SALT)


def bearer_token(request):
    header = request.META.get('HTTP_AUTHORIZATION', '')
    if not header.startswith('Bearer '):
        return None
    token = header[len('Bearer '):].strip()
    return token or None


def user_from_token(token):
    try:
        payload = signing.loads(
            token,
            salt=TOKEN_SALT,
            max_age=settings.API_TOKEN_MAX_AGE_SECONDS,
        )
    except signing.BadSignature:
        logger.info('Rejected invalid or expired API token')
        return None

    return get_user_model().objects.filter(pk=payload.get('uid'), is_active=True).first()


def resolve_request_user(request):
    token = bearer_token(request)
    if token:
        return user_from_token(token)

    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user
    return None
