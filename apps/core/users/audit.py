import logging

from django.db import transaction

from apps.core.users.models import AuditLog

logger = logging.getLogger(__name__)


def _extract_ip(request):
    forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def _request_user(request):
    user = getattr(request, 'api_user', None) or getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user
    return None


def log_audit_event(request, action, target=None, details=''):
    try:
        target_model = ''
        target_id = ''

        if target is not None:
            target_model = target.__class__.__name__
            target_id = str(getattr(target, 'pk', None) or getattr(target, 'id', ''))

        with transaction.atomic():
            AuditLog.objects.create(
                user=_request_user(request),
                action=action,
                target_model=target_model,
                target_id=target_id,
                details=details,
                method=request.method or '',
                path=request.path,
                ip_address=_extract_ip(request),
            )
    except Exception:
        # Audit must never break business actions.
        logger.exception('Failed to write audit event %s', action)
