from django.contrib.auth import authenticate
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from apps.core.records.errors import AuthorizationError, ValidationError, error_response
from apps.core.records.payload import request_payload

from .audit import log_audit_event
from .tokens import issue_token


@csrf_exempt
@require_POST
def token_obtain(request):
    try:
        payload = request_payload(request)
    except ValidationError as exc:
        return error_response(exc)

    user = authenticate(
        request,
        username=str(payload.get('username') or '').strip(),
        password=str(payload.get('password') or ''),
    )
    if user is None:
        return error_response(AuthorizationError('Invalid username or password.', authenticated=False))

    request.api_user = user
    log_audit_event(request=request, action='user.token_issued', target=user, details=f"Role={user.role}")
    return JsonResponse({'token': issue_token(user), 'role': user.role})
