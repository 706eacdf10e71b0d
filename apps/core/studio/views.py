from django.http import JsonResponse
from django.views.decorators.http import require_http_methods, require_POST

from apps.core.records.errors import StudioError, ValidationError, error_response, form_error_response
from apps.core.records.payload import request_payload
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required

from .forms import StudioSettingsForm
from .services import load_studio_config, rotate_api_key, save_studio_config


@role_required('admin')
@require_http_methods(['GET', 'POST'])
def studio_settings(request):
    try:
        if request.method == 'GET':
            config = load_studio_config(actor=request.api_user)
            return JsonResponse({'settings': config.as_dict(reveal_key=request.GET.get('reveal') == '1')})

        form = StudioSettingsForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        changes = form.changes()
        if not changes:
            return error_response(ValidationError('No settings were submitted.'))
        config = save_studio_config(changes=changes, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(
        request=request,
        action='settings.updated',
        details=f"Fields={','.join(sorted(changes))}",
    )
    return JsonResponse({'settings': config.as_dict()})


@role_required('admin')
@require_POST
def studio_rotate_api_key(request):
    try:
        config = rotate_api_key(actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(request=request, action='settings.api_key_rotated')
    return JsonResponse({'settings': config.as_dict(reveal_key=True)})
