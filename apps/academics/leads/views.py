import hmac
import logging
from dataclasses import asdict

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.records import access
from apps.core.records.errors import (
    AuthorizationError,
    StudioError,
    ValidationError,
    error_response,
    form_error_response,
)
from apps.core.records.payload import request_payload
from apps.core.studio.services import load_studio_config
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.operations.communication.notifications import FOLLOW_UP, dispatch, render_template

from .forms import LeadForm, LeadMoveForm
from .services import LEADS_KIND, board_columns, convert_to_student, create_lead, ingest_lead, move_lead, register_lead

logger = logging.getLogger(__name__)


@role_required('admin')
@require_http_methods(['GET', 'POST'])
def lead_board(request):
    if request.method == 'POST':
        return _lead_create(request)

    try:
        leads = access.fetch_all(LEADS_KIND, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    columns = board_columns(leads)
    return JsonResponse({
        'columns': {status: [asdict(lead) for lead in items] for status, items in columns.items()},
        'total': len(leads),
    })


def _lead_create(request):
    try:
        form = LeadForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        lead = create_lead(fields=form.cleaned_data, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(request=request, action='lead.created', target=lead, details=f"Source={lead.source}")
    return JsonResponse({'lead': asdict(lead)}, status=201)


@role_required('admin')
@require_POST
def lead_move(request, lead_id):
    try:
        form = LeadMoveForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        lead = move_lead(lead_id=lead_id, to_status=form.cleaned_data['status'], actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(request=request, action='lead.moved', target=lead, details=f"Status={lead.status}")
    return JsonResponse({'lead': asdict(lead)})


@role_required('admin')
@require_GET
def lead_convert(request, lead_id):
    try:
        lead = access.fetch_one(LEADS_KIND, lead_id, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)
    return JsonResponse({'draft': convert_to_student(lead).as_dict()})


@role_required('admin')
@require_GET
def lead_follow_up(request, lead_id):
    try:
        lead = access.fetch_one(LEADS_KIND, lead_id, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    if not lead.phone:
        return error_response(ValidationError('Lead has no phone number.'))
    message = render_template(FOLLOW_UP, lead_name=lead.name, course=lead.course)
    return JsonResponse({'whatsapp': dispatch(lead.phone, message).as_dict()})


@csrf_exempt
@require_POST
def registration_submit(request):
    try:
        lead = register_lead(request_payload(request))
    except StudioError as exc:
        return error_response(exc)
    return JsonResponse({'success': True, 'id': lead.id}, status=201)


def _lead_api_keys():
    keys = [load_studio_config().lead_api_key]
    if settings.LEAD_API_KEY:
        keys.append(settings.LEAD_API_KEY)
    return [key for key in keys if key]


def _api_key_matches(provided):
    if not provided:
        return False
    return any(hmac.compare_digest(provided.encode(), key.encode()) for key in _lead_api_keys())


@csrf_exempt
@require_POST
def lead_receive(request):
    try:
        if not _api_key_matches(request.headers.get('X-Api-Key', '')):
            logger.warning('Rejected lead ingestion with missing or wrong API key')
            raise AuthorizationError('Unauthorized', authenticated=False)
        lead = ingest_lead(request_payload(request))
    except StudioError as exc:
        return error_response(exc)
    return JsonResponse({'success': True, 'lead': asdict(lead)}, status=201)
