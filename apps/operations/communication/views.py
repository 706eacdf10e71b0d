from dataclasses import asdict

from django.http import JsonResponse
from django.views.decorators.http import require_http_methods, require_POST

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

from .forms import AdminMessageForm, NoticeForm, StudentMessageForm
from .notifications import dispatch, message_admin
from .services import NOTICES_KIND, broadcast_notice, create_notice, student_message, visible_notices


@role_required(['admin', 'parent'])
@require_http_methods(['GET', 'POST'])
def notice_list(request):
    if request.method == 'POST':
        if not request.api_user.is_studio_admin:
            return error_response(AuthorizationError('Forbidden'))
        return _notice_create(request)

    try:
        notices = access.fetch_all(NOTICES_KIND, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)
    return JsonResponse({'notices': [asdict(notice) for notice in visible_notices(notices, request.api_user)]})


def _notice_create(request):
    try:
        form = NoticeForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        notice = create_notice(fields=form.notice_fields(), created_by=request.api_user, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(
        request=request,
        action='notice.created',
        target=notice,
        details=f"Audience={notice.audience}",
    )
    return JsonResponse({'notice': asdict(notice)}, status=201)


@role_required('admin')
@require_POST
def notice_delete(request, notice_id):
    try:
        notice = access.fetch_one(NOTICES_KIND, notice_id, actor=request.api_user)
        access.delete(NOTICES_KIND, notice_id, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(request=request, action='notice.deleted', target=notice, details=f"Title={notice.title}")
    return JsonResponse({'deleted': True})


@role_required('admin')
@require_POST
def notice_broadcast(request, notice_id):
    try:
        notice = access.fetch_one(NOTICES_KIND, notice_id, actor=request.api_user)
        students = access.fetch_all('students', filters={'status': 'active'}, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    links = broadcast_notice(notice, students)
    log_audit_event(
        request=request,
        action='notice.broadcast',
        target=notice,
        details=f"Recipients={len(links)}",
    )
    return JsonResponse({'recipients': len(links), 'whatsapp': [link.as_dict() for link in links]})


@role_required('admin')
@require_POST
def student_whatsapp(request):
    try:
        form = StudentMessageForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        student = access.fetch_one('students', form.cleaned_data['student'], actor=request.api_user)
        if not student.whatsapp:
            raise ValidationError('Student has no WhatsApp number.')
    except StudioError as exc:
        return error_response(exc)

    message = student_message(form.cleaned_data['template'], student, form.cleaned_data['text'])
    return JsonResponse({'whatsapp': dispatch(student.whatsapp, message).as_dict()})


@role_required(['admin', 'parent'])
@require_POST
def admin_whatsapp(request):
    try:
        form = AdminMessageForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        admin_number = load_studio_config().admin_whatsapp
    except StudioError as exc:
        return error_response(exc)

    return JsonResponse({'whatsapp': message_admin(form.cleaned_data['message'], admin_number).as_dict()})
