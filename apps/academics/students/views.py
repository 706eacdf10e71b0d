from dataclasses import asdict

from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.records import access
from apps.core.records.errors import StudioError, error_response, form_error_response
from apps.core.records.payload import request_payload
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.operations.communication.notifications import WELCOME, dispatch, render_template

from .documents import generate_certificate_pdf, generate_id_card_png, generate_id_cards_pdf
from .forms import StudentForm
from .services import (
    STUDENTS_KIND,
    certificate_candidates,
    certificate_id,
    create_student,
    ensure_can_view_student,
    load_student_profile,
    search_students,
    update_student,
)


@role_required('admin')
@require_http_methods(['GET', 'POST'])
def student_list(request):
    if request.method == 'POST':
        return _student_create(request)

    try:
        students = access.fetch_all(STUDENTS_KIND, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    students = search_students(
        students,
        request.GET.get('q', ''),
        status=request.GET.get('status') or None,
        batch=request.GET.get('batch') or None,
    )
    return JsonResponse({'students': [asdict(student) for student in students], 'count': len(students)})


def _student_create(request):
    try:
        form = StudentForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        student = create_student(fields=form.submitted_fields(), actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(
        request=request,
        action='student.created',
        target=student,
        details=f"Roll={student.roll_number}, Fee={student.fee_amount}",
    )
    welcome = render_template(WELCOME, student_name=student.name, course=student.course, batch=student.batch)
    return JsonResponse({
        'student': asdict(student),
        'whatsapp': dispatch(student.whatsapp, welcome).as_dict(),
    }, status=201)


@role_required(['admin', 'parent'])
@require_GET
def student_profile(request, student_id):
    try:
        ensure_can_view_student(request.api_user, student_id)
        profile = load_student_profile(student_id=student_id, now=timezone.now(), actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    return JsonResponse({'student': asdict(profile.student), 'metrics': profile.as_dict()})


@role_required('admin')
@require_POST
def student_update(request, student_id):
    try:
        payload = request_payload(request)
        current = access.fetch_one(STUDENTS_KIND, student_id, actor=request.api_user)
        form = StudentForm({**asdict(current), **payload})
        if not form.is_valid():
            return form_error_response(form)
        patch = {name: form.cleaned_data[name] for name in payload if name in form.cleaned_data}
        student = update_student(student_id=student_id, patch=patch, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(
        request=request,
        action='student.updated',
        target=student,
        details=f"Fields={','.join(sorted(patch))}",
    )
    return JsonResponse({'student': asdict(student)})


@role_required(['admin', 'parent'])
@require_GET
def student_id_card(request, student_id):
    try:
        ensure_can_view_student(request.api_user, student_id)
        student = access.fetch_one(STUDENTS_KIND, student_id, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    response = HttpResponse(generate_id_card_png(student), content_type='image/png')
    response['Content-Disposition'] = f'inline; filename="id_card_{student.roll_number}.png"'
    return response


@role_required('admin')
@require_GET
def student_id_card_bulk(request):
    try:
        students = access.fetch_all(STUDENTS_KIND, filters={'status': 'active'}, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    students = search_students(students, request.GET.get('q', ''), batch=request.GET.get('batch') or None)
    response = HttpResponse(generate_id_cards_pdf(students), content_type='application/pdf')
    response['Content-Disposition'] = 'attachment; filename="id_cards.pdf"'
    return response


@role_required('admin')
@require_GET
def certificate_list(request):
    try:
        students = access.fetch_all(STUDENTS_KIND, actor=request.api_user)
        attendance = access.fetch_all('attendance', actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    candidates = certificate_candidates(students, attendance)
    return JsonResponse({
        'eligible_count': sum(1 for candidate in candidates if candidate.eligible),
        'students': [
            {
                'id': candidate.student.id,
                'name': candidate.student.name,
                'roll_number': candidate.student.roll_number,
                'course': candidate.student.course,
                'sessions_attended': candidate.sessions_attended,
                'total_sessions': candidate.student.total_sessions,
                'eligible': candidate.eligible,
            }
            for candidate in candidates
        ],
    })


@role_required(['admin', 'parent'])
@require_GET
def student_certificate(request, student_id):
    try:
        ensure_can_view_student(request.api_user, student_id)
        student = access.fetch_one(STUDENTS_KIND, student_id, actor=request.api_user)
        attendance = access.fetch_all('attendance', filters={'student_id': student_id}, actor=request.api_user)
        pdf_bytes = generate_certificate_pdf(student, attendance, timezone.localdate())
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(request=request, action='student.certificate_issued', target=student)
    response = HttpResponse(pdf_bytes, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{certificate_id(student.roll_number)}.pdf"'
    return response
