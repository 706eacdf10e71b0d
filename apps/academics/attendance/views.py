from dataclasses import asdict

from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from apps.core.records import access
from apps.core.records.errors import StudioError, error_response, form_error_response
from apps.core.records.payload import request_payload
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.operations.communication.notifications import ATTENDANCE_ALERT, dispatch, render_template

from .forms import AttendanceBulkMarkForm, AttendanceMarkForm, AttendanceSheetForm
from .services import ALL_BATCHES, ATTENDANCE_KIND, attendance_sheet, batch_students, mark_all, mark_attendance, sheet_counts


@role_required('admin')
@require_GET
def attendance_day_sheet(request):
    form = AttendanceSheetForm(request.GET)
    if not form.is_valid():
        return form_error_response(form)
    on_date = form.cleaned_data['date'] or timezone.localdate()
    batch = form.cleaned_data['batch'] or ALL_BATCHES

    try:
        students = access.fetch_all('students', filters={'status': 'active'}, actor=request.api_user)
        records = access.fetch_all(ATTENDANCE_KIND, filters={'date': on_date}, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    rows = attendance_sheet(students, records, on_date, batch)
    return JsonResponse({
        'date': on_date,
        'batch': batch,
        'counts': sheet_counts(rows),
        'rows': [
            {
                'student_id': row.student.id,
                'name': row.student.name,
                'roll_number': row.student.roll_number,
                'batch': row.student.batch,
                'status': row.status,
            }
            for row in rows
        ],
    })


@role_required('admin')
@require_POST
def attendance_mark(request):
    try:
        form = AttendanceMarkForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        student = access.fetch_one('students', form.cleaned_data['student'], actor=request.api_user)
        record = mark_attendance(
            student=student,
            on_date=form.cleaned_data['date'],
            status=form.cleaned_data['status'],
            actor=request.api_user,
        )
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(
        request=request,
        action='attendance.marked',
        target=record,
        details=f"Student={student.id}, Date={record.date}, Status={record.status}",
    )
    alert = render_template(
        ATTENDANCE_ALERT,
        student_name=student.name,
        date=record.date.strftime('%d %b %Y'),
        status=record.status,
    )
    return JsonResponse({
        'record': asdict(record),
        'whatsapp': dispatch(student.whatsapp, alert).as_dict() if student.whatsapp else None,
    })


@role_required('admin')
@require_POST
def attendance_mark_all(request):
    try:
        form = AttendanceBulkMarkForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        students = access.fetch_all('students', filters={'status': 'active'}, actor=request.api_user)
        students = batch_students(students, form.cleaned_data['batch'] or ALL_BATCHES)
        records = mark_all(
            students=students,
            on_date=form.cleaned_data['date'],
            status=form.cleaned_data['status'],
            actor=request.api_user,
        )
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(
        request=request,
        action='attendance.bulk_marked',
        details=f"Date={form.cleaned_data['date']}, Status={form.cleaned_data['status']}, Count={len(records)}",
    )
    return JsonResponse({'marked': len(records)})
