from dataclasses import asdict

from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.records import access
from apps.core.records.errors import StudioError, error_response, form_error_response
from apps.core.records.payload import request_payload
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required

from .forms import PaymentForm
from .services import PAYMENTS_KIND, fee_reminder, mark_paid, payment_overview, record_payment


def _payment_filters(params):
    filters = {}
    if params.get('student', '').isdigit():
        filters['student_id'] = int(params['student'])
    if params.get('status'):
        filters['status'] = params['status']
    return filters


@role_required('admin')
@require_http_methods(['GET', 'POST'])
def payment_list(request):
    if request.method == 'POST':
        return _payment_create(request)

    try:
        payments = access.fetch_all(PAYMENTS_KIND, filters=_payment_filters(request.GET), actor=request.api_user)
        students = {student.id: student for student in access.fetch_all('students', actor=request.api_user)}
    except StudioError as exc:
        return error_response(exc)

    rows = []
    for payment in payments:
        row = asdict(payment)
        student = students.get(payment.student_id)
        row['student_name'] = student.name if student else ''
        rows.append(row)
    return JsonResponse({'payments': rows, 'summary': payment_overview(payments, timezone.localdate())})


def _payment_create(request):
    try:
        form = PaymentForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        payment = record_payment(fields=form.payment_fields(), actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(
        request=request,
        action='payment.recorded',
        target=payment,
        details=f"Student={payment.student_id}, Amount={payment.amount}, Status={payment.status}",
    )
    return JsonResponse({'payment': asdict(payment)}, status=201)


@role_required('admin')
@require_POST
def payment_mark_paid(request, payment_id):
    try:
        payment = mark_paid(payment_id=payment_id, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(request=request, action='payment.marked_paid', target=payment)
    return JsonResponse({'payment': asdict(payment)})


@role_required('admin')
@require_GET
def payment_reminder(request, payment_id):
    try:
        payment = access.fetch_one(PAYMENTS_KIND, payment_id, actor=request.api_user)
        student = access.fetch_one('students', payment.student_id, actor=request.api_user)
        link = fee_reminder(payment, student)
    except StudioError as exc:
        return error_response(exc)
    return JsonResponse({'whatsapp': link.as_dict()})
