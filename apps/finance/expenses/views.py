from dataclasses import asdict

from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from apps.core.records import access
from apps.core.records.errors import StudioError, error_response, form_error_response
from apps.core.records.payload import request_payload
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required

from .forms import ExpenseForm
from .services import EXPENSES_KIND, expense_summary, record_expense

ALL_CATEGORIES = 'All'


@role_required('admin')
@require_http_methods(['GET', 'POST'])
def expense_list(request):
    if request.method == 'POST':
        return _expense_create(request)

    try:
        expenses = access.fetch_all(EXPENSES_KIND, actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    category = request.GET.get('category') or ALL_CATEGORIES
    shown = expenses if category == ALL_CATEGORIES else [e for e in expenses if e.category == category]
    return JsonResponse({
        'expenses': [asdict(expense) for expense in shown],
        'summary': expense_summary(expenses, timezone.localdate()),
    })


def _expense_create(request):
    try:
        form = ExpenseForm(request_payload(request))
        if not form.is_valid():
            return form_error_response(form)
        expense = record_expense(fields=form.expense_fields(), actor=request.api_user)
    except StudioError as exc:
        return error_response(exc)

    log_audit_event(
        request=request,
        action='expense.recorded',
        target=expense,
        details=f"Category={expense.category}, Amount={expense.amount}",
    )
    return JsonResponse({'expense': asdict(expense)}, status=201)
