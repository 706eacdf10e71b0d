from django.conf import settings
from django.http import JsonResponse
from django.utils.module_loading import import_string
from django.views.decorators.http import require_POST

from apps.core.records import access
from apps.core.records.errors import StudioError, error_response
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required

from .services import score_leads


def get_scorer():
    return import_string(settings.LEAD_SCORER_CLASS).from_settings()


@role_required('admin')
@require_POST
def lead_scores(request):
    try:
        leads = access.fetch_all('leads', actor=request.api_user)
    except StudioError as exc:
        return error_response(exc, scores=[])

    outcome = score_leads(leads, get_scorer())
    if outcome.error is not None:
        return error_response(outcome.error, scores=[])

    log_audit_event(request=request, action='leads.scored', details=f"Scored={len(outcome.scores)}")
    return JsonResponse({'scores': [score.as_dict() for score in outcome.scores]})
