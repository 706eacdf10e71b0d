from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from apps.core.users.decorators import role_required

from .services import build_dashboard, build_portal


@role_required('admin')
@require_GET
def dashboard(request):
    return JsonResponse(build_dashboard(now=timezone.now(), actor=request.api_user))


@role_required('parent')
@require_GET
def parent_portal(request):
    return JsonResponse(build_portal(user=request.api_user, now=timezone.now()))
