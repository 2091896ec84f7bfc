import logging

from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from pagos.exceptions import SyncError
from pagos.sync.factory import get_orchestrator

logger = logging.getLogger(__name__)


@login_required
@require_GET
def sync_status(request: HttpRequest) -> JsonResponse:
    return JsonResponse(get_orchestrator().status())


@login_required
@require_POST
def run_sync(request: HttpRequest) -> JsonResponse:
    orchestrator = get_orchestrator()
    try:
        result = orchestrator.perform_sync()
    except SyncError as exc:
        status = 401 if exc.needs_user_action else 503
        return JsonResponse({"ok": False, "error": exc.as_dict()}, status=status)

    if result is None:
        return JsonResponse({"ok": False, "detail": "Sync already in progress."}, status=202)

    response = JsonResponse({"ok": True, "result": result.as_dict()})
    if request.htmx:
        response["HX-Trigger"] = "payments-synced"
    return response
