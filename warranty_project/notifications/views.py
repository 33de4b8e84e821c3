import json
import logging

from django.conf import settings
from django.http import JsonResponse
from django.utils import timezone
from django.utils.crypto import constant_time_compare
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from machines.models import Machine
from notifications.jobs import DAILY_REMINDERS
from notifications.scheduler import JobNotFound, get_scheduler
from notifications.services.action_log import find_actions, record_action

logger = logging.getLogger(__name__)


def _secret_matches(candidate):
    secret = settings.CRON_SECRET
    return bool(secret) and bool(candidate) and constant_time_compare(candidate, secret)


def _read_json(request):
    try:
        return json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        return None


# ============================================================
# CRON: DAILY SWEEP
# ============================================================

@csrf_exempt
@require_http_methods(["GET", "POST"])
def daily_reminders(request):
    """External cron hook. Requires ``Authorization: Bearer <CRON_SECRET>`` when set."""
    if settings.CRON_SECRET:
        header = request.headers.get("Authorization", "")
        token = header[len("Bearer "):] if header.startswith("Bearer ") else ""
        if not _secret_matches(token):
            return JsonResponse({"error": "Unauthorized"}, status=401)

    try:
        result = get_scheduler().trigger_job(DAILY_REMINDERS)
    except Exception:
        logger.exception("Cron daily reminders failed")
        return JsonResponse({"error": "Failed to process reminders"}, status=500)

    return JsonResponse({
        "success": True,
        "reminders_sent": result.get("reminders_sent", 0),
        "timestamp": timezone.now().isoformat(),
    })


# ============================================================
# CRON: STATUS + MANUAL TRIGGER
# ============================================================

@csrf_exempt
@require_http_methods(["GET", "POST"])
def cron_status(request):
    if request.method == "POST":
        return _trigger_job(request)

    statuses = get_scheduler().get_status()

    total_runs = sum(s.total_runs for s in statuses)
    total_success = sum(s.total_success for s in statuses)
    total_failures = sum(s.total_failures for s in statuses)
    success_rate = (total_success / total_runs * 100) if total_runs else 0

    return JsonResponse({
        "success": True,
        "timestamp": timezone.now().isoformat(),
        "summary": {
            "total_jobs": len(statuses),
            "total_runs": total_runs,
            "total_success": total_success,
            "total_failures": total_failures,
            "success_rate": f"{success_rate:.2f}%",
        },
        "jobs": [s.as_dict() for s in statuses],
    })


def _trigger_job(request):
    payload = _read_json(request)
    if payload is None:
        return JsonResponse({"success": False, "error": "Invalid JSON body"}, status=400)

    if not _secret_matches(payload.get("secret")):
        return JsonResponse({"success": False, "error": "Unauthorized"}, status=401)

    job_name = payload.get("job_name")
    if not job_name:
        return JsonResponse({"success": False, "error": "job_name is required"}, status=400)

    logger.info("Manual trigger requested for job: %s", job_name)

    try:
        result = get_scheduler().trigger_job(job_name)
    except JobNotFound as exc:
        return JsonResponse({"success": False, "error": str(exc)}, status=404)
    except Exception as exc:
        logger.exception("Manual trigger of %s failed", job_name)
        return JsonResponse(
            {"success": False, "error": "Failed to trigger job", "details": str(exc)},
            status=500,
        )

    return JsonResponse({
        "success": True,
        "message": f"Job '{job_name}' executed successfully",
        "result": result,
        "timestamp": timezone.now().isoformat(),
    })


# ============================================================
# ACTION LOG
# ============================================================

def _serialize_action(entry):
    return {
        "id": entry.id,
        "serial_number": entry.machine.serial_number,
        "action_type": entry.action_type,
        "channel": entry.channel,
        "metadata": entry.metadata,
        "created_at": entry.created_at.isoformat(),
    }


@csrf_exempt
@require_http_methods(["GET", "POST"])
def action_logs(request):
    if request.method == "POST":
        return _create_action(request)

    try:
        limit = int(request.GET.get("limit", 50))
    except ValueError:
        return JsonResponse({"error": "limit must be an integer"}, status=400)

    entries = find_actions(
        serial_number=request.GET.get("serial_number"),
        action_type=request.GET.get("action_type"),
        limit=limit,
    )

    return JsonResponse({
        "success": True,
        "action_logs": [_serialize_action(e) for e in entries],
        "count": len(entries),
    })


def _create_action(request):
    payload = _read_json(request)
    if payload is None:
        return JsonResponse({"error": "Invalid JSON body"}, status=400)

    serial = payload.get("serial_number")
    action_type = payload.get("action_type")
    channel = payload.get("channel")

    if not serial or not action_type or not channel:
        return JsonResponse(
            {"error": "Missing required fields: serial_number, action_type, channel"},
            status=400,
        )

    machine = Machine.objects.filter(serial_number=serial).first()
    if machine is None:
        return JsonResponse({"error": "Machine not found"}, status=404)

    metadata = payload.get("metadata") or {}
    if not isinstance(metadata, dict):
        return JsonResponse({"error": "metadata must be an object"}, status=400)

    try:
        entry = record_action(
            machine=machine,
            action_type=action_type,
            channel=channel,
            metadata=metadata,
        )
    except ValueError as exc:
        return JsonResponse({"error": str(exc)}, status=400)

    return JsonResponse({"success": True, "action_log": _serialize_action(entry)}, status=201)
