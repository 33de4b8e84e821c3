import logging

from django.core import signing
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from machines.models import Machine
from notifications.models import ActionLog
from notifications.services.action_log import record_action
from warranty.config import EngineConfig
from warranty.links import read_schedule_token
from warranty.summary import summarize
from warranty.units import Unit

logger = logging.getLogger(__name__)


def _load_machine(serial_number):
    return (
        Machine.objects
        .select_related("machine_model", "sale")
        .prefetch_related("service_requests__service_visit")
        .filter(serial_number=serial_number)
        .first()
    )


@require_GET
def machine_health(request, serial_number):
    machine = _load_machine(serial_number)
    if machine is None:
        return JsonResponse({"error": "Machine not found"}, status=404)

    summary = summarize(Unit.from_machine(machine), config=EngineConfig.from_settings())
    return JsonResponse(summary.as_dict())


@require_GET
def schedule_service(request, serial_number):
    """
    Landing point of the link in reminder emails.
    Validates the signed token and records the click.
    """
    config = EngineConfig.from_settings()
    token = request.GET.get("token", "")

    try:
        token_serial = read_schedule_token(token, config)
    except signing.SignatureExpired:
        return JsonResponse({"error": "Scheduling link has expired"}, status=400)
    except signing.BadSignature:
        return JsonResponse({"error": "Invalid scheduling link"}, status=400)

    if token_serial != serial_number:
        return JsonResponse({"error": "Invalid scheduling link"}, status=400)

    machine = _load_machine(serial_number)
    if machine is None:
        return JsonResponse({"error": "Machine not found"}, status=404)

    summary = summarize(Unit.from_machine(machine), config=config)

    record_action(
        machine=machine,
        action_type=ActionLog.ActionType.LINK_CLICKED,
        channel=ActionLog.Channel.WEB,
        metadata={"next_service_due": summary.as_dict()["next_service_due"]},
    )
    logger.info("Scheduling link opened for %s", serial_number)

    return JsonResponse({
        "valid": True,
        "serial_number": serial_number,
        "machine_name": machine.machine_model.name,
        "next_service_due": summary.as_dict()["next_service_due"],
        "warranty_active": summary.warranty_active,
    })
