"""
Write and query side of the action log.

Callers go through these helpers instead of touching ActionLog
directly, so validation lives in one place.
"""

from django.utils import timezone

from notifications.models import ActionLog

MAX_QUERY_LIMIT = 100


def record_action(*, machine, action_type, channel, metadata=None, created_at=None, reserved_for=None):
    if action_type not in ActionLog.ActionType.values:
        raise ValueError(
            f"Invalid action_type. Must be one of: {', '.join(ActionLog.ActionType.values)}"
        )
    if channel not in ActionLog.Channel.values:
        raise ValueError(
            f"Invalid channel. Must be one of: {', '.join(ActionLog.Channel.values)}"
        )

    return ActionLog.objects.create(
        machine=machine,
        action_type=action_type,
        channel=channel,
        metadata=metadata or {},
        created_at=created_at or timezone.now(),
        reserved_for=reserved_for,
    )


def find_actions(*, machine=None, serial_number=None, action_type=None, limit=50):
    """Newest first, capped at MAX_QUERY_LIMIT entries."""
    qs = ActionLog.objects.select_related("machine")

    if machine is not None:
        qs = qs.filter(machine=machine)
    if serial_number:
        qs = qs.filter(machine__serial_number=serial_number)
    if action_type:
        qs = qs.filter(action_type=action_type)

    limit = max(1, min(limit, MAX_QUERY_LIMIT))
    return list(qs.order_by("-created_at")[:limit])


def last_reminder_date(machine):
    """Local calendar day of the latest REMINDER_SENT entry, or None."""
    created_at = (
        ActionLog.objects
        .filter(machine=machine, action_type=ActionLog.ActionType.REMINDER_SENT)
        .order_by("-created_at")
        .values_list("created_at", flat=True)
        .first()
    )
    if created_at is None:
        return None
    return timezone.localdate(created_at)
