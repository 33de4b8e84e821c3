import logging

from .calculator import local_today, next_service_due
from .config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)


def is_trigger_day(days, config=DEFAULT_CONFIG):
    return days in config.reminder_trigger_days


def should_send_reminder(unit, last_reminder_date=None, today=None, config=DEFAULT_CONFIG):
    """
    Whether a reminder may go out for ``unit`` today.

    ``last_reminder_date`` is the local calendar day of the latest
    REMINDER_SENT entry, or None. Only the trigger days fire; a day
    missed by the sweep is not caught up later.
    """
    today = local_today(today)

    due = next_service_due(unit, today, config)
    if due is None:
        return False

    days = (due - today).days
    if not is_trigger_day(days, config):
        return False

    if last_reminder_date is not None and last_reminder_date == today:
        logger.debug("Reminder for %s already sent on %s", unit.serial_number, today)
        return False

    return True
