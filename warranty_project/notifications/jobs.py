"""
Recurring jobs registered with the JobScheduler.

Each job is a thin wrapper; business logic stays in the
service layer.
"""

import logging
from collections import Counter

from django.utils import timezone

from machines.models import Machine
from notifications.services.reminders import process_reminders
from warranty.config import EngineConfig
from warranty.summary import summarize
from warranty.units import Unit

logger = logging.getLogger(__name__)

DAILY_REMINDERS = "daily-reminders"
WEEKLY_HEALTH_CHECK = "weekly-health-check"


def run_daily_reminders(now=None):
    now = now or timezone.now()
    logger.info("Starting daily reminder processing at %s", now.strftime("%Y-%m-%d %H:%M:%S"))

    sent_count = process_reminders(now=now)
    return {"success": True, "reminders_sent": sent_count}


def run_weekly_health_check(today=None):
    """Log how the fleet under active warranty is doing."""
    today = today or timezone.localdate()
    config = EngineConfig.from_settings()

    machines = (
        Machine.objects
        .select_related("machine_model", "sale")
        .prefetch_related("service_requests__service_visit")
        .filter(sale__isnull=False)
    )

    risk_counts = Counter()
    overdue = 0
    checked = 0

    for machine in machines:
        summary = summarize(Unit.from_machine(machine), today, config)
        if not summary.warranty_active:
            continue

        checked += 1
        risk_counts[str(summary.risk_level)] += 1
        if summary.days_until_service is not None and summary.days_until_service < 0:
            overdue += 1

    logger.info(
        "Weekly health check: %s machines under warranty, %s overdue, risk levels %s",
        checked, overdue, dict(risk_counts),
    )

    return {
        "success": True,
        "machines_checked": checked,
        "overdue": overdue,
        "risk_levels": dict(risk_counts),
    }


DEFAULT_JOBS = (
    (DAILY_REMINDERS, "0 9 * * *", run_daily_reminders),
    (WEEKLY_HEALTH_CHECK, "0 2 * * 0", run_weekly_health_check),
)
