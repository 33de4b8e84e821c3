"""
notifications/services/reminders/service_due.py

Daily preventive-maintenance reminders for sold machines.

A reminder goes out only on the trigger days around a machine's
next service date, at most once per machine per calendar day.
The REMINDER_SENT entry is inserted inside the same transaction as
the send: a failed send rolls it back, and a second sweep on the
same day trips the daily reservation constraint.
"""

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from machines.models import Machine
from notifications.models import ActionLog
from notifications.services.action_log import last_reminder_date, record_action
from notifications.services.emails import render_service_reminder, send_email
from warranty.calculator import is_warranty_active
from warranty.config import EngineConfig
from warranty.eligibility import should_send_reminder
from warranty.links import build_schedule_url
from warranty.summary import summarize
from warranty.units import Unit

logger = logging.getLogger(__name__)

TEST_SUBJECT_PREFIX = "[TEST] "


def reminder_candidates():
    """Machines with a sale, a customer email and reminders allowed."""
    return (
        Machine.objects
        .select_related("machine_model", "sale")
        .prefetch_related("service_requests__service_visit")
        .filter(sale__isnull=False, sale__reminder_opt_out=False)
        .exclude(sale__customer_email="")
        .order_by("pk")
    )


def build_reminder_email(unit, summary):
    return render_service_reminder({
        "customer_name": unit.sale.customer_name,
        "machine_name": unit.model_name,
        "serial_number": unit.serial_number,
        "days_until_service": summary.days_until_service,
        "health_score": summary.health_score,
        "total_savings": summary.total_savings,
        "warranty_active": summary.warranty_active,
        "warranty_expiry_date": summary.warranty_expiry,
        "schedule_url": build_schedule_url(unit.serial_number),
    })


def _deliver(machine, unit, *, now, config, recipient, record, reserved_for=None, subject_prefix=""):
    summary = summarize(unit, timezone.localdate(now), config)

    if summary.next_service_due is None:
        logger.info(
            "No service due for %s (warranty inactive or no service dates), skipping",
            unit.serial_number,
        )
        return False

    try:
        content = build_reminder_email(unit, summary)

        with transaction.atomic():
            if record:
                record_action(
                    machine=machine,
                    action_type=ActionLog.ActionType.REMINDER_SENT,
                    channel=ActionLog.Channel.EMAIL,
                    metadata={
                        "days_until_service": summary.days_until_service,
                        "health_score": summary.health_score,
                        "urgency": str(summary.urgency),
                        "recipient": recipient,
                    },
                    created_at=now,
                    reserved_for=reserved_for,
                )

            send_email(content, to=recipient, subject_prefix=subject_prefix)

    except IntegrityError:
        logger.info(
            "Reminder for %s already recorded for %s, skipping",
            unit.serial_number, reserved_for,
        )
        return False

    except Exception as exc:
        logger.exception(
            "Failed to send reminder for %s to %s: %s",
            unit.serial_number, recipient, exc,
        )
        return False

    logger.info(
        "Sent reminder for %s to %s (%s days, health %s)",
        unit.serial_number, recipient,
        summary.days_until_service, summary.health_score,
    )
    return True


# ============================================================
# SWEEP
# ============================================================

def process_reminders(*, now=None, config=None):
    """
    Send every reminder due today and return how many went out.

    One machine failing never stops the sweep. A store failure
    ends it early and the partial count is returned.
    """
    now = now or timezone.now()
    today = timezone.localdate(now)
    config = config or EngineConfig.from_settings()

    sent_count = 0

    try:
        machines = list(reminder_candidates())
        logger.info("Checking %s machines for service reminders on %s", len(machines), today)

        for machine in machines:
            unit = Unit.from_machine(machine)

            if not unit.sale.has_email:
                continue

            if not is_warranty_active(unit, today):
                continue

            if not should_send_reminder(unit, last_reminder_date(machine), today, config):
                continue

            sent = _deliver(
                machine,
                unit,
                now=now,
                config=config,
                recipient=unit.sale.customer_email.strip(),
                record=True,
                reserved_for=today,
            )
            if sent:
                sent_count += 1

    except Exception:
        logger.exception("Service reminder sweep aborted after %s reminders", sent_count)

    logger.info("Sent %s service reminders", sent_count)
    return sent_count


# ============================================================
# SINGLE MACHINE
# ============================================================

def send_reminder(machine, *, now=None, config=None):
    """
    Send a reminder for one machine right away.

    Skips the trigger-day and same-day checks; the entry is still
    logged so the sweep sees it.
    """
    now = now or timezone.now()
    config = config or EngineConfig.from_settings()
    unit = Unit.from_machine(machine)

    if unit.sale is None or not unit.sale.has_email:
        logger.warning("Machine %s has no sale email, cannot send reminder", unit.serial_number)
        return False

    return _deliver(
        machine,
        unit,
        now=now,
        config=config,
        recipient=unit.sale.customer_email.strip(),
        record=True,
    )


def send_test_reminder(machine, to_email, *, now=None, config=None):
    """Send a [TEST] copy to ``to_email``. Nothing is logged."""
    now = now or timezone.now()
    config = config or EngineConfig.from_settings()
    unit = Unit.from_machine(machine)

    if unit.sale is None:
        logger.warning("Machine %s has no sale, cannot build test reminder", unit.serial_number)
        return False

    return _deliver(
        machine,
        unit,
        now=now,
        config=config,
        recipient=to_email,
        record=False,
        subject_prefix=TEST_SUBJECT_PREFIX,
    )
