"""
notifications/management/commands/send_service_reminders.py

Runs the service reminder sweep outside the scheduler, or sends a
single reminder on demand.

- No options: full sweep (deduplicated, trigger days only)
- --machine: send to one machine's customer now (bypasses dedup)
- --machine + --to: send a [TEST] copy to another address (not logged)
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from machines.models import Machine
from notifications.services.reminders import (
    process_reminders,
    send_reminder,
    send_test_reminder,
)


class Command(BaseCommand):
    help = "Send preventive-maintenance service reminders"

    def add_arguments(self, parser):
        parser.add_argument(
            "--machine",
            metavar="SERIAL",
            help="Send a reminder for this machine right away",
        )
        parser.add_argument(
            "--to",
            metavar="EMAIL",
            help="With --machine: send a test copy to this address instead",
        )

    def handle(self, *args, **options):
        now = timezone.now()
        serial = options.get("machine")
        to_email = options.get("to")

        if to_email and not serial:
            raise CommandError("--to requires --machine")

        if serial:
            machine = self._get_machine(serial)

            if to_email:
                sent = send_test_reminder(machine, to_email, now=now)
                target = to_email
            else:
                sent = send_reminder(machine, now=now)
                target = "customer"

            if not sent:
                raise CommandError(f"Reminder for {serial} was not sent (see logs)")

            self.stdout.write(
                self.style.SUCCESS(f"Sent reminder for {serial} to {target}")
            )
            return

        self.stdout.write(
            self.style.NOTICE(
                f"[{now:%Y-%m-%d %H:%M:%S}] Starting service reminder sweep"
            )
        )

        sent_count = process_reminders(now=now)

        self.stdout.write(
            self.style.SUCCESS(
                f"[{now:%Y-%m-%d %H:%M:%S}] Completed: {sent_count} reminders sent"
            )
        )

    def _get_machine(self, serial):
        try:
            return (
                Machine.objects
                .select_related("machine_model", "sale")
                .prefetch_related("service_requests__service_visit")
                .get(serial_number=serial)
            )
        except Machine.DoesNotExist:
            raise CommandError(f"Machine '{serial}' not found")
