from django.db import models
from django.db.models import Q
from django.utils import timezone

from machines.models import Machine


class ActionLog(models.Model):
    """
    Append-only record of an action taken for a machine.

    Doubles as the audit trail and as the ledger the reminder
    sweep consults to avoid sending twice on the same day.
    """

    # =====================================================
    # ACTION KIND
    # =====================================================
    class ActionType(models.TextChoices):
        REMINDER_SENT = "REMINDER_SENT", "Reminder sent"
        SERVICE_SCHEDULED = "SERVICE_SCHEDULED", "Service scheduled"
        WARRANTY_VIEWED = "WARRANTY_VIEWED", "Warranty viewed"
        EMAIL_OPENED = "EMAIL_OPENED", "Email opened"
        LINK_CLICKED = "LINK_CLICKED", "Link clicked"

    # =====================================================
    # DELIVERY CHANNEL
    # =====================================================
    class Channel(models.TextChoices):
        EMAIL = "EMAIL", "Email"
        WHATSAPP = "WHATSAPP", "WhatsApp"
        WEB = "WEB", "Web"
        SMS = "SMS", "SMS"
        SYSTEM = "SYSTEM", "System"

    machine = models.ForeignKey(
        Machine,
        on_delete=models.CASCADE,
        related_name="action_logs"
    )

    action_type = models.CharField(
        max_length=30,
        choices=ActionType.choices,
        db_index=True
    )

    channel = models.CharField(
        max_length=20,
        choices=Channel.choices
    )

    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True
    )

    # =====================================================
    # DAILY RESERVATION
    # Set by the scheduled sweep only; manual sends leave it empty
    # =====================================================
    reserved_for = models.DateField(
        null=True,
        blank=True,
        help_text="Calendar day this entry reserves for the machine and action"
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["machine", "action_type", "created_at"],
                name="actionlog_machine_type_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["machine", "action_type", "reserved_for"],
                condition=Q(reserved_for__isnull=False),
                name="unique_action_per_machine_per_day",
            ),
        ]

    def __str__(self):
        return (
            f"{self.machine_id} | "
            f"{self.action_type} | "
            f"{self.channel} | "
            f"{self.created_at:%Y-%m-%d %H:%M}"
        )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Action log entries are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Action log entries are append-only")
