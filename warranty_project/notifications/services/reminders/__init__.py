"""
Reminder notification service layer.

Time-based reminder emitters triggered by the scheduler,
management commands or the cron endpoint.

Reminder logic is:
- service-layer only
- date-based (trigger days around the next service date)
- deduplicated through the action log
"""

# =====================================================
# SERVICE-DUE REMINDERS
# =====================================================
from .service_due import (
    process_reminders,
    send_reminder,
    send_test_reminder,
)

__all__ = [
    "process_reminders",
    "send_reminder",
    "send_test_reminder",
]
