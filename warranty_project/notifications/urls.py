from django.urls import path

from notifications.views import action_logs, cron_status, daily_reminders

app_name = "notifications"

urlpatterns = [
    # Cron
    path("cron/daily-reminders/", daily_reminders, name="cron-daily-reminders"),
    path("cron/status/", cron_status, name="cron-status"),

    # Action log
    path("actions/log/", action_logs, name="action-logs"),
]
