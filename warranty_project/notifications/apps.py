from django.apps import AppConfig
from django.conf import settings
import os


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"

    scheduler = None

    def ready(self):
        from .jobs import DEFAULT_JOBS
        from .scheduler import JobScheduler, start_scheduler

        # --------------------------------------------------
        # One scheduler object per process
        # --------------------------------------------------
        self.scheduler = JobScheduler(
            DEFAULT_JOBS,
            timezone_name=getattr(settings, "SCHEDULER_TIMEZONE", settings.TIME_ZONE),
        )

        # --------------------------------------------------
        # Start APScheduler SAFELY
        # --------------------------------------------------
        # Prevent duplicate scheduler from Django autoreload
        if settings.DEBUG and os.environ.get("RUN_MAIN") != "true":
            return

        start_scheduler(self.scheduler)
