from __future__ import annotations

import atexit
import logging
import re
import threading
from dataclasses import asdict, dataclass, replace
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from django.apps import apps
from django.conf import settings
from django.db import close_old_connections
from django.utils import timezone

logger = logging.getLogger(__name__)


class JobNotFound(LookupError):
    pass


# ============================================================
# CRONTAB PARSING
# APScheduler 3 numbers weekdays from Monday; crontab from Sunday
# ============================================================

CRONTAB_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun")


def _weekday_name(match):
    value = int(match.group())
    return CRONTAB_WEEKDAYS[value] if value < len(CRONTAB_WEEKDAYS) else match.group()


def _crontab_day_of_week(field):
    parts = []
    for part in field.split(","):
        # 0-N starts on Sunday, which sorts last in APScheduler
        start, dash, rest = part.partition("-")
        if dash and start == "0" and "/" not in part:
            parts.append("sun")
            if rest == "0":
                continue
            part = f"1-{rest}"
        parts.append(re.sub(r"(?<![/\d])\d+", _weekday_name, part))
    return ",".join(parts)


def crontab_trigger(expression, timezone_name):
    """
    CronTrigger for a standard five-field crontab line.

    Numeric weekdays keep their crontab meaning (0 and 7 are Sunday).
    """
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(
            f"Wrong number of fields in crontab '{expression}': got {len(fields)}, expected 5"
        )

    minute, hour, day, month, day_of_week = fields
    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=_crontab_day_of_week(day_of_week),
        timezone=timezone_name,
    )


@dataclass
class JobStatus:
    job_name: str
    schedule: str
    last_run: datetime | None = None
    last_success: datetime | None = None
    last_failure: datetime | None = None
    last_error: str | None = None
    total_runs: int = 0
    total_success: int = 0
    total_failures: int = 0
    is_running: bool = False
    next_run: datetime | None = None

    @property
    def health(self):
        if self.last_failure and self.last_success:
            return "HEALTHY" if self.last_success > self.last_failure else "UNHEALTHY"
        if self.last_failure:
            return "UNHEALTHY"
        return "HEALTHY" if self.total_success > 0 else "UNKNOWN"

    def as_dict(self):
        data = asdict(self)
        for key in ("last_run", "last_success", "last_failure", "next_run"):
            data[key] = data[key].isoformat() if data[key] else None
        data["state"] = "RUNNING" if self.is_running else "IDLE"
        data["health"] = self.health
        return data


class JobScheduler:
    """
    Named recurring jobs on top of an APScheduler BackgroundScheduler.

    Runs of the same job are serialized: a cron tick that fires while
    a manual trigger is still running waits for it to finish.
    """

    def __init__(self, jobs=(), *, timezone_name=None, scheduler=None):
        self.timezone_name = timezone_name or settings.TIME_ZONE
        self._jobs = tuple(jobs)
        self._scheduler = scheduler or BackgroundScheduler(timezone=self.timezone_name)

        self._tasks = {}
        self._triggers = {}
        self._status = {}
        self._run_locks = {}
        self._paused = set()

        self._state_lock = threading.RLock()
        self._initialized = False

    # =====================================================
    # LIFECYCLE
    # =====================================================
    @property
    def initialized(self):
        return self._initialized

    @property
    def running(self):
        return self._scheduler.running

    def ensure_initialized(self):
        """Register the configured jobs once. Later calls are no-ops."""
        with self._state_lock:
            if self._initialized:
                return False

            logger.info("Initializing job scheduler (%s)", self.timezone_name)
            for name, schedule, task in self._jobs:
                self.register_job(name, schedule, task)

            self._initialized = True

        self._log_scheduled_jobs()
        return True

    def register_job(self, name, schedule, task):
        trigger = crontab_trigger(schedule, self.timezone_name)

        with self._state_lock:
            self._tasks[name] = task
            self._triggers[name] = trigger
            self._run_locks[name] = threading.Lock()
            self._status[name] = JobStatus(
                job_name=name,
                schedule=schedule,
                next_run=self._next_run(name),
            )

        self._scheduler.add_job(
            self._run_scheduled,
            trigger=trigger,
            args=[name],
            id=name,
            name=name,
            replace_existing=True,
            max_instances=1,      # Prevent overlapping runs
            coalesce=True,        # Merge missed runs if server was down
        )
        logger.info("Scheduled job: %s (%s)", name, schedule)

    def start(self):
        self.ensure_initialized()
        if self._scheduler.running:
            logger.info("Job scheduler already running, skipping start")
            return False

        self._scheduler.start()
        logger.info("Job scheduler started with %s jobs", len(self._tasks))
        return True

    def shutdown(self, wait=False):
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Job scheduler stopped")

    # =====================================================
    # EXECUTION
    # =====================================================
    def _next_run(self, name):
        if name in self._paused:
            return None
        trigger = self._triggers[name]
        return trigger.get_next_fire_time(None, datetime.now(trigger.timezone))

    def _execute(self, name):
        with self._run_locks[name]:
            with self._state_lock:
                status = self._status[name]
                status.is_running = True
                status.last_run = timezone.now()
                status.total_runs += 1
                run_number = status.total_runs

            logger.info("Running job '%s' (run #%s)", name, run_number)

            try:
                result = self._tasks[name]()
            except Exception as exc:
                with self._state_lock:
                    status.last_failure = timezone.now()
                    status.total_failures += 1
                    status.last_error = str(exc) or exc.__class__.__name__
                raise
            else:
                with self._state_lock:
                    status.last_success = timezone.now()
                    status.total_success += 1
                    status.last_error = None
                logger.info("Job '%s' completed: %s", name, result)
                return result
            finally:
                with self._state_lock:
                    status.is_running = False
                    status.next_run = self._next_run(name)

    def _run_scheduled(self, name):
        # APScheduler worker threads keep their own DB connections
        close_old_connections()
        try:
            self._execute(name)
        except Exception:
            logger.exception("Scheduled job '%s' failed", name)
        finally:
            close_old_connections()

    def trigger_job(self, name):
        """Run ``name`` now, outside its schedule. Task errors propagate."""
        if name not in self._tasks:
            raise JobNotFound(f"Job '{name}' not found")

        logger.info("Manually triggering job: %s", name)
        return self._execute(name)

    # =====================================================
    # TIMER CONTROL
    # =====================================================
    def stop_job(self, name):
        if name not in self._tasks:
            return False

        self._scheduler.pause_job(name)
        with self._state_lock:
            self._paused.add(name)
            self._status[name].next_run = None
        logger.info("Stopped job: %s", name)
        return True

    def start_job(self, name):
        if name not in self._tasks:
            return False

        self._scheduler.resume_job(name)
        with self._state_lock:
            self._paused.discard(name)
            self._status[name].next_run = self._next_run(name)
        logger.info("Started job: %s", name)
        return True

    def stop_all(self):
        for name in list(self._tasks):
            self.stop_job(name)

    def start_all(self):
        for name in list(self._tasks):
            self.start_job(name)

    # =====================================================
    # STATUS
    # =====================================================
    def get_status(self):
        with self._state_lock:
            return [replace(status) for status in self._status.values()]

    def get_job_status(self, name):
        with self._state_lock:
            status = self._status.get(name)
            return replace(status) if status else None

    def _log_scheduled_jobs(self):
        for status in self.get_status():
            logger.info(
                "  %s | schedule: %s | next run: %s",
                status.job_name,
                status.schedule,
                status.next_run or "N/A",
            )


# ============================================================
# PROCESS-WIDE ACCESS
# The instance lives on the notifications AppConfig
# ============================================================

def get_scheduler():
    scheduler = apps.get_app_config("notifications").scheduler
    scheduler.ensure_initialized()
    return scheduler


def start_scheduler(scheduler):
    """
    Start the background scheduler if this process should run it.

    - Respects ENABLE_SCHEDULER setting
    - Prevents double start (Django autoreload, imports)
    """
    if not getattr(settings, "ENABLE_SCHEDULER", False):
        logger.info("Job scheduler disabled via settings (ENABLE_SCHEDULER=False)")
        return False

    if not scheduler.start():
        return False

    atexit.register(scheduler.shutdown)
    return True
