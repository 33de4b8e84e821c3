from datetime import datetime, timezone as dt_timezone

import pytest

from notifications.jobs import DEFAULT_JOBS, WEEKLY_HEALTH_CHECK
from notifications.scheduler import JobNotFound, JobScheduler, JobStatus, crontab_trigger

MONDAY = datetime(2024, 6, 10, 12, 0, tzinfo=dt_timezone.utc)


def ok_task():
    return {"success": True, "processed": 3}


def failing_task():
    raise RuntimeError("mail server down")


@pytest.fixture
def scheduler():
    jobs = (
        ("ok-job", "0 9 * * *", ok_task),
        ("failing-job", "0 2 * * 0", failing_task),
    )
    sched = JobScheduler(jobs, timezone_name="UTC")
    yield sched
    sched.shutdown()


def test_initialization_is_idempotent(scheduler):
    assert scheduler.initialized is False

    assert scheduler.ensure_initialized() is True
    assert scheduler.ensure_initialized() is False

    assert scheduler.initialized is True
    assert [s.job_name for s in scheduler.get_status()] == ["ok-job", "failing-job"]


def test_registered_job_has_next_run(scheduler):
    scheduler.ensure_initialized()
    status = scheduler.get_job_status("ok-job")

    assert status.schedule == "0 9 * * *"
    assert status.next_run is not None
    assert (status.next_run.hour, status.next_run.minute) == (9, 0)
    assert status.total_runs == 0
    assert status.health == "UNKNOWN"


def test_trigger_success_updates_counters(scheduler):
    scheduler.ensure_initialized()

    result = scheduler.trigger_job("ok-job")

    assert result == {"success": True, "processed": 3}
    status = scheduler.get_job_status("ok-job")
    assert status.total_runs == 1
    assert status.total_success == 1
    assert status.total_failures == 0
    assert status.last_run is not None
    assert status.last_success is not None
    assert status.is_running is False
    assert status.health == "HEALTHY"


def test_trigger_failure_records_error_and_propagates(scheduler):
    scheduler.ensure_initialized()

    with pytest.raises(RuntimeError, match="mail server down"):
        scheduler.trigger_job("failing-job")

    status = scheduler.get_job_status("failing-job")
    assert status.total_runs == 1
    assert status.total_failures == 1
    assert status.last_error == "mail server down"
    assert status.last_failure is not None
    assert status.is_running is False
    assert status.health == "UNHEALTHY"


def test_unknown_job_raises(scheduler):
    scheduler.ensure_initialized()

    with pytest.raises(JobNotFound):
        scheduler.trigger_job("nope")

    assert scheduler.get_job_status("nope") is None


@pytest.mark.django_db
def test_scheduled_run_swallows_task_errors(scheduler):
    scheduler.ensure_initialized()

    scheduler._run_scheduled("failing-job")

    assert scheduler.get_job_status("failing-job").total_failures == 1


def test_stop_and_start_toggle_next_run_only(scheduler):
    scheduler.ensure_initialized()
    scheduler.trigger_job("ok-job")

    assert scheduler.stop_job("ok-job") is True
    stopped = scheduler.get_job_status("ok-job")
    assert stopped.next_run is None
    assert stopped.total_runs == 1

    assert scheduler.start_job("ok-job") is True
    started = scheduler.get_job_status("ok-job")
    assert started.next_run is not None
    assert started.total_runs == 1
    assert started.total_success == 1

    assert scheduler.stop_job("nope") is False
    assert scheduler.start_job("nope") is False


def test_stop_all_and_start_all(scheduler):
    scheduler.ensure_initialized()

    scheduler.stop_all()
    assert all(s.next_run is None for s in scheduler.get_status())

    scheduler.start_all()
    assert all(s.next_run is not None for s in scheduler.get_status())


def test_status_is_a_snapshot(scheduler):
    scheduler.ensure_initialized()
    before = scheduler.get_job_status("ok-job")

    scheduler.trigger_job("ok-job")

    assert before.total_runs == 0
    assert scheduler.get_job_status("ok-job").total_runs == 1


def test_recovered_job_is_healthy_again(scheduler):
    calls = {"n": 0}

    def flaky():
        calls["n"] += 1
        if calls["n"] == 1:
            raise ValueError("first run fails")
        return {"success": True}

    scheduler.register_job("flaky", "*/5 * * * *", flaky)

    with pytest.raises(ValueError):
        scheduler.trigger_job("flaky")
    scheduler.trigger_job("flaky")

    status = scheduler.get_job_status("flaky")
    assert status.total_runs == 2
    assert status.last_error is None
    assert status.health == "HEALTHY"


def test_status_as_dict():
    status = JobStatus(job_name="daily-reminders", schedule="0 9 * * *")

    data = status.as_dict()

    assert data["job_name"] == "daily-reminders"
    assert data["state"] == "IDLE"
    assert data["health"] == "UNKNOWN"
    assert data["last_run"] is None
    assert data["next_run"] is None


def test_weekly_health_check_runs_on_sunday():
    sched = JobScheduler(DEFAULT_JOBS, timezone_name="UTC")
    sched.ensure_initialized()

    next_run = sched.get_job_status(WEEKLY_HEALTH_CHECK).next_run

    assert next_run.strftime("%A") == "Sunday"
    assert (next_run.hour, next_run.minute) == (2, 0)


@pytest.mark.parametrize(
    "day_of_week, expected",
    [
        ("0", datetime(2024, 6, 16, 2, 0, tzinfo=dt_timezone.utc)),
        ("7", datetime(2024, 6, 16, 2, 0, tzinfo=dt_timezone.utc)),
        ("1", datetime(2024, 6, 17, 2, 0, tzinfo=dt_timezone.utc)),
        ("6", datetime(2024, 6, 15, 2, 0, tzinfo=dt_timezone.utc)),
        ("sun", datetime(2024, 6, 16, 2, 0, tzinfo=dt_timezone.utc)),
        ("1-5", datetime(2024, 6, 11, 2, 0, tzinfo=dt_timezone.utc)),
        ("0,6", datetime(2024, 6, 15, 2, 0, tzinfo=dt_timezone.utc)),
        ("0-6", datetime(2024, 6, 11, 2, 0, tzinfo=dt_timezone.utc)),
    ],
)
def test_crontab_weekdays_count_from_sunday(day_of_week, expected):
    trigger = crontab_trigger(f"0 2 * * {day_of_week}", "UTC")
    assert trigger.get_next_fire_time(None, MONDAY) == expected


def test_crontab_weekday_range_covers_sunday():
    trigger = crontab_trigger("0 2 * * 0-2", "UTC")
    saturday = datetime(2024, 6, 15, 12, 0, tzinfo=dt_timezone.utc)
    assert trigger.get_next_fire_time(None, saturday) == datetime(2024, 6, 16, 2, 0, tzinfo=dt_timezone.utc)


def test_crontab_needs_five_fields():
    with pytest.raises(ValueError):
        crontab_trigger("0 2 * *", "UTC")
