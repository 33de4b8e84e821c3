import json

import pytest
from django.apps import apps
from django.urls import reverse

from notifications import jobs
from notifications.jobs import DEFAULT_JOBS
from notifications.models import ActionLog
from notifications.scheduler import JobScheduler
from notifications.services.action_log import record_action

pytestmark = pytest.mark.django_db


@pytest.fixture
def job_scheduler(monkeypatch):
    """Fresh, never-started scheduler in place of the process-wide one."""
    sched = JobScheduler(DEFAULT_JOBS, timezone_name="UTC")
    monkeypatch.setattr(apps.get_app_config("notifications"), "scheduler", sched)
    return sched


@pytest.fixture
def fake_sweep(monkeypatch):
    calls = []

    def _process(*, now=None, config=None):
        calls.append(now)
        return 3

    monkeypatch.setattr(jobs, "process_reminders", _process)
    return calls


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


# ============================================================
# /cron/daily-reminders/
# ============================================================

def test_daily_reminders_open_without_secret(client, settings, job_scheduler, fake_sweep):
    settings.CRON_SECRET = ""

    response = client.get(reverse("notifications:cron-daily-reminders"))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["reminders_sent"] == 3
    assert "timestamp" in body
    assert len(fake_sweep) == 1


def test_daily_reminders_requires_bearer_secret(client, settings, job_scheduler, fake_sweep):
    settings.CRON_SECRET = "s3cret"
    url = reverse("notifications:cron-daily-reminders")

    assert client.post(url).status_code == 401
    assert client.post(url, HTTP_AUTHORIZATION="Bearer wrong").status_code == 401
    assert client.post(url, HTTP_AUTHORIZATION="s3cret").status_code == 401
    assert fake_sweep == []

    response = client.post(url, HTTP_AUTHORIZATION="Bearer s3cret")
    assert response.status_code == 200
    assert response.json()["reminders_sent"] == 3


def test_daily_reminders_failure_returns_500(client, settings, job_scheduler, monkeypatch):
    settings.CRON_SECRET = ""

    def broken(*, now=None, config=None):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(jobs, "process_reminders", broken)

    response = client.get(reverse("notifications:cron-daily-reminders"))

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to process reminders"}


def test_daily_reminders_counts_as_job_run(client, settings, job_scheduler, fake_sweep):
    settings.CRON_SECRET = ""

    client.get(reverse("notifications:cron-daily-reminders"))

    status = job_scheduler.get_job_status(jobs.DAILY_REMINDERS)
    assert status.total_runs == 1
    assert status.total_success == 1


# ============================================================
# /cron/status/
# ============================================================

def test_status_lists_jobs_with_summary(client, job_scheduler, fake_sweep):
    job_scheduler.ensure_initialized()
    job_scheduler.trigger_job(jobs.DAILY_REMINDERS)

    response = client.get(reverse("notifications:cron-status"))

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == {
        "total_jobs": 2,
        "total_runs": 1,
        "total_success": 1,
        "total_failures": 0,
        "success_rate": "100.00%",
    }
    by_name = {job["job_name"]: job for job in body["jobs"]}
    assert by_name["daily-reminders"]["schedule"] == "0 9 * * *"
    assert by_name["daily-reminders"]["health"] == "HEALTHY"
    assert by_name["weekly-health-check"]["schedule"] == "0 2 * * 0"
    assert by_name["weekly-health-check"]["health"] == "UNKNOWN"
    assert by_name["weekly-health-check"]["next_run"] is not None


def test_manual_trigger_runs_job(client, settings, job_scheduler, fake_sweep):
    settings.CRON_SECRET = "s3cret"

    response = post_json(
        client,
        reverse("notifications:cron-status"),
        {"job_name": "daily-reminders", "secret": "s3cret"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["result"] == {"success": True, "reminders_sent": 3}


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"job_name": "daily-reminders", "secret": "wrong"}, 401),
        ({"job_name": "daily-reminders"}, 401),
        ({"secret": "s3cret"}, 400),
        ({"job_name": "no-such-job", "secret": "s3cret"}, 404),
    ],
)
def test_manual_trigger_rejections(client, settings, job_scheduler, fake_sweep, payload, status_code):
    settings.CRON_SECRET = "s3cret"

    response = post_json(client, reverse("notifications:cron-status"), payload)

    assert response.status_code == status_code
    assert response.json()["success"] is False
    assert fake_sweep == []


def test_manual_trigger_refused_when_no_secret_configured(client, settings, job_scheduler, fake_sweep):
    settings.CRON_SECRET = ""

    response = post_json(
        client,
        reverse("notifications:cron-status"),
        {"job_name": "daily-reminders", "secret": ""},
    )

    assert response.status_code == 401


def test_manual_trigger_invalid_json(client, settings, job_scheduler):
    settings.CRON_SECRET = "s3cret"

    response = client.post(
        reverse("notifications:cron-status"),
        data="{not json",
        content_type="application/json",
    )

    assert response.status_code == 400


def test_manual_trigger_job_failure_returns_details(client, settings, job_scheduler, monkeypatch):
    settings.CRON_SECRET = "s3cret"

    def broken(*, now=None, config=None):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(jobs, "process_reminders", broken)

    response = post_json(
        client,
        reverse("notifications:cron-status"),
        {"job_name": "daily-reminders", "secret": "s3cret"},
    )

    assert response.status_code == 500
    assert response.json()["details"] == "database unavailable"
    assert job_scheduler.get_job_status("daily-reminders").total_failures == 1


# ============================================================
# /actions/log/
# ============================================================

def test_action_log_post_creates_entry(client, make_machine):
    machine = make_machine(serial="SN-LOG-1")

    response = post_json(
        client,
        reverse("notifications:action-logs"),
        {
            "serial_number": "SN-LOG-1",
            "action_type": "WARRANTY_VIEWED",
            "channel": "WEB",
            "metadata": {"page": "warranty"},
        },
    )

    assert response.status_code == 201
    entry = ActionLog.objects.get(machine=machine)
    assert entry.action_type == ActionLog.ActionType.WARRANTY_VIEWED
    assert entry.metadata == {"page": "warranty"}
    assert entry.reserved_for is None
    assert response.json()["action_log"]["serial_number"] == "SN-LOG-1"


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"action_type": "REMINDER_SENT", "channel": "EMAIL"}, 400),
        ({"serial_number": "SN-LOG-1", "channel": "EMAIL"}, 400),
        ({"serial_number": "SN-LOG-1", "action_type": "REMINDER_SENT"}, 400),
        ({"serial_number": "SN-LOG-1", "action_type": "PHONED", "channel": "EMAIL"}, 400),
        ({"serial_number": "SN-LOG-1", "action_type": "REMINDER_SENT", "channel": "FAX"}, 400),
        ({"serial_number": "SN-LOG-1", "action_type": "REMINDER_SENT", "channel": "EMAIL", "metadata": [1]}, 400),
        ({"serial_number": "SN-MISSING", "action_type": "REMINDER_SENT", "channel": "EMAIL"}, 404),
    ],
)
def test_action_log_post_validation(client, make_machine, payload, status_code):
    make_machine(serial="SN-LOG-1")

    response = post_json(client, reverse("notifications:action-logs"), payload)

    assert response.status_code == status_code
    assert ActionLog.objects.count() == 0


def test_action_log_get_filters_and_orders(client, make_machine, reminder_now):
    first = make_machine(serial="SN-A")
    second = make_machine(serial="SN-B")
    for hours, machine, action in [
        (1, first, ActionLog.ActionType.REMINDER_SENT),
        (2, first, ActionLog.ActionType.LINK_CLICKED),
        (3, second, ActionLog.ActionType.REMINDER_SENT),
    ]:
        record_action(
            machine=machine,
            action_type=action,
            channel=ActionLog.Channel.EMAIL,
            created_at=reminder_now.replace(hour=hours),
        )

    url = reverse("notifications:action-logs")

    body = client.get(url).json()
    assert body["count"] == 3
    assert [e["serial_number"] for e in body["action_logs"]] == ["SN-B", "SN-A", "SN-A"]

    body = client.get(url, {"serial_number": "SN-A"}).json()
    assert body["count"] == 2

    body = client.get(url, {"serial_number": "SN-A", "action_type": "REMINDER_SENT"}).json()
    assert body["count"] == 1

    body = client.get(url, {"limit": 1}).json()
    assert body["count"] == 1
    assert body["action_logs"][0]["serial_number"] == "SN-B"


def test_action_log_get_rejects_bad_limit(client):
    response = client.get(reverse("notifications:action-logs"), {"limit": "many"})
    assert response.status_code == 400
