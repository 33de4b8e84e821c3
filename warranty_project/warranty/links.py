"""
Signed, time-limited links that let a customer schedule a service
straight from a reminder email.
"""

from datetime import timedelta

from django.conf import settings
from django.core import signing
from django.urls import reverse

from .config import DEFAULT_CONFIG

SCHEDULE_LINK_SALT = "warranty.schedule-service"


def make_schedule_token(serial_number):
    return signing.dumps({"serial_number": serial_number}, salt=SCHEDULE_LINK_SALT)


def read_schedule_token(token, config=DEFAULT_CONFIG):
    """
    Return the serial number carried by ``token``.

    Raises ``signing.SignatureExpired`` for stale links and
    ``signing.BadSignature`` for tampered ones.
    """
    payload = signing.loads(
        token,
        salt=SCHEDULE_LINK_SALT,
        max_age=timedelta(days=config.schedule_link_max_age_days),
    )
    return payload["serial_number"]


def build_schedule_url(serial_number):
    path = reverse("warranty:schedule-service", args=[serial_number])
    token = make_schedule_token(serial_number)
    return f"{settings.SITE_URL}{path}?token={token}"
