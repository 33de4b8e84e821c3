"""
Email rendering and transport for service reminders.

The dispatcher treats ``render_service_reminder`` as a black box:
it hands over the reminder data and passes whatever comes back to
``send_email``.
"""

from dataclasses import dataclass

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from warranty.health import RiskLevel, Urgency, risk_level, urgency_level

HTML_TEMPLATE = "notifications/email/service_reminder.html"
TEXT_TEMPLATE = "notifications/email/service_reminder.txt"

URGENCY_COLORS = {
    Urgency.OVERDUE: "#dc2626",
    Urgency.URGENT: "#f59e0b",
    Urgency.SOON: "#3b82f6",
    Urgency.UPCOMING: "#10b981",
}

HEALTH_COLORS = {
    RiskLevel.LOW: "#10b981",
    RiskLevel.MEDIUM: "#f59e0b",
    RiskLevel.HIGH: "#dc2626",
}


@dataclass(frozen=True)
class EmailContent:
    subject: str
    text_body: str
    html_body: str


def reminder_subject(machine_name, days_until_service):
    if days_until_service < 0:
        return f"Overdue: Service Required - {machine_name}"
    if days_until_service == 0:
        return f"Service Due Today - {machine_name}"

    urgency = urgency_level(days_until_service)
    if urgency == Urgency.URGENT:
        return f"Urgent: Service Due Soon - {machine_name}"
    if urgency == Urgency.SOON:
        return f"Reminder: Service Due in {days_until_service} Days - {machine_name}"
    return f"Service Reminder - {machine_name}"


def render_service_reminder(data):
    """
    ``data`` keys: customer_name, machine_name, serial_number,
    days_until_service, health_score, total_savings,
    warranty_active, warranty_expiry_date, schedule_url.
    """
    days = data["days_until_service"]
    urgency = urgency_level(days)

    context = {
        **data,
        "customer_name": data.get("customer_name") or "Customer",
        "urgency": urgency,
        "urgency_color": URGENCY_COLORS[urgency],
        "health_color": HEALTH_COLORS[risk_level(data["health_score"])],
        "days_overdue": abs(days) if days < 0 else 0,
        "is_overdue": days < 0,
        "total_savings_display": f"{data['total_savings']:,}",
    }

    return EmailContent(
        subject=reminder_subject(data["machine_name"], days),
        text_body=render_to_string(TEXT_TEMPLATE, context),
        html_body=render_to_string(HTML_TEMPLATE, context),
    )


def send_email(content, *, to, subject_prefix=""):
    """Deliver ``content``; transport errors propagate to the caller."""
    message = EmailMultiAlternatives(
        subject=f"{subject_prefix}{content.subject}",
        body=content.text_body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to],
    )
    message.attach_alternative(content.html_body, "text/html")
    message.send(fail_silently=False)
