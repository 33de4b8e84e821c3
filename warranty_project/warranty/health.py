from django.db import models

from .calculator import (
    local_today,
    days_until_service,
    is_warranty_active,
    months_since_sale,
)
from .config import DEFAULT_CONFIG


class RiskLevel(models.TextChoices):
    LOW = "LOW", "Low"
    MEDIUM = "MEDIUM", "Medium"
    HIGH = "HIGH", "High"


class Urgency(models.TextChoices):
    OVERDUE = "OVERDUE", "Overdue"
    URGENT = "URGENT", "Urgent"
    SOON = "SOON", "Soon"
    UPCOMING = "UPCOMING", "Upcoming"


# ============================================================
# PENALTY TIERS
# ============================================================

def timeliness_penalty(days):
    """Points lost for how close or late the next service is."""
    if days is None or days > 7:
        return 0
    if days >= 0:
        return 5
    if days >= -7:
        return 10
    if days >= -14:
        return 20
    if days >= -30:
        return 30
    return 40


def completion_penalty(completed, expected):
    if expected <= 0:
        return 0
    ratio = completed / expected
    if ratio >= 1.0:
        return 0
    if ratio >= 0.75:
        return 10
    if ratio >= 0.5:
        return 25
    return 40


def expected_service_count(unit, today=None, config=DEFAULT_CONFIG):
    """
    Services that should have happened by now.

    Lapsed warranties count the whole warranty period; active ones
    count the months elapsed since sale.
    """
    if unit.sale is None:
        return 0

    interval = config.service_interval_months
    if is_warranty_active(unit, today):
        return months_since_sale(unit, today) // interval
    return unit.sale.warranty_period_months // interval


# ============================================================
# SCORE
# ============================================================

def health_score(unit, today=None, config=DEFAULT_CONFIG):
    """
    0-100, higher is healthier. Units without a sale score 0.

    The age bonus needs more than six whole months since sale: six
    months and 25 days still counts as six.
    """
    if unit.sale is None:
        return 0

    today = local_today(today)
    score = 100

    score -= timeliness_penalty(days_until_service(unit, today, config))

    completed = unit.completed_service_count
    expected = expected_service_count(unit, today, config)
    score -= completion_penalty(completed, expected)

    age_months = months_since_sale(unit, today)
    if age_months > 6 and completed >= expected:
        score += min(10, age_months)

    return max(0, min(100, score))


def risk_level(score):
    if score >= 80:
        return RiskLevel.LOW
    if score >= 60:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def urgency_level(days_until):
    if days_until <= 0:
        return Urgency.OVERDUE
    if days_until <= 3:
        return Urgency.URGENT
    if days_until <= 7:
        return Urgency.SOON
    return Urgency.UPCOMING


# ============================================================
# SAVINGS
# ============================================================

def total_savings(unit, config=DEFAULT_CONFIG):
    """Breakdown cost avoided by every completed preventive visit."""
    return unit.completed_service_count * config.savings_per_service
