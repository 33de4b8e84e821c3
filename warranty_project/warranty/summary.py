from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .calculator import (
    all_service_dates,
    is_warranty_active,
    local_today,
    next_service_due,
    warranty_expiry,
)
from .config import DEFAULT_CONFIG
from .health import health_score, risk_level, total_savings, urgency_level


@dataclass(frozen=True)
class WarrantySummary:
    """Every derived value of one unit, computed for a single day."""

    serial_number: str
    as_of: date
    warranty_active: bool
    warranty_expiry: date | None
    service_dates: tuple
    next_service_due: date | None
    days_until_service: int | None
    health_score: int
    risk_level: str
    urgency: str | None
    completed_services: int
    total_savings: int

    def as_dict(self):
        return {
            "serial_number": self.serial_number,
            "as_of": self.as_of.isoformat(),
            "warranty_active": self.warranty_active,
            "warranty_expiry": self.warranty_expiry.isoformat() if self.warranty_expiry else None,
            "service_dates": [d.isoformat() for d in self.service_dates],
            "next_service_due": self.next_service_due.isoformat() if self.next_service_due else None,
            "days_until_service": self.days_until_service,
            "health_score": self.health_score,
            "risk_level": str(self.risk_level),
            "urgency": str(self.urgency) if self.urgency else None,
            "completed_services": self.completed_services,
            "total_savings": self.total_savings,
        }


def summarize(unit, today=None, config=DEFAULT_CONFIG):
    today = local_today(today)

    due = next_service_due(unit, today, config)
    days = (due - today).days if due is not None else None
    score = health_score(unit, today, config)

    return WarrantySummary(
        serial_number=unit.serial_number,
        as_of=today,
        warranty_active=is_warranty_active(unit, today),
        warranty_expiry=warranty_expiry(unit),
        service_dates=all_service_dates(unit, config),
        next_service_due=due,
        days_until_service=days,
        health_score=score,
        risk_level=risk_level(score),
        urgency=urgency_level(days) if days is not None else None,
        completed_services=unit.completed_service_count,
        total_savings=total_savings(unit, config),
    )
