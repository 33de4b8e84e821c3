from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@dataclass(frozen=True)
class EngineConfig:
    """
    Tunables of the warranty and reminder engine.

    Built once from Django settings and passed to the calculators
    and the dispatcher instead of being read ad hoc.
    """

    service_interval_months: int = 3
    reminder_trigger_days: tuple = (15, 7, 3, 0, -3)
    avg_preventive_cost: int = 15000
    avg_breakdown_cost: int = 200000
    schedule_link_max_age_days: int = 7

    def __post_init__(self):
        if self.service_interval_months < 1:
            raise ImproperlyConfigured("SERVICE_INTERVAL_MONTHS must be at least 1")
        if not self.reminder_trigger_days:
            raise ImproperlyConfigured("REMINDER_TRIGGER_DAYS must not be empty")
        if self.avg_breakdown_cost < self.avg_preventive_cost:
            raise ImproperlyConfigured(
                "AVG_BREAKDOWN_COST must not be lower than AVG_PREVENTIVE_COST"
            )

    @property
    def savings_per_service(self):
        return self.avg_breakdown_cost - self.avg_preventive_cost

    @classmethod
    def from_settings(cls):
        defaults = cls()
        return cls(
            service_interval_months=getattr(
                settings, "SERVICE_INTERVAL_MONTHS", defaults.service_interval_months
            ),
            reminder_trigger_days=tuple(
                getattr(settings, "REMINDER_TRIGGER_DAYS", defaults.reminder_trigger_days)
            ),
            avg_preventive_cost=getattr(
                settings, "AVG_PREVENTIVE_COST", defaults.avg_preventive_cost
            ),
            avg_breakdown_cost=getattr(
                settings, "AVG_BREAKDOWN_COST", defaults.avg_breakdown_cost
            ),
            schedule_link_max_age_days=getattr(
                settings, "SCHEDULE_LINK_MAX_AGE_DAYS", defaults.schedule_link_max_age_days
            ),
        )


DEFAULT_CONFIG = EngineConfig()
