"""
Read-only snapshots of a machine and its history.

The calculators work on these plain values instead of ORM rows so
they stay pure and can be exercised without a database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class SaleRecord:
    sale_date: date
    warranty_period_months: int
    customer_name: str = ""
    customer_email: str = ""
    reminder_opt_out: bool = False

    @property
    def has_email(self) -> bool:
        return bool(self.customer_email and self.customer_email.strip())


@dataclass(frozen=True)
class ServiceEvent:
    created_at: datetime | None = None
    visit_status: str | None = None
    visit_date: date | None = None

    @property
    def is_completed(self) -> bool:
        return self.visit_status == COMPLETED


@dataclass(frozen=True)
class Unit:
    serial_number: str
    model_name: str
    sale: SaleRecord | None = None
    service_events: tuple = ()

    @property
    def completed_service_count(self) -> int:
        return sum(1 for event in self.service_events if event.is_completed)

    @classmethod
    def from_machine(cls, machine) -> "Unit":
        """
        Snapshot a ``machines.Machine``.

        Expects ``sale``, ``machine_model`` and
        ``service_requests__service_visit`` to be loaded or loadable.
        """
        sale = getattr(machine, "sale", None)

        sale_record = None
        if sale is not None:
            warranty_months = sale.warranty_period_months
            if warranty_months is None:
                warranty_months = machine.machine_model.warranty_period_months

            sale_record = SaleRecord(
                sale_date=sale.sale_date,
                warranty_period_months=warranty_months,
                customer_name=sale.customer_name,
                customer_email=sale.customer_email,
                reminder_opt_out=sale.reminder_opt_out,
            )

        events = []
        for request in machine.service_requests.all():
            visit = getattr(request, "service_visit", None)
            events.append(
                ServiceEvent(
                    created_at=request.created_at,
                    visit_status=visit.status if visit else None,
                    visit_date=visit.visit_date if visit else None,
                )
            )

        return cls(
            serial_number=machine.serial_number,
            model_name=machine.machine_model.name,
            sale=sale_record,
            service_events=tuple(events),
        )
