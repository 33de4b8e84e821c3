"""
Shared fixtures.

Provides:
- A machine model with a 12-month warranty
- ``make_machine`` factory for sold machines with service history
- ``reminder_now``: fixed sweep clock (2024-06-10 09:00 local)
"""

from datetime import datetime, timedelta

import pytest
from django.utils import timezone

from machines.models import Machine, MachineModel, Sale, ServiceRequest, ServiceVisit
from warranty.calculator import add_months


@pytest.fixture
def machine_model(db):
    return MachineModel.objects.create(name="Compressor X200", warranty_period_months=12)


@pytest.fixture
def reminder_now():
    return timezone.make_aware(datetime(2024, 6, 10, 9, 0))


@pytest.fixture
def make_machine(db, machine_model):
    counter = {"n": 0}

    def _make(
        *,
        sale_date=None,
        serial=None,
        email="customer@example.com",
        customer_name="Asha Rao",
        opt_out=False,
        completed=0,
        other_statuses=(),
        model=None,
    ):
        counter["n"] += 1
        machine = Machine.objects.create(
            serial_number=serial or f"SN-{counter['n']:04d}",
            machine_model=model or machine_model,
        )

        if sale_date is not None:
            Sale.objects.create(
                machine=machine,
                sale_date=sale_date,
                customer_name=customer_name,
                customer_email=email,
                reminder_opt_out=opt_out,
            )

        statuses = [ServiceVisit.Status.COMPLETED] * completed + list(other_statuses)
        for status in statuses:
            request = ServiceRequest.objects.create(machine=machine)
            ServiceVisit.objects.create(service_request=request, status=status, visit_date=sale_date)

        return machine

    return _make


@pytest.fixture
def machine_due_in(make_machine, reminder_now):
    """Sold machine whose first service falls ``days`` from the sweep day."""
    today = timezone.localdate(reminder_now)

    def _make(days, **kwargs):
        first_service = today + timedelta(days=days)
        return make_machine(sale_date=add_months(first_service, -3), **kwargs)

    return _make
