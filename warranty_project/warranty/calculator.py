"""
Warranty and service-date calculations.

Every function here is pure: it reads a ``Unit`` snapshot and a
calendar day and never touches the database. ``today`` defaults to
the current local date.
"""

from functools import lru_cache

from dateutil.relativedelta import relativedelta
from django.utils import timezone

from .config import DEFAULT_CONFIG


def local_today(today=None):
    return today if today is not None else timezone.localdate()


def add_months(value, months):
    """Calendar month-add; day 31 + 1 month lands on the last day of the shorter month."""
    return value + relativedelta(months=months)


# ============================================================
# WARRANTY
# ============================================================

def warranty_expiry(unit):
    if unit.sale is None:
        return None
    return add_months(unit.sale.sale_date, unit.sale.warranty_period_months)


def is_warranty_active(unit, today=None):
    """A warranty expiring today is still active."""
    expiry = warranty_expiry(unit)
    if expiry is None:
        return False
    return local_today(today) <= expiry


def months_since_sale(unit, today=None):
    if unit.sale is None:
        return 0
    delta = relativedelta(local_today(today), unit.sale.sale_date)
    return max(0, delta.years * 12 + delta.months)


# ============================================================
# SERVICE LADDER
# ============================================================

@lru_cache(maxsize=4096)
def _ladder(sale_date, warranty_months, interval_months):
    # Each rung is measured from the sale date so clamped month ends do not drift
    expiry = add_months(sale_date, warranty_months)
    dates = []
    k = 1
    while True:
        rung = add_months(sale_date, k * interval_months)
        if rung > expiry:
            break
        dates.append(rung)
        k += 1
    return tuple(dates)


def all_service_dates(unit, config=DEFAULT_CONFIG):
    if unit.sale is None:
        return ()
    return _ladder(
        unit.sale.sale_date,
        unit.sale.warranty_period_months,
        config.service_interval_months,
    )


def next_service_due(unit, today=None, config=DEFAULT_CONFIG):
    """
    The service date the customer should act on.

    A missed service stays "next due" until the following rung
    passes; otherwise the earliest upcoming rung is returned.
    """
    today = local_today(today)
    if not is_warranty_active(unit, today):
        return None

    overdue = None
    upcoming = None
    for rung in all_service_dates(unit, config):
        if rung < today:
            overdue = rung
        elif upcoming is None:
            upcoming = rung

    return overdue if overdue is not None else upcoming


def days_until_service(unit, today=None, config=DEFAULT_CONFIG):
    today = local_today(today)
    due = next_service_due(unit, today, config)
    if due is None:
        return None
    return (due - today).days
