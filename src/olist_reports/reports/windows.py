"""Reference date resolution and rolling calendar-month windows."""

from __future__ import annotations

import calendar
from datetime import datetime

from sqlalchemy import func, select

from olist_reports.adapters.db.facade import DB
from olist_reports.adapters.db.models import Order
from olist_reports.reports.errors import EmptyDatasetError


def resolve_reference_date(db: DB) -> datetime:
    """Return the latest purchase timestamp in the dataset.

    All "recent" windows are anchored on this value instead of the wall clock,
    so reports over a historical snapshot are reproducible.

    Args:
        db: Database holding the orders table

    Returns:
        Maximum order_purchase_timestamp across all orders

    Raises:
        EmptyDatasetError: If there are no orders
    """
    reference = db.fetch_scalar(select(func.max(Order.order_purchase_timestamp)))
    if reference is None:
        raise EmptyDatasetError()
    return reference


def subtract_months(value: datetime, months: int) -> datetime:
    """Move ``value`` back by whole calendar months.

    The day of month is clamped to the last day of the target month, so
    2018-05-31 minus 3 months is 2018-02-28.
    """
    if months < 0:
        raise ValueError(f"months must be >= 0, got {months}")
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def window_start(reference_date: datetime, months: int) -> datetime:
    """Start of the trailing ``months`` window ending at ``reference_date``.

    The reference date is truncated to midnight before the month subtraction,
    so every purchase on the boundary day falls inside the window.
    """
    day_start = reference_date.replace(hour=0, minute=0, second=0, microsecond=0)
    return subtract_months(day_start, months)
