"""Referential integrity checks across the Olist tables."""

from __future__ import annotations

from enum import StrEnum

from sqlalchemy import select
from sqlalchemy.orm import InstrumentedAttribute

from olist_reports.adapters.db.facade import DB
from olist_reports.adapters.db.models import (
    Customer,
    Order,
    OrderItem,
    OrderReview,
    Seller,
)
from olist_reports.reports.errors import IntegrityViolation, ReferentialIntegrityError
from olist_reports.reports.logger import ReportLogger


class IntegrityPolicy(StrEnum):
    """What a report run does when orphan rows are found.

    RAISE aborts the run with ReferentialIntegrityError. SKIP logs every
    violation and lets the reports' inner joins drop the orphan rows.
    """

    RAISE = "raise"
    SKIP = "skip"


# (child column, parent primary key) pairs that must resolve.
_Reference = tuple[InstrumentedAttribute[str], InstrumentedAttribute[str]]
_REFERENCES: tuple[_Reference, ...] = (
    (OrderItem.order_id, Order.order_id),
    (OrderItem.seller_id, Seller.seller_id),
    (OrderReview.order_id, Order.order_id),
    (Order.customer_id, Customer.customer_id),
)


def find_violations(db: DB) -> list[IntegrityViolation]:
    """Find every foreign key value with no matching parent row.

    Each distinct missing key is reported once per reference.

    Args:
        db: Database holding the Olist tables

    Returns:
        Violations ordered by reference, then by missing key
    """
    violations: list[IntegrityViolation] = []
    for child_column, parent_key in _REFERENCES:
        stmt = (
            select(child_column)
            .distinct()
            .outerjoin(parent_key.class_, child_column == parent_key)
            .where(parent_key.is_(None))
            .order_by(child_column)
        )
        for row in db.fetch_all(stmt):
            violations.append(
                IntegrityViolation(
                    table=child_column.class_.__tablename__,
                    column=child_column.key,
                    missing_table=parent_key.class_.__tablename__,
                    key=row[0],
                )
            )
    return violations


def enforce_integrity(
    db: DB,
    policy: IntegrityPolicy,
    report_logger: ReportLogger | None = None,
) -> list[IntegrityViolation]:
    """Run the integrity check and apply ``policy``.

    Returns:
        The violations found (always empty under RAISE, since any violation
        raises)

    Raises:
        ReferentialIntegrityError: If violations exist and policy is RAISE
    """
    report_logger = report_logger or ReportLogger()
    violations = find_violations(db)
    if not violations:
        report_logger.integrity_clean()
        return []

    report_logger.integrity_summary(len(violations), policy.value)
    if policy is IntegrityPolicy.RAISE:
        raise ReferentialIntegrityError(violations)

    for violation in violations:
        report_logger.integrity_violation_skipped(violation)
    return violations
