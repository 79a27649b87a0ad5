"""The four Customer Experience dashboard reports.

Every report takes the database and an explicit reference date, so that a
run computes the reference date once and shares it across all reports.
Filtering, grouping and HAVING thresholds run in the store through
SQLAlchemy Core; fractional delays and half-up rounding are computed here.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, fields
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum

from sqlalchemy import func, select

from olist_reports.adapters.db.facade import DB
from olist_reports.adapters.db.models import (
    ORDER_STATUS_CANCELED,
    ORDER_STATUS_DELIVERED,
    Customer,
    Order,
    OrderItem,
    OrderReview,
    Seller,
)
from olist_reports.reports.windows import window_start

LATE_DELIVERY_WINDOW_MONTHS = 3
LATE_DELIVERY_MIN_DELAY_DAYS = 3.0
HIGH_REVENUE_THRESHOLD = 100_000
NEW_SELLER_WINDOW_MONTHS = 3
NEW_SELLER_MIN_ITEMS = 30
POSTAL_CODE_WINDOW_MONTHS = 12
POSTAL_CODE_MIN_REVIEWS = 30
POSTAL_CODE_LIMIT = 5

_SECONDS_PER_DAY = 86_400
_CENTS = Decimal("0.01")


def round_half_up(value: float | Decimal, places: Decimal = _CENTS) -> Decimal:
    """Round like SQL ROUND(): halves go away from zero."""
    return Decimal(str(value)).quantize(places, rounding=ROUND_HALF_UP)


def cents_to_amount(cents: int | float | Decimal) -> Decimal:
    """Convert a whole number of cents to a two-decimal amount."""
    return (Decimal(int(cents)) / 100).quantize(_CENTS)


# ---------------------------------------------------------------------------
# Row types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LateDeliveryRow:
    order_id: str
    purchase_timestamp: datetime
    delivered_date: datetime
    estimated_date: datetime
    delay_days: float


@dataclass(frozen=True, slots=True)
class HighRevenueSellerRow:
    seller_id: str
    seller_city: str
    seller_state: str
    total_revenue: Decimal


@dataclass(frozen=True, slots=True)
class EngagedNewSellerRow:
    seller_id: str
    seller_city: str
    seller_state: str
    products_sold: int


@dataclass(frozen=True, slots=True)
class WorstRatedPostalCodeRow:
    postal_code_prefix: str
    avg_score: Decimal
    total_reviews: int


ReportRow = (
    LateDeliveryRow
    | HighRevenueSellerRow
    | EngagedNewSellerRow
    | WorstRatedPostalCodeRow
)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


def late_deliveries(db: DB, reference_date: datetime) -> list[LateDeliveryRow]:
    """Recent non-canceled orders delivered at least 3 days after the estimate.

    Args:
        db: Database holding the Olist tables
        reference_date: Latest purchase timestamp in the dataset

    Returns:
        Rows ordered by purchase timestamp, newest first
    """
    since = window_start(reference_date, LATE_DELIVERY_WINDOW_MONTHS)
    stmt = (
        select(
            Order.order_id,
            Order.order_purchase_timestamp,
            Order.order_delivered_customer_date,
            Order.order_estimated_delivery_date,
        )
        .where(Order.order_status != ORDER_STATUS_CANCELED)
        .where(Order.order_purchase_timestamp >= since)
        .where(Order.order_delivered_customer_date.is_not(None))
        .where(Order.order_estimated_delivery_date.is_not(None))
        .where(
            Order.order_delivered_customer_date > Order.order_estimated_delivery_date
        )
        .order_by(Order.order_purchase_timestamp.desc(), Order.order_id)
    )

    rows: list[LateDeliveryRow] = []
    for order_id, purchased, delivered, estimated in db.fetch_all(stmt):
        delay_days = (delivered - estimated).total_seconds() / _SECONDS_PER_DAY
        if delay_days < LATE_DELIVERY_MIN_DELAY_DAYS:
            continue
        rows.append(
            LateDeliveryRow(
                order_id=order_id,
                purchase_timestamp=purchased,
                delivered_date=delivered,
                estimated_date=estimated,
                delay_days=delay_days,
            )
        )
    return rows


def high_revenue_sellers(
    db: DB, reference_date: datetime
) -> list[HighRevenueSellerRow]:
    """Sellers whose delivered item revenue exceeds 100,000.

    Revenue is the sum of item prices; freight is not included. The
    reference date is unused, the report covers the whole dataset.

    Prices are summed as whole cents, so a total of exactly 100,000.00 is
    compared exactly even where the store keeps prices as binary floats.
    """
    revenue_cents = func.sum(func.round(OrderItem.price * 100)).label(
        "revenue_cents"
    )
    stmt = (
        select(
            Seller.seller_id,
            Seller.seller_city,
            Seller.seller_state,
            revenue_cents,
        )
        .join(OrderItem, OrderItem.seller_id == Seller.seller_id)
        .join(Order, Order.order_id == OrderItem.order_id)
        .where(Order.order_status == ORDER_STATUS_DELIVERED)
        .group_by(Seller.seller_id, Seller.seller_city, Seller.seller_state)
        .having(revenue_cents > HIGH_REVENUE_THRESHOLD * 100)
        .order_by(revenue_cents.desc(), Seller.seller_id)
    )
    return [
        HighRevenueSellerRow(
            seller_id=seller_id,
            seller_city=city,
            seller_state=state,
            total_revenue=cents_to_amount(cents),
        )
        for seller_id, city, state, cents in db.fetch_all(stmt)
    ]


def engaged_new_sellers(db: DB, reference_date: datetime) -> list[EngagedNewSellerRow]:
    """Sellers whose first sale is recent and who already sold over 30 items.

    Items count regardless of order status, canceled orders included, both
    for the first order date and for the item count.
    """
    since = window_start(reference_date, NEW_SELLER_WINDOW_MONTHS)

    first_orders = (
        select(
            OrderItem.seller_id.label("seller_id"),
            func.min(Order.order_purchase_timestamp).label("first_order_date"),
        )
        .join(Order, Order.order_id == OrderItem.order_id)
        .group_by(OrderItem.seller_id)
        .subquery("seller_first_order")
    )
    recent_sellers = (
        select(first_orders.c.seller_id)
        .where(first_orders.c.first_order_date >= since)
        .subquery("recent_sellers")
    )

    products_sold = func.count(OrderItem.product_id).label("products_sold")
    stmt = (
        select(
            Seller.seller_id,
            Seller.seller_city,
            Seller.seller_state,
            products_sold,
        )
        .join(recent_sellers, recent_sellers.c.seller_id == Seller.seller_id)
        .join(OrderItem, OrderItem.seller_id == Seller.seller_id)
        .group_by(Seller.seller_id, Seller.seller_city, Seller.seller_state)
        .having(products_sold > NEW_SELLER_MIN_ITEMS)
        .order_by(products_sold.desc(), Seller.seller_id)
    )
    return [
        EngagedNewSellerRow(
            seller_id=seller_id,
            seller_city=city,
            seller_state=state,
            products_sold=count,
        )
        for seller_id, city, state, count in db.fetch_all(stmt)
    ]


def worst_rated_postal_codes(
    db: DB, reference_date: datetime
) -> list[WorstRatedPostalCodeRow]:
    """The five postal code prefixes with the lowest average review score.

    Only reviews of orders placed in the trailing 12 months count, and a
    prefix needs more than 30 of them. Ties on the average are broken by
    postal code prefix, ascending. The reported average is rounded from the
    exact sum and count of scores.
    """
    since = window_start(reference_date, POSTAL_CODE_WINDOW_MONTHS)
    avg_score = func.avg(OrderReview.review_score)
    score_sum = func.sum(OrderReview.review_score).label("score_sum")
    total_reviews = func.count(OrderReview.review_id).label("total_reviews")
    stmt = (
        select(Customer.customer_zip_code_prefix, score_sum, total_reviews)
        .select_from(OrderReview)
        .join(Order, Order.order_id == OrderReview.order_id)
        .join(Customer, Customer.customer_id == Order.customer_id)
        .where(Order.order_purchase_timestamp >= since)
        .group_by(Customer.customer_zip_code_prefix)
        .having(total_reviews > POSTAL_CODE_MIN_REVIEWS)
        .order_by(avg_score.asc(), Customer.customer_zip_code_prefix)
        .limit(POSTAL_CODE_LIMIT)
    )
    return [
        WorstRatedPostalCodeRow(
            postal_code_prefix=prefix,
            avg_score=round_half_up(Decimal(score_total) / count),
            total_reviews=count,
        )
        for prefix, score_total, count in db.fetch_all(stmt)
    ]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class ReportName(StrEnum):
    LATE_DELIVERIES = "late_deliveries"
    HIGH_REVENUE_SELLERS = "high_revenue_sellers"
    ENGAGED_NEW_SELLERS = "engaged_new_sellers"
    WORST_RATED_POSTAL_CODES = "worst_rated_postal_codes"


@dataclass(frozen=True, slots=True)
class ReportDefinition:
    """A report function and the column order of its output."""

    name: ReportName
    compute: Callable[[DB, datetime], list[ReportRow]]
    row_type: type

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(field.name for field in fields(self.row_type))


REPORTS: dict[ReportName, ReportDefinition] = {
    ReportName.LATE_DELIVERIES: ReportDefinition(
        ReportName.LATE_DELIVERIES, late_deliveries, LateDeliveryRow
    ),
    ReportName.HIGH_REVENUE_SELLERS: ReportDefinition(
        ReportName.HIGH_REVENUE_SELLERS, high_revenue_sellers, HighRevenueSellerRow
    ),
    ReportName.ENGAGED_NEW_SELLERS: ReportDefinition(
        ReportName.ENGAGED_NEW_SELLERS, engaged_new_sellers, EngagedNewSellerRow
    ),
    ReportName.WORST_RATED_POSTAL_CODES: ReportDefinition(
        ReportName.WORST_RATED_POSTAL_CODES,
        worst_rated_postal_codes,
        WorstRatedPostalCodeRow,
    ),
}
