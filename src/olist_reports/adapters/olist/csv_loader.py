"""Olist CSV loader for the five tables used by the reports."""

from __future__ import annotations

import csv
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from olist_reports.adapters.db.facade import DB
from olist_reports.adapters.db.models import (
    Customer,
    Order,
    OrderItem,
    OrderReview,
    Seller,
)

ORDERS_CSV = "olist_orders_dataset.csv"
ORDER_ITEMS_CSV = "olist_order_items_dataset.csv"
SELLERS_CSV = "olist_sellers_dataset.csv"
CUSTOMERS_CSV = "olist_customers_dataset.csv"
REVIEWS_CSV = "olist_order_reviews_dataset.csv"
_ALL_CSVS = (CUSTOMERS_CSV, SELLERS_CSV, ORDERS_CSV, ORDER_ITEMS_CSV, REVIEWS_CSV)


@dataclass
class LoadSummary:
    """Number of rows loaded per table."""

    customers: int
    sellers: int
    orders: int
    order_items: int
    order_reviews: int
    duplicate_reviews_skipped: int = 0

    def as_counts(self) -> dict[str, int]:
        return {
            "customers": self.customers,
            "sellers": self.sellers,
            "orders": self.orders,
            "order_items": self.order_items,
            "order_reviews": self.order_reviews,
        }


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an Olist timestamp (e.g. "2017-10-02 10:56:33"); empty means NULL."""
    if value is None or not value.strip():
        return None
    return datetime.fromisoformat(value.strip())


class OlistCSVLoader:
    """Loads the public Olist dataset CSV files into a DB."""

    def __init__(self, csv_dir: Path):
        """Initialize loader with CSV directory.

        Args:
            csv_dir: Directory containing the olist_*_dataset.csv files
        """
        self._csv_dir = csv_dir

    def load_into(self, db: DB) -> LoadSummary:
        """Create the schema and load all five tables.

        Parents are inserted before children so that databases enforcing
        foreign keys accept the rows.

        Returns:
            LoadSummary with per-table row counts

        Raises:
            FileNotFoundError: If one of the expected CSV files is missing
        """
        for name in _ALL_CSVS:
            self._path(name)

        db.create_schema()
        customers = db.add_customers(self.iter_customers())
        sellers = db.add_sellers(self.iter_sellers())
        orders = db.add_orders(self.iter_orders())
        order_items = db.add_order_items(self.iter_order_items())

        reviews = list(self.iter_reviews())
        unique_reviews = {(r.review_id, r.order_id): r for r in reviews}
        order_reviews = db.add_reviews(unique_reviews.values())

        return LoadSummary(
            customers=customers,
            sellers=sellers,
            orders=orders,
            order_items=order_items,
            order_reviews=order_reviews,
            duplicate_reviews_skipped=len(reviews) - len(unique_reviews),
        )

    def iter_customers(self) -> Iterator[Customer]:
        for row in self._read(CUSTOMERS_CSV):
            yield Customer(
                customer_id=row["customer_id"],
                customer_unique_id=row.get("customer_unique_id") or None,
                customer_zip_code_prefix=row["customer_zip_code_prefix"].strip(),
                customer_city=row.get("customer_city") or None,
                customer_state=row.get("customer_state") or None,
            )

    def iter_sellers(self) -> Iterator[Seller]:
        for row in self._read(SELLERS_CSV):
            yield Seller(
                seller_id=row["seller_id"],
                seller_zip_code_prefix=row.get("seller_zip_code_prefix") or None,
                seller_city=row["seller_city"],
                seller_state=row["seller_state"],
            )

    def iter_orders(self) -> Iterator[Order]:
        for row in self._read(ORDERS_CSV):
            purchased = parse_timestamp(row["order_purchase_timestamp"])
            if purchased is None:
                raise ValueError(
                    f"{ORDERS_CSV}: order {row['order_id']} has no purchase timestamp"
                )
            yield Order(
                order_id=row["order_id"],
                customer_id=row["customer_id"],
                order_status=row["order_status"],
                order_purchase_timestamp=purchased,
                order_delivered_customer_date=parse_timestamp(
                    row.get("order_delivered_customer_date")
                ),
                order_estimated_delivery_date=parse_timestamp(
                    row.get("order_estimated_delivery_date")
                ),
            )

    def iter_order_items(self) -> Iterator[OrderItem]:
        for row in self._read(ORDER_ITEMS_CSV):
            yield OrderItem(
                order_id=row["order_id"],
                order_item_id=int(row["order_item_id"]),
                product_id=row["product_id"],
                seller_id=row["seller_id"],
                price=Decimal(row["price"]),
                freight_value=Decimal(row.get("freight_value") or "0"),
            )

    def iter_reviews(self) -> Iterator[OrderReview]:
        for row in self._read(REVIEWS_CSV):
            yield OrderReview(
                review_id=row["review_id"],
                order_id=row["order_id"],
                review_score=int(row["review_score"]),
            )

    def _path(self, name: str) -> Path:
        path = self._csv_dir / name
        if not path.exists():
            raise FileNotFoundError(f"Missing Olist CSV file: {path}")
        return path

    def _read(self, name: str) -> Iterator[dict[str, str]]:
        # Review comments contain quoted newlines
        with open(self._path(name), newline="", encoding="utf-8") as f:
            yield from csv.DictReader(f)
