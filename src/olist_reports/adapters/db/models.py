from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    TIMESTAMP,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)

# Foreign keys are not enforced by SQLite by default. Orphan rows are reported
# by olist_reports.reports.integrity.


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


class Customer(Base):
    """Customer model."""

    __tablename__ = "customers"

    customer_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    customer_unique_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    customer_zip_code_prefix: Mapped[str] = mapped_column(String(10), nullable=False)
    customer_city: Mapped[str | None] = mapped_column(String, nullable=True)
    customer_state: Mapped[str | None] = mapped_column(String(2), nullable=True)

    # Relationships
    orders: Mapped[list[Order]] = relationship("Order", back_populates="customer")


class Seller(Base):
    """Seller model."""

    __tablename__ = "sellers"

    seller_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    seller_zip_code_prefix: Mapped[str | None] = mapped_column(
        String(10), nullable=True
    )
    seller_city: Mapped[str] = mapped_column(String, nullable=False)
    seller_state: Mapped[str] = mapped_column(String(2), nullable=False)

    # Relationships
    items: Mapped[list[OrderItem]] = relationship("OrderItem", back_populates="seller")


class Order(Base):
    """Order model - one row per customer purchase."""

    __tablename__ = "orders"

    order_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    customer_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("customers.customer_id"), nullable=False
    )
    order_status: Mapped[str] = mapped_column(String(20), nullable=False)
    order_purchase_timestamp: Mapped[datetime] = mapped_column(
        TIMESTAMP, nullable=False, index=True
    )
    order_delivered_customer_date: Mapped[datetime | None] = mapped_column(
        TIMESTAMP, nullable=True
    )
    order_estimated_delivery_date: Mapped[datetime | None] = mapped_column(
        TIMESTAMP, nullable=True
    )

    # Relationships
    customer: Mapped[Customer] = relationship("Customer", back_populates="orders")
    items: Mapped[list[OrderItem]] = relationship("OrderItem", back_populates="order")
    reviews: Mapped[list[OrderReview]] = relationship(
        "OrderReview", back_populates="order"
    )


class OrderItem(Base):
    """Order item model - one row per unit sold, positioned within its order."""

    __tablename__ = "order_items"

    order_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("orders.order_id"), primary_key=True
    )
    order_item_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[str] = mapped_column(String(32), nullable=False)
    seller_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("sellers.seller_id"), nullable=False, index=True
    )
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    freight_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )

    # Relationships
    order: Mapped[Order] = relationship("Order", back_populates="items")
    seller: Mapped[Seller] = relationship("Seller", back_populates="items")


class OrderReview(Base):
    """Order review model.

    Review ids repeat across orders in the public dataset, so the key is the
    (review_id, order_id) pair.
    """

    __tablename__ = "order_reviews"

    review_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    order_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("orders.order_id"), primary_key=True
    )
    review_score: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationship
    order: Mapped[Order] = relationship("Order", back_populates="reviews")


# Canonical Olist status values referenced by the reports.
ORDER_STATUS_CANCELED = "canceled"
ORDER_STATUS_DELIVERED = "delivered"
