from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Row
from sqlalchemy.orm import (
    Session,
    sessionmaker,
)
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import Select

from olist_reports.adapters.db.models import (
    Base,
    Customer,
    Order,
    OrderItem,
    OrderReview,
    Seller,
)


class DB:
    """Database service layer over the five Olist tables."""

    def __init__(self, url: str) -> None:
        """Initialize database connection.

        Args:
            url: Database URL (e.g., "sqlite:///olist.db")
        """
        self._url = url
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty DB
            self._engine = create_engine(
                url,
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self._engine = create_engine(url, echo=False)
        self._session_factory = sessionmaker(bind=self._engine, class_=Session)

    @property
    def url(self) -> str:
        return self._url

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Context manager for database sessions."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        """Create the Olist tables if they do not exist yet."""
        Base.metadata.create_all(self._engine)

    def fetch_all(self, stmt: Select[Any]) -> list[Row[Any]]:
        """Execute a SELECT statement and return all rows.

        Args:
            stmt: SQLAlchemy Core select statement

        Returns:
            List of result rows in the order produced by the statement
        """
        with self.session() as session:  # type: Session
            return list(session.execute(stmt).all())

    def fetch_scalar(self, stmt: Select[Any]) -> Any:
        """Execute a SELECT statement and return the first column of the first row."""
        with self.session() as session:  # type: Session
            return session.execute(stmt).scalar()

    def add_customers(self, rows: Iterable[Customer]) -> int:
        return self._add_all(rows)

    def add_sellers(self, rows: Iterable[Seller]) -> int:
        return self._add_all(rows)

    def add_orders(self, rows: Iterable[Order]) -> int:
        return self._add_all(rows)

    def add_order_items(self, rows: Iterable[OrderItem]) -> int:
        return self._add_all(rows)

    def add_reviews(self, rows: Iterable[OrderReview]) -> int:
        return self._add_all(rows)

    def table_counts(self) -> dict[str, int]:
        """Row count per Olist table, keyed by table name."""
        counts: dict[str, int] = {}
        with self.session() as session:  # type: Session
            for model in (Customer, Seller, Order, OrderItem, OrderReview):
                table_name = model.__tablename__
                counts[table_name] = session.execute(
                    select(func.count()).select_from(model)
                ).scalar_one()
        return counts

    def _add_all(self, rows: Iterable[Base]) -> int:
        instances = list(rows)
        if not instances:
            return 0
        with self.session() as session:  # type: Session
            session.add_all(instances)
        return len(instances)
