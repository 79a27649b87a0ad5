"""Shared test fixtures."""

from __future__ import annotations

import pytest

from olist_reports.adapters.db.facade import DB
from tests.fixtures.olist_dataset import OlistDatasetBuilder, create_db


@pytest.fixture
def db() -> DB:
    """Empty in-memory database with the Olist schema."""
    return create_db()


@pytest.fixture
def builder(db: DB) -> OlistDatasetBuilder:
    return OlistDatasetBuilder(db)
