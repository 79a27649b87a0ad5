"""Fixtures for building small Olist datasets in an in-memory database."""

from tests.fixtures.olist_dataset.builder import OlistDatasetBuilder, create_db

__all__ = ["OlistDatasetBuilder", "create_db"]
