"""Olist dataset adapters."""

from olist_reports.adapters.olist.csv_loader import LoadSummary, OlistCSVLoader

__all__ = ["LoadSummary", "OlistCSVLoader"]
