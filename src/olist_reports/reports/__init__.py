"""Report engine: reference date, rolling windows and the four reports."""

from __future__ import annotations

from olist_reports.reports.errors import (
    EmptyDatasetError,
    IntegrityViolation,
    ReferentialIntegrityError,
    ReportError,
)
from olist_reports.reports.integrity import IntegrityPolicy
from olist_reports.reports.queries import (
    REPORTS,
    ReportName,
    engaged_new_sellers,
    high_revenue_sellers,
    late_deliveries,
    worst_rated_postal_codes,
)
from olist_reports.reports.runner import ReportResult, ReportRun, ReportRunner
from olist_reports.reports.windows import resolve_reference_date, window_start

__all__ = [
    "REPORTS",
    "EmptyDatasetError",
    "IntegrityPolicy",
    "IntegrityViolation",
    "ReferentialIntegrityError",
    "ReportError",
    "ReportName",
    "ReportResult",
    "ReportRun",
    "ReportRunner",
    "engaged_new_sellers",
    "high_revenue_sellers",
    "late_deliveries",
    "resolve_reference_date",
    "window_start",
    "worst_rated_postal_codes",
]
