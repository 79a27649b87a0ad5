"""Logging for report runs.

Keeps log formatting out of the query and runner code.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import loguru
from loguru import logger

if TYPE_CHECKING:
    from olist_reports.reports.errors import IntegrityViolation


class ReportLogger:
    """Handles all logging for report runs."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        """Initialize logger.

        Args:
            logger_instance: Logger instance to use (defaults to loguru.logger)
        """
        self._logger = logger_instance

    def run_start(self, report_names: list[str], integrity_policy: str) -> None:
        """Log start of a report run."""
        self._logger.bind(reports=report_names, policy=integrity_policy).info(
            "Running {} report(s) with integrity policy '{}'",
            len(report_names),
            integrity_policy,
        )

    def reference_date_resolved(self, reference_date: datetime) -> None:
        self._logger.bind(reference_date=reference_date.isoformat()).info(
            "Reference date resolved: {}", reference_date.isoformat(sep=" ")
        )

    def report_complete(
        self, report_name: str, row_count: int, duration_seconds: float
    ) -> None:
        """Log a single report finishing."""
        self._logger.bind(
            report=report_name, rows=row_count, duration=duration_seconds
        ).info(
            "Report {} complete: {} row(s) in {:.3f}s",
            report_name,
            row_count,
            duration_seconds,
        )

    def integrity_clean(self) -> None:
        self._logger.debug("Referential integrity check passed")

    def integrity_violation_skipped(self, violation: IntegrityViolation) -> None:
        """Log an orphan row that the reports will drop from their joins."""
        self._logger.bind(
            table=violation.table,
            column=violation.column,
            key=violation.key,
        ).warning("Skipping orphan row: {}", violation.describe())

    def integrity_summary(self, violation_count: int, policy: str) -> None:
        self._logger.bind(violations=violation_count, policy=policy).warning(
            "Referential integrity check found {} violation(s) (policy: {})",
            violation_count,
            policy,
        )

    def dataset_loaded(self, table_counts: dict[str, int]) -> None:
        """Log row counts after a CSV load."""
        self._logger.bind(**table_counts).info(
            "Dataset loaded: {}",
            ", ".join(f"{name}={count}" for name, count in table_counts.items()),
        )

    def export_written(self, report_name: str, path: str) -> None:
        self._logger.bind(report=report_name, path=path).info(
            "Wrote {} to {}", report_name, path
        )
