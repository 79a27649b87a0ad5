"""Report runner for producing the dashboard reports from one snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
import time

from olist_reports.adapters.db.facade import DB
from olist_reports.reports.integrity import IntegrityPolicy, enforce_integrity
from olist_reports.reports.logger import ReportLogger
from olist_reports.reports.queries import REPORTS, ReportName, ReportRow
from olist_reports.reports.windows import resolve_reference_date


@dataclass
class ReportResult:
    """Result of a single report."""

    name: ReportName
    columns: tuple[str, ...]
    rows: list[ReportRow]
    duration_seconds: float


@dataclass
class ReportRun:
    """All report results computed against one reference date."""

    reference_date: datetime
    results: list[ReportResult]

    def get(self, name: ReportName) -> ReportResult:
        for result in self.results:
            if result.name == name:
                return result
        raise KeyError(name)


class ReportRunner:
    """Runs the selected reports against a database snapshot."""

    def __init__(
        self,
        db: DB,
        integrity_policy: IntegrityPolicy = IntegrityPolicy.RAISE,
        report_logger: ReportLogger | None = None,
    ) -> None:
        """Initialize report runner.

        Args:
            db: Database holding the Olist tables
            integrity_policy: What to do when orphan rows are found
            report_logger: Optional logger override
        """
        self._db = db
        self._integrity_policy = integrity_policy
        self._logger = report_logger or ReportLogger()

    def run(self, names: Iterable[ReportName] | None = None) -> ReportRun:
        """Run reports and return their results.

        The reference date is resolved first, so an empty orders table fails
        with EmptyDatasetError whatever else the tables hold. The integrity
        check follows. Both happen once, before any report runs, and any
        ReportError aborts the whole run.

        Args:
            names: Reports to run. If None, runs all four in registry order.

        Returns:
            ReportRun with one ReportResult per requested report, in the
            order requested
        """
        selected = self._select(names)
        self._logger.run_start(
            [name.value for name in selected], self._integrity_policy.value
        )

        reference_date = resolve_reference_date(self._db)
        self._logger.reference_date_resolved(reference_date)
        enforce_integrity(self._db, self._integrity_policy, self._logger)

        results: list[ReportResult] = []
        for name in selected:
            definition = REPORTS[name]
            start = time.perf_counter()
            rows = definition.compute(self._db, reference_date)
            duration = time.perf_counter() - start
            self._logger.report_complete(name.value, len(rows), duration)
            results.append(
                ReportResult(
                    name=name,
                    columns=definition.columns,
                    rows=rows,
                    duration_seconds=duration,
                )
            )

        return ReportRun(reference_date=reference_date, results=results)

    def _select(self, names: Iterable[ReportName] | None) -> list[ReportName]:
        if names is None:
            return list(REPORTS)
        selected: list[ReportName] = []
        for name in names:
            report_name = ReportName(name)
            if report_name not in selected:
                selected.append(report_name)
        return selected
