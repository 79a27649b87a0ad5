"""Tests for ReportRunner."""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

from olist_reports.adapters.db.models import OrderReview
from olist_reports.reports.errors import EmptyDatasetError, ReferentialIntegrityError
from olist_reports.reports.integrity import IntegrityPolicy
from olist_reports.reports.queries import ReportName
from olist_reports.reports.runner import ReportRunner
from tests.fixtures.olist_dataset import OlistDatasetBuilder

REFERENCE = datetime(2018, 8, 29, 15, 0, 0)


@pytest.fixture
def populated(builder: OlistDatasetBuilder) -> OlistDatasetBuilder:
    seller_id = builder.seller()
    order_id = builder.order(
        purchased=datetime(2018, 7, 1),
        estimated=datetime(2018, 7, 10),
        delivered=datetime(2018, 7, 20),
    )
    builder.items(order_id=order_id, seller_id=seller_id, prices=[5000.0] * 31)
    builder.reviews(zip_prefix="22790", purchased=REFERENCE, scores=[2] * 31)
    return builder


class TestReportRunner:
    def test_runs_all_reports_in_registry_order(
        self, populated: OlistDatasetBuilder
    ) -> None:
        run = ReportRunner(populated.db, report_logger=MagicMock()).run()

        assert run.reference_date == REFERENCE
        assert [result.name for result in run.results] == list(ReportName)
        assert [len(result.rows) for result in run.results] == [1, 1, 1, 1]

    def test_runs_selected_reports_once_each(
        self, populated: OlistDatasetBuilder
    ) -> None:
        runner = ReportRunner(populated.db, report_logger=MagicMock())

        run = runner.run(
            [
                ReportName.WORST_RATED_POSTAL_CODES,
                ReportName.LATE_DELIVERIES,
                ReportName.WORST_RATED_POSTAL_CODES,
            ]
        )

        assert [result.name for result in run.results] == [
            ReportName.WORST_RATED_POSTAL_CODES,
            ReportName.LATE_DELIVERIES,
        ]

    def test_accepts_report_names_as_strings(
        self, populated: OlistDatasetBuilder
    ) -> None:
        run = ReportRunner(populated.db, report_logger=MagicMock()).run(
            ["high_revenue_sellers"]
        )

        result = run.get(ReportName.HIGH_REVENUE_SELLERS)
        assert result.columns == (
            "seller_id",
            "seller_city",
            "seller_state",
            "total_revenue",
        )
        assert result.duration_seconds >= 0

    def test_reference_date_resolved_once_and_shared(
        self, populated: OlistDatasetBuilder
    ) -> None:
        with patch(
            "olist_reports.reports.runner.resolve_reference_date",
            return_value=REFERENCE + timedelta(days=1),
        ) as resolve:
            run = ReportRunner(populated.db, report_logger=MagicMock()).run()

        resolve.assert_called_once_with(populated.db)
        assert run.reference_date == REFERENCE + timedelta(days=1)

    def test_empty_dataset_aborts_run(self, db) -> None:
        runner = ReportRunner(db, report_logger=MagicMock())

        with pytest.raises(EmptyDatasetError):
            runner.run()

    def test_empty_orders_with_orphan_children_is_empty_dataset(
        self, builder: OlistDatasetBuilder
    ) -> None:
        seller_id = builder.seller()
        builder.items(order_id="ghost-order", seller_id=seller_id, prices=["10.00"])
        builder.db.add_reviews(
            [OrderReview(review_id="r-1", order_id="ghost-order", review_score=1)]
        )
        report_logger = MagicMock()

        with pytest.raises(EmptyDatasetError):
            ReportRunner(builder.db, report_logger=report_logger).run()

        report_logger.integrity_summary.assert_not_called()

    def test_integrity_failure_aborts_before_reports(
        self, populated: OlistDatasetBuilder
    ) -> None:
        order_id = populated.order(purchased=REFERENCE)
        populated.items(order_id=order_id, seller_id="ghost-seller", prices=[1.0])
        report_logger = MagicMock()

        with pytest.raises(ReferentialIntegrityError):
            ReportRunner(populated.db, report_logger=report_logger).run()

        report_logger.report_complete.assert_not_called()

    def test_skip_policy_completes_run(self, populated: OlistDatasetBuilder) -> None:
        order_id = populated.order(purchased=REFERENCE)
        populated.items(order_id=order_id, seller_id="ghost-seller", prices=[1.0])

        run = ReportRunner(
            populated.db,
            integrity_policy=IntegrityPolicy.SKIP,
            report_logger=MagicMock(),
        ).run()

        assert len(run.results) == 4

    def test_get_unknown_report_raises_key_error(
        self, populated: OlistDatasetBuilder
    ) -> None:
        run = ReportRunner(populated.db, report_logger=MagicMock()).run(
            [ReportName.LATE_DELIVERIES]
        )

        with pytest.raises(KeyError):
            run.get(ReportName.HIGH_REVENUE_SELLERS)
