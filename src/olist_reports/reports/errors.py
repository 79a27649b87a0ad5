"""Errors raised by the report engine."""

from __future__ import annotations

from dataclasses import dataclass


class ReportError(Exception):
    """Base error for report computation."""


class EmptyDatasetError(ReportError):
    """The orders table is empty, so no reference date can be resolved."""

    def __init__(self) -> None:
        super().__init__("Cannot resolve reference date: the orders table is empty")


@dataclass(frozen=True, slots=True)
class IntegrityViolation:
    """A row whose foreign key points at a missing row."""

    table: str
    column: str
    missing_table: str
    key: str

    def describe(self) -> str:
        return (
            f"{self.table}.{self.column}={self.key!r} "
            f"has no matching row in {self.missing_table}"
        )


class ReferentialIntegrityError(ReportError):
    """One or more rows reference rows that do not exist."""

    def __init__(self, violations: list[IntegrityViolation]) -> None:
        self.violations = violations
        preview = "; ".join(v.describe() for v in violations[:5])
        more = len(violations) - 5
        if more > 0:
            preview += f"; ... and {more} more"
        super().__init__(
            f"Referential integrity check failed ({len(violations)} "
            f"violation(s)): {preview}"
        )
