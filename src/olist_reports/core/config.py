from __future__ import annotations

from dataclasses import dataclass
import os

from olist_reports.reports.integrity import IntegrityPolicy

DEFAULT_DATABASE_URL = "sqlite:///olist.db"
_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(ValueError):
    """Invalid configuration value in the environment."""


@dataclass(frozen=True, slots=True)
class ReportsConfig:
    """Report engine configuration loaded at process startup."""

    database_url: str = DEFAULT_DATABASE_URL
    integrity_policy: IntegrityPolicy = IntegrityPolicy.RAISE
    log_level: str = "INFO"


def load_reports_config_from_env() -> ReportsConfig:
    """Load report config from env and validate it."""
    database_url = os.environ.get(
        "OLIST_REPORTS_DATABASE_URL", DEFAULT_DATABASE_URL
    ).strip()
    if not database_url:
        raise ConfigError("OLIST_REPORTS_DATABASE_URL must not be empty")

    policy_value = (
        os.environ.get("OLIST_REPORTS_INTEGRITY_POLICY", "raise").strip().lower()
    )
    if policy_value not in {policy.value for policy in IntegrityPolicy}:
        raise ConfigError("OLIST_REPORTS_INTEGRITY_POLICY must be one of: raise, skip")

    log_level = os.environ.get("OLIST_REPORTS_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigError(
            "OLIST_REPORTS_LOG_LEVEL must be one of: " + ", ".join(sorted(_LOG_LEVELS))
        )

    return ReportsConfig(
        database_url=database_url,
        integrity_policy=IntegrityPolicy(policy_value),
        log_level=log_level,
    )
