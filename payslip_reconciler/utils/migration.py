from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

CURRENT_WORKSPACE_VERSION = "1.0"

LEGACY_JOB_KEYS = {"hourlyRate": "weekday_rate", "weekendHourlyRate": "weekend_rate"}
LEGACY_LOG_KEYS = {"jobId": "job_id", "startTime": "start_time", "endTime": "end_time"}


def is_legacy_export(config: dict[str, Any]) -> bool:
    version = str(config.get("version", ""))
    return not version or version.startswith("0.")


def migrate_legacy_log(log: dict[str, Any]) -> dict[str, Any]:
    migrated = {LEGACY_LOG_KEYS.get(key, key): value for key, value in log.items() if key != "timestamp"}
    timestamp = log.get("timestamp")
    if "created_at" not in migrated and isinstance(timestamp, (int, float)):
        # The mobile app stored epoch milliseconds.
        migrated["created_at"] = datetime.fromtimestamp(timestamp / 1000).isoformat()
    return migrated


def migrate_legacy_export_to_v1_0(config: dict[str, Any]) -> dict[str, Any]:
    """
    Migrate a camelCase export of the time-tracking app to workspace v1.0.

    Changes:
    - Renames job rate keys (hourlyRate, weekendHourlyRate).
    - Renames log keys (jobId, startTime, endTime) and converts the
      millisecond `timestamp` into an ISO `created_at`.
    - Moves `taxRate` to `default_tax_rate` and `activeJobId` to `active_job_id`.
    """
    logger.warning(
        f"Migrating workspace from {config.get('version') or 'legacy export'} to {CURRENT_WORKSPACE_VERSION}. "
        "Save the workspace to suppress this warning."
    )
    migrated = dict(config)
    migrated["version"] = CURRENT_WORKSPACE_VERSION

    settings = dict(migrated.get("settings", {}))
    if "taxRate" in settings:
        settings.setdefault("default_tax_rate", settings.pop("taxRate"))
    migrated["settings"] = settings

    if "activeJobId" in migrated:
        migrated.setdefault("active_job_id", migrated.pop("activeJobId"))

    migrated["jobs"] = [
        {LEGACY_JOB_KEYS.get(key, key): value for key, value in job.items()} for job in migrated.get("jobs", [])
    ]
    migrated["logs"] = [migrate_legacy_log(log) for log in migrated.get("logs", [])]
    return migrated


def migrate_workspace(config: dict[str, Any]) -> dict[str, Any]:
    """
    Run all sequential migrations to bring a workspace payload to the latest version.
    """
    if is_legacy_export(config):
        config = migrate_legacy_export_to_v1_0(config)
    return config
