"""
Workspace file handling.

A workspace is the JSON document that carries everything the reconciler
consumes from the outside: user settings, the job list, the currently
selected job and the work log itself.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from payslip_reconciler.core import ZERO, Job, UserSettings, WorkLog
from payslip_reconciler.utils.contracts import validate_workspace
from payslip_reconciler.utils.migration import CURRENT_WORKSPACE_VERSION, migrate_workspace

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    settings: UserSettings = field(default_factory=UserSettings)
    jobs: list[Job] = field(default_factory=list)
    logs: list[WorkLog] = field(default_factory=list)
    active_job_id: str = "all"
    version: str = CURRENT_WORKSPACE_VERSION


def as_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value))


def job_from_dict(data: dict[str, Any]) -> Job:
    return Job(
        id=str(data["id"]),
        name=str(data.get("name", data["id"])),
        weekday_rate=as_decimal(data.get("weekday_rate")),
        weekend_rate=as_decimal(data.get("weekend_rate")),
    )


def log_from_dict(data: dict[str, Any]) -> WorkLog:
    created_raw = data.get("created_at")
    return WorkLog(
        id=str(data["id"]),
        job_id=str(data["job_id"]),
        date=date.fromisoformat(data["date"]),
        start_time=str(data.get("start_time", "-")),
        end_time=str(data.get("end_time", "-")),
        duration=as_decimal(data.get("duration")),
        notes=str(data.get("notes", "")),
        created_at=datetime.fromisoformat(created_raw) if created_raw else datetime.now(),
    )


def log_to_dict(log: WorkLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "job_id": log.job_id,
        "date": log.date.isoformat(),
        "start_time": log.start_time,
        "end_time": log.end_time,
        "duration": float(log.duration),
        "notes": log.notes,
        "created_at": log.created_at.isoformat(),
    }


def workspace_from_dict(data: dict[str, Any]) -> Workspace:
    settings = data.get("settings", {})
    return Workspace(
        settings=UserSettings(
            currency=str(settings.get("currency", "$")),
            default_tax_rate=as_decimal(settings.get("default_tax_rate")),
        ),
        jobs=[job_from_dict(job) for job in data.get("jobs", [])],
        logs=[log_from_dict(log) for log in data.get("logs", [])],
        active_job_id=str(data.get("active_job_id") or "all"),
        version=str(data.get("version", CURRENT_WORKSPACE_VERSION)),
    )


def workspace_to_dict(workspace: Workspace) -> dict[str, Any]:
    return {
        "version": workspace.version,
        "settings": {
            "currency": workspace.settings.currency,
            "default_tax_rate": float(workspace.settings.default_tax_rate),
        },
        "active_job_id": workspace.active_job_id,
        "jobs": [
            {
                "id": job.id,
                "name": job.name,
                "weekday_rate": float(job.weekday_rate),
                "weekend_rate": float(job.weekend_rate),
            }
            for job in workspace.jobs
        ],
        "logs": [log_to_dict(log) for log in workspace.logs],
    }


def read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data: dict[str, Any] = json.load(handle)
        return data


def write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_workspace(path: Path) -> Workspace:
    if not path.exists():
        raise FileNotFoundError(f"Workspace file not found: {path}")
    data = migrate_workspace(read_json(path))
    validate_workspace(data)
    workspace = workspace_from_dict(data)
    logger.debug("Loaded workspace %s: %d job(s), %d log(s)", path, len(workspace.jobs), len(workspace.logs))
    return workspace


def save_workspace(path: Path, workspace: Workspace) -> None:
    write_json(path, workspace_to_dict(workspace))
