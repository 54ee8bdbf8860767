import json
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from payslip_reconciler.core import Job, WorkLog


def make_log(day: str, hours: str, job_id: str = "cafe", log_id: str | None = None) -> WorkLog:
    """Helper to create a tracked log entry for testing."""
    return WorkLog(
        id=log_id or f"{job_id}-{day}-{hours}",
        job_id=job_id,
        date=date.fromisoformat(day),
        start_time="09:00",
        end_time="17:00",
        duration=Decimal(hours),
        notes="",
        created_at=datetime(2025, 1, 1, 12, 0),
    )


@pytest.fixture
def cafe_job() -> Job:
    return Job(id="cafe", name="Corner Cafe", weekday_rate=Decimal("20"), weekend_rate=Decimal("30"))


@pytest.fixture
def period_logs() -> list[WorkLog]:
    """Two weeks ending Sunday 2025-03-16, plus entries that must be ignored."""
    return [
        make_log("2025-03-03", "8"),  # Monday, first day of the 14-day window
        make_log("2025-03-07", "6.5"),  # Friday
        make_log("2025-03-08", "4"),  # Saturday
        make_log("2025-03-12", "7.25"),  # Wednesday
        make_log("2025-03-16", "3"),  # Sunday, last day of the window
        make_log("2025-03-02", "5"),  # Sunday before the window
        make_log("2025-03-17", "5"),  # Monday after the window
        make_log("2025-03-10", "9", job_id="bookshop"),  # other job
    ]


@pytest.fixture
def workspace_payload() -> dict[str, Any]:
    return {
        "version": "1.0",
        "settings": {"currency": "NZD", "default_tax_rate": 10},
        "active_job_id": "all",
        "jobs": [
            {"id": "cafe", "name": "Corner Cafe", "weekday_rate": 20, "weekend_rate": 30},
            {"id": "bookshop", "name": "Bookshop", "weekday_rate": 18.5, "weekend_rate": 25},
        ],
        "logs": [
            {
                "id": "log-1",
                "job_id": "cafe",
                "date": "2025-03-03",
                "start_time": "09:00",
                "end_time": "17:00",
                "duration": 8,
                "notes": "",
                "created_at": "2025-03-03T17:05:00",
            },
            {
                "id": "log-2",
                "job_id": "cafe",
                "date": "2025-03-08",
                "start_time": "10:00",
                "end_time": "14:00",
                "duration": 4,
                "notes": "Saturday brunch",
                "created_at": "2025-03-08T14:02:00",
            },
        ],
    }


@pytest.fixture
def workspace_file(tmp_path: Path, workspace_payload: dict[str, Any]) -> Path:
    path = tmp_path / "workspace.json"
    path.write_text(json.dumps(workspace_payload), encoding="utf-8")
    return path
