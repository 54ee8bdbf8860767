import json
import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from payslip_reconciler.utils.migration import CURRENT_WORKSPACE_VERSION, migrate_workspace
from payslip_reconciler.workspace import load_workspace

LEGACY_EXPORT = {
    "settings": {"currency": "HKD", "taxRate": 5},
    "activeJobId": "job-1",
    "jobs": [{"id": "job-1", "name": "Warehouse", "hourlyRate": 60, "weekendHourlyRate": 75}],
    "logs": [
        {
            "id": "a",
            "jobId": "job-1",
            "date": "2025-05-03",
            "startTime": "08:00",
            "endTime": "12:30",
            "duration": 4.5,
            "notes": "",
            "timestamp": 1746288000000,
        }
    ],
}


def test_current_version_untouched(workspace_payload):
    assert migrate_workspace(dict(workspace_payload)) == workspace_payload


def test_legacy_export_is_migrated(caplog):
    with caplog.at_level(logging.WARNING):
        migrated = migrate_workspace(json.loads(json.dumps(LEGACY_EXPORT)))

    assert migrated["version"] == CURRENT_WORKSPACE_VERSION
    assert migrated["settings"] == {"currency": "HKD", "default_tax_rate": 5}
    assert migrated["active_job_id"] == "job-1"
    assert migrated["jobs"][0]["weekday_rate"] == 60
    assert migrated["jobs"][0]["weekend_rate"] == 75
    log = migrated["logs"][0]
    assert log["job_id"] == "job-1"
    assert log["start_time"] == "08:00"
    assert "timestamp" not in log
    assert log["created_at"] == datetime.fromtimestamp(1746288000).isoformat()
    assert "Migrating workspace" in caplog.text


def test_legacy_export_loads_as_workspace(tmp_path: Path):
    path = tmp_path / "export.json"
    path.write_text(json.dumps(LEGACY_EXPORT), encoding="utf-8")
    workspace = load_workspace(path)
    assert workspace.jobs[0].weekend_rate == Decimal("75")
    assert workspace.logs[0].duration == Decimal("4.5")
    assert workspace.settings.default_tax_rate == Decimal("5")
