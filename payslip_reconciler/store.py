from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Protocol

from payslip_reconciler.core import WorkLog
from payslip_reconciler.workspace import load_workspace, save_workspace

logger = logging.getLogger(__name__)


class LogStore(Protocol):
    def logs(self) -> list[WorkLog]: ...

    def add_log(self, log: WorkLog) -> None: ...


class InMemoryLogStore:
    def __init__(self, logs: list[WorkLog] | None = None) -> None:
        self._logs: list[WorkLog] = list(logs or [])

    def logs(self) -> list[WorkLog]:
        return list(self._logs)

    def add_log(self, log: WorkLog) -> None:
        self._logs.append(log)


class JsonLogStore(InMemoryLogStore):
    """Log store backed by a workspace file; every append rewrites the file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.workspace = load_workspace(path)
        super().__init__(self.workspace.logs)

    def add_log(self, log: WorkLog) -> None:
        logs = self.logs() + [log]
        # Memory only changes once the file write has gone through.
        save_workspace(self.path, replace(self.workspace, logs=logs))
        self.workspace.logs = logs
        super().add_log(log)
        logger.info("Appended log %s (%s h) to %s", log.id, log.duration, self.path)
