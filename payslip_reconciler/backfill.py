"""
Backfill Generator

Turns a detected hour difference, or an adjustment line that carries hours,
into a synthetic work log entry so the tracked totals line up with the
payslip. Nothing is written without an explicit confirmation.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, NamedTuple

from payslip_reconciler.adjustments import AdjustmentItem
from payslip_reconciler.core import SYNTHETIC_TIME_MARKER, ZERO, WorkLog, format_decimal, is_number, round_cents
from payslip_reconciler.reconcile import HourDiff
from payslip_reconciler.store import LogStore

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

INVALID_HOURS_MESSAGE = "Enter a valid number of hours greater than zero before saving to the work log."


class BackfillResult(NamedTuple):
    log: WorkLog | None
    message: str

    @property
    def accepted(self) -> bool:
        return self.log is not None


def synthesize_log(job_id: str, day: date, duration: Decimal, notes: str) -> WorkLog:
    return WorkLog(
        id=str(uuid.uuid4()),
        job_id=job_id,
        date=day,
        start_time=SYNTHETIC_TIME_MARKER,
        end_time=SYNTHETIC_TIME_MARKER,
        duration=duration,
        notes=notes,
        created_at=datetime.now(),
    )


def backfill_from_diff(diff: HourDiff, job_id: str, period_end: date) -> WorkLog | None:
    # Exact zero only; the display tolerance does not apply here.
    if diff.difference == ZERO:
        return None
    kind = "Backfill" if diff.difference > ZERO else "Correction"
    return synthesize_log(
        job_id,
        period_end,
        round_cents(diff.difference),
        f"Payslip {kind} ({diff.category})",
    )


def adjustment_note(item: AdjustmentItem) -> str:
    return f"[{item.category.value}] {item.name}".rstrip()


def backfill_from_adjustment(item: AdjustmentItem, job_id: str, period_end: date) -> BackfillResult:
    if not is_number(item.hours) or item.hours_value <= ZERO:
        return BackfillResult(None, INVALID_HOURS_MESSAGE)
    # Hours only: the amount never reaches the log.
    log = synthesize_log(job_id, period_end, item.hours_value, adjustment_note(item))
    return BackfillResult(log, f'Ready to add {format_decimal(item.hours_value)} h for "{log.notes}".')


def confirmation_prompt(log: WorkLog) -> str:
    if log.duration < ZERO:
        return (
            f'Remove {format_decimal(-log.duration)} hours from the work log on {log.date.isoformat()} '
            f'with a "{log.notes}" entry?'
        )
    return (
        f'Add {format_decimal(log.duration)} hours for "{log.notes}" to the work log on {log.date.isoformat()}? '
        "They will count towards your tracked hours."
    )


def matches_selection(log: WorkLog, job_id: str, period_end: date) -> bool:
    """True while a pending entry still belongs to the current job and period end."""
    return log.job_id == job_id and log.date == period_end


def commit_backfill(log: WorkLog, store: LogStore, confirm: Confirm) -> bool:
    if not confirm(confirmation_prompt(log)):
        logger.info("Backfill %s declined.", log.notes)
        return False
    store.add_log(log)
    logger.info("Backfill %s committed: %s h on %s", log.notes, log.duration, log.date)
    return True
