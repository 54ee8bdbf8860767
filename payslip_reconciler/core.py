#!/usr/bin/env python3

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Iterable, NamedTuple

ZERO = Decimal("0")
CENT = Decimal("0.01")
SUPPORTED_PERIOD_LENGTHS = (14, 30)
WEEKEND_WEEKDAYS = {5, 6}  # Saturday, Sunday
SYNTHETIC_TIME_MARKER = "-"


@dataclass(frozen=True)
class WorkLog:
    id: str
    job_id: str
    date: date
    start_time: str
    end_time: str
    duration: Decimal
    notes: str = ""
    created_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class Job:
    id: str
    name: str
    weekday_rate: Decimal
    weekend_rate: Decimal


@dataclass(frozen=True)
class UserSettings:
    currency: str = "$"
    default_tax_rate: Decimal = ZERO


@dataclass(frozen=True)
class PeriodWindow:
    start: date
    end: date

    @property
    def length(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class HourTotals(NamedTuple):
    weekday_hours: Decimal
    weekend_hours: Decimal

    @property
    def total(self) -> Decimal:
        return self.weekday_hours + self.weekend_hours


def parse_decimal(value: object) -> Decimal:
    """Parse a user-entered number, treating anything unusable as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    text = str(value).strip()
    if not text:
        return ZERO
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        return ZERO
    # Decimal happily accepts "NaN" and "Infinity".
    if not parsed.is_finite():
        return ZERO
    return parsed


def is_number(value: object) -> bool:
    if value is None:
        return False
    text = str(value).strip()
    if not text:
        return False
    try:
        return Decimal(text).is_finite()
    except InvalidOperation:
        return False


def round_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT)


def as_float(value: Decimal | None) -> float | None:
    if value is None:
        return None
    return float(value.quantize(CENT))


def format_money(value: Decimal | None, currency: str = "$") -> str:
    if value is None:
        return "n/a"
    return f"{currency} {value.quantize(CENT):,.2f}"


def format_decimal(value: Decimal | None, signed: bool = False) -> str:
    if value is None:
        return "n/a"
    rendered = f"{value.quantize(CENT):.2f}"
    if signed and value > 0:
        rendered = f"+{rendered}"
    return rendered


def is_weekend(day: date) -> bool:
    return day.weekday() in WEEKEND_WEEKDAYS


def period_window(end_date: date, length: int) -> PeriodWindow:
    if length not in SUPPORTED_PERIOD_LENGTHS:
        raise ValueError(f"Unsupported period length: {length} (expected one of {SUPPORTED_PERIOD_LENGTHS}).")
    return PeriodWindow(start=end_date - timedelta(days=length - 1), end=end_date)


def logs_in_window(logs: Iterable[WorkLog], job_id: str, window: PeriodWindow) -> list[WorkLog]:
    return [log for log in logs if log.job_id == job_id and window.contains(log.date)]


@lru_cache(maxsize=64)
def _aggregate_hours_cached(logs: tuple[WorkLog, ...], job_id: str, window: PeriodWindow) -> HourTotals:
    weekday_hours = ZERO
    weekend_hours = ZERO
    for log in logs_in_window(logs, job_id, window):
        # Bucketing uses the calendar date only, start/end markers are ignored.
        if is_weekend(log.date):
            weekend_hours += log.duration
        else:
            weekday_hours += log.duration
    return HourTotals(weekday_hours, weekend_hours)


def aggregate_hours(logs: Iterable[WorkLog], job_id: str, window: PeriodWindow) -> HourTotals:
    return _aggregate_hours_cached(tuple(logs), job_id, window)


def base_pay(hours: HourTotals, job: Job) -> Decimal:
    return hours.weekday_hours * job.weekday_rate + hours.weekend_hours * job.weekend_rate
