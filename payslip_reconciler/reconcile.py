#!/usr/bin/env python3

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, NamedTuple

from payslip_reconciler.adjustments import AdjustmentItem, sum_adjustments
from payslip_reconciler.core import (
    ZERO,
    HourTotals,
    Job,
    PeriodWindow,
    WorkLog,
    aggregate_hours,
    as_float,
    base_pay,
    parse_decimal,
    period_window,
)

logger = logging.getLogger(__name__)

ALL_JOBS = "all"
HOUR_TOLERANCE = Decimal("0.1")
HUNDRED = Decimal("100")

STATUS_UNDER_RECORDED = "under_recorded"
STATUS_OVER_RECORDED = "over_recorded"
STATUS_MATCH = "match"

DIRECTION_UNDER_COUNTED = "under_counted"
DIRECTION_OVER_COUNTED = "over_counted"

WEEKDAY = "weekday"
WEEKEND = "weekend"
HOUR_CATEGORIES = (WEEKDAY, WEEKEND)


class PayFigures(NamedTuple):
    gross: Decimal
    net: Decimal


@dataclass(frozen=True)
class ReconciliationInput:
    end_date: date
    period_length: int = 14
    weekday_hours: str = "0"
    weekend_hours: str = "0"
    allowances: str = "0"
    tax_rate: str = "0"
    adjustments: tuple[AdjustmentItem, ...] = ()


@dataclass(frozen=True)
class HourDiff:
    category: str
    app_hours: Decimal
    payslip_hours: Decimal
    difference: Decimal
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "app_hours": as_float(self.app_hours),
            "payslip_hours": as_float(self.payslip_hours),
            "difference": as_float(self.difference),
            "status": self.status,
        }


@dataclass(frozen=True)
class PayDiff:
    difference: Decimal
    direction: str

    def to_dict(self) -> dict[str, Any]:
        return {"difference": as_float(self.difference), "direction": self.direction}


@dataclass(frozen=True)
class ReconciliationResult:
    job_id: str
    window: PeriodWindow
    app_hours: HourTotals
    estimated_base_pay: Decimal
    app_pay: PayFigures
    payslip_pay: PayFigures
    hour_diffs: dict[str, HourDiff]
    pay_diff: PayDiff
    adjustment_total: Decimal
    tax_rate: Decimal = ZERO
    notes: list[str] = field(default_factory=list)

    @property
    def show_adjustment_diff(self) -> bool:
        return self.adjustment_total != ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": "1.0",
            "job_id": self.job_id,
            "period": {
                "start": self.window.start.isoformat(),
                "end": self.window.end.isoformat(),
                "length": self.window.length,
            },
            "app": {
                "weekday_hours": as_float(self.app_hours.weekday_hours),
                "weekend_hours": as_float(self.app_hours.weekend_hours),
                "estimated_base_pay": as_float(self.estimated_base_pay),
                "gross_pay": as_float(self.app_pay.gross),
                "net_pay": as_float(self.app_pay.net),
            },
            "payslip": {
                "gross_pay": as_float(self.payslip_pay.gross),
                "net_pay": as_float(self.payslip_pay.net),
                "adjustment_total": as_float(self.adjustment_total),
            },
            "tax_rate": as_float(self.tax_rate),
            "hour_diffs": [self.hour_diffs[category].to_dict() for category in HOUR_CATEGORIES],
            "pay_diff": self.pay_diff.to_dict(),
            "show_adjustment_diff": self.show_adjustment_diff,
            "notes": list(self.notes),
        }


def resolve_job(jobs: list[Job], selected_id: str | None) -> Job | None:
    """Map the UI selection onto a concrete job; "all" falls back to the first job."""
    if not jobs:
        return None
    if selected_id and selected_id != ALL_JOBS:
        for job in jobs:
            if job.id == selected_id:
                return job
        logger.warning("Selected job %s not found, falling back to %s.", selected_id, jobs[0].id)
    return jobs[0]


def apply_tax(gross: Decimal, tax_rate: Decimal) -> Decimal:
    # Flat rate on the full gross; out-of-range rates are applied as entered.
    return gross * (1 - tax_rate / HUNDRED)


def payslip_pay(
    hours: HourTotals,
    job: Job,
    allowances: Decimal,
    adjustment_total: Decimal,
    tax_rate: Decimal,
) -> PayFigures:
    gross = base_pay(hours, job) + allowances + adjustment_total
    return PayFigures(gross, apply_tax(gross, tax_rate))


def app_pay(estimated_base_pay: Decimal, allowances: Decimal, tax_rate: Decimal) -> PayFigures:
    # Adjustments only exist on the payslip side.
    gross = estimated_base_pay + allowances
    return PayFigures(gross, apply_tax(gross, tax_rate))


def classify_hour_difference(difference: Decimal, tolerance: Decimal = HOUR_TOLERANCE) -> str:
    if difference > tolerance:
        return STATUS_UNDER_RECORDED
    if difference < -tolerance:
        return STATUS_OVER_RECORDED
    return STATUS_MATCH


def compare_hours(
    category: str,
    app_hours: Decimal,
    payslip_hours: Decimal,
    tolerance: Decimal = HOUR_TOLERANCE,
) -> HourDiff:
    difference = payslip_hours - app_hours
    return HourDiff(
        category=category,
        app_hours=app_hours,
        payslip_hours=payslip_hours,
        difference=difference,
        status=classify_hour_difference(difference, tolerance),
    )


def compare_pay(app_gross: Decimal, payslip_gross: Decimal) -> PayDiff:
    # Gross-based on purpose even though net figures are displayed next to it.
    difference = payslip_gross - app_gross
    if difference > 0:
        direction = DIRECTION_UNDER_COUNTED
    elif difference < 0:
        direction = DIRECTION_OVER_COUNTED
    else:
        direction = STATUS_MATCH
    return PayDiff(difference, direction)


def reconcile(inp: ReconciliationInput, logs: Iterable[WorkLog], job: Job) -> ReconciliationResult:
    window = period_window(inp.end_date, inp.period_length)
    app_hours = aggregate_hours(logs, job.id, window)
    estimated = base_pay(app_hours, job)

    slip_hours = HourTotals(parse_decimal(inp.weekday_hours), parse_decimal(inp.weekend_hours))
    allowances = parse_decimal(inp.allowances)
    tax_rate = parse_decimal(inp.tax_rate)
    adjustment_total = sum_adjustments(inp.adjustments)

    app = app_pay(estimated, allowances, tax_rate)
    slip = payslip_pay(slip_hours, job, allowances, adjustment_total, tax_rate)

    hour_diffs = {
        WEEKDAY: compare_hours(WEEKDAY, app_hours.weekday_hours, slip_hours.weekday_hours),
        WEEKEND: compare_hours(WEEKEND, app_hours.weekend_hours, slip_hours.weekend_hours),
    }

    notes: list[str] = []
    if not HUNDRED >= tax_rate >= ZERO:
        notes.append(f"Tax rate {tax_rate}% is outside 0-100 and was applied as entered.")
    if adjustment_total != ZERO and any(item.hours_value > ZERO for item in inp.adjustments):
        notes.append("Adjustments with hours can be saved to the work log to keep tracked hours accurate.")

    logger.debug(
        "Reconciled job %s for %s..%s: app=%s payslip=%s",
        job.id,
        window.start,
        window.end,
        app_hours,
        slip_hours,
    )
    return ReconciliationResult(
        job_id=job.id,
        window=window,
        app_hours=app_hours,
        estimated_base_pay=estimated,
        app_pay=app,
        payslip_pay=slip,
        hour_diffs=hour_diffs,
        pay_diff=compare_pay(app.gross, slip.gross),
        adjustment_total=adjustment_total,
        tax_rate=tax_rate,
        notes=notes,
    )
