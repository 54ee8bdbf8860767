from payslip_reconciler.core import (
    HourTotals,
    Job,
    PeriodWindow,
    UserSettings,
    WorkLog,
    aggregate_hours,
    as_float,
    base_pay,
    format_decimal,
    format_money,
    parse_decimal,
    period_window,
)
from payslip_reconciler.adjustments import (
    QUICK_ADD_PRESETS,
    AdjustmentCategory,
    AdjustmentItem,
    AdjustmentLedger,
)
from payslip_reconciler.reconcile import (
    HourDiff,
    PayDiff,
    ReconciliationInput,
    ReconciliationResult,
    app_pay,
    compare_hours,
    compare_pay,
    payslip_pay,
    reconcile,
    resolve_job,
)
from payslip_reconciler.backfill import (
    BackfillResult,
    backfill_from_adjustment,
    backfill_from_diff,
    commit_backfill,
)
from payslip_reconciler.store import InMemoryLogStore, JsonLogStore, LogStore

__all__ = [
    "AdjustmentCategory",
    "AdjustmentItem",
    "AdjustmentLedger",
    "BackfillResult",
    "HourDiff",
    "HourTotals",
    "InMemoryLogStore",
    "Job",
    "JsonLogStore",
    "LogStore",
    "PayDiff",
    "PeriodWindow",
    "QUICK_ADD_PRESETS",
    "ReconciliationInput",
    "ReconciliationResult",
    "UserSettings",
    "WorkLog",
    "aggregate_hours",
    "app_pay",
    "as_float",
    "backfill_from_adjustment",
    "backfill_from_diff",
    "base_pay",
    "commit_backfill",
    "compare_hours",
    "compare_pay",
    "format_decimal",
    "format_money",
    "parse_decimal",
    "payslip_pay",
    "period_window",
    "reconcile",
    "resolve_job",
]
