from datetime import date
from decimal import Decimal

import pytest

from payslip_reconciler.adjustments import AdjustmentCategory, AdjustmentItem
from payslip_reconciler.backfill import (
    INVALID_HOURS_MESSAGE,
    backfill_from_adjustment,
    backfill_from_diff,
    commit_backfill,
    confirmation_prompt,
    matches_selection,
)
from payslip_reconciler.core import Job, WorkLog, aggregate_hours, period_window
from payslip_reconciler.reconcile import STATUS_MATCH, ReconciliationInput, compare_hours, reconcile
from payslip_reconciler.store import InMemoryLogStore

END = date(2025, 3, 16)


@pytest.mark.unit
def test_zero_diff_produces_nothing():
    diff = compare_hours("weekday", Decimal("10"), Decimal("10"))
    assert backfill_from_diff(diff, "cafe", END) is None


@pytest.mark.unit
def test_diff_within_display_tolerance_still_backfills():
    diff = compare_hours("weekday", Decimal("10"), Decimal("10.05"))
    assert diff.status == STATUS_MATCH
    log = backfill_from_diff(diff, "cafe", END)
    assert log is not None
    assert log.duration == Decimal("0.05")


@pytest.mark.unit
def test_positive_diff_is_backfill():
    log = backfill_from_diff(compare_hours("weekday", Decimal("4"), Decimal("7.5")), "cafe", END)
    assert log is not None
    assert log.duration == Decimal("3.5")
    assert "Backfill" in log.notes
    assert "weekday" in log.notes
    assert log.job_id == "cafe"
    assert log.date == END
    assert (log.start_time, log.end_time) == ("-", "-")


@pytest.mark.unit
def test_negative_diff_is_correction():
    log = backfill_from_diff(compare_hours("weekend", Decimal("6"), Decimal("4")), "cafe", END)
    assert log is not None
    assert log.duration == Decimal("-2")
    assert log.notes == "Payslip Correction (weekend)"


@pytest.mark.unit
def test_diff_duration_rounded_to_cents():
    log = backfill_from_diff(compare_hours("weekday", Decimal("1"), Decimal("2.3333")), "cafe", END)
    assert log is not None
    assert log.duration == Decimal("1.33")


@pytest.mark.unit
@pytest.mark.parametrize("hours", ["0", "", "abc", "-1", "NaN"])
def test_adjustment_without_valid_hours_rejected(hours):
    item = AdjustmentItem(category=AdjustmentCategory.OVERTIME_1, name="OT", hours=hours, amount="99")
    outcome = backfill_from_adjustment(item, "cafe", END)
    assert outcome.log is None
    assert outcome.accepted is False
    assert outcome.message == INVALID_HOURS_MESSAGE


@pytest.mark.unit
def test_adjustment_uses_hours_not_amount():
    item = AdjustmentItem(
        category=AdjustmentCategory.OVERTIME_1,
        name="OT First 2 Hrs",
        hours="2.5",
        rate="30",
        amount="1000",
    )
    outcome = backfill_from_adjustment(item, "cafe", END)
    assert outcome.accepted
    assert outcome.log.duration == Decimal("2.5")
    assert outcome.log.notes == "[Overtime 1] OT First 2 Hrs"
    assert outcome.log.date == END


@pytest.mark.unit
def test_commit_requires_confirmation():
    store = InMemoryLogStore()
    log = backfill_from_diff(compare_hours("weekday", Decimal("4"), Decimal("7.5")), "cafe", END)
    prompts: list[str] = []

    def decline(prompt: str) -> bool:
        prompts.append(prompt)
        return False

    assert commit_backfill(log, store, decline) is False
    assert store.logs() == []
    assert "3.50 hours" in prompts[0]

    assert commit_backfill(log, store, lambda _: True) is True
    assert store.logs() == [log]


@pytest.mark.unit
def test_correction_prompt_mentions_removal():
    log = backfill_from_diff(compare_hours("weekend", Decimal("6"), Decimal("4")), "cafe", END)
    assert confirmation_prompt(log).startswith("Remove 2.00 hours")


@pytest.mark.unit
def test_weekday_backfill_closes_gap_on_recompute(cafe_job: Job, period_logs: list[WorkLog]):
    friday = date(2025, 3, 14)
    store = InMemoryLogStore(period_logs)
    inp = ReconciliationInput(end_date=friday, weekday_hours="25")
    before = reconcile(inp, store.logs(), cafe_job)
    assert before.hour_diffs["weekday"].difference == Decimal("3.25")

    log = backfill_from_diff(before.hour_diffs["weekday"], cafe_job.id, before.window.end)
    commit_backfill(log, store, lambda _: True)

    after = reconcile(inp, store.logs(), cafe_job)
    assert after.hour_diffs["weekday"].difference == Decimal("0")
    # The earlier result is a snapshot and does not change.
    assert before.hour_diffs["weekday"].difference == Decimal("3.25")


@pytest.mark.unit
def test_backfill_bucket_follows_period_end_date(cafe_job: Job, period_logs: list[WorkLog]):
    # Period ends on a Sunday, so even a weekday backfill lands in the weekend bucket.
    store = InMemoryLogStore(period_logs)
    inp = ReconciliationInput(end_date=END, weekday_hours="25", weekend_hours="7")
    before = reconcile(inp, store.logs(), cafe_job)
    log = backfill_from_diff(before.hour_diffs["weekday"], cafe_job.id, before.window.end)
    commit_backfill(log, store, lambda _: True)

    totals = aggregate_hours(store.logs(), "cafe", period_window(END, 14))
    assert totals.weekday_hours == Decimal("21.75")
    assert totals.weekend_hours == Decimal("10.25")


@pytest.mark.unit
def test_pending_entry_goes_stale_when_selection_changes():
    log = backfill_from_diff(compare_hours("weekday", Decimal("4"), Decimal("7.5")), "cafe", END)
    assert matches_selection(log, "cafe", END)
    assert not matches_selection(log, "bookshop", END)
    assert not matches_selection(log, "cafe", date(2025, 3, 14))
