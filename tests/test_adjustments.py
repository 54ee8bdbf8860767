from decimal import Decimal

import pytest

from payslip_reconciler.adjustments import (
    AdjustmentCategory,
    AdjustmentItem,
    AdjustmentLedger,
    derived_amount,
    sum_adjustments,
)


@pytest.mark.unit
def test_add_starts_empty_with_unique_ids():
    ledger = AdjustmentLedger()
    first = ledger.add()
    second = ledger.add("Overtime 1", "OT First 2 Hrs")

    assert first.id != second.id
    assert first.category is AdjustmentCategory.GENERAL
    assert (first.hours, first.rate, first.amount) == ("", "", "")
    assert second.category is AdjustmentCategory.OVERTIME_1
    assert second.name == "OT First 2 Hrs"
    assert len(ledger) == 2


@pytest.mark.unit
def test_quick_add_presets():
    ledger = AdjustmentLedger()
    meal = ledger.add_preset("meal")
    ot2 = ledger.add_preset("ot2")
    assert (meal.category, meal.name) == (AdjustmentCategory.MEAL_BREAK, "Delayed Meal Brk")
    assert (ot2.category, ot2.name) == (AdjustmentCategory.OVERTIME_2, "OT After 2 Hrs")
    with pytest.raises(ValueError):
        ledger.add_preset("bonus")


@pytest.mark.unit
def test_amount_auto_calculation_and_manual_override():
    ledger = AdjustmentLedger()
    item = ledger.add("Overtime 1")

    ledger.update(item.id, "hours", "6")
    assert ledger.get(item.id).amount == ""  # rate still missing

    ledger.update(item.id, "rate", "10")
    assert ledger.get(item.id).amount == "60.00"

    ledger.update(item.id, "amount", "45")
    assert ledger.get(item.id).amount == "45"
    assert ledger.get(item.id).hours == "6"
    assert ledger.get(item.id).rate == "10"

    ledger.update(item.id, "name", "OT First 2 Hrs")
    assert ledger.get(item.id).amount == "45"

    ledger.update(item.id, "rate", "12")
    assert ledger.get(item.id).amount == "72.00"


@pytest.mark.unit
def test_amount_rounds_to_cents():
    assert derived_amount("1.5", "33.333") == "50.00"
    assert derived_amount("0.333", "10.015") == "3.33"
    assert derived_amount("2", "0.005") == "0.01"


@pytest.mark.unit
def test_non_numeric_hours_keep_previous_amount():
    ledger = AdjustmentLedger()
    item = ledger.add()
    ledger.update(item.id, "amount", "15")
    ledger.update(item.id, "rate", "10")
    ledger.update(item.id, "hours", "abc")
    assert ledger.get(item.id).amount == "15"
    ledger.update(item.id, "hours", "")
    assert ledger.get(item.id).amount == "15"


@pytest.mark.unit
def test_total_preserves_sign_and_ignores_garbage():
    ledger = AdjustmentLedger()
    bonus = ledger.add("Allowance", "Bonus")
    deduction = ledger.add("Deduction", "Uniform")
    broken = ledger.add("General", "Typo")
    empty = ledger.add("Deduction", "Not entered")

    ledger.update(bonus.id, "amount", "50")
    ledger.update(deduction.id, "amount", "-12.5")
    ledger.update(broken.id, "amount", "12,5x")
    ledger.update(empty.id, "amount", "")

    assert ledger.total() == Decimal("37.5")


@pytest.mark.unit
def test_deduction_with_positive_amount_still_adds():
    items = [AdjustmentItem(category=AdjustmentCategory.DEDUCTION, amount="20")]
    assert sum_adjustments(items) == Decimal("20")


@pytest.mark.unit
def test_remove_and_unknown_ids():
    ledger = AdjustmentLedger()
    item = ledger.add()
    assert ledger.update("missing", "hours", "2") is None
    assert ledger.remove("missing") is False
    assert ledger.remove(item.id) is True
    assert len(ledger) == 0
    assert ledger.total() == Decimal("0")


@pytest.mark.unit
def test_category_and_field_validation():
    ledger = AdjustmentLedger()
    item = ledger.add()
    updated = ledger.update(item.id, "category", "Meal Break")
    assert updated.category is AdjustmentCategory.MEAL_BREAK
    with pytest.raises(ValueError):
        ledger.update(item.id, "category", "Tips")
    with pytest.raises(ValueError):
        ledger.update(item.id, "id", "new-id")
