"""
Adjustment Ledger

Free-form payslip line items (overtime, meal compensation, allowances,
deductions) entered while reconciling a single period. Items live only for
the session; the only way they reach the work log is the backfill path.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterator

from payslip_reconciler.core import CENT, ZERO, is_number, parse_decimal

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("category", "name", "hours", "rate", "amount")
AMOUNT_DRIVER_FIELDS = ("hours", "rate")


class AdjustmentCategory(str, Enum):
    GENERAL = "General"
    MEAL_BREAK = "Meal Break"
    OVERTIME_1 = "Overtime 1"
    OVERTIME_2 = "Overtime 2"
    ALLOWANCE = "Allowance"
    DEDUCTION = "Deduction"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    AdjustmentCategory.GENERAL: "General Adjustment",
    AdjustmentCategory.MEAL_BREAK: "Meal Allowance / Compensation",
    AdjustmentCategory.OVERTIME_1: "Overtime (First Tier)",
    AdjustmentCategory.OVERTIME_2: "Overtime (Second Tier)",
    AdjustmentCategory.ALLOWANCE: "Bonus / Allowance",
    AdjustmentCategory.DEDUCTION: "Deduction",
}

QUICK_ADD_PRESETS: dict[str, tuple[AdjustmentCategory, str]] = {
    "meal": (AdjustmentCategory.MEAL_BREAK, "Delayed Meal Brk"),
    "ot1": (AdjustmentCategory.OVERTIME_1, "OT First 2 Hrs"),
    "ot2": (AdjustmentCategory.OVERTIME_2, "OT After 2 Hrs"),
}


def new_item_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class AdjustmentItem:
    category: AdjustmentCategory = AdjustmentCategory.GENERAL
    name: str = ""
    hours: str = ""
    rate: str = ""
    amount: str = ""
    id: str = field(default_factory=new_item_id)

    @property
    def amount_value(self) -> Decimal:
        return parse_decimal(self.amount)

    @property
    def hours_value(self) -> Decimal:
        return parse_decimal(self.hours)


def coerce_category(value: AdjustmentCategory | str) -> AdjustmentCategory:
    if isinstance(value, AdjustmentCategory):
        return value
    try:
        return AdjustmentCategory(str(value).strip())
    except ValueError:
        valid = ", ".join(category.value for category in AdjustmentCategory)
        raise ValueError(f"Unknown adjustment category `{value}`. Expected one of: {valid}.") from None


def derived_amount(hours: str, rate: str) -> str | None:
    """Return hours x rate as a two-decimal string, or None when either side is not a number."""
    if not hours or not rate or not is_number(hours) or not is_number(rate):
        return None
    product = parse_decimal(hours) * parse_decimal(rate)
    return f"{product.quantize(CENT, rounding=ROUND_HALF_UP):.2f}"


def apply_field_edit(item: AdjustmentItem, field_name: str, value: str) -> AdjustmentItem:
    if field_name not in EDITABLE_FIELDS:
        raise ValueError(f"Unsupported adjustment field: {field_name}")

    if field_name == "category":
        updated = replace(item, category=coerce_category(value))
    else:
        updated = replace(item, **{field_name: "" if value is None else str(value)})

    # A manual amount stays until hours or rate is edited again.
    if field_name in AMOUNT_DRIVER_FIELDS:
        amount = derived_amount(updated.hours, updated.rate)
        if amount is not None:
            updated = replace(updated, amount=amount)
    return updated


class AdjustmentLedger:
    def __init__(self, items: list[AdjustmentItem] | None = None) -> None:
        self._items: list[AdjustmentItem] = list(items or [])

    def __iter__(self) -> Iterator[AdjustmentItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> tuple[AdjustmentItem, ...]:
        return tuple(self._items)

    def get(self, item_id: str) -> AdjustmentItem | None:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def add(self, category: AdjustmentCategory | str = AdjustmentCategory.GENERAL, name: str = "") -> AdjustmentItem:
        item = AdjustmentItem(category=coerce_category(category), name=name or "")
        self._items.append(item)
        logger.debug("Added adjustment %s (%s)", item.id, item.category.value)
        return item

    def add_preset(self, key: str) -> AdjustmentItem:
        if key not in QUICK_ADD_PRESETS:
            raise ValueError(f"Unknown quick-add preset: {key}")
        category, name = QUICK_ADD_PRESETS[key]
        return self.add(category, name)

    def remove(self, item_id: str) -> bool:
        before = len(self._items)
        self._items = [item for item in self._items if item.id != item_id]
        return len(self._items) != before

    def update(self, item_id: str, field_name: str, value: str) -> AdjustmentItem | None:
        for index, item in enumerate(self._items):
            if item.id != item_id:
                continue
            updated = apply_field_edit(item, field_name, value)
            self._items[index] = updated
            return updated
        return None

    def total(self) -> Decimal:
        return sum_adjustments(self._items)


def sum_adjustments(items: tuple[AdjustmentItem, ...] | list[AdjustmentItem]) -> Decimal:
    # Category never forces a sign; a deduction lowers the total only when entered negative.
    total = ZERO
    for item in items:
        total += item.amount_value
    return total
