"""
CLI Entry Point: payslip-reconcile

Compares the hours tracked in a workspace against the figures printed on a
payslip and optionally writes backfill/correction entries to the work log.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any

from payslip_reconciler.adjustments import QUICK_ADD_PRESETS, AdjustmentLedger
from payslip_reconciler.backfill import backfill_from_adjustment, backfill_from_diff, commit_backfill
from payslip_reconciler.core import SUPPORTED_PERIOD_LENGTHS, Job, WorkLog, format_decimal, format_money
from payslip_reconciler.reconcile import (
    DIRECTION_OVER_COUNTED,
    DIRECTION_UNDER_COUNTED,
    HOUR_CATEGORIES,
    STATUS_OVER_RECORDED,
    STATUS_UNDER_RECORDED,
    ReconciliationInput,
    ReconciliationResult,
    reconcile,
    resolve_job,
)
from payslip_reconciler.store import JsonLogStore
from payslip_reconciler.utils import console
from payslip_reconciler.utils.contracts import ContractError, review_result
from payslip_reconciler.workspace import write_json

NO_JOB_MESSAGE = "Please add a job first."

STATUS_LABELS = {
    STATUS_UNDER_RECORDED: "Under-recorded in app (backfill available)",
    STATUS_OVER_RECORDED: "Over-recorded in app (correction available)",
}
DIRECTION_LABELS = {
    DIRECTION_UNDER_COUNTED: "under-counted",
    DIRECTION_OVER_COUNTED: "over-counted",
}


def parse_adjustment_spec(spec: str) -> list[tuple[str, str]]:
    """
    Parse `category=Overtime 1,name=OT First 2 Hrs,hours=2,rate=30` into ordered edits.

    Edits are applied in the order given, so `amount=` after `hours=`/`rate=`
    acts as a manual override of the computed amount.
    """
    edits: list[tuple[str, str]] = []
    for part in spec.split(","):
        if not part.strip():
            continue
        key, sep, value = part.partition("=")
        if not sep:
            raise ValueError(f"Adjustment field `{part.strip()}` must look like key=value.")
        edits.append((key.strip().lower(), value.strip()))
    return edits


def build_ledger(specs: list[str], presets: list[str]) -> AdjustmentLedger:
    ledger = AdjustmentLedger()
    for preset in presets:
        ledger.add_preset(preset)
    for spec in specs:
        edits = parse_adjustment_spec(spec)
        category = next((value for key, value in edits if key == "category"), "General")
        item = ledger.add(category)
        for key, value in edits:
            if key == "category":
                continue
            ledger.update(item.id, key, value)
    return ledger


def parse_end_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date `{value}`, expected YYYY-MM-DD.") from None


def output_human(
    result: ReconciliationResult,
    ledger: AdjustmentLedger,
    job: Job,
    allowances: str,
    currency: str,
) -> None:
    console.print_step(f"Payslip Reconciliation: {job.name}")
    console.print_line(
        f"Period: {result.window.start.isoformat()} to {result.window.end.isoformat()} ({result.window.length} days)"
    )

    console.print_table(
        "App Record",
        ["Item", "Value"],
        [
            ["Weekday hours", format_decimal(result.app_hours.weekday_hours)],
            ["Weekend hours", format_decimal(result.app_hours.weekend_hours)],
            ["Estimated base pay", format_money(result.estimated_base_pay, currency)],
            ["App net (allowances, no adjustments)", format_money(result.app_pay.net, currency)],
        ],
    )

    if len(ledger):
        console.print_table(
            "Adjustments",
            ["#", "Category", "Name", "Hours", "Rate", "Amount"],
            [
                [str(index), item.category.value, item.name, item.hours, item.rate, item.amount]
                for index, item in enumerate(ledger, start=1)
            ],
        )

    console.print_table(
        "Payslip",
        ["Item", "Value"],
        [
            ["Weekday hours", format_decimal(result.hour_diffs["weekday"].payslip_hours)],
            ["Weekend hours", format_decimal(result.hour_diffs["weekend"].payslip_hours)],
            ["Allowances", allowances or "0"],
            ["Adjustment total", format_decimal(result.adjustment_total, signed=True)],
            ["Gross pay", format_money(result.payslip_pay.gross, currency)],
            ["Net pay", format_money(result.payslip_pay.net, currency)],
        ],
    )

    console.print_table(
        "Differences (payslip - app)",
        ["Category", "App", "Payslip", "Diff", "Status"],
        [
            [
                diff.category,
                format_decimal(diff.app_hours),
                format_decimal(diff.payslip_hours),
                format_decimal(diff.difference, signed=True),
                STATUS_LABELS.get(diff.status, "Matching"),
            ]
            for diff in (result.hour_diffs[category] for category in HOUR_CATEGORIES)
        ],
    )

    if result.show_adjustment_diff:
        console.print_line(
            f"Adjustment items on payslip only: {format_decimal(result.adjustment_total, signed=True)}",
            style="blue",
        )
    direction = DIRECTION_LABELS.get(result.pay_diff.direction, "matching")
    console.print_line(
        f"Total difference: {format_money(abs(result.pay_diff.difference), currency)} ({direction})",
        style="bold red" if result.pay_diff.difference > 0 else "bold green",
    )
    for note in result.notes:
        console.print_warning(note)


def run_backfills(
    args: argparse.Namespace,
    result: ReconciliationResult,
    ledger: AdjustmentLedger,
    store: JsonLogStore,
    job: Job,
) -> int:
    # Status messages go to stderr under --json so stdout stays parseable.
    to_stderr = bool(args.json)

    def confirm(prompt: str) -> bool:
        return True if args.yes else console.ask_confirm(prompt, default=False)

    def skipped(log: WorkLog) -> None:
        console.print_warning(f"Skipped {log.notes}. Pass --yes to confirm non-interactively.", stderr=to_stderr)

    written = 0
    for category in args.backfill or []:
        log = backfill_from_diff(result.hour_diffs[category], job.id, result.window.end)
        if log is None:
            console.print_warning(f"No {category} difference to backfill.", stderr=to_stderr)
            continue
        if not commit_backfill(log, store, confirm):
            skipped(log)
            continue
        written += 1
        added = format_decimal(log.duration, signed=True)
        console.print_success(f"Added {added} h ({log.notes}).", stderr=to_stderr)

    items = ledger.items
    for index in args.save_adjustment or []:
        if not 1 <= index <= len(items):
            console.print_error(f"No adjustment #{index} (have {len(items)}).", stderr=to_stderr)
            continue
        outcome = backfill_from_adjustment(items[index - 1], job.id, result.window.end)
        if outcome.log is None:
            console.print_warning(f"Adjustment #{index}: {outcome.message}", stderr=to_stderr)
            continue
        if not commit_backfill(outcome.log, store, confirm):
            skipped(outcome.log)
            continue
        written += 1
        added = format_decimal(outcome.log.duration)
        console.print_success(f"Added {added} h ({outcome.log.notes}).", stderr=to_stderr)

    if written:
        console.print_line(
            "Work log updated. Re-run the reconciliation to see the refreshed differences.", stderr=to_stderr
        )
    return written


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Reconcile tracked work hours against a payslip.")
    parser.add_argument("--workspace", type=Path, required=True, help="Workspace JSON with settings, jobs and logs.")
    parser.add_argument("--job", default=None, help="Job id to reconcile (default: workspace selection).")
    parser.add_argument("--end-date", type=parse_end_date, default=None, help="Period end date (default: today).")
    parser.add_argument(
        "--period-length", type=int, choices=SUPPORTED_PERIOD_LENGTHS, default=14, help="Period length in days."
    )
    parser.add_argument("--weekday-hours", default="0", help="Weekday hours printed on the payslip.")
    parser.add_argument("--weekend-hours", default="0", help="Weekend hours printed on the payslip.")
    parser.add_argument("--allowances", default="0", help="Allowances printed on the payslip.")
    parser.add_argument("--tax-rate", default=None, help="Flat tax rate percent (default: workspace setting).")
    parser.add_argument(
        "--adjustment",
        action="append",
        default=[],
        help="Adjustment line, e.g. 'category=Overtime 1,name=OT,hours=2,rate=30'. Repeatable.",
    )
    parser.add_argument(
        "--quick-add", action="append", default=[], choices=sorted(QUICK_ADD_PRESETS), help="Add a preset line."
    )
    parser.add_argument(
        "--backfill", action="append", choices=["weekday", "weekend"], help="Write a backfill/correction entry."
    )
    parser.add_argument(
        "--save-adjustment", action="append", type=int, help="Save the hours of adjustment #N to the work log."
    )
    parser.add_argument("--yes", action="store_true", help="Confirm work log writes without prompting.")
    parser.add_argument("--interactive", action="store_true", help="Prompt for payslip figures.")
    parser.add_argument("--json", action="store_true", help="Output machine-readable JSON.")
    parser.add_argument("--json-out", type=Path, default=None, help="Write the result JSON to this path.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    console.setup_logging(args.verbose)

    try:
        store = JsonLogStore(args.workspace)
    except FileNotFoundError as e:
        sys.exit(f"Error: {e}")
    except (ContractError, ValueError, KeyError) as e:
        sys.exit(f"Invalid workspace: {e}")
    workspace = store.workspace

    job = resolve_job(workspace.jobs, args.job or workspace.active_job_id)
    if job is None:
        console.print_error(NO_JOB_MESSAGE, exit_code=2)
        return

    tax_rate = args.tax_rate if args.tax_rate is not None else str(workspace.settings.default_tax_rate)
    weekday_hours, weekend_hours, allowances = args.weekday_hours, args.weekend_hours, args.allowances
    if args.interactive:
        weekday_hours = console.ask_input("Payslip weekday hours", default=weekday_hours)
        weekend_hours = console.ask_input("Payslip weekend hours", default=weekend_hours)
        allowances = console.ask_input("Allowances", default=allowances)
        tax_rate = console.ask_input("Tax rate %", default=tax_rate)

    try:
        ledger = build_ledger(args.adjustment, args.quick_add)
    except ValueError as e:
        sys.exit(f"Invalid adjustment: {e}")

    inp = ReconciliationInput(
        end_date=args.end_date or date.today(),
        period_length=args.period_length,
        weekday_hours=weekday_hours,
        weekend_hours=weekend_hours,
        allowances=allowances,
        tax_rate=tax_rate,
        adjustments=ledger.items,
    )
    result = reconcile(inp, store.logs(), job)

    payload: dict[str, Any] = result.to_dict()
    review_result(payload)
    if args.json_out:
        write_json(args.json_out, payload)

    if args.json:
        print(json.dumps(payload, indent=2))
    else:
        output_human(result, ledger, job, allowances, workspace.settings.currency)

    run_backfills(args, result, ledger, store, job)


if __name__ == "__main__":
    main()
