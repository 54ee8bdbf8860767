#!/usr/bin/env python3

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

import streamlit as st

from payslip_reconciler.adjustments import (
    EDITABLE_FIELDS,
    QUICK_ADD_PRESETS,
    AdjustmentCategory,
    AdjustmentLedger,
)
from payslip_reconciler.backfill import (
    backfill_from_adjustment,
    backfill_from_diff,
    confirmation_prompt,
    matches_selection,
)
from payslip_reconciler.core import SUPPORTED_PERIOD_LENGTHS, WorkLog, format_decimal, format_money
from payslip_reconciler.reconcile import (
    ALL_JOBS,
    HOUR_CATEGORIES,
    STATUS_MATCH,
    STATUS_UNDER_RECORDED,
    HourDiff,
    ReconciliationInput,
    reconcile,
    resolve_job,
)
from payslip_reconciler.store import JsonLogStore
from payslip_reconciler.utils.contracts import ContractError

APP_SESSION_SCHEMA_VERSION = "2026-10-payslip-reconciler-v1"


def apply_theme() -> None:
    st.markdown(
        """
<style>
.metric-card {
  background: #f8f9fa;
  border: 1px solid #dee2e6;
  border-radius: 8px;
  padding: 1rem 1.25rem;
  margin-bottom: 0.5rem;
}
.metric-card .label {
  font-size: 0.75rem;
  text-transform: uppercase;
  letter-spacing: 0.05em;
  color: #6c757d;
  font-weight: 600;
}
.metric-card .value {
  font-size: 1.25rem;
  font-weight: 700;
  color: #0f5d75;
}
.status-pill {
  display: inline-flex;
  padding: 0.25rem 0.75rem;
  border-radius: 9999px;
  font-size: 0.75rem;
  font-weight: 600;
  text-transform: uppercase;
}
.status-match { background: #dcfce7; color: #166534; }
.status-under { background: #fee2e2; color: #991b1b; }
.status-over { background: #fef9c3; color: #854d0e; }
</style>
        """,
        unsafe_allow_html=True,
    )


def reset_session_if_schema_changed() -> None:
    if st.session_state.get("_app_schema_version") == APP_SESSION_SCHEMA_VERSION:
        return
    for key in ["ledger", "pending_backfill", "notice"]:
        st.session_state.pop(key, None)
    st.session_state["_app_schema_version"] = APP_SESSION_SCHEMA_VERSION


def metric_card(label: str, value: str) -> None:
    st.markdown(
        f"""
<div class="metric-card">
  <div class="label">{label}</div>
  <div class="value">{value}</div>
</div>
        """,
        unsafe_allow_html=True,
    )


def status_pill(status: str) -> str:
    if status == STATUS_MATCH:
        return "<span class='status-pill status-match'>Matching</span>"
    if status == STATUS_UNDER_RECORDED:
        return "<span class='status-pill status-under'>Under-recorded</span>"
    return "<span class='status-pill status-over'>Over-recorded</span>"


def default_workspace_path() -> str:
    """Workspace passed by `payslip-reconcile-ui --workspace`, if any."""
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--workspace", default="workspace.json")
    args, _ = parser.parse_known_args(sys.argv[1:])
    return str(args.workspace)


def get_ledger() -> AdjustmentLedger:
    if "ledger" not in st.session_state:
        st.session_state["ledger"] = AdjustmentLedger()
    ledger: AdjustmentLedger = st.session_state["ledger"]
    return ledger


def request_backfill(log: WorkLog) -> None:
    st.session_state["pending_backfill"] = log


def render_pending_backfill(store: JsonLogStore, job_id: str, period_end: date) -> None:
    pending: WorkLog | None = st.session_state.get("pending_backfill")
    if pending is None:
        return
    if not matches_selection(pending, job_id, period_end):
        # Job or period changed since the request.
        st.session_state.pop("pending_backfill", None)
        st.info("Pending work log change discarded because the job or period changed.")
        return
    st.warning(confirmation_prompt(pending))
    c1, c2 = st.columns(2)
    if c1.button("Confirm", type="primary", key="confirm_backfill"):
        store.add_log(pending)
        st.session_state["notice"] = f"Saved {format_decimal(pending.duration, signed=True)} h ({pending.notes})."
        st.session_state.pop("pending_backfill", None)
        st.rerun()
    if c2.button("Cancel", key="cancel_backfill"):
        st.session_state.pop("pending_backfill", None)
        st.rerun()


def render_adjustments(ledger: AdjustmentLedger, job_id: str, period_end: date) -> None:
    st.subheader("Adjustments / Overtime")
    columns = st.columns(len(QUICK_ADD_PRESETS) + 1)
    if columns[0].button("+ Custom"):
        ledger.add()
    for column, (key, (category, name)) in zip(columns[1:], QUICK_ADD_PRESETS.items()):
        if column.button(f"+ {name}", key=f"preset_{key}"):
            ledger.add_preset(key)

    if not len(ledger):
        st.caption("Add extra payslip items such as overtime or meal compensation.")
        return

    categories = [category.value for category in AdjustmentCategory]
    for item in ledger.items:
        cols = st.columns([2, 3, 1, 1, 1.5, 1, 1])
        edits = {
            "category": cols[0].selectbox(
                "Category",
                categories,
                index=categories.index(item.category.value),
                key=f"category_{item.id}",
                label_visibility="collapsed",
            ),
            "name": cols[1].text_input("Name", item.name, key=f"name_{item.id}", label_visibility="collapsed"),
            "hours": cols[2].text_input("Hours", item.hours, key=f"hours_{item.id}", label_visibility="collapsed"),
            "rate": cols[3].text_input("Rate", item.rate, key=f"rate_{item.id}", label_visibility="collapsed"),
            "amount": cols[4].text_input("Amount", item.amount, key=f"amount_{item.id}", label_visibility="collapsed"),
        }
        changed = False
        for field_name in EDITABLE_FIELDS:
            current = getattr(item, field_name)
            current = current.value if field_name == "category" else current
            if edits[field_name] != current:
                ledger.update(item.id, field_name, edits[field_name])
                changed = True
        if changed:
            # Widgets keep their own state; drop the amount key so a recomputed amount shows up.
            st.session_state.pop(f"amount_{item.id}", None)
            st.rerun()
        if cols[5].button("Save", key=f"save_{item.id}", help="Save hours to the work log"):
            outcome = backfill_from_adjustment(item, job_id, period_end)
            if outcome.log is None:
                st.error(outcome.message)
            else:
                request_backfill(outcome.log)
        if cols[6].button("Remove", key=f"remove_{item.id}"):
            ledger.remove(item.id)
            st.rerun()
    st.markdown(f"**Adjustment total:** {format_decimal(ledger.total(), signed=True)}")


def render_diff_row(diff: HourDiff, job_id: str, period_end: date) -> None:
    c1, c2, c3 = st.columns([3, 2, 2])
    c1.markdown(
        f"**{diff.category.title()}** App {format_decimal(diff.app_hours)} / "
        f"Payslip {format_decimal(diff.payslip_hours)} {status_pill(diff.status)}",
        unsafe_allow_html=True,
    )
    c2.markdown(f"`{format_decimal(diff.difference, signed=True)}`")
    if diff.status == STATUS_MATCH:
        return
    label = "Backfill" if diff.status == STATUS_UNDER_RECORDED else "Correct"
    if c3.button(label, key=f"backfill_{diff.category}"):
        log = backfill_from_diff(diff, job_id, period_end)
        if log is not None:
            request_backfill(log)


def main() -> None:
    st.set_page_config(page_title="Payslip Reconciler", page_icon="🧾", layout="wide")
    apply_theme()
    reset_session_if_schema_changed()
    st.title("Payslip Reconciliation")

    with st.sidebar:
        workspace_path = Path(st.text_input("Workspace file", value=default_workspace_path()))

    try:
        store = JsonLogStore(workspace_path)
    except FileNotFoundError:
        st.error(f"Workspace `{workspace_path}` not found.")
        return
    except (ContractError, ValueError, KeyError) as e:
        st.error(f"Invalid workspace: {e}")
        return
    workspace = store.workspace
    currency = workspace.settings.currency

    with st.sidebar:
        job_ids = [job.id for job in workspace.jobs]
        names = {job.id: job.name for job in workspace.jobs}
        default_id = workspace.active_job_id
        selected = st.selectbox(
            "Job",
            job_ids,
            index=job_ids.index(default_id) if default_id in job_ids else 0,
            format_func=lambda job_id: names.get(job_id, job_id),
        ) if job_ids else None
        if default_id == ALL_JOBS and job_ids:
            st.caption("All-jobs view reconciles against the first job by default.")
        end_date = st.date_input("Period end date", value=date.today())
        period_length = st.selectbox("Period length (days)", SUPPORTED_PERIOD_LENGTHS)

    job = resolve_job(workspace.jobs, selected)
    if job is None:
        st.info("Please add a job first.")
        return

    notice = st.session_state.pop("notice", None)
    if notice:
        st.success(notice)

    st.subheader("Payslip Figures")
    c1, c2, c3, c4 = st.columns(4)
    weekday_hours = c1.text_input("Weekday hours", "0")
    weekend_hours = c2.text_input("Weekend hours", "0")
    allowances = c3.text_input("Allowances", "0")
    tax_rate = c4.text_input("Tax rate %", str(workspace.settings.default_tax_rate))

    ledger = get_ledger()
    render_adjustments(ledger, job.id, end_date)

    result = reconcile(
        ReconciliationInput(
            end_date=end_date,
            period_length=int(period_length),
            weekday_hours=weekday_hours,
            weekend_hours=weekend_hours,
            allowances=allowances,
            tax_rate=tax_rate,
            adjustments=ledger.items,
        ),
        store.logs(),
        job,
    )

    st.subheader(f"App Record ({job.name})")
    st.caption(f"{result.window.start.isoformat()} to {result.window.end.isoformat()}")
    m1, m2, m3, m4 = st.columns(4)
    with m1:
        metric_card("Weekday hours", format_decimal(result.app_hours.weekday_hours))
    with m2:
        metric_card("Weekend hours", format_decimal(result.app_hours.weekend_hours))
    with m3:
        metric_card("App net (no adjustments)", format_money(result.app_pay.net, currency))
    with m4:
        metric_card("Payslip net", format_money(result.payslip_pay.net, currency))

    st.subheader("Differences")
    for category in HOUR_CATEGORIES:
        render_diff_row(result.hour_diffs[category], job.id, result.window.end)
    if result.show_adjustment_diff:
        st.info(
            f"Payslip-only adjustments: {format_decimal(result.adjustment_total, signed=True)}. "
            "Save items that carry hours to keep tracked hours accurate."
        )
    render_pending_backfill(store, job.id, result.window.end)

    difference = result.pay_diff.difference
    verdict = "under-counted" if difference > 0 else "over-counted" if difference < 0 else "matching"
    st.markdown(f"### Total difference: {format_money(abs(difference), currency)} ({verdict})")


if __name__ == "__main__":
    main()
