"""Impact analysis: turnover, absenteeism cost and egress/sanction correlation.

All functions are pure over the frames built by ``hrcore.data``. Range-scoped
figures use ``ctx["filtered_records"]``; headcount and the salary baseline use
the unfiltered history.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from hrcore.charts import palette_scale, to_vega_spec
from hrcore.data import format_currency_0, format_percent_1, sort_by_month
from hrcore.filters import AnalysisFilters
from hrcore.models import RecordType

WORKDAYS_PER_MONTH = 22

EGRESO = RecordType.EGRESO.value
SANCION = RecordType.SANCION.value
AUSENCIA = RecordType.AUSENCIA.value
INGRESO = RecordType.INGRESO.value


# ---------------- Headcount & turnover ----------------
def termination_dates(records: pd.DataFrame) -> pd.Series:
    """Termination date per collaborator id; the last record in log order wins."""
    if records.empty:
        return pd.Series(dtype="datetime64[ns]")
    terms = records[records["type"] == EGRESO]
    return terms.drop_duplicates(subset="collaborator_id", keep="last").set_index("collaborator_id")["date"]


def headcount_at(collaborators: pd.DataFrame, term_dates: pd.Series, ts: pd.Timestamp) -> int:
    """Collaborators hired on/before ``ts`` and not terminated on/before it."""
    if collaborators.empty:
        return 0
    terminated_on = pd.to_datetime(collaborators["id"].map(term_dates), errors="coerce")
    hired = collaborators["hire_date"].notna() & (collaborators["hire_date"] <= ts)
    still_there = terminated_on.isna() | (terminated_on > ts)
    return int((hired & still_there).sum())


def compute_turnover(
    collaborators: pd.DataFrame,
    records: pd.DataFrame,
    filtered: pd.DataFrame,
    start: pd.Timestamp,
    end: pd.Timestamp,
) -> Dict[str, Any]:
    term_dates = termination_dates(records)
    at_start = headcount_at(collaborators, term_dates, start)
    at_end = headcount_at(collaborators, term_dates, end)
    avg_headcount = (at_start + at_end) / 2

    terminations = filtered[filtered["type"] == EGRESO] if not filtered.empty else filtered
    count = int(len(terminations))
    rate = (count / avg_headcount) * 100 if avg_headcount > 0 else 0.0
    return {
        "headcount_start": at_start,
        "headcount_end": at_end,
        "average_headcount": avg_headcount,
        "terminations": count,
        "turnover_rate": rate,
        "turnover_cost": float(terminations["cost"].sum()) if count else 0.0,
    }


def compute_termination_reasons(
    filtered: pd.DataFrame, sort_key: str = "cost", sort_direction: str = "desc"
) -> pd.DataFrame:
    """Terminations grouped by reason with count and total cost.

    Ties keep first-appearance order in either direction.
    """
    columns = ["name", "count", "cost"]
    if filtered.empty:
        return pd.DataFrame(columns=columns)
    terms = filtered[filtered["type"] == EGRESO]
    if terms.empty:
        return pd.DataFrame(columns=columns)
    grouped = (
        terms.groupby("termination_reason", sort=False)
        .agg(count=("id", "size"), cost=("cost", "sum"))
        .reset_index()
        .rename(columns={"termination_reason": "name"})
    )
    return grouped.sort_values(sort_key, ascending=sort_direction == "asc", kind="stable").reset_index(drop=True)


# ---------------- Absenteeism ----------------
def average_hire_salary(records: pd.DataFrame) -> float:
    if records.empty:
        return 0.0
    salaries = records.loc[records["type"] == INGRESO, "salary"].dropna()
    return float(salaries.mean()) if not salaries.empty else 0.0


def effective_daily_salary(records: pd.DataFrame, override: float = 0.0) -> float:
    if override and override > 0:
        return float(override)
    return average_hire_salary(records) / WORKDAYS_PER_MONTH


def compute_absenteeism(filtered: pd.DataFrame, records: pd.DataFrame, override: float = 0.0) -> Dict[str, Any]:
    absences = filtered[filtered["type"] == AUSENCIA] if not filtered.empty else filtered
    total_days = float(absences["days"].fillna(0).sum()) if not absences.empty else 0.0
    daily = effective_daily_salary(records, override)
    return {
        "absence_days": total_days,
        "average_monthly_salary": average_hire_salary(records),
        "effective_daily_salary": daily,
        "manual_daily_salary": bool(override and override > 0),
        "absenteeism_cost": total_days * daily,
    }


# ---------------- Monthly series ----------------
def compute_correlation_series(filtered: pd.DataFrame) -> pd.DataFrame:
    """Per month: terminations, their cost and sanctions."""
    columns = ["month", "terminations", "termination_cost", "sanctions"]
    df = filtered.dropna(subset=["month"]) if not filtered.empty else filtered
    if df.empty:
        return pd.DataFrame(columns=columns)
    is_term = df["type"].eq(EGRESO)
    monthly = (
        df.assign(
            terminations=is_term.astype(int),
            termination_cost=df["cost"].where(is_term, 0.0),
            sanctions=df["type"].eq(SANCION).astype(int),
        )
        .groupby("month", sort=False)[["terminations", "termination_cost", "sanctions"]]
        .sum()
        .reset_index()
    )
    return sort_by_month(monthly)[columns]


def compute_sanction_costs(filtered: pd.DataFrame) -> pd.DataFrame:
    """Sanction cost per month and sanction type (long format)."""
    columns = ["month", "sanction_type", "cost"]
    if filtered.empty:
        return pd.DataFrame(columns=columns)
    sanctions = filtered[(filtered["type"] == SANCION) & filtered["month"].notna()]
    if sanctions.empty:
        return pd.DataFrame(columns=columns)
    grouped = (
        sanctions.groupby(["month", "sanction_type"], sort=False)["cost"]
        .sum()
        .reset_index()
    )
    return sort_by_month(grouped)[columns]


# ---------------- Page payload ----------------
def _correlation_chart(series: pd.DataFrame) -> Dict[str, Any]:
    order = series["month"].tolist()
    base = alt.Chart(series).encode(x=alt.X("month:N", title=None, sort=order))
    bars = base.mark_bar(color="#ef4444", opacity=0.8).encode(
        y=alt.Y("terminations:Q", title="Egresos", axis=alt.Axis(format="d")),
        tooltip=[
            "month",
            alt.Tooltip("terminations:Q", title="Egresos", format="d"),
            alt.Tooltip("termination_cost:Q", title="Costo Egresos", format="$,.0f"),
        ],
    )
    line = base.mark_line(point=True, color="#f59e0b").encode(
        y=alt.Y("sanctions:Q", title="Sanciones", axis=alt.Axis(format="d", orient="right")),
        tooltip=["month", alt.Tooltip("sanctions:Q", title="Sanciones", format="d")],
    )
    return to_vega_spec(alt.layer(bars, line).resolve_scale(y="independent").properties(height=300))


def compute_impact(filters: AnalysisFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    collaborators: pd.DataFrame = ctx.get("collaborators", pd.DataFrame())
    records: pd.DataFrame = ctx.get("records", pd.DataFrame())
    filtered: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    start, end = ctx["window"]

    turnover = compute_turnover(collaborators, records, filtered, start, end)
    absenteeism = compute_absenteeism(filtered, records, filters.daily_salary_override)
    reasons = compute_termination_reasons(filtered, filters.sort_key, filters.sort_direction)
    correlation = compute_correlation_series(filtered)
    sanction_costs = compute_sanction_costs(filtered)

    charts: Dict[str, Any] = {}
    if not correlation.empty:
        charts["correlation"] = _correlation_chart(correlation)
    if not reasons.empty:
        pie = (
            alt.Chart(reasons)
            .mark_arc(outerRadius=100)
            .encode(
                theta=alt.Theta("cost:Q"),
                color=alt.Color("name:N", title=None, scale=palette_scale()),
                tooltip=["name", alt.Tooltip("count:Q", format="d"), alt.Tooltip("cost:Q", format="$,.0f")],
            )
            .properties(height=300)
        )
        charts["termination_reasons"] = to_vega_spec(pie)
    if not sanction_costs.empty:
        stacked = (
            alt.Chart(sanction_costs)
            .mark_bar()
            .encode(
                x=alt.X("month:N", title=None, sort=sanction_costs["month"].drop_duplicates().tolist()),
                y=alt.Y("cost:Q", stack="zero", title="Costo", axis=alt.Axis(format="$~s")),
                color=alt.Color("sanction_type:N", title=None, scale=palette_scale()),
                tooltip=["month", "sanction_type", alt.Tooltip("cost:Q", format="$,.0f")],
            )
            .properties(height=300)
        )
        charts["sanction_costs"] = to_vega_spec(stacked)

    return {
        "filters": asdict(filters),
        "window": {"start": start.isoformat(), "end": end.isoformat()},
        "kpis": {**turnover, **absenteeism},
        "display": {
            "turnover_rate": format_percent_1(turnover["turnover_rate"]),
            "turnover_cost": format_currency_0(turnover["turnover_cost"]),
            "absenteeism_cost": format_currency_0(absenteeism["absenteeism_cost"]),
        },
        "termination_reasons": reasons.to_dict(orient="records"),
        "correlation": {"series": correlation.to_dict(orient="records"), "has_data": not correlation.empty},
        "sanction_costs": sanction_costs.to_dict(orient="records"),
        "charts": charts,
    }
