from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from hrcore.charts import palette_scale, to_vega_spec
from hrcore.data import format_currency_0, sort_by_month
from hrcore.filters import AnalysisFilters
from hrcore.models import CollaboratorStatus, RecordType


def compute_kpis(collaborators: pd.DataFrame, records: pd.DataFrame) -> Dict[str, Any]:
    counts = records["type"].value_counts() if not records.empty else pd.Series(dtype=int)
    by_type = {rt.value: int(counts.get(rt.value, 0)) for rt in RecordType}
    active = int(collaborators["status"].eq(CollaboratorStatus.ACTIVO.value).sum()) if not collaborators.empty else 0
    total_cost = float(records["cost"].sum()) if not records.empty else 0.0
    return {
        "active_collaborators": active,
        "hires": by_type[RecordType.INGRESO.value],
        "terminations": by_type[RecordType.EGRESO.value],
        "sanctions": by_type[RecordType.SANCION.value],
        "absences": by_type[RecordType.AUSENCIA.value],
        "records_by_type": by_type,
        "total_cost": total_cost,
    }


def compute_monthly_activity(records: pd.DataFrame) -> pd.DataFrame:
    df = records.dropna(subset=["month"]) if not records.empty else records
    if df.empty:
        return pd.DataFrame(columns=["month", "hires", "terminations"])
    monthly = (
        df.assign(
            hires=df["type"].eq(RecordType.INGRESO.value).astype(int),
            terminations=df["type"].eq(RecordType.EGRESO.value).astype(int),
        )
        .groupby("month", sort=False)[["hires", "terminations"]]
        .sum()
        .reset_index()
    )
    return sort_by_month(monthly)


def compute_sanction_distribution(records: pd.DataFrame) -> pd.DataFrame:
    if records.empty:
        return pd.DataFrame(columns=["name", "value"])
    sanctions = records[records["type"] == RecordType.SANCION.value]
    if sanctions.empty:
        return pd.DataFrame(columns=["name", "value"])
    return (
        sanctions.groupby("sanction_type", sort=False)
        .size()
        .reset_index(name="value")
        .rename(columns={"sanction_type": "name"})
    )


def compute_dashboard(filters: AnalysisFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Dashboard page over the full history.

    Aggregates read ``ctx["records"]``, not ``ctx["filtered_records"]``; the
    date window, UG and contract type do not scope them. ``filters`` is only
    echoed back in the payload.
    """
    collaborators: pd.DataFrame = ctx.get("collaborators", pd.DataFrame())
    records: pd.DataFrame = ctx.get("records", pd.DataFrame())

    kpis = compute_kpis(collaborators, records)
    monthly = compute_monthly_activity(records)
    sanctions = compute_sanction_distribution(records)

    charts: Dict[str, Any] = {}
    if not monthly.empty:
        long_df = monthly.rename(columns={"hires": "Ingresos", "terminations": "Egresos"}).melt(
            id_vars="month", value_vars=["Ingresos", "Egresos"], var_name="metric", value_name="count"
        )
        bars = (
            alt.Chart(long_df)
            .mark_bar(cornerRadiusTopLeft=4, cornerRadiusTopRight=4)
            .encode(
                x=alt.X("month:N", title=None, sort=monthly["month"].tolist()),
                xOffset="metric:N",
                y=alt.Y("count:Q", title=None, axis=alt.Axis(format="d", gridDash=[3, 3])),
                color=alt.Color("metric:N", title=None, scale=alt.Scale(domain=["Ingresos", "Egresos"], range=["#4f46e5", "#ef4444"])),
                tooltip=["month", "metric", alt.Tooltip("count:Q", format="d")],
            )
            .properties(height=300)
        )
        charts["monthly_activity"] = to_vega_spec(bars)
    if not sanctions.empty:
        pie = (
            alt.Chart(sanctions)
            .mark_arc(outerRadius=100)
            .encode(
                theta=alt.Theta("value:Q"),
                color=alt.Color("name:N", title=None, scale=palette_scale()),
                tooltip=["name", alt.Tooltip("value:Q", format="d")],
            )
            .properties(height=300)
        )
        charts["sanctions_by_type"] = to_vega_spec(pie)

    return {
        "filters": asdict(filters),
        "kpis": kpis,
        "display": {"total_cost": format_currency_0(kpis["total_cost"])},
        "monthly_activity": monthly.to_dict(orient="records"),
        "sanctions_by_type": sanctions.to_dict(orient="records"),
        "charts": charts,
    }
