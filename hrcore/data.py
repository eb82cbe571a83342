from __future__ import annotations

import re
from dataclasses import asdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from hrcore.filters import AnalysisFilters, normalize_filters
from hrcore.models import (
    AbsenceDetails,
    Collaborator,
    HireDetails,
    HRRecord,
    SanctionDetails,
    Snapshot,
    TerminationDetails,
)

MONTH_ABBREVIATIONS = ["ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sept", "oct", "nov", "dic"]
_MONTH_LOOKUP = {name: idx + 1 for idx, name in enumerate(MONTH_ABBREVIATIONS)}
_MONTH_LOOKUP["sep"] = 9

COLLABORATOR_COLUMNS = [
    "id", "name", "dni", "legajo", "cuil", "position", "ug", "status", "hire_date",
    "contract_type", "category", "cct", "service", "turn", "observations",
]
RECORD_COLUMNS = [
    "id", "date", "month", "collaborator_id", "ug", "position", "type", "cost", "observations",
    "salary", "termination_reason", "sanction_type", "sanction_reason", "absence_reason", "days",
]


# ---------------- Month labels ----------------
def month_label(ts: pd.Timestamp) -> Optional[str]:
    """Short Spanish month plus two-digit year, e.g. ``"ene 24"``."""
    if ts is None or pd.isna(ts):
        return None
    return f"{MONTH_ABBREVIATIONS[ts.month - 1]} {ts.year % 100:02d}"


def parse_month_label(label: str) -> Tuple[Optional[int], Optional[int]]:
    """Parse ``"ene 24"`` / ``"sept. 23"`` -> (2024, 1) / (2023, 9)."""
    match = re.match(r"^\s*([a-záéíóú]+)\.?\s+(\d{2})\s*$", str(label).lower())
    if not match:
        return None, None
    month = _MONTH_LOOKUP.get(match.group(1))
    if month is None:
        return None, None
    return 2000 + int(match.group(2)), month


def month_sort_key(label: str) -> int:
    year, month = parse_month_label(label)
    if year is None or month is None:
        return 10**6
    return year * 12 + (month - 1)


def sort_by_month(df: pd.DataFrame, col: str = "month") -> pd.DataFrame:
    if df.empty:
        return df
    return df.sort_values(col, key=lambda s: s.map(month_sort_key), kind="stable").reset_index(drop=True)


# ---------------- Formatting ----------------
def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_currency_0(value: object) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"${float(value):,.0f}"


def format_percent_1(value: object) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"{round_half_up(value, 1):.1f}%"


# ---------------- Frames ----------------
def to_naive_datetime(values: pd.Series) -> pd.Series:
    """Parse ISO dates, naive or offset-suffixed, into naive UTC timestamps.

    Unparseable values become NaT.
    """
    parsed = pd.to_datetime(values, errors="coerce", format="ISO8601", utc=True)
    return parsed.dt.tz_convert(None)


def _details_columns(record: HRRecord) -> Dict[str, object]:
    details = record.details
    cols: Dict[str, object] = {}
    if isinstance(details, HireDetails):
        cols["salary"] = details.salary
    elif isinstance(details, TerminationDetails):
        cols["termination_reason"] = details.reason.value
    elif isinstance(details, SanctionDetails):
        cols["sanction_type"] = details.type.value
        cols["sanction_reason"] = details.reason
    elif isinstance(details, AbsenceDetails):
        cols["absence_reason"] = details.reason.value
        cols["days"] = details.days
    return cols


def collaborators_frame(collaborators: Iterable[Collaborator]) -> pd.DataFrame:
    rows = []
    for c in collaborators:
        row = asdict(c)
        row["status"] = c.status.value
        row["contract_type"] = c.contract_type.value
        rows.append(row)
    df = pd.DataFrame(rows, columns=COLLABORATOR_COLUMNS)
    df["hire_date"] = to_naive_datetime(df["hire_date"])
    return df


def records_frame(records: Iterable[HRRecord]) -> pd.DataFrame:
    rows = []
    for r in records:
        row = {
            "id": r.id,
            "date": r.date,
            "collaborator_id": r.collaborator_id,
            "ug": r.ug,
            "position": r.position,
            "type": r.type.value,
            "cost": r.cost,
            "observations": r.observations,
        }
        row.update(_details_columns(r))
        rows.append(row)
    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    df["date"] = to_naive_datetime(df["date"])
    df["month"] = df["date"].apply(month_label) if not df.empty else pd.Series(dtype=object)
    for col in ["cost", "salary", "days"]:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    df["cost"] = df["cost"].fillna(0.0)
    return df


def available_dates(records: Iterable[HRRecord]) -> List[date]:
    out: List[date] = []
    for r in records:
        try:
            out.append(date.fromisoformat(r.date[:10]))
        except ValueError:
            continue
    return out


def window_bounds(filters: AnalysisFilters) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """Inclusive day window: start at 00:00:00.000, end at 23:59:59.999."""
    start = pd.Timestamp(filters.start_date).normalize()
    end = pd.Timestamp(filters.end_date).normalize() + pd.Timedelta(days=1) - pd.Timedelta(milliseconds=1)
    return start, end


def filter_records(
    records: pd.DataFrame, collaborators: pd.DataFrame, filters: AnalysisFilters
) -> pd.DataFrame:
    """Records in the window matching UG and contract type.

    Records whose collaborator no longer exists are dropped.
    """
    if records.empty:
        return records.assign(contract_type=pd.Series(dtype=object))
    contract_map = dict(zip(collaborators["id"], collaborators["contract_type"]))
    df = records.assign(contract_type=records["collaborator_id"].map(contract_map))
    start, end = window_bounds(filters)
    mask = df["contract_type"].notna() & df["date"].notna() & (df["date"] >= start) & (df["date"] <= end)
    if filters.ug:
        mask &= df["ug"] == filters.ug
    if filters.contract_type:
        mask &= df["contract_type"] == filters.contract_type
    return df[mask].reset_index(drop=True)


# ---------------- Public API ----------------
def load_frames(snapshot: Snapshot) -> Dict[str, object]:
    collaborators = collaborators_frame(snapshot.collaborators)
    records = records_frame(snapshot.records)
    return {
        "collaborators": collaborators,
        "records": records,
        "ugs": sorted(collaborators["ug"].dropna().astype(str).unique().tolist()),
        "dates": available_dates(snapshot.records),
    }


def prepare_context(
    filters: dict | AnalysisFilters, snapshot: Snapshot, *, today: Optional[date] = None
) -> Dict[str, object]:
    data_ctx = load_frames(snapshot)
    filt = (
        filters
        if isinstance(filters, AnalysisFilters)
        else normalize_filters(filters, available_dates=data_ctx["dates"], today=today)
    )
    collaborators: pd.DataFrame = data_ctx["collaborators"]
    records: pd.DataFrame = data_ctx["records"]
    start, end = window_bounds(filt)
    return {
        "filters": filt,
        "window": (start, end),
        "collaborators": collaborators,
        "records": records,
        "filtered_records": filter_records(records, collaborators, filt),
        "ugs": data_ctx["ugs"],
    }
