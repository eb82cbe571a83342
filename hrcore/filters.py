from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

DATE_RANGE_OPTIONS = {
    "this_year": "Este Año",
    "last_year": "Año Anterior",
    "this_month": "Este Mes",
    "last_month": "Mes Anterior",
    "last_7_days": "Últimos 7 días",
    "custom": "Personalizado",
}
SORT_KEYS = ("count", "cost")
SORT_DIRECTIONS = ("asc", "desc")
ALL = "all"


@dataclass(frozen=True)
class AnalysisFilters:
    start_date: date
    end_date: date
    date_range: str = "custom"
    ug: Optional[str] = None
    contract_type: Optional[str] = None
    daily_salary_override: float = 0.0
    sort_key: str = "cost"
    sort_direction: str = "desc"


def _as_date(value: object) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def _optional_choice(value: object) -> Optional[str]:
    s = str(value).strip() if value is not None else ""
    if not s or s.lower() == ALL:
        return None
    return s


def _month_end(day: date) -> date:
    first_of_next = (day.replace(day=1) + timedelta(days=32)).replace(day=1)
    return first_of_next - timedelta(days=1)


def resolve_date_range(
    key: str,
    *,
    today: date,
    custom_start: Optional[date] = None,
    custom_end: Optional[date] = None,
    available_dates: Optional[Iterable[date]] = None,
) -> Tuple[date, date]:
    if key == "last_7_days":
        return today - timedelta(days=7), today
    if key == "this_month":
        return today.replace(day=1), _month_end(today)
    if key == "last_month":
        last_month_end = today.replace(day=1) - timedelta(days=1)
        return last_month_end.replace(day=1), last_month_end
    if key == "this_year":
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if key == "last_year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    dates: List[date] = sorted(d for d in (available_dates or []) if d is not None)
    if dates:
        default_start, default_end = dates[0], dates[-1]
    else:
        try:
            default_start = today.replace(year=today.year - 1)
        except ValueError:
            # Feb 29
            default_start = today - timedelta(days=365)
        default_end = today
    return custom_start or default_start, custom_end or default_end


def normalize_filters(
    raw: dict,
    *,
    available_dates: Optional[Iterable[date]] = None,
    today: Optional[date] = None,
) -> AnalysisFilters:
    today = today or date.today()

    date_range = str(raw.get("date_range") or "custom")
    if date_range not in DATE_RANGE_OPTIONS:
        date_range = "custom"
    start, end = resolve_date_range(
        date_range,
        today=today,
        custom_start=_as_date(raw.get("start_date")),
        custom_end=_as_date(raw.get("end_date")),
        available_dates=available_dates,
    )

    override = raw.get("daily_salary_override", 0.0)
    try:
        override = float(override or 0.0)
    except Exception:
        override = 0.0

    sort_key = raw.get("sort_key") or "cost"
    if sort_key not in SORT_KEYS:
        sort_key = "cost"
    sort_direction = raw.get("sort_direction") or "desc"
    if sort_direction not in SORT_DIRECTIONS:
        sort_direction = "desc"

    return AnalysisFilters(
        start_date=start,
        end_date=end,
        date_range=date_range,
        ug=_optional_choice(raw.get("ug")),
        contract_type=_optional_choice(raw.get("contract_type")),
        daily_salary_override=max(0.0, override),
        sort_key=sort_key,
        sort_direction=sort_direction,
    )
