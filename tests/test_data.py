from datetime import date

import pandas as pd

from hrcore.data import (
    filter_records,
    format_currency_0,
    format_percent_1,
    month_label,
    parse_month_label,
    prepare_context,
    sort_by_month,
)
from hrcore.filters import AnalysisFilters
from hrcore.models import AbsenceDetails, AbsenceReason, HRRecord, Snapshot
from hrcore.seed import SEED_COLLABORATORS, SEED_RECORDS


def test_month_labels():
    assert month_label(pd.Timestamp("2024-01-05")) == "ene 24"
    assert month_label(pd.Timestamp("2023-09-30")) == "sept 23"
    assert month_label(pd.NaT) is None
    assert parse_month_label("sep. 23") == (2023, 9)
    assert parse_month_label("xyz") == (None, None)


def test_sort_by_month_is_chronological():
    df = pd.DataFrame({"month": ["ene 24", "dic 23", "mar 22"]})
    assert sort_by_month(df)["month"].tolist() == ["mar 22", "dic 23", "ene 24"]


def test_formatting():
    assert format_currency_0(1234.4) == "$1,234"
    assert format_percent_1(12.25) == "12.3%"
    assert format_percent_1(None) == "N/A"


def test_window_is_inclusive_and_orphans_are_dropped():
    orphan = HRRecord("o1", "2023-06-30", "ghost", "U", "P", AbsenceDetails(AbsenceReason.ART, 1))
    snap = Snapshot(SEED_COLLABORATORS, SEED_RECORDS + (orphan,))
    filters = AnalysisFilters(start_date=date(2023, 6, 30), end_date=date(2023, 7, 1))
    ctx = prepare_context(filters, snap)
    assert ctx["filtered_records"]["id"].tolist() == ["r6", "r9"]


def test_ug_and_contract_filters():
    snap = Snapshot(SEED_COLLABORATORS, SEED_RECORDS)
    ctx = prepare_context(
        {"start_date": "2020-01-01", "end_date": "2024-12-31", "ug": "UG3-VITSA CORDOBA", "contract_type": "Indeterminado"},
        snap,
    )
    assert ctx["filtered_records"]["id"].tolist() == ["r4", "r6"]
    assert ctx["ugs"] == ["UG1-LEXXOR", "UG2-VISTA MENDOZA", "UG3-VITSA CORDOBA"]


def test_filter_records_on_empty_frames():
    ctx = prepare_context({}, Snapshot(), today=date(2024, 3, 15))
    filtered = filter_records(ctx["records"], ctx["collaborators"], ctx["filters"])
    assert filtered.empty
