from datetime import date

from hrcore.data import prepare_context
from hrcore.metrics_dashboard import compute_dashboard
from hrcore.models import Snapshot
from hrcore.seed import seed_snapshot


def _dashboard(snapshot):
    ctx = prepare_context({}, snapshot, today=date(2024, 3, 15))
    return compute_dashboard(ctx["filters"], ctx)


def test_kpis_over_seed():
    payload = _dashboard(seed_snapshot())
    kpis = payload["kpis"]
    assert kpis["active_collaborators"] == 4
    assert kpis["hires"] == 5
    assert kpis["terminations"] == 1
    assert kpis["sanctions"] == 2
    assert kpis["absences"] == 2
    assert kpis["total_cost"] == 13300.0
    assert payload["display"]["total_cost"] == "$13,300"


def test_monthly_activity_is_chronological():
    months = [row["month"] for row in _dashboard(seed_snapshot())["monthly_activity"]]
    assert months == ["may 20", "nov 21", "ene 22", "mar 22", "feb 23", "abr 23", "may 23", "jun 23", "jul 23"]


def test_sanction_distribution_and_charts():
    payload = _dashboard(seed_snapshot())
    assert {row["name"]: row["value"] for row in payload["sanctions_by_type"]} == {
        "Apercibimiento escrito": 1,
        "Apercibimiento verbal": 1,
    }
    assert set(payload["charts"]) == {"monthly_activity", "sanctions_by_type"}
    assert "$schema" in payload["charts"]["monthly_activity"]


def test_recomputation_is_idempotent():
    snap = seed_snapshot()
    assert _dashboard(snap) == _dashboard(snap)


def test_empty_snapshot():
    payload = _dashboard(Snapshot())
    assert payload["kpis"]["active_collaborators"] == 0
    assert payload["kpis"]["total_cost"] == 0.0
    assert payload["monthly_activity"] == []
    assert payload["charts"] == {}


def test_dashboard_ignores_range_and_segment_filters():
    snap = seed_snapshot()
    narrow = prepare_context({"start_date": "2023-07-01", "end_date": "2023-07-01", "ug": "UG1-LEXXOR"}, snap)
    payload = compute_dashboard(narrow["filters"], narrow)
    assert payload["kpis"] == _dashboard(snap)["kpis"]
    assert payload["filters"]["ug"] == "UG1-LEXXOR"
