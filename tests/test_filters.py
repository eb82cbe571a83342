from datetime import date

import pytest

from hrcore.filters import AnalysisFilters, normalize_filters, resolve_date_range


@pytest.mark.parametrize(
    "key, expected",
    [
        ("last_7_days", (date(2024, 3, 8), date(2024, 3, 15))),
        ("this_month", (date(2024, 3, 1), date(2024, 3, 31))),
        ("last_month", (date(2024, 2, 1), date(2024, 2, 29))),
        ("this_year", (date(2024, 1, 1), date(2024, 12, 31))),
        ("last_year", (date(2023, 1, 1), date(2023, 12, 31))),
    ],
)
def test_presets(key, expected, today):
    assert resolve_date_range(key, today=today) == expected


def test_custom_defaults_to_data_span(today):
    dates = [date(2023, 5, 1), date(2021, 1, 2), date(2022, 7, 7)]
    assert resolve_date_range("custom", today=today, available_dates=dates) == (date(2021, 1, 2), date(2023, 5, 1))
    assert resolve_date_range(
        "custom", today=today, custom_start=date(2022, 1, 1), available_dates=dates
    ) == (date(2022, 1, 1), date(2023, 5, 1))


def test_custom_without_data_spans_last_year(today):
    assert resolve_date_range("custom", today=today) == (date(2023, 3, 15), today)


def test_normalize_filters_cleans_input(today):
    f = normalize_filters(
        {
            "date_range": "bogus",
            "start_date": "2023-01-01",
            "end_date": "2023-12-31T00:00:00",
            "ug": "all",
            "contract_type": " Eventual ",
            "daily_salary_override": "-5",
            "sort_key": "name",
            "sort_direction": "up",
        },
        today=today,
    )
    assert f == AnalysisFilters(
        start_date=date(2023, 1, 1),
        end_date=date(2023, 12, 31),
        date_range="custom",
        ug=None,
        contract_type="Eventual",
        daily_salary_override=0.0,
        sort_key="cost",
        sort_direction="desc",
    )
