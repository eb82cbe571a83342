from __future__ import annotations

from datetime import date

import pytest

from hrcore.models import Collaborator, ContractType, HireDetails, HRRecord
from hrcore.seed import seed_snapshot
from hrcore.store import EntityStore


@pytest.fixture
def store() -> EntityStore:
    return EntityStore(seed_snapshot())


@pytest.fixture
def empty_store() -> EntityStore:
    return EntityStore()


@pytest.fixture
def today() -> date:
    return date(2024, 3, 15)


@pytest.fixture
def make_collaborator():
    def _make(id: str = "c1", dni: str = "1", legajo: str = "L1", **overrides) -> Collaborator:
        fields = dict(
            id=id,
            name="Ana",
            dni=dni,
            legajo=legajo,
            cuil="X",
            position="Dev",
            ug="U1",
            hire_date="2024-01-01",
            contract_type=ContractType.INDETERMINADO,
        )
        fields.update(overrides)
        return Collaborator(**fields)

    return _make


@pytest.fixture
def make_hire():
    def _make(id: str, collaborator_id: str, salary: float, date: str = "2024-01-01", cost: float = 0.0) -> HRRecord:
        return HRRecord(id, date, collaborator_id, "U1", "Dev", HireDetails(salary), cost)

    return _make
