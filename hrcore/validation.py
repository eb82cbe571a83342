"""Row validation for CSV imports.

Each validator partitions parsed rows into accepted entities and a list of
row-indexed error messages. Failures are returned as data, never raised, and
accepted rows are kept even when other rows of the same batch fail.
"""

from __future__ import annotations

import json
import math
import uuid
from dataclasses import dataclass, field
from typing import Generic, Iterable, List, Sequence, Set, TypeVar

import pandas as pd

from hrcore.csv_io import CsvRow
from hrcore.models import (
    Collaborator,
    CollaboratorStatus,
    ContractType,
    DetailsError,
    HRRecord,
    RecordType,
    enum_values,
    parse_details,
)

T = TypeVar("T")

COLLABORATOR_REQUIRED = ["name", "dni", "legajo", "cuil", "position", "ug", "hireDate", "contractType", "status"]
RECORD_REQUIRED = ["date", "collaboratorId", "ug", "position", "type", "details", "cost"]

# Line 1 of the source file is the header.
FIRST_DATA_LINE = 2


@dataclass
class ImportResult(Generic[T]):
    accepted: List[T] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)


def new_id(prefix: str, taken: Set[str]) -> str:
    while True:
        candidate = f"{prefix}{uuid.uuid4().hex[:12]}"
        if candidate not in taken:
            taken.add(candidate)
            return candidate


def _value(row: CsvRow, key: str) -> str:
    return (row.get(key) or "").strip()


def _missing(row: CsvRow, keys: Sequence[str]) -> bool:
    return any(not _value(row, k) for k in keys)


def is_iso_date(raw: str) -> bool:
    """ISO 8601 date or datetime, with or without a UTC offset."""
    try:
        return not pd.isna(pd.to_datetime(raw, format="ISO8601", utc=True))
    except ValueError:
        return False


def _parse_cost(raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def validate_collaborator_rows(
    rows: Sequence[CsvRow], existing: Iterable[Collaborator]
) -> ImportResult[Collaborator]:
    existing = list(existing)
    known_dnis = {c.dni for c in existing}
    known_legajos = {c.legajo for c in existing}
    taken_ids = {c.id for c in existing}
    statuses = enum_values(CollaboratorStatus)
    contract_types = enum_values(ContractType)

    result: ImportResult[Collaborator] = ImportResult()
    for index, row in enumerate(rows):
        line = index + FIRST_DATA_LINE
        if _missing(row, COLLABORATOR_REQUIRED):
            result.errors.append(f"Fila {line}: Faltan campos requeridos.")
            continue

        dni = _value(row, "dni")
        legajo = _value(row, "legajo")
        status = _value(row, "status")
        contract_type = _value(row, "contractType")
        if dni in known_dnis:
            result.errors.append(f"Fila {line}: El DNI '{dni}' ya existe o está duplicado en el archivo.")
            continue
        if legajo in known_legajos:
            result.errors.append(f"Fila {line}: El Legajo '{legajo}' ya existe o está duplicado en el archivo.")
            continue
        if status not in statuses:
            result.errors.append(f"Fila {line}: Estado '{status}' no es válido.")
            continue
        if contract_type not in contract_types:
            result.errors.append(f"Fila {line}: Tipo de contrato '{contract_type}' no es válido.")
            continue
        if not is_iso_date(_value(row, "hireDate")):
            result.errors.append(f"Fila {line}: La fecha '{_value(row, 'hireDate')}' no es válida.")
            continue

        known_dnis.add(dni)
        known_legajos.add(legajo)
        result.accepted.append(
            Collaborator(
                id=new_id("c", taken_ids),
                name=_value(row, "name"),
                dni=dni,
                legajo=legajo,
                cuil=_value(row, "cuil"),
                position=_value(row, "position"),
                ug=_value(row, "ug"),
                hire_date=_value(row, "hireDate"),
                contract_type=ContractType(contract_type),
                # Imported collaborators always arrive active.
                status=CollaboratorStatus.ACTIVO,
                category=_value(row, "category"),
                cct=_value(row, "cct"),
                service=_value(row, "service"),
                turn=_value(row, "turn"),
                observations=_value(row, "observations"),
            )
        )
    return result


def validate_record_rows(
    rows: Sequence[CsvRow],
    collaborators: Iterable[Collaborator],
    existing: Iterable[HRRecord],
) -> ImportResult[HRRecord]:
    collaborator_ids = {c.id for c in collaborators}
    taken_ids = {r.id for r in existing}
    record_types = enum_values(RecordType)

    result: ImportResult[HRRecord] = ImportResult()
    for index, row in enumerate(rows):
        line = index + FIRST_DATA_LINE
        if _missing(row, RECORD_REQUIRED):
            result.errors.append(f"Fila {line}: Faltan campos requeridos.")
            continue

        collaborator_id = _value(row, "collaboratorId")
        record_type = _value(row, "type")
        raw_cost = _value(row, "cost")
        if collaborator_id not in collaborator_ids:
            result.errors.append(f"Fila {line}: El collaboratorId '{collaborator_id}' no existe.")
            continue
        if record_type not in record_types:
            result.errors.append(f"Fila {line}: Tipo de registro '{record_type}' no es válido.")
            continue
        if not is_iso_date(_value(row, "date")):
            result.errors.append(f"Fila {line}: La fecha '{_value(row, 'date')}' no es válida.")
            continue
        cost = _parse_cost(raw_cost)
        if cost is None:
            result.errors.append(f"Fila {line}: El costo '{raw_cost}' no es un número válido.")
            continue

        try:
            payload = json.loads(row["details"])
        except json.JSONDecodeError:
            result.errors.append(f"Fila {line}: El campo 'details' no es un JSON válido.")
            continue
        try:
            details = parse_details(record_type, payload)
        except DetailsError as exc:
            result.errors.append(f"Fila {line}: {exc}")
            continue

        result.accepted.append(
            HRRecord(
                id=new_id("r", taken_ids),
                date=_value(row, "date"),
                collaborator_id=collaborator_id,
                ug=_value(row, "ug"),
                position=_value(row, "position"),
                details=details,
                cost=cost,
                observations=_value(row, "observations"),
            )
        )
    return result
