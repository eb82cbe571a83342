"""Domain entities: collaborators, HR records and their typed details."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Union


class CollaboratorStatus(str, Enum):
    ACTIVO = "Activo"
    INACTIVO = "Inactivo"


class ContractType(str, Enum):
    EVENTUAL = "Eventual"
    INDETERMINADO = "Indeterminado"
    PLAZO_FIJO = "Plazo Fijo"


class RecordType(str, Enum):
    INGRESO = "INGRESO"
    EGRESO = "EGRESO"
    SANCION = "SANCION"
    AUSENCIA = "AUSENCIA"


class TerminationReason(str, Enum):
    RENUNCIA = "Renuncia"
    DESPIDO_CON_CAUSA = "Despido con justa causa"
    DESPIDO_SIN_CAUSA = "Despido sin justa causa"
    MUTUO_ACUERDO = "Mutuo acuerdo (241)"
    FIN_CONTRATO = "Fin de contrato"
    JUBILACION = "Jubilación"


class SanctionType(str, Enum):
    APERCIBIMIENTO_VERBAL = "Apercibimiento verbal"
    APERCIBIMIENTO_ESCRITO = "Apercibimiento escrito"
    SUSPENSION_LEVE = "Suspensión Leve"
    SUSPENSION_MEDIA = "Suspensión Media"
    SUSPENSION_GRAVE = "Suspensión Grave"


class AbsenceReason(str, Enum):
    FALTA_INJUSTIFICADA = "Falta Injustificada"
    ART = "ART"
    MATERNIDAD_PATERNIDAD = "Maternidad / Paternidad"
    FALTA_JUSTIFICADA = "Falta Justificada"
    DIA_ESTUDIO = "Día de Estudio"
    CUIDADO_FAMILIAR = "Cuidado Familiar"
    TARDANZA = "Tardanza"


def enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class DetailsError(ValueError):
    """Raised when a details payload does not match its record type."""


# ---------------- Record details (one variant per record type) ----------------
@dataclass(frozen=True)
class HireDetails:
    salary: float

    record_type = RecordType.INGRESO

    def to_dict(self) -> Dict[str, Any]:
        return {"salary": self.salary}


@dataclass(frozen=True)
class TerminationDetails:
    reason: TerminationReason

    record_type = RecordType.EGRESO

    def to_dict(self) -> Dict[str, Any]:
        return {"reason": self.reason.value}


@dataclass(frozen=True)
class SanctionDetails:
    type: SanctionType
    reason: str

    record_type = RecordType.SANCION

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "reason": self.reason}


@dataclass(frozen=True)
class AbsenceDetails:
    reason: AbsenceReason
    days: int

    record_type = RecordType.AUSENCIA

    def to_dict(self) -> Dict[str, Any]:
        return {"reason": self.reason.value, "days": self.days}


RecordDetails = Union[HireDetails, TerminationDetails, SanctionDetails, AbsenceDetails]


def _is_number(value: object) -> bool:
    # JSON booleans decode to bool, which is an int subclass.
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _enum_member(enum_cls, value: object):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def parse_details(record_type: RecordType | str, payload: Mapping[str, Any]) -> RecordDetails:
    """Build the details variant for ``record_type`` from an untyped mapping.

    Raises ``DetailsError`` when the payload shape does not fit the type.
    """
    rtype = _enum_member(RecordType, record_type)
    if rtype is None:
        raise DetailsError(f"Tipo de registro '{record_type}' no es válido.")
    if not isinstance(payload, Mapping):
        raise DetailsError("El campo 'details' debe ser un objeto.")

    if rtype is RecordType.INGRESO:
        salary = payload.get("salary")
        if not _is_number(salary):
            raise DetailsError("Falta 'salary' (número) en details.")
        return HireDetails(salary=float(salary))

    if rtype is RecordType.EGRESO:
        reason = _enum_member(TerminationReason, payload.get("reason"))
        if reason is None:
            raise DetailsError("El 'reason' en details no es válido para EGRESO.")
        return TerminationDetails(reason=reason)

    if rtype is RecordType.SANCION:
        sanction_type = _enum_member(SanctionType, payload.get("type"))
        reason = payload.get("reason")
        if sanction_type is None or not isinstance(reason, str) or not reason.strip():
            raise DetailsError("Falta 'type' o 'reason' (string) válidos en details para SANCION.")
        return SanctionDetails(type=sanction_type, reason=reason)

    reason = _enum_member(AbsenceReason, payload.get("reason"))
    days = payload.get("days")
    if reason is None or not _is_number(days) or float(days) != int(days) or days < 1:
        raise DetailsError("Falta 'reason' o 'days' (número) válidos en details para AUSENCIA.")
    return AbsenceDetails(reason=reason, days=int(days))


# ---------------- Entities ----------------
@dataclass(frozen=True)
class Collaborator:
    id: str
    name: str
    dni: str
    legajo: str
    cuil: str
    position: str
    ug: str
    hire_date: str
    contract_type: ContractType
    status: CollaboratorStatus = CollaboratorStatus.ACTIVO
    category: str = ""
    cct: str = ""
    service: str = ""
    turn: str = ""
    observations: str = ""

    @property
    def is_active(self) -> bool:
        return self.status is CollaboratorStatus.ACTIVO

    def with_status(self, status: CollaboratorStatus) -> "Collaborator":
        return replace(self, status=status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "dni": self.dni,
            "legajo": self.legajo,
            "cuil": self.cuil,
            "position": self.position,
            "ug": self.ug,
            "status": self.status.value,
            "hireDate": self.hire_date,
            "contractType": self.contract_type.value,
            "category": self.category,
            "cct": self.cct,
            "service": self.service,
            "turn": self.turn,
            "observations": self.observations,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Collaborator":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            dni=str(data["dni"]),
            legajo=str(data["legajo"]),
            cuil=str(data["cuil"]),
            position=str(data["position"]),
            ug=str(data["ug"]),
            hire_date=str(data["hireDate"]),
            contract_type=ContractType(data["contractType"]),
            status=CollaboratorStatus(data.get("status") or CollaboratorStatus.ACTIVO.value),
            category=str(data.get("category") or ""),
            cct=str(data.get("cct") or ""),
            service=str(data.get("service") or ""),
            turn=str(data.get("turn") or ""),
            observations=str(data.get("observations") or ""),
        )


@dataclass(frozen=True)
class HRRecord:
    id: str
    date: str
    collaborator_id: str
    ug: str
    position: str
    details: RecordDetails
    cost: float = 0.0
    observations: str = ""

    @property
    def type(self) -> RecordType:
        return self.details.record_type

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "collaboratorId": self.collaborator_id,
            "ug": self.ug,
            "position": self.position,
            "type": self.type.value,
            "details": self.details.to_dict(),
            "cost": self.cost,
            "observations": self.observations,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HRRecord":
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            collaborator_id=str(data["collaboratorId"]),
            ug=str(data["ug"]),
            position=str(data["position"]),
            details=parse_details(data["type"], data.get("details") or {}),
            cost=float(data.get("cost") or 0),
            observations=str(data.get("observations") or ""),
        )


@dataclass(frozen=True)
class HirePayload:
    """Hire-record data captured together with a new collaborator."""

    salary: float
    cost: float = 0.0
    observations: str = ""
    date: str | None = None


@dataclass(frozen=True)
class Snapshot:
    collaborators: tuple[Collaborator, ...] = field(default_factory=tuple)
    records: tuple[HRRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collaborators": [c.to_dict() for c in self.collaborators],
            "records": [r.to_dict() for r in self.records],
        }
