"""Bundled seed dataset used when the blob store holds nothing usable."""

from __future__ import annotations

from hrcore.models import (
    AbsenceDetails,
    AbsenceReason,
    Collaborator,
    CollaboratorStatus,
    ContractType,
    HireDetails,
    HRRecord,
    SanctionDetails,
    SanctionType,
    Snapshot,
    TerminationDetails,
    TerminationReason,
)

SEED_COLLABORATORS = (
    Collaborator(
        id="c1", name="Ana García", dni="12345678A", legajo="1001", cuil="27-12345678-5",
        position="Desarrolladora Frontend", ug="UG2-VISTA MENDOZA", hire_date="2022-01-15",
        contract_type=ContractType.INDETERMINADO, category="Sistemas", cct="UOM",
        service="Desarrollo", turn="Mañana",
    ),
    Collaborator(
        id="c2", name="Luis Martínez", dni="87654321B", legajo="1002", cuil="20-87654321-8",
        position="Desarrollador Backend", ug="UG2-VISTA MENDOZA", hire_date="2021-11-20",
        contract_type=ContractType.INDETERMINADO, category="Sistemas", cct="UOM",
        service="Desarrollo", turn="Tarde",
    ),
    Collaborator(
        id="c3", name="Sofía Rodríguez", dni="11223344C", legajo="1003", cuil="27-11223344-9",
        position="Diseñadora UX/UI", ug="UG3-VITSA CORDOBA", hire_date="2022-03-10",
        contract_type=ContractType.PLAZO_FIJO, category="Diseño", cct="Comercio",
        service="Producto", turn="Mañana",
    ),
    Collaborator(
        id="c4", name="Carlos Sánchez", dni="44556677D", legajo="1004", cuil="20-44556677-1",
        position="Jefe de Proyecto", ug="UG3-VITSA CORDOBA", hire_date="2020-05-01",
        contract_type=ContractType.INDETERMINADO, status=CollaboratorStatus.INACTIVO,
        category="Management", cct="Fuera de Convenio", service="Producto", turn="Mañana",
    ),
    Collaborator(
        id="c5", name="Laura Gómez", dni="99887766E", legajo="1005", cuil="27-99887766-3",
        position="Analista de RRHH", ug="UG1-LEXXOR", hire_date="2023-02-01",
        contract_type=ContractType.EVENTUAL, category="Administración", cct="Comercio",
        service="RRHH", turn="Mañana", observations="Ingreso por reemplazo temporal.",
    ),
)

SEED_RECORDS = (
    HRRecord("r1", "2022-01-15", "c1", "UG2-VISTA MENDOZA", "Desarrolladora Frontend", HireDetails(45000), 1500),
    HRRecord("r2", "2021-11-20", "c2", "UG2-VISTA MENDOZA", "Desarrollador Backend", HireDetails(50000), 1800),
    HRRecord("r3", "2022-03-10", "c3", "UG3-VITSA CORDOBA", "Diseñadora UX/UI", HireDetails(42000), 1300),
    HRRecord("r4", "2020-05-01", "c4", "UG3-VITSA CORDOBA", "Jefe de Proyecto", HireDetails(65000), 2500),
    HRRecord("r5", "2023-02-01", "c5", "UG1-LEXXOR", "Analista de RRHH", HireDetails(38000), 1200),
    HRRecord(
        "r6", "2023-06-30", "c4", "UG3-VITSA CORDOBA", "Jefe de Proyecto",
        TerminationDetails(TerminationReason.FIN_CONTRATO), 5000, "Finalización de proyecto X.",
    ),
    HRRecord(
        "r7", "2023-04-05", "c2", "UG2-VISTA MENDOZA", "Desarrollador Backend",
        SanctionDetails(SanctionType.APERCIBIMIENTO_ESCRITO, "Retrasos reiterados en la entrega de tareas."), 0,
    ),
    HRRecord(
        "r8", "2023-05-22", "c1", "UG2-VISTA MENDOZA", "Desarrolladora Frontend",
        AbsenceDetails(AbsenceReason.ART, 3), 0, "Revisión médica programada.",
    ),
    HRRecord(
        "r9", "2023-07-01", "c3", "UG3-VITSA CORDOBA", "Diseñadora UX/UI",
        SanctionDetails(SanctionType.APERCIBIMIENTO_VERBAL, "Uso indebido de recursos de la empresa."), 0,
    ),
    HRRecord(
        "r10", "2023-07-10", "c5", "UG1-LEXXOR", "Analista de RRHH",
        AbsenceDetails(AbsenceReason.FALTA_JUSTIFICADA, 1), 0,
    ),
)


def seed_snapshot() -> Snapshot:
    return Snapshot(collaborators=SEED_COLLABORATORS, records=SEED_RECORDS)
