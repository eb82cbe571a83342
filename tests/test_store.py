from dataclasses import replace
from datetime import date

import pytest

from hrcore.csv_io import export_collaborators_csv, export_records_csv
from hrcore.data import prepare_context
from hrcore.metrics_impact import compute_termination_reasons
from hrcore.models import (
    AbsenceDetails,
    AbsenceReason,
    CollaboratorStatus,
    HireDetails,
    HirePayload,
    HRRecord,
    RecordType,
    Snapshot,
    TerminationDetails,
    TerminationReason,
)
from hrcore.seed import SEED_COLLABORATORS, SEED_RECORDS
from hrcore.store import (
    DuplicateCollaboratorError,
    EntityStore,
    RecordTypeChangeError,
    UnknownCollaboratorError,
    UnknownRecordError,
)


def _termination(collaborator_id, cost=500.0, date="2024-03-01", reason=TerminationReason.RENUNCIA):
    return HRRecord("", date, collaborator_id, "U1", "Dev", TerminationDetails(reason), cost)


def _status_matches_terminations(store):
    terminated = {r.collaborator_id for r in store.records if r.type is RecordType.EGRESO}
    return all((c.status is CollaboratorStatus.INACTIVO) == (c.id in terminated) for c in store.collaborators)


def test_hire_flow(empty_store, make_collaborator):
    draft = make_collaborator(id="")
    snap = empty_store.add_collaborator(draft, HirePayload(salary=1000, cost=100))

    [collaborator] = snap.collaborators
    [record] = snap.records
    assert collaborator.id
    assert collaborator.status is CollaboratorStatus.ACTIVO
    assert record.type is RecordType.INGRESO
    assert record.collaborator_id == collaborator.id
    assert record.date == "2024-01-01"
    assert record.cost == 100
    assert record.details == HireDetails(1000.0)


def test_add_collaborator_rejects_duplicate_dni_and_legajo(store, make_collaborator):
    before = store.snapshot
    with pytest.raises(DuplicateCollaboratorError):
        store.add_collaborator(make_collaborator(dni="12345678A", legajo="new"), HirePayload(salary=1))
    with pytest.raises(DuplicateCollaboratorError):
        store.add_collaborator(make_collaborator(dni="new", legajo="1001"), HirePayload(salary=1))
    assert store.snapshot is before


def test_termination_cascade(empty_store, make_collaborator):
    snap = empty_store.add_collaborator(make_collaborator(id=""), HirePayload(salary=1000, cost=100))
    cid = snap.collaborators[0].id

    snap = empty_store.add_record(_termination(cid))
    assert empty_store.get_collaborator(cid).status is CollaboratorStatus.INACTIVO

    ctx = prepare_context({"date_range": "custom"}, snap, today=date(2024, 6, 1))
    breakdown = compute_termination_reasons(ctx["filtered_records"])
    assert breakdown.to_dict(orient="records") == [{"name": "Renuncia", "count": 1, "cost": 500.0}]


def test_add_record_requires_known_collaborator(store):
    with pytest.raises(UnknownCollaboratorError):
        store.add_record(_termination("ghost"))


def test_add_record_replaces_duplicate_id(store):
    record = HRRecord("r1", "2024-01-02", "c1", "U", "P", AbsenceDetails(AbsenceReason.ART, 1))
    snap = store.add_record(record)
    assert snap.records[-1].id != "r1"
    assert len({r.id for r in snap.records}) == len(snap.records)


def test_edit_record_cannot_change_type(store):
    current = store.get_record("r8")
    with pytest.raises(RecordTypeChangeError):
        store.edit_record(replace(current, details=HireDetails(10.0)))
    with pytest.raises(UnknownRecordError):
        store.edit_record(replace(current, id="missing"))

    store.edit_record(replace(current, cost=42.0))
    assert store.get_record("r8").cost == 42.0


def test_edit_collaborator_keeps_status(store):
    c4 = store.get_collaborator("c4")
    store.edit_collaborator(replace(c4, status=CollaboratorStatus.ACTIVO, position="Director"))
    updated = store.get_collaborator("c4")
    assert updated.position == "Director"
    assert updated.status is CollaboratorStatus.INACTIVO


def test_edit_collaborator_checks_uniqueness(store):
    with pytest.raises(DuplicateCollaboratorError):
        store.edit_collaborator(replace(store.get_collaborator("c2"), dni="12345678A"))


def test_delete_collaborators_cascades_to_records(store):
    snap = store.delete_collaborators(["c1", "c4"])
    assert {c.id for c in snap.collaborators} == {"c2", "c3", "c5"}
    assert all(r.collaborator_id not in {"c1", "c4"} for r in snap.records)


def test_delete_records(store):
    snap = store.delete_records(["r1", "r2", "nope"])
    assert len(snap.records) == len(SEED_RECORDS) - 2


def test_status_follows_terminations_after_record_import(store):
    assert _status_matches_terminations(store)
    csv_text = (
        "id,date,collaboratorId,ug,position,type,details,cost,observations\n"
        'x,2024-02-01,c2,U,P,EGRESO,"{""reason"":""Renuncia""}",10,\n'
        'y,2024-02-02,c2,U,P,EGRESO,"{""reason"":""Renuncia""}",10,\n'
        'z,2024-02-03,c3,U,P,AUSENCIA,"{""reason"":""ART"",""days"":1}",0,\n'
    )
    result = store.import_records_csv(csv_text)
    assert len(result.accepted) == 3
    assert store.get_collaborator("c2").status is CollaboratorStatus.INACTIVO
    assert store.get_collaborator("c3").status is CollaboratorStatus.ACTIVO
    assert _status_matches_terminations(store)


def test_uniqueness_after_collaborator_import(store):
    csv_text = (
        "name,dni,legajo,cuil,position,ug,hireDate,contractType,status\n"
        "Eva,12345678A,3001,1,Dev,U,2024-01-01,Eventual,Activo\n"
        "Max,700,3002,1,Dev,U,2024-01-01,Eventual,Activo\n"
        "Leo,701,3002,1,Dev,U,2024-01-01,Eventual,Activo\n"
    )
    result = store.import_collaborators_csv(csv_text)
    assert [c.name for c in result.accepted] == ["Max"]
    assert result.error_count == 2
    dnis = [c.dni for c in store.collaborators]
    legajos = [c.legajo for c in store.collaborators]
    assert len(dnis) == len(set(dnis))
    assert len(legajos) == len(set(legajos))


def test_malformed_csv_is_reported_not_raised(store):
    before = store.snapshot
    result = store.import_collaborators_csv('name,dni\n"Ana,1\n')
    assert result.accepted == []
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Error al procesar el archivo CSV")
    assert store.snapshot is before


def test_collaborator_csv_round_trip(empty_store):
    active = [c for c in SEED_COLLABORATORS if c.is_active]
    result = empty_store.import_collaborators_csv(export_collaborators_csv(active))

    def strip_id(c):
        d = c.to_dict()
        d.pop("id")
        return d

    assert [strip_id(c) for c in result.accepted] == [strip_id(c) for c in active]
    assert [strip_id(c) for c in empty_store.collaborators] == [strip_id(c) for c in active]


def test_record_csv_round_trip():
    target = EntityStore(Snapshot(collaborators=SEED_COLLABORATORS))
    result = target.import_records_csv(export_records_csv(SEED_RECORDS))

    def strip_id(r):
        d = r.to_dict()
        d.pop("id")
        return d

    assert result.errors == []
    assert [strip_id(r) for r in target.records] == [strip_id(r) for r in SEED_RECORDS]


def test_listeners_receive_changed_collections(store):
    seen = []
    unsubscribe = store.subscribe(lambda snap, changed: seen.append(changed))
    store.delete_records(["r1"])
    store.add_record(_termination("c1"))
    unsubscribe()
    store.delete_records(["r2"])
    assert seen == [frozenset({"records"}), frozenset({"collaborators", "records"})]


def test_multiline_observations_survive_csv_round_trip(empty_store, make_collaborator):
    source = make_collaborator(observations="linea uno\nlinea dos")
    result = empty_store.import_collaborators_csv(export_collaborators_csv([source]))
    assert result.errors == []
    [imported] = result.accepted
    assert imported.observations == "linea uno\nlinea dos"
    assert imported.dni == source.dni

    record = HRRecord("r1", "2024-02-01", imported.id, "U1", "Dev", AbsenceDetails(AbsenceReason.ART, 2), 0, "a\nb")
    records_result = empty_store.import_records_csv(export_records_csv([record]))
    assert records_result.errors == []
    assert records_result.accepted[0].observations == "a\nb"
