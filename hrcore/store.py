"""In-memory entity store.

The store owns one immutable ``Snapshot`` of both collections. Every mutation
builds the next snapshot, swaps it in with a single assignment and notifies
listeners with the names of the collections that changed.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, FrozenSet, Iterable, List, Optional

from hrcore.csv_io import CsvFormatError, parse_csv
from hrcore.models import (
    Collaborator,
    CollaboratorStatus,
    HireDetails,
    HirePayload,
    HRRecord,
    RecordType,
    Snapshot,
)
from hrcore.validation import ImportResult, new_id, validate_collaborator_rows, validate_record_rows

logger = logging.getLogger(__name__)

COLLABORATORS = "collaborators"
RECORDS = "records"

Listener = Callable[[Snapshot, FrozenSet[str]], None]


class StoreError(Exception):
    pass


class UnknownCollaboratorError(StoreError, LookupError):
    pass


class UnknownRecordError(StoreError, LookupError):
    pass


class DuplicateCollaboratorError(StoreError):
    pass


class RecordTypeChangeError(StoreError):
    pass


def mark_terminated(collaborators: Iterable[Collaborator], ids: Iterable[str]) -> tuple[Collaborator, ...]:
    """The one status transition: active -> inactive for the given ids."""
    ids = set(ids)
    return tuple(
        c.with_status(CollaboratorStatus.INACTIVO) if c.id in ids else c
        for c in collaborators
    )


def _terminated_ids(records: Iterable[HRRecord]) -> set[str]:
    return {r.collaborator_id for r in records if r.type is RecordType.EGRESO}


class EntityStore:
    def __init__(self, snapshot: Optional[Snapshot] = None) -> None:
        self._snapshot = snapshot or Snapshot()
        self._listeners: List[Listener] = []

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def collaborators(self) -> tuple[Collaborator, ...]:
        return self._snapshot.collaborators

    @property
    def records(self) -> tuple[HRRecord, ...]:
        return self._snapshot.records

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _commit(self, snapshot: Snapshot, changed: Iterable[str]) -> Snapshot:
        self._snapshot = snapshot
        changed = frozenset(changed)
        for listener in list(self._listeners):
            listener(snapshot, changed)
        return snapshot

    # ---------------- Lookups ----------------
    def get_collaborator(self, collaborator_id: str) -> Collaborator:
        for c in self.collaborators:
            if c.id == collaborator_id:
                return c
        raise UnknownCollaboratorError(collaborator_id)

    def get_record(self, record_id: str) -> HRRecord:
        for r in self.records:
            if r.id == record_id:
                return r
        raise UnknownRecordError(record_id)

    def _check_unique(self, candidate: Collaborator, *, ignore_id: Optional[str] = None) -> None:
        for c in self.collaborators:
            if c.id == ignore_id:
                continue
            if c.dni == candidate.dni:
                raise DuplicateCollaboratorError(f"El DNI '{candidate.dni}' ya existe.")
            if c.legajo == candidate.legajo:
                raise DuplicateCollaboratorError(f"El Legajo '{candidate.legajo}' ya existe.")

    # ---------------- Collaborators ----------------
    def add_collaborator(self, draft: Collaborator, hire: HirePayload) -> Snapshot:
        """Insert an active collaborator together with its hire record."""
        self._check_unique(draft)
        snap = self._snapshot
        collaborator = replace(
            draft,
            id=new_id("c", {c.id for c in snap.collaborators}),
            status=CollaboratorStatus.ACTIVO,
        )
        hire_record = HRRecord(
            id=new_id("r", {r.id for r in snap.records}),
            date=hire.date or collaborator.hire_date,
            collaborator_id=collaborator.id,
            ug=collaborator.ug,
            position=collaborator.position,
            details=HireDetails(salary=float(hire.salary)),
            cost=float(hire.cost),
            observations=hire.observations or "",
        )
        return self._commit(
            Snapshot(snap.collaborators + (collaborator,), snap.records + (hire_record,)),
            (COLLABORATORS, RECORDS),
        )

    def edit_collaborator(self, collaborator: Collaborator) -> Snapshot:
        current = self.get_collaborator(collaborator.id)
        self._check_unique(collaborator, ignore_id=collaborator.id)
        # Status only moves through mark_terminated.
        updated = collaborator.with_status(current.status)
        snap = self._snapshot
        collaborators = tuple(updated if c.id == updated.id else c for c in snap.collaborators)
        return self._commit(replace(snap, collaborators=collaborators), (COLLABORATORS,))

    def delete_collaborators(self, collaborator_ids: Iterable[str]) -> Snapshot:
        ids = set(collaborator_ids)
        snap = self._snapshot
        return self._commit(
            Snapshot(
                tuple(c for c in snap.collaborators if c.id not in ids),
                tuple(r for r in snap.records if r.collaborator_id not in ids),
            ),
            (COLLABORATORS, RECORDS),
        )

    def import_collaborators(self, collaborators: Iterable[Collaborator]) -> Snapshot:
        incoming = tuple(c.with_status(CollaboratorStatus.ACTIVO) for c in collaborators)
        if not incoming:
            return self._snapshot
        snap = self._snapshot
        return self._commit(replace(snap, collaborators=snap.collaborators + incoming), (COLLABORATORS,))

    # ---------------- Records ----------------
    def add_record(self, record: HRRecord) -> Snapshot:
        self.get_collaborator(record.collaborator_id)
        snap = self._snapshot
        if not record.id or any(r.id == record.id for r in snap.records):
            record = replace(record, id=new_id("r", {r.id for r in snap.records}))
        records = snap.records + (record,)
        if record.type is RecordType.EGRESO:
            collaborators = mark_terminated(snap.collaborators, [record.collaborator_id])
            return self._commit(Snapshot(collaborators, records), (COLLABORATORS, RECORDS))
        return self._commit(replace(snap, records=records), (RECORDS,))

    def edit_record(self, record: HRRecord) -> Snapshot:
        current = self.get_record(record.id)
        if current.type is not record.type:
            raise RecordTypeChangeError(
                f"No se puede cambiar el tipo del registro '{record.id}' de {current.type.value} a {record.type.value}."
            )
        self.get_collaborator(record.collaborator_id)
        snap = self._snapshot
        records = tuple(record if r.id == record.id else r for r in snap.records)
        return self._commit(replace(snap, records=records), (RECORDS,))

    def delete_records(self, record_ids: Iterable[str]) -> Snapshot:
        ids = set(record_ids)
        snap = self._snapshot
        return self._commit(
            replace(snap, records=tuple(r for r in snap.records if r.id not in ids)),
            (RECORDS,),
        )

    def import_records(self, records: Iterable[HRRecord]) -> Snapshot:
        incoming = tuple(records)
        if not incoming:
            return self._snapshot
        snap = self._snapshot
        terminated = _terminated_ids(incoming)
        if terminated:
            return self._commit(
                Snapshot(mark_terminated(snap.collaborators, terminated), snap.records + incoming),
                (COLLABORATORS, RECORDS),
            )
        return self._commit(replace(snap, records=snap.records + incoming), (RECORDS,))

    # ---------------- CSV pipelines ----------------
    def import_collaborators_csv(self, text: str) -> ImportResult[Collaborator]:
        try:
            rows = parse_csv(text)
        except CsvFormatError as exc:
            return ImportResult(errors=[f"Error al procesar el archivo CSV: {exc}"])
        result = validate_collaborator_rows(rows, self.collaborators)
        self.import_collaborators(result.accepted)
        logger.info(
            "Imported %d collaborators (%d rows rejected)", len(result.accepted), result.error_count
        )
        return result

    def import_records_csv(self, text: str) -> ImportResult[HRRecord]:
        try:
            rows = parse_csv(text)
        except CsvFormatError as exc:
            return ImportResult(errors=[f"Error al procesar el archivo CSV: {exc}"])
        result = validate_record_rows(rows, self.collaborators, self.records)
        self.import_records(result.accepted)
        logger.info("Imported %d records (%d rows rejected)", len(result.accepted), result.error_count)
        return result
