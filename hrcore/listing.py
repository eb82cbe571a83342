"""Search and filter helpers behind the collaborator and record list views."""

from __future__ import annotations

from typing import Iterable, List, Optional

from hrcore.models import Collaborator, CollaboratorStatus, HRRecord, RecordType

NOT_FOUND_NAME = "N/A"


def search_collaborators(
    collaborators: Iterable[Collaborator],
    term: str = "",
    status: Optional[CollaboratorStatus] = None,
) -> List[Collaborator]:
    needle = (term or "").strip().lower()
    out: List[Collaborator] = []
    for c in collaborators:
        if status is not None and c.status != status:
            continue
        if needle and not (
            needle in c.name.lower()
            or needle in c.position.lower()
            or needle in c.dni
            or needle in c.legajo
        ):
            continue
        out.append(c)
    return out


def filter_records(
    records: Iterable[HRRecord],
    types: Optional[Iterable[RecordType]] = None,
    collaborator_ids: Optional[Iterable[str]] = None,
) -> List[HRRecord]:
    """Records matching the given types and collaborators, newest first.

    Empty or ``None`` filters match everything. Records sharing a date keep
    their log order.
    """
    wanted_types = set(types or ())
    wanted_ids = set(collaborator_ids or ())
    matched = [
        r
        for r in records
        if (not wanted_types or r.type in wanted_types)
        and (not wanted_ids or r.collaborator_id in wanted_ids)
    ]
    return sorted(matched, key=lambda r: r.date, reverse=True)


def collaborator_name(collaborators: Iterable[Collaborator], collaborator_id: str) -> str:
    for c in collaborators:
        if c.id == collaborator_id:
            return c.name
    return NOT_FOUND_NAME
