"""Key-value blob persistence for the entity store.

Two keys, ``collaborators`` and ``records``, each hold a JSON array. Loading
falls back to the seed dataset per key; writes re-serialise a whole
collection. Storage failures are logged and never touch the in-memory state.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Callable, FrozenSet, Optional, TypeVar

from hrcore.models import Collaborator, HRRecord, Snapshot
from hrcore.seed import SEED_COLLABORATORS, SEED_RECORDS
from hrcore.store import COLLABORATORS, RECORDS, EntityStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonFileStorage:
    """One ``<key>.json`` file per key inside ``directory``."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)


def _load_collection(storage: JsonFileStorage, key: str, parse: Callable[[dict], T], fallback: tuple) -> tuple:
    try:
        raw = storage.get(key)
    except OSError:
        logger.exception("Error reading %s from storage", key)
        return fallback
    if raw is None:
        return fallback
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array for {key}")
        return tuple(parse(item) for item in data)
    except (ValueError, KeyError, TypeError):
        logger.warning("Error parsing %s from storage, using seed data", key, exc_info=True)
        return fallback


def load_snapshot(storage: JsonFileStorage) -> Snapshot:
    return Snapshot(
        collaborators=_load_collection(storage, COLLABORATORS, Collaborator.from_dict, SEED_COLLABORATORS),
        records=_load_collection(storage, RECORDS, HRRecord.from_dict, SEED_RECORDS),
    )


class SnapshotPersister:
    """Store listener mirroring changed collections into ``storage``."""

    def __init__(self, storage: JsonFileStorage) -> None:
        self.storage = storage

    def __call__(self, snapshot: Snapshot, changed: FrozenSet[str]) -> None:
        payload = snapshot.to_dict()
        for key in (COLLABORATORS, RECORDS):
            if key not in changed:
                continue
            try:
                self.storage.set(key, json.dumps(payload[key], ensure_ascii=False))
            except (OSError, TypeError, ValueError):
                logger.exception("Error saving %s to storage", key)


def open_store(data_dir: Path | str) -> EntityStore:
    storage = JsonFileStorage(data_dir)
    store = EntityStore(load_snapshot(storage))
    store.subscribe(SnapshotPersister(storage))
    return store
