import json
import logging

from hrcore.models import AbsenceDetails, AbsenceReason, HRRecord
from hrcore.seed import SEED_COLLABORATORS, SEED_RECORDS
from hrcore.storage import JsonFileStorage, SnapshotPersister, load_snapshot, open_store
from hrcore.store import EntityStore


def test_empty_directory_loads_seed(tmp_path):
    snap = load_snapshot(JsonFileStorage(tmp_path))
    assert snap.collaborators == SEED_COLLABORATORS
    assert snap.records == SEED_RECORDS


def test_unparsable_collection_falls_back_per_key(tmp_path, caplog):
    (tmp_path / "collaborators.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "records.json").write_text(json.dumps([SEED_RECORDS[0].to_dict()]), encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="hrcore.storage"):
        snap = load_snapshot(JsonFileStorage(tmp_path))

    assert snap.collaborators == SEED_COLLABORATORS
    assert [r.id for r in snap.records] == ["r1"]
    assert "collaborators" in caplog.text


def test_invalid_details_in_storage_fall_back(tmp_path):
    bad = SEED_RECORDS[0].to_dict()
    bad["details"] = {}
    (tmp_path / "records.json").write_text(json.dumps([bad]), encoding="utf-8")
    assert load_snapshot(JsonFileStorage(tmp_path)).records == SEED_RECORDS


def test_mutations_are_persisted_and_reloaded(tmp_path):
    store = open_store(tmp_path)
    store.add_record(HRRecord("", "2024-05-05", "c1", "U", "P", AbsenceDetails(AbsenceReason.TARDANZA, 1)))
    assert (tmp_path / "records.json").exists()
    assert not (tmp_path / "collaborators.json").exists()

    reopened = open_store(tmp_path)
    assert reopened.records == store.records
    assert reopened.collaborators == SEED_COLLABORATORS


def test_storage_failures_are_logged_and_swallowed(caplog):
    class BrokenStorage:
        def set(self, key, value):
            raise OSError("disk full")

    store = EntityStore()
    store.subscribe(SnapshotPersister(BrokenStorage()))
    with caplog.at_level(logging.ERROR, logger="hrcore.storage"):
        store.delete_records([])
    assert "Error saving records" in caplog.text
