"""Unit tests for the JSON record store."""

from __future__ import annotations

from dataclasses import replace

import pytest

from core.errors import (
    SnapshotEncodeError,
    StoreConfigError,
    StoreIOError,
    UnsupportedFilterError,
    UnsupportedSortError,
)
from core.types import (
    FetchDescriptor,
    FetchRequest,
    PermanentIdentifier,
    SaveChangesRequest,
    Snapshot,
    SortDescriptor,
)
from store import snapshot_codec
from store.record_store import RecordStore
from store.snapshot_codec import SnapshotCodec
from tests.store_fixtures import new_task, sequential_keys, task_configuration

_ALL_TASKS = FetchRequest(FetchDescriptor(entity_name="Task"))


def _insert(store: RecordStore, *titles: str) -> list[PermanentIdentifier]:
    inserted = tuple(new_task(title, local_key=f"t{index}") for index, title in enumerate(titles))
    result = store.save(SaveChangesRequest(inserted=inserted))
    return [result.remapped_identifiers[item.persistent_identifier] for item in inserted]


def test_open_requires_bound_schema(tmp_path) -> None:
    """Opening a store without a schema should fail fast."""
    configuration = replace(task_configuration(tmp_path), schema=None)

    with pytest.raises(StoreConfigError):
        RecordStore(configuration)

    assert not configuration.location.exists()


def test_fetch_empty_store_returns_nothing(tmp_path) -> None:
    """A store without a backing file should fetch an empty result."""
    store = RecordStore(task_configuration(tmp_path))

    result = store.fetch(_ALL_TASKS)

    assert result.fetched_snapshots == () and dict(result.related_snapshots) == {}


def test_insert_assigns_distinct_permanent_identifiers(tmp_path) -> None:
    """N inserts should produce N distinct permanent ids and N remaps."""
    store = RecordStore(task_configuration(tmp_path))
    existing = _insert(store, "existing")
    inserted = tuple(new_task(f"task {index}", local_key=f"t{index}") for index in range(5))

    result = store.save(SaveChangesRequest(inserted=inserted))
    assigned = list(result.remapped_identifiers.values())

    assert len(result.remapped_identifiers) == 5
    assert len(set(assigned)) == 5 and not set(assigned) & set(existing)
    assert all(isinstance(identifier, PermanentIdentifier) for identifier in assigned)


def test_insert_scopes_identifiers_to_store(tmp_path) -> None:
    """Permanent ids should carry the store identifier and entity name."""
    store = RecordStore(task_configuration(tmp_path), key_factory=sequential_keys())

    (identifier,) = _insert(store, "A")

    assert identifier.store_identifier == "tasks.json" and identifier.entity_name == "Task"
    assert identifier.primary_key == "00000000-0000-0000-0000-000000000001"


def test_inserted_snapshot_keeps_values(tmp_path) -> None:
    """Stored copy should carry the inserted values under the new id."""
    store = RecordStore(task_configuration(tmp_path))
    (identifier,) = _insert(store, "A")

    result = store.fetch(_ALL_TASKS)

    assert result.related_snapshots[identifier].values == {"title": "A", "finished": False}


def test_update_replaces_snapshot_wholesale(tmp_path) -> None:
    """Updates should drop fields absent from the new snapshot."""
    store = RecordStore(task_configuration(tmp_path))
    (identifier,) = _insert(store, "A")
    replacement = Snapshot(identifier, {"title": "B"})

    store.save(SaveChangesRequest(updated=(replacement,)))
    stored = store.fetch(_ALL_TASKS).related_snapshots[identifier]

    assert dict(stored.values) == {"title": "B"}


def test_delete_removes_snapshot_and_echoes_identifiers(tmp_path) -> None:
    """Deleted ids should be removed and reported back."""
    store = RecordStore(task_configuration(tmp_path))
    first, second = _insert(store, "A", "B")

    result = store.save(SaveChangesRequest(deleted=(Snapshot(first),)))
    remaining = store.fetch(_ALL_TASKS).fetched_snapshots

    assert result.deleted_identifiers == (first,)
    assert [item.persistent_identifier for item in remaining] == [second]


def test_delete_of_absent_identifier_is_noop(tmp_path) -> None:
    """Deleting an unknown id should not fail and should still be reported."""
    store = RecordStore(task_configuration(tmp_path))
    (identifier,) = _insert(store, "A")
    store.save(SaveChangesRequest(deleted=(Snapshot(identifier),)))

    result = store.save(SaveChangesRequest(deleted=(Snapshot(identifier),)))

    assert result.deleted_identifiers == (identifier,)
    assert store.fetch(_ALL_TASKS).fetched_snapshots == ()


def test_save_applies_inserts_then_updates_then_deletes(tmp_path) -> None:
    """One save should observe inserts before updates before deletes."""
    store = RecordStore(task_configuration(tmp_path))
    kept, dropped = _insert(store, "kept", "dropped")
    request = SaveChangesRequest(
        inserted=(new_task("new"),),
        updated=(Snapshot(kept, {"title": "kept", "finished": True}), Snapshot(dropped, {"title": "x"})),
        deleted=(Snapshot(dropped),),
    )

    result = store.save(request)
    stored = store.fetch(_ALL_TASKS).related_snapshots

    assert set(stored) == {kept, *result.remapped_identifiers.values()}
    assert stored[kept].values["finished"] is True


@pytest.mark.parametrize(
    ("descriptor", "error_type"),
    [
        (FetchDescriptor("Task", predicate=lambda item: True), UnsupportedFilterError),
        (FetchDescriptor("Task", sort_by=(SortDescriptor("title"),)), UnsupportedSortError),
        (
            FetchDescriptor(
                "Task",
                predicate=lambda item: True,
                sort_by=(SortDescriptor("title"),),
            ),
            UnsupportedFilterError,
        ),
    ],
)
def test_fetch_signals_capability_fallback_without_loading(
    tmp_path,
    monkeypatch: pytest.MonkeyPatch,
    descriptor: FetchDescriptor,
    error_type: type[Exception],
) -> None:
    """Predicates and sorts should be handed back before any file access."""
    store = RecordStore(task_configuration(tmp_path))
    reads: list[bool] = []
    monkeypatch.setattr(SnapshotCodec, "read", lambda self: reads.append(True) or {})

    with pytest.raises(error_type):
        store.fetch(FetchRequest(descriptor))

    assert reads == []


def test_failed_write_leaves_prior_state(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A save whose write fails should not change the stored snapshots."""
    configuration = task_configuration(tmp_path)
    store = RecordStore(configuration)
    (identifier,) = _insert(store, "A")
    committed_text = configuration.location.read_text(encoding="utf-8")

    def _failing_replace(source: str, target: object) -> None:
        raise OSError("read-only file system")

    monkeypatch.setattr(snapshot_codec.os, "replace", _failing_replace)
    with pytest.raises(StoreIOError):
        store.save(SaveChangesRequest(inserted=(new_task("B"),), deleted=(Snapshot(identifier),)))
    monkeypatch.undo()

    assert configuration.location.read_text(encoding="utf-8") == committed_text
    assert [item.persistent_identifier for item in store.fetch(_ALL_TASKS).fetched_snapshots] == [
        identifier
    ]


def test_update_with_temporary_identifier_is_rejected(tmp_path) -> None:
    """Updates must target already-permanent identifiers."""
    configuration = task_configuration(tmp_path)
    store = RecordStore(configuration)

    with pytest.raises(SnapshotEncodeError):
        store.save(SaveChangesRequest(updated=(new_task("A"),)))

    assert not configuration.location.exists()


def test_task_lifecycle_scenario(tmp_path) -> None:
    """Insert, fetch, update, fetch, delete, fetch should behave end to end."""
    store = RecordStore(task_configuration(tmp_path))

    insert_result = store.save(SaveChangesRequest(inserted=(new_task("A"),)))
    (identifier,) = insert_result.remapped_identifiers.values()
    (fetched,) = store.fetch(_ALL_TASKS).fetched_snapshots
    store.save(SaveChangesRequest(updated=(Snapshot(identifier, {"title": "A", "finished": True}),)))
    (updated,) = store.fetch(_ALL_TASKS).fetched_snapshots
    store.save(SaveChangesRequest(deleted=(Snapshot(identifier),)))
    final = store.fetch(_ALL_TASKS).fetched_snapshots

    assert len(insert_result.remapped_identifiers) == 1
    assert dict(fetched.values) == {"title": "A", "finished": False}
    assert updated.values["finished"] is True
    assert final == ()
