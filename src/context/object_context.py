"""Object context over a record store.

The context stages inserts, updates, and deletes, sends them to the store
in one save, and reconciles temporary identifiers with the permanent ones
the store assigns. Fetches that the store declines with a capability
fallback are evaluated here in memory.
"""

from __future__ import annotations

from dataclasses import replace
from itertools import count
from typing import Any, Mapping

from core.errors import (
    ObjectContextError,
    UnsupportedFilterError,
    UnsupportedSortError,
)
from core.logging_config import get_logger
from core.schema import EntitySchema, Schema
from core.types import (
    FetchDescriptor,
    FetchRequest,
    PermanentIdentifier,
    PersistentIdentifier,
    SaveChangesRequest,
    SaveChangesResult,
    Snapshot,
    SortDescriptor,
    TemporaryIdentifier,
)
from store.record_store import RecordStore

_LOGGER = get_logger(__name__)


class ObjectContext:
    """Unit of work bound to one record store."""

    def __init__(self, store: RecordStore) -> None:
        """Create a context for a store.

        Args:
            store: Opened record store with a bound schema.
        """
        self._store = store
        self._schema: Schema = store.configuration.schema  # type: ignore[assignment]
        self._local_keys = count(1)
        self._inserted: dict[TemporaryIdentifier, Snapshot] = {}
        self._updated: dict[PermanentIdentifier, Snapshot] = {}
        self._deleted: dict[PermanentIdentifier, Snapshot] = {}
        self._resolved: dict[TemporaryIdentifier, PermanentIdentifier] = {}

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def has_changes(self) -> bool:
        return bool(self._inserted or self._updated or self._deleted)

    def insert(self, entity_name: str, values: Mapping[str, Any]) -> TemporaryIdentifier:
        """Stage a new record.

        Args:
            entity_name: Entity kind to insert.
            values: Field values; omitted fields take schema defaults.

        Returns:
            Temporary identifier for the pending record.

        Raises:
            ObjectContextError: If the entity or values do not match the schema.
        """
        entity = self._entity(entity_name)
        identifier = TemporaryIdentifier(
            entity_name=entity_name,
            local_key=f"t{next(self._local_keys)}",
        )
        self._inserted[identifier] = Snapshot(identifier, entity.validate_values(values))
        return identifier

    def update(self, identifier: PersistentIdentifier, values: Mapping[str, Any]) -> None:
        """Stage a wholesale replacement of a record's values.

        Args:
            identifier: Record to update; a pending insert is rewritten in place.
            values: Complete new field values.

        Raises:
            ObjectContextError: If the record is unknown, deleted, or the
                values do not match the schema.
        """
        identifier = self.resolve(identifier)
        entity = self._entity(identifier.entity_name)
        snapshot = Snapshot(identifier, entity.validate_values(values))
        if isinstance(identifier, TemporaryIdentifier):
            if identifier not in self._inserted:
                raise ObjectContextError(
                    f"Cannot update unknown pending record {identifier}. "
                    "Insert the record before updating it."
                )
            self._inserted[identifier] = snapshot
            return
        if identifier in self._deleted:
            raise ObjectContextError(
                f"Cannot update record {identifier} after deleting it in this context."
            )
        self._updated[identifier] = snapshot

    def delete(self, identifier: PersistentIdentifier) -> None:
        """Stage removal of a record.

        Args:
            identifier: Record to delete; a pending insert is simply dropped.
        """
        identifier = self.resolve(identifier)
        if isinstance(identifier, TemporaryIdentifier):
            self._inserted.pop(identifier, None)
            return
        self._updated.pop(identifier, None)
        self._deleted[identifier] = Snapshot(identifier)

    def rollback(self) -> None:
        """Discard all staged changes."""
        self._inserted.clear()
        self._updated.clear()
        self._deleted.clear()

    def save(self) -> SaveChangesResult:
        """Send staged changes to the store in one request.

        Returns:
            Store save result with identifier remaps.

        Raises:
            TaskStoreError: If the store save fails; staged changes are kept.
        """
        request = SaveChangesRequest(
            inserted=tuple(self._inserted.values()),
            updated=tuple(self._updated.values()),
            deleted=tuple(self._deleted.values()),
        )
        result = self._store.save(request)
        for temporary, permanent in result.remapped_identifiers.items():
            if isinstance(temporary, TemporaryIdentifier):
                self._resolved[temporary] = permanent
        self.rollback()
        return result

    def resolve(self, identifier: PersistentIdentifier) -> PersistentIdentifier:
        """Map a saved temporary identifier to its permanent identifier."""
        if isinstance(identifier, TemporaryIdentifier):
            return self._resolved.get(identifier, identifier)
        return identifier

    def fetch(self, descriptor: FetchDescriptor) -> list[Snapshot]:
        """Fetch snapshots, evaluating unsupported parts in memory.

        Args:
            descriptor: Entity, optional predicate, and sort order.

        Returns:
            Matching snapshots in the requested order.

        Raises:
            StoreIOError: If the backing file cannot be read.
            SnapshotDecodeError: If the backing file is malformed.
        """
        self._entity(descriptor.entity_name)
        try:
            return list(self._store.fetch(FetchRequest(descriptor)).fetched_snapshots)
        except UnsupportedFilterError:
            _LOGGER.debug("fetch_filter_in_memory", entity=descriptor.entity_name)
            snapshots = self._fetch_unsorted(replace(descriptor, predicate=None))
            snapshots = [item for item in snapshots if descriptor.predicate(item)]  # type: ignore[misc]
            return _sort_snapshots(snapshots, descriptor.sort_by)
        except UnsupportedSortError:
            _LOGGER.debug("fetch_sort_in_memory", entity=descriptor.entity_name)
            snapshots = self._fetch_unsorted(descriptor)
            return _sort_snapshots(snapshots, descriptor.sort_by)

    def _fetch_unsorted(self, descriptor: FetchDescriptor) -> list[Snapshot]:
        """Fetch the entity without sort descriptors."""
        plain = replace(descriptor, sort_by=())
        return list(self._store.fetch(FetchRequest(plain)).fetched_snapshots)

    def _entity(self, entity_name: str) -> EntitySchema:
        entity = self._schema.entity(entity_name)
        if entity is None:
            raise ObjectContextError(
                f"Unknown entity '{entity_name}' for store '{self._store.name}'. "
                f"Known entities: {', '.join(self._schema.entity_names)}."
            )
        return entity


def _sort_snapshots(
    snapshots: list[Snapshot],
    sort_by: tuple[SortDescriptor, ...],
) -> list[Snapshot]:
    """Stable multi-key sort, applied from the least significant key."""
    ordered = list(snapshots)
    for sort_descriptor in reversed(sort_by):
        ordered.sort(
            key=lambda item: _sort_key(item, sort_descriptor.key),
            reverse=sort_descriptor.reverse,
        )
    return ordered


def _sort_key(snapshot: Snapshot, field_name: str) -> tuple[bool, Any]:
    """Order missing values after present ones without comparing None."""
    value = snapshot.values.get(field_name)
    return (value is None, value)
