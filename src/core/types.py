"""Shared typed models.

This module defines immutable identifiers, snapshots, and the
request/result payloads exchanged between the context and the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Union


@dataclass(frozen=True)
class TemporaryIdentifier:
    """Identifier assigned by the context before the first save.

    Attributes:
        entity_name: Entity kind of the pending record.
        local_key: Context-local key, unique within one context.
    """

    entity_name: str
    local_key: str


@dataclass(frozen=True)
class PermanentIdentifier:
    """Store-scoped identifier assigned on insert.

    Attributes:
        store_identifier: Identifier of the store that owns the record.
        entity_name: Entity kind of the record.
        primary_key: Random primary key, never reused.
    """

    store_identifier: str
    entity_name: str
    primary_key: str


PersistentIdentifier = Union[TemporaryIdentifier, PermanentIdentifier]


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Immutable copy of one record's identity and field values.

    Attributes:
        persistent_identifier: Temporary or permanent record identifier.
        values: Read-only field values keyed by field name.
    """

    persistent_identifier: PersistentIdentifier
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return (
            self.persistent_identifier == other.persistent_identifier
            and dict(self.values) == dict(other.values)
        )

    @property
    def entity_name(self) -> str:
        return self.persistent_identifier.entity_name

    def copy(self, persistent_identifier: PersistentIdentifier) -> "Snapshot":
        """Return a snapshot with the same values under another identifier."""
        return Snapshot(persistent_identifier=persistent_identifier, values=self.values)


SnapshotSet = dict[PermanentIdentifier, Snapshot]


@dataclass(frozen=True)
class SortDescriptor:
    """Sort ordering on one snapshot field.

    Attributes:
        key: Field name to order by.
        reverse: Whether to order descending.
    """

    key: str
    reverse: bool = False


@dataclass(frozen=True)
class FetchDescriptor:
    """Description of which snapshots a fetch wants.

    Attributes:
        entity_name: Entity kind to fetch.
        predicate: Optional snapshot filter.
        sort_by: Ordered sort descriptors, primary first.
    """

    entity_name: str
    predicate: Callable[[Snapshot], bool] | None = None
    sort_by: tuple[SortDescriptor, ...] = ()


@dataclass(frozen=True)
class FetchRequest:
    """Fetch request sent by the context to a store."""

    descriptor: FetchDescriptor


@dataclass(frozen=True)
class FetchResult:
    """Fetch result returned by a store.

    Attributes:
        descriptor: Descriptor the result answers.
        fetched_snapshots: Snapshots matching the descriptor entity.
        related_snapshots: Full snapshot set for relationship resolution.
    """

    descriptor: FetchDescriptor
    fetched_snapshots: tuple[Snapshot, ...]
    related_snapshots: Mapping[PermanentIdentifier, Snapshot]


@dataclass(frozen=True)
class SaveChangesRequest:
    """Change sets for one save call.

    Attributes:
        inserted: Snapshots carrying temporary identifiers.
        updated: Snapshots carrying permanent identifiers.
        deleted: Snapshots whose permanent identifiers should be removed.
    """

    inserted: tuple[Snapshot, ...] = ()
    updated: tuple[Snapshot, ...] = ()
    deleted: tuple[Snapshot, ...] = ()


@dataclass(frozen=True)
class SaveChangesResult:
    """Outcome of one save call.

    Attributes:
        store_identifier: Store that performed the save.
        remapped_identifiers: Temporary identifier to assigned permanent identifier.
        deleted_identifiers: Identifiers named by the request's delete set.
    """

    store_identifier: str
    remapped_identifiers: Mapping[PersistentIdentifier, PermanentIdentifier]
    deleted_identifiers: tuple[PersistentIdentifier, ...]
