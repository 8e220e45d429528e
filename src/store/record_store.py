"""JSON-file record store.

This module implements the fetch/save contract on top of the snapshot
codec and the identifier allocator. Filtering and sorting are delegated
back to the caller through capability fallback errors.
"""

from __future__ import annotations

from uuid import uuid4

from core.errors import StoreConfigError, UnsupportedFilterError, UnsupportedSortError
from core.logging_config import get_logger
from core.types import (
    FetchRequest,
    FetchResult,
    PermanentIdentifier,
    PersistentIdentifier,
    SaveChangesRequest,
    SaveChangesResult,
)
from store.identifier_allocator import KeyFactory, allocate_permanent_identifier
from store.snapshot_codec import SnapshotCodec
from store.store_configuration import StoreConfiguration
from store.store_lock import lock_for_path

_LOGGER = get_logger(__name__)


class RecordStore:
    """Record store backed by one JSON file.

    The store holds a configuration and a codec. Every save reads the
    current file, applies inserts, then updates, then deletes, and writes
    the result back in one atomic replace while holding the path lock.
    """

    def __init__(
        self,
        configuration: StoreConfiguration,
        key_factory: KeyFactory = uuid4,
    ) -> None:
        """Open a store for a configuration.

        Args:
            configuration: Store configuration with a bound schema.
            key_factory: Source of primary keys for inserted records.

        Raises:
            StoreConfigError: If the configuration has no schema.
        """
        if configuration.schema is None:
            raise StoreConfigError(
                f"Store '{configuration.name}' has no schema bound. "
                "Call bind_schema on the configuration before opening the store."
            )
        self._configuration = configuration
        self._codec = SnapshotCodec(configuration.location, configuration.schema)
        self._key_factory = key_factory
        self._lock = lock_for_path(configuration.location)

    @property
    def configuration(self) -> StoreConfiguration:
        return self._configuration

    @property
    def name(self) -> str:
        return self._configuration.name

    @property
    def identifier(self) -> str:
        return self._configuration.store_identifier

    def fetch(self, request: FetchRequest) -> FetchResult:
        """Load every snapshot of the requested entity.

        Args:
            request: Fetch request without predicate or sort descriptors.

        Returns:
            Fetched snapshots plus the full snapshot set.

        Raises:
            UnsupportedFilterError: If the descriptor carries a predicate.
            UnsupportedSortError: If the descriptor carries sort descriptors.
            StoreIOError: If the backing file cannot be read.
            SnapshotDecodeError: If the backing file is malformed.
        """
        descriptor = request.descriptor
        if descriptor.predicate is not None:
            raise UnsupportedFilterError(
                f"Store '{self.name}' cannot evaluate predicates; filter in memory."
            )
        if descriptor.sort_by:
            raise UnsupportedSortError(
                f"Store '{self.name}' cannot apply sort descriptors; sort in memory."
            )
        with self._lock:
            snapshots = self._codec.read()
        fetched = tuple(
            snapshot
            for snapshot in snapshots.values()
            if snapshot.entity_name == descriptor.entity_name
        )
        return FetchResult(
            descriptor=descriptor,
            fetched_snapshots=fetched,
            related_snapshots=snapshots,
        )

    def save(self, request: SaveChangesRequest) -> SaveChangesResult:
        """Apply inserted, updated, and deleted snapshots to the backing file.

        Args:
            request: Change sets to persist.

        Returns:
            Identifier remaps for inserts and the requested deleted ids.

        Raises:
            StoreIOError: If the backing file cannot be read or written.
            SnapshotDecodeError: If the current backing file is malformed.
            SnapshotEncodeError: If a snapshot cannot be encoded.
        """
        remapped: dict[PersistentIdentifier, PermanentIdentifier] = {}
        with self._lock:
            working_copy = self._codec.read()
            for snapshot in request.inserted:
                permanent_identifier = allocate_permanent_identifier(
                    self.identifier,
                    snapshot.entity_name,
                    self._key_factory,
                )
                working_copy[permanent_identifier] = snapshot.copy(permanent_identifier)
                remapped[snapshot.persistent_identifier] = permanent_identifier
            for snapshot in request.updated:
                working_copy[snapshot.persistent_identifier] = snapshot  # type: ignore[index]
            for snapshot in request.deleted:
                working_copy.pop(snapshot.persistent_identifier, None)  # type: ignore[arg-type]
            self._codec.write(working_copy)
        deleted_identifiers = tuple(snapshot.persistent_identifier for snapshot in request.deleted)
        _LOGGER.info(
            "snapshots_saved",
            store=self.name,
            inserted=len(request.inserted),
            updated=len(request.updated),
            deleted=len(deleted_identifiers),
            record_count=len(working_copy),
        )
        return SaveChangesResult(
            store_identifier=self.identifier,
            remapped_identifiers=remapped,
            deleted_identifiers=deleted_identifiers,
        )
