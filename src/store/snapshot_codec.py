"""JSON codec for the snapshot set.

This module reads and writes the store backing file. The file is a
pretty-printed JSON array with sorted keys and ISO-8601 dates. Writes go
through a temporary file and an atomic rename so readers never observe a
partial document.
"""

from __future__ import annotations

from datetime import datetime
import json
import os
from pathlib import Path
import stat
import tempfile
from typing import Iterable, Mapping

from core.constants import JSON_INDENT, STORE_TEMP_FILE_PREFIX
from core.errors import SnapshotDecodeError, SnapshotEncodeError, StoreIOError
from core.logging_config import get_logger
from core.schema import EntitySchema, FieldType, Schema
from core.types import PermanentIdentifier, Snapshot, SnapshotSet

_LOGGER = get_logger(__name__)


class SnapshotCodec:
    """Maps between the backing file and an in-memory snapshot set."""

    def __init__(self, location: Path, schema: Schema) -> None:
        """Initialize codec for one backing file.

        Args:
            location: Backing JSON file path.
            schema: Schema used to validate entities and restore dates.
        """
        self._location = location
        self._schema = schema

    @property
    def location(self) -> Path:
        return self._location

    def read(self) -> SnapshotSet:
        """Load the snapshot set from disk.

        Returns:
            Snapshots keyed by permanent identifier; empty when no file exists.

        Raises:
            StoreIOError: If the file exists but cannot be read.
            SnapshotDecodeError: If the file content is malformed.
        """
        if not self._location.exists():
            return {}
        try:
            raw_bytes = self._location.read_bytes()
        except OSError as error:
            raise StoreIOError(
                f"Failed to read store file at {self._location}: {error}. "
                "Check file permissions and retry."
            ) from error
        try:
            payload = json.loads(raw_bytes.decode("utf-8"))
        except UnicodeDecodeError as error:
            raise SnapshotDecodeError(
                f"Failed to decode store file at {self._location}: {error.reason} "
                f"(byte {error.start}). The file must be UTF-8 encoded JSON."
            ) from error
        except json.JSONDecodeError as error:
            raise SnapshotDecodeError(
                f"Failed to parse store file at {self._location}: {error.msg} "
                f"(line {error.lineno}). Restore the file from a backup or remove it."
            ) from error
        if not isinstance(payload, list):
            raise SnapshotDecodeError(
                f"Failed to parse store file at {self._location}: "
                "expected JSON array at top level."
            )
        snapshots: SnapshotSet = {}
        for index, item in enumerate(payload):
            snapshot = self._snapshot_from_payload(item, index)
            snapshots[snapshot.persistent_identifier] = snapshot  # type: ignore[index]
        _LOGGER.debug("store_read", location=str(self._location), record_count=len(snapshots))
        return snapshots

    def write(self, snapshots: SnapshotSet) -> None:
        """Atomically replace the backing file with ``snapshots``.

        Args:
            snapshots: Snapshot set to persist.

        Raises:
            SnapshotEncodeError: If a value cannot be encoded.
            StoreIOError: If the file cannot be written. The previously
                committed file is left untouched.
        """
        document = encode_snapshot_document(snapshots.values())
        self._replace_file(document)
        _LOGGER.debug("store_written", location=str(self._location), record_count=len(snapshots))

    def _replace_file(self, document: str) -> None:
        """Write ``document`` to a sibling temp file, then rename it over the target."""
        directory = self._location.parent
        temp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=directory,
                prefix=STORE_TEMP_FILE_PREFIX,
                suffix=self._location.suffix,
                delete=False,
            ) as handle:
                temp_name = handle.name
                handle.write(document)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(temp_name, _target_mode(self._location))
            os.replace(temp_name, self._location)
        except OSError as error:
            if temp_name is not None:
                _discard_temp_file(Path(temp_name))
            raise StoreIOError(
                f"Failed to write store file at {self._location}: {error}. "
                "The previous store content was kept; check disk space and permissions."
            ) from error

    def _snapshot_from_payload(self, item: object, index: int) -> Snapshot:
        """Decode one array element into a snapshot."""
        if not isinstance(item, dict):
            raise SnapshotDecodeError(
                f"Invalid snapshot at index {index} in {self._location}: expected JSON object."
            )
        identifier = _identifier_from_payload(item.get("identifier"), index, self._location)
        entity = self._schema.entity(identifier.entity_name)
        if entity is None:
            raise SnapshotDecodeError(
                f"Unknown entity '{identifier.entity_name}' at index {index} in "
                f"{self._location}. Known entities: {', '.join(self._schema.entity_names)}."
            )
        raw_values = item.get("values")
        if not isinstance(raw_values, dict):
            raise SnapshotDecodeError(
                f"Invalid snapshot values at index {index} in {self._location}: "
                "expected JSON object."
            )
        values = _decode_values(entity, raw_values, index, self._location)
        return Snapshot(persistent_identifier=identifier, values=values)


def encode_snapshot_document(snapshots: Iterable[Snapshot]) -> str:
    """Render snapshots as the deterministic backing file document.

    Elements are ordered by entity name and primary key, and keys are sorted
    within each object, so equal content always produces equal text.

    Args:
        snapshots: Iterable of snapshots with permanent identifiers.

    Returns:
        JSON document text ending with a newline.

    Raises:
        SnapshotEncodeError: If a snapshot is not permanent or a value is
            not representable.
    """
    ordered = sorted(snapshots, key=_snapshot_sort_key)
    payload = [snapshot_to_payload(snapshot) for snapshot in ordered]
    try:
        document = json.dumps(
            payload,
            indent=JSON_INDENT,
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as error:
        raise SnapshotEncodeError(
            f"Failed to encode snapshots: {error}. "
            "Snapshot values must be strings, finite numbers, booleans, or datetimes."
        ) from error
    return document + "\n"


def snapshot_to_payload(snapshot: Snapshot) -> dict[str, object]:
    """Serialize a snapshot into a JSON-safe payload.

    Args:
        snapshot: Snapshot with a permanent identifier.

    Returns:
        Dictionary payload for JSON encoding.

    Raises:
        SnapshotEncodeError: If the identifier is still temporary.
    """
    identifier = snapshot.persistent_identifier
    if not isinstance(identifier, PermanentIdentifier):
        raise SnapshotEncodeError(
            f"Cannot persist snapshot with temporary identifier {identifier}. "
            "Inserted snapshots must be assigned a permanent identifier first."
        )
    return {
        "identifier": {
            "entity_name": identifier.entity_name,
            "primary_key": identifier.primary_key,
            "store_identifier": identifier.store_identifier,
        },
        "values": {key: _encode_value(value) for key, value in snapshot.values.items()},
    }


def _encode_value(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _snapshot_sort_key(snapshot: Snapshot) -> tuple[str, str]:
    identifier = snapshot.persistent_identifier
    return (identifier.entity_name, getattr(identifier, "primary_key", ""))


def _identifier_from_payload(payload: object, index: int, location: Path) -> PermanentIdentifier:
    """Decode a permanent identifier payload."""
    if not isinstance(payload, dict):
        raise SnapshotDecodeError(
            f"Missing identifier at index {index} in {location}: expected JSON object."
        )
    parts = [payload.get(key) for key in ("store_identifier", "entity_name", "primary_key")]
    if not all(isinstance(part, str) and part for part in parts):
        raise SnapshotDecodeError(
            f"Invalid identifier at index {index} in {location}: "
            "store_identifier, entity_name, and primary_key must be non-empty strings."
        )
    store_identifier, entity_name, primary_key = parts
    return PermanentIdentifier(
        store_identifier=str(store_identifier),
        entity_name=str(entity_name),
        primary_key=str(primary_key),
    )


def _decode_values(
    entity: EntitySchema,
    raw_values: Mapping[str, object],
    index: int,
    location: Path,
) -> dict[str, object]:
    """Restore typed values, parsing ISO-8601 strings for datetime fields."""
    values: dict[str, object] = {}
    for key, raw_value in raw_values.items():
        spec = entity.field(key)
        if spec is not None and spec.field_type is FieldType.DATETIME and raw_value is not None:
            values[key] = _parse_datetime(raw_value, key, index, location)
        else:
            values[key] = raw_value
    return values


def _parse_datetime(raw_value: object, key: str, index: int, location: Path) -> datetime:
    if not isinstance(raw_value, str):
        raise SnapshotDecodeError(
            f"Invalid date for field '{key}' at index {index} in {location}: "
            "expected ISO-8601 string."
        )
    try:
        return datetime.fromisoformat(raw_value)
    except ValueError as error:
        raise SnapshotDecodeError(
            f"Invalid date '{raw_value}' for field '{key}' at index {index} in {location}: "
            "expected ISO-8601 string."
        ) from error


def _discard_temp_file(temp_path: Path) -> None:
    """Remove a leftover temp file after a failed write."""
    try:
        temp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as error:
        _LOGGER.warning("temp_file_cleanup_failed", path=str(temp_path), error=str(error))


def _target_mode(location: Path) -> int:
    """Permission bits the replaced file should keep.

    An existing file keeps its mode; a new file gets the umask default.
    """
    try:
        return stat.S_IMODE(location.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask
