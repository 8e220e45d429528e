"""Shared builders for store unit tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from uuid import UUID

from core.schema import EntitySchema, FieldSpec, FieldType, Schema
from core.types import PermanentIdentifier, Snapshot, TemporaryIdentifier
from store.store_configuration import StoreConfiguration
from todo.task_model import TASK_SCHEMA

EVENT_ENTITY = EntitySchema(
    name="Event",
    fields=(
        FieldSpec(name="title", field_type=FieldType.STRING),
        FieldSpec(name="starts_at", field_type=FieldType.DATETIME),
    ),
)
EVENT_SCHEMA = Schema(entities=(EVENT_ENTITY,))


def task_configuration(tmp_path: Path, name: str = "tasks") -> StoreConfiguration:
    return StoreConfiguration(name=name, location=tmp_path / f"{name}.json", schema=TASK_SCHEMA)


def new_task(title: str, local_key: str = "t1", finished: bool = False) -> Snapshot:
    identifier = TemporaryIdentifier(entity_name="Task", local_key=local_key)
    return Snapshot(identifier, {"title": title, "finished": finished})


def stored_task(primary_key: str, title: str, finished: bool = False) -> Snapshot:
    identifier = PermanentIdentifier(
        store_identifier="tasks.json",
        entity_name="Task",
        primary_key=primary_key,
    )
    return Snapshot(identifier, {"title": title, "finished": finished})


def sequential_keys() -> Callable[[], UUID]:
    """Return a key factory yielding predictable UUIDs."""
    counter = iter(range(1, 10_000))
    return lambda: UUID(int=next(counter))
