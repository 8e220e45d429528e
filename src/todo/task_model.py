"""Task entity schema and typed view."""

from __future__ import annotations

from dataclasses import dataclass

from core.constants import TASK_ENTITY_NAME
from core.schema import EntitySchema, FieldSpec, FieldType, Schema
from core.types import PersistentIdentifier, Snapshot

TASK_ENTITY = EntitySchema(
    name=TASK_ENTITY_NAME,
    fields=(
        FieldSpec(name="title", field_type=FieldType.STRING),
        FieldSpec(name="finished", field_type=FieldType.BOOLEAN, default=False),
    ),
)
TASK_SCHEMA = Schema(entities=(TASK_ENTITY,))


@dataclass(frozen=True)
class Task:
    """One to-do item.

    Attributes:
        identifier: Persistent identifier of the stored record.
        title: Task title.
        finished: Whether the task is done.
    """

    identifier: PersistentIdentifier
    title: str
    finished: bool = False

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "Task":
        return cls(
            identifier=snapshot.persistent_identifier,
            title=str(snapshot.values["title"]),
            finished=bool(snapshot.values.get("finished", False)),
        )

    def to_values(self) -> dict[str, object]:
        return {"title": self.title, "finished": self.finished}
