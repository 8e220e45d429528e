"""Store configuration model.

A configuration names a store, points at its backing file, and carries the
schema once bound. Identity is the store name alone.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from core.schema import Schema


@dataclass(frozen=True, eq=False)
class StoreConfiguration:
    """Immutable description of one record store.

    Two configurations with the same name compare equal and hash alike even
    when their schema or location differ. Callers that need to tell stores
    apart by location must key on ``location`` themselves.

    Attributes:
        name: Logical store name.
        schema: Entity schema, None until bound.
        location: Backing JSON file path.
    """

    name: str
    location: Path
    schema: Schema | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StoreConfiguration):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    @property
    def store_identifier(self) -> str:
        """Identifier that scopes permanent record ids to this store."""
        return self.location.name

    def bind_schema(self, schema: Schema) -> "StoreConfiguration":
        """Return a copy of this configuration carrying ``schema``."""
        return replace(self, schema=schema)
