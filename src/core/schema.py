"""Entity schema models.

This module describes entity kinds and their typed fields.
The snapshot codec uses it to restore date values from JSON strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from core.errors import ObjectContextError


class FieldType(str, Enum):
    """Supported snapshot field value types."""

    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    DATETIME = "datetime"


_PYTHON_TYPES: dict[FieldType, tuple[type, ...]] = {
    FieldType.STRING: (str,),
    FieldType.BOOLEAN: (bool,),
    FieldType.INTEGER: (int,),
    FieldType.FLOAT: (float, int),
    FieldType.DATETIME: (datetime,),
}


@dataclass(frozen=True)
class FieldSpec:
    """One typed field of an entity.

    Attributes:
        name: Field name used as snapshot value key.
        field_type: Declared value type.
        default: Value used when an insert omits the field; None means required.
    """

    name: str
    field_type: FieldType
    default: Any = None

    def accepts(self, value: object) -> bool:
        """Return whether a value matches the declared field type."""
        if self.field_type is not FieldType.BOOLEAN and isinstance(value, bool):
            return False
        return isinstance(value, _PYTHON_TYPES[self.field_type])


@dataclass(frozen=True)
class EntitySchema:
    """Field layout of one entity kind."""

    name: str
    fields: tuple[FieldSpec, ...]

    def field(self, field_name: str) -> FieldSpec | None:
        """Return a field spec by name, or None when undeclared."""
        for spec in self.fields:
            if spec.name == field_name:
                return spec
        return None

    def validate_values(self, values: Mapping[str, object]) -> dict[str, object]:
        """Check values against the entity fields and fill defaults.

        Args:
            values: Candidate field values.

        Returns:
            Complete field values in declaration order.

        Raises:
            ObjectContextError: If a field is unknown, missing, or mistyped.
        """
        unknown = sorted(set(values) - {spec.name for spec in self.fields})
        if unknown:
            raise ObjectContextError(
                f"Unknown fields for entity '{self.name}': {', '.join(unknown)}. "
                "Only declared schema fields can be stored."
            )
        validated: dict[str, object] = {}
        for spec in self.fields:
            value = values.get(spec.name, spec.default)
            if value is None:
                raise ObjectContextError(
                    f"Missing required field '{spec.name}' for entity '{self.name}'."
                )
            if not spec.accepts(value):
                raise ObjectContextError(
                    f"Field '{spec.name}' of entity '{self.name}' expects "
                    f"{spec.field_type.value}, got {type(value).__name__}."
                )
            validated[spec.name] = value
        return validated


@dataclass(frozen=True)
class Schema:
    """Set of entity kinds served by one store."""

    entities: tuple[EntitySchema, ...]

    def entity(self, entity_name: str) -> EntitySchema | None:
        """Return an entity schema by name, or None when undeclared."""
        for entity in self.entities:
            if entity.name == entity_name:
                return entity
        return None

    @property
    def entity_names(self) -> tuple[str, ...]:
        return tuple(entity.name for entity in self.entities)
