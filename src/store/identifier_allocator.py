"""Permanent identifier allocation.

Primary keys are random UUIDs. No counter is persisted and no collision
check is made; the 128-bit key space makes collisions negligible.
"""

from __future__ import annotations

from typing import Callable
from uuid import UUID, uuid4

from core.types import PermanentIdentifier

KeyFactory = Callable[[], UUID]


def allocate_permanent_identifier(
    store_identifier: str,
    entity_name: str,
    key_factory: KeyFactory = uuid4,
) -> PermanentIdentifier:
    """Create a fresh permanent identifier for an inserted record.

    Args:
        store_identifier: Identifier of the owning store.
        entity_name: Entity kind of the record.
        key_factory: Source of random primary keys.

    Returns:
        New permanent identifier.
    """
    return PermanentIdentifier(
        store_identifier=store_identifier,
        entity_name=entity_name,
        primary_key=str(key_factory()),
    )
