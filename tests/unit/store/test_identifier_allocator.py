"""Unit tests for permanent identifier allocation."""

from __future__ import annotations

from uuid import UUID

from core.types import PermanentIdentifier
from store.identifier_allocator import allocate_permanent_identifier


def test_allocation_scopes_identifier_to_store_and_entity() -> None:
    """Allocated identifier should carry store and entity names."""
    identifier = allocate_permanent_identifier("tasks.json", "Task")

    assert isinstance(identifier, PermanentIdentifier)
    assert (identifier.store_identifier, identifier.entity_name) == ("tasks.json", "Task")


def test_allocation_uses_key_factory() -> None:
    """Primary key should be taken from the injected factory."""
    identifier = allocate_permanent_identifier(
        "tasks.json",
        "Task",
        key_factory=lambda: UUID(int=7),
    )

    assert identifier.primary_key == str(UUID(int=7))


def test_random_allocations_are_distinct() -> None:
    """Random primary keys should not collide in practice."""
    identifiers = {allocate_permanent_identifier("tasks.json", "Task") for _ in range(1000)}

    assert len(identifiers) == 1000
