"""Task store exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class TaskStoreError(Exception):
    """Base exception for all task store failures."""


class StoreConfigError(TaskStoreError):
    """Raised for invalid store or runtime configuration."""


class StoreCapabilityFallback(TaskStoreError):
    """Raised when the store asks the caller to evaluate a request in memory.

    This is a recoverable signal, not a failure of the store.
    """


class UnsupportedFilterError(StoreCapabilityFallback):
    """Raised when a fetch carries a predicate the store cannot evaluate."""


class UnsupportedSortError(StoreCapabilityFallback):
    """Raised when a fetch carries sort descriptors the store cannot apply."""


class StoreIOError(TaskStoreError):
    """Raised when the backing file cannot be read or written."""


class SnapshotDecodeError(TaskStoreError):
    """Raised for malformed on-disk snapshot payloads."""


class SnapshotEncodeError(TaskStoreError):
    """Raised when a snapshot value cannot be represented in JSON."""


class ObjectContextError(TaskStoreError):
    """Raised for invalid object context usage."""
