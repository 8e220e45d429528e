"""Public SDK surface for the task store.

This module provides a stable import path for library users.
It re-exports the store types and opens a task list from config.
"""

from __future__ import annotations

from context.object_context import ObjectContext
from core.config import TaskStoreConfig
from core.errors import (
    SnapshotDecodeError,
    SnapshotEncodeError,
    StoreCapabilityFallback,
    StoreIOError,
    TaskStoreError,
    UnsupportedFilterError,
    UnsupportedSortError,
)
from core.types import (
    FetchDescriptor,
    FetchRequest,
    FetchResult,
    PermanentIdentifier,
    SaveChangesRequest,
    SaveChangesResult,
    Snapshot,
    SortDescriptor,
    TemporaryIdentifier,
)
from store.record_store import RecordStore
from store.store_configuration import StoreConfiguration
from todo.task_list import TaskList
from todo.task_model import TASK_SCHEMA, Task

__all__ = [
    "FetchDescriptor",
    "FetchRequest",
    "FetchResult",
    "ObjectContext",
    "PermanentIdentifier",
    "RecordStore",
    "SaveChangesRequest",
    "SaveChangesResult",
    "Snapshot",
    "SnapshotDecodeError",
    "SnapshotEncodeError",
    "SortDescriptor",
    "StoreCapabilityFallback",
    "StoreConfiguration",
    "StoreIOError",
    "Task",
    "TaskList",
    "TaskStoreConfig",
    "TaskStoreError",
    "TemporaryIdentifier",
    "UnsupportedFilterError",
    "UnsupportedSortError",
    "open_task_list",
]


def open_task_list(config: TaskStoreConfig | None = None) -> TaskList:
    """Open the to-do list described by runtime configuration.

    Args:
        config: Optional runtime configuration; read from env when omitted.

    Returns:
        Task list backed by a JSON record store.
    """
    config = config or TaskStoreConfig.from_env()
    config.data_root.mkdir(parents=True, exist_ok=True)
    store = RecordStore(config.store_configuration(TASK_SCHEMA))
    return TaskList(ObjectContext(store))
