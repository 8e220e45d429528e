"""Task list service.

This module exposes the sample app's to-do operations on top of an
object context. Every change is saved immediately.
"""

from __future__ import annotations

from dataclasses import replace

from context.object_context import ObjectContext
from core.constants import TASK_ENTITY_NAME
from core.errors import ObjectContextError
from core.logging_config import get_logger
from core.types import FetchDescriptor, PersistentIdentifier, SortDescriptor
from todo.task_model import Task

_LOGGER = get_logger(__name__)


class TaskList:
    """To-do list backed by an object context."""

    def __init__(self, context: ObjectContext) -> None:
        self._context = context

    @property
    def context(self) -> ObjectContext:
        return self._context

    def tasks(self) -> list[Task]:
        """Return all tasks ordered by title."""
        descriptor = FetchDescriptor(
            entity_name=TASK_ENTITY_NAME,
            sort_by=(SortDescriptor("title"),),
        )
        return [Task.from_snapshot(snapshot) for snapshot in self._context.fetch(descriptor)]

    def pending_tasks(self) -> list[Task]:
        """Return unfinished tasks ordered by title."""
        descriptor = FetchDescriptor(
            entity_name=TASK_ENTITY_NAME,
            predicate=lambda snapshot: not snapshot.values.get("finished", False),
            sort_by=(SortDescriptor("title"),),
        )
        return [Task.from_snapshot(snapshot) for snapshot in self._context.fetch(descriptor)]

    def add_task(self, title: str) -> Task:
        """Create and save a new task.

        Args:
            title: Task title; surrounding whitespace is stripped.

        Returns:
            Saved task with its permanent identifier.

        Raises:
            ObjectContextError: If the title is empty.
        """
        clean_title = _clean_title(title)
        temporary = self._context.insert(TASK_ENTITY_NAME, {"title": clean_title})
        self._context.save()
        task = Task(identifier=self._context.resolve(temporary), title=clean_title)
        _LOGGER.info("task_added", primary_key=getattr(task.identifier, "primary_key", None))
        return task

    def rename_task(self, task: Task, title: str) -> Task:
        """Save a new title for a task."""
        return self._save_task(replace(task, title=_clean_title(title)))

    def toggle_finished(self, task: Task) -> Task:
        """Flip and save a task's finished flag."""
        return self._save_task(replace(task, finished=not task.finished))

    def delete_task(self, identifier: PersistentIdentifier) -> None:
        """Delete a task; deleting an already removed task is a no-op."""
        self._context.delete(identifier)
        self._context.save()

    def _save_task(self, task: Task) -> Task:
        self._context.update(task.identifier, task.to_values())
        self._context.save()
        return replace(task, identifier=self._context.resolve(task.identifier))


def _clean_title(title: str) -> str:
    clean_title = title.strip()
    if not clean_title:
        raise ObjectContextError("Task title must not be empty.")
    return clean_title
