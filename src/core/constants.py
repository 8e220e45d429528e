"""Core constants used across task store modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".taskstore")
DEFAULT_STORE_NAME = "tasks"
STORE_FILE_SUFFIX = ".json"
STORE_TEMP_FILE_PREFIX = ".tmp-"
JSON_INDENT = 2
TASK_ENTITY_NAME = "Task"
