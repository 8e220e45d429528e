"""Runtime configuration model for the task store.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import re

from core.constants import DEFAULT_DATA_ROOT, DEFAULT_STORE_NAME, STORE_FILE_SUFFIX
from core.errors import StoreConfigError
from core.schema import Schema
from store.store_configuration import StoreConfiguration

_STORE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


@dataclass(frozen=True)
class TaskStoreConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local directory holding store backing files.
        store_name: Logical store name, also the backing file stem.
    """

    data_root: Path
    store_name: str

    @classmethod
    def from_env(cls) -> "TaskStoreConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            StoreConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("TASKSTORE_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        store_name = _parse_store_name(os.getenv("TASKSTORE_STORE_NAME", DEFAULT_STORE_NAME))
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            store_name=store_name,
        )

    @property
    def store_location(self) -> Path:
        """Backing file path for the configured store."""
        return self.data_root / f"{self.store_name}{STORE_FILE_SUFFIX}"

    def store_configuration(self, schema: Schema | None = None) -> StoreConfiguration:
        """Build the store configuration for this runtime config.

        Args:
            schema: Optional schema to bind immediately.

        Returns:
            Store configuration pointing at the backing file.
        """
        return StoreConfiguration(
            name=self.store_name,
            schema=schema,
            location=self.store_location,
        )


def _parse_store_name(raw_value: str) -> str:
    """Validate the store name environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Validated store name.

    Raises:
        StoreConfigError: If the name is not a plain file name token.
    """
    value = raw_value.strip()
    if not _STORE_NAME_PATTERN.match(value):
        raise StoreConfigError(
            "Invalid TASKSTORE_STORE_NAME value: "
            f"expected a plain file name token, got '{raw_value}'. "
            "Use letters, digits, '.', '_' or '-' only."
        )
    return value
