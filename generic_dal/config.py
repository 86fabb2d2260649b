"""
Configuration for the generic data access layer.

Backend selection and logging are driven by environment variables:

- DAL_BACKEND: ``memory`` (default) or ``file``
- DAL_STORAGE_PATH: directory for the file backend
- LOG_LEVEL: logging level name (default ``INFO``)
- LOG_FORMAT: logging format string
"""

import logging
import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class BackendType(str, Enum):
    """Storage media a repository can be wired to."""

    MEMORY = "memory"
    FILE = "file"


class BackendConfig(BaseModel):
    """Selects and parameterizes the storage backend of a repository."""

    backend_type: BackendType = Field(
        BackendType.MEMORY, description="Storage medium to use"
    )
    storage_path: Optional[str] = Field(
        None, description="Directory for file-based storage"
    )

    @model_validator(mode="after")
    def file_backend_needs_storage_path(self) -> "BackendConfig":
        if self.backend_type == BackendType.FILE:
            if not self.storage_path or not self.storage_path.strip():
                raise ValueError(
                    "storage_path is required for the file backend"
                )
        return self

    @classmethod
    def from_env(cls) -> "BackendConfig":
        """Build the configuration from DAL_* environment variables."""
        backend_type = os.environ.get("DAL_BACKEND", "memory").lower()
        storage_path = os.environ.get("DAL_STORAGE_PATH")

        logger.debug(
            "Loading backend configuration from environment",
            extra={
                "backend_type": backend_type,
                "storage_path": storage_path,
            },
        )

        return cls(backend_type=backend_type, storage_path=storage_path)


def setup_logging() -> None:
    """Configure the root logger from LOG_LEVEL and LOG_FORMAT.

    An unknown LOG_LEVEL falls back to INFO and is reported through the
    freshly configured logging once it is in place.
    """
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    known_level = isinstance(level, int)

    logging.basicConfig(
        level=level if known_level else logging.INFO,
        format=os.environ.get("LOG_FORMAT", DEFAULT_LOG_FORMAT),
        force=True,
    )

    if not known_level:
        logger.warning(
            f"Unknown LOG_LEVEL {level_name!r}, using INFO",
            extra={"log_level": level_name},
        )

    logger.debug(
        "Logging configured for generic_dal",
        extra={"log_level": logging.getLevelName(logging.getLogger().level)},
    )
