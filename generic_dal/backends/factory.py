"""
Factory functions for creating storage backends and repositories.

These functions take a BackendConfig (or read one from the environment)
and return a configured StorageBackend or a fully wired GenericRepository.
"""

import logging
from typing import Optional, Type, TypeVar

from generic_dal.config import BackendConfig, BackendType
from generic_dal.domain import DataObject
from generic_dal.exceptions import ErrorObserver
from generic_dal.repository import GenericRepository
from generic_dal.validation import ensure_backend_protocol

from .base import StorageBackend
from .file import FileStorageBackend
from .memory import MemoryStorageBackend

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DataObject)


def storage_backend_factory(
    config: BackendConfig, data_object_type: Type[T]
) -> StorageBackend[T]:
    """Create a configured StorageBackend instance.

    Args:
        config: Backend selection and parameters
        data_object_type: Concrete DataObject subclass the backend stores

    Returns:
        A backend validated against the StorageBackend protocol

    Raises:
        ValueError: If the backend type is not supported

    Example:
        >>> config = BackendConfig(
        ...     backend_type=BackendType.FILE, storage_path="/tmp/notes"
        ... )
        >>> backend = storage_backend_factory(config, Note)
    """
    logger.debug(
        "Creating StorageBackend via factory",
        extra={
            "backend_type": config.backend_type.value,
            "data_object_type": data_object_type.__name__,
        },
    )

    backend: StorageBackend[T]
    if config.backend_type == BackendType.MEMORY:
        backend = MemoryStorageBackend(data_object_type)
    elif config.backend_type == BackendType.FILE:
        assert config.storage_path is not None  # For MyPy
        backend = FileStorageBackend(data_object_type, config.storage_path)
    else:
        raise ValueError(f"Unsupported backend type: {config.backend_type}")

    validated_backend = ensure_backend_protocol(backend)

    logger.info(
        "StorageBackend created successfully",
        extra={
            "backend_type": config.backend_type.value,
            "implementation": type(backend).__name__,
        },
    )

    return validated_backend


def create_repository(
    data_object_type: Type[T],
    config: Optional[BackendConfig] = None,
    error_observer: Optional[ErrorObserver] = None,
) -> GenericRepository[T]:
    """Wire a GenericRepository for ``data_object_type``.

    Args:
        data_object_type: Concrete DataObject subclass to manage
        config: Backend configuration, read from the environment when
            omitted
        error_observer: Optional diagnostics hook for repository errors
    """
    if config is None:
        config = BackendConfig.from_env()

    backend = storage_backend_factory(config, data_object_type)

    return GenericRepository(
        backend, data_object_type, error_observer=error_observer
    )
