"""
Generic data access layer.

A uniform CRUD repository over pluggable storage backends, with a
before/after listener pipeline and watermark-based incremental reads.
"""

from generic_dal.domain import DataObject, MIN_TIMESTAMP
from generic_dal.exceptions import (
    ArgumentError,
    ErrorObserver,
    ObserverError,
    RepositoryError,
)
from generic_dal.listeners import (
    DeleteListener,
    GetListener,
    ReloadListener,
    SaveListener,
)
from generic_dal.backends import (
    FileStorageBackend,
    MemoryStorageBackend,
    StorageBackend,
)
from generic_dal.repository import GenericRepository
from generic_dal.config import BackendConfig, BackendType, setup_logging
from generic_dal.backends.factory import (
    create_repository,
    storage_backend_factory,
)

__all__ = [
    "DataObject",
    "MIN_TIMESTAMP",
    "ArgumentError",
    "ErrorObserver",
    "ObserverError",
    "RepositoryError",
    "DeleteListener",
    "GetListener",
    "ReloadListener",
    "SaveListener",
    "FileStorageBackend",
    "MemoryStorageBackend",
    "StorageBackend",
    "GenericRepository",
    "BackendConfig",
    "BackendType",
    "setup_logging",
    "create_repository",
    "storage_backend_factory",
]
