"""
Runtime validation of storage backends against the StorageBackend protocol.

Uses Python's built-in ``isinstance()`` with ``@runtime_checkable`` so a
misconfigured backend is caught when the repository is wired, not on the
first call that happens to need a missing method.
"""

import logging
from typing import Any

from generic_dal.backends.base import StorageBackend

logger = logging.getLogger(__name__)


class BackendValidationError(Exception):
    """Raised when a backend does not implement the StorageBackend protocol"""

    pass


def validate_backend_protocol(backend: object) -> None:
    """
    Validate that a backend implementation satisfies StorageBackend.

    Args:
        backend: The backend implementation to validate

    Raises:
        BackendValidationError: If validation fails

    Example:
        >>> from generic_dal.backends.memory import MemoryStorageBackend
        >>> validate_backend_protocol(MemoryStorageBackend(DataObject))
    """
    if not isinstance(backend, StorageBackend):
        logger.error(
            "Backend protocol validation failed",
            extra={"backend_type": type(backend).__name__},
        )
        raise BackendValidationError(
            f"Backend {type(backend).__name__} does not implement "
            "StorageBackend protocol. Missing or incorrect methods."
        )

    logger.debug(
        "Backend protocol validation passed",
        extra={"backend_type": type(backend).__name__},
    )


def ensure_backend_protocol(backend: Any) -> StorageBackend[Any]:
    """
    Validate and return a backend with proper type annotation.

    Raises:
        BackendValidationError: If validation fails
    """
    validate_backend_protocol(backend)
    return backend
