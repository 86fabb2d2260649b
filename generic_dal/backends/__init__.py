"""
Storage backends for the generic data access layer.

This module exports the StorageBackend protocol and the shipped
implementations. Factory functions live in ``generic_dal.backends.factory``.
"""

from .base import StorageBackend
from .file import FileStorageBackend
from .memory import MemoryStorageBackend

__all__ = [
    "StorageBackend",
    "FileStorageBackend",
    "MemoryStorageBackend",
]
