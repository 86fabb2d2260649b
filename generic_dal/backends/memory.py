"""
Memory implementation of StorageBackend.

This module provides an in-memory implementation of the StorageBackend
protocol. Objects are kept in a dictionary keyed by id and stored by
reference, so the object handed to persist_one is the same instance later
returned by the fetch methods.

The implementation is ideal for testing scenarios where external
dependencies should be avoided, and as the reference behaviour for other
backends.
"""

import logging
import threading
from typing import Dict, Generic, List, Optional, Sequence, Type, TypeVar

from generic_dal.domain import DataObject

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DataObject)


class MemoryStorageBackend(Generic[T]):
    """
    Memory implementation of StorageBackend using a Python dictionary.

    Ids are handed out sequentially starting at 1. Soft-deleted objects are
    removed from the dictionary; the caller's instance keeps its id and
    timestamps.
    """

    def __init__(self, data_object_type: Type[T]) -> None:
        """Initialize backend with empty in-memory storage."""
        logger.debug(
            "Initializing MemoryStorageBackend",
            extra={"data_object_type": data_object_type.__name__},
        )

        self.data_object_type = data_object_type
        self._lock = threading.RLock()
        self._data_objects: Dict[int, T] = {}
        self._last_id = 0

    def fetch_by_id(self, entity_id: int) -> Optional[T]:
        with self._lock:
            data_object = self._data_objects.get(entity_id)

        if data_object is None or data_object.is_deleted:
            logger.debug(
                "MemoryStorageBackend: Data object not found",
                extra={"entity_id": entity_id},
            )
            return None

        return data_object

    def fetch_by_ids(self, entity_ids: Sequence[int]) -> List[T]:
        wanted = set(entity_ids)

        with self._lock:
            return [
                data_object
                for data_object in self._data_objects.values()
                if data_object.id in wanted and not data_object.is_deleted
            ]

    def fetch_changed(self, watermark: int) -> List[T]:
        with self._lock:
            changed = [
                data_object
                for data_object in self._data_objects.values()
                if not data_object.is_deleted
                and data_object.modified_timestamp > watermark
            ]

        logger.debug(
            "MemoryStorageBackend: Fetched changed data objects",
            extra={"watermark": watermark, "count": len(changed)},
        )

        return changed

    def fetch_all(self) -> List[T]:
        with self._lock:
            return [
                data_object
                for data_object in self._data_objects.values()
                if not data_object.is_deleted
            ]

    def persist_one(self, entity: T) -> None:
        with self._lock:
            if entity.is_virtual:
                self._last_id += 1
                entity.id = self._last_id
            else:
                # Keep generated ids clear of ids assigned elsewhere
                self._last_id = max(self._last_id, entity.id)

            entity.update_timestamps()
            self._data_objects[entity.id] = entity

        logger.debug(
            "MemoryStorageBackend: Data object persisted",
            extra={
                "entity_id": entity.id,
                "modified_timestamp": entity.modified_timestamp,
            },
        )

    def persist_many(self, entities: Sequence[T]) -> None:
        with self._lock:
            for entity in entities:
                self.persist_one(entity)

    def soft_delete_one(self, entity: T) -> None:
        with self._lock:
            entity.is_deleted = True
            self._data_objects.pop(entity.id, None)

    def soft_delete_many(self, entities: Sequence[T]) -> None:
        with self._lock:
            for entity in entities:
                self.soft_delete_one(entity)

    def soft_delete_by_ids(self, entity_ids: Sequence[int]) -> None:
        with self._lock:
            for entity_id in entity_ids:
                data_object = self._data_objects.pop(entity_id, None)
                if data_object is not None:
                    data_object.is_deleted = True

    def clear_all(self) -> None:
        with self._lock:
            self._data_objects.clear()
            self._last_id = 0

        logger.debug("MemoryStorageBackend: Storage cleared")

    def new_data_object(self) -> T:
        return self.data_object_type()
