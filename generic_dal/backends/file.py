"""
Local file-based implementation of StorageBackend.

Each data object is serialized as one JSON document named after its id in
a base directory. Documents are written with pydantic's model_dump_json and
read back with model_validate_json, so any DataObject subclass round-trips
without extra mapping code.

Soft-deleted objects stay on disk with ``is_deleted`` set (their id and
timestamps remain available for audit) and are excluded from every read.
"""

import logging
import threading
from pathlib import Path
from typing import Generic, Iterator, List, Optional, Sequence, Type, TypeVar

from pydantic import ValidationError

from generic_dal.domain import DataObject

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DataObject)


class FileStorageBackend(Generic[T]):
    """
    A backend that stores data objects as JSON files on the local
    filesystem, one file per object.

    New ids are allocated as the highest id found on disk plus one, so ids
    are not reused while deleted documents remain. A new document is created
    exclusively, so several backends may share one directory.
    """

    def __init__(self, data_object_type: Type[T], base_path: str) -> None:
        """
        Initialize with the directory holding the documents.

        Args:
            data_object_type: Concrete DataObject subclass stored here
            base_path: Directory for the JSON documents, supports ~
                expansion and is created when missing
        """
        self.data_object_type = data_object_type
        self._base_path = Path(base_path).expanduser()
        self._base_path.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._last_id = self._highest_stored_id()

        logger.debug(
            f"Initialized FileStorageBackend with path: {self._base_path}",
            extra={
                "data_object_type": data_object_type.__name__,
                "last_id": self._last_id,
            },
        )

    def _get_document_path(self, entity_id: int) -> Path:
        """Returns the path to the document of a given id."""
        return self._base_path / f"{entity_id}.json"

    def _stored_ids(self) -> Iterator[int]:
        for document_path in self._base_path.glob("*.json"):
            try:
                yield int(document_path.stem)
            except ValueError:
                logger.debug(
                    f"Ignoring foreign file in storage: {document_path}"
                )

    def _highest_stored_id(self) -> int:
        return max(self._stored_ids(), default=0)

    def _read(self, document_path: Path) -> T:
        return self.data_object_type.model_validate_json(
            document_path.read_text(encoding="utf-8")
        )

    def _read_or_none(self, entity_id: int) -> Optional[T]:
        document_path = self._get_document_path(entity_id)
        if not document_path.exists():
            return None
        return self._read(document_path)

    def _write(self, entity: T, exclusive: bool = False) -> None:
        """Write the document of an object.

        With ``exclusive`` the document must not exist yet; FileExistsError
        is raised when another writer already claimed the id.
        """
        content = entity.model_dump_json(indent=2)
        document_path = self._get_document_path(entity.id)
        mode = "x" if exclusive else "w"
        with document_path.open(mode, encoding="utf-8") as f:
            f.write(content)

    def _create(self, entity: T) -> None:
        # Ids are claimed on disk, so writers sharing a directory never
        # hand out the same id
        while True:
            entity.id = max(self._last_id, self._highest_stored_id()) + 1
            try:
                self._write(entity, exclusive=True)
                return
            except FileExistsError:
                logger.debug(
                    "FileStorageBackend: Id already taken, retrying",
                    extra={"entity_id": entity.id},
                )

    def _read_all_undeleted(self) -> List[T]:
        data_objects = []
        for entity_id in sorted(self._stored_ids()):
            document_path = self._get_document_path(entity_id)
            try:
                data_object = self._read(document_path)
            except (OSError, ValidationError):
                logger.warning(
                    f"Could not read or parse document: {document_path}",
                    exc_info=True,
                )
                continue
            if not data_object.is_deleted:
                data_objects.append(data_object)
        return data_objects

    def fetch_by_id(self, entity_id: int) -> Optional[T]:
        with self._lock:
            data_object = self._read_or_none(entity_id)

        if data_object is None or data_object.is_deleted:
            logger.debug(
                "FileStorageBackend: Data object not found",
                extra={"entity_id": entity_id},
            )
            return None

        return data_object

    def fetch_by_ids(self, entity_ids: Sequence[int]) -> List[T]:
        data_objects = []
        with self._lock:
            for entity_id in dict.fromkeys(entity_ids):
                data_object = self._read_or_none(entity_id)
                if data_object is not None and not data_object.is_deleted:
                    data_objects.append(data_object)
        return data_objects

    def fetch_changed(self, watermark: int) -> List[T]:
        with self._lock:
            changed = [
                data_object
                for data_object in self._read_all_undeleted()
                if data_object.modified_timestamp > watermark
            ]

        logger.debug(
            "FileStorageBackend: Fetched changed data objects",
            extra={"watermark": watermark, "count": len(changed)},
        )

        return changed

    def fetch_all(self) -> List[T]:
        with self._lock:
            return self._read_all_undeleted()

    def persist_one(self, entity: T) -> None:
        # The caller's object only changes once its document is written
        stored = entity.model_copy()
        with self._lock:
            stored.update_timestamps()
            if stored.is_virtual:
                self._create(stored)
            else:
                self._write(stored)
            self._last_id = max(self._last_id, stored.id)

        entity.id = stored.id
        entity.created_timestamp = stored.created_timestamp
        entity.modified_timestamp = stored.modified_timestamp

        logger.debug(
            "FileStorageBackend: Data object persisted",
            extra={
                "entity_id": entity.id,
                "modified_timestamp": entity.modified_timestamp,
            },
        )

    def persist_many(self, entities: Sequence[T]) -> None:
        with self._lock:
            for entity in entities:
                self.persist_one(entity)

    def _mark_deleted(self, entity_id: int) -> None:
        data_object = self._read_or_none(entity_id)
        if data_object is None or data_object.is_deleted:
            return
        data_object.is_deleted = True
        self._write(data_object)

    def soft_delete_one(self, entity: T) -> None:
        """Mark the stored document deleted.

        Only the deletion marker is written; unsaved changes on ``entity``
        never reach the disk.
        """
        with self._lock:
            self._mark_deleted(entity.id)
        entity.is_deleted = True

    def soft_delete_many(self, entities: Sequence[T]) -> None:
        with self._lock:
            for entity in entities:
                self.soft_delete_one(entity)

    def soft_delete_by_ids(self, entity_ids: Sequence[int]) -> None:
        with self._lock:
            for entity_id in entity_ids:
                self._mark_deleted(entity_id)

    def clear_all(self) -> None:
        with self._lock:
            for entity_id in list(self._stored_ids()):
                self._get_document_path(entity_id).unlink(missing_ok=True)
            self._last_id = 0

        logger.info(f"Cleared file storage: {self._base_path}")

    def new_data_object(self) -> T:
        return self.data_object_type()
