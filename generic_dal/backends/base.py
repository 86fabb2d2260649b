"""
Storage backend protocol for the generic repository.

This module defines the StorageBackend protocol that every storage medium
(in-memory map, file serialization, relational store, ...) implements. The
GenericRepository depends only on this protocol; hook dispatch, argument
validation and error funneling stay out of the backends.

All operations may raise. The repository wraps whatever they raise into a
RepositoryError, so backends should simply let failures propagate.

Backends that are shared between threads provide their own locking around
the underlying store.
"""

from typing import List, Optional, Protocol, Sequence, TypeVar, runtime_checkable

from generic_dal.domain import DataObject

T = TypeVar("T", bound=DataObject)


@runtime_checkable
class StorageBackend(Protocol[T]):
    """Protocol for the storage operations behind a GenericRepository.

    Type Parameter:
        T: The data object type (must extend DataObject)
    """

    def fetch_by_id(self, entity_id: int) -> Optional[T]:
        """Retrieve an undeleted object by id.

        Returns:
            The object if found, None otherwise. Not found is a normal
            outcome, not an error.
        """
        ...

    def fetch_by_ids(self, entity_ids: Sequence[int]) -> List[T]:
        """Retrieve undeleted objects by id.

        Ids that are not found are simply omitted from the result.
        """
        ...

    def fetch_changed(self, watermark: int) -> List[T]:
        """Retrieve undeleted objects modified after ``watermark``.

        Implementation Notes:
        - Must exclude soft-deleted objects
        - Must exclude objects with modified_timestamp <= watermark
        - Advancing the watermark is the repository's job
        """
        ...

    def fetch_all(self) -> List[T]:
        """Retrieve every undeleted object, ignoring any watermark."""
        ...

    def persist_one(self, entity: T) -> None:
        """Persist an object.

        Implementation Notes:
        - Virtual objects (id <= 0) get a new positive id
        - Must call entity.update_timestamps() right before persisting
        - The caller's object is updated in place (id, timestamps)
        """
        ...

    def persist_many(self, entities: Sequence[T]) -> None:
        """Persist several objects, same rules as persist_one."""
        ...

    def soft_delete_one(self, entity: T) -> None:
        """Mark an object deleted and drop it from the active index."""
        ...

    def soft_delete_many(self, entities: Sequence[T]) -> None:
        """Mark several objects deleted."""
        ...

    def soft_delete_by_ids(self, entity_ids: Sequence[int]) -> None:
        """Mark the objects with the given ids deleted.

        Unknown ids are ignored.
        """
        ...

    def clear_all(self) -> None:
        """Wipe the underlying storage."""
        ...

    def new_data_object(self) -> T:
        """Construct a fresh virtual object of the managed type."""
        ...
