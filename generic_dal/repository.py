"""
Generic repository: the orchestrator between callers and a storage backend.

GenericRepository offers one CRUD interface for any StorageBackend. Around
each backend call it:

- validates arguments (ArgumentError, raised directly),
- threads the request through the registered listeners, which may remap
  ids, veto saves and deletes, or observe results,
- funnels every backend or listener failure into a RepositoryError that
  carries the original exception,
- handles virtual (not yet persisted) objects on delete,
- tracks the modification watermark behind the incremental get_all.

Listener registries are insertion ordered: listeners run in the order they
were registered, and registering the same listener twice has no effect.
Registry access is synchronized; dispatch iterates a snapshot taken when
the hook phase starts.
"""

import logging
import threading
from contextlib import contextmanager
from typing import (
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Sequence,
    Type,
    TypeVar,
)

from generic_dal.backends.base import StorageBackend
from generic_dal.domain import MIN_TIMESTAMP, DataObject
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
from generic_dal.validation import ensure_backend_protocol

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DataObject)
L = TypeVar("L")


class GenericRepository(Generic[T]):
    """
    Repository for one DataObject type on top of a StorageBackend.

    Type Parameter:
        T: The data object type (must extend DataObject)
    """

    def __init__(
        self,
        backend: StorageBackend[T],
        data_object_type: Type[T],
        error_observer: Optional[ErrorObserver] = None,
    ) -> None:
        """
        Args:
            backend: Storage backend doing the actual persistence
            data_object_type: Concrete type managed by this repository,
                used to check the loosely typed entry points
            error_observer: Optional diagnostics hook receiving every
                RepositoryError this repository creates
        """
        if data_object_type is None:
            raise ArgumentError("data_object_type")

        self.backend: StorageBackend[T] = ensure_backend_protocol(backend)
        self.data_object_type = data_object_type
        self.error_observer = error_observer

        self._latest_modification_timestamp = MIN_TIMESTAMP

        self._listener_lock = threading.RLock()
        self._get_listeners: Dict[GetListener[T], None] = {}
        self._save_listeners: Dict[SaveListener[T], None] = {}
        self._delete_listeners: Dict[DeleteListener[T], None] = {}
        self._reload_listeners: Dict[ReloadListener[T], None] = {}

        logger.debug(
            "Initializing GenericRepository",
            extra={
                "data_object_type": data_object_type.__name__,
                "backend_type": type(backend).__name__,
            },
        )

    # --- Watermark ---

    @property
    def latest_modification_timestamp(self) -> int:
        """Highest modified_timestamp seen by the latest incremental read."""
        return self._latest_modification_timestamp

    def _reset_latest_modification_timestamp(self) -> None:
        self._latest_modification_timestamp = MIN_TIMESTAMP

    def _update_latest_modification_timestamp(
        self, data_objects: Sequence[T]
    ) -> None:
        for data_object in data_objects:
            if data_object.modified_timestamp > (
                self._latest_modification_timestamp
            ):
                self._latest_modification_timestamp = (
                    data_object.modified_timestamp
                )

    # --- Error funneling ---

    def _create_error(
        self, operation: str, cause: BaseException
    ) -> RepositoryError:
        error = RepositoryError(operation, cause)

        logger.debug(
            "Repository operation failed",
            extra={
                "operation": operation,
                "data_object_type": self.data_object_type.__name__,
                "cause_type": type(cause).__name__,
            },
        )

        if self.error_observer is not None:
            try:
                self.error_observer.on_error_created(error)
            except Exception as e:
                observer_error = ObserverError(
                    f"Error observer {type(self.error_observer).__name__} "
                    f"failed: {e}"
                )
                observer_error.__cause__ = e
                logger.error(
                    str(observer_error),
                    exc_info=observer_error,
                    extra={"operation": operation},
                )

        return error

    @contextmanager
    def _funnel_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except RepositoryError:
            raise
        except Exception as e:
            raise self._create_error(operation, e) from e

    # --- Listener registries ---

    def _register(self, registry: Dict[L, None], listener: L) -> None:
        if listener is None:
            raise ArgumentError("listener")
        with self._listener_lock:
            registry[listener] = None

    def _unregister(self, registry: Dict[L, None], listener: L) -> None:
        if listener is None:
            raise ArgumentError("listener")
        with self._listener_lock:
            registry.pop(listener, None)

    def _snapshot(self, registry: Dict[L, None]) -> List[L]:
        with self._listener_lock:
            return list(registry)

    def register_get_listener(self, listener: GetListener[T]) -> None:
        self._register(self._get_listeners, listener)

    def unregister_get_listener(self, listener: GetListener[T]) -> None:
        self._unregister(self._get_listeners, listener)

    def get_listeners(self) -> List[GetListener[T]]:
        """Return a copy of the registered get listeners."""
        return self._snapshot(self._get_listeners)

    def register_save_listener(self, listener: SaveListener[T]) -> None:
        self._register(self._save_listeners, listener)

    def unregister_save_listener(self, listener: SaveListener[T]) -> None:
        self._unregister(self._save_listeners, listener)

    def save_listeners(self) -> List[SaveListener[T]]:
        """Return a copy of the registered save listeners."""
        return self._snapshot(self._save_listeners)

    def register_delete_listener(self, listener: DeleteListener[T]) -> None:
        self._register(self._delete_listeners, listener)

    def unregister_delete_listener(
        self, listener: DeleteListener[T]
    ) -> None:
        self._unregister(self._delete_listeners, listener)

    def delete_listeners(self) -> List[DeleteListener[T]]:
        """Return a copy of the registered delete listeners."""
        return self._snapshot(self._delete_listeners)

    def register_reload_listener(self, listener: ReloadListener[T]) -> None:
        self._register(self._reload_listeners, listener)

    def unregister_reload_listener(
        self, listener: ReloadListener[T]
    ) -> None:
        self._unregister(self._reload_listeners, listener)

    def reload_listeners(self) -> List[ReloadListener[T]]:
        """Return a copy of the registered reload listeners."""
        return self._snapshot(self._reload_listeners)

    # --- Reads ---

    def get(self, entity_id: int) -> Optional[T]:
        """Retrieve a data object by id.

        Args:
            entity_id: Id to look up; get listeners may remap it

        Returns:
            The data object if found, None otherwise

        Raises:
            RepositoryError: If the backend or a listener fails
        """
        with self._funnel_errors("get"):
            listeners = self.get_listeners()

            actual_id = entity_id
            for listener in listeners:
                actual_id = listener.before_get(actual_id)

            data_object = self.backend.fetch_by_id(actual_id)

            for listener in listeners:
                listener.after_get(data_object)

            logger.debug(
                "Data object retrieved",
                extra={
                    "requested_id": entity_id,
                    "actual_id": actual_id,
                    "found": data_object is not None,
                },
            )

            return data_object

    def get_many(self, entity_ids: Sequence[int]) -> List[T]:
        """Retrieve several data objects by id.

        Ids that are not found are absent from the result.

        Raises:
            ArgumentError: If entity_ids is None
            RepositoryError: If the backend or a listener fails
        """
        if entity_ids is None:
            raise ArgumentError("entity_ids")

        return self._get_many(entity_ids, "get_many")

    def get_all(self) -> List[T]:
        """Retrieve every undeleted data object changed since the last call.

        The first call (or the first after clear/reload_all) returns all
        undeleted objects; later calls only return objects modified since
        the previous incremental read.
        """
        return self._get_many(None, "get_all")

    def _get_many(
        self, entity_ids: Optional[Sequence[int]], operation: str
    ) -> List[T]:
        with self._funnel_errors(operation):
            listeners = self.get_listeners()

            actual_ids = entity_ids
            for listener in listeners:
                actual_ids = listener.before_get_many(actual_ids)

            if actual_ids is None:
                data_objects = list(
                    self.backend.fetch_changed(
                        self._latest_modification_timestamp
                    )
                )
                self._update_latest_modification_timestamp(data_objects)
            else:
                data_objects = list(self.backend.fetch_by_ids(actual_ids))

            for listener in listeners:
                listener.after_get_many(data_objects)

            logger.debug(
                "Data objects retrieved",
                extra={
                    "operation": operation,
                    "count": len(data_objects),
                    "watermark": self._latest_modification_timestamp,
                },
            )

            return data_objects

    def reload_all(self) -> List[T]:
        """Fully resynchronize: return every undeleted data object.

        Reload listeners may contribute objects and veto the reload, in
        which case whatever they accumulated is returned without touching
        the backend. Otherwise the watermark is reset.
        """
        with self._funnel_errors("reload_all"):
            listeners = self.reload_listeners()
            data_objects: List[T] = []

            for listener in listeners:
                if not listener.before_reload(data_objects):
                    logger.debug(
                        "Reload vetoed by listener",
                        extra={
                            "listener_type": type(listener).__name__,
                            "count": len(data_objects),
                        },
                    )
                    return data_objects

            self._reset_latest_modification_timestamp()
            data_objects.extend(self.backend.fetch_all())

            for listener in listeners:
                listener.after_reload(data_objects)

            logger.info(
                "Data objects reloaded",
                extra={
                    "data_object_type": self.data_object_type.__name__,
                    "count": len(data_objects),
                },
            )

            return data_objects

    # --- Saves ---

    def save(self, data_object: T) -> None:
        """Save a data object.

        Virtual objects get an id assigned; every save refreshes the
        modification timestamp. A vetoing save listener makes this a silent
        no-op.

        Raises:
            ArgumentError: If data_object is None
            RepositoryError: If the backend or a listener fails
        """
        if data_object is None:
            raise ArgumentError("data_object")

        with self._funnel_errors("save"):
            listeners = self.save_listeners()

            for listener in listeners:
                if not listener.before_save(data_object):
                    logger.debug(
                        "Save vetoed by listener",
                        extra={
                            "entity_id": data_object.id,
                            "listener_type": type(listener).__name__,
                        },
                    )
                    return

            self.backend.persist_one(data_object)

            for listener in listeners:
                listener.after_save(data_object)

        logger.info(
            "Data object saved",
            extra={
                "entity_id": data_object.id,
                "modified_timestamp": data_object.modified_timestamp,
            },
        )

    def save_many(self, data_objects: Sequence[T]) -> None:
        """Save several data objects as one batch.

        Raises:
            ArgumentError: If data_objects is None
            RepositoryError: If the backend or a listener fails
        """
        if data_objects is None:
            raise ArgumentError("data_objects")

        with self._funnel_errors("save_many"):
            listeners = self.save_listeners()

            for listener in listeners:
                if not listener.before_save_many(data_objects):
                    logger.debug(
                        "Batch save vetoed by listener",
                        extra={
                            "count": len(data_objects),
                            "listener_type": type(listener).__name__,
                        },
                    )
                    return

            self.backend.persist_many(data_objects)

            for listener in listeners:
                listener.after_save_many(data_objects)

        logger.info(
            "Data objects saved", extra={"count": len(data_objects)}
        )

    def save_object(self, data_object: object) -> None:
        """Loosely typed save: checks the runtime type before saving.

        Raises:
            ArgumentError: If data_object is None or not an instance of the
                managed type
        """
        self.save(self._check_type(data_object, "data_object"))

    def save_objects(self, data_objects: Sequence[object]) -> None:
        """Loosely typed save_many: checks every element's runtime type."""
        self.save_many(self._check_types(data_objects))

    # --- Deletes ---

    def delete(self, data_object: T) -> None:
        """Soft-delete a data object.

        A virtual object (id <= 0) never reaches the backend, but it is
        still marked deleted and delete listeners still run.

        Raises:
            ArgumentError: If data_object is None
            RepositoryError: If the backend or a listener fails
        """
        if data_object is None:
            raise ArgumentError("data_object")

        with self._funnel_errors("delete"):
            listeners = self.delete_listeners()

            for listener in listeners:
                if not listener.before_delete(data_object):
                    logger.debug(
                        "Delete vetoed by listener",
                        extra={
                            "entity_id": data_object.id,
                            "listener_type": type(listener).__name__,
                        },
                    )
                    return

            if data_object.is_virtual:
                data_object.is_deleted = True
            else:
                self.backend.soft_delete_one(data_object)

            for listener in listeners:
                listener.after_delete(data_object)

        logger.info(
            "Data object deleted",
            extra={
                "entity_id": data_object.id,
                "virtual": data_object.is_virtual,
            },
        )

    def delete_many(self, data_objects: Sequence[T]) -> None:
        """Soft-delete several data objects as one batch.

        Virtual members are only marked deleted locally.

        Raises:
            ArgumentError: If data_objects is None
            RepositoryError: If the backend or a listener fails
        """
        if data_objects is None:
            raise ArgumentError("data_objects")

        with self._funnel_errors("delete_many"):
            listeners = self.delete_listeners()

            for listener in listeners:
                if not listener.before_delete_many(data_objects):
                    logger.debug(
                        "Batch delete vetoed by listener",
                        extra={
                            "count": len(data_objects),
                            "listener_type": type(listener).__name__,
                        },
                    )
                    return

            persisted = []
            for data_object in data_objects:
                if data_object.is_virtual:
                    data_object.is_deleted = True
                else:
                    persisted.append(data_object)

            if persisted:
                self.backend.soft_delete_many(persisted)

            for listener in listeners:
                listener.after_delete_many(data_objects)

        logger.info(
            "Data objects deleted", extra={"count": len(data_objects)}
        )

    def delete_ids(self, entity_ids: Sequence[int]) -> None:
        """Soft-delete data objects by id.

        Delete listeners may rewrite the id list but cannot veto; an empty
        list deletes nothing.

        Raises:
            ArgumentError: If entity_ids is None
            RepositoryError: If the backend or a listener fails
        """
        if entity_ids is None:
            raise ArgumentError("entity_ids")

        with self._funnel_errors("delete_ids"):
            listeners = self.delete_listeners()

            ids_to_delete = entity_ids
            for listener in listeners:
                ids_to_delete = listener.before_delete_ids(ids_to_delete)

            ids_to_delete = list(ids_to_delete)
            self.backend.soft_delete_by_ids(ids_to_delete)

            for listener in listeners:
                listener.after_delete_ids(ids_to_delete)

        logger.info(
            "Data objects deleted by id",
            extra={"requested": len(entity_ids), "deleted": len(ids_to_delete)},
        )

    def delete_object(self, data_object: object) -> None:
        """Loosely typed delete: checks the runtime type before deleting."""
        self.delete(self._check_type(data_object, "data_object"))

    def delete_objects(self, data_objects: Sequence[object]) -> None:
        """Loosely typed delete_many: checks every element's runtime type."""
        self.delete_many(self._check_types(data_objects))

    # --- Storage management ---

    def clear(self) -> None:
        """Wipe the backend storage and reset the watermark.

        There is no listener kind for clear.
        """
        with self._funnel_errors("clear"):
            self.backend.clear_all()

        self._reset_latest_modification_timestamp()

        logger.info(
            "Repository cleared",
            extra={"data_object_type": self.data_object_type.__name__},
        )

    def create_data_object(self) -> T:
        """Create a new virtual data object of the managed type."""
        with self._funnel_errors("create_data_object"):
            return self.backend.new_data_object()

    # --- Type checks for the loosely typed entry points ---

    def _check_type(self, data_object: object, argument: str) -> T:
        if data_object is None:
            raise ArgumentError(argument)
        if not isinstance(data_object, self.data_object_type):
            raise ArgumentError(
                argument,
                f"must be an instance of {self.data_object_type.__name__}, "
                f"got {type(data_object).__name__}",
            )
        return data_object

    def _check_types(self, data_objects: Sequence[object]) -> List[T]:
        if data_objects is None:
            raise ArgumentError("data_objects")
        return [
            self._check_type(data_object, "data_objects")
            for data_object in data_objects
        ]
