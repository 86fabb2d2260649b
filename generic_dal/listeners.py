"""
Listener protocols for the repository hook pipeline.

Each operation family has its own listener kind with a "before" step that
may transform or veto the request and an "after" step that observes the
result:

- GetListener: before hooks remap ids (chained, no veto); after hooks
  observe the fetched object(s).
- SaveListener / DeleteListener: before hooks return False to veto the
  whole operation. Nothing is persisted and the remaining hooks are not
  called. DeleteListener.before_delete_ids is the exception: it transforms
  the id list and cannot veto.
- ReloadListener: before hooks may fill the accumulator and return False to
  stop the reload before the backend is touched.

Every method has a pass-through body, so a listener can subclass the
protocol and override only the steps it cares about.
"""

from typing import List, Optional, Protocol, Sequence, TypeVar, runtime_checkable

from generic_dal.domain import DataObject

T = TypeVar("T", bound=DataObject)


@runtime_checkable
class GetListener(Protocol[T]):
    """Hooks around get, get_many and get_all."""

    def before_get(self, entity_id: int) -> int:
        """Return the id that should actually be fetched."""
        return entity_id

    def before_get_many(
        self, entity_ids: Optional[Sequence[int]]
    ) -> Optional[Sequence[int]]:
        """Return the ids to fetch; None means "everything changed"."""
        return entity_ids

    def after_get(self, entity: Optional[T]) -> None:
        """Observe the fetched object, None when it was not found."""
        return None

    def after_get_many(self, entities: List[T]) -> None:
        """Observe the fetched objects."""
        return None


@runtime_checkable
class SaveListener(Protocol[T]):
    """Hooks around save and save_many."""

    def before_save(self, entity: T) -> bool:
        """Return False to veto saving the object."""
        return True

    def before_save_many(self, entities: Sequence[T]) -> bool:
        """Return False to veto saving the whole batch."""
        return True

    def after_save(self, entity: T) -> None:
        return None

    def after_save_many(self, entities: Sequence[T]) -> None:
        return None


@runtime_checkable
class DeleteListener(Protocol[T]):
    """Hooks around delete, delete_many and delete_ids."""

    def before_delete(self, entity: T) -> bool:
        """Return False to veto deleting the object."""
        return True

    def before_delete_many(self, entities: Sequence[T]) -> bool:
        """Return False to veto deleting the whole batch."""
        return True

    def before_delete_ids(self, entity_ids: Sequence[int]) -> Sequence[int]:
        """Return the ids that should actually be deleted.

        There is no veto here; returning an empty sequence deletes nothing.
        """
        return entity_ids

    def after_delete(self, entity: T) -> None:
        return None

    def after_delete_many(self, entities: Sequence[T]) -> None:
        return None

    def after_delete_ids(self, entity_ids: Sequence[int]) -> None:
        return None


@runtime_checkable
class ReloadListener(Protocol[T]):
    """Hooks around reload_all."""

    def before_reload(self, accumulator: List[T]) -> bool:
        """Return False to stop the reload.

        Objects appended to ``accumulator`` are part of the result either
        way.
        """
        return True

    def after_reload(self, entities: List[T]) -> None:
        return None
