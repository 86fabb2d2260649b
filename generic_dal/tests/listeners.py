"""
Recording listeners for repository tests.

Each listener remembers what it saw in its before and after steps so tests
can assert on the hook pipeline without touching repository internals.
Vetoing variants return False from their before steps.
"""

from typing import List, Optional, Sequence

from generic_dal.domain.tests.factories import Note
from generic_dal.listeners import (
    DeleteListener,
    GetListener,
    ReloadListener,
    SaveListener,
)


class RecordingGetListener(GetListener[Note]):
    def __init__(self) -> None:
        self.ids_before_get: List[int] = []
        self.before_get_many_calls: List[Optional[Sequence[int]]] = []
        self.received_after_get: List[Optional[Note]] = []

    def before_get(self, entity_id: int) -> int:
        self.ids_before_get.append(entity_id)
        return entity_id

    def before_get_many(
        self, entity_ids: Optional[Sequence[int]]
    ) -> Optional[Sequence[int]]:
        self.before_get_many_calls.append(entity_ids)
        if entity_ids is not None:
            self.ids_before_get.extend(entity_ids)
        return entity_ids

    def after_get(self, entity: Optional[Note]) -> None:
        self.received_after_get.append(entity)

    def after_get_many(self, entities: List[Note]) -> None:
        self.received_after_get.extend(entities)


class RecordingSaveListener(SaveListener[Note]):
    def __init__(self, allow: bool = True) -> None:
        self.allow = allow
        self.received_before_save: List[Note] = []
        self.received_after_save: List[Note] = []

    def before_save(self, entity: Note) -> bool:
        self.received_before_save.append(entity)
        return self.allow

    def before_save_many(self, entities: Sequence[Note]) -> bool:
        self.received_before_save.extend(entities)
        return self.allow

    def after_save(self, entity: Note) -> None:
        self.received_after_save.append(entity)

    def after_save_many(self, entities: Sequence[Note]) -> None:
        self.received_after_save.extend(entities)


class RecordingDeleteListener(DeleteListener[Note]):
    def __init__(self, allow: bool = True) -> None:
        self.allow = allow
        self.received_before_delete: List[Note] = []
        self.received_after_delete: List[Note] = []
        self.ids_before_delete: List[int] = []
        self.ids_after_delete: List[int] = []

    def before_delete(self, entity: Note) -> bool:
        self.received_before_delete.append(entity)
        return self.allow

    def before_delete_many(self, entities: Sequence[Note]) -> bool:
        self.received_before_delete.extend(entities)
        return self.allow

    def before_delete_ids(self, entity_ids: Sequence[int]) -> Sequence[int]:
        self.ids_before_delete.extend(entity_ids)
        return entity_ids

    def after_delete(self, entity: Note) -> None:
        self.received_after_delete.append(entity)

    def after_delete_many(self, entities: Sequence[Note]) -> None:
        self.received_after_delete.extend(entities)

    def after_delete_ids(self, entity_ids: Sequence[int]) -> None:
        self.ids_after_delete.extend(entity_ids)


class RecordingReloadListener(ReloadListener[Note]):
    def __init__(
        self, allow: bool = True, contribute: Sequence[Note] = ()
    ) -> None:
        self.allow = allow
        self.contribute = list(contribute)
        self.before_reload_calls = 0
        self.received_after_reload: List[Note] = []

    def before_reload(self, accumulator: List[Note]) -> bool:
        self.before_reload_calls += 1
        accumulator.extend(self.contribute)
        return self.allow

    def after_reload(self, entities: List[Note]) -> None:
        self.received_after_reload.extend(entities)
