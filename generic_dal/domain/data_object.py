"""
Base data object for every entity handled by the data access layer.

A DataObject carries only the bookkeeping shared by all persistable
entities: an integer identity, creation and modification timestamps and a
soft-delete marker. Concrete entities subclass it and add their own fields.

Design decisions documented:
- An id <= 0 is "virtual": the object has not been persisted yet. A
  negative id additionally marks an object that should be deleted without
  ever being persisted.
- Timestamps are integer milliseconds since the epoch.
- Equality only looks at (concrete type, id, created_timestamp,
  modified_timestamp). Domain fields never take part, so two snapshots of
  the same entity version compare equal regardless of their content.
"""

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Lowest representable watermark, used before anything has been read
MIN_TIMESTAMP = -(2**63)


def current_timestamp() -> int:
    """Return the current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class DataObject(BaseModel):
    """Persistable entity with identity, timestamps and soft-delete flag."""

    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(
        default=0, description="Identity; values <= 0 are not persisted yet"
    )
    created_timestamp: int = Field(
        default=0, description="Millis at first persistence"
    )
    modified_timestamp: int = Field(
        default=0, description="Millis at the latest persistence"
    )
    is_deleted: bool = Field(default=False, description="Soft-delete marker")

    @property
    def is_virtual(self) -> bool:
        """True when the object has not been persisted yet."""
        return self.id <= 0

    def update_timestamps(self) -> None:
        """Refresh the timestamps right before the object is persisted.

        The creation timestamp is only set when it is still unset, so a
        freshly created object ends up with equal creation and modification
        timestamps.
        """
        now = current_timestamp()

        if self.created_timestamp < 1:
            self.created_timestamp = now

        self.modified_timestamp = now

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, DataObject):
            return NotImplemented
        if type(self) is not type(other):
            return False
        return (
            self.id == other.id
            and self.created_timestamp == other.created_timestamp
            and self.modified_timestamp == other.modified_timestamp
        )

    def __hash__(self) -> int:
        return hash(self.id)
