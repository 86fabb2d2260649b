"""
Tests for the DataObject base model.

Design decisions documented:
- A new object is virtual (id 0, timestamps unset, not deleted)
- Any id <= 0 counts as virtual, including negative ids
- Equality is identity + version: (type, id, created, modified). Domain
  fields never take part, different subclasses never compare equal
- Hash follows the id so equal objects always hash equal
- update_timestamps sets the creation timestamp once and always refreshes
  the modification timestamp
"""

import pytest
from hypothesis import given, strategies as st

from generic_dal.domain import DataObject, current_timestamp
from .factories import Note, NoteFactory, Tag, TagFactory


class TestDataObjectDefaults:
    """Test the state of freshly created data objects."""

    def test_new_object_is_virtual(self) -> None:
        note = Note()

        assert note.id == 0
        assert note.created_timestamp == 0
        assert note.modified_timestamp == 0
        assert note.is_deleted is False
        assert note.is_virtual

    @pytest.mark.parametrize(
        "entity_id,expected_virtual",
        [
            (-5, True),
            (-1, True),
            (0, True),
            (1, False),
            (42, False),
        ],
    )
    def test_is_virtual(self, entity_id: int, expected_virtual: bool) -> None:
        assert NoteFactory(id=entity_id).is_virtual is expected_virtual

    def test_assignment_is_validated(self) -> None:
        note = NoteFactory()

        with pytest.raises(ValueError):
            note.id = "not-a-number"  # type: ignore[assignment]


class TestDataObjectEquality:
    """Test identity + version equality."""

    def test_same_instance_is_equal(self) -> None:
        note = NoteFactory(id=1, created_timestamp=1, modified_timestamp=1)
        assert note == note

    def test_equal_regardless_of_domain_fields(self) -> None:
        hello = Note(id=1, created_timestamp=1, modified_timestamp=1, name="HELLO")
        hello_again = Note(
            id=1, created_timestamp=1, modified_timestamp=1, name="HELLO"
        )
        world = Note(id=1, created_timestamp=1, modified_timestamp=1, name="WORLD")

        assert hello == hello_again
        assert hello == world
        assert hash(hello) == hash(world)

    def test_deleted_flag_does_not_affect_equality(self) -> None:
        active = Note(id=3, created_timestamp=5, modified_timestamp=9)
        deleted = Note(
            id=3, created_timestamp=5, modified_timestamp=9, is_deleted=True
        )

        assert active == deleted

    @pytest.mark.parametrize(
        "left,right",
        [
            # Same timestamps, different ids
            ((1, 1, 1), (2, 1, 1)),
            # Same id, different creation timestamp
            ((1, 1, 1), (1, 2, 1)),
            # Same id, different modification timestamp
            ((1, 1, 1), (1, 1, 2)),
        ],
    )
    def test_not_equal_when_identity_or_version_differs(
        self, left: tuple, right: tuple
    ) -> None:
        first = Note(
            id=left[0], created_timestamp=left[1], modified_timestamp=left[2]
        )
        second = Note(
            id=right[0], created_timestamp=right[1], modified_timestamp=right[2]
        )

        assert first != second

    def test_different_types_are_not_equal(self) -> None:
        note = Note(id=1, created_timestamp=1, modified_timestamp=1)
        tag = Tag(id=1, created_timestamp=1, modified_timestamp=1)

        assert note != tag
        assert tag != note

    def test_not_equal_to_none_or_other_objects(self) -> None:
        note = NoteFactory(id=1)

        assert note != None  # noqa: E711
        assert note != 1
        assert note != "note"

    def test_usable_in_sets(self) -> None:
        first = Note(id=7, created_timestamp=1, modified_timestamp=1, name="a")
        second = Note(id=7, created_timestamp=1, modified_timestamp=1, name="b")

        assert len({first, second}) == 1


class TestUpdateTimestamps:
    """Test the timestamp refresh performed right before persisting."""

    def test_fresh_object_gets_equal_timestamps(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            "generic_dal.domain.data_object.current_timestamp", lambda: 1000
        )
        note = NoteFactory()

        note.update_timestamps()

        assert note.created_timestamp == 1000
        assert note.modified_timestamp == 1000

    def test_existing_creation_timestamp_is_kept(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            "generic_dal.domain.data_object.current_timestamp", lambda: 5000
        )
        note = NoteFactory(id=1, created_timestamp=1000, modified_timestamp=1000)

        note.update_timestamps()

        assert note.created_timestamp == 1000
        assert note.modified_timestamp == 5000

    def test_uses_milliseconds_since_epoch(self) -> None:
        before = current_timestamp()
        note = NoteFactory()

        note.update_timestamps()

        assert before <= note.modified_timestamp <= current_timestamp()
        # Sanity check: later than 2020-01-01 in millis
        assert note.modified_timestamp > 1_577_836_800_000


# Property-based tests

identity = st.tuples(
    st.integers(min_value=-(2**31), max_value=2**31),
    st.integers(min_value=0, max_value=2**62),
    st.integers(min_value=0, max_value=2**62),
)


@given(identity=identity, first=st.text(), second=st.text())
def test_equality_ignores_domain_fields(
    identity: tuple, first: str, second: str
) -> None:
    entity_id, created, modified = identity
    left = Note(
        id=entity_id,
        created_timestamp=created,
        modified_timestamp=modified,
        name=first,
    )
    right = Note(
        id=entity_id,
        created_timestamp=created,
        modified_timestamp=modified,
        name=second,
    )

    assert left == right
    assert hash(left) == hash(right)


@given(identity=identity)
def test_subclasses_never_compare_equal(identity: tuple) -> None:
    entity_id, created, modified = identity

    note = Note(
        id=entity_id, created_timestamp=created, modified_timestamp=modified
    )
    tag = TagFactory(
        id=entity_id, created_timestamp=created, modified_timestamp=modified
    )
    base = DataObject(
        id=entity_id, created_timestamp=created, modified_timestamp=modified
    )

    assert note != tag
    assert note != base


@given(created=st.integers(max_value=2**40))
def test_update_timestamps_keeps_created_not_after_modified(
    created: int,
) -> None:
    note = Note(id=1, created_timestamp=created)

    note.update_timestamps()

    assert note.created_timestamp <= note.modified_timestamp
    if created >= 1:
        assert note.created_timestamp == created
    else:
        assert note.created_timestamp == note.modified_timestamp
