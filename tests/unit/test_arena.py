"""Unit tests for ObjectArena storage and index stability."""

import pytest

from infopt.errors import ObjectNotFoundError
from infopt.indices import ObjectIndex, ObjectKind
from infopt.util.arena import ObjectArena


@pytest.fixture
def arena():
    return ObjectArena(ObjectKind.MEASURE)


@pytest.mark.unit
def test_insert_returns_monotonic_indices_starting_at_one(arena):
    """Slots are numbered 1, 2, 3 in insertion order"""
    # Act
    indices = [arena.insert(name) for name in ("a", "b", "c")]

    # Assert
    assert [index.value for index in indices] == [1, 2, 3]
    assert all(index.kind is ObjectKind.MEASURE for index in indices)


@pytest.mark.unit
def test_deleted_slot_is_never_reused(arena):
    """A retired slot stays retired and new inserts get fresh values"""
    # Arrange
    first = arena.insert("a")
    arena.insert("b")

    # Act
    arena.delete(first)
    third = arena.insert("c")

    # Assert
    assert third.value == 3
    assert first not in arena
    assert len(arena) == 2


@pytest.mark.unit
def test_get_on_deleted_index_raises(arena):
    """Looking up a deleted index raises ObjectNotFoundError"""
    index = arena.insert("a")
    arena.delete(index)

    with pytest.raises(ObjectNotFoundError):
        arena.get(index)
    with pytest.raises(ObjectNotFoundError):
        arena.delete(index)


@pytest.mark.unit
def test_never_issued_index_raises(arena):
    """An index past the counter does not exist"""
    with pytest.raises(ObjectNotFoundError, match="never created"):
        arena[ObjectIndex(ObjectKind.MEASURE, 42)]


@pytest.mark.unit
def test_object_not_found_is_a_key_error(arena):
    """ObjectNotFoundError can be caught as KeyError"""
    with pytest.raises(KeyError):
        arena.get(ObjectIndex(ObjectKind.MEASURE, 7))


@pytest.mark.unit
def test_iteration_is_ascending_and_restartable(arena):
    """items() yields live entries in index order on every pass"""
    # Arrange
    a = arena.insert("a")
    b = arena.insert("b")
    c = arena.insert("c")
    arena.delete(b)

    # Act & Assert
    assert list(arena.items()) == [(a, "a"), (c, "c")]
    assert list(arena.items()) == [(a, "a"), (c, "c")]
    assert list(arena.values()) == ["a", "c"]
    assert arena.indices() == [a, c]


@pytest.mark.unit
def test_delete_during_iteration_is_safe(arena):
    """Iteration works on a snapshot of the live slots"""
    for name in "abcd":
        arena.insert(name)

    for index in arena:
        arena.delete(index)

    assert len(arena) == 0


@pytest.mark.unit
def test_contains_rejects_foreign_kinds_and_types(arena):
    """Membership is False for other kinds and non-index values"""
    index = arena.insert("a")

    assert index in arena
    assert ObjectIndex(ObjectKind.CONSTRAINT, index.value) not in arena
    assert "a" not in arena
    assert 1 not in arena


@pytest.mark.unit
def test_next_index_predicts_insert(arena):
    """next_index matches the index the next insert returns"""
    arena.insert("a")
    expected = arena.next_index

    assert arena.insert("b") == expected
