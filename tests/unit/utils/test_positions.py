"""Tests for position conversion utilities."""

from lsprotocol import types as lsp

from gqlls.utils.positions import (
    offset_to_position,
    offsets_to_range,
    position_to_offset,
    range_contains,
    shift_position,
    unshift_position,
)

TEXT = "type Query {\n  foo: Foo\n}\n"


def pos(line: int, character: int) -> lsp.Position:
    return lsp.Position(line=line, character=character)


class TestOffsets:
    """Tests for offset <-> position conversion."""

    def test_offset_to_position(self) -> None:
        """Test offsets map to zero-based line and character."""
        assert offset_to_position(TEXT, 0) == pos(0, 0)
        assert offset_to_position(TEXT, 15) == pos(1, 2)

    def test_position_to_offset(self) -> None:
        """Test positions map back to offsets."""
        assert position_to_offset(TEXT, pos(1, 2)) == 15

    def test_position_to_offset_clamps(self) -> None:
        """Test positions past a line end or the text end are clamped."""
        assert position_to_offset(TEXT, pos(0, 99)) == 12
        assert position_to_offset(TEXT, pos(99, 0)) == len(TEXT)

    def test_offsets_to_range_with_base(self) -> None:
        """Test ranges of an embedded unit are shifted into file coordinates."""
        rng = offsets_to_range("query { a }", 8, 9, base=pos(3, 10))
        assert rng.start == pos(3, 18)
        assert rng.end == pos(3, 19)


class TestShifting:
    """Tests for unit-local coordinates."""

    def test_shift_first_line_adds_character(self) -> None:
        """Test the first unit line is offset by the unit's start column."""
        assert shift_position(pos(2, 5), pos(0, 3)) == pos(2, 8)

    def test_shift_later_lines_keep_character(self) -> None:
        """Test later unit lines keep their own column."""
        assert shift_position(pos(2, 5), pos(1, 3)) == pos(3, 3)

    def test_unshift_inverts_shift(self) -> None:
        """Test unshift_position undoes shift_position."""
        base = pos(4, 7)
        for local in (pos(0, 0), pos(0, 9), pos(2, 1)):
            assert unshift_position(base, shift_position(base, local)) == local


class TestRangeContains:
    """Tests for range containment."""

    def test_inclusive_ends(self) -> None:
        """Test both range ends count as inside."""
        rng = lsp.Range(start=pos(1, 2), end=pos(1, 6))
        assert range_contains(rng, pos(1, 2))
        assert range_contains(rng, pos(1, 6))
        assert not range_contains(rng, pos(1, 7))
        assert not range_contains(rng, pos(0, 4))
