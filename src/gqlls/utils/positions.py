"""Conversions between character offsets, protocol positions and AST locations.

Positions are zero-based ``(line, character)`` pairs counted in Python
string characters. Offsets inside an operation unit are relative to the
unit's own text, which starts at the unit range start in the enclosing file.
"""

from graphql.language import Location
from lsprotocol import types as lsp


def line_offsets(text: str) -> list[int]:
    """Return the offset at which every line of ``text`` starts."""
    offsets = [0]
    for index, char in enumerate(text):
        if char == "\n":
            offsets.append(index + 1)
    return offsets


def offset_to_position(text: str, offset: int) -> lsp.Position:
    """Convert a character offset in ``text`` to a position."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return lsp.Position(line=line, character=offset - line_start)


def position_to_offset(text: str, position: lsp.Position) -> int:
    """Convert a position to a character offset in ``text``.

    Positions past the end of a line clamp to the line end, positions past
    the last line clamp to the end of the text.
    """
    starts = line_offsets(text)
    if position.line >= len(starts):
        return len(text)
    line_start = starts[position.line]
    next_start = starts[position.line + 1] - 1 if position.line + 1 < len(starts) else len(text)
    return min(line_start + position.character, next_start)


def shift_position(base: lsp.Position, local: lsp.Position) -> lsp.Position:
    """Translate a position local to a unit into file coordinates."""
    if local.line == 0:
        return lsp.Position(line=base.line, character=base.character + local.character)
    return lsp.Position(line=base.line + local.line, character=local.character)


def unshift_position(base: lsp.Position, position: lsp.Position) -> lsp.Position:
    """Translate a file position into coordinates local to a unit."""
    if position.line == base.line:
        return lsp.Position(line=0, character=max(0, position.character - base.character))
    return lsp.Position(line=position.line - base.line, character=position.character)


def offsets_to_range(
    text: str,
    start: int,
    end: int,
    base: lsp.Position | None = None,
) -> lsp.Range:
    """Build a range from offsets in ``text``, optionally shifted by ``base``."""
    start_pos = offset_to_position(text, start)
    end_pos = offset_to_position(text, end)
    if base is not None:
        start_pos = shift_position(base, start_pos)
        end_pos = shift_position(base, end_pos)
    return lsp.Range(start=start_pos, end=end_pos)


def location_to_range(loc: Location, base: lsp.Position | None = None) -> lsp.Range:
    """Convert a graphql-core AST location to a range.

    Args:
        loc: The node location; its source body is the unit text.
        base: Start of the unit inside its file, if the unit is embedded.

    Returns:
        The range covered by the node.
    """
    return offsets_to_range(loc.source.body, loc.start, loc.end, base)


def range_contains(rng: lsp.Range, position: lsp.Position) -> bool:
    """Check whether ``position`` lies within ``rng`` (both ends inclusive)."""
    start, end = rng.start, rng.end
    if (position.line, position.character) < (start.line, start.character):
        return False
    return (position.line, position.character) <= (end.line, end.character)
