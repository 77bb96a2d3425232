"""Glob matching for schema pointers and documents patterns.

Patterns follow the graphql-config conventions: paths are relative to
the project root, ``**`` spans directories, ``{a,b}`` alternates and a
``**`` glued to other characters (``**.graphql``) behaves like
``**/*.graphql``. Patterns are compiled to root-anchored pathspec
``gitwildmatch`` specs, so a leading ``!`` excludes files.
"""

import os
import re
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path

from pathspec import PathSpec

_BRACES = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternations into separate patterns.

    Args:
        pattern: A glob pattern.

    Returns:
        The list of patterns without brace alternations.
    """
    match = _BRACES.search(pattern)
    if match is None:
        return [pattern]

    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def normalize_pattern(pattern: str) -> str:
    """Normalize a pattern relative to the project root."""
    pattern = pattern.replace("\\", "/")
    while pattern.startswith("./"):
        pattern = pattern[2:]

    parts = []
    for part in pattern.split("/"):
        if "**" in part and part != "**":
            # "**.graphql" -> "**/*.graphql"
            rest = part.replace("**", "*")
            parts.extend(["**", rest])
        else:
            parts.append(part)
    return "/".join(parts)


def _spec_lines(pattern: str) -> Iterator[str]:
    negated = pattern.startswith("!")
    if negated:
        pattern = pattern[1:]
    for expanded in expand_braces(pattern):
        normalized = normalize_pattern(expanded)
        if not normalized:
            continue
        # Anchor at the project root; gitwildmatch would otherwise match a
        # slash-free pattern at any depth.
        yield f"{'!' if negated else ''}/{normalized}"


@lru_cache(maxsize=256)
def compile_patterns(patterns: tuple[str, ...]) -> PathSpec:
    """Build a PathSpec from project glob patterns.

    Args:
        patterns: Glob patterns relative to the project root. A leading
            ``!`` excludes what earlier patterns matched.

    Returns:
        The compiled spec.
    """
    lines = [line for pattern in patterns for line in _spec_lines(pattern)]
    return PathSpec.from_lines("gitwildmatch", lines)


def matches(relative_path: str, patterns: Iterable[str]) -> bool:
    """Check whether a root-relative path matches any of the patterns.

    Args:
        relative_path: Path relative to the project root, ``/`` separated.
        patterns: Glob patterns.

    Returns:
        True if one of the patterns matches.
    """
    return compile_patterns(tuple(patterns)).match_file(relative_path.replace("\\", "/"))


def relative_to(path: Path, root: Path) -> str | None:
    """Return ``path`` relative to ``root`` or None if outside of it."""
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return None


def iter_matching_files(
    root: Path,
    patterns: Iterable[str],
    ignored_dirs: Iterable[str] = (),
) -> Iterator[Path]:
    """Enumerate files under ``root`` matching the patterns.

    Files are yielded in sorted path order so that every consumer sees the
    same enumeration on every platform.

    Args:
        root: The project root directory.
        patterns: Glob patterns relative to ``root``.
        ignored_dirs: Directory names that are never descended into.

    Yields:
        Absolute paths of matching files.
    """
    patterns = tuple(patterns)
    if not patterns:
        return
    spec = compile_patterns(patterns)
    skipped = set(ignored_dirs)
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [name for name in dirnames if name not in skipped]
        for filename in filenames:
            path = Path(dirpath) / filename
            relative = path.relative_to(root).as_posix()
            if spec.match_file(relative):
                found.append(path)
    yield from sorted(found)
