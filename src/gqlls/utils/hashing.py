"""Fingerprints used to detect whether cache inputs changed."""

import hashlib
import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

_DIGEST_LENGTH = 16


def _digest(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]


def hash_value(value: Any) -> str:
    """Fingerprint a JSON-like value.

    Keys are sorted and unknown objects fall back to ``str`` so equal
    inputs always give equal fingerprints.

    Args:
        value: The value to fingerprint.

    Returns:
        A short hexadecimal digest, or ``"none"`` for None.
    """
    if value is None:
        return "none"
    return _digest(json.dumps(value, sort_keys=True, default=str))


def hash_text(text: str) -> str:
    """Fingerprint raw text such as generated SDL."""
    return _digest(text)


def hash_files(paths: Iterable[Path]) -> str:
    """Fingerprint a set of files by path, modification time and size.

    The files are not read, so an edit that keeps both the mtime and the
    size is not detected.

    Raises:
        OSError: If a file cannot be stat'ed.
    """
    entries = []
    for path in paths:
        stat = path.stat()
        entries.append((str(path), stat.st_mtime_ns, stat.st_size))
    return hash_value(entries)
