"""Directory traversal and input list reading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


def read_path_list(list_file: str | Path) -> list[str]:
    """Read a newline-delimited list of paths, skipping blank lines.

    Raises ``OSError`` if *list_file* cannot be read.
    """
    text = Path(list_file).read_text(encoding="utf-8", errors="surrogateescape")
    return [line.strip() for line in text.splitlines() if line.strip()]


def iter_directory(root: str | Path, *, ignore_hidden: bool = False) -> Iterator[str]:
    """Yield every regular file under *root*, depth-first in name order.

    Subdirectories are descended into as they are encountered, so a
    directory's files and subtrees interleave by name.  Entries that are
    neither files nor directories (sockets, broken links) are ignored.
    Symlinked directories are followed once per real path.  Hidden
    entries (starting with ``"."``) are skipped when *ignore_hidden* is
    ``True``.
    """
    visited: set[str] = set()
    yield from _walk(str(root), visited, ignore_hidden)


def _walk(directory: str, visited: set[str], ignore_hidden: bool) -> Iterator[str]:
    real = os.path.realpath(directory)
    if real in visited:
        logger.debug("Already visited %s, not descending again", directory)
        return
    visited.add(real)

    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        logger.warning("Cannot list directory %s: %s", directory, exc)
        return

    for entry in entries:
        if ignore_hidden and entry.name.startswith("."):
            continue
        fp = os.path.join(directory, entry.name)
        try:
            is_dir = entry.is_dir()
            is_file = not is_dir and entry.is_file()
        except OSError:
            continue
        if is_dir:
            yield from _walk(fp, visited, ignore_hidden)
        elif is_file:
            yield fp
