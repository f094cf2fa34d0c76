"""Append-only progress ledger.

One path per line.  A path present in the ledger has reached its terminal
state in some earlier run and is never processed again.  Backslash, CR and
LF inside a path are written as ``\\\\``, ``\\r`` and ``\\n`` so that every
entry stays on one line; undecodable file-name bytes round-trip through
``surrogateescape``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol, TextIO

_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r"}


class Ledger(Protocol):
    def seen(self, path: str) -> bool: ...

    def mark_done(self, path: str) -> None: ...


def escape_line(path: str) -> str:
    """Encode *path* as a single line."""
    return "".join(_ESCAPES.get(ch, ch) for ch in path)


def unescape_line(line: str) -> str:
    """Inverse of :func:`escape_line`.  Unknown escapes are kept as-is."""
    out: list[str] = []
    chars = iter(line)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, "")
        out.append(_UNESCAPES.get(nxt, "\\" + nxt))
    return "".join(out)


def open_line_log(path: Path) -> TextIO:
    """Open *path* for appending, starting a fresh line if the last one is torn."""
    needs_newline = False
    if path.exists() and path.stat().st_size > 0:
        with path.open("rb") as f:
            f.seek(-1, os.SEEK_END)
            needs_newline = f.read(1) != b"\n"
    fh = path.open("a", encoding="utf-8", errors="surrogateescape", newline="\n")
    if needs_newline:
        fh.write("\n")
        fh.flush()
    return fh


class FileLedger:
    """Progress ledger backed by an append-only text file."""

    def __init__(self, path: str | Path = "progress.log") -> None:
        self._path = Path(path).expanduser()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._done: set[str] = set()
        if self._path.exists():
            with self._path.open(
                "r", encoding="utf-8", errors="surrogateescape", newline="\n"
            ) as f:
                self._done = {unescape_line(line.rstrip("\n")) for line in f}
            self._done.discard("")
        self._fh = open_line_log(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def seen(self, path: str) -> bool:
        """Exact whole-line membership test."""
        return path in self._done

    def mark_done(self, path: str) -> None:
        """Append *path* and force it to disk."""
        self._fh.write(f"{escape_line(path)}\n")
        self._fh.flush()
        os.fsync(self._fh.fileno())
        self._done.add(path)

    def clear(self) -> int:
        """Truncate the ledger.  Returns the number of entries dropped."""
        dropped = len(self._done)
        self._fh.close()
        self._path.write_text("", encoding="utf-8")
        self._done.clear()
        self._fh = open_line_log(self._path)
        return dropped

    def __len__(self) -> int:
        return len(self._done)

    def close(self) -> None:
        self._fh.close()

    def __enter__(self) -> FileLedger:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
