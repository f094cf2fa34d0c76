"""Result and missing/error destinations."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol, TextIO

from .ledger import escape_line, open_line_log

SEPARATOR = "-" * 28


class Reporter(Protocol):
    def record_match(self, path: str, lines: list[str]) -> None: ...

    def record_missing(self, path: str) -> None: ...


def format_match(path: str, lines: list[str]) -> str:
    """Render a match block: separator, ``File: <path>``, lines, separator."""
    body = "\n".join(lines)
    return f"{SEPARATOR}\nFile: {path}\n{body}\n{SEPARATOR}\n"


class FileReporter:
    """Append match blocks and missing paths to text files.

    Paths are written with ``surrogateescape`` so undecodable file names
    keep their original bytes.  Missing paths use the ledger's one-line
    escaping.

    Every write is flushed and fsynced before returning so that it is on
    disk before the caller commits the path to the progress ledger.
    """

    def __init__(
        self,
        results_path: str | Path = "result.txt",
        missing_path: str | Path = "missing.log",
    ) -> None:
        self._results = _open_append(results_path)
        self._missing = _open_append(missing_path)

    def record_match(self, path: str, lines: list[str]) -> None:
        _durable_write(self._results, format_match(path, lines))

    def record_missing(self, path: str) -> None:
        _durable_write(self._missing, f"{escape_line(path)}\n")

    def close(self) -> None:
        self._results.close()
        self._missing.close()

    def __enter__(self) -> FileReporter:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def _open_append(path: str | Path) -> TextIO:
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open_line_log(p)


def _durable_write(fh: TextIO, text: str) -> None:
    fh.write(text)
    fh.flush()
    os.fsync(fh.fileno())
