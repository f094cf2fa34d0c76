"""Content listing via external archive tools, or raw text reads.

Archives are never extracted: each format is handed to a listing tool
(``unzip -l``, ``tar -tf``, ``tar -tzf``, ``unrar l``) and only its
stdout is kept.  Plain and unknown files are read directly.
"""

from __future__ import annotations

import enum
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

from .classifier import FormatKind

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class Failure(enum.Enum):
    """Why a listing could not be produced."""

    LISTING_FAILED = "listing_failed"
    READ_FAILED = "read_failed"


@dataclass(frozen=True)
class Listing:
    """Searchable text for one file, or the reason it could not be produced."""

    text: str = ""
    failure: Failure | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def failed(cls, detail: str, failure: Failure = Failure.LISTING_FAILED) -> Listing:
        return cls(failure=failure, detail=detail)


Lister = Callable[[Path], Listing]


@dataclass(frozen=True)
class CommandLister:
    """Run ``argv + [path]`` and return its stdout as the listing.

    Non-zero exit, a missing tool, or exceeding *timeout* seconds all
    produce a failed :class:`Listing`.
    """

    argv: tuple[str, ...]
    timeout: float = DEFAULT_TIMEOUT

    def __call__(self, path: Path) -> Listing:
        target = str(path)
        if target.startswith("-"):
            target = f"./{target}"
        cmd = [*self.argv, target]
        try:
            proc = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError:
            return Listing.failed(f"{self.argv[0]}: command not found")
        except subprocess.TimeoutExpired:
            return Listing.failed(f"{self.argv[0]} timed out after {self.timeout:g}s")
        except OSError as exc:
            return Listing.failed(f"{self.argv[0]}: {exc}")

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            msg = f"{self.argv[0]} exited with code {proc.returncode}"
            if stderr:
                msg = f"{msg}: {stderr.splitlines()[-1]}"
            return Listing.failed(msg)
        return Listing(text=proc.stdout.decode("utf-8", errors="replace"))


def read_plain(path: Path) -> Listing:
    """Read *path* as UTF-8 text, replacing undecodable bytes."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        detail = f"cannot read: {exc.strerror or exc}"
        return Listing.failed(detail, Failure.READ_FAILED)
    return Listing(text=data.decode("utf-8", errors="replace"))


def default_listers(timeout: float = DEFAULT_TIMEOUT) -> dict[FormatKind, Lister]:
    """Return the standard kind → lister mapping."""
    tar = CommandLister(("tar", "-tf"), timeout)
    return {
        FormatKind.ZIP_LIKE: CommandLister(("unzip", "-l"), timeout),
        FormatKind.TAR: tar,
        FormatKind.TAR_WZ: tar,
        FormatKind.TAR_GZ: CommandLister(("tar", "-tzf"), timeout),
        FormatKind.RAR: CommandLister(("unrar", "l"), timeout),
        FormatKind.PLAIN_TEXT: read_plain,
        FormatKind.UNKNOWN: read_plain,
    }


class ContentLister:
    """Dispatch a classified path to the lister registered for its kind.

    Parameters
    ----------
    listers:
        Overrides merged on top of :func:`default_listers`.  Useful for
        substituting fakes in tests.
    timeout:
        Seconds allowed for each external listing tool.
    """

    def __init__(
        self,
        listers: Mapping[FormatKind, Lister] | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._listers = default_listers(timeout)
        if listers:
            self._listers.update(listers)

    def list(self, path: str | Path, kind: FormatKind) -> Listing:
        lister = self._listers.get(kind, read_plain)
        listing = lister(Path(path))
        if not listing.ok:
            logger.debug("Listing %s as %s failed: %s", path, kind.value, listing.detail)
        return listing
