"""Scan configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .classifier import FormatKind
from .lister import DEFAULT_TIMEOUT

ALL_FORMATS: frozenset[FormatKind] = frozenset(FormatKind)
ARCHIVE_FORMATS: frozenset[FormatKind] = frozenset(
    {
        FormatKind.ZIP_LIKE,
        FormatKind.TAR,
        FormatKind.TAR_GZ,
        FormatKind.TAR_WZ,
        FormatKind.RAR,
    }
)


class ConfigError(ValueError):
    """Invalid or unreadable scan configuration.  Aborts the run."""


@dataclass(frozen=True)
class OutputPaths:
    """Locations of the four append-only destinations."""

    results: Path = Path("result.txt")
    log: Path = Path("script.log")
    progress: Path = Path("progress.log")
    missing: Path = Path("missing.log")

    @classmethod
    def under(cls, workdir: str | Path) -> OutputPaths:
        """Place every destination in *workdir* with its default name."""
        base = Path(workdir).expanduser()
        d = cls()
        return cls(
            results=base / d.results,
            log=base / d.log,
            progress=base / d.progress,
            missing=base / d.missing,
        )


@dataclass(frozen=True)
class ScanConfig:
    """Parameters of one scan campaign.

    Parameters
    ----------
    keyword:
        Literal substring searched for on each line.
    ignore_case:
        Match *keyword* case-insensitively.
    formats:
        Kinds that are listed and searched.  Files of other kinds are
        logged as unsupported and marked done.
    delay:
        Seconds to pause after each processed file (``0`` disables).
    timeout:
        Seconds allowed for each external listing tool.
    ignore_hidden:
        Skip dot-files and dot-directories during traversal.
    """

    keyword: str = "swagger"
    ignore_case: bool = False
    formats: frozenset[FormatKind] = ALL_FORMATS
    delay: float = 0.1
    timeout: float = DEFAULT_TIMEOUT
    ignore_hidden: bool = False
    outputs: OutputPaths = field(default_factory=OutputPaths)

    def __post_init__(self) -> None:
        if not self.keyword:
            raise ConfigError("keyword must not be empty")
        if self.delay < 0:
            raise ConfigError(f"delay must be >= 0, got {self.delay}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be > 0, got {self.timeout}")
