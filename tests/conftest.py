"""Shared fixtures: in-memory ledger/reporter and fake listers."""

from __future__ import annotations

from pathlib import Path

import pytest

from archgrep.classifier import FormatKind
from archgrep.config import ScanConfig
from archgrep.core import ScanDriver
from archgrep.lister import ContentLister, Listing


class MemoryLedger:
    def __init__(self, done: list[str] | None = None) -> None:
        self.entries: list[str] = list(done or [])

    def seen(self, path: str) -> bool:
        return path in self.entries

    def mark_done(self, path: str) -> None:
        self.entries.append(path)


class MemoryReporter:
    def __init__(self) -> None:
        self.matches: list[tuple[str, list[str]]] = []
        self.missing: list[str] = []

    def record_match(self, path: str, lines: list[str]) -> None:
        self.matches.append((path, list(lines)))

    def record_missing(self, path: str) -> None:
        self.missing.append(path)


def fake_lister(outputs: dict[str, Listing]):
    """Lister returning canned listings keyed by file name."""

    def _list(path: Path) -> Listing:
        return outputs.get(path.name, Listing.failed("no canned listing"))

    return _list


@pytest.fixture
def ledger() -> MemoryLedger:
    return MemoryLedger()


@pytest.fixture
def reporter() -> MemoryReporter:
    return MemoryReporter()


@pytest.fixture
def make_driver(ledger, reporter):
    """Build a ScanDriver with no delay and optional canned archive listings."""

    def _make(
        canned: dict[str, Listing] | None = None,
        **config_kwargs,
    ) -> ScanDriver:
        config_kwargs.setdefault("delay", 0)
        lister = None
        if canned is not None:
            fake = fake_lister(canned)
            lister = ContentLister(
                {
                    FormatKind.ZIP_LIKE: fake,
                    FormatKind.TAR: fake,
                    FormatKind.TAR_WZ: fake,
                    FormatKind.TAR_GZ: fake,
                    FormatKind.RAR: fake,
                }
            )
        return ScanDriver(
            ledger, reporter, config=ScanConfig(**config_kwargs), lister=lister
        )

    return _make
