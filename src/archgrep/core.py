"""Resumable scan-and-match orchestrator."""

from __future__ import annotations

import enum
import logging
import os
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable

from .classifier import classify
from .config import ScanConfig
from .ledger import Ledger
from .lister import ContentLister, Failure
from .reporter import Reporter
from .scanner import iter_directory

logger = logging.getLogger(__name__)


class Outcome(enum.Enum):
    """Terminal outcome of one path."""

    SKIPPED = "skipped"
    MATCHED = "matched"
    NO_MATCH = "no_match"
    UNSUPPORTED = "unsupported"
    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    LISTING_FAILED = "listing_failed"
    READ_FAILED = "read_failed"

    @property
    def is_failure(self) -> bool:
        return self in _FAILURES


_FAILURES = frozenset(
    {
        Outcome.NOT_FOUND,
        Outcome.NOT_A_DIRECTORY,
        Outcome.LISTING_FAILED,
        Outcome.READ_FAILED,
    }
)


@dataclass
class ScanSummary:
    """Per-outcome counters for a run."""

    counts: Counter[Outcome] = field(default_factory=Counter)

    def add(self, outcome: Outcome) -> None:
        self.counts[outcome] += 1

    def update(self, other: ScanSummary) -> None:
        self.counts.update(other.counts)

    def __getitem__(self, outcome: Outcome) -> int:
        return self.counts[outcome]

    @property
    def processed(self) -> int:
        return sum(n for o, n in self.counts.items() if o is not Outcome.SKIPPED)

    @property
    def failed(self) -> int:
        return sum(n for o, n in self.counts.items() if o.is_failure)


class ScanDriver:
    """Carry each candidate path from unseen to recorded, exactly once.

    The ledger commit is always the last step for a path, after any
    report has been written, so an interrupted run re-attempts at most the
    file that was in flight.

    Parameters
    ----------
    ledger:
        Progress ledger consulted before and committed after each path.
    reporter:
        Destination for match and missing/error records.
    config:
        Keyword, formats, delay and timeout.  Defaults to ``ScanConfig()``.
    lister:
        Content lister.  Defaults to one built with ``config.timeout``.
    sleep:
        Called with ``config.delay`` after each processed path.
    """

    def __init__(
        self,
        ledger: Ledger,
        reporter: Reporter,
        *,
        config: ScanConfig | None = None,
        lister: ContentLister | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._ledger = ledger
        self._reporter = reporter
        self._config = config or ScanConfig()
        self._lister = lister or ContentLister(timeout=self._config.timeout)
        self._sleep = sleep
        if self._config.ignore_case:
            self._needle = self._config.keyword.casefold()
        else:
            self._needle = self._config.keyword

    @property
    def config(self) -> ScanConfig:
        return self._config

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(
        self,
        directories: Iterable[str] = (),
        files: Iterable[str] = (),
    ) -> ScanSummary:
        """Scan every directory root, then every direct file."""
        logger.info("=== Starting archive & file scan ===")
        summary = ScanSummary()
        for root in directories:
            summary.update(self.scan_directory(root))
        for path in files:
            summary.add(self.process_file(path))
        logger.info(
            "=== Scan completed: %d processed, %d matched, %d failed, %d skipped ===",
            summary.processed,
            summary[Outcome.MATCHED],
            summary.failed,
            summary[Outcome.SKIPPED],
        )
        return summary

    def scan_directory(self, root: str) -> ScanSummary:
        """Process every file under *root*.

        An invalid root is recorded as missing and abandoned; it never
        aborts the caller.
        """
        summary = ScanSummary()
        if self._ledger.seen(root):
            logger.info("Skipping already processed path: %s", root)
            return summary
        if not os.path.isdir(root):
            logger.error("Not a directory: %s", root)
            summary.add(self._fail(root, Outcome.NOT_A_DIRECTORY))
            return summary

        logger.info("Scanning directory: %s", root)
        for path in iter_directory(root, ignore_hidden=self._config.ignore_hidden):
            summary.add(self.process_file(path, direct=False))
        return summary

    def process_file(self, path: str, *, direct: bool = True) -> Outcome:
        """Run one path through the state machine and return its outcome.

        *direct* paths come from a file list and are checked for existence
        first; traversal-sourced paths are attempted as found.
        """
        if self._ledger.seen(path):
            logger.info("Skipping already processed file: %s", path)
            return Outcome.SKIPPED

        if direct and not os.path.isfile(path):
            logger.error("File not found: %s", path)
            outcome = self._fail(path, Outcome.NOT_FOUND)
        else:
            outcome = self._process(path)
        if self._config.delay > 0:
            self._sleep(self._config.delay)
        return outcome

    def match_lines(self, text: str) -> list[str]:
        """Return every line of *text* containing the keyword."""
        lines = [line.rstrip("\r") for line in text.split("\n")]
        if self._config.ignore_case:
            return [line for line in lines if self._needle in line.casefold()]
        return [line for line in lines if self._needle in line]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _process(self, path: str) -> Outcome:
        logger.info("Processing file: %s", path)
        kind = classify(path)
        logger.debug("Classified %s as %s", path, kind.value)

        if kind not in self._config.formats:
            logger.info("Unsupported file type (%s): %s", kind.value, path)
            self._ledger.mark_done(path)
            return Outcome.UNSUPPORTED

        listing = self._lister.list(path, kind)
        if not listing.ok:
            logger.error("Failed to process %s: %s", path, listing.detail)
            if listing.failure is Failure.READ_FAILED:
                return self._fail(path, Outcome.READ_FAILED)
            return self._fail(path, Outcome.LISTING_FAILED)

        matches = self.match_lines(listing.text)
        if matches:
            self._reporter.record_match(path, matches)
            logger.info("Match found in %s: %s", path, "; ".join(matches))
            outcome = Outcome.MATCHED
        else:
            outcome = Outcome.NO_MATCH
        self._ledger.mark_done(path)
        return outcome

    def _fail(self, path: str, outcome: Outcome) -> Outcome:
        self._reporter.record_missing(path)
        self._ledger.mark_done(path)
        return outcome
