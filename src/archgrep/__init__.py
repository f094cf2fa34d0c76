"""archgrep: resumable keyword search over archive listings and text files."""

from .classifier import FormatKind, classify
from .config import ConfigError, OutputPaths, ScanConfig
from .core import Outcome, ScanDriver, ScanSummary
from .ledger import FileLedger
from .lister import ContentLister, Failure, Listing
from .reporter import FileReporter

__all__ = [
    "ConfigError",
    "ContentLister",
    "Failure",
    "FileLedger",
    "FileReporter",
    "FormatKind",
    "Listing",
    "Outcome",
    "OutputPaths",
    "ScanConfig",
    "ScanDriver",
    "ScanSummary",
    "classify",
]
