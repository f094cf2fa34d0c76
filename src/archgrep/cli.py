"""CLI interface for archgrep."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import click

from .classifier import FormatKind, classify, extension_of
from .config import ALL_FORMATS, ConfigError, OutputPaths, ScanConfig

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

DEFAULT_DIR_LIST = "dirlist.txt"
DEFAULT_FILE_LIST = "filelist.txt"


@contextmanager
def _logging_to(log_path: Path, verbose: bool) -> Iterator[None]:
    """Send ``archgrep`` log records to *log_path* and stderr."""
    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    handlers: list[logging.Handler] = [
        logging.FileHandler(log_path, encoding="utf-8", errors="backslashreplace"),
        logging.StreamHandler(sys.stderr),
    ]
    pkg_logger = logging.getLogger("archgrep")
    previous = pkg_logger.level
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for h in handlers:
        h.setFormatter(formatter)
        pkg_logger.addHandler(h)
    try:
        yield
    finally:
        for h in handlers:
            pkg_logger.removeHandler(h)
            h.close()
        pkg_logger.setLevel(previous)


def _load_list(explicit: str | None, default: str) -> list[str]:
    """Read *explicit* (must be readable) or *default* (ignored if absent)."""
    from .scanner import read_path_list

    if explicit is None:
        if not Path(default).is_file():
            return []
        explicit = default
    try:
        return read_path_list(explicit)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read input list {explicit}: {exc}") from exc


def _outputs(
    workdir: str | None,
    results: str | None,
    log_file: str | None,
    progress: str | None,
    missing: str | None,
) -> OutputPaths:
    base = OutputPaths.under(workdir) if workdir else OutputPaths()
    return OutputPaths(
        results=Path(results) if results else base.results,
        log=Path(log_file) if log_file else base.log,
        progress=Path(progress) if progress else base.progress,
        missing=Path(missing) if missing else base.missing,
    )


def _output_options(fn):
    fn = click.option("--missing", default=None, help="Missing/error destination.")(fn)
    fn = click.option("--progress", default=None, help="Progress ledger file.")(fn)
    fn = click.option("--log-file", default=None, help="Log destination.")(fn)
    fn = click.option("--results", default=None, help="Results destination.")(fn)
    fn = click.option(
        "--workdir", "-w", default=None, type=click.Path(file_okay=False),
        help="Directory holding all output files (default: current directory).",
    )(fn)
    return fn


@click.group(context_settings={"auto_envvar_prefix": "ARCHGREP"})
@click.version_option(package_name="archgrep")
def cli() -> None:
    """archgrep - resumable keyword search over archive listings and text files."""


@cli.command()
@click.argument("directories", nargs=-1)
@click.option("--dir-list", "-d", default=None, help=f"File of directories to scan [default: {DEFAULT_DIR_LIST} if present].")
@click.option("--file-list", "-f", default=None, help=f"File of paths to process directly [default: {DEFAULT_FILE_LIST} if present].")
@click.option("--keyword", "-k", default="swagger", show_default=True, help="Literal substring to search for.")
@click.option("--ignore-case", "-i", is_flag=True, help="Match the keyword case-insensitively.")
@click.option(
    "--format", "formats", multiple=True,
    type=click.Choice([k.value for k in FormatKind]),
    help="Only list and search these kinds (repeatable). Default: all.",
)
@click.option("--delay", default=0.1, show_default=True, type=float, help="Seconds to pause after each file.")
@click.option("--timeout", default=30.0, show_default=True, type=float, help="Seconds allowed per listing tool.")
@click.option("--ignore-hidden", is_flag=True, help="Skip dot-files and dot-directories.")
@click.option("--verbose", "-v", is_flag=True, help="Log debug detail.")
@_output_options
def scan(
    directories: tuple[str, ...],
    dir_list: str | None,
    file_list: str | None,
    keyword: str,
    ignore_case: bool,
    formats: tuple[str, ...],
    delay: float,
    timeout: float,
    ignore_hidden: bool,
    verbose: bool,
    workdir: str | None,
    results: str | None,
    log_file: str | None,
    progress: str | None,
    missing: str | None,
) -> None:
    """Scan DIRECTORIES and listed inputs for the keyword.

    Re-running with the same progress ledger resumes where the previous run
    stopped.  Running two scans against the same output files at once is
    not supported.
    """
    from .core import Outcome, ScanDriver
    from .ledger import FileLedger
    from .reporter import FileReporter

    try:
        config = ScanConfig(
            keyword=keyword,
            ignore_case=ignore_case,
            formats=frozenset(FormatKind(f) for f in formats) if formats else ALL_FORMATS,
            delay=delay,
            timeout=timeout,
            ignore_hidden=ignore_hidden,
            outputs=_outputs(workdir, results, log_file, progress, missing),
        )
        roots = list(directories) + _load_list(dir_list, DEFAULT_DIR_LIST)
        files = _load_list(file_list, DEFAULT_FILE_LIST)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if not roots and not files:
        raise click.UsageError(
            f"Nothing to scan: pass DIRECTORIES, --dir-list or --file-list "
            f"(or create {DEFAULT_DIR_LIST} / {DEFAULT_FILE_LIST})."
        )

    out = config.outputs
    with _logging_to(out.log, verbose), FileLedger(out.progress) as ledger, FileReporter(
        out.results, out.missing
    ) as reporter:
        driver = ScanDriver(ledger, reporter, config=config)
        try:
            summary = driver.run(roots, files)
        except KeyboardInterrupt:
            logging.getLogger("archgrep").warning("Interrupted; re-run to resume.")
            sys.exit(130)

    click.echo(
        f"Processed {summary.processed} file(s): {summary[Outcome.MATCHED]} matched, "
        f"{summary.failed} failed, {summary[Outcome.SKIPPED]} skipped."
    )


@cli.command("classify")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def classify_cmd(paths: tuple[str, ...]) -> None:
    """Show how each of PATHS would be listed."""
    for p in paths:
        ext = extension_of(p) or "-"
        click.echo(f"{classify(p).value}\t{ext}\t{p}")


@cli.command()
@click.option("--workdir", "-w", default=None, type=click.Path(file_okay=False), help="Directory holding the output files.")
@click.option("--progress", default=None, help="Progress ledger file.")
def status(workdir: str | None, progress: str | None) -> None:
    """Show how many paths the progress ledger has recorded."""
    from .ledger import FileLedger

    out = _outputs(workdir, None, None, progress, None)
    if not out.progress.exists():
        click.echo(f"No progress ledger at {out.progress}.")
        return
    with FileLedger(out.progress) as ledger:
        click.echo(f"Completed paths: {len(ledger)} ({out.progress})")
    if out.missing.exists():
        with out.missing.open(encoding="utf-8", errors="surrogateescape") as f:
            n_missing = sum(1 for line in f if line.strip())
        click.echo(f"Missing/error paths: {n_missing} ({out.missing})")


@cli.command()
@click.option("--workdir", "-w", default=None, type=click.Path(file_okay=False), help="Directory holding the output files.")
@click.option("--progress", default=None, help="Progress ledger file.")
@click.confirmation_option(prompt="This will forget all completed paths. Continue?")
def reset(workdir: str | None, progress: str | None) -> None:
    """Clear the progress ledger so the next scan starts over."""
    from .ledger import FileLedger

    out = _outputs(workdir, None, None, progress, None)
    with FileLedger(out.progress) as ledger:
        dropped = ledger.clear()
    click.echo(f"Cleared {dropped} completed path(s) from {out.progress}.")
