"""Tests for content listing."""

import sys
from pathlib import Path

from archgrep.classifier import FormatKind
from archgrep.lister import CommandLister, ContentLister, Failure, Listing, read_plain

PY = sys.executable


def test_command_lister_returns_stdout(tmp_path: Path):
    f = tmp_path / "a.zip"
    f.write_bytes(b"")
    lister = CommandLister((PY, "-c", "import sys; print('listing of', sys.argv[1])"))
    listing = lister(f)
    assert listing.ok
    assert listing.text.strip() == f"listing of {f}"


def test_command_lister_nonzero_exit(tmp_path: Path):
    lister = CommandLister((PY, "-c", "import sys; sys.stderr.write('bad archive'); sys.exit(9)"))
    listing = lister(tmp_path / "x.tar")
    assert not listing.ok
    assert listing.failure is Failure.LISTING_FAILED
    assert "code 9" in listing.detail
    assert "bad archive" in listing.detail


def test_command_lister_timeout(tmp_path: Path):
    lister = CommandLister((PY, "-c", "import time; time.sleep(10)"), timeout=0.5)
    listing = lister(tmp_path / "slow.rar")
    assert not listing.ok
    assert "timed out" in listing.detail


def test_command_lister_missing_tool(tmp_path: Path):
    lister = CommandLister(("archgrep-no-such-tool-xyz", "-l"))
    listing = lister(tmp_path / "a.zip")
    assert not listing.ok
    assert "not found" in listing.detail


def test_command_lister_guards_leading_dash():
    lister = CommandLister((PY, "-c", "import sys; print(sys.argv[1])"))
    listing = lister(Path("-rf.zip"))
    assert listing.text.strip() == "./-rf.zip"


def test_read_plain(tmp_path: Path):
    f = tmp_path / "b.txt"
    f.write_bytes(b"hello swagger world\n\xff\n")
    listing = read_plain(f)
    assert listing.ok
    assert "hello swagger world" in listing.text


def test_read_plain_missing_file(tmp_path: Path):
    listing = read_plain(tmp_path / "gone.txt")
    assert not listing.ok
    assert listing.failure is Failure.READ_FAILED


def test_content_lister_dispatches_by_kind(tmp_path: Path):
    calls = []

    def fake(path: Path) -> Listing:
        calls.append(path.name)
        return Listing(text="entry")

    f = tmp_path / "a.jar"
    f.write_bytes(b"")
    lister = ContentLister({FormatKind.ZIP_LIKE: fake})
    assert lister.list(f, FormatKind.ZIP_LIKE).text == "entry"
    assert calls == ["a.jar"]


def test_content_lister_reads_unknown_as_text(tmp_path: Path):
    f = tmp_path / "mystery"
    f.write_text("plain swagger content")
    listing = ContentLister().list(f, FormatKind.UNKNOWN)
    assert listing.ok
    assert listing.text == "plain swagger content"
