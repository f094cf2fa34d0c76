"""File type classification by extension, with magic-number fallback."""

from __future__ import annotations

import enum
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FormatKind(enum.Enum):
    """How the searchable text of a file is obtained."""

    ZIP_LIKE = "zip"
    TAR = "tar"
    TAR_GZ = "tar.gz"
    # ``.tar.wz`` is not a known codec; it is listed as plain tar.
    TAR_WZ = "tar.wz"
    RAR = "rar"
    PLAIN_TEXT = "text"
    UNKNOWN = "unknown"


_EXT_KIND: dict[str, FormatKind] = {
    "jar": FormatKind.ZIP_LIKE,
    "war": FormatKind.ZIP_LIKE,
    "zip": FormatKind.ZIP_LIKE,
    "tar": FormatKind.TAR,
    "gz": FormatKind.TAR_GZ,
    "tgz": FormatKind.TAR_GZ,
    "tar.wz": FormatKind.TAR_WZ,
    "rar": FormatKind.RAR,
    "json": FormatKind.PLAIN_TEXT,
    "txt": FormatKind.PLAIN_TEXT,
}

_ZIP_MAGIC = b"PK\x03\x04"
_GZIP_MAGIC = b"\x1f\x8b"
_TAR_MARKER = b"ustar"
_SNIFF_BYTES = 1024


def extension_of(path: str | Path) -> str:
    """Return the lower-cased final dot-suffix of *path*'s file name.

    Returns ``""`` when the name has no dot.  The two-part suffix
    ``tar.wz`` is returned whole.
    """
    name = Path(path).name.lower()
    if name.endswith(".tar.wz"):
        return "tar.wz"
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1]


def detect_signature(path: str | Path) -> FormatKind:
    """Classify *path* from its first bytes.

    Reads at most 1024 bytes.  Unreadable files are ``UNKNOWN``.
    """
    try:
        with open(path, "rb") as f:
            head = f.read(_SNIFF_BYTES)
    except OSError as exc:
        logger.debug("Cannot read signature of %s: %s", path, exc)
        return FormatKind.UNKNOWN

    if head[:4] == _ZIP_MAGIC:
        return FormatKind.ZIP_LIKE
    if head[:2] == _GZIP_MAGIC:
        return FormatKind.TAR_GZ
    if _TAR_MARKER in head:
        return FormatKind.TAR
    return FormatKind.UNKNOWN


def classify(path: str | Path) -> FormatKind:
    """Resolve *path* to exactly one :class:`FormatKind`.

    The extension table wins; signature detection is used only when the
    extension is missing or unrecognised.
    """
    kind = _EXT_KIND.get(extension_of(path))
    if kind is not None:
        return kind
    return detect_signature(path)
