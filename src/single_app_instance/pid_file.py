"""
Reading and writing the persisted fingerprint file.

Reads never raise: every outcome, including missing or unreadable files, is
classified into a :class:`PidFileRead` for the detector to decide on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .errors import PidFileWriteError
from .fingerprint import (
    DecodeStatus,
    ProcessFingerprint,
    decode_fingerprint,
    encode_fingerprint,
    parse_legacy_pid,
)

logger = logging.getLogger(__name__)


def pid_file_name(marker: str) -> str:
    return f".{marker}.pid"


class PidFileStatus(Enum):
    FOUND = "found"
    LEGACY = "legacy"
    NULL = "null"
    ABSENT = "absent"
    UNREADABLE = "unreadable"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class PidFileRead:
    """Classified contents of the pid file."""

    status: PidFileStatus
    fingerprint: Optional[ProcessFingerprint] = None
    legacy_pid: Optional[int] = None

    @classmethod
    def absent(cls) -> "PidFileRead":
        return cls(PidFileStatus.ABSENT)

    @classmethod
    def unreadable(cls) -> "PidFileRead":
        return cls(PidFileStatus.UNREADABLE)


def classify_content(content: str) -> PidFileRead:
    """Classify raw file text as a fingerprint, a legacy pid, null or malformed."""
    decoded = decode_fingerprint(content)
    if decoded.status is DecodeStatus.FOUND:
        return PidFileRead(PidFileStatus.FOUND, fingerprint=decoded.fingerprint)
    if decoded.status is DecodeStatus.NULL:
        return PidFileRead(PidFileStatus.NULL)

    legacy_pid = parse_legacy_pid(content)
    if legacy_pid is None:
        return PidFileRead(PidFileStatus.MALFORMED)
    return PidFileRead(PidFileStatus.LEGACY, legacy_pid=legacy_pid)


def read_pid_file(path: Path) -> PidFileRead:
    """Read and classify the pid file at *path*."""
    try:
        content = Path(path).read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        # Also covers a missing parent directory
        logger.debug("No pid file at %s", path)
        return PidFileRead.absent()
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Pid file %s is unreadable: %s", path, exc)
        return PidFileRead.unreadable()

    result = classify_content(content)
    logger.debug("Pid file %s classified as %s", path, result.status.value)
    return result


def write_pid_file(path: Path, fingerprint: ProcessFingerprint) -> None:
    """
    Overwrite the pid file at *path* with *fingerprint*, creating its directory.

    Raises:
        PidFileWriteError: If the directory or file cannot be written
    """
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(encode_fingerprint(fingerprint))
    except OSError as exc:
        raise PidFileWriteError(target, str(exc)) from exc
    logger.debug("Wrote pid file %s for process %s", target, fingerprint.process_id)


__all__ = [
    "PidFileRead",
    "PidFileStatus",
    "classify_content",
    "pid_file_name",
    "read_pid_file",
    "write_pid_file",
]
