"""
Process fingerprint model and its persisted JSON contract.

A fingerprint captures enough about a process to tell it apart from an unrelated
process that later reuses the same pid. The JSON keys are shared with files written
by earlier releases and must not change.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

import orjson
import psutil

logger = logging.getLogger(__name__)

PROCESS_ID_KEY = "ProcessId"
PROCESS_NAME_KEY = "ProcessName"
START_TIME_KEY = "StartTime"
MAIN_MODULE_KEY = "MainModuleFileName"

_LEGACY_PID_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*")

# Pids are persisted as signed 32-bit integers
PID_MIN = -(2**31)
PID_MAX = 2**31 - 1


@dataclass(frozen=True)
class ProcessFingerprint:
    """Identity of one process at capture time."""

    process_id: int
    process_name: Optional[str]
    start_time: datetime
    main_module_path: Optional[str] = None

    @classmethod
    def capture(cls, process: Optional[psutil.Process] = None) -> "ProcessFingerprint":
        """
        Fingerprint *process*, or the current process when omitted.

        Queries the OS refuses degrade to ``None`` (name, executable path) or to the
        capture time (start time); restricted introspection never fails the capture.
        """
        proc = process if process is not None else psutil.Process()
        return cls(
            process_id=proc.pid,
            process_name=_safe_name(proc),
            start_time=_safe_start_time(proc),
            main_module_path=_safe_exe(proc),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            PROCESS_ID_KEY: self.process_id,
            PROCESS_NAME_KEY: self.process_name,
            START_TIME_KEY: self.start_time.isoformat(),
            MAIN_MODULE_KEY: self.main_module_path,
        }


def _safe_name(proc: psutil.Process) -> Optional[str]:
    try:
        return proc.name() or None
    except (psutil.AccessDenied, psutil.ZombieProcess):
        logger.debug("Process name unavailable for pid %s", proc.pid)
        return None


def _safe_start_time(proc: psutil.Process) -> datetime:
    try:
        return datetime.fromtimestamp(proc.create_time()).astimezone()
    except (psutil.AccessDenied, psutil.ZombieProcess, OSError, OverflowError, ValueError):
        logger.debug("Start time unavailable for pid %s; using capture time", proc.pid)
        return datetime.now().astimezone()


def _safe_exe(proc: psutil.Process) -> Optional[str]:
    try:
        return proc.exe() or None
    except (psutil.AccessDenied, psutil.ZombieProcess, OSError):
        logger.debug("Executable path unavailable for pid %s", proc.pid)
        return None


class DecodeStatus(Enum):
    """Outcome of decoding the structured fingerprint form."""

    FOUND = "found"
    NULL = "null"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class FingerprintDecodeResult:
    status: DecodeStatus
    fingerprint: Optional[ProcessFingerprint] = None


def encode_fingerprint(fingerprint: ProcessFingerprint) -> bytes:
    """Serialize *fingerprint* to UTF-8 JSON."""
    return orjson.dumps(fingerprint.to_payload())


def decode_fingerprint(content: str | bytes) -> FingerprintDecodeResult:
    """
    Decode the structured fingerprint form.

    JSON ``null`` is reported as NULL. Invalid JSON, and valid JSON that is not an
    object carrying an integer ``ProcessId``, is MALFORMED. A top-level number is
    MALFORMED as well so that bare pids fall through to :func:`parse_legacy_pid`.
    """
    try:
        data = orjson.loads(content)
    except orjson.JSONDecodeError:
        return FingerprintDecodeResult(DecodeStatus.MALFORMED)

    if data is None:
        return FingerprintDecodeResult(DecodeStatus.NULL)
    if not isinstance(data, dict):
        return FingerprintDecodeResult(DecodeStatus.MALFORMED)

    fingerprint = _fingerprint_from_payload(data)
    if fingerprint is None:
        return FingerprintDecodeResult(DecodeStatus.MALFORMED)
    return FingerprintDecodeResult(DecodeStatus.FOUND, fingerprint)


def _fingerprint_from_payload(data: Dict[str, Any]) -> Optional[ProcessFingerprint]:
    process_id = data.get(PROCESS_ID_KEY)
    # bool is an int subclass
    if not isinstance(process_id, int) or isinstance(process_id, bool):
        return None
    if not PID_MIN <= process_id <= PID_MAX:
        return None

    process_name = data.get(PROCESS_NAME_KEY)
    if process_name is not None and not isinstance(process_name, str):
        return None

    main_module_path = data.get(MAIN_MODULE_KEY)
    if main_module_path is not None and not isinstance(main_module_path, str):
        return None

    return ProcessFingerprint(
        process_id=process_id,
        process_name=process_name,
        start_time=_parse_start_time(data.get(START_TIME_KEY)),
        main_module_path=main_module_path,
    )


def _parse_start_time(raw: Any) -> datetime:
    # Start time is informational only; an unreadable value is not a reason to drop the record.
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.debug("Ignoring unparseable start time %r", raw)
    return datetime.min


def parse_legacy_pid(content: str) -> Optional[int]:
    """Parse the legacy bare-integer form, returning ``None`` for anything else."""
    if not _LEGACY_PID_PATTERN.fullmatch(content):
        return None
    pid = int(content)
    if not PID_MIN <= pid <= PID_MAX:
        return None
    return pid


__all__ = [
    "DecodeStatus",
    "FingerprintDecodeResult",
    "MAIN_MODULE_KEY",
    "PID_MAX",
    "PID_MIN",
    "PROCESS_ID_KEY",
    "PROCESS_NAME_KEY",
    "ProcessFingerprint",
    "START_TIME_KEY",
    "decode_fingerprint",
    "encode_fingerprint",
    "parse_legacy_pid",
]
