"""Pure decision logic mapping a pid file read to a running/not-running verdict."""

from __future__ import annotations

import logging

from ..fingerprint import ProcessFingerprint
from ..pid_file import PidFileRead, PidFileStatus
from ..process_table import LiveProcess, ProcessTable

logger = logging.getLogger(__name__)


def decide_already_running(read: PidFileRead, current_pid: int, process_table: ProcessTable) -> bool:
    """
    Return True only when *read* proves another live instance holds the claim.

    Missing, unreadable, null and malformed files, our own pid, and stale pids all
    resolve to False.
    """
    if read.status is PidFileStatus.FOUND and read.fingerprint is not None:
        return _structured_claim_is_live(read.fingerprint, current_pid, process_table)
    if read.status is PidFileStatus.LEGACY and read.legacy_pid is not None:
        return _legacy_claim_is_live(read.legacy_pid, current_pid, process_table)
    logger.debug("Pid file status %s holds no claim", read.status.value)
    return False


def _structured_claim_is_live(fingerprint: ProcessFingerprint, current_pid: int, process_table: ProcessTable) -> bool:
    if fingerprint.process_id == current_pid:
        logger.debug("Pid file records the current process %s", current_pid)
        return False

    live = process_table.process_info(fingerprint.process_id)
    if live is None:
        logger.debug("Recorded process %s is not running", fingerprint.process_id)
        return False
    return fingerprint_matches(fingerprint, live)


def fingerprint_matches(fingerprint: ProcessFingerprint, live: LiveProcess) -> bool:
    """
    Compare a stored fingerprint with what the OS reports for the same pid.

    Names compare exactly. Executable paths compare case-insensitively when both
    sides have one; otherwise the name match alone is accepted.
    """
    if live.name != fingerprint.process_name:
        logger.debug(
            "Process %s is now %r, recorded as %r",
            live.pid,
            live.name,
            fingerprint.process_name,
        )
        return False

    if live.module_path is None or fingerprint.main_module_path is None:
        logger.debug("Executable path unavailable for process %s; matched on name only", live.pid)
        return True

    if live.module_path.casefold() != fingerprint.main_module_path.casefold():
        logger.debug(
            "Process %s runs %s, recorded as %s",
            live.pid,
            live.module_path,
            fingerprint.main_module_path,
        )
        return False
    return True


def _legacy_claim_is_live(legacy_pid: int, current_pid: int, process_table: ProcessTable) -> bool:
    if legacy_pid == current_pid:
        logger.debug("Legacy pid file records the current process %s", current_pid)
        return False
    exists = process_table.process_exists(legacy_pid)
    logger.debug("Legacy pid %s %s", legacy_pid, "is running" if exists else "is not running")
    return exists


__all__ = ["decide_already_running", "fingerprint_matches"]
