"""Access to the live OS process table."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import psutil

from .fingerprint import PID_MAX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiveProcess:
    """What the OS reports about a running process."""

    pid: int
    name: str
    module_path: Optional[str] = None  # None when the OS refuses the query


class ProcessTable(Protocol):
    """Minimal contract the detector needs from the OS process table."""

    def process_exists(self, pid: int) -> bool: ...

    def process_info(self, pid: int) -> Optional[LiveProcess]: ...


class PsutilProcessTable:
    """Process table backed by psutil."""

    def process_exists(self, pid: int) -> bool:
        if not 0 < pid <= PID_MAX:
            return False
        try:
            return psutil.pid_exists(pid)
        except (OverflowError, ValueError) as exc:
            logger.debug("Pid %s cannot be looked up: %s", pid, exc)
            return False

    def process_info(self, pid: int) -> Optional[LiveProcess]:
        """
        Describe the live process *pid*.

        Returns ``None`` when the pid is unused, the process has exited or is a
        zombie, or the OS refuses even the name query.
        """
        if not 0 < pid <= PID_MAX:
            return None
        try:
            process = psutil.Process(pid)
            if not process.is_running() or process.status() == psutil.STATUS_ZOMBIE:
                return None
            name = process.name()
            module_path = _module_path(process)
        except (psutil.NoSuchProcess, psutil.ZombieProcess):
            logger.debug("Process %s is no longer running", pid)
            return None
        except psutil.AccessDenied:
            logger.debug("Access denied reading basic details of process %s", pid)
            return None
        except (OverflowError, ValueError) as exc:
            logger.debug("Pid %s cannot be looked up: %s", pid, exc)
            return None

        return LiveProcess(pid=pid, name=name, module_path=module_path)


def _module_path(process: psutil.Process) -> Optional[str]:
    try:
        return process.exe() or None
    except psutil.AccessDenied:
        logger.debug("Access denied reading executable of process %s", process.pid)
        return None
    except OSError as exc:
        logger.debug("Executable of process %s could not be read: %s", process.pid, exc)
        return None


__all__ = ["LiveProcess", "ProcessTable", "PsutilProcessTable"]
