"""
Single instance detection.

Usage:
    from single_app_instance import exit_if_already_running

    # Exit quietly if another copy of this application is already running
    exit_if_already_running()

The guard records the running process's fingerprint in a per-application file
and re-checks it after a short delay so two copies launched at the same moment
settle on a single survivor. This is best effort: with unlucky scheduling both
copies may yield, or both may keep running if the delay is too short.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path
from typing import Callable, Optional

from .config import DEFAULT_RACE_DELAY_SECONDS, InstanceConfig
from .errors import PidFileWriteError
from .fingerprint import ProcessFingerprint
from .instance_detector_helpers import decide_already_running
from .pid_file import PidFileRead, read_pid_file, write_pid_file
from .process_table import ProcessTable, PsutilProcessTable

logger = logging.getLogger(__name__)


class SingleAppInstance:
    """Decides whether this process may run, based on the fingerprint file."""

    def __init__(
        self,
        pid_file_path: Path,
        *,
        process_table: Optional[ProcessTable] = None,
        race_delay_seconds: float = DEFAULT_RACE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        current_pid: Callable[[], int] = os.getpid,
        capture: Callable[[], ProcessFingerprint] = ProcessFingerprint.capture,
    ):
        self.pid_file_path = Path(pid_file_path)
        self.process_table: ProcessTable = process_table if process_table is not None else PsutilProcessTable()
        self.race_delay_seconds = race_delay_seconds
        self._sleep = sleep
        self._current_pid = current_pid
        self._capture = capture

    @classmethod
    def from_config(cls, config: InstanceConfig, **kwargs) -> "SingleAppInstance":
        return cls(config.pid_file_path, race_delay_seconds=config.race_delay_seconds, **kwargs)

    def read(self) -> PidFileRead:
        """Classify the current pid file contents."""
        return read_pid_file(self.pid_file_path)

    def is_already_running(self) -> bool:
        """Return True if the pid file names a different, still-running instance."""
        current_pid = self._current_pid()
        running = decide_already_running(self.read(), current_pid, self.process_table)
        logger.debug("Another instance %s", "is running" if running else "is not running")
        return running

    def write_pid_file(self) -> None:
        """
        Record this process's fingerprint, replacing whatever the file held.

        Raises:
            PidFileWriteError: If the file or its directory cannot be written
        """
        write_pid_file(self.pid_file_path, self._capture())

    def should_launch(self) -> bool:
        """
        Claim the pid file unless another instance already holds it.

        After claiming, waits ``race_delay_seconds`` so a competitor starting at the
        same moment can write its own claim, then checks again. The last writer
        before the re-check wins.
        """
        if self.is_already_running():
            return False

        try:
            self.write_pid_file()
        except PidFileWriteError as exc:
            logger.warning("Could not record instance claim: %s", exc)

        self._sleep(self.race_delay_seconds)

        return not self.is_already_running()

    def exit_if_already_running(self) -> None:
        """Exit with status 0 when another instance is running."""
        if not self.should_launch():
            logger.info("Another instance is already running; exiting")
            sys.exit(0)


__all__ = ["SingleAppInstance"]
