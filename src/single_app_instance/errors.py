"""Error types raised by the single instance guard."""

from __future__ import annotations

from pathlib import Path


class PidFileWriteError(RuntimeError):
    """Raised when the fingerprint file cannot be written."""

    def __init__(self, path: Path, reason: str = "") -> None:
        message = f"Failed to write pid file {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.path = path
        self.reason = reason


__all__ = ["PidFileWriteError"]
