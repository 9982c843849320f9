"""Helper modules for the instance detector."""

from .decision import decide_already_running, fingerprint_matches

__all__ = ["decide_already_running", "fingerprint_matches"]
