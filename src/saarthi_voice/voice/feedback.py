"""Haptic feedback sink that records patterns in the log."""

from __future__ import annotations

import logging

from .interfaces import HapticPattern


class LoggingHaptics:
    """Stands in for a vibration motor on hosts that have none."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("saarthi_voice.haptics")

    def pulse(self, pattern: HapticPattern) -> None:
        self._logger.debug("haptic_pulse", extra={"pattern": pattern.name, "vibration_ms": list(pattern.value)})
