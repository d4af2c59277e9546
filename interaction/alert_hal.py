"""Thin alert HAL for the audio, haptic and visual alert subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from core.logging import log_info, log_warning, logger


class AlertOutputBackend(Protocol):
    """Minimal alert output interface; implementations must tolerate repeats."""

    def start_alert(self) -> None:
        """Switch the alert on."""

    def stop_alert(self) -> None:
        """Switch the alert off."""

    def pulse(self) -> None:
        """Emit one repetition of the alert effect (vibration, tone, flash)."""


class LoggingAlertBackend:
    """Alert backend that only writes to the log."""

    def __init__(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start_alert(self) -> None:
        if self._active:
            return
        self._active = True
        log_warning("🚨 STOP! RED SIGNAL AHEAD")

    def stop_alert(self) -> None:
        if not self._active:
            return
        self._active = False
        log_info("✅ Alert cleared", style="bold green")

    def pulse(self) -> None:
        logger.debug("[ALERT] pulse")


@dataclass
class FakeAlertBackend:
    """Fake alert backend recording every call."""

    starts: int = 0
    stops: int = 0
    pulses: int = 0
    active: bool = False
    fail_on_pulse: bool = False

    def start_alert(self) -> None:
        self.starts += 1
        self.active = True

    def stop_alert(self) -> None:
        self.stops += 1
        self.active = False

    def pulse(self) -> None:
        if self.fail_on_pulse:
            raise RuntimeError("Fake alert pulse failure")
        self.pulses += 1
