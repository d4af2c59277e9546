"""Two-state alarm latch driven by per-frame detection results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import threading
from typing import Any, Callable, Mapping

from core.logging import logger
from vision.detections import DetectionResult, SignalState


class AlarmState(str, Enum):
    """Alarm latch state."""

    IDLE = "idle"
    ALARMING = "alarming"


class AlarmEdge(str, Enum):
    """Edge emitted to the alert subsystem on a state change."""

    START = "start"
    STOP = "stop"


@dataclass(frozen=True)
class AlarmSettings:
    """Thresholds for raising the alarm."""

    critical_distance_m: float = 100.0
    min_confidence: float = 0.7
    pulse_period_s: float = 0.5

    @classmethod
    def from_config(cls, config: Mapping[str, Any], critical_distance_m: float) -> "AlarmSettings":
        alarm_cfg = config.get("alarm") if isinstance(config, Mapping) else None
        if not isinstance(alarm_cfg, Mapping):
            alarm_cfg = {}
        return cls(
            critical_distance_m=float(critical_distance_m),
            min_confidence=float(alarm_cfg.get("min_confidence", 0.7)),
            pulse_period_s=float(alarm_cfg.get("pulse_period_s", 0.5)),
        )


EdgeHandler = Callable[[AlarmEdge], None]


class AlarmController:
    """Latch that starts the alert for a close red signal and stops it otherwise.

    Edges are only emitted on an actual state change, so a hazard that
    persists across frames produces a single ``START``. There is no timer;
    only a new disconfirming result or ``force_idle`` clears the alarm.
    """

    def __init__(self, settings: AlarmSettings | None = None) -> None:
        self.settings = settings or AlarmSettings()
        self._state = AlarmState.IDLE
        self._lock = threading.Lock()
        self._edge_handlers: list[EdgeHandler] = []

    @property
    def state(self) -> AlarmState:
        return self._state

    @property
    def is_alarming(self) -> bool:
        return self._state is AlarmState.ALARMING

    def register_edge_handler(self, handler: EdgeHandler) -> None:
        if handler not in self._edge_handlers:
            self._edge_handlers.append(handler)

    def unregister_edge_handler(self, handler: EdgeHandler) -> None:
        if handler in self._edge_handlers:
            self._edge_handlers.remove(handler)

    def is_hazard(self, result: DetectionResult) -> bool:
        """Return whether a result describes a close, confident red signal."""

        return (
            result.signal_state is SignalState.RED
            and result.distance <= self.settings.critical_distance_m
            and result.confidence >= self.settings.min_confidence
        )

    def update(self, result: DetectionResult) -> AlarmEdge | None:
        """Feed one result; return the edge emitted, if any."""

        target = AlarmState.ALARMING if self.is_hazard(result) else AlarmState.IDLE
        reason = (
            f"red at {result.distance:.1f}m conf={result.confidence:.2f}"
            if target is AlarmState.ALARMING
            else f"{result.signal_state.value} at {result.distance:.1f}m"
        )
        return self._transition(target, reason)

    def force_idle(self, reason: str = "stopped") -> AlarmEdge | None:
        """Return to idle regardless of the last result."""

        return self._transition(AlarmState.IDLE, reason)

    def _transition(self, new_state: AlarmState, reason: str) -> AlarmEdge | None:
        with self._lock:
            old_state = self._state
            if old_state is new_state:
                return None
            self._state = new_state
            edge = AlarmEdge.START if new_state is AlarmState.ALARMING else AlarmEdge.STOP
            handlers = list(self._edge_handlers)

        # Handlers run without the lock held and may block.
        logger.info("[ALARM] %s -> %s (%s)", old_state.value, new_state.value, reason)
        for handler in handlers:
            try:
                handler(edge)
            except Exception as exc:  # noqa: BLE001 - the latch must survive handler errors
                logger.exception("[ALARM] Edge handler failed on %s: %s", edge.value, exc)
        return edge
