"""Periodic alert effect bound to the alarm latch."""

from __future__ import annotations

import threading

from core.logging import logger
from interaction.alert_hal import AlertOutputBackend
from services.alarm_controller import AlarmEdge


class AlertEffectLoop:
    """Repeat the alert effect while the alarm is active.

    ``START`` switches the backend on and starts a pulse thread; ``STOP``
    cancels the thread and switches the backend off. Repeated edges of the
    same kind are ignored.
    """

    def __init__(self, backend: AlertOutputBackend, pulse_period_s: float = 0.5) -> None:
        self._backend = backend
        self._pulse_period_s = max(float(pulse_period_s), 0.05)
        self._stop_event = threading.Event()
        self._loop_thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def handle_edge(self, edge: AlarmEdge) -> None:
        if edge is AlarmEdge.START:
            self.start()
        else:
            self.stop()

    def is_running(self) -> bool:
        return self._loop_thread is not None and self._loop_thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.is_running():
                return
            self._stop_event.clear()
            self._backend.start_alert()
            self._loop_thread = threading.Thread(target=self._loop, name="alert-effects", daemon=True)
            self._loop_thread.start()

    def stop(self, timeout_s: float = 2.0) -> None:
        with self._lock:
            thread = self._loop_thread
            if thread is None:
                return
            self._stop_event.set()
            thread.join(timeout=timeout_s)
            if thread.is_alive():
                logger.warning(
                    "[ALERT] Effect loop did not exit within %.2fs; continuing shutdown.",
                    timeout_s,
                )
            self._loop_thread = None
            self._backend.stop_alert()

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self._backend.pulse()
            except Exception as exc:  # noqa: BLE001 - keep alerting even if one pulse fails
                logger.exception("[ALERT] Pulse failed: %s", exc)
            self._stop_event.wait(timeout=self._pulse_period_s)
