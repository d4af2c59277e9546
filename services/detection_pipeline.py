"""Frame-in, alarm-and-history-out detection pipeline."""

from __future__ import annotations

import threading
from typing import Callable

from core.logging import log_detection, logger
from services.alarm_controller import AlarmController
from storage.history import DetectionHistory
from vision.detections import DetectionResult
from vision.detectors import Detector
from vision.frames import YuvFrame


ResultHandler = Callable[[DetectionResult], None]


class DetectionPipeline:
    """Run one frame at a time through the detector, alarm latch and history.

    ``submit`` analyzes on the calling thread. A frame that arrives while
    another is in flight, or while the pipeline is stopped, is dropped and
    ``None`` is returned.
    """

    def __init__(
        self,
        detector: Detector,
        alarm: AlarmController,
        history: DetectionHistory,
    ) -> None:
        self._detector = detector
        self._alarm = alarm
        self._history = history
        self._in_flight = threading.Lock()
        self._running = threading.Event()
        self._state_lock = threading.Lock()
        self._publish_lock = threading.Lock()
        self._latest_result: DetectionResult | None = None
        self._result_handlers: list[ResultHandler] = []
        self.frames_analyzed = 0
        self.dropped_frames = 0

    @property
    def alarm(self) -> AlarmController:
        return self._alarm

    @property
    def history(self) -> DetectionHistory:
        return self._history

    @property
    def latest_result(self) -> DetectionResult | None:
        """Most recent result, for overlay rendering."""

        with self._state_lock:
            return self._latest_result

    def is_running(self) -> bool:
        return self._running.is_set()

    def register_result_handler(self, handler: ResultHandler) -> None:
        if handler not in self._result_handlers:
            self._result_handlers.append(handler)

    def unregister_result_handler(self, handler: ResultHandler) -> None:
        if handler in self._result_handlers:
            self._result_handlers.remove(handler)

    def start(self) -> None:
        if self._running.is_set():
            return
        self._running.set()
        logger.info("[PIPELINE] Detection started")

    def stop(self) -> None:
        """Refuse further frames and force the alarm back to idle."""

        with self._publish_lock:
            was_running = self._running.is_set()
            self._running.clear()
            self._alarm.force_idle("detection stopped")
        if was_running:
            logger.info(
                "[PIPELINE] Detection stopped (analyzed=%s dropped=%s)",
                self.frames_analyzed,
                self.dropped_frames,
            )

    def submit(self, frame: YuvFrame) -> DetectionResult | None:
        if not self._running.is_set():
            self._count_drop()
            return None
        if not self._in_flight.acquire(blocking=False):
            self._count_drop()
            return None
        try:
            result = self._detector.detect(frame)
            with self._publish_lock:
                if not self._running.is_set():
                    # Stopped while analyzing; the alarm must stay idle.
                    self._count_drop()
                    return None
                self._publish(result)
            return result
        finally:
            self._in_flight.release()

    def _count_drop(self) -> None:
        with self._state_lock:
            self.dropped_frames += 1

    def _publish(self, result: DetectionResult) -> None:
        with self._state_lock:
            self._latest_result = result
            self.frames_analyzed += 1
        log_detection(result)
        self._alarm.update(result)
        self._history.record(result)
        for handler in list(self._result_handlers):
            try:
                handler(result)
            except Exception as exc:  # noqa: BLE001 - subscribers must not stall analysis
                logger.exception("[PIPELINE] Result handler failed: %s", exc)
