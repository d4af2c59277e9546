"""Bounded, JSON-file-backed log of detection results."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import json
from pathlib import Path
import threading
from typing import Any, Deque, Mapping

from core.errors import PersistenceFailure
from core.logging import logger
from vision.detections import DetectionResult, SignalState


DEFAULT_CAPACITY = 1000
DEFAULT_ALARM_DISTANCE_M = 100.0
MIN_UNKNOWN_CONFIDENCE = 0.5
DEFAULT_HISTORY_FILE = "detection_history.json"


@dataclass(frozen=True)
class HistoryStats:
    total: int
    red_signals: int
    alarms: int


def history_path_from_config(config: Mapping[str, Any]) -> Path:
    """Resolve the history file location from ``var_dir`` and ``history.file``."""

    history_cfg = config.get("history") or {}
    var_dir = Path(config.get("var_dir", "./var/")).expanduser()
    return var_dir / str(history_cfg.get("file", DEFAULT_HISTORY_FILE))


class DetectionHistory:
    """Insertion-ordered detection log capped at ``capacity`` entries.

    The file is rewritten after every mutation. The in-memory store is
    filled from the file on first access; a missing or unreadable file
    yields an empty store. Write failures are logged and the in-memory
    state stays authoritative until the next successful write.
    """

    def __init__(
        self,
        path: Path,
        capacity: int = DEFAULT_CAPACITY,
        alarm_distance_m: float = DEFAULT_ALARM_DISTANCE_M,
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._path = Path(path)
        self._capacity = int(capacity)
        self._alarm_distance_m = float(alarm_distance_m)
        self._entries: Deque[DetectionResult] = deque()
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def capacity(self) -> int:
        return self._capacity

    # ----------------------------------------------------------- mutation
    def record(self, result: DetectionResult) -> bool:
        """Append a result; return ``False`` when it carries too little information."""

        if result.signal_state is SignalState.UNKNOWN and result.confidence < MIN_UNKNOWN_CONFIDENCE:
            return False
        with self._lock:
            self._ensure_loaded()
            self._entries.append(result)
            while len(self._entries) > self._capacity:
                self._entries.popleft()
            self._persist()
        return True

    def clear(self) -> None:
        with self._lock:
            self._loaded = True
            self._entries.clear()
            self._persist()
        logger.info("[HISTORY] Cleared detection history")

    # -------------------------------------------------------------- reads
    def history(self) -> list[DetectionResult]:
        """Return entries most recent first."""

        with self._lock:
            self._ensure_loaded()
            return list(reversed(self._entries))

    def alarmed_detections(self) -> list[DetectionResult]:
        return [entry for entry in self.history() if self._is_alarm(entry)]

    @property
    def total_detections(self) -> int:
        return len(self.history())

    @property
    def red_signal_detections(self) -> int:
        return sum(1 for entry in self.history() if entry.signal_state is SignalState.RED)

    @property
    def alarm_triggered(self) -> int:
        return len(self.alarmed_detections())

    def stats(self) -> HistoryStats:
        entries = self.history()
        return HistoryStats(
            total=len(entries),
            red_signals=sum(1 for entry in entries if entry.signal_state is SignalState.RED),
            alarms=sum(1 for entry in entries if self._is_alarm(entry)),
        )

    # ------------------------------------------------------- persistence
    def _is_alarm(self, entry: DetectionResult) -> bool:
        return entry.signal_state is SignalState.RED and entry.distance <= self._alarm_distance_m

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        try:
            loaded = self._load()
        except PersistenceFailure as exc:
            logger.warning("[HISTORY] Starting with empty history: %s", exc)
            return
        self._entries = deque(loaded)
        while len(self._entries) > self._capacity:
            self._entries.popleft()
        logger.debug("[HISTORY] Loaded %s entries from %s", len(loaded), self._path)

    def _load(self) -> list[DetectionResult]:
        if not self._path.exists():
            return []
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(payload, list):
                raise ValueError("history file is not a list")
            return [DetectionResult.from_dict(item) for item in payload]
        except (OSError, ValueError, TypeError, KeyError) as exc:
            raise PersistenceFailure(f"Could not read {self._path}: {exc}") from exc

    def _persist(self) -> None:
        try:
            self._write([entry.to_dict() for entry in self._entries])
        except PersistenceFailure as exc:
            logger.error("[HISTORY] %s", exc)

    def _write(self, records: list[dict[str, Any]]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(records), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceFailure(f"Could not write {self._path}: {exc}") from exc
