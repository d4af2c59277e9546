"""Tests for the persisted detection history."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
from pathlib import Path

import pytest

from core.errors import PersistenceFailure
from storage import history as history_module
from storage.history import DetectionHistory, history_path_from_config
from vision.detections import BoundingBox, DetectionResult, SignalState, unknown_result


BASE_TIME = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _result(state: SignalState, distance: float, index: int = 0, confidence: float = 0.9) -> DetectionResult:
    return DetectionResult(
        state,
        confidence,
        distance,
        bounding_box=BoundingBox(10, 20, 30, 30),
        timestamp=BASE_TIME + timedelta(seconds=index),
    )


def test_record_persists_and_reloads(tmp_path: Path) -> None:
    path = tmp_path / "var" / "history.json"
    store = DetectionHistory(path)

    assert store.record(_result(SignalState.RED, 50.0, 0))
    assert store.record(_result(SignalState.GREEN, 300.0, 1))

    records = json.loads(path.read_text(encoding="utf-8"))
    assert [record["signalState"] for record in records] == ["red", "green"]
    assert records[0]["boundingBox"] == {"left": 10.0, "top": 20.0, "width": 30.0, "height": 30.0}

    reloaded = DetectionHistory(path)
    assert reloaded.history() == store.history()
    assert reloaded.history()[0].signal_state is SignalState.GREEN


def test_capacity_drops_oldest(tmp_path: Path) -> None:
    store = DetectionHistory(tmp_path / "history.json", capacity=1000)

    for index in range(1001):
        store.record(_result(SignalState.GREEN, 200.0, index))

    entries = store.history()
    assert len(entries) == 1000
    assert entries[0].timestamp == BASE_TIME + timedelta(seconds=1000)
    assert entries[-1].timestamp == BASE_TIME + timedelta(seconds=1)
    assert len(json.loads((tmp_path / "history.json").read_text(encoding="utf-8"))) == 1000


def test_low_confidence_unknown_is_not_recorded(tmp_path: Path) -> None:
    store = DetectionHistory(tmp_path / "history.json")

    assert store.record(unknown_result()) is False
    assert store.record(DetectionResult(SignalState.UNKNOWN, 0.6, 1000.0)) is True
    assert store.total_detections == 1


def test_alarmed_detections_and_counters(tmp_path: Path) -> None:
    store = DetectionHistory(tmp_path / "history.json", alarm_distance_m=100.0)
    store.record(_result(SignalState.RED, 50.0, 0))
    store.record(_result(SignalState.RED, 100.0, 1))
    store.record(_result(SignalState.RED, 400.0, 2))
    store.record(_result(SignalState.YELLOW, 30.0, 3))

    alarmed = store.alarmed_detections()
    assert [entry.distance for entry in alarmed] == [100.0, 50.0]
    assert store.total_detections == 4
    assert store.red_signal_detections == 3
    assert store.alarm_triggered == 2
    stats = store.stats()
    assert (stats.total, stats.red_signals, stats.alarms) == (4, 3, 2)


def test_corrupt_file_yields_empty_store(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")

    store = DetectionHistory(path)

    assert store.history() == []
    store.record(_result(SignalState.RED, 50.0))
    assert len(json.loads(path.read_text(encoding="utf-8"))) == 1


def test_record_before_read_keeps_existing_entries(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    DetectionHistory(path).record(_result(SignalState.RED, 50.0, 0))

    store = DetectionHistory(path)
    store.record(_result(SignalState.GREEN, 500.0, 1))

    assert store.total_detections == 2


def test_legacy_tags_are_loaded(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps(
            [
                {
                    "signalState": "SignalState.red",
                    "confidence": 0.98,
                    "distance": 40.0,
                    "boundingBox": None,
                    "timestamp": "2024-05-01T08:00:00+00:00",
                }
            ]
        ),
        encoding="utf-8",
    )

    store = DetectionHistory(path)

    assert store.history()[0].signal_state is SignalState.RED
    assert store.alarm_triggered == 1


def test_clear_empties_store_and_file(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    store = DetectionHistory(path)
    store.record(_result(SignalState.RED, 50.0))

    store.clear()

    assert store.history() == []
    assert json.loads(path.read_text(encoding="utf-8")) == []
    assert DetectionHistory(path).total_detections == 0


def test_write_failure_is_logged_and_memory_kept(tmp_path: Path, monkeypatch) -> None:
    errors: list[str] = []
    store = DetectionHistory(tmp_path / "history.json")

    def _fail(records) -> None:
        raise PersistenceFailure("disk full")

    monkeypatch.setattr(store, "_write", _fail)
    monkeypatch.setattr(history_module.logger, "error", lambda msg, *args: errors.append(msg % args))

    assert store.record(_result(SignalState.RED, 50.0))
    assert store.total_detections == 1
    assert errors == ["[HISTORY] disk full"]


def test_invalid_capacity_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        DetectionHistory(tmp_path / "history.json", capacity=0)


def test_history_path_from_config(tmp_path: Path) -> None:
    config = {"var_dir": str(tmp_path), "history": {"file": "log.json"}}

    assert history_path_from_config(config) == tmp_path / "log.json"
    assert history_path_from_config({"var_dir": str(tmp_path)}) == tmp_path / "detection_history.json"


@pytest.mark.parametrize("payload", ["[null]", "[1, 2]", '["x"]', "[[1]]", '[{"signalState": "red"}]'])
def test_non_record_entries_yield_empty_store(tmp_path: Path, payload: str) -> None:
    path = tmp_path / "history.json"
    path.write_text(payload, encoding="utf-8")

    store = DetectionHistory(path)

    assert store.history() == []
    assert store.record(_result(SignalState.RED, 50.0))
    assert len(json.loads(path.read_text(encoding="utf-8"))) == 1


def test_from_dict_rejects_non_mapping_records() -> None:
    with pytest.raises(TypeError):
        DetectionResult.from_dict(None)
    with pytest.raises(TypeError):
        DetectionResult.from_dict(
            {
                "signalState": "red",
                "confidence": 0.9,
                "distance": 40.0,
                "boundingBox": [1, 2, 3, 4],
                "timestamp": "2024-05-01T08:00:00+00:00",
            }
        )
