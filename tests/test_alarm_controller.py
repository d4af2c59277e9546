"""Tests for the alarm latch."""

from __future__ import annotations

from services.alarm_controller import AlarmController, AlarmEdge, AlarmSettings, AlarmState
from vision.detections import DetectionResult, SignalState, unknown_result


def _red(distance: float = 50.0, confidence: float = 0.98) -> DetectionResult:
    return DetectionResult(SignalState.RED, confidence, distance)


def _controller() -> tuple[AlarmController, list[AlarmEdge]]:
    edges: list[AlarmEdge] = []
    controller = AlarmController(AlarmSettings(critical_distance_m=100.0))
    controller.register_edge_handler(edges.append)
    return controller, edges


def test_close_red_starts_alarm_once() -> None:
    controller, edges = _controller()

    assert controller.update(_red()) is AlarmEdge.START
    assert controller.update(_red(40.0)) is None
    assert controller.state is AlarmState.ALARMING
    assert edges == [AlarmEdge.START]


def test_critical_distance_is_inclusive() -> None:
    controller, _ = _controller()

    assert controller.update(_red(100.0)) is AlarmEdge.START


def test_far_red_does_not_alarm() -> None:
    controller, edges = _controller()

    assert controller.update(_red(150.0)) is None
    assert controller.state is AlarmState.IDLE
    assert edges == []


def test_low_confidence_red_does_not_alarm() -> None:
    controller, _ = _controller()

    assert controller.update(_red(confidence=0.5)) is None
    assert not controller.is_alarming


def test_disconfirming_result_stops_alarm() -> None:
    controller, edges = _controller()

    controller.update(_red())
    assert controller.update(unknown_result()) is AlarmEdge.STOP
    assert controller.update(DetectionResult(SignalState.GREEN, 0.9, 20.0)) is None
    assert edges == [AlarmEdge.START, AlarmEdge.STOP]


def test_force_idle() -> None:
    controller, edges = _controller()

    assert controller.force_idle() is None
    controller.update(_red())
    assert controller.force_idle("stopped") is AlarmEdge.STOP
    assert controller.state is AlarmState.IDLE
    assert edges == [AlarmEdge.START, AlarmEdge.STOP]


def test_failing_handler_does_not_block_transition() -> None:
    controller, edges = _controller()

    def _boom(edge: AlarmEdge) -> None:
        raise RuntimeError("boom")

    controller.register_edge_handler(_boom)
    controller.update(_red())

    assert controller.is_alarming
    assert edges == [AlarmEdge.START]

    controller.unregister_edge_handler(_boom)
    controller.update(unknown_result())
    assert edges == [AlarmEdge.START, AlarmEdge.STOP]


def test_settings_from_config() -> None:
    settings = AlarmSettings.from_config({"alarm": {"min_confidence": 0.9}}, 75.0)

    assert settings.critical_distance_m == 75.0
    assert settings.min_confidence == 0.9
    assert settings.pulse_period_s == 0.5


def test_handlers_run_without_latch_lock() -> None:
    controller = AlarmController(AlarmSettings())
    lock_held: list[bool] = []

    def _handler(edge: AlarmEdge) -> None:
        lock_held.append(controller._lock.locked())
        if edge is AlarmEdge.START:
            controller.force_idle("handler reset")

    controller.register_edge_handler(_handler)
    controller.update(_red())

    assert lock_held == [False, False]
    assert controller.state is AlarmState.IDLE
