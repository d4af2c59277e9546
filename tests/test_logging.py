"""Tests for the shared logging helpers."""

from __future__ import annotations

import logging

from core import logging as core_logging
from vision.detections import BoundingBox, DetectionResult, SignalState, unknown_result


def test_log_detection_styles_known_states(monkeypatch) -> None:
    messages: list = []
    monkeypatch.setattr(core_logging.logger, "info", lambda message, *args: messages.append(message))

    core_logging.log_detection(
        DetectionResult(SignalState.RED, 0.98, 10.0, bounding_box=BoundingBox(235, 185, 90, 90))
    )
    core_logging.log_detection(unknown_result())

    assert len(messages) == 1
    assert "RED signal conf=0.98 dist=10.0m at (235,185) 90x90px" in messages[0].plain
    assert messages[0].style == "bold red"


def test_set_level(monkeypatch) -> None:
    monkeypatch.setattr(core_logging.logger, "level", core_logging.logger.level)

    core_logging.set_level("debug")
    assert core_logging.logger.level == logging.DEBUG
    core_logging.set_level("nonsense")
    assert core_logging.logger.level == logging.INFO


def test_styled_helpers(monkeypatch) -> None:
    captured: list = []
    monkeypatch.setattr(core_logging.logger, "info", lambda message, *args: captured.append(message))
    monkeypatch.setattr(core_logging.logger, "error", lambda message, *args: captured.append(message))

    core_logging.log_info("cleared", style="bold green")
    core_logging.log_error("Refusing to start")

    assert [(text.plain, text.style) for text in captured] == [
        ("cleared", "bold green"),
        ("Refusing to start", "bold red"),
    ]
