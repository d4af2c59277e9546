"""Interaction package utilities."""

from interaction.alert_hal import AlertOutputBackend, FakeAlertBackend, LoggingAlertBackend

__all__ = ["AlertOutputBackend", "FakeAlertBackend", "LoggingAlertBackend"]
