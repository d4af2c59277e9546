"""Runtime services for the signal guard pipeline."""

from services.alarm_controller import AlarmController, AlarmEdge, AlarmSettings, AlarmState
from services.alert_effects import AlertEffectLoop
from services.detection_pipeline import DetectionPipeline

__all__ = [
    "AlarmController",
    "AlarmEdge",
    "AlarmSettings",
    "AlarmState",
    "AlertEffectLoop",
    "DetectionPipeline",
]
