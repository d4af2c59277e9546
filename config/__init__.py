"""Configuration package utilities."""

__all__ = ["Calibration", "ConfigController"]


def __getattr__(name: str):
    if name == "ConfigController":
        from config.controller import ConfigController

        return ConfigController
    if name == "Calibration":
        from config.calibration import Calibration

        return Calibration
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
