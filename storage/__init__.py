"""Storage package utilities."""

__all__ = ["DetectionHistory", "probe"]


def __getattr__(name: str):
    if name == "DetectionHistory":
        from storage.history import DetectionHistory

        return DetectionHistory
    if name == "probe":
        from storage.diagnostics import probe

        return probe
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
