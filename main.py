"""Command-line entry point for the red signal detector."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from config import ConfigController
from core.app import AppConfig, run
from core.errors import CalibrationMissing
from core.logging import enable_file_logging, log_error, logger, set_level


EXIT_CALIBRATION = 2


def configure_logging(level_name: str) -> None:
    """Configure application logging."""

    level = logging._nameToLevel.get(level_name.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    set_level(level_name)


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Raw command-line arguments.

    Returns:
        Parsed arguments namespace.
    """

    parser = argparse.ArgumentParser(
        description="Detect red railway signals in images and raise the alarm."
    )
    parser.add_argument(
        "--image",
        dest="images",
        action="append",
        type=Path,
        default=[],
        help="Image to analyze; may be given several times.",
    )
    parser.add_argument(
        "--detector",
        choices=("scan", "hue"),
        help="Override the configured detector.",
    )
    parser.add_argument(
        "--show-history",
        action="store_true",
        help="Print the detection history and counters.",
    )
    parser.add_argument(
        "--alarms-only",
        action="store_true",
        help="With --show-history, list only alarm events.",
    )
    parser.add_argument(
        "--clear-history",
        action="store_true",
        help="Delete all recorded detections.",
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Run diagnostics probes and exit.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Application entry point.

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Process exit code.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = parse_args(argv)
    config = ConfigController.get_instance().get_config()
    configure_logging(config.get("logging_level", "INFO"))

    if args.diagnostics:
        from config.diagnostics import probe as config_probe
        from core.diagnostics import probe as core_probe
        from diagnostics.runner import format_results, run_diagnostics
        from storage.diagnostics import probe as storage_probe
        from vision.diagnostics import probe as vision_probe

        results = run_diagnostics([config_probe, core_probe, vision_probe, storage_probe])
        print(format_results(results))
        return 1 if any(result.status.blocks_startup for result in results) else 0

    if config.get("file_logging_enabled", True):
        log_file_path = Path(config.get("log_dir", "./log/")).expanduser() / "signal_guard.log"
        enable_file_logging(log_file_path)
        logger.info("Writing logs to %s", log_file_path)

    app_config = AppConfig(
        images=list(args.images),
        detector_mode=args.detector,
        show_history=args.show_history,
        alarms_only=args.alarms_only,
        clear_history=args.clear_history,
    )

    try:
        return run(app_config, config)
    except CalibrationMissing as exc:
        log_error(f"Refusing to start: {exc}")
        return EXIT_CALIBRATION
    except KeyboardInterrupt:
        logger.info("Program terminated by user")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
