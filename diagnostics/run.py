"""Command-line entry point for running diagnostics."""

from __future__ import annotations

import argparse
from pathlib import Path
import tempfile

import yaml

from config.diagnostics import probe as config_probe
from core.diagnostics import probe as core_probe
from diagnostics.runner import format_results, run_diagnostics
from storage.diagnostics import probe as storage_probe
from vision.diagnostics import probe as vision_probe


OFFLINE_CALIBRATION = {
    "critical_distance_m": 100.0,
    "min_diameter_m": 0.02,
    "reference_height_m": 0.15,
    "focal_length_px": 1000.0,
    "history_capacity": 1000,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""

    parser = argparse.ArgumentParser(description="Run diagnostics probes.")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Run probes against a temporary offline directory.",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=None,
        help="Optional base directory for offline diagnostics.",
    )
    return parser.parse_args(argv)


def _probes_for(base_dir: Path | None) -> list:
    def config_probe_with_base():
        return config_probe(base_dir=base_dir)

    def core_probe_live():
        return core_probe()

    def vision_probe_live():
        return vision_probe()

    def storage_probe_with_base():
        return storage_probe(base_dir=base_dir)

    return [config_probe_with_base, core_probe_live, vision_probe_live, storage_probe_with_base]


def main(argv: list[str] | None = None) -> int:
    """Run diagnostics and return an exit code."""

    args = parse_args(argv)
    base_dir = args.base_dir

    if args.offline and base_dir is None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            tmp_base = Path(tmp_dir)
            config_dir = tmp_base / "config"
            config_dir.mkdir(parents=True, exist_ok=True)
            (config_dir / "default.yaml").write_text(
                yaml.safe_dump({"calibration": OFFLINE_CALIBRATION}),
                encoding="utf-8",
            )
            results = run_diagnostics(_probes_for(tmp_base))
    else:
        results = run_diagnostics(_probes_for(base_dir))

    print(format_results(results))

    has_failures = any(result.status.blocks_startup for result in results)
    return 1 if has_failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
