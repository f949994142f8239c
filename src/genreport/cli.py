# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Command line interface.

Usage:
    genreport watch --config config.json
    genreport process inbox/01-Basic.xml --config config.json
    genreport process report.xml --reference ReferenceData.xml --output-dir out/
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.primitives import GenReportSettings, IngressState, load_settings
from .exceptions import GenReportError
from .ingress import IngressGuard, ReportWatcher
from .reference import load_reference_factors

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path("config.json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genreport",
        description="Summarize generator energy-production XML reports.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    watch = subparsers.add_parser("watch", help="Watch the input folder for new reports")
    watch.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="JSON config file")

    process = subparsers.add_parser("process", help="Process a single report file")
    process.add_argument("file", type=Path, help="Generation report to process")
    process.add_argument("--config", type=Path, help="JSON config file")
    process.add_argument("--reference", type=Path, help="Reference data XML (overrides config)")
    process.add_argument("--output-dir", type=Path, help="Output folder (overrides config)")
    return parser


def _process_settings(args: argparse.Namespace) -> GenReportSettings:
    if args.config is not None:
        settings = load_settings(args.config)
    else:
        settings = GenReportSettings(
            input_folder=args.file.parent,
            output_folder=args.output_dir or args.file.parent,
        )
    overrides = {}
    if args.reference is not None:
        overrides["reference_data"] = args.reference
    if args.output_dir is not None:
        overrides["output_folder"] = args.output_dir
    return settings.model_copy(update=overrides) if overrides else settings


def run_watch(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    reference = load_reference_factors(settings.reference_data)
    print("Press Ctrl-C to quit.")
    ReportWatcher(settings, reference).run_forever()
    return 0


def run_process(args: argparse.Namespace) -> int:
    settings = _process_settings(args)
    reference = load_reference_factors(settings.reference_data)
    result = IngressGuard.from_settings(settings, reference).handle(args.file)
    if result.state != IngressState.DONE:
        print(f"{args.file}: {result.state.value} ({result.error})", file=sys.stderr)
        return 1
    print(result.output_path)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.command == "watch":
            return run_watch(args)
        return run_process(args)
    except (GenReportError, FileNotFoundError) as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
