"""
DriftStack Command Line
=======================

Entry point for the drift-stack console script.

Usage:
    drift-stack detect run.raw -x 2048 -y 2048
    drift-stack mean run.raw --drift run.drift
    drift-stack select run.raw 10 -o frame10.raw
    drift-stack analyze run.raw 10 --resolution 512 --keep-rate 0.01

Frame size defaults come from the configuration (drift_stack.yaml,
config.yaml or DRIFT_STACK_* environment variables).
"""

import argparse
import logging
import sys
from typing import List, Optional

import yaml
from pydantic import ValidationError

from drift_stack import __version__
from drift_stack.config import Settings, load_config, setup_logging
from drift_stack.errors import DriftStackError
from drift_stack.pipeline import analyze_file, detect_file, mean_file, select_file


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="drift-stack",
        description="Drift detection and drift-compensated averaging of raw frame stacks",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override the configured log level (DEBUG, INFO, ...)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run report as JSON on stdout",
    )
    
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("path", type=str, help="Raw frame stack file")
    common.add_argument(
        "-x", "--xsize",
        type=int,
        default=None,
        help="Frame width in pixels (default: frames.width)",
    )
    common.add_argument(
        "-y", "--ysize",
        type=int,
        default=None,
        help="Frame height in pixels (default: frames.height)",
    )
    common.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output path (default derived from the input path)",
    )
    
    subparsers = parser.add_subparsers(dest="command", required=True)
    
    detect = subparsers.add_parser(
        "detect",
        parents=[common],
        help="Detect per-frame drift and write <input>.drift",
    )
    detect.add_argument(
        "--bound",
        type=int,
        default=None,
        help="Stability bound in pixels (default: drift.stability_bound)",
    )
    detect.add_argument(
        "--include-reference",
        action="store_true",
        default=None,
        help="Also record zero drift for frame 0",
    )
    
    mean = subparsers.add_parser(
        "mean",
        parents=[common],
        help="Drift-compensated mean frame, written to <input>.sum",
    )
    mean.add_argument(
        "-d", "--drift",
        type=str,
        default=None,
        help="Drift record file (default: every frame, zero drift)",
    )
    
    select = subparsers.add_parser(
        "select",
        parents=[common],
        help="Extract one frame",
    )
    select.add_argument("index", type=int, help="Zero-based frame index")
    
    analyze = subparsers.add_parser(
        "analyze",
        parents=[common],
        help="Threshold one frame into a binary mask",
    )
    analyze.add_argument("index", type=int, help="Zero-based frame index")
    analyze.add_argument(
        "--resolution",
        type=int,
        default=None,
        help="Analysis resolution (default: analysis.resolution)",
    )
    analyze.add_argument(
        "--keep-rate",
        type=float,
        default=None,
        help="Fraction of pixels kept as signal (default: analysis.keep_rate)",
    )
    
    return parser


def run_command(args: argparse.Namespace, settings: Settings):
    """Dispatch a parsed command and return its report."""
    width = args.xsize if args.xsize is not None else settings.frames.width
    height = args.ysize if args.ysize is not None else settings.frames.height
    atomic = settings.output.atomic_writes
    
    if args.command == "detect":
        bound = args.bound if args.bound is not None else settings.drift.stability_bound
        include_reference = (
            args.include_reference
            if args.include_reference is not None
            else settings.drift.include_reference
        )
        return detect_file(
            args.path,
            width,
            height,
            output=args.output,
            stability_bound=bound,
            include_reference=include_reference,
            atomic=atomic,
        )
    
    if args.command == "mean":
        return mean_file(
            args.path,
            width,
            height,
            drift_path=args.drift,
            output=args.output,
            atomic=atomic,
        )
    
    if args.command == "select":
        return select_file(
            args.path,
            width,
            height,
            args.index,
            output=args.output,
            atomic=atomic,
        )
    
    if args.command == "analyze":
        resolution = (
            args.resolution if args.resolution is not None else settings.analysis.resolution
        )
        keep_rate = (
            args.keep_rate if args.keep_rate is not None else settings.analysis.keep_rate
        )
        return analyze_file(
            args.path,
            width,
            height,
            args.index,
            output=args.output,
            resolution=resolution,
            keep_rate=keep_rate,
            atomic=atomic,
        )
    
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    
    try:
        settings = load_config(args.config)
    except (FileNotFoundError, ValidationError, ValueError, yaml.YAMLError) as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Invalid configuration: {e}")
        return 2
    
    if args.log_level:
        settings = settings.model_copy(deep=True)
        settings.logging.level = args.log_level
    setup_logging(settings)
    
    try:
        report = run_command(args, settings)
    except DriftStackError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except ValueError as e:
        logger.error(f"{args.command}: invalid argument: {e}")
        return 2
    
    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        logger.info(f"{args.command} finished: {report.model_dump(exclude_none=True)}")
    
    return 0


if __name__ == "__main__":
    sys.exit(main())
