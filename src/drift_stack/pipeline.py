"""
Processing Pipeline
===================

File-level operations behind the CLI subcommands.

Operations:
    detect_file   - Drift records for every stable frame -> <input>.drift
    mean_file     - Drift-compensated mean frame         -> <input>.sum
    select_file   - One raw frame                        -> <stem>_<index>.raw
    analyze_file  - Thresholded mask of one frame        -> <stem>_<index>.mask

Every operation finishes its computation before touching the output
path, so a failure never leaves a result file behind. Each returns a
pydantic report describing the run.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from drift_stack.analysis.threshold import (
    DEFAULT_KEEP_RATE,
    DEFAULT_RESOLUTION,
    FrameAnalyzer,
)
from drift_stack.drift.estimator import DEFAULT_STABILITY_BOUND, DriftEstimator
from drift_stack.drift.peak import find_peak
from drift_stack.errors import FrameIOError
from drift_stack.models.drift import zero_drift_records
from drift_stack.models.report import (
    AccumulationReport,
    AnalysisReport,
    DetectionReport,
    SelectionReport,
)
from drift_stack.stacking.accumulator import ShiftAccumulator
from drift_stack.stream.files import read_drift_records, write_drift_records, write_frame
from drift_stack.stream.frame import FrameGeometry
from drift_stack.stream.source import FrameSource


logger = logging.getLogger(__name__)


PathLike = Union[str, Path]


# =============================================================================
# Output Paths
# =============================================================================

def drift_output_path(path: PathLike) -> Path:
    return Path(path).with_suffix(".drift")


def mean_output_path(path: PathLike) -> Path:
    return Path(path).with_suffix(".sum")


def select_output_path(path: PathLike, index: int) -> Path:
    path = Path(path)
    return path.with_name(f"{path.stem}_{index}.raw")


def analyze_output_path(path: PathLike, index: int) -> Path:
    path = Path(path)
    return path.with_name(f"{path.stem}_{index}.mask")


def _resolve_output(source: Path, output: Optional[PathLike], default: Path) -> Path:
    target = Path(output) if output is not None else default
    if target.resolve() == source.resolve():
        raise FrameIOError(f"Output path {target} would overwrite the input stack")
    return target


# =============================================================================
# Operations
# =============================================================================

def detect_file(
    path: PathLike,
    width: int,
    height: int,
    output: Optional[PathLike] = None,
    stability_bound: int = DEFAULT_STABILITY_BOUND,
    include_reference: bool = False,
    atomic: bool = True,
) -> DetectionReport:
    """
    Detect per-frame drift and write the drift record file.
    
    Args:
        path: Frame stack file
        width: Frame width
        height: Frame height
        output: Drift record path (default <input>.drift)
        stability_bound: Exclusive bound on |dx| and |dy|
        include_reference: Also record (0, 0, 0) for frame 0
        atomic: Write through a temporary file
        
    Returns:
        DetectionReport with record and exclusion counts
    """
    path = Path(path)
    target = _resolve_output(path, output, drift_output_path(path))
    
    estimator = DriftEstimator(
        stability_bound=stability_bound,
        include_reference=include_reference,
    )
    
    with FrameSource(path, FrameGeometry(width=width, height=height)) as source:
        records = estimator.run(source.iter_frames())
        n_frames = source.n_image
    
    logger.info(
        f"Detected drift for {len(records)} of {n_frames} frames, "
        f"{estimator.excluded_count} excluded (bound {stability_bound})"
    )
    
    write_drift_records(target, records, atomic=atomic)
    
    return DetectionReport(
        n_frames=n_frames,
        n_records=len(records),
        n_excluded=estimator.excluded_count,
        reference_peak=estimator.reference_peak,
        output_path=str(target),
    )


def mean_file(
    path: PathLike,
    width: int,
    height: int,
    drift_path: Optional[PathLike] = None,
    output: Optional[PathLike] = None,
    atomic: bool = True,
) -> AccumulationReport:
    """
    Compute the drift-compensated mean frame and write it.
    
    Without a drift file every frame contributes unshifted.
    
    Args:
        path: Frame stack file
        width: Frame width
        height: Frame height
        drift_path: Drift record file produced by detect_file
        output: Mean frame path (default <input>.sum)
        atomic: Write through a temporary file
        
    Returns:
        AccumulationReport with contribution counts
        
    Raises:
        EmptyAccumulationError: If no frame matched a record
    """
    path = Path(path)
    target = _resolve_output(path, output, mean_output_path(path))
    geometry = FrameGeometry(width=width, height=height)
    
    accumulator = ShiftAccumulator(geometry)
    with FrameSource(path, geometry) as source:
        if drift_path is not None:
            records = read_drift_records(drift_path)
        else:
            logger.info("No drift file given, averaging every frame without shift")
            records = zero_drift_records(source.n_image)
        
        mean, _ = accumulator.run(source.iter_frames(), records)
        metrics = accumulator.get_metrics()
        n_frames = source.n_image
    
    write_frame(target, mean, atomic=atomic)
    
    return AccumulationReport(
        n_frames=n_frames,
        n_contributing=metrics["contributing"],
        n_skipped=n_frames - metrics["contributing"],
        n_frames_read=metrics["frames_seen"],
        n_unmatched_records=metrics["unmatched_records"],
        used_drift_file=drift_path is not None,
        output_path=str(target),
    )


def select_file(
    path: PathLike,
    width: int,
    height: int,
    index: int,
    output: Optional[PathLike] = None,
    atomic: bool = True,
) -> SelectionReport:
    """
    Extract one frame into its own file.
    
    Raises:
        FrameIndexError: If index is outside the stack
    """
    path = Path(path)
    target = _resolve_output(path, output, select_output_path(path, index))
    
    with FrameSource(path, FrameGeometry(width=width, height=height)) as source:
        frame = source.read_frame(index)
        n_frames = source.n_image
    
    peak = find_peak(frame)
    logger.info(f"Frame {index}: peak at x={peak[0]}, y={peak[1]}")
    
    write_frame(target, frame, atomic=atomic)
    
    return SelectionReport(
        index=index,
        n_frames=n_frames,
        peak=peak,
        output_path=str(target),
    )


def analyze_file(
    path: PathLike,
    width: int,
    height: int,
    index: int,
    output: Optional[PathLike] = None,
    resolution: int = DEFAULT_RESOLUTION,
    keep_rate: float = DEFAULT_KEEP_RATE,
    atomic: bool = True,
) -> AnalysisReport:
    """
    Threshold one frame into a binary mask and write it.
    
    The mask is written in frame layout (uint16, values 0 or 1) at
    the analysis resolution.
    
    Raises:
        FrameIndexError: If index is outside the stack
        GeometryMismatchError: If the frame cannot be reduced to resolution
    """
    path = Path(path)
    target = _resolve_output(path, output, analyze_output_path(path, index))
    analyzer = FrameAnalyzer(resolution=resolution, keep_rate=keep_rate)
    
    with FrameSource(path, FrameGeometry(width=width, height=height)) as source:
        frame = source.read_frame(index)
    
    result = analyzer.evaluate(frame)
    write_frame(target, result.mask, atomic=atomic)
    
    return AnalysisReport(
        index=index,
        resolution=resolution,
        threshold=result.threshold,
        signal_pixels=result.signal_pixels,
        output_path=str(target),
    )
