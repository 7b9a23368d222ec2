"""
Run Report Models
=================

Summaries returned by the file-level operations.

Reports are observability-only: they describe what a run did
(frame counts, exclusions, thresholds) and can be printed as JSON
by the CLI. Nothing downstream makes decisions from them.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, Field


class DetectionReport(BaseModel):
    """
    Summary of a drift detection run.
    
    Attributes:
        n_frames: Frames in the stack
        n_records: Drift records emitted
        n_excluded: Frames rejected by the stability bound
        reference_peak: (x, y) of the brightest pixel of frame 0
        output_path: Where the drift records were written
    """
    
    n_frames: int = Field(..., ge=0, description="Frames in the stack")
    n_records: int = Field(..., ge=0, description="Drift records emitted")
    n_excluded: int = Field(..., ge=0, description="Frames over the stability bound")
    reference_peak: Optional[Tuple[int, int]] = Field(
        default=None,
        description="Peak (x, y) of the reference frame",
    )
    output_path: Optional[str] = Field(default=None, description="Drift record file")


class AccumulationReport(BaseModel):
    """
    Summary of a drift-compensated mean run.
    
    Attributes:
        n_frames: Frames in the stack
        n_contributing: Frames added to the sum (the divisor)
        n_skipped: Frames without a matching drift record
        n_frames_read: Frames pulled from the stack before the records ran out
        n_unmatched_records: Records never consumed (index past the stack)
        used_drift_file: Whether records came from a file or were synthesized
        output_path: Where the mean frame was written
    """
    
    n_frames: int = Field(..., ge=0)
    n_contributing: int = Field(..., ge=0)
    n_skipped: int = Field(..., ge=0)
    n_frames_read: int = Field(default=0, ge=0)
    n_unmatched_records: int = Field(default=0, ge=0)
    used_drift_file: bool = Field(default=False)
    output_path: Optional[str] = Field(default=None)


class SelectionReport(BaseModel):
    """Summary of a single-frame extraction."""
    
    index: int = Field(..., ge=0)
    n_frames: int = Field(..., ge=0)
    peak: Tuple[int, int] = Field(..., description="Peak (x, y) of the frame")
    output_path: Optional[str] = Field(default=None)


class AnalysisReport(BaseModel):
    """
    Summary of a thresholded single-frame analysis.
    
    Attributes:
        index: Analyzed frame index
        resolution: Side of the reduced analysis image
        threshold: Pixel value at the percentile cut
        signal_pixels: Mask pixels set to 1
        output_path: Where the mask was written
    """
    
    index: int = Field(..., ge=0)
    resolution: int = Field(..., ge=1)
    threshold: int = Field(..., ge=0)
    signal_pixels: int = Field(..., ge=0)
    output_path: Optional[str] = Field(default=None)
