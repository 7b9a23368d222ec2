"""
Analysis Module
===============

Coarse inspection of single frames.

This module provides:
    - shrink: Integer-factor block-mean downsampling
    - compute_threshold / threshold_mask: Percentile cut and mask
    - FrameAnalyzer / analyze: Shrink + threshold in one step
"""

from drift_stack.analysis.reduce import shrink
from drift_stack.analysis.threshold import (
    DEFAULT_KEEP_RATE,
    DEFAULT_RESOLUTION,
    AnalysisResult,
    FrameAnalyzer,
    analyze,
    compute_threshold,
    threshold_mask,
)

__all__ = [
    "shrink",
    "DEFAULT_KEEP_RATE",
    "DEFAULT_RESOLUTION",
    "AnalysisResult",
    "FrameAnalyzer",
    "analyze",
    "compute_threshold",
    "threshold_mask",
]
