"""
Frame Analysis
==============

Percentile thresholding of a reduced frame into a binary signal mask.

Steps:
    1. Shrink the frame to the analysis resolution (block mean)
    2. Sort the reduced pixel values
    3. threshold = sorted[n - floor(keep_rate * n)], clamped to the
       last element so at least one pixel survives
    4. mask = reduced >= threshold

Pixels equal to the threshold are all kept, so a flat image can yield
more than keep_rate of the pixels as signal.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from drift_stack.analysis.reduce import shrink


logger = logging.getLogger(__name__)


DEFAULT_RESOLUTION = 512
DEFAULT_KEEP_RATE = 0.01


def compute_threshold(values: np.ndarray, keep_rate: float) -> int:
    """
    Pixel value at the top keep_rate percentile cut.
    
    Args:
        values: Pixel values (any shape)
        keep_rate: Fraction of pixels to keep as signal, in (0, 1]
        
    Returns:
        Threshold value; pixels >= it are signal
    """
    if not 0 < keep_rate <= 1:
        raise ValueError("keep_rate must be in (0, 1]")
    if values.size == 0:
        raise ValueError("Cannot threshold an empty image")
    
    ordered = np.sort(values, axis=None)
    n = ordered.size
    # keep_rate * n can land just under an integer (0.29 * 100)
    keep = math.floor(keep_rate * n + 1e-9)
    rank = min(n - keep, n - 1)
    
    return int(ordered[rank])


def threshold_mask(image: np.ndarray, threshold: int) -> np.ndarray:
    """Binary mask (uint8, 0 or 1) of pixels at or above threshold."""
    return (image >= threshold).astype(np.uint8)


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """
    Output of one frame analysis.
    
    Attributes:
        reduced: Frame after block reduction
        threshold: Percentile cut applied to the reduced frame
        mask: 1 where reduced >= threshold, else 0
    """
    
    reduced: np.ndarray
    threshold: int
    mask: np.ndarray
    
    @property
    def signal_pixels(self) -> int:
        return int(self.mask.sum())
    
    def __repr__(self) -> str:
        return (
            f"AnalysisResult({self.mask.shape[1]}x{self.mask.shape[0]}, "
            f"threshold={self.threshold}, signal={self.signal_pixels})"
        )


class FrameAnalyzer:
    """
    Thresholded single-frame inspection.
    
    Attributes:
        resolution: Side of the reduced analysis image
        keep_rate: Fraction of reduced pixels kept as signal
        
    Example:
        analyzer = FrameAnalyzer(resolution=512, keep_rate=0.01)
        mask = analyzer.analyze(frame)
    """
    
    def __init__(
        self,
        resolution: int = DEFAULT_RESOLUTION,
        keep_rate: float = DEFAULT_KEEP_RATE,
    ) -> None:
        if resolution < 1:
            raise ValueError("resolution must be >= 1")
        if not 0 < keep_rate <= 1:
            raise ValueError("keep_rate must be in (0, 1]")
        
        self.resolution = resolution
        self.keep_rate = keep_rate
    
    def evaluate(self, frame: np.ndarray) -> AnalysisResult:
        """
        Reduce, threshold and mask a frame.
        
        Raises:
            GeometryMismatchError: If the frame cannot be reduced to
                the analysis resolution
        """
        reduced = shrink(frame, self.resolution)
        threshold = compute_threshold(reduced, self.keep_rate)
        mask = threshold_mask(reduced, threshold)
        
        result = AnalysisResult(reduced=reduced, threshold=threshold, mask=mask)
        logger.info(
            f"Analysis at {self.resolution}x{self.resolution}: "
            f"threshold={threshold}, signal={result.signal_pixels} px"
        )
        return result
    
    def analyze(self, frame: np.ndarray) -> np.ndarray:
        """Binary signal mask of the reduced frame."""
        return self.evaluate(frame).mask


def analyze(
    frame: np.ndarray,
    resolution: int = DEFAULT_RESOLUTION,
    keep_rate: float = DEFAULT_KEEP_RATE,
) -> np.ndarray:
    """Binary signal mask of a frame at the given analysis resolution."""
    return FrameAnalyzer(resolution=resolution, keep_rate=keep_rate).analyze(frame)
