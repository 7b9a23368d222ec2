"""
Drift Models
============

Data models for per-frame drift measurements.

A drift record says how far the bright feature of one frame has moved
relative to the reference frame (frame 0). Positive dx/dy mean the
feature moved right/down. Record sequences are ordered by frame index
and contain gaps where frames were rejected as unstable.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True, slots=True)
class DriftRecord:
    """
    Integer displacement of one frame relative to the reference frame.
    
    Produced by the drift estimator, consumed by the shift accumulator.
    
    Attributes:
        frame_index: Zero-based index of the frame in the stack
        dx: Horizontal displacement in pixels (positive = rightward)
        dy: Vertical displacement in pixels (positive = downward)
    """
    
    frame_index: int
    dx: int
    dy: int
    
    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.frame_index < 0:
            raise ValueError("frame_index must be non-negative")
    
    def __repr__(self) -> str:
        return f"DriftRecord(#{self.frame_index}, dx={self.dx:+d}, dy={self.dy:+d})"
    
    def as_tuple(self) -> tuple:
        """Return (frame_index, dx, dy)."""
        return (self.frame_index, self.dx, self.dy)
    
    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "frame_index": self.frame_index,
            "dx": self.dx,
            "dy": self.dy,
        }


def zero_drift_records(n_image: int) -> List[DriftRecord]:
    """
    Build a record for every frame of the stack with zero drift.
    
    Used when no drift file is supplied: every frame contributes
    to the mean without being shifted.
    
    Args:
        n_image: Number of frames in the stack
        
    Returns:
        Records (i, 0, 0) for i in [0, n_image)
    """
    if n_image < 0:
        raise ValueError("n_image must be non-negative")
    return [DriftRecord(frame_index=i, dx=0, dy=0) for i in range(n_image)]
