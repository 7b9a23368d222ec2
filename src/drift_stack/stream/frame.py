"""
Frame Geometry
==============

Fixed frame dimensions shared by every frame in a stack.

Frames themselves are plain numpy arrays of shape (height, width) and
dtype uint16, row 0 first. The geometry object carries the dimensions
and the derived byte size so that readers and writers agree on layout.
"""

from dataclasses import dataclass

import numpy as np

from drift_stack.errors import GeometryMismatchError


BYTES_PER_PIXEL = 2


@dataclass(frozen=True, slots=True)
class FrameGeometry:
    """
    Dimensions of a raw frame.
    
    Attributes:
        width: Pixels per row (nx)
        height: Rows per frame (ny)
    """
    
    width: int
    height: int
    
    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise GeometryMismatchError(
                f"Frame dimensions must be positive, got {self.width}x{self.height}"
            )
    
    def __repr__(self) -> str:
        return f"FrameGeometry({self.width}x{self.height})"
    
    @property
    def shape(self) -> tuple:
        """Numpy shape (height, width)."""
        return (self.height, self.width)
    
    @property
    def n_pixels(self) -> int:
        return self.width * self.height
    
    @property
    def frame_bytes(self) -> int:
        """Size of one encoded frame in bytes."""
        return self.n_pixels * BYTES_PER_PIXEL
    
    def check(self, frame: np.ndarray) -> None:
        """
        Verify that an array matches this geometry.
        
        Raises:
            GeometryMismatchError: If the shape differs
        """
        if frame.shape != self.shape:
            raise GeometryMismatchError(
                f"Frame shape {frame.shape} does not match {self.width}x{self.height}"
            )
