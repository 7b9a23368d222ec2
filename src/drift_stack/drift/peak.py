"""
Peak Localization
=================

Locates the brightest pixel of a frame.

Ties are broken by row-major scan order: the first pixel holding the
maximum wins. An all-zero frame therefore reports (0, 0).
"""

from typing import Tuple

import numpy as np


def find_peak(frame: np.ndarray) -> Tuple[int, int]:
    """
    Find the coordinates of the maximum-intensity pixel.
    
    Args:
        frame: 2D frame (height, width)
        
    Returns:
        Tuple of (x, y): column and row of the first maximum in
        row-major order
        
    Raises:
        ValueError: If the frame is not 2D or is empty
    """
    if frame.ndim != 2:
        raise ValueError(f"Frame must be 2D, got shape {frame.shape}")
    if frame.size == 0:
        raise ValueError("Frame is empty")
    
    width = frame.shape[1]
    
    # np.argmax returns the first occurrence on the flattened (row-major) array
    flat_index = int(np.argmax(frame))
    
    return flat_index % width, flat_index // width
