"""
Block Reduction
===============

Box-filter downsampling of square frames by an integer factor.

unit = original_size // target_size. Each output pixel is the
truncated mean of a unit x unit block. When original_size is not a
multiple of target_size the trailing rows and columns past
target_size * unit are left out of the reduction.
"""

import logging

import numpy as np

from drift_stack.errors import GeometryMismatchError


logger = logging.getLogger(__name__)


def shrink(
    frame: np.ndarray,
    target_size: int,
    strict: bool = False,
) -> np.ndarray:
    """
    Downsample a square frame to target_size x target_size.
    
    Args:
        frame: Square 2D frame with non-negative integer pixels
        target_size: Side of the output frame
        strict: Raise instead of clipping when the sizes do not divide
        
    Returns:
        Reduced frame (target_size, target_size), same dtype as input
        
    Raises:
        GeometryMismatchError: If the frame is not square, the target is
            not in [1, original_size], or strict and sizes do not divide
    """
    if frame.ndim != 2 or frame.shape[0] != frame.shape[1]:
        raise GeometryMismatchError(f"shrink needs a square frame, got {frame.shape}")
    
    original_size = frame.shape[0]
    if not 1 <= target_size <= original_size:
        raise GeometryMismatchError(
            f"Cannot shrink a {original_size}x{original_size} frame to "
            f"{target_size}x{target_size}"
        )
    
    unit = original_size // target_size
    used = target_size * unit
    
    if used != original_size:
        if strict:
            raise GeometryMismatchError(
                f"{original_size} is not a multiple of {target_size}"
            )
        logger.debug(
            f"shrink {original_size}->{target_size}: "
            f"dropping {original_size - used} trailing rows/columns"
        )
    
    blocks = frame[:used, :used].astype(np.int64)
    sums = blocks.reshape(target_size, unit, target_size, unit).sum(axis=(1, 3))
    
    return (sums // (unit * unit)).astype(frame.dtype)
