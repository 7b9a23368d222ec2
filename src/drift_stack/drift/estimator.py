"""
Drift Estimator
===============

Measures per-frame drift of the brightest feature against frame 0.

The first frame of a stack is the reference; its peak position p0 is
kept for the whole run. Each later frame i contributes the record
(i, x_i - x0, y_i - y0) if both components are strictly inside the
stability bound. Frames outside it are dropped from the record list,
so any mean driven by these records leaves them out as well.

Example:
    estimator = DriftEstimator(stability_bound=100)
    
    for frame in source.iter_frames():
        record = estimator.update(frame)
        if record is not None:
            records.append(record)
    
    print(f"Excluded: {estimator.excluded_count}")
"""

import logging
from typing import Iterable, List, Optional, Tuple

import numpy as np

from drift_stack.drift.peak import find_peak
from drift_stack.models.drift import DriftRecord


logger = logging.getLogger(__name__)


DEFAULT_STABILITY_BOUND = 100


class DriftEstimator:
    """
    Streaming drift estimator.
    
    Consumes frames in stack order and emits a DriftRecord for every
    stable frame after the reference.
    
    Attributes:
        stability_bound: Drifts with |dx| or |dy| >= this are rejected
        include_reference: Emit (0, 0, 0) for the reference frame
    """
    
    def __init__(
        self,
        stability_bound: int = DEFAULT_STABILITY_BOUND,
        include_reference: bool = False,
        log_every_n_frames: int = 500,
    ) -> None:
        """
        Initialize the estimator.
        
        Args:
            stability_bound: Exclusive bound on |dx| and |dy| in pixels
            include_reference: Also emit a zero record for frame 0, so a
                record-driven mean includes the reference frame
            log_every_n_frames: Progress log interval
        """
        if stability_bound < 1:
            raise ValueError("stability_bound must be >= 1")
        if log_every_n_frames < 1:
            raise ValueError("log_every_n_frames must be >= 1")

        self.stability_bound = stability_bound
        self.include_reference = include_reference
        self.log_every_n_frames = log_every_n_frames
        
        # Internal state
        self._reference_peak: Optional[Tuple[int, int]] = None
        self._frame_count: int = 0
        self._excluded_count: int = 0
        self._record_count: int = 0
        
        logger.info(
            f"DriftEstimator initialized: stability_bound={stability_bound}, "
            f"include_reference={include_reference}"
        )
    
    def update(self, frame: np.ndarray) -> Optional[DriftRecord]:
        """
        Process the next frame of the stack.
        
        Args:
            frame: Frame (height, width) at index frame_count
            
        Returns:
            DriftRecord for a stable frame, None for the reference
            frame (unless include_reference) and for rejected frames
        """
        index = self._frame_count
        self._frame_count += 1
        
        x, y = find_peak(frame)
        
        if self._reference_peak is None:
            self._reference_peak = (x, y)
            logger.info(f"Reference peak (frame {index}): x={x}, y={y}")
            if self.include_reference:
                self._record_count += 1
                return DriftRecord(frame_index=index, dx=0, dy=0)
            return None
        
        dx = x - self._reference_peak[0]
        dy = y - self._reference_peak[1]
        
        if self._frame_count % self.log_every_n_frames == 0:
            logger.info(
                f"DriftEstimator [frame {index}]: "
                f"records={self._record_count}, excluded={self._excluded_count}"
            )
        
        if abs(dx) < self.stability_bound and abs(dy) < self.stability_bound:
            logger.debug(f"Frame {index}: dx={dx:+d}, dy={dy:+d}")
            self._record_count += 1
            return DriftRecord(frame_index=index, dx=dx, dy=dy)
        
        logger.debug(
            f"Frame {index}: drift ({dx:+d}, {dy:+d}) exceeds bound "
            f"{self.stability_bound}, excluded"
        )
        self._excluded_count += 1
        return None

    def run(self, frames: Iterable[np.ndarray]) -> List[DriftRecord]:
        """
        Feed a whole stack through update() and collect the records.

        Args:
            frames: Frames in stack order; the first is the reference

        Returns:
            Records ordered by frame index, with gaps at rejected frames
        """
        records = []
        for frame in frames:
            record = self.update(frame)
            if record is not None:
                records.append(record)

        logger.info(
            f"Drift estimation done: {self._frame_count} frames, "
            f"{len(records)} records, {self._excluded_count} excluded"
        )
        return records

    def reset(self) -> None:
        """Forget the reference frame and counters."""
        self._reference_peak = None
        self._frame_count = 0
        self._excluded_count = 0
        self._record_count = 0
        logger.info("DriftEstimator reset")
    
    @property
    def reference_peak(self) -> Optional[Tuple[int, int]]:
        """Peak (x, y) of the reference frame, once seen."""
        return self._reference_peak
    
    @property
    def frame_count(self) -> int:
        """Number of frames processed, reference included."""
        return self._frame_count
    
    @property
    def excluded_count(self) -> int:
        """Number of frames rejected by the stability bound."""
        return self._excluded_count
    
    def get_metrics(self) -> dict:
        """Get estimator metrics for observability."""
        return {
            "frame_count": self._frame_count,
            "record_count": self._record_count,
            "excluded_count": self._excluded_count,
            "reference_peak": self._reference_peak,
            "stability_bound": self.stability_bound,
        }


def estimate_drifts(
    frames: Iterable[np.ndarray],
    stability_bound: int = DEFAULT_STABILITY_BOUND,
    include_reference: bool = False,
) -> List[DriftRecord]:
    """
    Estimate drift records for a whole stack.
    
    Args:
        frames: Frames in stack order; the first is the reference
        stability_bound: Exclusive bound on |dx| and |dy|
        include_reference: Emit (0, 0, 0) for the reference frame
        
    Returns:
        Records ordered by frame index, with gaps at rejected frames.
        An empty stack yields an empty list.
    """
    estimator = DriftEstimator(
        stability_bound=stability_bound,
        include_reference=include_reference,
    )
    return estimator.run(frames)
