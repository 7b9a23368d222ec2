"""
Shift Accumulator
=================

Drift-compensated averaging of a frame stack (shift-and-sum).

Each contributing frame is translated by its drift record and added to
a float64 running sum. Pixels that land outside the frame after the
shift are dropped. When the stack is exhausted the sum is divided by
the number of contributing frames.

Edge Approximation:
    Every cell is divided by the same global count, even though cells
    near the border receive fewer frames once shifts push pixels out.
    Border cells of a drifting stack are therefore biased low. No
    per-pixel coverage count is kept.

Record Walk:
    Source frames are visited in order while a cursor walks the record
    list in lock-step. A frame contributes only when the record under
    the cursor names its index; otherwise it is skipped and the cursor
    stays put. Records must be strictly increasing in frame index.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from drift_stack.errors import DriftRecordError, EmptyAccumulationError
from drift_stack.models.drift import DriftRecord
from drift_stack.stream.frame import FrameGeometry


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AccumulatorState:
    """
    Running sum of shifted frames.
    
    Owned by a single accumulation pass; never shared.
    
    Attributes:
        total: Float64 sum grid (height, width)
        count: Frames added so far
    """
    
    total: np.ndarray
    count: int = 0
    
    @classmethod
    def empty(cls, geometry: FrameGeometry) -> "AccumulatorState":
        """Create a zeroed accumulator for the given frame size."""
        return cls(total=np.zeros(geometry.shape, dtype=np.float64), count=0)
    
    def __repr__(self) -> str:
        h, w = self.total.shape
        return f"AccumulatorState({w}x{h}, count={self.count})"


def _overlap(shift: int, size: int) -> Optional[Tuple[slice, slice]]:
    """
    Source and destination slices for a 1D integer shift.
    
    Source index s maps to s + shift; only indices landing in
    [0, size) are kept. Returns None when nothing overlaps.
    """
    start = max(0, -shift)
    stop = min(size, size - shift)
    if start >= stop:
        return None
    return slice(start, stop), slice(start + shift, stop + shift)


def shift_add(
    state: AccumulatorState,
    frame: np.ndarray,
    dx: int,
    dy: int,
) -> AccumulatorState:
    """
    Add one frame, shifted by (dx, dy), to the running sum.
    
    Source pixel (x, y) is added to cell (x + dx, y + dy) when that cell
    is inside the frame. The count is incremented even if the shift
    moves the whole frame out of bounds.
    
    Args:
        state: Accumulator to update (modified in place)
        frame: Frame (height, width) matching the accumulator
        dx: Horizontal shift in pixels
        dy: Vertical shift in pixels
        
    Returns:
        The same state, for chaining
        
    Raises:
        ValueError: If the frame shape differs from the accumulator
    """
    if frame.shape != state.total.shape:
        raise ValueError(
            f"Frame shape {frame.shape} does not match accumulator "
            f"{state.total.shape}"
        )
    
    height, width = frame.shape
    rows = _overlap(dy, height)
    cols = _overlap(dx, width)
    
    if rows is not None and cols is not None:
        src_rows, dst_rows = rows
        src_cols, dst_cols = cols
        state.total[dst_rows, dst_cols] += frame[src_rows, src_cols]
    
    state.count += 1
    return state


def finalize(state: AccumulatorState) -> np.ndarray:
    """
    Turn the running sum into the mean image.
    
    Returns:
        Float64 mean (height, width)
        
    Raises:
        EmptyAccumulationError: If no frame contributed
    """
    if state.count == 0:
        raise EmptyAccumulationError(
            "No frames contributed to the mean; check the drift records "
            "against the stack"
        )
    return state.total / state.count


def _check_order(records: Sequence[DriftRecord]) -> None:
    for prev, curr in zip(records, records[1:]):
        if curr.frame_index <= prev.frame_index:
            raise DriftRecordError(
                f"Drift records must be strictly increasing in frame index: "
                f"{prev.frame_index} followed by {curr.frame_index}"
            )


class ShiftAccumulator:
    """
    Shift-and-sum pass over a frame stream.
    
    Attributes:
        geometry: Frame dimensions
        
    Example:
        accumulator = ShiftAccumulator(FrameGeometry(2048, 2048))
        mean, count = accumulator.run(source.iter_frames(), records)
        print(accumulator.get_metrics())
    """
    
    def __init__(self, geometry: FrameGeometry) -> None:
        self.geometry = geometry
        
        self._frames_seen: int = 0
        self._skipped_count: int = 0
        self._unmatched_records: int = 0
        self._contributing: int = 0
    
    def run(
        self,
        frames: Iterable[np.ndarray],
        drift_records: Sequence[DriftRecord],
    ) -> Tuple[np.ndarray, int]:
        """
        Accumulate the frames named by the drift records.
        
        Iteration stops as soon as every record has been consumed;
        frames after the last record are never read.
        
        Args:
            frames: Frames in stack order, starting at index 0
            drift_records: Records sorted by strictly increasing frame index
            
        Returns:
            Tuple of (mean image as float64, contributing frame count)
            
        Raises:
            DriftRecordError: If the records are not strictly increasing
            EmptyAccumulationError: If no frame matched a record
        """
        _check_order(drift_records)
        
        state = AccumulatorState.empty(self.geometry)
        cursor = 0
        frames_seen = 0
        skipped = 0
        
        for index, frame in enumerate(frames):
            if cursor >= len(drift_records):
                break
            frames_seen += 1
            
            record = drift_records[cursor]
            if record.frame_index != index:
                skipped += 1
                continue
            
            self.geometry.check(frame)
            shift_add(state, frame, record.dx, record.dy)
            cursor += 1
        
        self._frames_seen = frames_seen
        self._skipped_count = skipped
        self._unmatched_records = len(drift_records) - cursor
        self._contributing = state.count
        
        if self._unmatched_records:
            logger.warning(
                f"{self._unmatched_records} drift records reference frames "
                f"beyond the stack (first: frame {drift_records[cursor].frame_index})"
            )
        
        logger.info(
            f"Accumulation done: {state.count} contributing, "
            f"{skipped} skipped, {frames_seen} frames read"
        )
        
        return finalize(state), state.count
    
    @property
    def skipped_count(self) -> int:
        """Frames read but not named by any record."""
        return self._skipped_count
    
    @property
    def unmatched_records(self) -> int:
        """Records left over when the frame stream ended."""
        return self._unmatched_records
    
    def get_metrics(self) -> dict:
        """Get accumulation metrics for observability."""
        return {
            "frames_seen": self._frames_seen,
            "contributing": self._contributing,
            "skipped_count": self._skipped_count,
            "unmatched_records": self._unmatched_records,
        }


def accumulate(
    frames: Iterable[np.ndarray],
    width: int,
    height: int,
    drift_records: Sequence[DriftRecord],
) -> Tuple[np.ndarray, int]:
    """
    Drift-compensated mean of a frame stream.
    
    Args:
        frames: Frames in stack order
        width: Frame width
        height: Frame height
        drift_records: Strictly increasing records; only frames they
            name contribute
            
    Returns:
        Tuple of (mean image as float64, contributing frame count)
    """
    accumulator = ShiftAccumulator(FrameGeometry(width=width, height=height))
    return accumulator.run(frames, drift_records)
