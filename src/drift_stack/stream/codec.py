"""
Binary Codec
============

Dedicated module for converting between raw bytes and numpy arrays.

Formats:
    Frame:        width * height little-endian uint16, row-major, no header
    Drift record: 3 little-endian int16 (frame_index, dx, dy), no header

Design Rules:
    - This is the ONLY place in the codebase that interprets raw bytes
    - Trailing bytes that do not form a whole record are ignored
    - Float images are truncated (not rounded) when stored as pixels
"""

import logging
from typing import List, Sequence

import numpy as np

from drift_stack.errors import DriftRecordError, FrameIOError
from drift_stack.models.drift import DriftRecord
from drift_stack.stream.frame import FrameGeometry


logger = logging.getLogger(__name__)


PIXEL_DTYPE = np.dtype("<u2")
RECORD_DTYPE = np.dtype("<i2")
RECORD_FIELDS = 3
RECORD_BYTES = RECORD_FIELDS * RECORD_DTYPE.itemsize

PIXEL_MAX = np.iinfo(np.uint16).max
RECORD_MIN = int(np.iinfo(np.int16).min)
RECORD_MAX = int(np.iinfo(np.int16).max)


def decode_frame(data: bytes, geometry: FrameGeometry) -> np.ndarray:
    """
    Decode one raw frame.
    
    Args:
        data: Exactly geometry.frame_bytes bytes
        geometry: Frame dimensions
        
    Returns:
        Frame as np.ndarray (height, width), dtype=uint16 (native order)
        
    Raises:
        FrameIOError: If the buffer is shorter or longer than one frame
    """
    if len(data) != geometry.frame_bytes:
        raise FrameIOError(
            f"Expected {geometry.frame_bytes} bytes for a {geometry.width}x"
            f"{geometry.height} frame, got {len(data)}"
        )
    
    frame = np.frombuffer(data, dtype=PIXEL_DTYPE).reshape(geometry.shape)
    return frame.astype(np.uint16)


def encode_frame(frame: np.ndarray) -> bytes:
    """
    Encode a frame as little-endian uint16 bytes.
    
    Float input is converted with truncate_to_pixels first.
    """
    if frame.dtype.kind == "f":
        frame = truncate_to_pixels(frame)
    return np.ascontiguousarray(frame, dtype=PIXEL_DTYPE).tobytes()


def truncate_to_pixels(image: np.ndarray) -> np.ndarray:
    """
    Convert a floating-point image to uint16 pixels.
    
    Values are truncated toward zero, then clipped to [0, 65535].
    A mean of 2.9 is stored as 2.
    
    Args:
        image: Float image (any shape)
        
    Returns:
        uint16 array of the same shape
    """
    truncated = np.trunc(np.nan_to_num(image, nan=0.0))
    return np.clip(truncated, 0, PIXEL_MAX).astype(np.uint16)


def decode_drift_records(data: bytes) -> List[DriftRecord]:
    """
    Decode a drift record file.
    
    Args:
        data: Concatenated 6-byte records
        
    Returns:
        Records in file order
        
    Raises:
        DriftRecordError: If a record carries a negative frame index
    """
    n_records = len(data) // RECORD_BYTES
    if len(data) % RECORD_BYTES:
        logger.warning(
            f"Ignoring {len(data) % RECORD_BYTES} trailing bytes in drift record data"
        )
    
    raw = np.frombuffer(data[: n_records * RECORD_BYTES], dtype=RECORD_DTYPE)
    raw = raw.reshape(n_records, RECORD_FIELDS)
    
    records = []
    for frame_index, dx, dy in raw.tolist():
        if frame_index < 0:
            raise DriftRecordError(f"Negative frame index in drift records: {frame_index}")
        records.append(DriftRecord(frame_index=frame_index, dx=dx, dy=dy))
    return records


def encode_drift_records(records: Sequence[DriftRecord]) -> bytes:
    """
    Encode drift records as little-endian int16 triples.
    
    Raises:
        DriftRecordError: If any field does not fit in int16
    """
    raw = np.array(
        [record.as_tuple() for record in records],
        dtype=np.int64,
    ).reshape(-1, RECORD_FIELDS)
    
    if raw.size and (raw.min() < RECORD_MIN or raw.max() > RECORD_MAX):
        raise DriftRecordError(
            f"Drift record values must fit in int16 [{RECORD_MIN}, {RECORD_MAX}]"
        )
    
    return raw.astype(RECORD_DTYPE).tobytes()
