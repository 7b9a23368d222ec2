"""
Frame Source
============

Random-access and sequential reads from a raw frame stack file.

The number of frames is derived once, at construction, from the file
size: n_image = file_bytes // frame_bytes. A trailing partial frame is
ignored (with a warning), matching how acquisition files are cut off
when a recording is stopped mid-frame.

Example:
    geometry = FrameGeometry(width=2048, height=2048)
    
    with FrameSource("run.raw", geometry) as source:
        print(source.n_image)
        first = source.read_frame(0)
        for frame in source.iter_frames():
            process(frame)
"""

import logging
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

import numpy as np

from drift_stack.errors import FrameIndexError, FrameIOError, GeometryMismatchError
from drift_stack.stream.codec import decode_frame
from drift_stack.stream.frame import FrameGeometry


logger = logging.getLogger(__name__)


class FrameSource:
    """
    Reader for a flat file of concatenated uint16 frames.
    
    Attributes:
        path: Path of the stack file
        geometry: Dimensions shared by every frame
        n_image: Number of complete frames in the file
    """
    
    def __init__(
        self,
        path: Union[str, Path],
        geometry: FrameGeometry,
    ) -> None:
        """
        Inspect the stack file and compute its frame count.
        
        Args:
            path: Stack file path
            geometry: Frame dimensions
            
        Raises:
            FrameIOError: If the file does not exist or cannot be inspected
            GeometryMismatchError: If the file is shorter than one frame
        """
        self.path = Path(path)
        self.geometry = geometry
        self._file: Optional[BinaryIO] = None
        
        try:
            size = self.path.stat().st_size
        except OSError as e:
            raise FrameIOError(f"Cannot open frame stack {self.path}: {e}") from e
        
        self.n_image = size // geometry.frame_bytes
        remainder = size % geometry.frame_bytes
        
        if self.n_image == 0:
            raise GeometryMismatchError(
                f"{self.path} holds {size} bytes, less than one "
                f"{geometry.width}x{geometry.height} frame ({geometry.frame_bytes} bytes)"
            )
        
        if remainder:
            logger.warning(
                f"{self.path.name}: ignoring trailing partial frame ({remainder} bytes)"
            )
        
        logger.info(f"{self.path.name}: {self.n_image} frames of {geometry}")
    
    def __repr__(self) -> str:
        return f"FrameSource({self.path.name}, n_image={self.n_image}, {self.geometry})"
    
    def __len__(self) -> int:
        return self.n_image
    
    def __enter__(self) -> "FrameSource":
        self.open()
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
    
    def open(self) -> None:
        """Open the underlying file (idempotent)."""
        if self._file is not None:
            return
        try:
            self._file = open(self.path, "rb")
        except OSError as e:
            raise FrameIOError(f"Cannot open frame stack {self.path}: {e}") from e
    
    def close(self) -> None:
        """Close the underlying file."""
        if self._file is not None:
            self._file.close()
            self._file = None
    
    def _read_at(self, index: int) -> np.ndarray:
        self.open()
        frame_bytes = self.geometry.frame_bytes
        try:
            self._file.seek(index * frame_bytes)
            data = self._file.read(frame_bytes)
        except OSError as e:
            raise FrameIOError(f"Read of frame {index} from {self.path} failed: {e}") from e
        
        if len(data) != frame_bytes:
            raise FrameIOError(
                f"Truncated read of frame {index} from {self.path}: "
                f"{len(data)} of {frame_bytes} bytes"
            )
        return decode_frame(data, self.geometry)
    
    def read_frame(self, index: int) -> np.ndarray:
        """
        Read one frame by zero-based index.
        
        Args:
            index: Frame index in [0, n_image)
            
        Returns:
            Frame (height, width), dtype=uint16
            
        Raises:
            FrameIndexError: If index is outside the stack
            FrameIOError: If the read fails or comes up short
        """
        if not 0 <= index < self.n_image:
            raise FrameIndexError(
                f"Frame index {index} out of range for {self.n_image} frames"
            )
        return self._read_at(index)
    
    def iter_frames(self, start: int = 0) -> Iterator[np.ndarray]:
        """
        Yield frames in stack order.
        
        Args:
            start: First frame index to yield
        """
        if not 0 <= start <= self.n_image:
            raise FrameIndexError(
                f"Start index {start} out of range for {self.n_image} frames"
            )
        for index in range(start, self.n_image):
            yield self._read_at(index)
