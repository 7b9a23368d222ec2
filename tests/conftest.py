"""
Test Configuration
==================

Pytest fixtures and test configuration for DriftStack.
"""

import numpy as np
import pytest


@pytest.fixture
def spot_frame():
    """Factory for a zero frame with a single bright pixel."""
    def _make(width, height, x, y, value=1000):
        frame = np.zeros((height, width), dtype=np.uint16)
        frame[y, x] = value
        return frame
    return _make


@pytest.fixture
def write_stack(tmp_path):
    """Factory writing frames as a raw little-endian uint16 stack file."""
    def _write(frames, name="stack.raw", trailing=b""):
        path = tmp_path / name
        data = b"".join(np.asarray(f, dtype="<u2").tobytes() for f in frames)
        path.write_bytes(data + trailing)
        return path
    return _write


@pytest.fixture
def drifting_stack(write_stack, spot_frame):
    """Three 4x4 frames with the spot at (2,2), (3,2), (2,2)."""
    frames = [
        spot_frame(4, 4, 2, 2, value=900),
        spot_frame(4, 4, 3, 2, value=900),
        spot_frame(4, 4, 2, 2, value=900),
    ]
    return write_stack(frames)
