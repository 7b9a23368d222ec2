"""
Stream Module
=============

Frame stack files and binary formats.

This module provides the I/O layer for DriftStack:
    - FrameGeometry: Frame dimensions and byte size
    - FrameSource: Frame count inference, random and sequential reads
    - Drift record and single-frame file readers/writers

Example:
    from drift_stack.stream import FrameGeometry, FrameSource
    
    with FrameSource("run.raw", FrameGeometry(2048, 2048)) as source:
        for frame in source.iter_frames():
            process(frame)
"""

from drift_stack.stream.frame import FrameGeometry
from drift_stack.stream.source import FrameSource
from drift_stack.stream.files import (
    read_drift_records,
    write_drift_records,
    write_frame,
)


__all__ = [
    "FrameGeometry",
    "FrameSource",
    "read_drift_records",
    "write_drift_records",
    "write_frame",
]
