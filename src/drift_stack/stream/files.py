"""
Result Files
============

Reading and writing of drift record files and single-frame outputs.

Outputs are written to a temporary file in the destination directory
and renamed into place, so a failed run never leaves a half-written
result behind. Set atomic=False to write in place.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Sequence, Union

import numpy as np

from drift_stack.errors import FrameIOError
from drift_stack.models.drift import DriftRecord
from drift_stack.stream.codec import (
    decode_drift_records,
    encode_drift_records,
    encode_frame,
)


logger = logging.getLogger(__name__)


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _write_bytes(path: Path, data: bytes, atomic: bool) -> None:
    try:
        if not atomic:
            path.write_bytes(data)
            return
        
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.",
            suffix=".tmp",
            dir=path.parent,
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # mkstemp creates 0600; match a plain open() under the current umask
            os.chmod(tmp_name, _default_file_mode())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        raise FrameIOError(f"Cannot write {path}: {e}") from e


def read_drift_records(path: Union[str, Path]) -> List[DriftRecord]:
    """
    Load drift records from a file.
    
    Args:
        path: Drift record file (6 bytes per record)
        
    Returns:
        Records in file order
        
    Raises:
        FrameIOError: If the file cannot be read
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise FrameIOError(f"Cannot read drift records {path}: {e}") from e
    
    records = decode_drift_records(data)
    logger.info(f"Loaded {len(records)} drift records from {path.name}")
    return records


def write_drift_records(
    path: Union[str, Path],
    records: Sequence[DriftRecord],
    atomic: bool = True,
) -> Path:
    """Write drift records as little-endian int16 triples."""
    path = Path(path)
    _write_bytes(path, encode_drift_records(records), atomic)
    logger.info(f"Wrote {len(records)} drift records to {path}")
    return path


def write_frame(
    path: Union[str, Path],
    frame: np.ndarray,
    atomic: bool = True,
) -> Path:
    """
    Write a single frame in stack layout.
    
    Float frames are truncated to uint16 on the way out.
    """
    path = Path(path)
    _write_bytes(path, encode_frame(frame), atomic)
    logger.info(f"Wrote {frame.shape[1]}x{frame.shape[0]} frame to {path}")
    return path
