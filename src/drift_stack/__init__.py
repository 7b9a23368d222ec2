"""
DriftStack
==========

Drift detection and drift-compensated averaging for raw frame stacks.

A frame stack is a flat file of concatenated 16-bit little-endian grayscale
frames. The imaged feature wanders between frames; this package locates it
in every frame, measures the integer drift against the first frame, and
shifts the frames back before summing them into a mean image.

Components:
    - stream: Frame files, drift-record files, byte codecs
    - drift: Peak localization and drift estimation
    - stacking: Shift-and-sum accumulation
    - analysis: Block-reduction and percentile thresholding
    - pipeline: File-level detect / mean / select / analyze operations

Example:
    from drift_stack.pipeline import detect_file, mean_file

    detect_file("run.raw", width=2048, height=2048)
    mean_file("run.raw", width=2048, height=2048, drift_path="run.drift")
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
