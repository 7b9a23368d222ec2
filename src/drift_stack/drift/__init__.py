"""
Drift Module
============

Peak localization and drift estimation.

This module provides:
    - find_peak: Brightest-pixel coordinates (first in row-major order)
    - DriftEstimator: Streaming per-frame drift against frame 0
    - estimate_drifts: Whole-stack convenience wrapper

Only integer drift is measured; there is no sub-pixel refinement.
"""

from drift_stack.drift.peak import find_peak
from drift_stack.drift.estimator import (
    DEFAULT_STABILITY_BOUND,
    DriftEstimator,
    estimate_drifts,
)

__all__ = [
    "find_peak",
    "DEFAULT_STABILITY_BOUND",
    "DriftEstimator",
    "estimate_drifts",
]
