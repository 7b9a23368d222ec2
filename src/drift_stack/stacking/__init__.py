"""
Stacking Module
===============

Shift-and-sum accumulation of drifting frames.

This module provides:
    - AccumulatorState: Owned float64 sum grid plus frame count
    - shift_add / finalize: Pure building blocks of one pass
    - ShiftAccumulator / accumulate: Record-driven whole-stack mean
"""

from drift_stack.stacking.accumulator import (
    AccumulatorState,
    ShiftAccumulator,
    accumulate,
    finalize,
    shift_add,
)

__all__ = [
    "AccumulatorState",
    "ShiftAccumulator",
    "accumulate",
    "finalize",
    "shift_add",
]
