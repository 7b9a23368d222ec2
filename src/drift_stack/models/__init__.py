"""
Data Models
===========

Typed records and run reports for DriftStack.

Models:
    Drift:
        - DriftRecord: (frame_index, dx, dy) displacement of one frame
        - zero_drift_records: Synthetic zero-drift record set
    
    Reports:
        - DetectionReport, AccumulationReport
        - SelectionReport, AnalysisReport
"""

from drift_stack.models.drift import DriftRecord, zero_drift_records
from drift_stack.models.report import (
    AccumulationReport,
    AnalysisReport,
    DetectionReport,
    SelectionReport,
)

__all__ = [
    # Drift
    "DriftRecord",
    "zero_drift_records",
    # Reports
    "DetectionReport",
    "AccumulationReport",
    "SelectionReport",
    "AnalysisReport",
]
