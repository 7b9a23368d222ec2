"""
Drift Tests
===========

Tests for peak localization and drift estimation.
"""

import numpy as np
import pytest

from drift_stack.drift import DriftEstimator, estimate_drifts, find_peak
from drift_stack.models import DriftRecord


class TestFindPeak:
    """Tests for brightest-pixel localization."""
    
    @pytest.mark.parametrize("x, y", [(0, 0), (3, 0), (0, 2), (3, 2), (1, 1)])
    def test_single_spot_any_placement(self, spot_frame, x, y):
        """A lone maximum is found wherever it sits, corners included."""
        frame = spot_frame(4, 3, x, y, value=65535)
        assert find_peak(frame) == (x, y)
    
    def test_all_zero_frame(self):
        """An all-zero frame reports the first scanned pixel."""
        assert find_peak(np.zeros((5, 7), dtype=np.uint16)) == (0, 0)
    
    def test_tie_keeps_first_in_row_major_order(self):
        """Equal maxima resolve to the earliest flat index."""
        frame = np.zeros((3, 4), dtype=np.uint16)
        frame[1, 2] = 50
        frame[0, 3] = 50
        frame[2, 0] = 50
        assert find_peak(frame) == (3, 0)
    
    def test_rectangular_frame_row_uses_width(self):
        """Row index is flat_index // width on non-square frames."""
        frame = np.zeros((2, 5), dtype=np.uint16)
        frame[1, 4] = 7
        assert find_peak(frame) == (4, 1)
        
        tall = np.zeros((6, 2), dtype=np.uint16)
        tall[5, 1] = 7
        assert find_peak(tall) == (1, 5)
    
    def test_rejects_non_2d(self):
        """Flat buffers must be reshaped by the caller."""
        with pytest.raises(ValueError):
            find_peak(np.zeros(16, dtype=np.uint16))


class TestDriftEstimator:
    """Tests for per-frame drift estimation."""
    
    def test_offsets_inside_bound_are_recorded(self, spot_frame):
        """Frame i offset by (i, 0) yields (i, i, 0) below the bound only."""
        bound = 5
        frames = [spot_frame(16, 4, i, 0) for i in range(9)]
        
        records = estimate_drifts(frames, stability_bound=bound)
        
        assert records == [DriftRecord(i, i, 0) for i in range(1, bound)]
    
    def test_excluded_frames_are_counted(self, spot_frame):
        """Rejected frames are omitted but surfaced as a count."""
        estimator = DriftEstimator(stability_bound=5)
        frames = [spot_frame(16, 4, i, 0) for i in range(9)]
        
        emitted = [estimator.update(f) for f in frames]
        
        assert emitted[0] is None
        assert all(r is None for r in emitted[5:])
        assert estimator.excluded_count == 4
        assert estimator.frame_count == 9
        assert estimator.get_metrics()["record_count"] == 4
    
    def test_bound_is_strict_on_both_axes(self, spot_frame):
        """|dx| == bound or |dy| == bound is excluded."""
        frames = [
            spot_frame(20, 20, 10, 10),
            spot_frame(20, 20, 13, 10),
            spot_frame(20, 20, 10, 7),
            spot_frame(20, 20, 12, 8),
        ]
        records = estimate_drifts(frames, stability_bound=3)
        assert records == [DriftRecord(3, 2, -2)]
    
    def test_negative_drift(self, spot_frame):
        """Moving left/up gives negative components."""
        frames = [spot_frame(8, 8, 5, 5), spot_frame(8, 8, 2, 7)]
        assert estimate_drifts(frames) == [DriftRecord(1, -3, 2)]
    
    def test_zero_drift_frames_are_kept(self, spot_frame):
        """A frame that did not move still gets a record."""
        frames = [spot_frame(4, 4, 2, 2)] * 3
        assert estimate_drifts(frames) == [DriftRecord(1, 0, 0), DriftRecord(2, 0, 0)]
    
    def test_include_reference(self, spot_frame):
        """Optionally the reference frame gets a zero record."""
        frames = [spot_frame(4, 4, 1, 1), spot_frame(4, 4, 2, 1)]
        records = estimate_drifts(frames, include_reference=True)
        assert records == [DriftRecord(0, 0, 0), DriftRecord(1, 1, 0)]
    
    def test_reference_peak_and_reset(self, spot_frame):
        """The reference is the first frame seen after a reset."""
        estimator = DriftEstimator()
        estimator.update(spot_frame(4, 4, 3, 1))
        assert estimator.reference_peak == (3, 1)
        
        estimator.reset()
        assert estimator.reference_peak is None
        assert estimator.frame_count == 0
    
    def test_empty_stack(self):
        """No frames, no records."""
        assert estimate_drifts([]) == []
    
    def test_invalid_bound(self):
        """The bound must admit at least zero drift."""
        with pytest.raises(ValueError):
            DriftEstimator(stability_bound=0)

    @pytest.mark.parametrize("interval", [0, -1])
    def test_invalid_log_interval(self, interval):
        """A non-positive progress interval is rejected up front."""
        with pytest.raises(ValueError):
            DriftEstimator(log_every_n_frames=interval)

    def test_log_interval_of_one(self, spot_frame):
        """Logging every frame does not disturb the records."""
        estimator = DriftEstimator(log_every_n_frames=1)
        frames = [spot_frame(4, 4, 1, 1), spot_frame(4, 4, 2, 1)]
        assert estimator.run(frames) == [DriftRecord(1, 1, 0)]

    def test_run_matches_update_loop(self, spot_frame):
        """run() collects what update() emits and keeps the counters."""
        frames = [spot_frame(16, 4, i, 0) for i in range(9)]
        estimator = DriftEstimator(stability_bound=5)

        records = estimator.run(frames)

        assert records == estimate_drifts(frames, stability_bound=5)
        assert estimator.frame_count == 9
        assert estimator.excluded_count == 4
