"""
Analysis Tests
==============

Tests for block reduction and percentile thresholding.
"""

import numpy as np
import pytest

from drift_stack.analysis import (
    FrameAnalyzer,
    analyze,
    compute_threshold,
    shrink,
    threshold_mask,
)
from drift_stack.errors import GeometryMismatchError


class TestShrink:
    """Tests for box-filter downsampling."""
    
    @pytest.mark.parametrize("target", [1, 2, 4, 8, 3, 5])
    def test_constant_frame_keeps_value(self, target):
        """A flat frame stays flat at any valid size."""
        frame = np.full((16, 16), 1234, dtype=np.uint16)
        reduced = shrink(frame, target)
        
        assert reduced.shape == (target, target)
        assert np.all(np.abs(reduced.astype(int) - 1234) <= 1)
    
    def test_block_mean_is_truncated(self):
        """Each output pixel is floor(block sum / unit^2)."""
        frame = np.array(
            [[1, 2, 0, 0],
             [2, 2, 0, 4],
             [9, 9, 65535, 65535],
             [9, 8, 65535, 65535]],
            dtype=np.uint16,
        )
        reduced = shrink(frame, 2)
        
        np.testing.assert_array_equal(reduced, [[1, 1], [8, 65535]])
        assert reduced.dtype == np.uint16
    
    def test_remainder_rows_and_columns_are_ignored(self):
        """Pixels past target_size * unit never reach the output."""
        frame = np.full((5, 5), 10, dtype=np.uint16)
        frame[4, :] = 60000
        frame[:, 4] = 60000
        
        reduced = shrink(frame, 2)
        
        np.testing.assert_array_equal(reduced, np.full((2, 2), 10))
    
    def test_strict_rejects_remainder(self):
        """Strict mode treats a non-divisible pair as a mismatch."""
        with pytest.raises(GeometryMismatchError):
            shrink(np.zeros((5, 5), dtype=np.uint16), 2, strict=True)
    
    @pytest.mark.parametrize("shape, target", [((4, 6), 2), ((4, 4), 0), ((4, 4), 5)])
    def test_invalid_geometry(self, shape, target):
        """Non-square frames and impossible targets are rejected."""
        with pytest.raises(GeometryMismatchError):
            shrink(np.zeros(shape, dtype=np.uint16), target)


class TestThreshold:
    """Tests for the percentile cut."""
    
    def test_keeps_top_fraction(self):
        """threshold = sorted[n - floor(rate * n)]."""
        values = np.arange(100, dtype=np.uint16).reshape(10, 10)
        
        threshold = compute_threshold(values, 0.1)
        
        assert threshold == 90
        assert threshold_mask(values, threshold).sum() == 10
    
    def test_rate_not_exact_in_binary(self):
        """0.29 * 100 is 28.999...; the cut still keeps 29 pixels."""
        values = np.arange(100, dtype=np.uint16).reshape(10, 10)

        threshold = compute_threshold(values, 0.29)

        assert threshold == 71
        assert threshold_mask(values, threshold).sum() == 29

    def test_full_rate_keeps_everything(self):
        """keep_rate 1 thresholds at the minimum."""
        values = np.arange(5, 21, dtype=np.uint16).reshape(4, 4)
        assert compute_threshold(values, 1.0) == 5
    
    def test_tiny_rate_keeps_the_maximum(self):
        """When floor(rate * n) is 0 the cut falls on the largest value."""
        values = np.array([[3, 9], [1, 4]], dtype=np.uint16)
        assert compute_threshold(values, 0.01) == 9
    
    def test_ties_at_threshold_are_all_kept(self):
        """Equal values at the cut are all signal."""
        values = np.array([0, 5, 5, 5], dtype=np.uint16)
        threshold = compute_threshold(values, 0.25)
        assert threshold == 5
        assert threshold_mask(values, threshold).sum() == 3
    
    @pytest.mark.parametrize("rate", [0.0, -0.1, 1.5])
    def test_invalid_rate(self, rate):
        with pytest.raises(ValueError):
            compute_threshold(np.ones(4), rate)


class TestFrameAnalyzer:
    """Tests for shrink + threshold analysis."""
    
    def test_mask_marks_bright_block(self):
        """The threshold is taken from the reduced frame itself."""
        frame = np.zeros((8, 8), dtype=np.uint16)
        frame[4:6, 2:4] = 100
        
        result = FrameAnalyzer(resolution=4, keep_rate=0.1).evaluate(frame)
        
        assert result.threshold == 100
        assert result.signal_pixels == 1
        assert result.mask.shape == (4, 4)
        assert result.mask[2, 1] == 1
        assert result.mask.dtype == np.uint8
    
    def test_analyze_function(self):
        """Module-level analyze returns only the mask."""
        frame = np.arange(64, dtype=np.uint16).reshape(8, 8)
        mask = analyze(frame, resolution=8, keep_rate=0.25)
        
        assert mask.sum() == 16
        assert mask[6:, :].all()
    
    def test_frame_smaller_than_resolution(self):
        """The default 512 resolution needs at least a 512 frame."""
        with pytest.raises(GeometryMismatchError):
            FrameAnalyzer().analyze(np.zeros((64, 64), dtype=np.uint16))
    
    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            FrameAnalyzer(resolution=0)
        with pytest.raises(ValueError):
            FrameAnalyzer(keep_rate=2.0)
