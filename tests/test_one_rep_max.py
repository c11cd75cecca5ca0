"""Tests for one-rep-max estimation."""

import pytest

from lift_records.models.lift_log import LiftSet
from lift_records.services.one_rep_max import (
    best_estimate_for_sets,
    estimate_one_rep_max,
    weight_for_reps,
)


class TestEstimateOneRepMax:
    """Tests for estimate_one_rep_max."""

    def test_single_rep_returns_weight(self):
        """A single is its own max."""
        assert estimate_one_rep_max(135, 1) == 135

    def test_epley_formula(self):
        """Multiple reps use weight * (1 + reps / 30)."""
        assert estimate_one_rep_max(135, 5) == pytest.approx(157.5)
        assert estimate_one_rep_max(145, 5) == pytest.approx(169.1667, rel=1e-4)

    @pytest.mark.parametrize("weight", [0, 45, 135.5, 500])
    def test_zero_reps_is_zero(self, weight):
        """Zero reps degrade to zero for any weight."""
        assert estimate_one_rep_max(weight, 0) == 0

    @pytest.mark.parametrize("reps", [0, 1, 5, 12])
    def test_zero_weight_is_zero(self, reps):
        """Zero weight degrades to zero for any rep count."""
        assert estimate_one_rep_max(0, reps) == 0

    def test_negative_and_missing_inputs(self):
        """Negative or missing values never raise."""
        assert estimate_one_rep_max(-10, 5) == 0
        assert estimate_one_rep_max(100, -1) == 0
        assert estimate_one_rep_max(None, 5) == 0


class TestBestEstimateForSets:
    """Tests for best_estimate_for_sets."""

    def test_uses_best_set_not_first(self):
        """The heaviest estimate wins regardless of set order."""
        sets = [LiftSet(weight=135, reps=5), LiftSet(weight=155, reps=3), LiftSet(weight=95, reps=10)]
        assert best_estimate_for_sets(sets) == pytest.approx(155 * (1 + 3 / 30))

    def test_empty_is_zero(self):
        """No sets means no estimate."""
        assert best_estimate_for_sets([]) == 0

    def test_sets_without_weight(self):
        """Band or hold sets contribute nothing."""
        sets = [LiftSet(band_color="red", reps=12), LiftSet(hold_seconds=30)]
        assert best_estimate_for_sets(sets) == 0


class TestWeightForReps:
    """Tests for the inverse estimate."""

    def test_inverse_of_estimate(self):
        """Recovers the working weight from an estimate."""
        assert weight_for_reps(157.5, 5) == pytest.approx(135)

    def test_single_rep(self):
        """One rep is the max itself."""
        assert weight_for_reps(200, 1) == 200

    def test_degenerate_inputs(self):
        """Zero reps or max give zero."""
        assert weight_for_reps(200, 0) == 0
        assert weight_for_reps(0, 5) == 0
