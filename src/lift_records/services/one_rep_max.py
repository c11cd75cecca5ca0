"""One-rep-max estimation (Epley formula)."""

from collections.abc import Iterable

from ..models.lift_log import LiftSet


def estimate_one_rep_max(weight: float, reps: int) -> float:
    """Estimate the maximal single-rep weight from a weight/reps pair.

    Zero or negative inputs degrade to 0 rather than raising. A single rep
    is returned as-is; otherwise ``weight * (1 + reps / 30)``.
    """
    if reps is None or weight is None or reps <= 0 or weight <= 0:
        return 0.0
    if reps == 1:
        return float(weight)
    return weight * (1 + reps / 30.0)


def best_estimate_for_sets(sets: Iterable[LiftSet]) -> float:
    """Best 1RM estimate across all sets of a performance."""
    return max(
        (estimate_one_rep_max(s.weight_or_zero, s.reps_or_zero) for s in sets),
        default=0.0,
    )


def weight_for_reps(one_rep_max: float, reps: int) -> float:
    """Inverse of the estimate: the weight expected to be liftable for ``reps``."""
    if reps <= 0 or one_rep_max <= 0:
        return 0.0
    if reps == 1:
        return float(one_rep_max)
    return one_rep_max / (1 + reps / 30.0)
