"""Strength estimation formulas."""

from collections.abc import Sequence


def estimated_one_rep_max(weights: Sequence[float], reps: Sequence[int]) -> float:
    """Best Epley estimate over paired sets.

    Each set scores ``weight * (1 + reps / 30)``; sets beyond the shorter of the
    two sequences are ignored. Returns 0 when either sequence is empty.
    """
    estimates = [w * (1 + r / 30.0) for w, r in zip(weights, reps)]
    if not estimates:
        return 0.0
    return max(estimates)


def progress_percentage(old_max: float, new_max: float) -> float:
    """Percentage change between two 1RM values (0 when there is no baseline)."""
    if old_max <= 0:
        return 0.0
    return (new_max - old_max) / old_max * 100
