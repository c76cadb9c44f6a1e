"""Numerical guards shared by the estimators"""
from collections import Counter
from typing import Optional
from warnings import warn
import logging

import numpy as np

from soxest.models.base import FloatOrArray

logger = logging.getLogger(__name__)

DIVISION_FLOOR = 1e-12
"""Smallest magnitude allowed for the denominator of a gain or ratio"""


class NumericDegeneracyWarning(RuntimeWarning):
    """Issued when an estimator had to guard a degenerate operation to keep its output finite"""


def clamp_fraction(x: FloatOrArray) -> FloatOrArray:
    """Restrict an estimate of a fractional state to [0, 1]"""
    return np.clip(x, 0., 1.)


def floor_denominator(value: float, floor: float = DIVISION_FLOOR) -> tuple[float, bool]:
    """
    Keep a denominator away from zero or negative values

    Args:
        value: denominator to be checked
        floor: smallest value allowed

    Returns:
        - the denominator, raised to ``floor`` if it was smaller
        - whether the floor was applied
    """
    if value < floor:
        return floor, True
    return value, False


def ensure_nonnegative_variance(variance: float) -> float:
    """
    Scalar counterpart of ensuring a covariance matrix is positive semi-definite. Round-off in the
    covariance recursion can leave a variance slightly below zero, which would make the
    sigma-point spread undefined.

    Args:
        variance: variance to check

    Returns:
        the variance if non-negative, zero otherwise
    """
    return max(variance, 0.)


class GuardLog:
    """
    Tallies the numeric guards applied during a single estimation run and reports them once the run ends

    Args:
        estimator_name: name used to identify the estimator in the warnings
    """
    def __init__(self, estimator_name: str):
        self.estimator_name = estimator_name
        self.counts: Counter = Counter()

    def record(self, reason: str, step: Optional[int] = None) -> None:
        """
        Note that a guard was applied

        Args:
            reason: description of the guard
            step: index of the sample being processed, if the guard applies to a single sample
        """
        if self.counts[reason] == 0:
            where = '' if step is None else f' at step {step}'
            logger.debug(f'{self.estimator_name}: {reason}{where}')
        self.counts[reason] += 1

    def report(self) -> None:
        """Issue one warning per type of guard which was applied"""
        for reason, count in self.counts.items():
            warn(f'{self.estimator_name}: {reason} ({count} time(s))', NumericDegeneracyWarning, stacklevel=3)
