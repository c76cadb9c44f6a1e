"""Estimate the state of health by fitting degradation curves with SciPy"""
from typing import Optional, Union
import logging
import warnings

import numpy as np
import pandas as pd
from numpy.polynomial.polynomial import polyfit, polyval
from scipy.optimize import OptimizeWarning, curve_fit

from soxest.checkers import BaseSeriesChecker
from soxest.estimators.offline import OfflineEstimator
from soxest.estimators.utils import GuardLog, clamp_fraction
from soxest.models.base import BatteryParameters
from soxest.series import AgingSeries, EstimateSequence

logger = logging.getLogger(__name__)


def exponential(x: np.ndarray, a: float, b: float) -> np.ndarray:
    """Single-term exponential, ``a * exp(b * x)``"""
    return a * np.exp(b * x)


def _has_two_distinct(x: np.ndarray) -> bool:
    return np.unique(x).size >= 2


def fit_exponential(x: np.ndarray, y: np.ndarray, maxfev: int = 10000) -> Optional[np.ndarray]:
    """
    Fit a single-term exponential to data and evaluate it at the same points

    The x values are scaled to [-1, 1] for the fit to keep the exponent of order one.
    The starting guess comes from a straight-line fit to the logarithm of the positive y values.

    Args:
        x: independent variable
        y: values to fit
        maxfev: maximum number of function evaluations used by the optimizer

    Returns:
        Fitted values at each x, or ``None`` if no fit could be computed
    """
    if not _has_two_distinct(x):
        return None

    scale = np.abs(x).max()
    x_scaled = x / scale

    # Initial guess
    positive = y > 0
    if _has_two_distinct(x_scaled[positive]):
        log_a, b = polyfit(x_scaled[positive], np.log(y[positive]), 1)
        p0 = (np.exp(log_a), b)
    else:
        p0 = (y.mean(), 0.)

    with warnings.catch_warnings(), np.errstate(over='ignore', invalid='ignore'):
        warnings.simplefilter('ignore', OptimizeWarning)  # Raised whenever parameter covariance is undefined
        try:
            popt, _ = curve_fit(exponential, x_scaled, y, p0=p0, maxfev=maxfev)
        except (RuntimeError, ValueError) as exc:
            logger.debug(f'Exponential fit failed: {exc}')
            return None

    with np.errstate(over='ignore', invalid='ignore'):
        fitted = exponential(x_scaled, *popt)
    if not np.isfinite(fitted).all():
        return None
    return fitted


def fit_linear(x: np.ndarray, y: np.ndarray) -> Optional[np.ndarray]:
    """
    Fit a first-degree polynomial to data and evaluate it at the same points

    Args:
        x: independent variable
        y: values to fit

    Returns:
        Fitted values at each x, or ``None`` if no fit could be computed
    """
    if not _has_two_distinct(x):
        return None
    coeffs = polyfit(x, y, 1)
    return polyval(x, coeffs)


class CurveFittingSOH(OfflineEstimator):
    """
    Estimate the state of health by fitting smooth degradation curves to the capacity and resistance

    Capacity fade, ``(Q_nom - Q) / Q_nom``, is fit with a single-term exponential and resistance growth,
    ``(R - R0) / R0``, with a straight line. Each fitted curve becomes a state of health,
    ``1 - fitted``, and the two are combined as a weighted average.

    A curve which cannot be fit, such as when there are fewer than two distinct cycle counts,
    is replaced by the measured values it would have smoothed.

    Args:
        params: Parameters of the battery
        capacity_weight: Weight of the capacity-based state of health in the average (default = 0.7)
        checker: Tool used to check series before estimation
    """

    series_type = AgingSeries

    def __init__(self,
                 params: BatteryParameters,
                 capacity_weight: float = 0.7,
                 checker: Optional[BaseSeriesChecker] = None):
        super().__init__(params, checker=checker)
        if not 0 <= capacity_weight <= 1:
            raise ValueError(f'Capacity weight must be between 0 and 1, but was {capacity_weight}')
        self.capacity_weight = capacity_weight

    def estimate(self, series: Union[AgingSeries, pd.DataFrame]) -> EstimateSequence:
        series = self.checker.check(series)
        guards = GuardLog(self.__class__.__name__)

        # Normalize measurements
        cap_fade = (self.params.nominal_capacity - series.capacity) / self.params.nominal_capacity
        res_growth = (series.resistance - self.params.nominal_resistance) / self.params.nominal_resistance

        fitted_fade = fit_exponential(series.cycles, cap_fade)
        if fitted_fade is None:
            guards.record('capacity fade could not be fit, using measured values')
            fitted_fade = cap_fade
        fitted_growth = fit_linear(series.cycles, res_growth)
        if fitted_growth is None:
            guards.record('resistance growth could not be fit, using measured values')
            fitted_growth = res_growth

        # Combined SOH (weighted average)
        soh = self.capacity_weight * (1 - fitted_fade) + (1 - self.capacity_weight) * (1 - fitted_growth)

        guards.report()
        return EstimateSequence(values=clamp_fraction(soh))
