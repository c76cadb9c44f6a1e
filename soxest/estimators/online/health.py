"""Scalar Kálmán filter for the state of health"""
from typing import Optional

from soxest.checkers import BaseSeriesChecker
from soxest.estimators.online import FilterState, OnlineEstimator
from soxest.estimators.utils import GuardLog, floor_denominator
from soxest.models.base import BatteryParameters
from soxest.series import AgingSeries


class KalmanFilterSOH(OnlineEstimator):
    """
    Track the state of health with a linear degradation model corrected by capacity and resistance measurements

    The state of health is predicted to drop by ``1 / cycle_life`` at each sample.
    Each measurement is converted to an observed state of health,

    .. math::

        z = w \\frac{Q}{Q_{nom}} + (1 - w) \\frac{R_0}{R}

    so that capacity loss and resistance growth both lower the observed health.
    Resistances at or below zero are raised to a small positive floor before the division.
    Such readings make the resistance term enormous, so the estimate saturates at a state of health of 1.

    Args:
        params: Parameters of the battery
        process_noise: Variance of the process noise (default = 1e-6)
        sensor_noise: Variance of the observed state of health (default = 1e-4)
        initial_covariance: Error covariance of the initial state of health (default = 0.01)
        capacity_weight: Weight of the capacity term in the observed state of health, w (default = 0.7)
        checker: Tool used to check series before estimation
    """

    series_type = AgingSeries

    def __init__(self,
                 params: BatteryParameters,
                 process_noise: float = 1e-6,
                 sensor_noise: float = 1e-4,
                 initial_covariance: float = 0.01,
                 capacity_weight: float = 0.7,
                 checker: Optional[BaseSeriesChecker] = None):
        super().__init__(params,
                         process_noise=process_noise,
                         sensor_noise=sensor_noise,
                         initial_covariance=initial_covariance,
                         checker=checker)
        if not 0 <= capacity_weight <= 1:
            raise ValueError(f'Capacity weight must be between 0 and 1, but was {capacity_weight}')
        self.capacity_weight = capacity_weight

    def initial_mean(self) -> float:
        return self.params.initial_soh

    def observe(self, capacity: float, resistance: float, guards: GuardLog, k: int) -> float:
        """
        Convert a capacity and resistance measurement to an observed state of health

        Args:
            capacity: measured capacity
            resistance: measured series resistance
            guards: record of numeric guards applied during this run
            k: index of the sample

        Returns:
            Observed state of health, which is not restricted to [0, 1]
        """
        resistance, floored = floor_denominator(resistance)
        if floored:
            guards.record('non-positive resistance floored', k)
        capacity_ratio = capacity / self.params.nominal_capacity
        resistance_ratio = self.params.nominal_resistance / resistance
        return self.capacity_weight * capacity_ratio + (1 - self.capacity_weight) * resistance_ratio

    def step(self, state: FilterState, series: AgingSeries, k: int, guards: GuardLog) -> None:
        # Prediction: fixed degradation per cycle
        soh_pred = state.mean - 1. / self.params.cycle_life
        cov_pred = state.covariance + self.process_noise

        # Correction with a direct observation (H = 1)
        observed = self.observe(series.capacity[k], series.resistance[k], guards, k)
        innovation_cov, floored = floor_denominator(cov_pred + self.sensor_noise)
        if floored:
            guards.record('innovation covariance floored', k)
        gain = cov_pred / innovation_cov
        state.mean = float(soh_pred + gain * (observed - soh_pred))
        state.covariance = float((1 - gain) * cov_pred)
