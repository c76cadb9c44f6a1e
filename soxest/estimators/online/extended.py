"""Extended Kálmán Filter (EKF) for the state of charge"""
from typing import Optional

import numpy as np

from soxest.checkers import BaseSeriesChecker
from soxest.estimators.online import FilterState, OnlineEstimator
from soxest.estimators.utils import GuardLog, clamp_fraction, floor_denominator
from soxest.models.base import BatteryParameters
from soxest.models.cell import coulomb_count, terminal_voltage
from soxest.models.ocv import numerical_derivative
from soxest.series import CurrentVoltageSeries


class ExtendedKalmanFilterSOC(OnlineEstimator):
    """
    Estimate the state of charge by linearizing the OCV curve about the predicted state

    The process model is Coulomb counting with the current of the previous sample.
    The measurement model is the terminal voltage, ``V_ocv(soc) - current * R0``,
    linearized with the slope of the OCV curve. The slope comes from
    ``params.ocv_derivative`` if provided, and from a central finite difference otherwise.
    Both are evaluated at the predicted SOC restricted to [0, 1]. A step where either is not
    finite keeps the prediction without correcting it.

    Args:
        params: Parameters of the battery. Must include an OCV function
        process_noise: Variance of the process noise (default = 1e-5)
        sensor_noise: Variance of the voltage measurement noise (default = 0.01)
        initial_covariance: Error covariance of the initial SOC (default = 0.1)
        checker: Tool used to check series before estimation
    """

    series_type = CurrentVoltageSeries

    def __init__(self,
                 params: BatteryParameters,
                 process_noise: float = 1e-5,
                 sensor_noise: float = 0.01,
                 initial_covariance: float = 0.1,
                 checker: Optional[BaseSeriesChecker] = None):
        super().__init__(params,
                         process_noise=process_noise,
                         sensor_noise=sensor_noise,
                         initial_covariance=initial_covariance,
                         checker=checker)
        self.ocv = params.require_ocv()

    def initial_mean(self) -> float:
        return self.params.initial_soc

    def measurement_slope(self, soc: float) -> float:
        """Derivative of the predicted voltage with respect to SOC"""
        if self.params.ocv_derivative is not None:
            return float(self.params.ocv_derivative(soc))
        return float(numerical_derivative(self.ocv, soc))

    def step(self, state: FilterState, series: CurrentVoltageSeries, k: int, guards: GuardLog) -> None:
        delta_t = series.time[k] - series.time[k - 1]
        current = series.current[k - 1]

        # Prediction
        soc_pred = coulomb_count(state.mean, current, delta_t, self.params.nominal_capacity)
        cov_pred = state.covariance + self.process_noise

        # Linearized measurement model, evaluated where the OCV curve is defined
        soc_eval = float(clamp_fraction(soc_pred))
        with np.errstate(invalid='ignore', divide='ignore', over='ignore'):
            h = self.measurement_slope(soc_eval)
            voltage_pred = terminal_voltage(self.ocv, soc_eval, current, self.params.nominal_resistance)
        if not (np.isfinite(h) and np.isfinite(voltage_pred)):
            guards.record('non-finite predicted voltage or slope, correction skipped', k)
            state.mean = float(soc_pred)
            state.covariance = float(cov_pred)
            return

        # Correction
        innovation_cov, floored = floor_denominator(h * cov_pred * h + self.sensor_noise)
        if floored:
            guards.record('innovation covariance floored', k)
        gain = cov_pred * h / innovation_cov
        state.mean = float(soc_pred + gain * (series.voltage[k] - voltage_pred))
        state.covariance = float((1 - gain * h) * cov_pred)
