""" Definition of the Unscented Kálmán Filter (UKF) for the state of charge"""
from functools import cached_property
from typing import Optional, Tuple, TypedDict
from typing_extensions import NotRequired, Self

import numpy as np

from soxest.checkers import BaseSeriesChecker
from soxest.estimators.online import FilterState, OnlineEstimator
from soxest.estimators.utils import GuardLog, clamp_fraction, ensure_nonnegative_variance, floor_denominator
from soxest.models.base import BatteryParameters
from soxest.models.cell import coulomb_count, terminal_voltage
from soxest.series import CurrentVoltageSeries


def compute_unscented_covariance(cov_weights: np.ndarray,
                                 array0: np.ndarray,
                                 array1: Optional[np.ndarray] = None) -> float:
    """
    Function that computes the unscented covariance between zero-mean samples of scalars. If second array is not
    provided, this is equivalent to computing the unscented variance of the only provided array.
    """
    if array1 is None:
        array1 = array0
    return float(np.dot(cov_weights, array0 * array1))


class UKFTuningParameters(TypedDict):
    """
    Auxiliary class to help provide tuning parameters to
    :class:`~soxest.estimators.online.unscented.UnscentedKalmanFilterSOC`

    Args:
        alpha_param: alpha parameter to UKF
        beta_param: beta parameter to UKF
        kappa_param: kappa parameter to UKF
    """
    alpha_param: NotRequired[float]
    beta_param: NotRequired[float]
    kappa_param: NotRequired[float]

    @classmethod
    def defaults(cls) -> Self:
        return {'alpha_param': 1e-3, 'kappa_param': 0., 'beta_param': 2.}


class UnscentedKalmanFilterSOC(OnlineEstimator):
    """
    Estimate the state of charge by propagating sigma points through the battery model

    The state is the scalar SOC, so there are three sigma points: the mean and one point on either
    side of it. Each is evolved with Coulomb counting and mapped to a terminal voltage,
    ``V_ocv(soc) - current * R0``, with the OCV curve evaluated at the points restricted to [0, 1].
    Process and sensor noise are added to the recombined variances. A step whose predicted voltage
    is not finite keeps the prediction without correcting it.

    Args:
        params: Parameters of the battery. Must include an OCV function
        process_noise: Variance of the process noise (default = 1e-5)
        sensor_noise: Variance of the voltage measurement noise (default = 0.01)
        initial_covariance: Error covariance of the initial SOC (default = 0.1)
        alpha_param: tuning parameter 0.001 <= alpha <= 1 used to control the spread of the sigma points; lower values
            keep sigma points closer to the mean (default = 0.001)
        kappa_param: secondary scaling parameter; must be > -1 (default = 0.)
        beta_param: tuning parameter beta >= 0 used to incorporate knowledge of prior distribution; for Gaussian use
            beta = 2 (default = 2.)
        checker: Tool used to check series before estimation
    """

    series_type = CurrentVoltageSeries
    num_hidden_dimensions: int = 1
    """Dimensionality of the state, L"""

    def __init__(self,
                 params: BatteryParameters,
                 process_noise: float = 1e-5,
                 sensor_noise: float = 0.01,
                 initial_covariance: float = 0.1,
                 alpha_param: float = 1e-3,
                 kappa_param: float = 0.,
                 beta_param: float = 2.,
                 checker: Optional[BaseSeriesChecker] = None):
        super().__init__(params,
                         process_noise=process_noise,
                         sensor_noise=sensor_noise,
                         initial_covariance=initial_covariance,
                         checker=checker)
        self.ocv = params.require_ocv()

        # Tuning parameters check and save
        if not 0.001 <= alpha_param <= 1:
            raise ValueError(f'Alpha parameter must be between 0.001 and 1, but was {alpha_param}')
        if beta_param < 0:
            raise ValueError(f'Beta parameter must be >= 0, but was {beta_param}')
        if self.num_hidden_dimensions + kappa_param <= 0:
            raise ValueError(f'Kappa parameter ({kappa_param}) must be > -{self.num_hidden_dimensions}')
        self.alpha_param = alpha_param
        self.kappa_param = kappa_param
        self.beta_param = beta_param

    @classmethod
    def from_tuning(cls, params: BatteryParameters, tuning: UKFTuningParameters, **kwargs) -> Self:
        """
        Create a filter from a set of tuning parameters, using defaults for those not provided

        Args:
            params: Parameters of the battery
            tuning: UKF tuning parameters
            **kwargs: Other arguments to the filter, such as the noise variances
        """
        return cls(params, **{**UKFTuningParameters.defaults(), **tuning}, **kwargs)

    @cached_property
    def lambda_param(self) -> float:
        dim = self.num_hidden_dimensions
        return (self.alpha_param * self.alpha_param * (dim + self.kappa_param)) - dim

    @cached_property
    def mean_weights(self) -> np.ndarray:
        dim = self.num_hidden_dimensions
        mean_weights = np.full((2 * dim + 1,), 0.5 / (dim + self.lambda_param))
        mean_weights[0] = self.lambda_param / (dim + self.lambda_param)
        return mean_weights

    @cached_property
    def cov_weights(self) -> np.ndarray:
        cov_weights = self.mean_weights.copy()
        cov_weights[0] += 1 - (self.alpha_param * self.alpha_param) + self.beta_param
        return cov_weights

    def initial_mean(self) -> float:
        return self.params.initial_soc

    def build_sigma_points(self, state: FilterState) -> np.ndarray:
        """
        Function to build Sigma points.

        Returns:
            Array of the mean, the mean minus the spread, and the mean plus the spread
        """
        spread = np.sqrt((self.num_hidden_dimensions + self.lambda_param) * state.covariance)
        return np.array([state.mean, state.mean - spread, state.mean + spread])

    def estimation_update(self,
                          sigma_pts: np.ndarray,
                          current: float,
                          delta_t: float) -> Tuple[FilterState, FilterState, float]:
        """
        Function to perform the estimation update from the Sigma points

        Args:
            sigma_pts: Sigma points built around the previous estimate
            current: current applied over the step
            delta_t: length of the step

        Returns:
            - soc_minus: predicted SOC and its variance
            - voltage_hat: predicted terminal voltage and its variance, including sensor noise
            - cov_xz: covariance between SOC and voltage
        """
        # Evolve the hidden states, then combine them
        x_pred = coulomb_count(sigma_pts, current, delta_t, self.params.nominal_capacity)
        x_mean = float(np.dot(self.mean_weights, x_pred))
        x_var = compute_unscented_covariance(self.cov_weights, x_pred - x_mean) + self.process_noise

        # Predict measurements from the evolved points, restricted to where the OCV curve is defined
        with np.errstate(invalid='ignore', over='ignore'):
            z_pred = terminal_voltage(self.ocv, clamp_fraction(x_pred), current, self.params.nominal_resistance)
            z_mean = float(np.dot(self.mean_weights, z_pred))
            z_var = compute_unscented_covariance(self.cov_weights, z_pred - z_mean) + self.sensor_noise
            cov_xz = compute_unscented_covariance(self.cov_weights, x_pred - x_mean, z_pred - z_mean)
        return FilterState.model_construct(mean=x_mean, covariance=x_var), \
            FilterState.model_construct(mean=z_mean, covariance=z_var), cov_xz

    def correction_update(self,
                          state: FilterState,
                          soc_minus: FilterState,
                          voltage_hat: FilterState,
                          cov_xz: float,
                          voltage: float,
                          guards: GuardLog,
                          k: int) -> None:
        """
        Function to perform the correction update of the state, based on the measured voltage.

        Args:
            state: state to be updated in place
            soc_minus: predicted SOC and its variance
            voltage_hat: predicted voltage and its variance
            cov_xz: covariance between SOC and voltage
            voltage: measured voltage
            guards: record of numeric guards applied during this run
            k: index of the sample
        """
        voltage_var, floored = floor_denominator(voltage_hat.covariance)
        if floored:
            guards.record('predicted voltage variance floored', k)
        gain = cov_xz / voltage_var

        state.mean = soc_minus.mean + gain * (voltage - voltage_hat.mean)
        new_cov = soc_minus.covariance - gain * voltage_var * gain
        if new_cov < 0:
            guards.record('negative SOC variance reset to zero', k)
        state.covariance = ensure_nonnegative_variance(new_cov)

    def step(self, state: FilterState, series: CurrentVoltageSeries, k: int, guards: GuardLog) -> None:
        delta_t = series.time[k] - series.time[k - 1]
        current = series.current[k - 1]

        sigma_pts = self.build_sigma_points(state)
        soc_minus, voltage_hat, cov_xz = self.estimation_update(sigma_pts, current, delta_t)
        if not np.isfinite([voltage_hat.mean, voltage_hat.covariance, cov_xz]).all():
            guards.record('non-finite predicted voltage, correction skipped', k)
            state.mean = soc_minus.mean
            state.covariance = soc_minus.covariance
            return
        self.correction_update(state, soc_minus, voltage_hat, cov_xz, series.voltage[k], guards, k)
