"""Interfaces for running the estimators directly on arrays of measurements,
and for comparing several estimators on the same data"""
from typing import Tuple, Union

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike

from soxest.estimators.offline.curve_fit import CurveFittingSOH
from soxest.estimators.online.extended import ExtendedKalmanFilterSOC
from soxest.estimators.online.health import KalmanFilterSOH
from soxest.estimators.online.unscented import UnscentedKalmanFilterSOC
from soxest.models.base import BatteryParameters
from soxest.series import AgingSeries, CurrentVoltageSeries

__all__ = ['ekf_soc', 'ukf_soc', 'curve_fit_soh', 'kf_soh', 'run_soc_estimates', 'run_soh_estimates']


def ekf_soc(params: BatteryParameters,
            time: ArrayLike,
            current: ArrayLike,
            voltage: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
    """Estimate the state of charge with an Extended Kálmán Filter

    Args:
        params: Parameters of the battery, including its OCV function
        time: Time of each sample. Units: s
        current: Current at each sample. Units: A
        voltage: Terminal voltage at each sample. Units: V
    Returns:
        - State of charge at each sample
        - Error covariance of the state of charge at each sample
    """
    series = CurrentVoltageSeries(time=time, current=current, voltage=voltage)
    estimates = ExtendedKalmanFilterSOC(params).estimate(series)
    return estimates.values, estimates.covariance


def ukf_soc(params: BatteryParameters,
            time: ArrayLike,
            current: ArrayLike,
            voltage: ArrayLike) -> np.ndarray:
    """Estimate the state of charge with an Unscented Kálmán Filter

    Args:
        params: Parameters of the battery, including its OCV function
        time: Time of each sample. Units: s
        current: Current at each sample. Units: A
        voltage: Terminal voltage at each sample. Units: V
    Returns:
        State of charge at each sample
    """
    series = CurrentVoltageSeries(time=time, current=current, voltage=voltage)
    return UnscentedKalmanFilterSOC(params).estimate(series).values


def curve_fit_soh(params: BatteryParameters,
                  cycles: ArrayLike,
                  capacity: ArrayLike,
                  resistance: ArrayLike) -> np.ndarray:
    """Estimate the state of health by fitting capacity fade and resistance growth curves

    Args:
        params: Parameters of the battery
        cycles: Cycle count of each measurement
        capacity: Measured capacity. Units: Amp-hour
        resistance: Measured series resistance. Units: Ohm
    Returns:
        State of health at each measurement
    """
    series = AgingSeries(cycles=cycles, capacity=capacity, resistance=resistance)
    return CurveFittingSOH(params).estimate(series).values


def kf_soh(params: BatteryParameters,
           cycles: ArrayLike,
           capacity: ArrayLike,
           resistance: ArrayLike) -> np.ndarray:
    """Estimate the state of health with a scalar Kálmán Filter

    Args:
        params: Parameters of the battery
        cycles: Cycle count of each measurement
        capacity: Measured capacity. Units: Amp-hour
        resistance: Measured series resistance. Units: Ohm
    Returns:
        State of health at each measurement
    """
    series = AgingSeries(cycles=cycles, capacity=capacity, resistance=resistance)
    return KalmanFilterSOH(params).estimate(series).values


def run_soc_estimates(params: BatteryParameters,
                      series: Union[CurrentVoltageSeries, pd.DataFrame],
                      pbar: bool = False) -> pd.DataFrame:
    """Run both state of charge estimators over the same record

    Args:
        params: Parameters of the battery, including its OCV function
        series: Current and voltage record, or a dataframe with ``time``, ``current`` and ``voltage`` columns
        pbar: Whether to display progress bars
    Returns:
        Dataframe holding the measurements followed by the estimates
        (``soc_ekf``, ``soc_ukf``) and their variances (``soc_ekf_var``, ``soc_ukf_var``)
    """
    if isinstance(series, pd.DataFrame):
        series = CurrentVoltageSeries.from_dataframe(series)

    ekf = ExtendedKalmanFilterSOC(params).estimate(series, pbar=pbar)
    ukf = UnscentedKalmanFilterSOC(params).estimate(series, pbar=pbar)
    return pd.concat([
        series.to_dataframe(),
        ekf.to_dataframe('soc_ekf'),
        ukf.to_dataframe('soc_ukf')
    ], axis=1)


def run_soh_estimates(params: BatteryParameters,
                      series: Union[AgingSeries, pd.DataFrame]) -> pd.DataFrame:
    """Run both state of health estimators over the same record

    Args:
        params: Parameters of the battery
        series: Aging record, or a dataframe with ``cycles``, ``capacity`` and ``resistance`` columns
    Returns:
        Dataframe holding the measurements followed by the estimates
        (``soh_cf``, ``soh_kf``) and the variance of the filter (``soh_kf_var``)
    """
    if isinstance(series, pd.DataFrame):
        series = AgingSeries.from_dataframe(series)

    curve_fit = CurveFittingSOH(params).estimate(series)
    kalman = KalmanFilterSOH(params).estimate(series)
    return pd.concat([
        series.to_dataframe(),
        curve_fit.to_dataframe('soh_cf'),
        kalman.to_dataframe('soh_kf')
    ], axis=1)
