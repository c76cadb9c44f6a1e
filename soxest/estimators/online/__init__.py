"""
Estimators which incrementally adjust estimates for the state of a battery, one sample at a time.
"""
from abc import abstractmethod
from typing import Optional, Union
import logging

import numpy as np
import pandas as pd
from pydantic import BaseModel, Field
from tqdm import tqdm

from soxest.checkers import BaseSeriesChecker
from soxest.estimators import BaseEstimator
from soxest.estimators.utils import GuardLog, clamp_fraction
from soxest.models.base import BatteryParameters
from soxest.series import EstimateSequence, TimeSeries

logger = logging.getLogger(__name__)


class FilterState(BaseModel):
    """
    Estimate and error covariance of a single-state filter, mutated in place as the filter steps
    """
    mean: float = Field(description='Current estimate of the state')
    covariance: float = Field(ge=0, description='Error covariance of the current estimate')


class OnlineEstimator(BaseEstimator):
    """
    The interface for estimators built on a scalar Kálmán recursion

    Implementations provide the starting estimate (:meth:`initial_mean`) and the
    prediction-correction step (:meth:`step`). The base class runs the recursion
    over a whole series and restores every estimate to [0, 1] after each step.

    Args:
        params: Parameters of the battery being estimated
        process_noise: Variance of the process noise added at each prediction
        sensor_noise: Variance of the measurement noise
        initial_covariance: Error covariance of the initial estimate
        checker: Tool used to check series before estimation
    """

    def __init__(self,
                 params: BatteryParameters,
                 process_noise: float,
                 sensor_noise: float,
                 initial_covariance: float,
                 checker: Optional[BaseSeriesChecker] = None):
        super().__init__(params, checker=checker)
        if process_noise < 0 or sensor_noise < 0:
            raise ValueError('Noise variances must be non-negative')
        if initial_covariance < 0:
            raise ValueError('Initial covariance must be non-negative')
        self.process_noise = process_noise
        self.sensor_noise = sensor_noise
        self.initial_covariance = initial_covariance

    @abstractmethod
    def initial_mean(self) -> float:
        """Estimate of the state at the first sample"""
        raise NotImplementedError('Please implement in child class!')

    def initial_state(self) -> FilterState:
        """Make the working state for a new estimation run"""
        return FilterState(mean=self.initial_mean(), covariance=self.initial_covariance)

    @abstractmethod
    def step(self, state: FilterState, series: TimeSeries, k: int, guards: GuardLog) -> None:
        """
        Advance the filter from sample ``k - 1`` to sample ``k``, updating ``state`` in place

        Args:
            state: estimate after sample ``k - 1``
            series: series being estimated
            k: index of the new sample
            guards: record of numeric guards applied during this run
        """
        raise NotImplementedError('Please implement in child class!')

    def estimate(self, series: Union[TimeSeries, pd.DataFrame], pbar: bool = False) -> EstimateSequence:
        """
        Run the filter over every sample of a series

        Args:
            series: Measurements of the battery
            pbar: Whether to display a progress bar

        Returns:
            Estimates and their error covariances. The first entry is the initial estimate
        """
        series = self.checker.check(series)
        num_samples = len(series)
        name = self.__class__.__name__
        logger.debug(f'Running {name} over {num_samples} samples')

        # Each run owns its state
        state = self.initial_state()
        guards = GuardLog(name)
        values = np.zeros((num_samples,))
        covariance = np.zeros((num_samples,))
        values[0] = state.mean
        covariance[0] = state.covariance

        for k in tqdm(range(1, num_samples), total=num_samples - 1, disable=not pbar, desc=name):
            self.step(state, series, k, guards)
            state.mean = float(clamp_fraction(state.mean))
            values[k] = state.mean
            covariance[k] = state.covariance

        guards.report()
        return EstimateSequence(values=values, covariance=covariance)
