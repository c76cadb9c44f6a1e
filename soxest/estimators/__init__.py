"""
Tools which estimate the state of charge or state of health of a battery from measurement series.

Online estimators (:mod:`soxest.estimators.online`) update a Kálmán filter one sample at a time.
Offline estimators (:mod:`soxest.estimators.offline`) fit a model to the whole series at once.
"""
from abc import abstractmethod
from typing import ClassVar, Optional, Union

import pandas as pd

from soxest.checkers import BaseSeriesChecker, SeriesChecker
from soxest.models.base import BatteryParameters
from soxest.series import EstimateSequence, TimeSeries


class BaseEstimator:
    """
    The interface for all estimators

    Estimators hold only configuration. Every call to :meth:`estimate` builds its own working state,
    so one estimator can be used for many series, including from several threads at once.

    Args:
        params: Parameters of the battery being estimated
        checker: Tool used to check series before estimation. Default is a
            :class:`~soxest.checkers.SeriesChecker` for the series type used by this estimator
    """

    series_type: ClassVar[type[TimeSeries]]
    """Type of series used by this estimator"""

    def __init__(self, params: BatteryParameters, checker: Optional[BaseSeriesChecker] = None):
        self.params = params
        self.checker = SeriesChecker(self.series_type) if checker is None else checker

    @abstractmethod
    def estimate(self, series: Union[TimeSeries, pd.DataFrame]) -> EstimateSequence:
        """
        Estimate the state at every sample of a series

        Args:
            series: Measurements of the battery, or a dataframe holding the columns of the appropriate series

        Raises:
            (InvalidInputError) If the series is empty, has columns of different lengths,
            has a decreasing ordering axis or contains non-finite values

        Returns:
            Estimates, one per sample, each in [0, 1]
        """
        raise NotImplementedError('Please implement in child class!')
