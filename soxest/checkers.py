"""
Tools to check that measurement series are appropriate for estimation
"""
from typing import Union

import numpy as np
import pandas as pd

from soxest.series import TimeSeries


class InvalidInputError(ValueError):
    """
    Custom exception to be used when a measurement series cannot be used for estimation
    """
    def __init__(self, message: str = "Invalid input series!"):
        super().__init__(message)


class BaseSeriesChecker:
    """
    Base class for tools to check if a series is appropriate for an estimator
    """

    def check(self, series: TimeSeries) -> TimeSeries:
        """
        Verify whether the series can be used for estimation

        Args:
            series: Series to be evaluated

        Raises:
            (InvalidInputError) If the series cannot be used

        Returns:
            the series, if it is appropriate
        """
        return series  # Default: all series are valid


class SeriesChecker(BaseSeriesChecker):
    """
    Ensures a series is non-empty, that every column has the same length and only finite values,
    and that the ordering axis never decreases.

    Args:
        series_type: Type of series expected by the estimator; also accepts a dataframe holding its columns
        strictly_increasing: Whether to reject repeated values along the ordering axis
    """
    def __init__(self, series_type: type[TimeSeries], strictly_increasing: bool = False):
        self.series_type = series_type
        self.strictly_increasing = strictly_increasing

    def check(self, series: Union[TimeSeries, pd.DataFrame]) -> TimeSeries:
        if isinstance(series, pd.DataFrame):
            series = self.series_type.from_dataframe(series)
        if not isinstance(series, self.series_type):
            raise TypeError(f'Expected a {self.series_type.__name__}, but received a {type(series).__name__}')

        # Ensure all columns are the same length
        lengths = dict((name, len(getattr(series, name))) for name in series.column_names())
        if len(set(lengths.values())) > 1:
            raise InvalidInputError('All columns must be the same length. Lengths: '
                                    + ", ".join(f'{k}={v}' for k, v in lengths.items()))
        if len(series) == 0:
            raise InvalidInputError('Series must contain at least one sample')

        # Ensure all values are usable numbers
        for name in series.column_names():
            if not np.isfinite(getattr(series, name)).all():
                raise InvalidInputError(f'Column "{name}" contains NaN or infinite values')

        # Ensure the ordering axis is monotonic
        steps = np.diff(series.axis)
        if (steps < 0).any():
            first = int(np.argmax(steps < 0))
            raise InvalidInputError(f'{series.axis_name} must be non-decreasing, but decreases after sample {first}')
        if self.strictly_increasing and (steps == 0).any():
            raise InvalidInputError(f'{series.axis_name} must be strictly increasing')

        return series
