"""Containers for the measurement series consumed by estimators and the estimates they produce"""
from typing import Any, ClassVar, Optional
from typing_extensions import Annotated, Self

import numpy as np
import pandas as pd
from pydantic import BaseModel, BeforeValidator, Field


def enforce_vector(x: Any) -> np.ndarray:
    """Copy a user-provided sequence into a 1D array of floats

    Args:
        x: Scalar, list, or array-like with at most one non-unity dimension
    Returns:
        1D float array owned by the caller
    """
    x = np.array(x, dtype=float)
    if x.ndim > 1:
        x = np.squeeze(x)
    if x.ndim > 1:
        raise ValueError(f'Series must be 1D, but array provided has shape {x.shape}')
    return np.atleast_1d(x)


Vector = Annotated[np.ndarray, BeforeValidator(enforce_vector)]
"""A 1D array of floats"""


class TimeSeries(BaseModel, arbitrary_types_allowed=True):
    """Base class for a set of equal-length, time-ordered measurement arrays

    Subclasses declare one :class:`Vector` field per column, the first of which is the
    ordering axis (time or cycle count), and name that field in :attr:`axis_name`.
    Lengths and ordering are not enforced on creation. Use a
    :class:`~soxest.checkers.SeriesChecker` before estimation.
    """

    axis_name: ClassVar[str]
    """Name of the field holding the ordering axis"""

    @property
    def axis(self) -> np.ndarray:
        """Values of the ordering axis"""
        return getattr(self, self.axis_name)

    @classmethod
    def column_names(cls) -> tuple[str, ...]:
        """Names of each column, axis first"""
        return tuple(cls.model_fields.keys())

    def __len__(self) -> int:
        return len(self.axis)

    def to_dataframe(self) -> pd.DataFrame:
        """Store the series as a dataframe with one column per field"""
        return pd.DataFrame({name: getattr(self, name) for name in self.column_names()})

    @classmethod
    def from_dataframe(cls, data: pd.DataFrame) -> Self:
        """Read a series from a dataframe which contains a column for each field

        Args:
            data: Dataframe holding at least the columns in :meth:`column_names`
        Returns:
            Series holding a copy of the data
        """
        missing = set(cls.column_names()).difference(data.columns)
        if len(missing) > 0:
            raise ValueError(f'Dataframe is missing columns: {", ".join(sorted(missing))}')
        return cls(**{name: data[name].to_numpy() for name in cls.column_names()})


class CurrentVoltageSeries(TimeSeries):
    """Current and terminal voltage of a cell sampled over time"""

    axis_name: ClassVar[str] = 'time'

    time: Vector = Field(description='Time of each sample. Units: s')
    current: Vector = Field(description='Current applied to the cell. Units: A')
    voltage: Vector = Field(description='Terminal voltage of the cell. Units: V')


class AgingSeries(TimeSeries):
    """Capacity and series resistance of a cell measured as it ages"""

    axis_name: ClassVar[str] = 'cycles'

    cycles: Vector = Field(description='Number of full cycles completed at each measurement')
    capacity: Vector = Field(description='Measured capacity. Units: Amp-hour')
    resistance: Vector = Field(description='Measured series resistance. Units: Ohm')


class EstimateSequence(BaseModel, arbitrary_types_allowed=True):
    """Estimates of a fractional state (SOC or SOH), one per input sample"""

    values: Vector = Field(description='Estimated state at each sample, each in [0, 1]')
    covariance: Optional[Vector] = Field(default=None,
                                         description='Error covariance of the estimate at each sample, '
                                                     'if the estimator tracks it')

    def __len__(self) -> int:
        return len(self.values)

    def to_dataframe(self, name: str = 'estimate') -> pd.DataFrame:
        """Store the estimates as a dataframe

        Args:
            name: Name of the column holding the estimates. Covariances, if present,
                are stored in a column with ``_var`` appended to the name
        Returns:
            Dataframe with one row per sample
        """
        output = {name: self.values}
        if self.covariance is not None:
            output[f'{name}_var'] = self.covariance
        return pd.DataFrame(output)
