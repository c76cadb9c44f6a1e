"""
Tools which estimate the state of health of a battery in an offline fashion, that is, by fitting
models to a whole aging record at once, as opposed to updating an estimate as each measurement arrives.
"""
from soxest.estimators import BaseEstimator


class OfflineEstimator(BaseEstimator):
    """
    Base class for tools which estimate battery health given many measurements of the battery performance over time.

    Create the class by passing the battery parameters and any settings of the fit,
    then perform the estimation using the :meth:`estimate` function.
    """
