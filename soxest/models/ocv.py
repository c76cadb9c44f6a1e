"""Open-circuit voltage curves as a function of the state of charge"""
from typing import Sequence

import numpy as np
from numpy.polynomial.polynomial import polyval, polyder

from soxest.models.base import FloatOrArray, OCVFunction

REFERENCE_OCV_COEFFS = (3.2, 0.7, 0.1)
"""Power-series coefficients (lowest order first) of the reference OCV curve, 3.2 + 0.7 s + 0.1 s^2"""


def polynomial_ocv(coeffs: Sequence[float]) -> OCVFunction:
    """Make an OCV function described by a power-series polynomial

    Args:
        coeffs: Coefficients of the polynomial, starting from the constant term
    Returns:
        Function which maps SOC to open-circuit voltage
    """
    coeffs = np.array(coeffs, dtype=float)

    def _ocv(soc: FloatOrArray) -> FloatOrArray:
        return polyval(soc, coeffs)

    return _ocv


def polynomial_ocv_derivative(coeffs: Sequence[float]) -> OCVFunction:
    """Make the derivative of an OCV function described by a power-series polynomial

    Args:
        coeffs: Coefficients of the polynomial, starting from the constant term
    Returns:
        Function which maps SOC to the slope of the open-circuit voltage
    """
    slope_coeffs = polyder(np.array(coeffs, dtype=float))

    def _docv(soc: FloatOrArray) -> FloatOrArray:
        return polyval(soc, slope_coeffs)

    return _docv


def reference_ocv(soc: FloatOrArray) -> FloatOrArray:
    """Reference OCV curve, ``3.2 + 0.7 * soc + 0.1 * soc ** 2``"""
    return polyval(soc, REFERENCE_OCV_COEFFS)


def reference_ocv_derivative(soc: FloatOrArray) -> FloatOrArray:
    """Slope of the reference OCV curve, ``0.7 + 0.2 * soc``"""
    return polyval(soc, polyder(REFERENCE_OCV_COEFFS))


def numerical_derivative(func: OCVFunction,
                         x: FloatOrArray,
                         step: float = 1e-6,
                         lower: float = 0.,
                         upper: float = 1.) -> FloatOrArray:
    """Slope of a function estimated with a central finite difference

    The stencil never leaves ``[lower, upper]``, the range where an OCV curve is defined,
    so the difference becomes one-sided at either bound.

    Args:
        func: Function to differentiate
        x: Point(s) at which to evaluate the slope
        step: Half-width of the difference stencil
        lower: Smallest value at which ``func`` may be evaluated
        upper: Largest value at which ``func`` may be evaluated
    Returns:
        Estimated slope
    """
    x = np.clip(x, lower, upper)
    x_low = np.clip(x - step, lower, upper)
    x_high = np.clip(x + step, lower, upper)
    return (func(x_high) - func(x_low)) / (x_high - x_low)
