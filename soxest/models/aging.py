"""Empirical laws for how capacity and resistance change as a battery is cycled"""
import numpy as np

from soxest.models.base import FloatOrArray


def capacity_fade(cycles: FloatOrArray,
                  nominal_capacity: float,
                  cycle_life: float,
                  fade: float = 0.2,
                  exponent: float = 0.8) -> np.ndarray:
    """Capacity remaining after a number of cycles

    Follows a power law, ``Q_nom * (1 - fade * (cycles / cycle_life) ** exponent)``,
    so that the cell has lost ``fade`` of its capacity once it reaches its cycle life.

    Args:
        cycles: Number of full cycles completed
        nominal_capacity: Capacity at beginning of life. Units: Amp-hour
        cycle_life: Expected number of cycles before end of life
        fade: Fraction of capacity lost at end of life
        exponent: Exponent of the power law
    Returns:
        Capacity at each cycle count. Units: Amp-hour
    """
    cycles = np.asarray(cycles, dtype=float)
    return nominal_capacity * (1 - fade * np.power(cycles / cycle_life, exponent))


def resistance_growth(cycles: FloatOrArray,
                      nominal_resistance: float,
                      cycle_life: float,
                      growth: float = 0.5) -> np.ndarray:
    """Series resistance after a number of cycles

    Grows linearly, ``R0 * (1 + growth * cycles / cycle_life)``.

    Args:
        cycles: Number of full cycles completed
        nominal_resistance: Resistance at beginning of life. Units: Ohm
        cycle_life: Expected number of cycles before end of life
        growth: Fractional increase of resistance at end of life
    Returns:
        Resistance at each cycle count. Units: Ohm
    """
    cycles = np.asarray(cycles, dtype=float)
    return nominal_resistance * (1 + growth * cycles / cycle_life)
