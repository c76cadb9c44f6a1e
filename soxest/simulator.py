"""Generate synthetic measurements of a battery for exercising the estimators"""
from typing import Union

import numpy as np

from soxest.models.aging import capacity_fade, resistance_growth
from soxest.models.base import BatteryParameters
from soxest.models.cell import coulomb_count, terminal_voltage
from soxest.series import AgingSeries, CurrentVoltageSeries

RandomState = Union[np.random.Generator, int, None]
"""A random number generator or the seed used to create one"""


def generate_battery_data(params: BatteryParameters,
                          rng: RandomState = None,
                          base_current: float = -0.1,
                          current_noise: float = 0.05,
                          num_pulses: int = 15,
                          pulse_current: float = -1.5,
                          voltage_noise: float = 0.01) -> CurrentVoltageSeries:
    """
    Simulate the current and terminal voltage of a cell sampled every ``params.sample_period``
    for ``params.sim_time`` seconds

    The current is a constant base value with Gaussian noise, replaced by a pulse at randomly-chosen samples.
    The voltage is computed from the OCV curve and the series resistance at the true SOC, plus Gaussian noise,
    and the true SOC is then advanced by Coulomb counting over the sample period.

    Args:
        params: Parameters of the battery. Must include an OCV function
        rng: Random number generator, or a seed for one
        base_current: Mean current outside of pulses. Units: A
        current_noise: Standard deviation of the current noise. Units: A
        num_pulses: Number of samples replaced by a pulse
        pulse_current: Current during a pulse. Units: A
        voltage_noise: Standard deviation of the voltage noise. Units: V

    Returns:
        Simulated series
    """
    rng = np.random.default_rng(rng)
    ocv = params.require_ocv()

    time = np.arange(0, params.sim_time + params.sample_period / 2, params.sample_period)
    num_samples = len(time)

    current = base_current + current_noise * rng.standard_normal(num_samples)
    pulse_idx = rng.integers(0, num_samples, size=num_pulses)
    current[pulse_idx] = pulse_current

    # Step the true state
    soc = params.initial_soc
    voltage = np.zeros((num_samples,))
    for k in range(num_samples):
        voltage[k] = terminal_voltage(ocv, soc, current[k], params.nominal_resistance) \
            + voltage_noise * rng.standard_normal()
        soc = float(np.clip(coulomb_count(soc, current[k], params.sample_period, params.nominal_capacity), 0, 1))

    return CurrentVoltageSeries(time=time, current=current, voltage=voltage)


def generate_aging_data(params: BatteryParameters,
                        rng: RandomState = None,
                        capacity_noise: float = 0.01,
                        resistance_noise: float = 0.005) -> AgingSeries:
    """
    Simulate the capacity and resistance of a cell measured once per cycle for ``params.sim_cycles`` cycles

    Capacity follows :func:`~soxest.models.aging.capacity_fade` and resistance follows
    :func:`~soxest.models.aging.resistance_growth`, each with added Gaussian noise.
    Capacities are kept non-negative and resistances are kept at or above the nominal value.

    Args:
        params: Parameters of the battery
        rng: Random number generator, or a seed for one
        capacity_noise: Standard deviation of the capacity noise. Units: Amp-hour
        resistance_noise: Standard deviation of the resistance noise. Units: Ohm

    Returns:
        Simulated series, starting from cycle 0
    """
    rng = np.random.default_rng(rng)
    cycles = np.arange(params.sim_cycles + 1, dtype=float)
    num_samples = len(cycles)

    capacity = capacity_fade(cycles, params.nominal_capacity, params.cycle_life)
    capacity = np.maximum(capacity + capacity_noise * rng.standard_normal(num_samples), 0.)

    resistance = resistance_growth(cycles, params.nominal_resistance, params.cycle_life)
    resistance = np.maximum(resistance + resistance_noise * rng.standard_normal(num_samples),
                            params.nominal_resistance)

    return AgingSeries(cycles=cycles, capacity=capacity, resistance=resistance)
