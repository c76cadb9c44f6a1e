"""Process and measurement models of a cell described by an OCV curve and a series resistance"""
from soxest.models.base import FloatOrArray, OCVFunction


def coulomb_count(soc: FloatOrArray, current: float, delta_t: float, capacity: float) -> FloatOrArray:
    """Advance the state of charge by integrating current over a time step

    Args:
        soc: State(s) of charge at the start of the step
        current: Current over the step. Units: A
        delta_t: Length of the step. Units: s
        capacity: Capacity of the cell. Units: Amp-hour
    Returns:
        State(s) of charge at the end of the step
    """
    return soc - current * delta_t / (capacity * 3600.)


def terminal_voltage(ocv: OCVFunction, soc: FloatOrArray, current: float, resistance: float) -> FloatOrArray:
    """Voltage at the cell terminals given the open-circuit voltage and the drop across the series resistance

    Args:
        ocv: Open-circuit voltage as a function of SOC
        soc: State(s) of charge
        current: Current through the cell. Units: A
        resistance: Series resistance. Units: Ohm
    Returns:
        Terminal voltage(s). Units: V
    """
    return ocv(soc) - current * resistance
