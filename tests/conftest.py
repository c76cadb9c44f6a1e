from pytest import fixture
import numpy as np

from soxest.models.base import BatteryParameters
from soxest.models.ocv import reference_ocv
from soxest.series import AgingSeries, CurrentVoltageSeries
from soxest.simulator import generate_aging_data, generate_battery_data


@fixture()
def soc_params() -> BatteryParameters:
    """Parameters of a cell cycled for an hour from 80% SOC"""
    return BatteryParameters(Q_nom=2.3, R0=0.1, SOC_init=0.8, V_ocv=reference_ocv, Ts=1, simTime=3600)


@fixture()
def soh_params() -> BatteryParameters:
    """Parameters of a cell aged for 200 cycles"""
    return BatteryParameters(Q_nom=2.3, R0_nom=0.1, cycle_life=1000, Ts=1, simCycles=200)


@fixture()
def battery_data(soc_params) -> CurrentVoltageSeries:
    return generate_battery_data(soc_params, rng=1001001)


@fixture()
def aging_data(soh_params) -> AgingSeries:
    return generate_aging_data(soh_params, rng=1001001)


@fixture()
def true_soc(soc_params, battery_data) -> np.ndarray:
    """State of charge used to generate the battery data, recovered by Coulomb counting"""
    charge = np.cumsum(battery_data.current[:-1]) * soc_params.sample_period / (soc_params.nominal_capacity * 3600)
    return np.clip(soc_params.initial_soc - np.concatenate([[0.], charge]), 0, 1)
