"""Parameter record which describes the battery being estimated"""
from typing import Callable, List, Optional, Union
from numbers import Number

import numpy as np
from pydantic import AliasChoices, BaseModel, Field

FloatOrArray = Union[Number, List[float], np.ndarray]
"""A number or list of numbers"""

OCVFunction = Callable[[FloatOrArray], FloatOrArray]
"""Function which maps state of charge to a voltage (or voltage slope)"""


class BatteryParameters(BaseModel, frozen=True, arbitrary_types_allowed=True):
    """Physical parameters of a battery and the settings of an estimation run

    The record is immutable so that it can be shared between estimators running concurrently.
    Each field may be provided with its descriptive name or the short name commonly used in
    battery literature, so both of the following are equivalent

    .. code-block:: python

        params = BatteryParameters(Q_nom=2.3, R0=0.1, SOC_init=0.8, V_ocv=reference_ocv)
        params = BatteryParameters(nominal_capacity=2.3, nominal_resistance=0.1,
                                   initial_soc=0.8, ocv=reference_ocv)

    The open-circuit voltage is any plain callable taking state of charge and returning volts.
    Supply ``ocv_derivative`` alongside it when the slope is known analytically; otherwise the
    filters which need the slope compute it with finite differences.
    """

    nominal_capacity: float = Field(gt=0,
                                    validation_alias=AliasChoices('nominal_capacity', 'Q_nom'),
                                    description='Nominal capacity of the cell. Units: Amp-hour')
    nominal_resistance: float = Field(gt=0,
                                      validation_alias=AliasChoices('nominal_resistance', 'R0', 'R0_nom'),
                                      description='Nominal (beginning of life) series resistance. Units: Ohm')
    initial_soc: float = Field(default=1., ge=0, le=1,
                               validation_alias=AliasChoices('initial_soc', 'SOC_init'),
                               description='State of charge at the first sample')
    initial_soh: float = Field(default=1., ge=0, le=1,
                               validation_alias=AliasChoices('initial_soh', 'SOH_init'),
                               description='State of health at the first cycle')
    sample_period: float = Field(default=1., gt=0,
                                 validation_alias=AliasChoices('sample_period', 'Ts'),
                                 description='Time between consecutive samples. Units: s')
    cycle_life: float = Field(default=1000., gt=0,
                              description='Expected number of full cycles before end of life')
    ocv: Optional[OCVFunction] = Field(default=None,
                                       validation_alias=AliasChoices('ocv', 'V_ocv'),
                                       description='Open-circuit voltage as a function of state of charge')
    ocv_derivative: Optional[OCVFunction] = Field(default=None,
                                                  validation_alias=AliasChoices('ocv_derivative', 'dV_ocv'),
                                                  description='Slope of the open-circuit voltage with respect to '
                                                              'state of charge')
    sim_time: float = Field(default=3600., gt=0,
                            validation_alias=AliasChoices('sim_time', 'simTime'),
                            description='Length of a simulated current/voltage record. Units: s')
    sim_cycles: int = Field(default=200, ge=0,
                            validation_alias=AliasChoices('sim_cycles', 'simCycles'),
                            description='Number of cycles in a simulated aging record')

    def require_ocv(self) -> OCVFunction:
        """Access the open-circuit voltage function

        Returns:
            The OCV function
        Raises:
            ValueError: If no OCV function was provided
        """
        if self.ocv is None:
            raise ValueError('An open-circuit voltage function (V_ocv) is required to estimate state of charge')
        return self.ocv
