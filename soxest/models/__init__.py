"""Parameters and physics of the battery being estimated

The models are deliberately simple: an open-circuit voltage curve as a function of state of charge,
and empirical capacity fade and resistance growth laws as a function of cycle count.
"""
from soxest.models.base import BatteryParameters  # noqa: F401
