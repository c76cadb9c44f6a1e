"""Estimators for the state of charge and state of health of batteries"""
from soxest.version import __version__  # noqa: F401
