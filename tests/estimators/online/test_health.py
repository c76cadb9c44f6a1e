from pytest import raises, warns
import numpy as np

from soxest.estimators.online.health import KalmanFilterSOH
from soxest.estimators.utils import GuardLog, NumericDegeneracyWarning
from soxest.series import AgingSeries


def test_observation(soh_params):
    kf = KalmanFilterSOH(soh_params)
    guards = GuardLog('test')
    assert np.isclose(kf.observe(2.3, 0.1, guards, 0), 1.)
    assert np.isclose(kf.observe(2.3 * 0.9, 0.2, guards, 0), 0.7 * 0.9 + 0.3 * 0.5)
    assert not guards.counts

    # Zero resistance is floored rather than dividing by zero
    assert np.isfinite(kf.observe(2.3, 0., guards, 3))
    assert guards.counts['non-positive resistance floored'] == 1

    with raises(ValueError, match='Capacity weight'):
        KalmanFilterSOH(soh_params, capacity_weight=1.5)


def test_single_step(soh_params):
    kf = KalmanFilterSOH(soh_params)
    series = AgingSeries(cycles=[0, 1], capacity=[2.3, 2.2], resistance=[0.1, 0.11])
    state = kf.initial_state()
    kf.step(state, series, 1, GuardLog('test'))

    soh_pred = 1 - 1 / 1000
    cov_pred = 0.01 + 1e-6
    observed = 0.7 * 2.2 / 2.3 + 0.3 * 0.1 / 0.11
    gain = cov_pred / (cov_pred + 1e-4)
    assert np.isclose(state.mean, soh_pred + gain * (observed - soh_pred))
    assert np.isclose(state.covariance, (1 - gain) * cov_pred)


def test_aging(soh_params, aging_data):
    estimates = KalmanFilterSOH(soh_params).estimate(aging_data)
    assert len(estimates) == len(aging_data) == 201
    assert estimates.values[0] == 1.
    assert estimates.covariance[0] == 0.01
    assert ((estimates.values >= 0) & (estimates.values <= 1)).all()
    assert (estimates.covariance >= 0).all()

    # Smooth and decreasing over the life of the cell
    assert (np.abs(np.diff(estimates.values)) <= 0.05).all()
    assert estimates.values[-1] < 0.95


def test_dead_cell(soh_params):
    """A cell with no capacity and a very high resistance ends near zero health"""
    series = AgingSeries(cycles=np.arange(20), capacity=np.zeros(20), resistance=np.full(20, 1e6))
    estimates = KalmanFilterSOH(soh_params).estimate(series)
    assert ((estimates.values >= 0) & (estimates.values <= 1)).all()
    assert estimates.values[-1] < 0.05


def test_zero_resistance(soh_params):
    series = AgingSeries(cycles=np.arange(5), capacity=np.full(5, 2.3), resistance=np.zeros(5))
    with warns(NumericDegeneracyWarning, match='non-positive resistance floored'):
        estimates = KalmanFilterSOH(soh_params).estimate(series)
    assert np.isfinite(estimates.values).all()
    assert np.isfinite(estimates.covariance).all()
    assert ((estimates.values >= 0) & (estimates.values <= 1)).all()

    # Floored resistances read as a perfectly healthy cell
    assert estimates.values[-1] == 1.


def test_repeatable(soh_params, aging_data):
    kf = KalmanFilterSOH(soh_params)
    first = kf.estimate(aging_data)
    second = kf.estimate(aging_data)
    assert np.array_equal(first.values, second.values)
    assert np.array_equal(first.covariance, second.covariance)
