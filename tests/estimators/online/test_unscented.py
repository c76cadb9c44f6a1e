from pytest import raises, warns
import numpy as np

from soxest.estimators.online.extended import ExtendedKalmanFilterSOC
from soxest.estimators.online.unscented import (UKFTuningParameters, UnscentedKalmanFilterSOC,
                                                compute_unscented_covariance)
from soxest.estimators.utils import GuardLog, NumericDegeneracyWarning
from soxest.models.base import BatteryParameters
from soxest.series import CurrentVoltageSeries


def test_weights(soc_params):
    ukf = UnscentedKalmanFilterSOC(soc_params)
    lam = 1e-6 * 1 - 1
    assert np.isclose(ukf.lambda_param, lam)
    assert ukf.mean_weights.shape == ukf.cov_weights.shape == (3,)
    assert np.isclose(ukf.mean_weights[0], lam / (1 + lam))
    assert np.allclose(ukf.mean_weights[1:], 0.5 / (1 + lam))
    assert np.isclose(ukf.mean_weights.sum(), 1.)
    assert np.isclose(ukf.cov_weights[0], ukf.mean_weights[0] + 1 - 1e-6 + 2)
    assert np.array_equal(ukf.cov_weights[1:], ukf.mean_weights[1:])


def test_tuning(soc_params):
    with raises(ValueError, match='Alpha'):
        UnscentedKalmanFilterSOC(soc_params, alpha_param=2.)
    with raises(ValueError, match='Beta'):
        UnscentedKalmanFilterSOC(soc_params, beta_param=-1.)
    with raises(ValueError, match='Kappa'):
        UnscentedKalmanFilterSOC(soc_params, kappa_param=-1.)

    ukf = UnscentedKalmanFilterSOC.from_tuning(soc_params, UKFTuningParameters(alpha_param=0.5), sensor_noise=0.02)
    assert ukf.alpha_param == 0.5
    assert ukf.beta_param == 2.
    assert ukf.kappa_param == 0.
    assert ukf.sensor_noise == 0.02


def test_covariance():
    weights = np.array([0.5, 0.25, 0.25])
    assert np.isclose(compute_unscented_covariance(weights, np.array([0., -1., 1.])), 0.5)
    assert np.isclose(compute_unscented_covariance(weights, np.array([0., -1., 1.]), np.array([0., -2., 2.])), 1.)


def test_sigma_points(soc_params):
    ukf = UnscentedKalmanFilterSOC(soc_params, alpha_param=1.)
    points = ukf.build_sigma_points(ukf.initial_state())
    spread = np.sqrt(1 * 0.1)
    assert np.allclose(points, [0.8, 0.8 - spread, 0.8 + spread])


def test_single_step(soc_params):
    """Follow one step with the sums written out"""
    ukf = UnscentedKalmanFilterSOC(soc_params, alpha_param=0.5)
    series = CurrentVoltageSeries(time=[0, 10], current=[-2., 0], voltage=[3.8, 3.85])
    state = ukf.initial_state()
    ukf.step(state, series, 1, GuardLog('test'))

    dim, alpha, beta = 1, 0.5, 2.
    lam = alpha ** 2 * dim - dim
    wm = np.array([lam / (dim + lam), 0.5 / (dim + lam), 0.5 / (dim + lam)])
    wc = wm.copy()
    wc[0] += 1 - alpha ** 2 + beta

    sigma = np.sqrt((dim + lam) * 0.1)
    x = np.array([0.8, 0.8 - sigma, 0.8 + sigma]) + 2. * 10 / (2.3 * 3600)
    x_mean = np.sum(wm * x)
    p_pred = 1e-5 + np.sum(wc * (x - x_mean) ** 2)
    z = 3.2 + 0.7 * x + 0.1 * x ** 2 + 2. * 0.1
    z_mean = np.sum(wm * z)
    pzz = 0.01 + np.sum(wc * (z - z_mean) ** 2)
    pxz = np.sum(wc * (x - x_mean) * (z - z_mean))
    gain = pxz / pzz

    assert np.isclose(state.mean, x_mean + gain * (3.85 - z_mean))
    assert np.isclose(state.covariance, p_pred - gain * pzz * gain)


def test_hour_profile(soc_params, battery_data, true_soc):
    estimates = UnscentedKalmanFilterSOC(soc_params).estimate(battery_data)
    assert len(estimates) == 3601
    assert estimates.values[0] == soc_params.initial_soc
    assert ((estimates.values >= 0) & (estimates.values <= 1)).all()
    assert (estimates.covariance >= 0).all()
    assert np.abs(estimates.values - true_soc).mean() < 0.05

    # Should agree with the EKF for a mildly nonlinear OCV
    ekf = ExtendedKalmanFilterSOC(soc_params).estimate(battery_data)
    assert np.abs(estimates.values - ekf.values).mean() < 0.02


def test_zero_measurement_variance(soc_params):
    """A flat OCV with no sensor noise makes the predicted voltage variance zero"""
    params = soc_params.model_copy(update={'ocv': lambda soc: np.full_like(soc, 3.7)})
    ukf = UnscentedKalmanFilterSOC(params, sensor_noise=0.)
    series = CurrentVoltageSeries(time=np.arange(5), current=np.zeros(5), voltage=np.full(5, 3.7))
    with warns(NumericDegeneracyWarning, match='predicted voltage variance floored'):
        estimates = ukf.estimate(series)
    assert np.isfinite(estimates.values).all()
    assert np.allclose(estimates.values, 0.8)


def test_degenerate_inputs(soc_params):
    series = CurrentVoltageSeries(time=[0, 0, 0, 1], current=[1., 1., 1., 1.], voltage=[0., -3., 3.8, 50.])
    estimates = UnscentedKalmanFilterSOC(soc_params).estimate(series)
    assert np.isfinite(estimates.values).all()
    assert ((estimates.values >= 0) & (estimates.values <= 1)).all()


def test_repeatable(soc_params, battery_data):
    ukf = UnscentedKalmanFilterSOC(soc_params)
    assert np.array_equal(ukf.estimate(battery_data).values, ukf.estimate(battery_data).values)


def test_empty_cell_sqrt_ocv():
    """Sigma points beyond zero SOC are not passed to an OCV curve undefined there"""
    params = BatteryParameters(Q_nom=2.3, R0=0.1, SOC_init=0.05, V_ocv=lambda s: 3 + 1.2 * np.sqrt(s))
    series = CurrentVoltageSeries(time=np.arange(50), current=np.full(50, 0.5), voltage=np.full(50, 2.9))
    estimates = UnscentedKalmanFilterSOC(params).estimate(series)
    assert np.isfinite(estimates.values).all()
    assert np.isfinite(estimates.covariance).all()
    assert ((estimates.values >= 0) & (estimates.values <= 1)).all()


def test_non_finite_prediction(soc_params):
    params = soc_params.model_copy(update={'ocv': lambda soc: np.full_like(soc, np.nan)})
    series = CurrentVoltageSeries(time=[0, 1, 2], current=[0., 0., 0.], voltage=[3.8, 3.8, 3.8])
    with warns(NumericDegeneracyWarning, match='correction skipped'):
        estimates = UnscentedKalmanFilterSOC(params).estimate(series)
    assert np.allclose(estimates.values, 0.8)
    assert np.isfinite(estimates.covariance).all()
