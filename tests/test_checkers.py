from pytest import fixture, raises
import numpy as np

from soxest.checkers import BaseSeriesChecker, InvalidInputError, SeriesChecker
from soxest.series import AgingSeries, CurrentVoltageSeries


@fixture()
def checker() -> SeriesChecker:
    return SeriesChecker(CurrentVoltageSeries)


def test_valid(checker, battery_data):
    assert checker.check(battery_data) is battery_data

    # Repeated timestamps are allowed
    series = CurrentVoltageSeries(time=[0, 1, 1, 2], current=[0] * 4, voltage=[3.] * 4)
    assert checker.check(series) is series

    # A single sample is enough
    checker.check(CurrentVoltageSeries(time=0, current=0, voltage=3))


def test_dataframe(checker, battery_data):
    series = checker.check(battery_data.to_dataframe())
    assert isinstance(series, CurrentVoltageSeries)
    assert np.array_equal(series.time, battery_data.time)


def test_wrong_type(checker):
    with raises(TypeError, match='Expected a CurrentVoltageSeries'):
        checker.check(AgingSeries(cycles=[0], capacity=[1], resistance=[1]))


def test_mismatched(checker):
    with raises(InvalidInputError, match='same length. Lengths: time=3, current=2, voltage=3'):
        checker.check(CurrentVoltageSeries(time=[0, 1, 2], current=[0, 0], voltage=[3, 3, 3]))


def test_empty(checker):
    with raises(InvalidInputError, match='at least one sample'):
        checker.check(CurrentVoltageSeries(time=[], current=[], voltage=[]))


def test_not_finite(checker):
    with raises(InvalidInputError, match='"voltage" contains NaN'):
        checker.check(CurrentVoltageSeries(time=[0, 1], current=[0, 0], voltage=[3, np.nan]))
    with raises(InvalidInputError, match='"current" contains NaN or infinite'):
        checker.check(CurrentVoltageSeries(time=[0, 1], current=[0, np.inf], voltage=[3, 3]))


def test_decreasing(checker):
    with raises(InvalidInputError, match='time must be non-decreasing, but decreases after sample 1'):
        checker.check(CurrentVoltageSeries(time=[0, 2, 1], current=[0] * 3, voltage=[3.] * 3))

    strict = SeriesChecker(AgingSeries, strictly_increasing=True)
    with raises(InvalidInputError, match='cycles must be strictly increasing'):
        strict.check(AgingSeries(cycles=[0, 1, 1], capacity=[1.] * 3, resistance=[1.] * 3))


def test_base():
    series = CurrentVoltageSeries(time=[1, 0], current=[0, 0], voltage=[3, 3])
    assert BaseSeriesChecker().check(series) is series


def test_is_value_error():
    assert issubclass(InvalidInputError, ValueError)
    assert str(InvalidInputError()) == 'Invalid input series!'
