"""Tests for PowerSeriesExpansion and openness of the analytic set."""
import numpy as np
import pytest

from multiseries.analytic import (
    Ball,
    PowerSeriesExpansion,
    analytic_at,
    analytic_neighbourhood,
    analytic_on,
    has_expansion_at,
)
from multiseries.errors import InvalidExpansionError, OutsideRadiusError
from multiseries.series import Radius
from multiseries.series.library import exponential, geometric, log1p


def _geometric_expansion() -> PowerSeriesExpansion:
    return PowerSeriesExpansion(geometric(), [0.0], 1.0, lambda v: 1.0 / (1.0 - v))


def _exp_expansion() -> PowerSeriesExpansion:
    return PowerSeriesExpansion(exponential(), [0.0], Radius.INFINITE, np.exp)


def test_expansion_matches_function():
    exp = _exp_expansion()

    assert exp.verify([[-1.0], [0.5], [2.0]], atol=1e-9)
    assert exp.check_coeff_zero()
    assert _geometric_expansion().verify([[-0.5], [0.0], [0.6]], atol=1e-9)


def test_expansion_radius_must_be_valid():
    with pytest.raises(InvalidExpansionError):
        PowerSeriesExpansion(geometric(), [0.0], 2.0)
    with pytest.raises(InvalidExpansionError):
        PowerSeriesExpansion(geometric(), [0.0], 0.0)


def test_evaluate_outside_ball():
    expansion = _geometric_expansion().mono(0.5)
    with pytest.raises(OutsideRadiusError):
        expansion.evaluate([0.5])
    assert expansion.evaluate([0.4])[0] == pytest.approx(1.0 / 0.6, abs=1e-10)


def test_mono_shrinks_ball():
    expansion = _geometric_expansion()

    smaller = expansion.mono(0.5)

    assert smaller.radius == 0.5
    assert smaller.verify([[0.25]])
    with pytest.raises(ValueError):
        expansion.mono(2.0)
    with pytest.raises(ValueError):
        expansion.mono(0.0)


def test_sum_and_difference_of_expansions():
    f = _geometric_expansion()
    g = PowerSeriesExpansion(log1p(), [0.0], 1.0, np.log1p)

    total = f + g
    diff = f - g

    assert total.radius == 1.0
    assert total.evaluate([0.3])[0] == pytest.approx(1.0 / 0.7 + np.log1p(0.3), abs=1e-10)
    assert diff.verify([[0.3], [-0.4]], atol=1e-9)
    assert (-f).evaluate([0.3])[0] == pytest.approx(-1.0 / 0.7, abs=1e-10)


def test_sum_requires_shared_center():
    f = _geometric_expansion()
    g = PowerSeriesExpansion(log1p(), [0.1], 0.5, np.log1p)
    with pytest.raises(ValueError):
        f + g


def test_function_defaults_to_series_sum():
    expansion = PowerSeriesExpansion(exponential(), [0.0], 3.0)
    assert expansion.function([1.0])[0] == pytest.approx(np.e, rel=1e-12)
    with pytest.raises(ValueError):
        expansion.verify([[1.0]])


def test_shift_exponential_expansion():
    shifted = _exp_expansion().shift([0.5])

    assert np.allclose(shifted.center, [0.5])
    assert shifted.radius.is_infinite
    assert shifted.check_coeff_zero(atol=1e-10)
    assert shifted.verify([[0.5], [1.0], [1.7]], atol=1e-9)


def test_shift_geometric_expansion():
    shifted = _geometric_expansion().shift([0.3])

    assert shifted.radius.value == pytest.approx(0.7)
    assert shifted.verify([[0.0], [0.4], [0.65]], atol=1e-9)
    with pytest.raises(OutsideRadiusError):
        _geometric_expansion().shift([1.0])


def test_analytic_at_sample_points():
    expansion = _geometric_expansion()

    for point in np.linspace(-0.6, 0.6, 5):
        assert has_expansion_at(expansion, [point])
        local = analytic_at(expansion, [point])
        assert local.radius >= 1.0 - abs(point) - 1e-12
        assert local.check_coeff_zero(atol=1e-9)

    assert analytic_at(expansion, [0.0]) is expansion
    assert not has_expansion_at(expansion, [1.0])


def test_analytic_set_is_open():
    """Every sampled point of the ball has a neighbourhood inside the ball."""
    expansion = _geometric_expansion()
    points = [[p] for p in np.linspace(-0.9, 0.9, 7)]

    balls = analytic_on(expansion, points)

    rng = np.random.default_rng(20)
    for point, ball in zip(points, balls):
        assert isinstance(ball, Ball)
        assert ball.radius > 0
        assert ball.contains(point)
        for _ in range(10):
            nearby = ball.center + rng.uniform(-1.0, 1.0) * 0.99 * ball.radius.value
            assert expansion.ball.contains(nearby)

    with pytest.raises(OutsideRadiusError):
        analytic_neighbourhood(expansion, [1.0])


def test_vector_center_offsets():
    ball = Ball(np.array([1.0, 2.0]), 2.0)

    assert ball.contains([2.0, 3.0])
    assert not ball.contains([3.0, 2.0])
    assert np.allclose(ball.offset([2.0, 3.0]), [1.0, 1.0])
