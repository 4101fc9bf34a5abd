"""Tests for partial sums, full sums and the unconditional-sum reducer."""
from fractions import Fraction

import numpy as np
import pytest

from multiseries.algebra import MultilinearMap
from multiseries.errors import IncompleteSpaceError, OutsideRadiusError, SummationOrderError
from multiseries.series import (
    CoefficientSequence,
    norm_series,
    partial_sum,
    series_sum,
    unconditional_sum,
    uniform_approximation,
)
from multiseries.series.library import (
    cosine,
    exponential,
    geometric,
    inverse_linear_form,
    log1p,
    monomial_tensor,
    polynomial,
    sine,
)


def test_partial_sum_of_geometric_series():
    p = geometric()

    assert partial_sum(p, 3, [0.5])[0] == pytest.approx(1.75)
    assert np.allclose(partial_sum(p, 0, [0.5]), 0.0)
    # Partial sums exist at any point, even outside the radius.
    assert partial_sum(p, 4, [2.0])[0] == pytest.approx(15.0)


def test_partial_sum_rejects_negative_count():
    with pytest.raises(ValueError):
        partial_sum(geometric(), -1, [0.1])


def test_series_sum_geometric():
    assert series_sum(geometric(), [0.5])[0] == pytest.approx(2.0, abs=1e-10)
    assert series_sum(geometric(), [-0.8])[0] == pytest.approx(1.0 / 1.8, abs=1e-10)


def test_series_sum_standard_functions():
    assert series_sum(exponential(), [1.0])[0] == pytest.approx(np.e, rel=1e-12)
    assert series_sum(exponential(), [-2.0])[0] == pytest.approx(np.exp(-2.0), abs=1e-10)
    assert series_sum(log1p(), [0.3])[0] == pytest.approx(np.log1p(0.3), abs=1e-10)
    assert series_sum(sine(), [1.2])[0] == pytest.approx(np.sin(1.2), abs=1e-10)
    assert series_sum(cosine(), [1.2])[0] == pytest.approx(np.cos(1.2), abs=1e-10)


def test_series_sum_outside_radius():
    with pytest.raises(OutsideRadiusError) as excinfo:
        series_sum(geometric(), [1.0])
    assert excinfo.value.norm == pytest.approx(1.0)

    with pytest.raises(OutsideRadiusError):
        series_sum(geometric(), [-1.5])


def test_series_sum_vector_valued():
    a = np.array([0.3, -0.2])
    out = np.array([1.0, 2.0])
    p = inverse_linear_form(a, out)
    y = np.array([0.5, 0.4])

    # Dense coefficients grow as 2**n, so sum the first terms directly.
    approx = partial_sum(p, 14, y)

    assert np.allclose(approx, out / (1.0 - a @ y), atol=1e-9)


def test_series_sum_polynomial_is_exact_partial_sum():
    rng = np.random.default_rng(7)
    maps = [MultilinearMap.constant(rng.normal(size=2), 2)]
    maps += [monomial_tensor(2, 2, n, rng) for n in range(1, 4)]
    p = polynomial(maps)
    y = rng.normal(size=2)

    expected = sum(m.apply_diagonal(y) for m in maps)

    assert np.allclose(series_sum(p, y), expected)
    assert np.allclose(series_sum(p, 100.0 * y), partial_sum(p, 4, 100.0 * y))


def test_exact_coefficients_refuse_infinite_sums():
    p = CoefficientSequence.from_scalars(
        lambda n: Fraction(1, 2 ** n),
        declared_radius=2.0,
        name="exact geometric",
    )
    y = np.array([Fraction(1)], dtype=object)

    assert p.is_exact
    assert partial_sum(p, 3, y)[0] == Fraction(7, 4)
    with pytest.raises(IncompleteSpaceError):
        series_sum(p, y)


def test_norm_series():
    assert norm_series(geometric(), 0.5, 3) == pytest.approx(1.75)


def test_uniform_approximation_bounds_truncation_error():
    p = geometric()
    approx = uniform_approximation(p, 0.5, 0.9)

    assert 0 < approx.a < 1
    for y in (-0.49, 0.3, 0.45):
        exact = 1.0 / (1.0 - y)
        for n in range(30):
            err = abs(exact - partial_sum(p, n, [y])[0])
            assert err <= approx.error_bound(n) * (1 + 1e-9)

    n = approx.terms_for(1e-6)
    assert approx.error_bound(n) <= 1e-6


def test_uniform_approximation_preconditions():
    with pytest.raises(ValueError):
        uniform_approximation(geometric(), 0.5, 0.5)
    with pytest.raises(OutsideRadiusError):
        uniform_approximation(geometric(), 0.5, 1.5)


def test_unconditional_sum_matches_plain_sum():
    rng = np.random.default_rng(8)
    terms = [rng.normal(size=3) for _ in range(25)]

    total = unconditional_sum(terms)

    assert np.allclose(total, np.sum(terms, axis=0))


def test_unconditional_sum_detects_order_dependence():
    terms = [np.array([1.0]), np.array([1e16]), np.array([-1e16])]
    with pytest.raises(SummationOrderError):
        unconditional_sum(terms, tol=1e-20)


def test_unconditional_sum_rejects_infinite_norm_sum():
    with pytest.raises(SummationOrderError):
        unconditional_sum([np.ones(1), np.ones(1)], norms=[1.0, np.inf])


def test_unconditional_sum_exact_terms():
    terms = [np.array([Fraction(1, 3)], dtype=object), np.array([Fraction(2, 3)], dtype=object)]
    assert unconditional_sum(terms)[0] == Fraction(1)


def test_sequence_algebra():
    p = geometric()
    q = exponential()
    y = [0.25]

    total = series_sum(p + q, y)[0]
    diff = series_sum(p - q, y)[0]

    assert total == pytest.approx(1.0 / 0.75 + np.exp(0.25), abs=1e-10)
    assert diff == pytest.approx(1.0 / 0.75 - np.exp(0.25), abs=1e-10)
    assert series_sum(p.scale(3.0), y)[0] == pytest.approx(4.0, abs=1e-10)


def test_truncate_and_symmetrize_sequence():
    rng = np.random.default_rng(9)
    maps = [MultilinearMap.constant([1.0], 2)] + [monomial_tensor(2, 1, n, rng) for n in (1, 2, 3)]
    p = polynomial(maps)
    y = rng.normal(size=2)

    sym = p.symmetrized()

    assert sym[3].is_symmetric()
    assert np.allclose(series_sum(sym, y), series_sum(p, y))
    assert p.truncate(2).degree == 1
    assert np.allclose(series_sum(p.truncate(2), y), partial_sum(p, 2, y))


def test_coefficient_access_validation():
    p = geometric()
    with pytest.raises(IndexError):
        p[-1]
    bad = CoefficientSequence(lambda n: MultilinearMap.constant([1.0], 1), 1, 1)
    with pytest.raises(ValueError):
        bad[2]
