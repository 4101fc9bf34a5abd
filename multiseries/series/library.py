"""Coefficient sequences of standard functions, expanded at the origin."""
from __future__ import annotations

import numpy as np
from scipy.special import factorial

from multiseries.algebra.multilinear import MultilinearMap, as_vector, vector_norm
from multiseries.series.coefficients import CoefficientSequence
from multiseries.series.radius import Radius


def geometric(scale: float = 1.0) -> CoefficientSequence:
    """``1 / (1 - scale*y)``: ``c_n = scale^n``, radius ``1/|scale|``."""
    if scale == 0:
        return CoefficientSequence.from_scalars(lambda n: 1.0, degree=0, name="geometric")
    return CoefficientSequence.from_scalars(
        lambda n: float(scale) ** n,
        declared_radius=Radius.finite(1.0 / abs(scale)),
        name="geometric",
    )


def exponential() -> CoefficientSequence:
    """``exp(y)``: ``c_n = 1/n!``, infinite radius."""
    return CoefficientSequence.from_scalars(
        lambda n: float(1.0 / factorial(n, exact=False)),
        declared_radius=Radius.INFINITE,
        name="exp",
    )


def log1p() -> CoefficientSequence:
    """``log(1 + y)``: ``c_n = (-1)^{n+1}/n``, radius 1."""
    return CoefficientSequence.from_scalars(
        lambda n: 0.0 if n == 0 else (-1.0) ** (n + 1) / n,
        declared_radius=Radius.finite(1.0),
        name="log1p",
    )


def sine() -> CoefficientSequence:
    def coefficient(n: int) -> float:
        if n % 2 == 0:
            return 0.0
        return (-1.0) ** ((n - 1) // 2) / float(factorial(n, exact=False))

    return CoefficientSequence.from_scalars(coefficient, declared_radius=Radius.INFINITE, name="sin")


def cosine() -> CoefficientSequence:
    def coefficient(n: int) -> float:
        if n % 2 == 1:
            return 0.0
        return (-1.0) ** (n // 2) / float(factorial(n, exact=False))

    return CoefficientSequence.from_scalars(coefficient, declared_radius=Radius.INFINITE, name="cos")


def inverse_linear_form(covector, output=None) -> CoefficientSequence:
    """
    ``v -> output / (1 - <a, v>)`` on ``R^d``.

    The coefficients ``p_n = output ⊗ a ⊗ ... ⊗ a`` are rank one, so their
    operator norms are exactly ``‖output‖ ‖a‖^n`` and the radius is ``1/‖a‖``.
    Dense coefficients have ``d**n`` entries, so for ``d > 1`` only low
    degrees are practical to materialize; norms are available in closed form.
    """
    a = as_vector(covector).astype(float)
    out = as_vector(1.0 if output is None else output).astype(float)
    dim_in, dim_out = a.shape[0], out.shape[0]
    norm_a = vector_norm(a)
    if norm_a == 0.0:
        return CoefficientSequence.from_maps([MultilinearMap.constant(out, dim_in)], name="constant")
    return CoefficientSequence(
        lambda n: MultilinearMap.outer_power(a, n, out),
        dim_in,
        dim_out,
        declared_radius=Radius.finite(1.0 / norm_a),
        norm=lambda n: vector_norm(out) * norm_a ** n,
        name="inverse_linear_form",
    )


def polynomial(maps) -> CoefficientSequence:
    """Finite sequence ``maps[0], maps[1], ...`` (infinite radius)."""
    return CoefficientSequence.from_maps(list(maps))


def monomial_tensor(dim_in: int, dim_out: int, degree: int, rng: np.random.Generator) -> MultilinearMap:
    """Random, generally non-symmetric coefficient of the given degree."""
    return MultilinearMap(rng.normal(size=(dim_out,) + (dim_in,) * degree), dim_in=dim_in)
