"""Partial and full sums of a coefficient sequence on the diagonal.

``series_sum(p, y)`` evaluates ``Σ_n p_n(y, ..., y)``. It is only meaningful
strictly inside the radius and over a complete target space, and both
conditions are checked at the boundary instead of returning a best-effort
number.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging
import math

import numpy as np

from multiseries.algebra.multilinear import as_vector, vector_norm
from multiseries.config import DEFAULT_TOLERANCE, MAX_TERMS
from multiseries.errors import IncompleteSpaceError, OutsideRadiusError, SummationOrderError
from multiseries.series.coefficients import CoefficientSequence
from multiseries.series.radius import geometric_domination, radius

logger = logging.getLogger(__name__)


def partial_sum(p: CoefficientSequence, n: int, y) -> np.ndarray:
    """``Σ_{k<n} p_k(y, ..., y)``; defined for every ``y`` and ``n >= 0``."""
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    y = as_vector(y, p.dim_in)
    total = np.zeros(p.dim_out, dtype=np.result_type(y.dtype, float))
    for k in range(n):
        total = total + p[k].apply_diagonal(y)
    return total


def norm_series(p: CoefficientSequence, r: float, n_terms: int) -> float:
    """``Σ_{n<n_terms} ‖p_n‖ r^n``, the majorant of every partial sum on the ball of radius r."""
    return float(sum(nrm * r ** n for n, nrm in enumerate(p.norms(n_terms))))


def require_complete(p: CoefficientSequence, operation: str = "series_sum") -> None:
    if p.is_exact:
        raise IncompleteSpaceError(
            f"{operation} needs a complete target space; {p.name} has exact "
            "coefficients, whose infinite sums need not exist"
        )


def require_inside(p: CoefficientSequence, y, operation: str = "series_sum") -> float:
    """Return ``‖y‖`` after checking ``‖y‖ < radius(p)``."""
    norm = vector_norm(as_vector(y, p.dim_in))
    R = radius(p)
    if not R > norm:
        raise OutsideRadiusError(norm, R, operation)
    return norm


def terms_needed(p: CoefficientSequence, r: float, tol: float) -> int:
    """Number of terms after which the tail on the ball of radius ``r`` is below ``tol``."""
    if p.degree is not None:
        return p.degree + 1
    bound = geometric_domination(p, r)
    n = max(bound.terms_for(tol), 1)
    if n > MAX_TERMS:
        logger.warning(
            "%s: %d terms needed for tol=%.3g at r=%.6g; capping at MAX_TERMS=%d",
            p.name, n, tol, r, MAX_TERMS,
        )
        n = MAX_TERMS
    return n


def series_sum(p: CoefficientSequence, y, tol: Optional[float] = None) -> np.ndarray:
    """
    Sum of the series at ``y``.

    Raises:
        IncompleteSpaceError: the coefficients live over an incomplete field
        OutsideRadiusError: ``‖y‖ >= radius(p)``
    """
    tol = DEFAULT_TOLERANCE if tol is None else tol
    require_complete(p)
    r = require_inside(p, y)
    n = terms_needed(p, r, tol)
    logger.debug("%s: summing %d terms at ‖y‖=%.6g", p.name, n, r)
    return partial_sum(p, n, y)


@dataclass(frozen=True)
class UniformApproximation:
    """``‖sum(p, y) - partial_sum(p, n, y)‖ <= C a^n`` for every ``‖y‖ < r``."""

    a: float
    C: float
    r: float

    def error_bound(self, n: int) -> float:
        return self.C * self.a ** n

    def terms_for(self, tol: float) -> int:
        if tol <= 0:
            raise ValueError("tol must be positive")
        if self.C <= tol:
            return 0
        return int(math.ceil(math.log(tol / self.C) / math.log(self.a)))


def uniform_approximation(p: CoefficientSequence, r_inner: float, r_outer: float) -> UniformApproximation:
    """
    Geometric bound on the truncation error, uniform on the ball of radius ``r_inner``.

    Requires ``0 <= r_inner < r_outer <= radius(p)``. The rate comes from
    dominating the coefficients at the midpoint ``r_mid`` and paying the ratio
    ``r_inner / r_mid`` per term, so the bound holds on any closed sub-ball.
    """
    if not 0 <= r_inner < r_outer:
        raise ValueError(f"need 0 <= r_inner < r_outer, got {r_inner}, {r_outer}")
    R = radius(p)
    if R < r_outer:
        raise OutsideRadiusError(r_outer, R, "uniform approximation")

    r_mid = 0.5 * (r_inner + r_outer)
    base = geometric_domination(p, r_mid)
    ratio = r_inner / r_mid if r_inner > 0 else 0.5
    a = base.a * ratio
    C = base.C / (1.0 - a)
    return UniformApproximation(a=a, C=C, r=float(r_inner))


def unconditional_sum(
    terms: Sequence,
    norms: Optional[Sequence[float]] = None,
    tol: Optional[float] = None,
) -> np.ndarray:
    """
    Sum a finite family whose value must not depend on enumeration order.

    The family is checked for a finite norm sum, then summed forwards and
    backwards; a disagreement beyond ``tol`` (relative to the norm sum) is a
    ``SummationOrderError``. The returned value is accumulated in ascending
    norm order.
    """
    tol = DEFAULT_TOLERANCE if tol is None else tol
    vectors: List[np.ndarray] = [np.asarray(t) for t in terms]
    if not vectors:
        raise ValueError("cannot sum an empty family without a shape")
    if norms is None:
        norms = [float(np.linalg.norm(v.astype(complex) if v.dtype == object else v)) for v in vectors]
    if len(norms) != len(vectors):
        raise ValueError("norms and terms must have the same length")

    abs_total = float(sum(norms))
    if not math.isfinite(abs_total):
        raise SummationOrderError("family is not absolutely summable; refusing to reorder")

    forward = vectors[0]
    for v in vectors[1:]:
        forward = forward + v
    backward = vectors[-1]
    for v in reversed(vectors[:-1]):
        backward = backward + v

    discrepancy = float(np.linalg.norm(np.asarray(forward - backward, dtype=complex)))
    allowed = tol * max(1.0, abs_total)
    if discrepancy > allowed:
        raise SummationOrderError(
            f"enumeration orders disagree by {discrepancy:.3g} (allowed {allowed:.3g})"
        )

    order = sorted(range(len(vectors)), key=lambda i: norms[i])
    total = vectors[order[0]]
    for i in order[1:]:
        total = total + vectors[i]
    return total
