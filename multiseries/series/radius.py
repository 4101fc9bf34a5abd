"""Radius of convergence: the extended radius type and its estimators.

``radius(p)`` is the supremum of the ``r >= 0`` for which ``‖p_n‖ r^n`` stays
bounded. Every other component leans on one consequence of that definition,
``geometric_domination``: strictly inside the radius the weighted norms decay
at a geometric rate, which is what makes sums absolutely convergent and
rearrangements legal.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import TYPE_CHECKING, List, Optional, Union
import logging
import math

from multiseries.config import MAX_TERMS, RADIUS_WINDOW
from multiseries.errors import OutsideRadiusError

if TYPE_CHECKING:
    from multiseries.series.coefficients import CoefficientSequence

logger = logging.getLogger(__name__)

# Block-maximum ratio of n-th roots above which growth (or decay) is treated
# as faster than any geometric rate.
_TREND_RATIO = 2.0


class RadiusKind(str, Enum):
    FINITE = "finite"
    INFINITE = "infinite"


@total_ordering
class Radius:
    """
    Extended non-negative real in ``[0, ∞]`` with saturating arithmetic.

    Infinity is an explicit tag rather than IEEE ``inf`` so that subtraction
    and comparisons never produce NaN.
    """

    __slots__ = ("kind", "value")

    def __init__(self, kind: RadiusKind, value: float = 0.0) -> None:
        if kind is RadiusKind.FINITE:
            value = float(value)
            if math.isnan(value) or math.isinf(value) or value < 0:
                raise ValueError(f"finite radius must be a non-negative real, got {value}")
        else:
            value = 0.0
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", value)

    def __setattr__(self, name, value):
        raise AttributeError("Radius is immutable")

    @classmethod
    def finite(cls, value: float) -> "Radius":
        return cls(RadiusKind.FINITE, value)

    @classmethod
    def infinite(cls) -> "Radius":
        return cls(RadiusKind.INFINITE)

    @classmethod
    def coerce(cls, value: Union["Radius", float, int]) -> "Radius":
        """Accept a Radius or a real number (``math.inf`` maps to the infinite tag)."""
        if isinstance(value, Radius):
            return value
        value = float(value)
        if math.isinf(value) and value > 0:
            return cls.infinite()
        return cls.finite(value)

    @property
    def is_finite(self) -> bool:
        return self.kind is RadiusKind.FINITE

    @property
    def is_infinite(self) -> bool:
        return self.kind is RadiusKind.INFINITE

    def to_float(self) -> float:
        """Float view for numeric code; infinite becomes ``math.inf``."""
        return self.value if self.is_finite else math.inf

    # Arithmetic ---------------------------------------------------------

    def __add__(self, other) -> "Radius":
        other = Radius.coerce(other)
        if self.is_infinite or other.is_infinite:
            return Radius.infinite()
        return Radius.finite(self.value + other.value)

    __radd__ = __add__

    def __sub__(self, other) -> "Radius":
        """Truncated subtraction: ``∞ - finite = ∞``, ``finite - ∞ = 0``, never negative."""
        other = Radius.coerce(other)
        if self.is_infinite:
            return self if other.is_finite else Radius.finite(0.0)
        if other.is_infinite:
            return Radius.finite(0.0)
        return Radius.finite(max(self.value - other.value, 0.0))

    def min(self, other) -> "Radius":
        other = Radius.coerce(other)
        return self if self <= other else other

    def max(self, other) -> "Radius":
        other = Radius.coerce(other)
        return self if self >= other else other

    def interior_point(self, r: float) -> float:
        """A real strictly between ``r`` and this radius; requires ``r < self``."""
        if not self > r:
            raise ValueError(f"{r} is not strictly inside radius {self}")
        if self.is_infinite:
            return max(2.0 * r, r + 1.0)
        return 0.5 * (r + self.value)

    # Comparisons --------------------------------------------------------

    def _key(self):
        return (self.is_infinite, self.value)

    def __eq__(self, other) -> bool:
        try:
            other = Radius.coerce(other)
        except (TypeError, ValueError):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other) -> bool:
        return self._key() < Radius.coerce(other)._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return "Radius(∞)" if self.is_infinite else f"Radius({self.value:.6g})"

    def __str__(self) -> str:
        return "∞" if self.is_infinite else f"{self.value:.6g}"


Radius.ZERO = Radius.finite(0.0)
Radius.INFINITE = Radius.infinite()


@dataclass(frozen=True)
class GeometricBound:
    """Witness ``‖p_n‖ r^n <= C a^n`` for all ``n``, with ``0 < a < 1``."""

    a: float
    C: float
    r: float

    def bound(self, n: int) -> float:
        return self.C * self.a ** n

    def tail(self, n: int) -> float:
        """Bound on ``Σ_{k>=n} C a^k``."""
        return self.C * self.a ** n / (1.0 - self.a)

    def terms_for(self, tol: float) -> int:
        """Smallest ``n`` with ``tail(n) <= tol``."""
        if tol <= 0:
            raise ValueError("tol must be positive")
        head = self.C / (1.0 - self.a)
        if head <= tol:
            return 0
        return int(math.ceil(math.log(tol / head) / math.log(self.a)))


# ============================================================================
# Estimation
# ============================================================================

def _window(p: "CoefficientSequence", window: Optional[int]) -> int:
    n = RADIUS_WINDOW if window is None else int(window)
    if p.degree is not None:
        n = min(n, p.degree + 1)
    return max(n, 1)


def _nth_roots(norms: List[float]) -> List[float]:
    return [nrm ** (1.0 / n) if n > 0 and nrm > 0 else 0.0 for n, nrm in enumerate(norms)]


def estimate_radius(p: "CoefficientSequence", window: Optional[int] = None) -> Radius:
    """
    Cauchy-Hadamard estimate ``1 / limsup ‖p_n‖^{1/n}`` from a finite window.

    The limsup is read off the maximum n-th root over the upper half of the
    window. When the largest root of the last quarter differs from the largest
    root of the second eighth by more than a fixed factor, the growth (or
    decay) is classified as super-geometric, giving ``0`` (or ``∞``). Large
    polynomial prefactors such as ``n^5 2^n`` can fool this test on short
    windows; raise ``RADIUS_WINDOW`` or declare the radius for such sequences.
    """
    if p.degree is not None:
        return Radius.INFINITE

    n_terms = max(_window(p, window), 4)
    roots = _nth_roots(p.norms(n_terms))

    if not any(roots[1:]):
        logger.debug("all %d inspected coefficients vanish; radius is infinite", n_terms)
        return Radius.INFINITE

    half = n_terms // 2
    tail = roots[half:]
    limsup = max(tail)
    if limsup == 0.0:
        return Radius.INFINITE

    early = max(roots[n_terms // 8:n_terms // 4 + 1])
    late = max(roots[(3 * n_terms) // 4:])
    if early > 0.0 and late > _TREND_RATIO * early:
        logger.debug("n-th roots grow from %.4g to %.4g; radius is zero", early, late)
        return Radius.ZERO
    if early > 0.0 and late * _TREND_RATIO < early:
        logger.debug("n-th roots decay from %.4g to %.4g; radius is infinite", early, late)
        return Radius.INFINITE

    return Radius.finite(1.0 / limsup)


def radius(p: "CoefficientSequence", window: Optional[int] = None) -> Radius:
    """
    Radius of convergence of ``p``.

    Polynomial sequences have infinite radius; a radius declared by the
    constructor of the sequence is trusted; anything else falls back to
    ``estimate_radius``, raised to the certified lower bound when the
    sequence carries one (sums do).
    """
    if p.degree is not None:
        return Radius.INFINITE
    if p.declared_radius is not None:
        return p.declared_radius
    estimate = estimate_radius(p, window)
    if p.radius_lower_bound is not None:
        return estimate.max(p.radius_lower_bound)
    return estimate


def lower_bound_from_norm_bound(
    p: "CoefficientSequence",
    C: float,
    r: float,
    window: Optional[int] = None,
) -> bool:
    """
    Check ``‖p_n‖ r^n <= C`` on the inspected window.

    A true result is the witness that ``r <= radius(p)``.
    """
    if r < 0:
        raise ValueError(f"r must be non-negative, got {r}")
    n_terms = _window(p, window)
    for n, nrm in enumerate(p.norms(n_terms)):
        if nrm * r ** n > C * (1.0 + 1e-12):
            logger.debug("norm bound fails at n=%d: %.6g > %.6g", n, nrm * r ** n, C)
            return False
    return True


def lower_bound_from_asymptotic(
    p: "CoefficientSequence",
    a: float,
    C: float,
    r: float,
    window: Optional[int] = None,
) -> bool:
    """
    Check ``‖p_n‖ r^n <= C a^n`` on the inspected window, for ``-1 < a < 1``.

    A true result witnesses the strict bound ``r < radius(p)``: geometric decay
    at rate ``|a| < 1`` leaves room for a slightly larger radius.
    """
    if not -1.0 < a < 1.0:
        raise ValueError(f"a must lie in (-1, 1), got {a}")
    if r < 0:
        raise ValueError(f"r must be non-negative, got {r}")
    rate = abs(a)
    n_terms = _window(p, window)
    for n, nrm in enumerate(p.norms(n_terms)):
        if nrm * r ** n > C * rate ** n * (1.0 + 1e-12):
            return False
    return True


def geometric_domination(
    p: "CoefficientSequence",
    r: float,
    window: Optional[int] = None,
) -> GeometricBound:
    """
    For ``r < radius(p)`` return ``(a, C)`` with ``‖p_n‖ r^n <= C a^n``.

    The rate is ``a = r / r'`` for some ``r'`` strictly between ``r`` and the
    radius, and ``C`` is the supremum of ``‖p_n‖ r'^n`` over a window long
    enough to pass the peak of that sequence.
    """
    if r < 0:
        raise ValueError(f"r must be non-negative, got {r}")
    R = radius(p, window)
    if not R > r:
        raise OutsideRadiusError(r, R, "geometric domination")

    r_outer = R.interior_point(r)
    a = r / r_outer if r > 0 else 0.5

    n_terms = RADIUS_WINDOW if window is None else int(window)
    if R.is_infinite:
        n_terms = max(n_terms, int(2 * r_outer) + 2)
    n_terms = min(n_terms, MAX_TERMS)
    if p.degree is not None:
        n_terms = min(n_terms, p.degree + 1)

    C = 0.0
    for n, nrm in enumerate(p.norms(n_terms)):
        C = max(C, nrm * r_outer ** n)
    # C must be strictly positive even for the zero sequence.
    C = max(C, 1e-300)

    logger.debug("geometric domination at r=%.6g: a=%.6g C=%.6g (r'=%.6g)", r, a, C, r_outer)
    return GeometricBound(a=a, C=C, r=float(r))


def radius_of_sum(p: "CoefficientSequence", q: "CoefficientSequence") -> Radius:
    """Lower bound ``min(radius(p), radius(q)) <= radius(p + q)``."""
    return radius(p).min(radius(q))
