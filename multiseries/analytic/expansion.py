"""Ball-level contract: a function equal to a power series near a point.

``PowerSeriesExpansion(p, x, r, f)`` states ``f(x + y) = Σ_n p_n(y, ..., y)``
for every ``‖y‖ < r``. Analyticity at a point is the existence of such an
expansion; shifting an expansion to any point of its ball produces a new one
of radius ``r - ‖y‖ > 0``, which is why the set of analytic points is open.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Union
import logging

import numpy as np

from multiseries.algebra.multilinear import as_vector, vector_norm
from multiseries.errors import InvalidExpansionError, OutsideRadiusError
from multiseries.series.coefficients import CoefficientSequence
from multiseries.series.radius import Radius, radius as series_radius
from multiseries.series.summation import series_sum

from .change_origin import change_origin

logger = logging.getLogger(__name__)

VectorFunction = Callable[[np.ndarray], np.ndarray]


@dataclass(frozen=True)
class Ball:
    """Open ball ``{p : ‖p - center‖ < radius}``."""

    center: np.ndarray
    radius: Radius

    def __post_init__(self) -> None:
        center = np.array(as_vector(self.center), copy=True)
        center.setflags(write=False)
        object.__setattr__(self, "center", center)
        object.__setattr__(self, "radius", Radius.coerce(self.radius))

    def offset(self, point) -> np.ndarray:
        return as_vector(point, self.center.shape[0]) - self.center

    def contains(self, point) -> bool:
        return self.radius > vector_norm(self.offset(point))


class PowerSeriesExpansion:
    """
    ``f(x + y) = Σ_n p_n(y, ..., y)`` for ``‖y‖ < r``.

    Args:
        series: coefficient sequence ``p``
        center: base point ``x``
        radius: ball radius ``r``; must satisfy ``0 < r <= radius(p)``
        func: the represented function ``f``; defaults to the series sum itself
    """

    def __init__(
        self,
        series: CoefficientSequence,
        center,
        radius: Union[Radius, float],
        func: Optional[VectorFunction] = None,
    ) -> None:
        r = Radius.coerce(radius)
        if not r > 0:
            raise InvalidExpansionError(f"expansion radius must be positive, got {r}")
        R = series_radius(series)
        if r > R:
            raise InvalidExpansionError(f"expansion radius {r} exceeds radius of convergence {R}")
        self._series = series
        self._ball = Ball(as_vector(center, series.dim_in), r)
        self._func = func

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def series(self) -> CoefficientSequence:
        return self._series

    @property
    def center(self) -> np.ndarray:
        return self._ball.center

    @property
    def radius(self) -> Radius:
        return self._ball.radius

    @property
    def ball(self) -> Ball:
        return self._ball

    @property
    def func(self) -> Optional[VectorFunction]:
        return self._func

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, point, tol: Optional[float] = None) -> np.ndarray:
        """Series value at ``point``, which must lie in the ball."""
        y = self._ball.offset(point)
        if not self._ball.contains(point):
            raise OutsideRadiusError(vector_norm(y), self.radius, "expansion evaluation")
        return series_sum(self._series, y, tol)

    def function(self, point) -> np.ndarray:
        """``f(point)``; the series sum when no function was attached."""
        if self._func is None:
            return self.evaluate(point)
        return as_vector(self._func(as_vector(point, self._series.dim_in)))

    def coeff_zero(self) -> np.ndarray:
        """``p_0()``, which the contract forces to equal ``f(x)``."""
        return self._series[0]()

    def check_coeff_zero(self, atol: float = 1e-10) -> bool:
        return bool(np.allclose(self.coeff_zero(), self.function(self.center), atol=atol))

    def max_error(self, points: Iterable, tol: Optional[float] = None) -> float:
        """Largest ``‖f(p) - series(p)‖`` over sample points inside the ball."""
        worst = 0.0
        for point in points:
            diff = self.function(point) - self.evaluate(point, tol)
            worst = max(worst, vector_norm(diff))
        return worst

    def verify(self, points: Iterable, atol: float = 1e-8) -> bool:
        """Sample the contract ``f(x + y) = Σ p_n(y, ...)`` at the given points."""
        if self._func is None:
            raise ValueError("verify needs an attached function")
        err = self.max_error(points)
        logger.debug("expansion of %s: max sampled error %.3g", self._series.name, err)
        return err <= atol

    # ------------------------------------------------------------------
    # Closure properties
    # ------------------------------------------------------------------

    def mono(self, new_radius: Union[Radius, float]) -> "PowerSeriesExpansion":
        """The same expansion on a smaller ball, ``0 < r' <= r``."""
        r_new = Radius.coerce(new_radius)
        if not (0 < r_new <= self.radius):
            raise ValueError(f"new radius {r_new} must lie in (0, {self.radius}]")
        return PowerSeriesExpansion(self._series, self.center, r_new, self._func)

    def _check_same_center(self, other: "PowerSeriesExpansion") -> None:
        if not isinstance(other, PowerSeriesExpansion):
            raise TypeError(f"expected PowerSeriesExpansion, got {type(other).__name__}")
        if not np.array_equal(self.center, other.center):
            raise ValueError("expansions must share their center")

    def __add__(self, other: "PowerSeriesExpansion") -> "PowerSeriesExpansion":
        self._check_same_center(other)
        func = None
        if self._func is not None and other._func is not None:
            f, g = self._func, other._func
            func = lambda v: as_vector(f(v)) + as_vector(g(v))
        return PowerSeriesExpansion(
            self._series + other._series,
            self.center,
            self.radius.min(other.radius),
            func,
        )

    def __neg__(self) -> "PowerSeriesExpansion":
        func = None
        if self._func is not None:
            f = self._func
            func = lambda v: -as_vector(f(v))
        return PowerSeriesExpansion(-self._series, self.center, self.radius, func)

    def __sub__(self, other: "PowerSeriesExpansion") -> "PowerSeriesExpansion":
        return self + (-other)

    def shift(self, y, tol: Optional[float] = None) -> "PowerSeriesExpansion":
        """Expansion of the same function at ``x + y`` on the ball of radius ``r - ‖y‖``."""
        y = as_vector(y, self._series.dim_in)
        y_norm = vector_norm(y)
        if not self.radius > y_norm:
            raise OutsideRadiusError(y_norm, self.radius, "expansion shift")
        shifted = change_origin(self._series, y, tol)
        return PowerSeriesExpansion(shifted, self.center + y, self.radius - y_norm, self._func)

    def __repr__(self) -> str:
        return (
            f"PowerSeriesExpansion({self._series.name!r}, center={self.center.tolist()}, "
            f"radius={self.radius})"
        )


# ============================================================================
# Analyticity
# ============================================================================

def has_expansion_at(expansion: PowerSeriesExpansion, point) -> bool:
    """True when ``expansion`` yields a positive-radius expansion at ``point``."""
    return expansion.ball.contains(point)


def analytic_at(expansion: PowerSeriesExpansion, point, tol: Optional[float] = None) -> PowerSeriesExpansion:
    """The witness of analyticity at ``point``: ``expansion`` re-centred there."""
    offset = expansion.ball.offset(point)
    if not np.any(offset):
        return expansion
    return expansion.shift(offset, tol)


def analytic_neighbourhood(expansion: PowerSeriesExpansion, point) -> Ball:
    """Ball of analytic points around ``point``, of radius ``r - ‖point - x‖ > 0``."""
    offset = expansion.ball.offset(point)
    dist = vector_norm(offset)
    if not expansion.radius > dist:
        raise OutsideRadiusError(dist, expansion.radius, "analytic neighbourhood")
    return Ball(as_vector(point, expansion.series.dim_in), expansion.radius - dist)


def analytic_on(expansion: PowerSeriesExpansion, points: Iterable) -> List[Ball]:
    """
    Neighbourhoods of analytic points for each sample point.

    Every point must lie in the ball of ``expansion``; each returned ball has
    positive radius and is contained in that ball.
    """
    return [analytic_neighbourhood(expansion, point) for point in points]
