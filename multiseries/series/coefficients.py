"""Immutable, lazily evaluated coefficient sequences ``n -> p_n``."""
from __future__ import annotations

from threading import Lock
from typing import Callable, Dict, List, Optional, Sequence
import logging

import numpy as np

from multiseries.algebra.multilinear import MultilinearMap
from multiseries.series.radius import Radius

logger = logging.getLogger(__name__)


class CoefficientSequence:
    """
    Formal multilinear series ``p_n : (R^d)^n -> R^m``.

    Coefficients are produced on demand by ``term`` and cached; the cache is
    an implementation detail, so from the caller's view the sequence is an
    immutable value.

    Args:
        term: ``n -> MultilinearMap`` of arity ``n``
        dim_in: dimension ``d`` of the source space
        dim_out: dimension ``m`` of the target space
        degree: index past which every coefficient vanishes (polynomials)
        declared_radius: the radius, when the constructor of the sequence
            knows it
        radius_lower_bound: a certified lower bound on the radius; the
            radius itself is still estimated, and never reported below it
        norm: closed form for ``n -> ‖p_n‖`` or an upper bound of it, used
            instead of materializing coefficients when only their norms
            are needed
        name: label used in logs and reprs
    """

    def __init__(
        self,
        term: Callable[[int], MultilinearMap],
        dim_in: int,
        dim_out: int,
        *,
        degree: Optional[int] = None,
        declared_radius: Optional[Radius] = None,
        radius_lower_bound: Optional[Radius] = None,
        norm: Optional[Callable[[int], float]] = None,
        name: str = "series",
    ) -> None:
        if dim_in < 1 or dim_out < 1:
            raise ValueError("dim_in and dim_out must be positive")
        if degree is not None and degree < 0:
            raise ValueError(f"degree must be non-negative, got {degree}")
        self._term = term
        self._dim_in = int(dim_in)
        self._dim_out = int(dim_out)
        self._degree = degree
        self._declared_radius = None if declared_radius is None else Radius.coerce(declared_radius)
        self._radius_lower_bound = None if radius_lower_bound is None else Radius.coerce(radius_lower_bound)
        self._norm = norm
        self._name = name
        self._cache: Dict[int, MultilinearMap] = {}
        self._norm_cache: Dict[int, float] = {}
        self._lock = Lock()

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_maps(cls, maps: Sequence[MultilinearMap], name: str = "polynomial") -> "CoefficientSequence":
        """Polynomial sequence ``p_n = maps[n]``, zero past the last entry."""
        if not maps:
            raise ValueError("at least one coefficient is required")
        maps = list(maps)
        dim_in, dim_out = maps[0].dim_in, maps[0].dim_out
        for n, m in enumerate(maps):
            if m.arity != n or m.dim_in != dim_in or m.dim_out != dim_out:
                raise ValueError(
                    f"coefficient {n} has (arity, d, m)={(m.arity, m.dim_in, m.dim_out)}, "
                    f"expected {(n, dim_in, dim_out)}"
                )
        degree = len(maps) - 1
        while degree > 0 and maps[degree].norm() == 0.0:
            degree -= 1
        if degree < len(maps) - 1:
            logger.debug("%s: dropped %d trailing zero coefficients", name, len(maps) - 1 - degree)
        kept = maps[:degree + 1]
        zero_dtype = kept[0].dtype

        def term(n: int) -> MultilinearMap:
            if n < len(kept):
                return kept[n]
            return MultilinearMap.zero(n, dim_in, dim_out, dtype=zero_dtype)

        return cls(term, dim_in, dim_out, degree=degree, name=name)

    @classmethod
    def from_scalars(
        cls,
        coefficient: Callable[[int], float],
        *,
        degree: Optional[int] = None,
        declared_radius: Optional[Radius] = None,
        name: str = "scalar series",
    ) -> "CoefficientSequence":
        """One-dimensional series ``p_n(v_1, ..., v_n) = c_n v_1 ... v_n``."""

        def term(n: int) -> MultilinearMap:
            value = coefficient(n) if degree is None or n <= degree else 0.0
            return MultilinearMap.from_flat(np.full((1, 1), value), n, 1)

        return cls(term, 1, 1, degree=degree, declared_radius=declared_radius, name=name)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def dim_in(self) -> int:
        return self._dim_in

    @property
    def dim_out(self) -> int:
        return self._dim_out

    @property
    def degree(self) -> Optional[int]:
        return self._degree

    @property
    def declared_radius(self) -> Optional[Radius]:
        return self._declared_radius

    @property
    def radius_lower_bound(self) -> Optional[Radius]:
        return self._radius_lower_bound

    @property
    def certified_radius(self) -> Optional[Radius]:
        """Largest radius known without estimation, if any."""
        if self._degree is not None:
            return Radius.INFINITE
        if self._declared_radius is not None:
            return self._declared_radius
        return self._radius_lower_bound

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_polynomial(self) -> bool:
        return self._degree is not None

    @property
    def is_exact(self) -> bool:
        """True when coefficients carry exact (object-dtype) entries."""
        return self[0].is_exact

    def __getitem__(self, n: int) -> MultilinearMap:
        n = int(n)
        if n < 0:
            raise IndexError(f"coefficient index must be non-negative, got {n}")
        with self._lock:
            cached = self._cache.get(n)
        if cached is not None:
            return cached

        if self._degree is not None and n > self._degree:
            coeff = MultilinearMap.zero(n, self._dim_in, self._dim_out)
        else:
            coeff = self._term(n)
        if (coeff.arity, coeff.dim_in, coeff.dim_out) != (n, self._dim_in, self._dim_out):
            raise ValueError(
                f"{self._name}: term({n}) returned (arity, d, m)="
                f"{(coeff.arity, coeff.dim_in, coeff.dim_out)}"
            )
        with self._lock:
            return self._cache.setdefault(n, coeff)

    def coefficients(self, n_terms: int) -> List[MultilinearMap]:
        return [self[n] for n in range(n_terms)]

    def norms(self, n_terms: int) -> List[float]:
        """
        Operator norms ``‖p_0‖, ..., ‖p_{n_terms - 1}‖``.

        With a closed-form ``norm`` the values may be upper bounds; every
        consumer only needs a majorant.
        """
        return [self._norm_at(n) for n in range(n_terms)]

    def _norm_at(self, n: int) -> float:
        with self._lock:
            cached = self._norm_cache.get(n)
        if cached is not None:
            return cached
        if self._degree is not None and n > self._degree:
            value = 0.0
        elif self._norm is not None:
            value = float(self._norm(n))
        else:
            value = self[n].norm()
        with self._lock:
            return self._norm_cache.setdefault(n, value)

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def _check_compatible(self, other: "CoefficientSequence") -> None:
        if not isinstance(other, CoefficientSequence):
            raise TypeError(f"expected CoefficientSequence, got {type(other).__name__}")
        if (self._dim_in, self._dim_out) != (other._dim_in, other._dim_out):
            raise ValueError(
                f"incompatible series: (d, m)={(self._dim_in, self._dim_out)} vs "
                f"{(other._dim_in, other._dim_out)}"
            )

    def _combined_lower_bound(self, other: "CoefficientSequence") -> Optional[Radius]:
        # Cancellation can only enlarge the radius of a sum, so the minimum is
        # a lower bound, not the radius.
        mine, theirs = self.certified_radius, other.certified_radius
        if mine is None or theirs is None:
            return None
        return mine.min(theirs)

    def __add__(self, other: "CoefficientSequence") -> "CoefficientSequence":
        self._check_compatible(other)
        degree = None
        if self._degree is not None and other._degree is not None:
            degree = max(self._degree, other._degree)
        return CoefficientSequence(
            lambda n: self[n] + other[n],
            self._dim_in,
            self._dim_out,
            degree=degree,
            radius_lower_bound=None if degree is not None else self._combined_lower_bound(other),
            name=f"({self._name} + {other._name})",
        )

    def __neg__(self) -> "CoefficientSequence":
        return CoefficientSequence(
            lambda n: -self[n],
            self._dim_in,
            self._dim_out,
            degree=self._degree,
            declared_radius=self._declared_radius,
            radius_lower_bound=self._radius_lower_bound,
            norm=self._norm,
            name=f"-{self._name}",
        )

    def __sub__(self, other: "CoefficientSequence") -> "CoefficientSequence":
        return self + (-other)

    def scale(self, c) -> "CoefficientSequence":
        return CoefficientSequence(
            lambda n: self[n].scale(c),
            self._dim_in,
            self._dim_out,
            degree=self._degree,
            declared_radius=self._declared_radius if c != 0 else None,
            radius_lower_bound=self._radius_lower_bound,
            norm=None if self._norm is None else (lambda n: abs(c) * self._norm(n)),
            name=f"{c}*{self._name}",
        )

    def truncate(self, n_terms: int) -> "CoefficientSequence":
        """Polynomial keeping ``p_0, ..., p_{n_terms - 1}``."""
        if n_terms < 1:
            raise ValueError("n_terms must be at least 1")
        return CoefficientSequence.from_maps(self.coefficients(n_terms), name=f"{self._name}[:{n_terms}]")

    def symmetrized(self) -> "CoefficientSequence":
        """Same diagonal values ``p_n(y, ..., y)`` with symmetric coefficients."""
        return CoefficientSequence(
            lambda n: self[n].symmetrize(),
            self._dim_in,
            self._dim_out,
            degree=self._degree,
            declared_radius=self._declared_radius,
            radius_lower_bound=self._radius_lower_bound,
            name=f"sym({self._name})",
        )

    def __repr__(self) -> str:
        extra = f"degree={self._degree}" if self._degree is not None else f"declared_radius={self._declared_radius}"
        return f"CoefficientSequence({self._name!r}, d={self._dim_in}, m={self._dim_out}, {extra})"
