"""Change of origin: re-expanding a series around a point inside its disk.

Given ``p`` and a shift ``y`` with ``‖y‖ < radius(p)``, the coefficients

    q_k = Σ_{l >= 0} Σ_{s ⊆ range(k+l), |s| = l} p_{k+l}[s := y]

satisfy ``Σ_k q_k(z, ..., z) = Σ_n p_n(y+z, ..., y+z)`` whenever
``‖y‖ + ‖z‖ < radius(p)``, where ``p_{k+l}[s := y]`` fixes the positions in
``s`` at ``y`` and leaves the other ``k`` positions free. Each term is bounded
by ``‖p_{k+l}‖ ‖y‖^l ‖z‖^k``, and summing those bounds over ``(k, l, s)``
gives ``Σ_n ‖p_n‖ (‖y‖ + ‖z‖)^n``; that absolute bound is what licenses
regrouping the flat sum over ``(n, s)`` by ``k``.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple
import logging
import math

import numpy as np

from multiseries.algebra.multilinear import MultilinearMap, as_vector, binomial, vector_norm
from multiseries.config import DEFAULT_TOLERANCE, MAX_TERMS, SHIFT_MAX_WORKERS, SYMMETRY_TOLERANCE
from multiseries.errors import IncompleteSpaceError, OutsideRadiusError
from multiseries.series.coefficients import CoefficientSequence
from multiseries.series.radius import Radius, geometric_domination, radius
from multiseries.series.summation import unconditional_sum

from .indexing import SubsetChoice, flat_subsets, from_flat, subset_choices

logger = logging.getLogger(__name__)


def change_origin_term(p: CoefficientSequence, choice: SubsetChoice, y) -> MultilinearMap:
    """``p_{k+l}`` with the positions of ``choice`` fixed at ``y``; arity ``k``."""
    return p[choice.n].curry_positions(choice.positions, y)


def _block(p: CoefficientSequence, k: int, l: int, y: np.ndarray, y_norm: float) -> Tuple[MultilinearMap, float]:
    """
    ``Σ_{|s|=l} p_{k+l}[s := y]`` together with its bound ``C(k+l, l) ‖p_{k+l}‖ ‖y‖^l``.

    For a symmetric coefficient all ``C(k+l, l)`` terms coincide, so one curry
    scaled by the count replaces the enumeration.
    """
    coeff = p[k + l]
    count = binomial(k + l, l)
    bound = count * coeff.norm() * y_norm ** l
    if l == 0:
        return coeff, bound
    if coeff.is_symmetric(SYMMETRY_TOLERANCE):
        return coeff.curry_positions(range(l), y).scale(count), bound

    total: Optional[MultilinearMap] = None
    for choice in subset_choices(k, l):
        term = change_origin_term(p, choice, y)
        total = term if total is None else total + term
    return total, bound


def coefficient_norm_bound(p: CoefficientSequence, k: int, y, n_terms: Optional[int] = None) -> float:
    """
    ``Σ_l C(k+l, l) ‖p_{k+l}‖ ‖y‖^l`` over ``k + l < n_terms``.

    This majorizes ``‖q_k‖``; multiplied by ``‖z‖^k`` and summed over ``k`` it
    is ``Σ_n ‖p_n‖ (‖y‖ + ‖z‖)^n``.
    """
    y_norm = vector_norm(as_vector(y, p.dim_in))
    if n_terms is None:
        n_terms = p.degree + 1 if p.degree is not None else MAX_TERMS
    norms = p.norms(n_terms)
    return float(sum(
        binomial(n, n - k) * norms[n] * y_norm ** (n - k)
        for n in range(k, n_terms)
    ))


def _truncation_degree(p: CoefficientSequence, k: int, y_norm: float, tol: float) -> int:
    """
    Largest ``l`` to include in ``q_k``; ``-1`` when ``q_k`` vanishes.

    For infinite sequences the blocks are bounded through
    ``‖p_n‖ <= C rho^{-n}`` for some ``rho`` between ``‖y‖`` and the radius,
    giving block bounds ``C rho^{-k} C(k+l, l) t^l`` with ``t = ‖y‖ / rho``.
    Their ratio ``(k+l+1)/(l+1) t`` decreases in ``l``, so once it drops
    below one the remaining tail is bounded by a geometric series.
    """
    if p.degree is not None:
        return p.degree - k
    if y_norm == 0.0:
        return 0

    R = radius(p)
    rho = R.interior_point(y_norm)
    bound = geometric_domination(p, rho)
    t = y_norm / rho
    try:
        term = bound.C * rho ** (-k)
    except OverflowError:
        term = math.inf

    cap = max(MAX_TERMS - k, 0)
    for l in range(cap):
        ratio = (k + l + 1) / (l + 1) * t
        term *= ratio
        if ratio < 1.0 and term / (1.0 - ratio) <= tol:
            return l
    logger.warning(
        "%s: q_%d truncated at l=%d before reaching tol=%.3g (MAX_TERMS=%d)",
        p.name, k, cap, tol, MAX_TERMS,
    )
    return cap


def change_origin_coefficient(
    p: CoefficientSequence,
    k: int,
    y,
    tol: Optional[float] = None,
    max_workers: Optional[int] = None,
) -> MultilinearMap:
    """
    The ``k``-th coefficient of ``p`` re-expanded at ``y``.

    The per-``l`` blocks are independent; with ``max_workers > 1`` they are
    evaluated on a thread pool. The blocks are reduced only after their
    absolute bounds are summed, and the reduction checks that enumeration
    order does not matter.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    tol = DEFAULT_TOLERANCE if tol is None else tol
    workers = SHIFT_MAX_WORKERS if max_workers is None else max_workers
    y = as_vector(y, p.dim_in)
    y_norm = vector_norm(y)

    last = _truncation_degree(p, k, y_norm, tol)
    if last < 0:
        return MultilinearMap.zero(k, p.dim_in, p.dim_out)

    degrees = range(last + 1)
    if workers > 1 and last > 0:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            blocks: List[Tuple[MultilinearMap, float]] = list(
                pool.map(lambda l: _block(p, k, l, y, y_norm), degrees)
            )
    else:
        blocks = [_block(p, k, l, y, y_norm) for l in degrees]

    logger.debug("%s: q_%d from %d blocks, absolute bound %.6g",
                 p.name, k, len(blocks), sum(b for _, b in blocks))
    data = unconditional_sum([m.data for m, _ in blocks], norms=[b for _, b in blocks], tol=tol)
    return MultilinearMap.from_flat(data, k, p.dim_in)


def change_origin_radius(p: CoefficientSequence, y) -> Radius:
    """Radius guaranteed for the re-expanded series: ``radius(p) - ‖y‖``, saturating."""
    return radius(p) - vector_norm(as_vector(y, p.dim_in))


def change_origin(p: CoefficientSequence, y, tol: Optional[float] = None) -> CoefficientSequence:
    """
    Re-expand ``p`` at ``y``.

    The result is lazy: ``q_k`` is computed when first indexed. Polynomials
    stay polynomials of the same degree and are re-expanded exactly (up to
    floating point); infinite sequences carry the declared radius
    ``radius(p) - ‖y‖``. Norms of the result come from
    ``coefficient_norm_bound``, so radius and domination queries on it never
    materialize coefficients that a sum does not use.

    Each ``q_k`` of an infinite sequence is an infinite sum truncated where
    its certified tail drops below ``tol``. That point can lie past
    ``MAX_TERMS`` when ``‖y‖`` is close to the radius; the sum is then cut at
    the cap, a warning is logged, and ``q_k`` may be off by more than ``tol``
    (``geometric()`` shifted by ``0.99`` gives ``q_0 ≈ 98.2`` instead of
    ``100``). Raise ``MAX_TERMS`` for shifts that close to the boundary.

    Raises:
        OutsideRadiusError: ``‖y‖ >= radius(p)``
        IncompleteSpaceError: ``p`` is an infinite sequence over an exact field
    """
    y = np.array(as_vector(y, p.dim_in), copy=True)
    y.setflags(write=False)
    y_norm = vector_norm(y)
    R = radius(p)
    if not R > y_norm:
        raise OutsideRadiusError(y_norm, R, "change of origin")
    if p.degree is None and p.is_exact:
        raise IncompleteSpaceError(
            f"re-expanding {p.name} needs infinite sums over an exact field"
        )

    new_radius = R - y_norm
    logger.debug("change of origin of %s by ‖y‖=%.6g: radius %s -> %s", p.name, y_norm, R, new_radius)
    return CoefficientSequence(
        lambda k: change_origin_coefficient(p, k, y, tol),
        p.dim_in,
        p.dim_out,
        degree=p.degree,
        declared_radius=None if p.degree is not None else new_radius,
        norm=lambda k: coefficient_norm_bound(p, k, y),
        name=f"shift({p.name})",
    )


def flat_sum(p: CoefficientSequence, y, z, n_terms: int) -> np.ndarray:
    """
    ``Σ_{n<n_terms} Σ_{s ⊆ range(n)} p_n[s := y](z, ..., z)``.

    Enumerates the flat index set and maps each index back to its
    ``(k, l, s)`` form, so the value must equal ``Σ_{n<n_terms} p_n(y+z, ...)``.
    Each degree contributes ``2^n`` terms.
    """
    y = as_vector(y, p.dim_in)
    z = as_vector(z, p.dim_in)
    terms = []
    norms = []
    y_norm, z_norm = vector_norm(y), vector_norm(z)
    for n in range(n_terms):
        coeff_norm = p[n].norm()
        for index in flat_subsets(n):
            choice = from_flat(index)
            terms.append(change_origin_term(p, choice, y).apply_diagonal(z))
            norms.append(coeff_norm * y_norm ** choice.l * z_norm ** choice.k)
    return unconditional_sum(terms, norms=norms)
