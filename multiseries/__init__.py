"""
multiseries: formal multilinear power series over normed vector spaces

Represents a function as a sequence of multilinear maps ``p_n : E^n -> F``,
computes the radius within which ``Σ p_n(y, ..., y)`` converges, evaluates the
sum, and re-expands the series around a new base point inside its disk of
convergence.
"""

__version__ = '0.1.0'

# Make key imports available at package level
from multiseries.algebra import MultilinearMap
from multiseries.series import (
    CoefficientSequence,
    Radius,
    partial_sum,
    radius,
    series_sum,
)
from multiseries.analytic import (
    PowerSeriesExpansion,
    change_origin,
)

__all__ = [
    '__version__',
    'MultilinearMap',
    'CoefficientSequence',
    'Radius',
    'partial_sum',
    'radius',
    'series_sum',
    'PowerSeriesExpansion',
    'change_origin',
]
