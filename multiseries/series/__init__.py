"""Coefficient sequences, their radius of convergence, and their sums."""

from .radius import (
    GeometricBound,
    Radius,
    RadiusKind,
    estimate_radius,
    geometric_domination,
    lower_bound_from_asymptotic,
    lower_bound_from_norm_bound,
    radius,
    radius_of_sum,
)
from .coefficients import CoefficientSequence
from .summation import (
    UniformApproximation,
    norm_series,
    partial_sum,
    series_sum,
    unconditional_sum,
    uniform_approximation,
)

__all__ = [
    # Radius
    "GeometricBound",
    "Radius",
    "RadiusKind",
    "estimate_radius",
    "geometric_domination",
    "lower_bound_from_asymptotic",
    "lower_bound_from_norm_bound",
    "radius",
    "radius_of_sum",

    # Sequences
    "CoefficientSequence",

    # Summation
    "UniformApproximation",
    "norm_series",
    "partial_sum",
    "series_sum",
    "unconditional_sum",
    "uniform_approximation",
]
