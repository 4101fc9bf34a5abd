"""Local expansions, change of origin, and openness of the analytic set."""

from .indexing import (
    FlatIndex,
    SubsetChoice,
    choices_of_total_degree,
    flat_subsets,
    from_flat,
    subset_choices,
    to_flat,
)
from .change_origin import (
    change_origin,
    change_origin_coefficient,
    change_origin_radius,
    change_origin_term,
    coefficient_norm_bound,
    flat_sum,
)
from .expansion import (
    Ball,
    PowerSeriesExpansion,
    analytic_at,
    analytic_neighbourhood,
    analytic_on,
    has_expansion_at,
)

__all__ = [
    # Index sets
    "FlatIndex",
    "SubsetChoice",
    "choices_of_total_degree",
    "flat_subsets",
    "from_flat",
    "subset_choices",
    "to_flat",

    # Change of origin
    "change_origin",
    "change_origin_coefficient",
    "change_origin_radius",
    "change_origin_term",
    "coefficient_norm_bound",
    "flat_sum",

    # Expansions
    "Ball",
    "PowerSeriesExpansion",
    "analytic_at",
    "analytic_neighbourhood",
    "analytic_on",
    "has_expansion_at",
]
