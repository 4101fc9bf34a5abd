"""Precondition violations raised at the public boundary of the series engine."""


class PowerSeriesError(ValueError):
    """Base class for domain errors of the power series engine."""


class OutsideRadiusError(PowerSeriesError):
    """A point or shift lies on or outside the disk of convergence."""

    def __init__(self, norm: float, radius: object, operation: str = "evaluation") -> None:
        self.norm = norm
        self.radius = radius
        self.operation = operation
        super().__init__(
            f"{operation} requires norm < radius, got norm={norm:.6g} radius={radius}"
        )


class IncompleteSpaceError(PowerSeriesError):
    """The target space is not complete, so an infinite sum may not exist."""


class InvalidExpansionError(PowerSeriesError):
    """A PowerSeriesExpansion violates 0 < r <= radius(p)."""


class IndexInvariantError(PowerSeriesError):
    """A subset index does not have the cardinality its type promises."""


class SummationOrderError(PowerSeriesError):
    """Two enumeration orders of an unconditional sum disagree."""
