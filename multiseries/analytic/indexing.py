"""Index sets of the change-of-origin sum and the bijection between them.

A ``SubsetChoice(k, l, s)`` picks the ``l`` positions ``s`` among the ``k + l``
arguments of ``p_{k+l}`` that are frozen at the shift vector, leaving ``k``
free. Forgetting the split gives a ``FlatIndex(n, s)``: an arbitrary subset of
``range(n)``. The two parametrizations are in bijection via
``(k, l, s) -> (k + l, s)`` and ``(n, s) -> (n - |s|, |s|, s)``.
"""
from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import FrozenSet, Iterable, Iterator, Tuple

from multiseries.errors import IndexInvariantError


def _as_positions(positions: Iterable[int]) -> FrozenSet[int]:
    return frozenset(int(i) for i in positions)


@dataclass(frozen=True)
class SubsetChoice:
    """``s`` is a subset of ``range(k + l)`` with exactly ``l`` elements."""

    k: int
    l: int
    positions: FrozenSet[int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "positions", _as_positions(self.positions))
        if self.k < 0 or self.l < 0:
            raise IndexInvariantError(f"k and l must be non-negative, got k={self.k} l={self.l}")
        if len(self.positions) != self.l:
            raise IndexInvariantError(
                f"subset {sorted(self.positions)} has {len(self.positions)} elements, expected l={self.l}"
            )
        if any(i < 0 or i >= self.k + self.l for i in self.positions):
            raise IndexInvariantError(
                f"subset {sorted(self.positions)} is not contained in range({self.k + self.l})"
            )

    @property
    def n(self) -> int:
        return self.k + self.l

    def free_positions(self) -> Tuple[int, ...]:
        """The ``k`` positions left free, in increasing order."""
        return tuple(i for i in range(self.n) if i not in self.positions)


@dataclass(frozen=True)
class FlatIndex:
    """``s`` is any subset of ``range(n)``."""

    n: int
    positions: FrozenSet[int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "positions", _as_positions(self.positions))
        if self.n < 0:
            raise IndexInvariantError(f"n must be non-negative, got {self.n}")
        if any(i < 0 or i >= self.n for i in self.positions):
            raise IndexInvariantError(f"subset {sorted(self.positions)} is not contained in range({self.n})")


def to_flat(choice: SubsetChoice) -> FlatIndex:
    return FlatIndex(choice.k + choice.l, choice.positions)


def from_flat(index: FlatIndex) -> SubsetChoice:
    l = len(index.positions)
    return SubsetChoice(index.n - l, l, index.positions)


def subset_choices(k: int, l: int) -> Iterator[SubsetChoice]:
    """All ``C(k + l, l)`` size-``l`` subsets of ``range(k + l)``."""
    for s in combinations(range(k + l), l):
        yield SubsetChoice(k, l, frozenset(s))


def flat_subsets(n: int) -> Iterator[FlatIndex]:
    """All ``2^n`` subsets of ``range(n)``, by increasing size."""
    for size in range(n + 1):
        for s in combinations(range(n), size):
            yield FlatIndex(n, frozenset(s))


def choices_of_total_degree(n: int) -> Iterator[SubsetChoice]:
    """Every ``SubsetChoice`` with ``k + l == n``; the preimage of ``flat_subsets(n)``."""
    for l in range(n + 1):
        yield from subset_choices(n - l, l)
