"""Tests for the subset index sets of the change-of-origin sum."""
import numpy as np
import pytest

from multiseries.algebra import binomial
from multiseries.analytic import (
    FlatIndex,
    SubsetChoice,
    choices_of_total_degree,
    flat_subsets,
    from_flat,
    subset_choices,
    to_flat,
)
from multiseries.errors import IndexInvariantError


def test_subset_choice_fields():
    choice = SubsetChoice(2, 1, {0})

    assert choice.n == 3
    assert choice.positions == frozenset({0})
    assert choice.free_positions() == (1, 2)


def test_subset_choice_rejects_wrong_cardinality():
    with pytest.raises(IndexInvariantError):
        SubsetChoice(2, 2, {0})
    with pytest.raises(IndexInvariantError):
        SubsetChoice(1, 1, {5})
    with pytest.raises(IndexInvariantError):
        SubsetChoice(-1, 1, {0})


def test_flat_index_rejects_out_of_range():
    with pytest.raises(IndexInvariantError):
        FlatIndex(2, {2})


def test_only_valid_pairs_are_constructible():
    rng = np.random.default_rng(10)
    for _ in range(200):
        k, l = int(rng.integers(0, 4)), int(rng.integers(0, 4))
        size = int(rng.integers(0, 5))
        positions = set(int(i) for i in rng.integers(0, 8, size=size))
        valid = len(positions) == l and all(i < k + l for i in positions)
        if valid:
            assert SubsetChoice(k, l, positions).l == l
        else:
            with pytest.raises(IndexInvariantError):
                SubsetChoice(k, l, positions)


def test_bijection_round_trips():
    for n in range(6):
        for index in flat_subsets(n):
            assert to_flat(from_flat(index)) == index
        for choice in choices_of_total_degree(n):
            assert from_flat(to_flat(choice)) == choice


def test_enumeration_counts():
    for k in range(4):
        for l in range(4):
            choices = list(subset_choices(k, l))
            assert len(choices) == binomial(k + l, l)
            assert len(set(choices)) == len(choices)
    for n in range(7):
        assert len(list(flat_subsets(n))) == 2 ** n


def test_total_degree_choices_cover_flat_subsets():
    for n in range(6):
        mapped = {to_flat(c) for c in choices_of_total_degree(n)}
        assert mapped == set(flat_subsets(n))
