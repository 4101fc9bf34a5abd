"""Normed-space and multilinear-map toolkit."""

from .multilinear import MultilinearMap, as_vector, binomial, vector_norm

__all__ = ["MultilinearMap", "as_vector", "binomial", "vector_norm"]
