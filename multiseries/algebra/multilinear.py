"""Continuous multilinear maps between Euclidean spaces.

A map ``p : (R^d)^n -> R^m`` is stored as an ``(m, d**n)`` matrix: the
row-major flattening of the tensor of shape ``(m, d, ..., d)``. Every
operation reshapes only the axes it touches, so the arity is not limited by
numpy's maximum number of dimensions (scalar series routinely reach arities in
the hundreds). Data is copied and frozen on construction; a
``MultilinearMap`` is an immutable value.
"""
from __future__ import annotations

from itertools import permutations
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np
from scipy.special import comb


def as_vector(v, dim: Optional[int] = None) -> np.ndarray:
    """Coerce ``v`` to a 1D array, checking its dimension when ``dim`` is given."""
    arr = np.asarray(v)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise ValueError(f"expected a 1D vector, got shape {arr.shape}")
    if dim is not None and arr.shape[0] != dim:
        raise ValueError(f"expected a vector of dimension {dim}, got {arr.shape[0]}")
    return arr


def vector_norm(v) -> float:
    """Euclidean norm as a Python float."""
    arr = as_vector(v)
    if arr.dtype == object:
        arr = arr.astype(complex)
    return float(np.linalg.norm(arr))


def _real_view(arr: np.ndarray) -> np.ndarray:
    # Exact entries (Fraction, int) are measured through complex floats.
    return arr.astype(complex) if arr.dtype == object else arr


class MultilinearMap:
    """Immutable ``n``-ary multilinear map ``(R^d)^n -> R^m``."""

    __slots__ = ("_data", "_arity", "_dim_in", "_dim_out", "_symmetric")

    def __init__(self, tensor, dim_in: Optional[int] = None) -> None:
        arr = np.asarray(tensor)
        if arr.ndim == 0:
            arr = arr.reshape(1)
        arity = arr.ndim - 1
        if arity > 0:
            if len(set(arr.shape[1:])) != 1:
                raise ValueError(f"all argument axes must share one dimension, got shape {arr.shape}")
            inferred = arr.shape[1]
            if dim_in is not None and dim_in != inferred:
                raise ValueError(f"tensor argument dimension {inferred} does not match dim_in={dim_in}")
            dim_in = inferred
        elif dim_in is None:
            raise ValueError("dim_in is required for a 0-ary map")
        self._init_flat(arr.reshape(arr.shape[0], -1), arity, int(dim_in))

    def _init_flat(self, data: np.ndarray, arity: int, dim_in: int) -> None:
        data = np.array(data, copy=True)
        if data.ndim != 2 or data.shape[1] != dim_in ** arity:
            raise ValueError(f"flat data of shape {data.shape} does not fit arity={arity}, dim_in={dim_in}")
        data.setflags(write=False)
        self._data = data
        self._arity = arity
        self._dim_in = dim_in
        self._dim_out = int(data.shape[0])
        self._symmetric: Dict[float, bool] = {}

    @classmethod
    def from_flat(cls, data, arity: int, dim_in: int) -> "MultilinearMap":
        """Build from the ``(m, d**n)`` flattened representation."""
        obj = cls.__new__(cls)
        obj._init_flat(np.asarray(data), int(arity), int(dim_in))
        return obj

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def zero(cls, arity: int, dim_in: int, dim_out: int, dtype=float) -> "MultilinearMap":
        return cls.from_flat(np.zeros((dim_out, dim_in ** arity), dtype=dtype), arity, dim_in)

    @classmethod
    def constant(cls, value, dim_in: int) -> "MultilinearMap":
        """0-ary map returning ``value``."""
        return cls.from_flat(as_vector(value).reshape(-1, 1), 0, dim_in)

    @classmethod
    def linear(cls, matrix) -> "MultilinearMap":
        mat = np.asarray(matrix)
        if mat.ndim != 2:
            raise ValueError("matrix must be 2D with shape (m, d)")
        return cls.from_flat(mat, 1, mat.shape[1])

    @classmethod
    def outer_power(cls, covector, arity: int, output=None) -> "MultilinearMap":
        """``(v_1, ..., v_n) -> output * prod <covector, v_i>``."""
        a = as_vector(covector)
        out = as_vector(1.0 if output is None else output)
        flat = np.ones(1, dtype=np.result_type(a.dtype, out.dtype))
        for _ in range(arity):
            flat = np.kron(flat, a)
        return cls.from_flat(np.multiply.outer(out, flat), arity, a.shape[0])

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def data(self) -> np.ndarray:
        """Flattened ``(m, d**n)`` coefficients."""
        return self._data

    @property
    def tensor(self) -> np.ndarray:
        """Full ``(m, d, ..., d)`` tensor view (bounded by numpy's dimension limit)."""
        return self._data.reshape((self._dim_out,) + (self._dim_in,) * self._arity)

    @property
    def arity(self) -> int:
        return self._arity

    @property
    def dim_in(self) -> int:
        return self._dim_in

    @property
    def dim_out(self) -> int:
        return self._dim_out

    @property
    def dtype(self):
        return self._data.dtype

    @property
    def is_exact(self) -> bool:
        """True for object-dtype data (e.g. ``Fraction`` entries)."""
        return self._data.dtype == object

    def shape(self) -> Tuple[int, ...]:
        return (self._dim_out,) + (self._dim_in,) * self._arity

    # ------------------------------------------------------------------
    # Evaluation and norms
    # ------------------------------------------------------------------

    def __call__(self, *vectors) -> np.ndarray:
        if len(vectors) != self._arity:
            raise ValueError(f"map of arity {self._arity} applied to {len(vectors)} vectors")
        m, d = self._dim_out, self._dim_in
        result = self._data
        for v in reversed(vectors):
            result = result.reshape(m, -1, d).dot(as_vector(v, d))
        return np.asarray(result).reshape(m)

    def apply_diagonal(self, y) -> np.ndarray:
        """``p(y, ..., y)``."""
        return self(*([y] * self._arity))

    def norm(self) -> float:
        """
        Operator norm with respect to Euclidean norms.

        Exact for arity 0 (vector norm) and arity 1 (spectral norm); for higher
        arity the Frobenius norm is returned, which bounds the operator norm
        from above and is exact for ``dim_in == 1`` and for rank-one tensors.
        """
        arr = _real_view(self._data)
        if arr.size == 0:
            return 0.0
        if self._arity == 1:
            return float(np.linalg.norm(arr, 2))
        return float(np.linalg.norm(arr.ravel()))

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def _check_compatible(self, other: "MultilinearMap") -> None:
        if not isinstance(other, MultilinearMap):
            raise TypeError(f"expected MultilinearMap, got {type(other).__name__}")
        if (self._arity, self._dim_in, self._dim_out) != (other._arity, other._dim_in, other._dim_out):
            raise ValueError(
                "incompatible maps: "
                f"(arity, d, m)={(self._arity, self._dim_in, self._dim_out)} vs "
                f"{(other._arity, other._dim_in, other._dim_out)}"
            )

    def _with_data(self, data: np.ndarray) -> "MultilinearMap":
        return MultilinearMap.from_flat(data, self._arity, self._dim_in)

    def __add__(self, other: "MultilinearMap") -> "MultilinearMap":
        self._check_compatible(other)
        return self._with_data(self._data + other._data)

    def __sub__(self, other: "MultilinearMap") -> "MultilinearMap":
        self._check_compatible(other)
        return self._with_data(self._data - other._data)

    def __neg__(self) -> "MultilinearMap":
        return self._with_data(-self._data)

    def scale(self, c) -> "MultilinearMap":
        return self._with_data(self._data * c)

    def allclose(self, other: "MultilinearMap", atol: float = 1e-10, rtol: float = 1e-9) -> bool:
        if not isinstance(other, MultilinearMap):
            return False
        if (self._arity, self._dim_in, self._dim_out) != (other._arity, other._dim_in, other._dim_out):
            return False
        return bool(np.allclose(_real_view(self._data), _real_view(other._data), atol=atol, rtol=rtol))

    # ------------------------------------------------------------------
    # Currying and relabelling
    # ------------------------------------------------------------------

    def curry_positions(self, positions: Iterable[int], y) -> "MultilinearMap":
        """
        Fix every argument position in ``positions`` to ``y``.

        The result is a map on the remaining positions, taken in their original
        order, of arity ``arity - len(positions)``.
        """
        pos = sorted(set(int(i) for i in positions))
        if pos and (pos[0] < 0 or pos[-1] >= self._arity):
            raise ValueError(f"positions {pos} out of range for arity {self._arity}")
        m, d = self._dim_out, self._dim_in
        vec = as_vector(y, d)
        if d == 1:
            return MultilinearMap.from_flat(self._data * vec[0] ** len(pos), self._arity - len(pos), 1)
        result = self._data
        arity = self._arity
        # Descending order keeps the remaining position numbers valid.
        for i in reversed(pos):
            blocked = result.reshape(m, d ** i, d, d ** (arity - 1 - i))
            result = np.tensordot(blocked, vec, axes=([2], [0])).reshape(m, -1)
            arity -= 1
        return MultilinearMap.from_flat(result, arity, d)

    def permute_arguments(self, perm: Sequence[int]) -> "MultilinearMap":
        """Map ``(v_0, ..., v_{n-1}) -> p(v_{perm[0]}, ..., v_{perm[n-1]})``."""
        perm = tuple(int(i) for i in perm)
        if sorted(perm) != list(range(self._arity)):
            raise ValueError(f"{perm} is not a permutation of range({self._arity})")
        if self._dim_in == 1:
            return self
        # Argument slot j of p receives v_{perm[j]}, so new axis perm[j] is old axis j.
        axes = [0] + [1 + perm.index(i) for i in range(self._arity)]
        return MultilinearMap(np.transpose(self.tensor, axes), dim_in=self._dim_in)

    def is_symmetric(self, atol: float = 1e-12) -> bool:
        """True when the map is invariant under every swap of two arguments."""
        cached = self._symmetric.get(atol)
        if cached is None:
            cached = self._symmetric[atol] = self._compute_symmetric(atol)
        return cached

    def _compute_symmetric(self, atol: float) -> bool:
        n, m, d = self._arity, self._dim_out, self._dim_in
        if n < 2 or d == 1:
            return True
        arr = _real_view(self._data)
        # Adjacent transpositions generate the symmetric group.
        for i in range(n - 1):
            blocked = arr.reshape(m, d ** i, d, d, d ** (n - 2 - i))
            if not np.allclose(blocked, np.swapaxes(blocked, 2, 3), atol=atol, rtol=0.0):
                return False
        return True

    def symmetrize(self) -> "MultilinearMap":
        """Average over all argument permutations; keeps ``p(y, ..., y)`` unchanged."""
        if self._arity < 2 or self._dim_in == 1:
            return self
        full = self.tensor
        total = None
        count = 0
        for perm in permutations(range(self._arity)):
            t = np.transpose(full, (0,) + tuple(1 + i for i in perm))
            total = t if total is None else total + t
            count += 1
        return MultilinearMap(total / count, dim_in=self._dim_in)

    def __repr__(self) -> str:
        return (
            f"MultilinearMap(arity={self._arity}, dim_in={self._dim_in}, "
            f"dim_out={self._dim_out}, norm={self.norm():.4g})"
        )


def binomial(n: int, k: int) -> int:
    """Exact binomial coefficient (0 outside ``0 <= k <= n``)."""
    if k < 0 or k > n:
        return 0
    return int(comb(n, k, exact=True))
