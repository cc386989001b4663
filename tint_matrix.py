# -*- coding: utf-8 -*-
"""
Tint: Matrices, gamut mapping and lookup tables for colour pipelines
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_matrix.py — 3x3 matrix algebra for colour transforms.

Conventions
-----------
Colours are COLUMN vectors and matrices are stored row-major:

    v' = M · v          (transform_vector)
    (A · B) · v = A · (B · v)

so ``multiply(a, b)`` is the transform that applies ``b`` first and
``a`` second, and ``compose([m1, m2, m3])`` equals ``m1 · m2 · m3``:
the RIGHTMOST matrix of the sequence touches the colour first.

Batched colours are handled as (N, 3) row arrays.  Internally the
kernel evaluates ``out[i] = M · rgb[i]`` per row, so the batched and
the single-vector paths produce bit-identical results.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Final, Iterable, Iterator, Sequence, Tuple, TypeAlias, Union

import numpy as np
from numpy.typing import NDArray
from numba import njit

from tint_errors import SingularMatrixError

__all__ = [
    # --- Type Aliases ---
    "ArrayFloat",
    "MatrixLike",

    # --- Constants ---
    "SINGULAR_EPSILON",
    "IDENTITY",

    # --- Decorators ---
    "handle_shapes",

    # --- Classes ---
    "Matrix3",

    # --- Functions ---
    "multiply",
    "determinant",
    "invert",
    "inverse",
    "transpose",
    "compose",
    "transform_vector",
    "transform_colors",
]

# --- Type Aliases ---
ArrayFloat: TypeAlias = NDArray[np.floating]
MatrixLike: TypeAlias = Union["Matrix3", ArrayFloat, Sequence[Sequence[float]], Sequence[float]]

# |det| below this is treated as singular (double precision).
SINGULAR_EPSILON: Final[float] = 1e-12


# =============================================================================
# 1. SHAPE HANDLING
# =============================================================================

def handle_shapes(func: Callable[..., ArrayFloat]) -> Callable[..., ArrayFloat]:
    """
    Decorator to normalize colour inputs to (N, 3) float64 and restore shape.

    Args:
        func: Function whose first positional argument is a colour array.

    Returns:
        The wrapped function.
        - If input is (3,), returns (3,)
        - If input is (N, 3), returns (N, 3)
        - If input is (..., 3) (e.g. an image), returns (..., 3)
    """
    @functools.wraps(func)
    def wrapper(arr: Any, *args: Any, **kwargs: Any) -> ArrayFloat:
        arr = np.asarray(arr, dtype=np.float64)
        if arr.ndim == 0 or arr.shape[-1] != 3:
            raise ValueError(f"Expected last dimension size 3, got shape {arr.shape}")

        arr_in = np.ascontiguousarray(arr.reshape(-1, 3))
        res = func(arr_in, *args, **kwargs)

        if arr.ndim == 1:
            return res[0]
        return res.reshape(arr.shape)
    return wrapper


# =============================================================================
# 2. KERNELS
# =============================================================================

@njit(cache=True)
def _transform_rows_kernel(colors: ArrayFloat, m: ArrayFloat) -> ArrayFloat:
    """out[i] = m · colors[i] for every row of an (N, 3) array."""
    n = colors.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        c0 = colors[i, 0]
        c1 = colors[i, 1]
        c2 = colors[i, 2]
        for j in range(3):
            out[i, j] = m[j, 0] * c0 + m[j, 1] * c1 + m[j, 2] * c2
    return out


# =============================================================================
# 3. MATRIX VALUE TYPE
# =============================================================================

class Matrix3:
    """
    Immutable 3x3 float64 matrix.

    The entries live in a read-only numpy array; ``np.asarray(m)`` returns
    that read-only view and ``to_numpy()`` a writable copy.  Matrices are
    hashable and compare by exact entry equality; use ``allclose`` for
    tolerance checks.
    """

    __slots__ = ("_m",)

    def __init__(self, entries: MatrixLike) -> None:
        if isinstance(entries, Matrix3):
            arr = entries._m
        else:
            arr = np.array(entries, dtype=np.float64)
            if arr.shape == (9,):
                arr = arr.reshape(3, 3)
            if arr.shape != (3, 3):
                raise ValueError(f"Matrix3: expected 3x3 or 9 entries, got shape {arr.shape}")
        arr = np.array(arr, dtype=np.float64, copy=True)
        arr.flags.writeable = False
        self._m = arr

    @classmethod
    def diagonal(cls, d: Sequence[float]) -> "Matrix3":
        """Diagonal matrix from three scale factors."""
        if len(d) != 3:
            raise ValueError(f"Matrix3.diagonal: expected 3 factors, got {len(d)}")
        return cls(np.diag(np.asarray(d, dtype=np.float64)))

    # -- read interface ----------------------------------------------------
    def __getitem__(self, idx: Any) -> Any:
        item = self._m[idx]
        return float(item) if np.ndim(item) == 0 else item

    def __iter__(self) -> Iterator[Tuple[float, float, float]]:
        return iter(self.rows)

    @property
    def rows(self) -> Tuple[Tuple[float, float, float], ...]:
        return tuple(tuple(float(v) for v in row) for row in self._m)

    def to_numpy(self) -> ArrayFloat:
        """Writable float64 copy of the entries."""
        return self._m.copy()

    def __array__(self, dtype: Any = None, copy: Any = None) -> ArrayFloat:
        if dtype is None or np.dtype(dtype) == self._m.dtype:
            return self._m.copy() if copy else self._m
        return self._m.astype(dtype)

    @property
    def T(self) -> "Matrix3":
        return transpose(self)

    @property
    def det(self) -> float:
        return determinant(self)

    # -- algebra -----------------------------------------------------------
    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, Matrix3):
            return multiply(self, other)
        return transform_vector(self, other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix3):
            return NotImplemented
        return bool(np.array_equal(self._m, other._m))

    def __hash__(self) -> int:
        return hash(self._m.tobytes())

    def allclose(self, other: MatrixLike, atol: float = 1e-9, rtol: float = 0.0) -> bool:
        """Entry-wise comparison within ``atol`` (+ ``rtol`` relative)."""
        return bool(np.allclose(self._m, np.asarray(Matrix3(other)), atol=atol, rtol=rtol))

    # -- display -----------------------------------------------------------
    def __repr__(self) -> str:
        body = ", ".join(
            "[" + ", ".join(f"{v:.10g}" for v in row) + "]" for row in self._m
        )
        return f"Matrix3([{body}])"


IDENTITY: Final[Matrix3] = Matrix3(np.eye(3))


# =============================================================================
# 4. OPERATIONS
# =============================================================================

def multiply(a: Matrix3, b: Matrix3) -> Matrix3:
    """
    Matrix product ``a · b``.

    Applying the result to a vector equals applying ``b`` first and then
    ``a``: ``multiply(a, b) @ v == a @ (b @ v)``.
    """
    return Matrix3(np.asarray(a) @ np.asarray(b))


def determinant(m: Matrix3) -> float:
    """Determinant of ``m``."""
    return float(np.linalg.det(np.asarray(m)))


def invert(m: Matrix3, epsilon: float = SINGULAR_EPSILON) -> Matrix3:
    """
    Inverse of ``m``.

    Raises:
        SingularMatrixError: If ``|det(m)| < epsilon`` or the determinant
            is not finite.
    """
    det = determinant(m)
    if not np.isfinite(det) or abs(det) < epsilon:
        raise SingularMatrixError(
            f"Matrix3: cannot invert, |det| = {abs(det):.3e} < {epsilon:.0e}",
            determinant=det,
        )
    return Matrix3(np.linalg.inv(np.asarray(m)))


# XYZ->RGB reads better as ``inverse(rgb_to_xyz)``.
inverse = invert


def transpose(m: Matrix3) -> Matrix3:
    return Matrix3(np.asarray(m).T)


def compose(matrices: Iterable[Matrix3]) -> Matrix3:
    """
    Left fold of ``multiply`` over ``matrices``; identity when empty.

    ``compose([xyz_to_rgb, adapt, rgb_to_xyz])`` converts RGB -> XYZ,
    adapts, and converts back: the last matrix is applied first.
    """
    return functools.reduce(multiply, matrices, IDENTITY)


def transform_vector(m: Matrix3, v: Union[ArrayFloat, Sequence[float]]) -> ArrayFloat:
    """Matrix-vector product ``m · v`` for a single 3-vector."""
    vec = np.asarray(v, dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"transform_vector: expected shape (3,), got {vec.shape}")
    return _transform_rows_kernel(vec.reshape(1, 3), np.asarray(m))[0]


@handle_shapes
def transform_colors(colors: ArrayFloat, m: Matrix3) -> ArrayFloat:
    """
    Apply ``m`` to every colour of a (3,), (N, 3) or (..., 3) array.

    Args:
        colors: Colour(s), last axis = 3 components.
        m: Transform matrix (column-vector convention).

    Returns:
        Transformed colours with the input's shape.
    """
    return _transform_rows_kernel(colors, np.asarray(m))
