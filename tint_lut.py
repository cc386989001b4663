# -*- coding: utf-8 -*-
"""
Tint: Matrices, gamut mapping and lookup tables for colour pipelines
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_lut.py — In-memory 1D and 3D lookup tables.

Storage
-------
Lut1D   table (N, C), C in {1, 3}, N >= 2.  Row k holds the output for the
        k-th of N evenly spaced inputs spanning [domain_min, domain_max]
        of that channel.  A one-channel table is applied to all three
        colour channels and therefore needs a uniform domain.
Lut3D   table (N³, 3), N >= 2, row index = r + g·N + b·N² (red fastest).
        ``grid`` exposes the same data as an (N, N, N, 3) view indexed
        [b, g, r].

Domains are 3-tuples of floats (one entry per channel / axis); scalars
given to constructors are broadcast.  Tables are read-only float64
arrays, so values can be shared between threads without copies.

Sampling
--------
Inputs are clamped to the domain, the position ``(x - min)/(max - min)
· (N - 1)`` selects a cell, and the cell corners are blended linearly
(1D) or trilinearly (3D).  Sampling exactly at min/max returns the
first/last sample bit-for-bit.  NaN inputs produce NaN outputs.
"""

from __future__ import annotations

import warnings
from typing import Any, Callable, Dict, Final, Optional, Sequence, Tuple, Union

import numpy as np
from numba import njit
from scipy.interpolate import Akima1DInterpolator, CubicSpline, PchipInterpolator

from tint_errors import CubeFormatError, InvalidParameterError
from tint_matrix import ArrayFloat, handle_shapes

__all__ = [
    # --- Type Aliases ---
    "DomainLike",
    "Domain3",

    # --- Constants ---
    "RESAMPLE_METHODS",

    # --- Classes ---
    "Lut1D",
    "Lut3D",
    "Lut3DBuilder",
]

DomainLike = Union[float, Sequence[float]]
Domain3 = Tuple[float, float, float]

RESAMPLE_METHODS: Final[Tuple[str, ...]] = ("linear", "cubicspline", "pchip", "akima", "makima")


# =============================================================================
# 1. VALIDATION HELPERS
# =============================================================================

def _as_domain(value: DomainLike, label: str) -> Domain3:
    arr = np.asarray(value, dtype=np.float64)
    if arr.ndim == 0:
        arr = np.repeat(arr, 3)
    if arr.shape != (3,):
        raise InvalidParameterError(
            f"{label}: expected a scalar or 3 values, got shape {arr.shape}"
        )
    if not np.all(np.isfinite(arr)):
        raise InvalidParameterError(f"{label}: domain bounds must be finite, got {arr.tolist()}")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


def _check_domain(lo: Domain3, hi: Domain3, context: str) -> None:
    for axis, (a, b) in enumerate(zip(lo, hi)):
        if not a < b:
            raise InvalidParameterError(
                f"{context}: domain min must be below max on axis {axis} (min={a!r}, max={b!r})"
            )


def _check_size(size: int, context: str) -> int:
    n = int(size)
    if n != size or n < 2:
        raise InvalidParameterError(f"{context}: size must be an integer >= 2, got {size!r}")
    return n


def _read_only(arr: ArrayFloat) -> ArrayFloat:
    out = np.array(arr, dtype=np.float64, copy=True)
    out.flags.writeable = False
    return out


# =============================================================================
# 2. KERNELS
# =============================================================================

@njit(cache=True)
def _locate(x: float, lo: float, hi: float, n: int) -> Tuple[int, float]:
    """Cell index i in [0, n-2] and blend factor t in [0, 1] for a clamped x."""
    if x <= lo:
        return 0, 0.0
    if x >= hi:
        return n - 2, 1.0
    pos = (x - lo) / (hi - lo) * (n - 1)
    i = int(pos)
    if i > n - 2:
        i = n - 2
    return i, pos - i


@njit(cache=True, inline="always")
def _mix(a: float, b: float, t: float) -> float:
    """a·(1 - t) + b·t, returning the end sample itself at t = 0 and t = 1."""
    if t == 0.0:
        return a
    if t == 1.0:
        return b
    return a * (1.0 - t) + b * t


@njit(cache=True)
def _lerp_1d_kernel(xs: ArrayFloat, values: ArrayFloat, lo: float, hi: float) -> ArrayFloat:
    """Piecewise-linear lookup of every entry of ``xs`` in one table column."""
    m = xs.shape[0]
    n = values.shape[0]
    out = np.empty(m, dtype=np.float64)
    for k in range(m):
        x = xs[k]
        if x != x:
            out[k] = np.nan
            continue
        i, t = _locate(x, lo, hi, n)
        out[k] = _mix(values[i], values[i + 1], t)
    return out


@njit(cache=True)
def _trilinear_kernel(
    rgb: ArrayFloat, table: ArrayFloat, n: int, lo: ArrayFloat, hi: ArrayFloat
) -> ArrayFloat:
    """Trilinear lookup of (M, 3) colours in an (N³, 3) red-fastest table."""
    m = rgb.shape[0]
    n2 = n * n
    out = np.empty((m, 3), dtype=np.float64)
    for k in range(m):
        r = rgb[k, 0]
        g = rgb[k, 1]
        b = rgb[k, 2]
        if r != r or g != g or b != b:
            out[k, 0] = np.nan
            out[k, 1] = np.nan
            out[k, 2] = np.nan
            continue

        ir, tr = _locate(r, lo[0], hi[0], n)
        ig, tg = _locate(g, lo[1], hi[1], n)
        ib, tb = _locate(b, lo[2], hi[2], n)
        base = ir + ig * n + ib * n2

        for ch in range(3):
            c000 = table[base, ch]
            c100 = table[base + 1, ch]
            c010 = table[base + n, ch]
            c110 = table[base + n + 1, ch]
            c001 = table[base + n2, ch]
            c101 = table[base + n2 + 1, ch]
            c011 = table[base + n2 + n, ch]
            c111 = table[base + n2 + n + 1, ch]

            c00 = _mix(c000, c100, tr)
            c10 = _mix(c010, c110, tr)
            c01 = _mix(c001, c101, tr)
            c11 = _mix(c011, c111, tr)

            c0 = _mix(c00, c10, tg)
            c1 = _mix(c01, c11, tg)

            out[k, ch] = _mix(c0, c1, tb)
    return out


def _invert_column(values: ArrayFloat, lo: float, hi: float, ys: ArrayFloat) -> ArrayFloat:
    """
    Inputs x in [lo, hi] with look_up(x) == y for a non-decreasing column.

    y below the first sample maps to ``lo``, above the last to ``hi``.
    Inside a flat run the input at the run's end is returned.
    """
    n = values.shape[0]
    ys = np.asarray(ys, dtype=np.float64)
    i = np.clip(np.searchsorted(values, ys, side="right") - 1, 0, n - 2)
    v0 = values[i]
    v1 = values[i + 1]
    span = v1 - v0
    with np.errstate(divide="ignore", invalid="ignore"):
        alpha = np.where(span > 0.0, (ys - v0) / np.where(span > 0.0, span, 1.0), 0.0)
    alpha = np.clip(alpha, 0.0, 1.0)
    xs = lo + (i + alpha) / (n - 1) * (hi - lo)
    xs = np.where(ys <= values[0], lo, xs)
    xs = np.where(ys >= values[-1], hi, xs)
    return np.where(np.isnan(ys), np.nan, xs)


# =============================================================================
# 3. 1D LUT
# =============================================================================

class Lut1D:
    """
    Immutable 1D lookup table with one or three channels.

    Args:
        table: (N,) or (N, 1) for a single curve, (N, 3) for per-channel
            curves.  Samples need not be monotonic.
        domain_min: Input value mapped to the first sample (scalar or 3).
        domain_max: Input value mapped to the last sample (scalar or 3).

    Raises:
        InvalidParameterError: N < 2, min >= max, non-finite bounds, or a
            one-channel table with a non-uniform domain.
    """

    __slots__ = ("_table", "_domain_min", "_domain_max")

    def __init__(
        self,
        table: Any,
        domain_min: DomainLike = 0.0,
        domain_max: DomainLike = 1.0,
    ) -> None:
        arr = np.asarray(table, dtype=np.float64)
        if arr.ndim == 1:
            arr = arr[:, np.newaxis]
        if arr.ndim != 2 or arr.shape[1] not in (1, 3):
            raise InvalidParameterError(
                f"Lut1D: table must have shape (N,), (N, 1) or (N, 3), got {np.shape(table)}"
            )
        if arr.shape[0] < 2:
            raise InvalidParameterError(f"Lut1D: needs at least 2 samples, got {arr.shape[0]}")

        lo = _as_domain(domain_min, "Lut1D domain_min")
        hi = _as_domain(domain_max, "Lut1D domain_max")
        _check_domain(lo, hi, "Lut1D")
        if arr.shape[1] == 1 and (len(set(lo)) != 1 or len(set(hi)) != 1):
            raise InvalidParameterError(
                f"Lut1D: a single-channel table needs a uniform domain, got {lo} .. {hi}"
            )

        self._table = _read_only(arr)
        self._domain_min = lo
        self._domain_max = hi

    # -- construction ------------------------------------------------------
    @classmethod
    def from_fn(
        cls,
        fn: Union[Callable[[ArrayFloat], Any], Sequence[Callable[[ArrayFloat], Any]]],
        size: int,
        domain_min: DomainLike = 0.0,
        domain_max: DomainLike = 1.0,
    ) -> "Lut1D":
        """
        Tabulate ``fn`` at ``size`` evenly spaced inputs.

        ``fn`` is called with a float64 array and must return an array of
        the same length (numpy ufunc style).  Pass a sequence of three
        callables for per-channel curves.  A single callable over a
        uniform domain yields a one-channel table, otherwise three.
        """
        n = _check_size(size, "Lut1D.from_fn")
        lo = _as_domain(domain_min, "Lut1D.from_fn domain_min")
        hi = _as_domain(domain_max, "Lut1D.from_fn domain_max")
        _check_domain(lo, hi, "Lut1D.from_fn")

        if callable(fn):
            if len(set(lo)) == 1 and len(set(hi)) == 1:
                x = np.linspace(lo[0], hi[0], n)
                return cls(np.broadcast_to(np.asarray(fn(x), dtype=np.float64), (n,)), lo, hi)
            fns = (fn, fn, fn)
        else:
            fns = tuple(fn)
            if len(fns) != 3:
                raise InvalidParameterError(
                    f"Lut1D.from_fn: expected 1 or 3 callables, got {len(fns)}"
                )

        columns = []
        for f, a, b in zip(fns, lo, hi):
            x = np.linspace(a, b, n)
            columns.append(np.broadcast_to(np.asarray(f(x), dtype=np.float64), (n,)))
        return cls(np.column_stack(columns), lo, hi)

    # -- read interface ----------------------------------------------------
    @property
    def table(self) -> ArrayFloat:
        """Read-only (N, C) sample array."""
        return self._table

    @property
    def size(self) -> int:
        return int(self._table.shape[0])

    @property
    def channels(self) -> int:
        return int(self._table.shape[1])

    @property
    def domain_min(self) -> Domain3:
        return self._domain_min

    @property
    def domain_max(self) -> Domain3:
        return self._domain_max

    @property
    def has_uniform_domain(self) -> bool:
        return len(set(self._domain_min)) == 1 and len(set(self._domain_max)) == 1

    def _check_channel(self, channel: int) -> int:
        if not 0 <= channel < self.channels:
            raise InvalidParameterError(
                f"Lut1D: channel {channel} out of range for a {self.channels}-channel table"
            )
        return channel

    # -- sampling ----------------------------------------------------------
    def look_up(self, x: float, channel: int = 0) -> float:
        """Linearly interpolated value of one channel at input ``x``."""
        c = self._check_channel(channel)
        xs = np.array([x], dtype=np.float64)
        return float(_lerp_1d_kernel(
            xs, np.ascontiguousarray(self._table[:, c]), self._domain_min[c], self._domain_max[c]
        )[0])

    def sample(self, x: float) -> ArrayFloat:
        """All channels evaluated at the same input ``x``; shape (C,)."""
        return np.array([self.look_up(x, c) for c in range(self.channels)])

    def apply(self, rgb: Any) -> ArrayFloat:
        """
        Apply the curves to RGB colour(s): channel i of the table drives
        colour channel i (a one-channel table drives all three).
        """
        return _apply_1d(rgb, self)

    # -- derived tables ----------------------------------------------------
    def resample(
        self,
        size: int,
        domain: Optional[Tuple[float, float]] = None,
        method: str = "linear",
    ) -> "Lut1D":
        """
        Resample every channel onto ``size`` points over one shared range.

        Args:
            size: Sample count of the new table.
            domain: (min, max) of the new table; defaults to the union of
                the channel domains.
            method: 'linear', 'cubicspline', 'pchip', 'akima' or 'makima'.

        Returns:
            New table with a uniform domain.  Inputs outside a channel's
            old domain take that channel's first/last sample.
        """
        n = _check_size(size, "Lut1D.resample")
        if domain is None:
            lo, hi = min(self._domain_min), max(self._domain_max)
        else:
            lo, hi = float(domain[0]), float(domain[1])
        _check_domain((lo,) * 3, (hi,) * 3, "Lut1D.resample")

        methods: Dict[str, Callable[[ArrayFloat, ArrayFloat, ArrayFloat], ArrayFloat]] = {
            "linear": lambda xq, x, v: np.interp(xq, x, v),
            "cubicspline": lambda xq, x, v: CubicSpline(x, v)(xq),
            "pchip": lambda xq, x, v: PchipInterpolator(x, v)(xq),
            "akima": lambda xq, x, v: Akima1DInterpolator(x, v, method="akima")(xq),
            "makima": lambda xq, x, v: Akima1DInterpolator(x, v, method="makima")(xq),
        }
        if method not in methods:
            raise InvalidParameterError(
                f"Lut1D.resample: unknown method '{method}'. Choose from: {list(methods.keys())}"
            )

        x_new = np.linspace(lo, hi, n)
        columns = []
        for c in range(self.channels):
            a, b = self._domain_min[c], self._domain_max[c]
            x_old = np.linspace(a, b, self.size)
            columns.append(methods[method](np.clip(x_new, a, b), x_old, self._table[:, c]))
        return Lut1D(np.column_stack(columns), lo, hi)

    def is_monotonic(self) -> bool:
        """True when every channel is non-decreasing (NaN samples count as not)."""
        return bool(np.all(np.diff(self._table, axis=0) >= 0.0))

    def _require_monotonic(self, context: str) -> None:
        if not self.is_monotonic():
            raise InvalidParameterError(
                f"{context}: table is not non-decreasing in every channel"
            )

    def look_up_inverse(self, y: float, channel: int = 0) -> float:
        """
        Input x whose ``look_up(x, channel)`` is ``y``.

        Raises:
            InvalidParameterError: If the table is not non-decreasing.
        """
        c = self._check_channel(channel)
        self._require_monotonic("Lut1D.look_up_inverse")
        return float(_invert_column(
            self._table[:, c], self._domain_min[c], self._domain_max[c], np.array([y])
        )[0])

    def inverted(self, size: int) -> "Lut1D":
        """
        Inverse curves resampled to ``size`` points.

        The new domain is the output range of the table: the union over
        channels when the domain is uniform, otherwise per channel.
        Channels with flat stretches invert ambiguously and trigger a
        warning.

        Raises:
            InvalidParameterError: If the table is not non-decreasing or a
                channel is constant.
        """
        n = _check_size(size, "Lut1D.inverted")
        self._require_monotonic("Lut1D.inverted")

        first = self._table[0]
        last = self._table[-1]
        if np.any(last <= first):
            raise InvalidParameterError(
                "Lut1D.inverted: a constant channel has no inverse"
            )
        if np.any(np.diff(self._table, axis=0) == 0.0):
            warnings.warn(
                "Lut1D.inverted: table has flat segments; the inverse picks "
                "the end of each flat run.",
                stacklevel=2,
            )

        if self.has_uniform_domain:
            new_lo = np.full(self.channels, first.min())
            new_hi = np.full(self.channels, last.max())
        else:
            new_lo, new_hi = first, last

        columns = []
        for c in range(self.channels):
            ys = np.linspace(new_lo[c], new_hi[c], n)
            columns.append(_invert_column(
                self._table[:, c], self._domain_min[c], self._domain_max[c], ys
            ))

        if self.channels == 1:
            return Lut1D(columns[0], float(new_lo[0]), float(new_hi[0]))
        return Lut1D(np.column_stack(columns), new_lo, new_hi)

    # -- value semantics ---------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lut1D):
            return NotImplemented
        return (
            self._domain_min == other._domain_min
            and self._domain_max == other._domain_max
            and bool(np.array_equal(self._table, other._table))
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Lut1D(size={self.size}, channels={self.channels}, "
            f"domain_min={self._domain_min}, domain_max={self._domain_max})"
        )


@handle_shapes
def _apply_1d(rgb: ArrayFloat, lut: Lut1D) -> ArrayFloat:
    out = np.empty_like(rgb)
    for i in range(3):
        c = i if lut.channels == 3 else 0
        out[:, i] = _lerp_1d_kernel(
            np.ascontiguousarray(rgb[:, i]),
            np.ascontiguousarray(lut.table[:, c]),
            lut.domain_min[i],
            lut.domain_max[i],
        )
    return out


# =============================================================================
# 4. 3D LUT
# =============================================================================

class Lut3D:
    """
    Immutable 3D lookup table on an N x N x N grid.

    Args:
        size: Grid points per axis, N >= 2.
        table: N³ RGB rows in red-fastest order, as (N³, 3), or an
            (N, N, N, 3) grid indexed [b, g, r].
        domain_min: Lower corner of the input cube (scalar or 3).
        domain_max: Upper corner of the input cube (scalar or 3).

    Raises:
        InvalidParameterError: N < 2, min >= max or non-finite bounds.
        CubeFormatError: Entry count is not N³.
    """

    __slots__ = ("_size", "_table", "_domain_min", "_domain_max")

    def __init__(
        self,
        size: int,
        table: Any,
        domain_min: DomainLike = 0.0,
        domain_max: DomainLike = 1.0,
    ) -> None:
        n = _check_size(size, "Lut3D")
        arr = np.asarray(table, dtype=np.float64)
        if arr.ndim == 4 and arr.shape[-1] == 3:
            arr = arr.reshape(-1, 3)
        if arr.ndim != 2 or arr.shape[1] != 3:
            raise CubeFormatError(
                f"Lut3D: table must hold RGB rows, got shape {arr.shape}"
            )
        if arr.shape[0] != n ** 3:
            raise CubeFormatError(
                f"Lut3D: grid of size {n} has the wrong number of entries",
                expected=n ** 3,
                found=arr.shape[0],
            )

        lo = _as_domain(domain_min, "Lut3D domain_min")
        hi = _as_domain(domain_max, "Lut3D domain_max")
        _check_domain(lo, hi, "Lut3D")

        self._size = n
        self._table = _read_only(arr)
        self._domain_min = lo
        self._domain_max = hi

    @classmethod
    def from_fn(
        cls,
        fn: Callable[[ArrayFloat], Any],
        size: int,
        domain_min: DomainLike = 0.0,
        domain_max: DomainLike = 1.0,
    ) -> "Lut3D":
        """
        Tabulate ``fn`` on the grid.

        ``fn`` receives the (N³, 3) array of grid coordinates in table
        order and returns an array of the same shape.
        """
        n = _check_size(size, "Lut3D.from_fn")
        coords = _grid_coordinates(
            n,
            _as_domain(domain_min, "Lut3D.from_fn domain_min"),
            _as_domain(domain_max, "Lut3D.from_fn domain_max"),
        )
        return cls(n, np.asarray(fn(coords), dtype=np.float64), domain_min, domain_max)

    @classmethod
    def identity(
        cls,
        size: int,
        domain_min: DomainLike = 0.0,
        domain_max: DomainLike = 1.0,
    ) -> "Lut3D":
        """Table that returns its (clamped) input unchanged at the grid points."""
        return cls.from_fn(lambda rgb: rgb, size, domain_min, domain_max)

    # -- read interface ----------------------------------------------------
    @property
    def size(self) -> int:
        return self._size

    @property
    def table(self) -> ArrayFloat:
        """Read-only (N³, 3) array, red fastest."""
        return self._table

    @property
    def grid(self) -> ArrayFloat:
        """Read-only (N, N, N, 3) view indexed [b, g, r]."""
        n = self._size
        return self._table.reshape(n, n, n, 3)

    @property
    def domain_min(self) -> Domain3:
        return self._domain_min

    @property
    def domain_max(self) -> Domain3:
        return self._domain_max

    def index(self, r: int, g: int, b: int) -> int:
        """Row of grid point (r, g, b) in ``table``."""
        return r + g * self._size + b * self._size * self._size

    # -- sampling ----------------------------------------------------------
    def sample(self, r: float, g: float, b: float) -> ArrayFloat:
        """Trilinear lookup of a single colour; shape (3,)."""
        return self.apply(np.array([r, g, b], dtype=np.float64))

    def apply(self, rgb: Any) -> ArrayFloat:
        """Trilinear lookup of colour(s) of shape (3,), (N, 3) or (..., 3)."""
        return _apply_3d(rgb, self)

    # -- value semantics ---------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lut3D):
            return NotImplemented
        return (
            self._size == other._size
            and self._domain_min == other._domain_min
            and self._domain_max == other._domain_max
            and bool(np.array_equal(self._table, other._table))
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Lut3D(size={self._size}, domain_min={self._domain_min}, "
            f"domain_max={self._domain_max})"
        )


@handle_shapes
def _apply_3d(rgb: ArrayFloat, lut: Lut3D) -> ArrayFloat:
    return _trilinear_kernel(
        rgb,
        lut.table,
        lut.size,
        np.asarray(lut.domain_min, dtype=np.float64),
        np.asarray(lut.domain_max, dtype=np.float64),
    )


def _grid_coordinates(n: int, lo: Domain3, hi: Domain3) -> ArrayFloat:
    """(N³, 3) input coordinates of the grid points, red fastest."""
    axes = [np.linspace(a, b, n) for a, b in zip(lo, hi)]
    bb, gg, rr = np.meshgrid(axes[2], axes[1], axes[0], indexing="ij")
    return np.column_stack([rr.ravel(), gg.ravel(), bb.ravel()])


# =============================================================================
# 5. MUTABLE BUILDER
# =============================================================================

class Lut3DBuilder:
    """
    Incrementally filled 3D table, finalised with ``build()``.

    Starts as the identity grid.  Instances are plain mutable state: keep
    each one with a single owner (one thread) until ``build()`` has
    produced the immutable ``Lut3D``.
    """

    def __init__(
        self,
        size: int,
        domain_min: DomainLike = 0.0,
        domain_max: DomainLike = 1.0,
    ) -> None:
        self.size = _check_size(size, "Lut3DBuilder")
        self.domain_min = _as_domain(domain_min, "Lut3DBuilder domain_min")
        self.domain_max = _as_domain(domain_max, "Lut3DBuilder domain_max")
        _check_domain(self.domain_min, self.domain_max, "Lut3DBuilder")
        self._table = _grid_coordinates(self.size, self.domain_min, self.domain_max)

    def _row(self, r: int, g: int, b: int) -> int:
        n = self.size
        for name, i in (("r", r), ("g", g), ("b", b)):
            if not 0 <= i < n:
                raise IndexError(f"Lut3DBuilder: {name} index {i} outside 0..{n - 1}")
        return r + g * n + b * n * n

    def set(self, r: int, g: int, b: int, value: Sequence[float]) -> None:
        """Store the output RGB for grid point (r, g, b)."""
        self._table[self._row(r, g, b)] = np.asarray(value, dtype=np.float64)

    def get(self, r: int, g: int, b: int) -> ArrayFloat:
        return self._table[self._row(r, g, b)].copy()

    def build(self) -> Lut3D:
        """Immutable snapshot; later ``set`` calls do not affect it."""
        return Lut3D(self.size, self._table, self.domain_min, self.domain_max)
