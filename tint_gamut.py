# -*- coding: utf-8 -*-
"""
Tint: Matrices, gamut mapping and lookup tables for colour pipelines
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_gamut.py — Per-channel soft clipping into the unit cube.

Curve
-----
Softness f in [0, 1] sets a margin τ(f) = TAU_MAX · f (TAU_MAX = 0.25).
Each channel c is mapped independently:

    τ <= c <= 1 - τ       c                               (untouched core)
    c >  1 - τ            (1 - τ) + τ · g((c - (1 - τ)) / τ)
    c <  τ                τ       - τ · g((τ - c) / τ)

with the roll-off g(u) = u / sqrt(1 + u²) written as
1 / sqrt(1 + 1/u²).  g(0) = 0, g'(0) = 1 and g -> 1 as u -> inf, so the
curve is continuous with a continuous first derivative at both knees,
strictly increasing, and approaches 0 and 1 without reaching them.

Guarantees
----------
* Identity on the untouched core [τ(f), 1 - τ(f)].  τ(0) = 0 and
  τ_max < 0.5, so the two roll-off bands never overlap.
* f = 0 is a hard clamp to [0, 1] (in-range values are untouched).
* f > 0: out-of-range inputs land strictly inside (0, 1), including
  ±inf (the results are pinned one ulp inside the bounds when rounding
  would otherwise reach them).
* Non-decreasing in c for fixed f.  Every step of the roll-off is a
  correctly rounded monotone operation, so this also holds in floating
  point, not only on paper.  For τ below half an ulp of 1.0 the upper
  knee 1 - τ would round to 1.0; it is held one ulp below 1.0 instead,
  so the core ends there and 1.0 itself is rolled off.
* NaN propagates.
"""

from __future__ import annotations

import math
from typing import Final, Tuple, Union

import numpy as np
from numba import njit

from tint_errors import InvalidParameterError
from tint_matrix import ArrayFloat, handle_shapes

__all__ = [
    "TAU_MAX",
    "untouched_threshold",
    "untouched_range",
    "is_untouched",
    "map_channel",
    "map_to_gamut",
    "clip_absolute",
]

TAU_MAX: Final[float] = 0.25

_UPPER_LIMIT: Final[float] = float(np.nextafter(1.0, 0.0))
_LOWER_LIMIT: Final[float] = float(np.nextafter(0.0, 1.0))


def _check_softness(softness: float) -> float:
    f = float(softness)
    if not (0.0 <= f <= 1.0):
        raise InvalidParameterError(f"softness must be in [0, 1], got {softness!r}")
    return f


def untouched_threshold(softness: float) -> float:
    """τ(f): width of the roll-off band at each end of [0, 1]."""
    f = _check_softness(softness)
    tau = TAU_MAX * f
    # f > 0 never degenerates to the hard clamp
    if f > 0.0 and tau == 0.0:
        return _LOWER_LIMIT
    return tau


def untouched_range(softness: float) -> Tuple[float, float]:
    """(τ, 1 - τ): channel values in this closed range are returned unchanged."""
    tau = untouched_threshold(softness)
    return tau, _upper_knee(tau)


@njit(cache=True)
def _upper_knee(tau: float) -> float:
    """1 - τ, kept below 1.0 whenever τ > 0."""
    knee = 1.0 - tau
    if tau > 0.0 and knee >= 1.0:
        return _UPPER_LIMIT
    return knee


@njit(cache=True, inline="always")
def _rolloff(u: float) -> float:
    """g(u) = u / sqrt(1 + u²) for u >= 0, evaluated as 1 / sqrt(1 + 1/u²)."""
    uu = u * u
    if uu == 0.0:
        return 0.0
    return 1.0 / math.sqrt(1.0 + 1.0 / uu)


@njit(cache=True)
def _soft_clip_kernel(values: ArrayFloat, tau: float) -> ArrayFloat:
    """Soft clip a flat array; tau == 0 is a hard clamp."""
    n = values.shape[0]
    out = np.empty(n, dtype=np.float64)
    knee = _upper_knee(tau)

    for i in range(n):
        v = values[i]
        if v != v:
            out[i] = v
        elif tau == 0.0:
            if v > 1.0:
                out[i] = 1.0
            elif v < 0.0:
                out[i] = 0.0
            else:
                out[i] = v
        elif v > knee:
            y = knee + tau * _rolloff((v - knee) / tau)
            out[i] = y if y < 1.0 else _UPPER_LIMIT
        elif v < tau:
            y = tau - tau * _rolloff((tau - v) / tau)
            out[i] = y if y > 0.0 else _LOWER_LIMIT
        else:
            out[i] = v
    return out


def map_channel(c: float, softness: float) -> float:
    """Soft clip a single channel value."""
    tau = untouched_threshold(softness)
    return float(_soft_clip_kernel(np.array([c], dtype=np.float64), tau)[0])


@handle_shapes
def map_to_gamut(rgb: ArrayFloat, softness: float) -> ArrayFloat:
    """
    Map RGB colour(s) into the unit cube, channel by channel.

    Args:
        rgb: Colours of shape (3,), (N, 3) or (..., 3).
        softness: 0 = hard clamp; larger values widen the roll-off band
            (and shrink the untouched core) up to TAU_MAX per side.

    Returns:
        Mapped colours with the input's shape.

    Raises:
        InvalidParameterError: If softness is outside [0, 1].
    """
    tau = untouched_threshold(softness)
    return _soft_clip_kernel(rgb.ravel(), tau).reshape(rgb.shape)


def is_untouched(rgb: ArrayFloat, softness: float) -> Union[bool, np.ndarray]:
    """
    Per-colour flag: True where every channel lies in the untouched core,
    i.e. where ``map_to_gamut`` is guaranteed to be the identity.

    Returns a plain bool for a single (3,) colour and a boolean mask of
    shape ``rgb.shape[:-1]`` for a batch.
    """
    arr = np.asarray(rgb, dtype=np.float64)
    if arr.shape[-1] != 3:
        raise ValueError(f"Input last dimension must be 3, got {arr.shape}")
    lo, hi = untouched_range(softness)
    inside = np.all((arr >= lo) & (arr <= hi), axis=-1)
    if arr.ndim == 1:
        return bool(inside)
    return inside


@handle_shapes
def clip_absolute(rgb: ArrayFloat) -> ArrayFloat:
    """Hard clip to [0, 1]."""
    return np.clip(rgb, 0.0, 1.0)
