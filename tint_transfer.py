# -*- coding: utf-8 -*-
"""
Tint: Matrices, gamut mapping and lookup tables for colour pipelines
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_transfer.py — Closed-form transfer functions (OETF / EOTF pairs).

All functions are numpy-vectorised: they accept scalars or arrays of
any shape and return float64 of the same shape (a numpy scalar for
scalar input), so they can be handed to ``Lut1D.from_fn`` directly:

    Lut1D.from_fn(srgb_from_linear, 4096)

``*_from_linear`` encodes scene/display-linear values, ``*_to_linear``
decodes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Final

import numpy as np

from tint_matrix import ArrayFloat

__all__ = [
    # --- Constants ---
    "PQ_LUMINANCE_MAX",

    # --- Functions ---
    "srgb_from_linear",
    "srgb_to_linear",
    "rec709_from_linear",
    "rec709_to_linear",
    "rec2100_pq_from_linear",
    "rec2100_pq_to_linear",
    "rec2100_hlg_from_linear",
    "rec2100_hlg_to_linear",

    # --- Registry ---
    "TransferFunction",
    "SRGB",
    "REC709",
    "REC2020",
    "REC2100_PQ",
    "REC2100_HLG",
    "TRANSFER_FUNCTIONS",
]


def _float_array(x: Any) -> ArrayFloat:
    return np.asarray(x, dtype=np.float64)


# =============================================================================
# 1. sRGB (IEC 61966-2-1)
# =============================================================================

_SRGB_LINEAR_CUTOFF: Final[float] = 0.0031308
_SRGB_ENCODED_CUTOFF: Final[float] = 0.04045


def srgb_from_linear(x: Any) -> ArrayFloat:
    x = _float_array(x)
    with np.errstate(invalid="ignore"):
        out = np.where(
            x < _SRGB_LINEAR_CUTOFF,
            x * 12.92,
            1.055 * np.power(x, 1.0 / 2.4) - 0.055,
        )
    return out[()]


def srgb_to_linear(x: Any) -> ArrayFloat:
    x = _float_array(x)
    with np.errstate(invalid="ignore"):
        out = np.where(
            x < _SRGB_ENCODED_CUTOFF,
            x / 12.92,
            np.power((x + 0.055) / 1.055, 2.4),
        )
    return out[()]


# =============================================================================
# 2. Rec.709 / Rec.2020
# =============================================================================

# High-precision constants so the same curve serves Rec.2020.
_REC709_A: Final[float] = 1.09929682680944
_REC709_B: Final[float] = 0.01805396851080


def rec709_from_linear(x: Any) -> ArrayFloat:
    x = _float_array(x)
    with np.errstate(invalid="ignore"):
        out = np.where(
            x < _REC709_B,
            x * 4.5,
            _REC709_A * np.power(x, 0.45) - (_REC709_A - 1.0),
        )
    return out[()]


def rec709_to_linear(x: Any) -> ArrayFloat:
    x = _float_array(x)
    with np.errstate(invalid="ignore"):
        out = np.where(
            x < _REC709_B * 4.5,
            x / 4.5,
            np.power((x + (_REC709_A - 1.0)) / _REC709_A, 1.0 / 0.45),
        )
    return out[()]


# =============================================================================
# 3. Rec.2100 PQ (SMPTE ST 2084)
# =============================================================================

# Linear PQ values are absolute luminance in cd/m².
PQ_LUMINANCE_MAX: Final[float] = 10000.0

_PQ_M1: Final[float] = 2610.0 / 16384.0
_PQ_M2: Final[float] = 2523.0 / 4096.0 * 128.0
_PQ_C1: Final[float] = 3424.0 / 4096.0
_PQ_C2: Final[float] = 2413.0 / 4096.0 * 32.0
_PQ_C3: Final[float] = 2392.0 / 4096.0 * 32.0


def rec2100_pq_from_linear(x: Any) -> ArrayFloat:
    """
    Luminance [0, PQ_LUMINANCE_MAX] cd/m² -> PQ signal [0, 1].

    Odd-symmetric below zero.
    """
    x = _float_array(x)
    y = np.power(np.abs(x) / PQ_LUMINANCE_MAX, _PQ_M1)
    out = np.power((_PQ_C1 + _PQ_C2 * y) / (1.0 + _PQ_C3 * y), _PQ_M2)
    return np.copysign(out, x)[()]


def rec2100_pq_to_linear(x: Any) -> ArrayFloat:
    """PQ signal [0, 1] -> luminance [0, PQ_LUMINANCE_MAX] cd/m²."""
    x = _float_array(x)
    e = np.power(np.abs(x), 1.0 / _PQ_M2)
    y = np.power(np.maximum(e - _PQ_C1, 0.0) / (_PQ_C2 - _PQ_C3 * e), 1.0 / _PQ_M1)
    return np.copysign(y * PQ_LUMINANCE_MAX, x)[()]


# =============================================================================
# 4. Rec.2100 HLG (ARIB STD-B67)
# =============================================================================

_HLG_A: Final[float] = 0.17883277
_HLG_B: Final[float] = 1.0 - 4.0 * _HLG_A
_HLG_C: Final[float] = 0.5 - _HLG_A * float(np.log(4.0 * _HLG_A))


def rec2100_hlg_from_linear(x: Any) -> ArrayFloat:
    """Scene-linear [0, 1] -> HLG signal [0, 1].  Negative input reads as 0."""
    x = np.maximum(_float_array(x), 0.0)
    with np.errstate(invalid="ignore", divide="ignore"):
        out = np.where(
            x <= 1.0 / 12.0,
            np.sqrt(3.0 * x),
            _HLG_A * np.log(12.0 * x - _HLG_B) + _HLG_C,
        )
    return out[()]


def rec2100_hlg_to_linear(x: Any) -> ArrayFloat:
    """HLG signal [0, 1] -> scene-linear [0, 1]."""
    x = _float_array(x)
    with np.errstate(over="ignore"):
        out = np.where(
            x <= 0.5,
            x * x / 3.0,
            (np.exp((x - _HLG_C) / _HLG_A) + _HLG_B) / 12.0,
        )
    return out[()]


# =============================================================================
# 5. REGISTRY
# =============================================================================

@dataclass(slots=True, frozen=True)
class TransferFunction:
    """Named encode/decode pair."""
    name: str
    from_linear: Callable[[Any], ArrayFloat]
    to_linear: Callable[[Any], ArrayFloat]


SRGB: Final[TransferFunction] = TransferFunction("sRGB", srgb_from_linear, srgb_to_linear)
REC709: Final[TransferFunction] = TransferFunction("Rec.709", rec709_from_linear, rec709_to_linear)
REC2020: Final[TransferFunction] = TransferFunction("Rec.2020", rec709_from_linear, rec709_to_linear)
REC2100_PQ: Final[TransferFunction] = TransferFunction(
    "Rec.2100 PQ", rec2100_pq_from_linear, rec2100_pq_to_linear
)
REC2100_HLG: Final[TransferFunction] = TransferFunction(
    "Rec.2100 HLG", rec2100_hlg_from_linear, rec2100_hlg_to_linear
)

TRANSFER_FUNCTIONS: Final[Dict[str, TransferFunction]] = {
    tf.name: tf for tf in (SRGB, REC709, REC2020, REC2100_PQ, REC2100_HLG)
}
