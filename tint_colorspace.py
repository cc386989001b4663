# -*- coding: utf-8 -*-
"""
Tint: Matrices, gamut mapping and lookup tables for colour pipelines
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_colorspace.py — RGB <-> XYZ matrix construction from chromaticities.

Derivation:
    1. Each primary (x, y) becomes an XYZ column with Y = 1:
           (x/y, 1, (1 - x - y)/y)
       giving the primaries matrix P = [R | G | B].
    2. The white point becomes W = (x_w/y_w, 1, z_w/y_w).
    3. Solve P · S = W for the per-primary scale S = P⁻¹ · W.
    4. RGB -> XYZ = P · diag(S).

The matrix does no chromatic adaptation: RGB (1, 1, 1) lands on the
space's own white point with Y = 1.

Colour models built on XYZ and RGB are collected here too: xyY, u'v'Y,
OkLab and OpenColorIO's extended-range HSV.
"""

from __future__ import annotations

from typing import Final, Optional

import numpy as np
from numba import njit

from tint_adaptation import AdaptationModel, adaptation_matrix
from tint_chroma import Chromaticity, D65, RGBPrimaries
from tint_errors import InvalidParameterError, SingularMatrixError, SingularPrimariesError
from tint_matrix import (
    ArrayFloat,
    Matrix3,
    compose,
    handle_shapes,
    invert,
    multiply,
    transform_colors,
)

__all__ = [
    # --- Constants ---
    "OKLAB_M1",
    "OKLAB_M2",
    "HSV_MAX_SATURATION",

    # --- Matrix Builders ---
    "primaries_matrix",
    "build_rgb_to_xyz",
    "build_xyz_to_rgb",
    "rgb_to_rgb_matrix",

    # --- Colour Models ---
    "xyz_to_xyy",
    "xyy_to_xyz",
    "xyz_to_uvy",
    "uvy_to_xyz",
    "xyz_to_oklab",
    "oklab_to_xyz",
    "rgb_to_hsv",
    "hsv_to_rgb",
]


def primaries_matrix(primaries: RGBPrimaries) -> Matrix3:
    """
    Unscaled primaries matrix P whose columns are the primaries' XYZ (Y = 1).

    Raises:
        SingularPrimariesError: If a primary has y = 0 or a non-finite
            coordinate.
    """
    columns = []
    for name, c in zip(("red", "green", "blue"), primaries.primaries):
        if c.y == 0.0 or not (np.isfinite(c.x) and np.isfinite(c.y)):
            raise SingularPrimariesError(
                f"build_rgb_to_xyz: {name} primary {c} cannot be lifted to XYZ (y must be non-zero)"
            )
        columns.append(c.to_xyz(1.0))
    return Matrix3(np.column_stack(columns))


def build_rgb_to_xyz(primaries: RGBPrimaries) -> Matrix3:
    """
    RGB -> CIE 1931 XYZ matrix for the given primaries and white point.

    Args:
        primaries: Chromaticities of R, G, B and the white point.

    Returns:
        Matrix mapping linear RGB (column vector) to XYZ, with white Y = 1.

    Raises:
        SingularPrimariesError: Collinear or coincident primaries (the
            primaries matrix is singular).
        InvalidParameterError: The white point is not a physical
            chromaticity (needs 0 < x, 0 < y, x + y <= 1).
    """
    white = primaries.white
    if not white.is_physical():
        raise InvalidParameterError(
            f"build_rgb_to_xyz: white point {white} is not a physical chromaticity"
        )

    p = primaries_matrix(primaries)
    try:
        p_inv = invert(p)
    except SingularMatrixError as err:
        raise SingularPrimariesError(
            f"build_rgb_to_xyz: primaries {primaries.red}, {primaries.green}, "
            f"{primaries.blue} are collinear or coincident",
            determinant=err.determinant,
        ) from err

    scale = p_inv @ white.to_xyz(1.0)
    return multiply(p, Matrix3.diagonal(scale))


def build_xyz_to_rgb(primaries: RGBPrimaries) -> Matrix3:
    """XYZ -> RGB, the inverse of ``build_rgb_to_xyz(primaries)``."""
    rgb_to_xyz = build_rgb_to_xyz(primaries)
    try:
        return invert(rgb_to_xyz)
    except SingularMatrixError as err:
        raise SingularPrimariesError(
            "build_xyz_to_rgb: RGB -> XYZ matrix is singular",
            determinant=err.determinant,
        ) from err


def rgb_to_rgb_matrix(
    src: RGBPrimaries,
    dst: RGBPrimaries,
    adaptation: Optional[AdaptationModel] = None,
) -> Matrix3:
    """
    Single matrix converting linear RGB in ``src`` to linear RGB in ``dst``.

    Args:
        src: Source colour space.
        dst: Destination colour space.
        adaptation: If given, the source white is adapted onto the
            destination white, so RGB (1, 1, 1) maps to (1, 1, 1).
            Without it the conversion is purely colorimetric and white
            only survives when both spaces share a white point.
    """
    if adaptation is None:
        return compose([build_xyz_to_rgb(dst), build_rgb_to_xyz(src)])
    return compose([
        build_xyz_to_rgb(dst),
        adaptation_matrix(adaptation, src.white, dst.white),
        build_rgb_to_xyz(src),
    ])


@handle_shapes
def xyz_to_xyy(xyz: ArrayFloat, black_white: Chromaticity = D65) -> ArrayFloat:
    """
    CIE XYZ -> CIE xyY.

    Black (X + Y + Z = 0) has no chromaticity; it is reported at
    ``black_white`` with Y = 0 (Lindbloom convention).
    """
    out = np.empty_like(xyz)
    total = xyz.sum(axis=1)
    black = total == 0.0
    safe = np.where(black, 1.0, total)
    out[:, 0] = np.where(black, black_white.x, xyz[:, 0] / safe)
    out[:, 1] = np.where(black, black_white.y, xyz[:, 1] / safe)
    out[:, 2] = xyz[:, 1]
    return out


@handle_shapes
def xyy_to_xyz(xyy: ArrayFloat) -> ArrayFloat:
    """CIE xyY -> CIE XYZ.  Rows with y = 0 map to black."""
    out = np.zeros_like(xyy)
    x, y, Y = xyy[:, 0], xyy[:, 1], xyy[:, 2]
    valid = y != 0.0
    safe_y = np.where(valid, y, 1.0)
    out[:, 0] = np.where(valid, x * Y / safe_y, 0.0)
    out[:, 1] = np.where(valid, Y, 0.0)
    out[:, 2] = np.where(valid, (1.0 - x - y) * Y / safe_y, 0.0)
    return out


# =============================================================================
# OKLAB
# =============================================================================

# XYZ (D65) -> linear LMS, and cone response -> Lab (Ottosson 2020).
OKLAB_M1: Final[Matrix3] = Matrix3([
    [0.8189330101, 0.3618667424, -0.1288597137],
    [0.0329845436, 0.9293118715, 0.0361456387],
    [0.0482003018, 0.2643662691, 0.6338517070],
])
OKLAB_M2: Final[Matrix3] = Matrix3([
    [0.2104542553, 0.7936177850, -0.0040720468],
    [1.9779984951, -2.4285922050, 0.4505937099],
    [0.0259040371, 0.7827717662, -0.8086757660],
])
_OKLAB_M1_INV: Final[Matrix3] = invert(OKLAB_M1)
_OKLAB_M2_INV: Final[Matrix3] = invert(OKLAB_M2)


@handle_shapes
def xyz_to_oklab(xyz: ArrayFloat) -> ArrayFloat:
    """
    CIE XYZ (D65) -> OkLab.

    OkLab is defined for a D65 white; adapt other whites first.  The
    cube root is odd-symmetric, so negative cone responses stay finite.
    """
    lms = transform_colors(xyz, OKLAB_M1)
    return transform_colors(np.cbrt(lms), OKLAB_M2)


@handle_shapes
def oklab_to_xyz(oklab: ArrayFloat) -> ArrayFloat:
    """OkLab -> CIE XYZ (D65), the inverse of ``xyz_to_oklab``."""
    lms_prime = transform_colors(oklab, _OKLAB_M2_INV)
    return transform_colors(lms_prime * lms_prime * lms_prime, _OKLAB_M1_INV)


# =============================================================================
# HSV (OpenColorIO fixed function)
# =============================================================================

# Saturation ceiling applied before HSV -> RGB.
HSV_MAX_SATURATION: Final[float] = 1.999


@njit(cache=True)
def _rgb_to_hsv_kernel(rgb: ArrayFloat) -> ArrayFloat:
    n = rgb.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        red = rgb[i, 0]
        grn = rgb[i, 1]
        blu = rgb[i, 2]
        rgb_min = min(red, min(grn, blu))
        rgb_max = max(red, max(grn, blu))
        delta = rgb_max - rgb_min

        val = rgb_max
        sat = 0.0
        hue = 0.0
        if delta != 0.0:
            if rgb_max != 0.0:
                sat = delta / rgb_max
            if red == rgb_max:
                hue = (grn - blu) / delta
            elif grn == rgb_max:
                hue = 2.0 + (blu - red) / delta
            else:
                hue = 4.0 + (red - grn) / delta
            if hue < 0.0:
                hue += 6.0
            hue *= 1.0 / 6.0

        # Extended range: negative channels.
        if rgb_min < 0.0:
            val += rgb_min
        if -rgb_min > rgb_max:
            sat = (rgb_max - rgb_min) / -rgb_min

        out[i, 0] = hue
        out[i, 1] = sat
        out[i, 2] = val
    return out


@njit(cache=True)
def _hsv_to_rgb_kernel(hsv: ArrayFloat, max_sat: float) -> ArrayFloat:
    n = hsv.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        hue = (hsv[i, 0] - np.floor(hsv[i, 0])) * 6.0
        sat = min(max(hsv[i, 1], 0.0), max_sat)
        val = hsv[i, 2]

        red = min(max(abs(hue - 3.0) - 1.0, 0.0), 1.0)
        grn = min(max(2.0 - abs(hue - 2.0), 0.0), 1.0)
        blu = min(max(2.0 - abs(hue - 4.0), 0.0), 1.0)

        rgb_max = val
        rgb_min = val * (1.0 - sat)
        if sat > 1.0:
            rgb_min = val * (1.0 - sat) / (2.0 - sat)
            rgb_max = val - rgb_min
        if val < 0.0:
            rgb_min = val / (2.0 - sat)
            rgb_max = val - rgb_min
        delta = rgb_max - rgb_min

        out[i, 0] = red * delta + rgb_min
        out[i, 1] = grn * delta + rgb_min
        out[i, 2] = blu * delta + rgb_min
    return out


@handle_shapes
def rgb_to_hsv(rgb: ArrayFloat) -> ArrayFloat:
    """
    RGB -> HSV with OpenColorIO's extended-range behaviour.

    H is in [0, 1), S in [0, 2) with values above 1 marking colours
    outside the RGB gamut (negative channels), and V is unbounded.
    """
    return _rgb_to_hsv_kernel(rgb)


@handle_shapes
def hsv_to_rgb(hsv: ArrayFloat) -> ArrayFloat:
    """
    HSV -> RGB, the inverse of ``rgb_to_hsv``.

    H wraps around [0, 1); S is clamped to [0, HSV_MAX_SATURATION].
    """
    return _hsv_to_rgb_kernel(hsv, HSV_MAX_SATURATION)


# =============================================================================
# uvY (CIE 1976 u'v' with linear Y)
# =============================================================================

@handle_shapes
def xyz_to_uvy(xyz: ArrayFloat) -> ArrayFloat:
    """CIE XYZ -> u'v'Y.  A zero denominator X + 15Y + 3Z gives u' = v' = 0."""
    X, Y, Z = xyz[:, 0], xyz[:, 1], xyz[:, 2]
    denom = X + 15.0 * Y + 3.0 * Z
    valid = denom != 0.0
    d = np.where(valid, 1.0 / np.where(valid, denom, 1.0), 0.0)

    out = np.empty_like(xyz)
    out[:, 0] = 4.0 * X * d
    out[:, 1] = 9.0 * Y * d
    out[:, 2] = Y
    return out


@handle_shapes
def uvy_to_xyz(uvy: ArrayFloat) -> ArrayFloat:
    """u'v'Y -> CIE XYZ.  Rows with v' = 0 get X = Z = 0."""
    u, v, Y = uvy[:, 0], uvy[:, 1], uvy[:, 2]
    valid = v != 0.0
    d = np.where(valid, 1.0 / np.where(valid, v, 1.0), 0.0)

    out = np.empty_like(uvy)
    out[:, 0] = (9.0 / 4.0) * Y * u * d
    out[:, 1] = Y
    out[:, 2] = (3.0 / 4.0) * Y * (4.0 - u - (20.0 / 3.0) * v) * d
    return out
