# -*- coding: utf-8 -*-
"""
Tint: Matrices, gamut mapping and lookup tables for colour pipelines
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_adaptation.py — von Kries style chromatic adaptation (CAT).

Derivation (column vectors):

    ρ_src = M · XYZ(src_white)        (cone / "sharpened" response)
    ρ_dst = M · XYZ(dst_white)
    D     = diag(ρ_dst / ρ_src)
    CAT   = M⁻¹ · D · M

White points are converted to XYZ with Y = 1.  The resulting matrix is
only valid on CIE 1931 XYZ data; to adapt RGB, sandwich it between the
colour-space matrices with ``compose``:

    compose([xyz_to_rgb(dst), CAT, rgb_to_xyz(src)])
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Dict, Final, Tuple, Union

import numpy as np

from tint_chroma import Chromaticity
from tint_errors import AdaptationDivideByZeroError, InvalidParameterError
from tint_matrix import (
    ArrayFloat,
    IDENTITY,
    Matrix3,
    _transform_rows_kernel,
    compose,
    handle_shapes,
    invert,
    transform_vector,
)

__all__ = [
    "AdaptationModel",
    "XYZ_SCALING",
    "VON_KRIES",
    "BRADFORD",
    "CAT02",
    "ADAPTATION_MODELS",
    "ZERO_RESPONSE_EPSILON",
    "adaptation_matrix",
    "adapt",
]

WhiteLike = Union[Chromaticity, Tuple[float, float]]

# Cone responses with magnitude below this count as zero.
ZERO_RESPONSE_EPSILON: Final[float] = 1e-12


@dataclass(slots=True, frozen=True)
class AdaptationModel:
    """A named XYZ -> cone-response matrix; treat instances as constants."""
    name: str
    matrix: Matrix3


# Scaling directly in XYZ.  Generally a poor choice, kept for reference.
XYZ_SCALING: Final[AdaptationModel] = AdaptationModel("XYZ Scaling", IDENTITY)

# Hunt-Pointer-Estevez LMS
VON_KRIES: Final[AdaptationModel] = AdaptationModel("Von Kries", Matrix3([
    [ 0.38971, 0.68898, -0.07868],
    [-0.22981, 1.18340,  0.04641],
    [ 0.00000, 0.00000,  1.00000],
]))

BRADFORD: Final[AdaptationModel] = AdaptationModel("Bradford", Matrix3([
    [ 0.8951000,  0.2664000, -0.1614000],
    [-0.7502000,  1.7135000,  0.0367000],
    [ 0.0389000, -0.0685000,  1.0296000],
]))

# CIECAM02
CAT02: Final[AdaptationModel] = AdaptationModel("CAT02", Matrix3([
    [ 0.7328, 0.4296, -0.1624],
    [-0.7036, 1.6975,  0.0061],
    [ 0.0030, 0.0136,  0.9834],
]))

ADAPTATION_MODELS: Final[Dict[str, AdaptationModel]] = {
    m.name: m for m in (XYZ_SCALING, VON_KRIES, BRADFORD, CAT02)
}


def _as_chromaticity(white: WhiteLike) -> Chromaticity:
    if isinstance(white, Chromaticity):
        return white
    x, y = white
    return Chromaticity(float(x), float(y))


def _white_xyz(white: Chromaticity, label: str) -> ArrayFloat:
    if white.y == 0.0 or not (np.isfinite(white.x) and np.isfinite(white.y)):
        raise InvalidParameterError(
            f"adaptation_matrix: {label} white point {white} has no finite XYZ (y must be non-zero)"
        )
    return white.to_xyz(1.0)


@functools.lru_cache(maxsize=64)
def _get_cached_adaptation_matrix(
    model: AdaptationModel,
    src_white: Chromaticity,
    dst_white: Chromaticity,
) -> Matrix3:
    """Cached worker for ``adaptation_matrix``."""
    rho_src = transform_vector(model.matrix, _white_xyz(src_white, "source"))
    rho_dst = transform_vector(model.matrix, _white_xyz(dst_white, "destination"))

    zero = np.abs(rho_src) < ZERO_RESPONSE_EPSILON
    if np.any(zero):
        channels = ", ".join(str(i) for i in np.flatnonzero(zero))
        raise AdaptationDivideByZeroError(
            f"adaptation_matrix({model.name}): source white {src_white} has a zero "
            f"cone response in channel(s) {channels}"
        )

    gains = Matrix3.diagonal(rho_dst / rho_src)
    return compose([invert(model.matrix), gains, model.matrix])


def adaptation_matrix(
    model: AdaptationModel,
    src_white: WhiteLike,
    dst_white: WhiteLike,
) -> Matrix3:
    """
    XYZ -> XYZ matrix moving colours from ``src_white`` to ``dst_white``.

    A point with the chromaticity of ``src_white`` (at Y = 1) lands on
    ``dst_white``.  Identical white points return ``IDENTITY`` exactly.

    Args:
        model: Cone-response model (``BRADFORD``, ``CAT02``, ...).
        src_white: Source white chromaticity.
        dst_white: Destination white chromaticity.

    Raises:
        AdaptationDivideByZeroError: If a source cone response is zero.
        InvalidParameterError: If a white point has y = 0.
        SingularMatrixError: If the model matrix is not invertible.
    """
    src = _as_chromaticity(src_white)
    dst = _as_chromaticity(dst_white)
    if src == dst:
        _white_xyz(src, "source")
        return IDENTITY
    return _get_cached_adaptation_matrix(model, src, dst)


@handle_shapes
def adapt(
    xyz: ArrayFloat,
    model: AdaptationModel,
    src_white: WhiteLike,
    dst_white: WhiteLike,
) -> ArrayFloat:
    """
    Adapt XYZ colour(s) from ``src_white`` to ``dst_white``.

    Args:
        xyz: XYZ colours, shape (3,), (N, 3) or (..., 3).
        model: Cone-response model.
        src_white: Source white chromaticity.
        dst_white: Destination white chromaticity.

    Returns:
        Adapted XYZ colours with the input's shape.
    """
    m = adaptation_matrix(model, src_white, dst_white)
    return _transform_rows_kernel(xyz, np.asarray(m))
