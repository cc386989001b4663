# -*- coding: utf-8 -*-
"""
Tint: Matrices, gamut mapping and lookup tables for colour pipelines
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_chroma.py — CIE 1931 chromaticity value types and reference data.

The named primaries and white points below are plain immutable values.
Nothing in Tint reads them implicitly: callers pass them into the
builders (``build_rgb_to_xyz(REC709)``) like any other argument.

``Chromaticity`` does not validate itself.  Several published colour
spaces use imaginary primaries (ACES AP0 blue has y < 0), so the check
``0 < x, 0 < y, x + y <= 1`` is offered as ``is_physical()`` and left to
the consumer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Final, Iterator, Tuple

import numpy as np

__all__ = [
    "Chromaticity",
    "RGBPrimaries",

    # --- White points ---
    "D50",
    "D55",
    "D65",
    "D75",
    "E",
    "DCI_WHITE",
    "ACES_WHITE",
    "WHITE_POINTS",

    # --- Primaries ---
    "REC709",
    "SRGB",
    "REC2020",
    "DCI_P3",
    "DISPLAY_P3",
    "ACES_AP0",
    "ACES_AP1",
    "ADOBE_RGB",
    "ADOBE_WIDE_GAMUT_RGB",
    "PROPHOTO",
    "COLOR_SPACES",
]


@dataclass(slots=True, frozen=True)
class Chromaticity:
    """CIE 1931 (x, y) chromaticity; z = 1 - x - y is implied."""
    x: float
    y: float

    @property
    def z(self) -> float:
        return 1.0 - self.x - self.y

    def is_physical(self) -> bool:
        """True when 0 < x, 0 < y and x + y <= 1."""
        return self.x > 0.0 and self.y > 0.0 and self.x + self.y <= 1.0

    def to_xyz(self, Y: float = 1.0) -> np.ndarray:
        """
        Tristimulus XYZ with the given luminance.

        X = x·Y/y,  Z = (1 - x - y)·Y/y.  Division by y = 0 follows IEEE
        rules; builders check for it before calling.
        """
        return np.array(
            [self.x * Y / self.y, Y, (1.0 - self.x - self.y) * Y / self.y],
            dtype=np.float64,
        )

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y


@dataclass(slots=True, frozen=True)
class RGBPrimaries:
    """
    Red, green and blue primaries plus the white point RGB (1, 1, 1) maps to.

    Together they fix the RGB -> XYZ matrix up to the white luminance,
    which Tint normalises to Y = 1.
    """
    red:   Chromaticity
    green: Chromaticity
    blue:  Chromaticity
    white: Chromaticity

    @property
    def primaries(self) -> Tuple[Chromaticity, Chromaticity, Chromaticity]:
        return (self.red, self.green, self.blue)

    def with_white(self, white: Chromaticity) -> "RGBPrimaries":
        """Same primaries, different white point."""
        return RGBPrimaries(self.red, self.green, self.blue, white)


def _c(x: float, y: float) -> Chromaticity:
    return Chromaticity(x, y)


# ---------------------------------------------------------------------------
# White points (CIE 1931 2° observer)
# ---------------------------------------------------------------------------
D50: Final[Chromaticity] = _c(0.3457, 0.3585)
D55: Final[Chromaticity] = _c(0.3324, 0.3474)
D65: Final[Chromaticity] = _c(0.3127, 0.3290)
D75: Final[Chromaticity] = _c(0.2990, 0.3149)
E: Final[Chromaticity] = _c(1.0 / 3.0, 1.0 / 3.0)
DCI_WHITE: Final[Chromaticity] = _c(0.314, 0.351)
ACES_WHITE: Final[Chromaticity] = _c(0.32168, 0.33767)

WHITE_POINTS: Final[Dict[str, Chromaticity]] = {
    "D50": D50,
    "D55": D55,
    "D65": D65,
    "D75": D75,
    "E": E,
    "DCI": DCI_WHITE,
    "ACES": ACES_WHITE,
}


# ---------------------------------------------------------------------------
# RGB colour spaces
# ---------------------------------------------------------------------------
# Rec.709 / sRGB
REC709: Final[RGBPrimaries] = RGBPrimaries(
    _c(0.640, 0.330), _c(0.300, 0.600), _c(0.150, 0.060), D65,
)
SRGB: Final[RGBPrimaries] = REC709

REC2020: Final[RGBPrimaries] = RGBPrimaries(
    _c(0.708, 0.292), _c(0.170, 0.797), _c(0.131, 0.046), D65,
)

DCI_P3: Final[RGBPrimaries] = RGBPrimaries(
    _c(0.680, 0.320), _c(0.265, 0.690), _c(0.150, 0.060), DCI_WHITE,
)
DISPLAY_P3: Final[RGBPrimaries] = DCI_P3.with_white(D65)

# ACES2065-1 (note: imaginary blue primary, y < 0)
ACES_AP0: Final[RGBPrimaries] = RGBPrimaries(
    _c(0.73470, 0.26530), _c(0.00000, 1.00000), _c(0.00010, -0.07700), ACES_WHITE,
)
# ACEScg / ACEScc / ACEScct
ACES_AP1: Final[RGBPrimaries] = RGBPrimaries(
    _c(0.713, 0.293), _c(0.165, 0.830), _c(0.128, 0.044), ACES_WHITE,
)

ADOBE_RGB: Final[RGBPrimaries] = RGBPrimaries(
    _c(0.6400, 0.3300), _c(0.2100, 0.7100), _c(0.1500, 0.0600), D65,
)
ADOBE_WIDE_GAMUT_RGB: Final[RGBPrimaries] = RGBPrimaries(
    _c(0.7347, 0.2653), _c(0.1152, 0.8264), _c(0.1566, 0.0177), D50,
)
# Kodak ProPhoto (ROMM RGB)
PROPHOTO: Final[RGBPrimaries] = RGBPrimaries(
    _c(0.734699, 0.265301), _c(0.159597, 0.840403), _c(0.036598, 0.000105),
    _c(0.345704, 0.358540),
)

COLOR_SPACES: Final[Dict[str, RGBPrimaries]] = {
    "Rec.709": REC709,
    "sRGB": SRGB,
    "Rec.2020": REC2020,
    "DCI-P3": DCI_P3,
    "Display P3": DISPLAY_P3,
    "ACES AP0": ACES_AP0,
    "ACES AP1": ACES_AP1,
    "Adobe RGB": ADOBE_RGB,
    "Adobe Wide Gamut RGB": ADOBE_WIDE_GAMUT_RGB,
    "ProPhoto RGB": PROPHOTO,
}
