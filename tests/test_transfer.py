# -*- coding: utf-8 -*-
"""Tests for tint_transfer: encode/decode pairs."""

import numpy as np
import pytest

from tint_lut import Lut1D
from tint_transfer import (
    PQ_LUMINANCE_MAX,
    TRANSFER_FUNCTIONS,
    rec709_from_linear,
    rec2100_hlg_from_linear,
    rec2100_hlg_to_linear,
    rec2100_pq_from_linear,
    rec2100_pq_to_linear,
    srgb_from_linear,
    srgb_to_linear,
)

UNIT_CURVES = ["sRGB", "Rec.709", "Rec.2020", "Rec.2100 HLG"]


def test_registry_keys():
    assert set(TRANSFER_FUNCTIONS) == {"sRGB", "Rec.709", "Rec.2020", "Rec.2100 PQ", "Rec.2100 HLG"}
    for name, tf in TRANSFER_FUNCTIONS.items():
        assert tf.name == name


@pytest.mark.parametrize("name", UNIT_CURVES)
def test_unit_curves_fix_the_end_points(name):
    tf = TRANSFER_FUNCTIONS[name]
    assert tf.from_linear(0.0) == pytest.approx(0.0, abs=1e-12)
    assert tf.from_linear(1.0) == pytest.approx(1.0, abs=1e-6)
    assert tf.to_linear(1.0) == pytest.approx(1.0, abs=1e-6)


@pytest.mark.parametrize("name", UNIT_CURVES)
def test_unit_curves_round_trip(name):
    tf = TRANSFER_FUNCTIONS[name]
    x = np.linspace(0.0, 1.0, 1001)
    np.testing.assert_allclose(tf.to_linear(tf.from_linear(x)), x, atol=1e-6)


def test_pq_end_points_and_round_trip():
    assert rec2100_pq_from_linear(PQ_LUMINANCE_MAX) == pytest.approx(1.0, abs=1e-12)
    assert rec2100_pq_to_linear(1.0) == pytest.approx(PQ_LUMINANCE_MAX)
    assert rec2100_pq_from_linear(100.0) == pytest.approx(0.5081, abs=1e-4)
    lum = np.geomspace(0.01, PQ_LUMINANCE_MAX, 200)
    np.testing.assert_allclose(rec2100_pq_to_linear(rec2100_pq_from_linear(lum)), lum, rtol=1e-7)


def test_pq_is_odd_symmetric():
    x = np.array([0.5, 12.0, 700.0])
    np.testing.assert_array_equal(rec2100_pq_from_linear(-x), -rec2100_pq_from_linear(x))
    np.testing.assert_array_equal(rec2100_pq_to_linear(-0.3), -rec2100_pq_to_linear(0.3))


def test_hlg_clamps_negative_input():
    assert rec2100_hlg_from_linear(-0.5) == 0.0
    assert rec2100_hlg_from_linear(1.0 / 12.0) == pytest.approx(0.5)
    assert rec2100_hlg_to_linear(0.5) == pytest.approx(1.0 / 12.0)


def test_curves_are_continuous_at_the_cutoffs():
    eps = 1e-12
    assert srgb_from_linear(0.0031308 - eps) == pytest.approx(srgb_from_linear(0.0031308 + eps), abs=1e-6)
    assert srgb_to_linear(0.04045 - eps) == pytest.approx(srgb_to_linear(0.04045 + eps), abs=1e-6)
    b = 0.01805396851080
    assert rec709_from_linear(b - eps) == pytest.approx(rec709_from_linear(b + eps), abs=1e-7)
    knee = 1.0 / 12.0
    assert rec2100_hlg_from_linear(knee - eps) == pytest.approx(rec2100_hlg_from_linear(knee + eps), abs=1e-9)


def test_scalar_in_scalar_out():
    out = srgb_from_linear(0.5)
    assert isinstance(out, float)
    assert np.ndim(out) == 0
    assert srgb_from_linear(np.zeros((2, 3))).shape == (2, 3)


def test_negative_values_stay_finite():
    x = np.array([-1.0, -0.01])
    assert np.all(np.isfinite(srgb_from_linear(x)))
    assert np.all(np.isfinite(rec709_from_linear(x)))


def test_curves_tabulate_into_luts():
    lut = Lut1D.from_fn(srgb_from_linear, 1024)
    assert lut.channels == 1
    assert lut.is_monotonic()
    assert lut.look_up(0.18) == pytest.approx(float(srgb_from_linear(0.18)), abs=1e-5)
