# -*- coding: utf-8 -*-
"""Tests for tint_chroma and tint_colorspace: RGB <-> XYZ matrices and colour models."""

import numpy as np
import pytest

from tint_adaptation import BRADFORD
from tint_chroma import (
    ACES_AP0,
    COLOR_SPACES,
    D50,
    D65,
    REC709,
    Chromaticity,
    RGBPrimaries,
)
from tint_colorspace import (
    build_rgb_to_xyz,
    build_xyz_to_rgb,
    hsv_to_rgb,
    oklab_to_xyz,
    primaries_matrix,
    rgb_to_hsv,
    rgb_to_rgb_matrix,
    uvy_to_xyz,
    xyy_to_xyz,
    xyz_to_oklab,
    xyz_to_uvy,
    xyz_to_xyy,
)
from tint_errors import InvalidParameterError, SingularMatrixError, SingularPrimariesError
from tint_matrix import IDENTITY, invert, multiply

SEED = 7

ALL_SPACES = sorted(COLOR_SPACES.items())


# --- Chromaticity value type ---

def test_chromaticity_z_and_xyz():
    c = Chromaticity(0.3127, 0.3290)
    assert c.z == pytest.approx(1.0 - 0.3127 - 0.3290)
    xyz = c.to_xyz(2.0)
    assert xyz[1] == 2.0
    assert xyz[0] == pytest.approx(0.3127 * 2.0 / 0.3290)
    assert tuple(c) == (0.3127, 0.3290)


def test_is_physical():
    assert D65.is_physical()
    assert not Chromaticity(0.0001, -0.077).is_physical()
    assert not Chromaticity(0.7, 0.4).is_physical()


def test_with_white_replaces_only_white():
    p = REC709.with_white(D50)
    assert p.white == D50
    assert p.primaries == REC709.primaries


# --- build_rgb_to_xyz ---

@pytest.mark.parametrize("name, space", ALL_SPACES)
def test_white_maps_to_white_point_with_unit_luminance(name, space):
    m = build_rgb_to_xyz(space)
    xyz = m @ [1.0, 1.0, 1.0]
    assert abs(xyz[1] - 1.0) < 1e-10
    np.testing.assert_allclose(xyz, space.white.to_xyz(1.0), atol=1e-10)


@pytest.mark.parametrize("name, space", ALL_SPACES)
def test_rgb_xyz_round_trip(name, space):
    rng = np.random.default_rng(SEED)
    m = build_rgb_to_xyz(space)
    m_inv = invert(m)
    for v in rng.uniform(-0.5, 1.5, size=(20, 3)):
        np.testing.assert_allclose(m_inv @ (m @ v), v, atol=1e-9)


@pytest.mark.parametrize("name, space", ALL_SPACES)
def test_xyz_to_rgb_is_inverse(name, space):
    product = multiply(build_xyz_to_rgb(space), build_rgb_to_xyz(space))
    assert product.allclose(IDENTITY, atol=1e-9)


def test_rec709_matrix():
    expected = [
        [0.4123908, 0.3575843, 0.1804808],
        [0.2126390, 0.7151687, 0.0721923],
        [0.0193308, 0.1191948, 0.9505322],
    ]
    assert build_rgb_to_xyz(REC709).allclose(expected, atol=1e-6)


def test_aces_ap0_matrix():
    expected = [
        [0.9525523959, 0.0000000000, 0.0000936786],
        [0.3439664498, 0.7281660966, -0.0721325464],
        [0.0000000000, 0.0000000000, 1.0088251844],
    ]
    assert build_rgb_to_xyz(ACES_AP0).allclose(expected, atol=1e-9)


def test_rec709_to_ap0_without_adaptation():
    expected = [
        [0.4329305201, 0.3753843595, 0.1893780579],
        [0.0894131371, 0.8165330211, 0.1030219928],
        [0.0191617131, 0.1181520660, 0.9422169143],
    ]
    assert rgb_to_rgb_matrix(REC709, ACES_AP0).allclose(expected, atol=1e-9)


def test_rgb_to_rgb_with_adaptation_keeps_white():
    m = rgb_to_rgb_matrix(REC709, ACES_AP0, adaptation=BRADFORD)
    np.testing.assert_allclose(m @ [1.0, 1.0, 1.0], [1.0, 1.0, 1.0], atol=1e-9)


def test_rgb_to_rgb_same_space_is_identity():
    assert rgb_to_rgb_matrix(REC709, REC709).allclose(IDENTITY, atol=1e-12)


# --- Degenerate input ---

def test_collinear_primaries_raise():
    p = RGBPrimaries(
        Chromaticity(0.2, 0.2), Chromaticity(0.3, 0.3), Chromaticity(0.4, 0.4), D65,
    )
    with pytest.raises(SingularPrimariesError):
        build_rgb_to_xyz(p)


def test_coincident_primaries_raise():
    red = Chromaticity(0.64, 0.33)
    p = RGBPrimaries(red, red, Chromaticity(0.15, 0.06), D65)
    with pytest.raises(SingularMatrixError):
        build_rgb_to_xyz(p)


def test_primary_with_zero_y_raises():
    p = RGBPrimaries(Chromaticity(0.64, 0.0), REC709.green, REC709.blue, D65)
    with pytest.raises(SingularPrimariesError):
        primaries_matrix(p)


@pytest.mark.parametrize("white", [Chromaticity(0.3, 0.0), Chromaticity(0.3, -0.2)])
def test_non_physical_white_raises(white):
    with pytest.raises(InvalidParameterError):
        build_rgb_to_xyz(REC709.with_white(white))


# --- xyY ---

def test_xyz_to_xyy_of_white():
    np.testing.assert_allclose(
        xyz_to_xyy(D65.to_xyz(1.0)), [0.3127, 0.3290, 1.0], atol=1e-12
    )


def test_black_takes_reference_chromaticity():
    np.testing.assert_array_equal(xyz_to_xyy([0.0, 0.0, 0.0]), [0.3127, 0.3290, 0.0])
    np.testing.assert_array_equal(
        xyz_to_xyy([0.0, 0.0, 0.0], black_white=D50), [0.3457, 0.3585, 0.0]
    )


def test_xyy_round_trip_batch():
    rng = np.random.default_rng(SEED)
    xyz = rng.uniform(0.05, 1.0, size=(32, 3))
    np.testing.assert_allclose(xyy_to_xyz(xyz_to_xyy(xyz)), xyz, atol=1e-12)


def test_xyy_with_zero_y_is_black():
    np.testing.assert_array_equal(xyy_to_xyz([0.3, 0.0, 0.5]), [0.0, 0.0, 0.0])


# --- u'v'Y ---

def test_xyz_to_uvy_of_white():
    np.testing.assert_allclose(
        xyz_to_uvy(D65.to_xyz(1.0)), [0.19783, 0.46833, 1.0], atol=1e-5
    )


def test_uvy_degenerate_denominators():
    np.testing.assert_array_equal(xyz_to_uvy([0.0, 0.0, 0.0]), [0.0, 0.0, 0.0])
    np.testing.assert_array_equal(uvy_to_xyz([0.2, 0.0, 0.5]), [0.0, 0.5, 0.0])


def test_uvy_round_trip_on_integer_grid():
    xyz = np.mgrid[-20:21, -20:21, -20:21].reshape(3, -1).T.astype(np.float64)
    uvy = xyz_to_uvy(xyz)
    keep = uvy[:, 1] != 0.0
    np.testing.assert_allclose(uvy_to_xyz(uvy)[keep], xyz[keep], atol=1e-6)


# --- OkLab ---

OKLAB_REFERENCE = [
    ([0.95, 1.0, 1.089], [1.0, 0.0, 0.0]),
    ([1.0, 0.0, 0.0], [0.45, 1.236, -0.019]),
    ([0.0, 1.0, 0.0], [0.922, -0.671, 0.263]),
    ([0.0, 0.0, 1.0], [0.153, -1.415, -0.449]),
]


@pytest.mark.parametrize("xyz, lab", OKLAB_REFERENCE)
def test_xyz_to_oklab_reference_values(xyz, lab):
    np.testing.assert_allclose(xyz_to_oklab(xyz), lab, atol=0.002)


@pytest.mark.parametrize("xyz, lab", OKLAB_REFERENCE)
def test_oklab_to_xyz_reference_values(xyz, lab):
    np.testing.assert_allclose(oklab_to_xyz(lab), xyz, atol=0.002)


def test_oklab_round_trip_keeps_shape():
    rng = np.random.default_rng(SEED)
    xyz = rng.uniform(-0.1, 1.2, size=(4, 5, 3))
    lab = xyz_to_oklab(xyz)
    assert lab.shape == (4, 5, 3)
    np.testing.assert_allclose(oklab_to_xyz(lab), xyz, atol=1e-9)


# --- HSV ---

def test_rgb_to_hsv_known_values():
    rgb = np.array([
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.5, 0.5, 0.5],
        [2.0, -1.0, 0.0],
    ])
    expected = np.array([
        [0.0, 1.0, 1.0],
        [1.0 / 3.0, 1.0, 1.0],
        [0.0, 0.0, 0.5],
        [17.0 / 18.0, 1.5, 1.0],
    ])
    np.testing.assert_allclose(rgb_to_hsv(rgb), expected, atol=1e-12)


def test_hsv_to_rgb_wraps_hue_and_clamps_saturation():
    np.testing.assert_allclose(hsv_to_rgb([1.25, 1.0, 1.0]), [0.5, 1.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(hsv_to_rgb([-0.75, 1.0, 1.0]), [0.5, 1.0, 0.0], atol=1e-12)
    np.testing.assert_array_equal(hsv_to_rgb([0.3, -2.0, 0.4]), [0.4, 0.4, 0.4])
    assert np.all(np.isfinite(hsv_to_rgb([0.1, 5.0, 1.0])))


def test_hsv_round_trip_on_integer_grid():
    rgb = np.mgrid[-20:21, -20:21, -20:21].reshape(3, -1).T.astype(np.float64)
    hsv = rgb_to_hsv(rgb)
    keep = hsv[:, 2] != 0.0
    np.testing.assert_allclose(hsv_to_rgb(hsv)[keep], rgb[keep], atol=1e-6)
