# -*- coding: utf-8 -*-
"""Tests for tint_adaptation: von Kries style chromatic adaptation matrices."""

import numpy as np
import pytest

from tint_adaptation import (
    ADAPTATION_MODELS,
    BRADFORD,
    CAT02,
    VON_KRIES,
    XYZ_SCALING,
    adapt,
    adaptation_matrix,
)
from tint_chroma import D50, D65, E, REC709, WHITE_POINTS, Chromaticity
from tint_colorspace import build_rgb_to_xyz
from tint_errors import AdaptationDivideByZeroError, InvalidParameterError
from tint_matrix import IDENTITY, compose, transform_colors

MODELS = list(ADAPTATION_MODELS.values())
MODEL_IDS = list(ADAPTATION_MODELS.keys())


@pytest.mark.parametrize("model", MODELS, ids=MODEL_IDS)
@pytest.mark.parametrize("white", list(WHITE_POINTS.values()), ids=list(WHITE_POINTS.keys()))
def test_same_white_is_identity(model, white):
    assert adaptation_matrix(model, white, white) == IDENTITY


@pytest.mark.parametrize("model", MODELS, ids=MODEL_IDS)
def test_source_white_lands_on_destination_white(model):
    m = adaptation_matrix(model, D65, D50)
    np.testing.assert_allclose(m @ D65.to_xyz(1.0), D50.to_xyz(1.0), atol=1e-10)


@pytest.mark.parametrize("model", [XYZ_SCALING, VON_KRIES, BRADFORD], ids=["xyz", "hpe", "bradford"])
def test_rec709_white_adapted_to_e_is_unit(model):
    to_xyz = build_rgb_to_xyz(REC709)
    m = compose([adaptation_matrix(model, REC709.white, E), to_xyz])
    np.testing.assert_allclose(m @ [1.0, 1.0, 1.0], [1.0, 1.0, 1.0], atol=1e-9)


def test_bradford_d65_to_d50_reference_values():
    expected = [
        [ 1.0478112,  0.0228866, -0.0501270],
        [ 0.0295424,  0.9904844, -0.0170491],
        [-0.0092345,  0.0150436,  0.7521316],
    ]
    assert adaptation_matrix(BRADFORD, D65, D50).allclose(expected, atol=1e-3)


def test_round_trip_between_whites():
    forward = adaptation_matrix(CAT02, D65, D50)
    backward = adaptation_matrix(CAT02, D50, D65)
    assert compose([backward, forward]).allclose(IDENTITY, atol=1e-12)


def test_tuple_white_points_are_accepted():
    a = adaptation_matrix(BRADFORD, (0.3127, 0.3290), (0.3457, 0.3585))
    assert a == adaptation_matrix(BRADFORD, D65, D50)


def test_zero_cone_response_raises():
    # With plain XYZ scaling the cone response of a white with x = 0 has X = 0.
    with pytest.raises(AdaptationDivideByZeroError) as info:
        adaptation_matrix(XYZ_SCALING, Chromaticity(0.0, 0.5), D65)
    assert isinstance(info.value, ZeroDivisionError)


@pytest.mark.parametrize("white", [Chromaticity(0.3, 0.0), Chromaticity(np.inf, 0.3)])
def test_white_without_xyz_raises(white):
    with pytest.raises(InvalidParameterError):
        adaptation_matrix(BRADFORD, white, D65)
    with pytest.raises(InvalidParameterError):
        adaptation_matrix(BRADFORD, white, white)


def test_adapt_matches_matrix_application():
    rng = np.random.default_rng(11)
    xyz = rng.uniform(0.0, 1.0, size=(40, 3))
    m = adaptation_matrix(BRADFORD, D65, D50)
    np.testing.assert_array_equal(adapt(xyz, BRADFORD, D65, D50), transform_colors(xyz, m))
    assert adapt(xyz[0], BRADFORD, D65, D50).shape == (3,)
