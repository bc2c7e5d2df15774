"""
Unit tests for threshold classification and mask combination.
"""

import numpy as np
import pytest

from oyster_suitability.alignment import AlignmentError
from oyster_suitability.classify import (OYSTER, SpeciesCriteria, classify_range,
                                         combine, suitability)


def test_oyster_defaults():
    assert OYSTER.sst_range == (3, 19)
    assert OYSTER.depth_range == (-360, 0)


def test_temperature_interval_is_closed(make_grid):
    sst = make_grid([[3.0, 19.0, 2.999, 19.001]])
    out = classify_range(sst, *OYSTER.sst_range)
    np.testing.assert_array_equal(out.data, [[1.0, 1.0, 0.0, 0.0]])


def test_depth_interval_is_closed(make_grid):
    depth = make_grid([[0.0, -360.0, 0.001, -360.001]])
    out = classify_range(depth, *OYSTER.depth_range)
    np.testing.assert_array_equal(out.data, [[1.0, 1.0, 0.0, 0.0]])


def test_missing_input_stays_missing(make_grid):
    out = classify_range(make_grid([[np.nan, 10.0]]), 3, 19)
    assert np.isnan(out.data[0, 0])
    assert out.data[0, 1] == 1.0


def test_combine_is_logical_and(make_grid):
    sst_ok = make_grid([[1.0, 1.0, 0.0, 0.0]])
    depth_ok = make_grid([[1.0, 0.0, 1.0, 0.0]])

    out = combine(sst_ok, depth_ok)

    assert out.data[0, 0] == 1.0
    assert np.isnan(out.data[0, 1:]).all()


def test_combine_missing_in_either_input(make_grid):
    out = combine(make_grid([[np.nan, 1.0]]), make_grid([[1.0, np.nan]]))
    assert np.isnan(out.data).all()


def test_combine_requires_aligned_grids(make_grid):
    with pytest.raises(AlignmentError):
        combine(make_grid([[1.0, 1.0]]), make_grid([[1.0, 1.0]], left=500.0))


def test_suitability_end_to_end(make_grid):
    sst = make_grid([[10.0, 10.0, 25.0], [np.nan, 3.0, 19.0]])
    depth = make_grid([[-50.0, -400.0, -50.0], [-50.0, 0.0, -360.0]])

    out = suitability(sst, depth)

    expected = np.array([[1.0, np.nan, np.nan], [np.nan, 1.0, 1.0]])
    np.testing.assert_array_equal(out.data, expected)
    assert out.valid_count() == 3


def test_custom_criteria(make_grid):
    warm = SpeciesCriteria(name="Warm", sst_range=(20, 30), depth_range=(-100, 0))
    out = suitability(make_grid([[25.0, 10.0]]), make_grid([[-10.0, -10.0]]), warm)
    assert out.data[0, 0] == 1.0
    assert np.isnan(out.data[0, 1])


def test_criteria_rejects_inverted_range():
    with pytest.raises(ValueError):
        SpeciesCriteria(name="Bad", sst_range=(19, 3), depth_range=(-360, 0))
