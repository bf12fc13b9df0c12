from __future__ import annotations

import math

import pytest

from pylbs._constants import EARTH_RADIUS_M
from pylbs.geo import haversine


def test_haversine_same_point_is_zero() -> None:
    assert haversine(55.7, 37.6, 55.7, 37.6) == 0.0


def test_haversine_one_degree_of_latitude() -> None:
    expected = EARTH_RADIUS_M * math.pi / 180.0
    assert haversine(0.0, 0.0, 1.0, 0.0) == pytest.approx(expected, rel=1e-12)


def test_haversine_antipodal_points_clamped() -> None:
    assert haversine(0.0, 0.0, 0.0, 180.0) == pytest.approx(math.pi * EARTH_RADIUS_M, rel=1e-12)
    assert haversine(90.0, 0.0, -90.0, 0.0) == pytest.approx(math.pi * EARTH_RADIUS_M, rel=1e-12)


def test_haversine_is_symmetric() -> None:
    forward = haversine(55.75, 37.61, 59.93, 30.31)
    backward = haversine(59.93, 30.31, 55.75, 37.61)
    assert forward == pytest.approx(backward, rel=1e-12)
    # Moscow - Saint Petersburg is roughly 635 km.
    assert 600_000 < forward < 700_000
