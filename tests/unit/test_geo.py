"""Unit tests for coordinate quantization and bounding boxes."""

from __future__ import annotations

import math

import pytest

from fuelfinder.core.exceptions import InvalidArgumentError
from fuelfinder.utils.geo import (
    CacheKey,
    Coordinates,
    compute_bounding_box,
    quantize,
)

pytestmark = pytest.mark.unit

ADELAIDE = Coordinates(-34.9285, 138.6007)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (138.600712, 138.60071),
        (138.600715, 138.60072),
        (-34.928505, -34.92851),
        (-34.928504, -34.9285),
        (0.0, 0.0),
        (1.000005, 1.00001),
        (-1.000005, -1.00001),
        (90.0, 90.0),
    ],
)
def test_quantize_rounds_half_away_from_zero(raw: float, expected: float) -> None:
    assert quantize(raw) == expected


@pytest.mark.parametrize("value", [-179.999999, -34.92850449, 0.123456789, 12.5, 138.6007123])
def test_quantize_is_idempotent(value: float) -> None:
    once = quantize(value)
    assert quantize(once) == once


def test_pairs_differing_beyond_fifth_decimal_share_a_key() -> None:
    a = CacheKey.from_coordinates(
        Coordinates(-34.928501, 138.600701), Coordinates(-34.9, 138.5000049)
    )
    b = CacheKey.from_coordinates(
        Coordinates(-34.9285049, 138.6007033), Coordinates(-34.900003, 138.5)
    )

    assert a == b
    assert a == CacheKey(-34.9285, 138.6007, -34.9, 138.5)


def test_pairs_differing_at_fifth_decimal_get_distinct_keys() -> None:
    a = CacheKey.from_coordinates(ADELAIDE, Coordinates(-34.9, 138.5))
    b = CacheKey.from_coordinates(ADELAIDE, Coordinates(-34.90001, 138.5))

    assert a != b


def test_key_is_directional() -> None:
    there = CacheKey.from_coordinates(ADELAIDE, Coordinates(-34.9, 138.5))
    back = CacheKey.from_coordinates(Coordinates(-34.9, 138.5), ADELAIDE)

    assert there != back


@pytest.mark.parametrize(
    "point",
    [
        Coordinates(90.0001, 0),
        Coordinates(-91, 0),
        Coordinates(0, 180.5),
        Coordinates(0, -181),
        Coordinates(math.nan, 0),
        Coordinates(0, math.inf),
    ],
)
def test_validate_rejects_out_of_range(point: Coordinates) -> None:
    with pytest.raises(InvalidArgumentError):
        point.validate()


def test_validate_accepts_boundaries() -> None:
    assert Coordinates(90, 180).validate() == Coordinates(90, 180)
    assert Coordinates(-90, -180).validate() == Coordinates(-90, -180)


def test_bounding_box_at_equator_is_square() -> None:
    box = compute_bounding_box(Coordinates(0, 0), 20)

    lat_delta = box.ne_lat
    lng_delta = box.ne_lng
    assert lat_delta == pytest.approx(lng_delta)
    assert lat_delta == pytest.approx(20 / 6371 * 180 / math.pi)


def test_bounding_box_widens_in_longitude_away_from_equator() -> None:
    box = compute_bounding_box(ADELAIDE, 20)

    lat_delta = box.ne_lat - ADELAIDE.latitude
    lng_delta = box.ne_lng - ADELAIDE.longitude
    assert lat_delta == pytest.approx(0.18, abs=0.005)
    assert lng_delta == pytest.approx(0.217, abs=0.005)
    assert lng_delta > lat_delta


def test_bounding_box_corners_surround_center() -> None:
    box = compute_bounding_box(ADELAIDE, 20)

    assert box.sw_lat < ADELAIDE.latitude < box.ne_lat
    assert box.sw_lng < ADELAIDE.longitude < box.ne_lng
    assert box.ne_lat - ADELAIDE.latitude == pytest.approx(ADELAIDE.latitude - box.sw_lat)
    assert box.ne_lng - ADELAIDE.longitude == pytest.approx(ADELAIDE.longitude - box.sw_lng)


def test_bounding_box_scales_linearly_with_radius() -> None:
    box10 = compute_bounding_box(ADELAIDE, 10)
    box20 = compute_bounding_box(ADELAIDE, 20)

    ratio = (box20.ne_lat - ADELAIDE.latitude) / (box10.ne_lat - ADELAIDE.latitude)
    assert ratio == pytest.approx(2.0)


@pytest.mark.parametrize("radius", [0, -5, math.nan])
def test_bounding_box_rejects_non_positive_radius(radius: float) -> None:
    with pytest.raises(InvalidArgumentError):
        compute_bounding_box(ADELAIDE, radius)


def test_bounding_box_does_not_wrap_antimeridian() -> None:
    box = compute_bounding_box(Coordinates(0, 179.9), 20)

    assert box.ne_lng > 180
    assert box.ne_lng == pytest.approx(179.9 + 0.179864, abs=1e-5)
    assert box.sw_lng < box.ne_lng


@pytest.mark.parametrize(
    "center", [Coordinates(-91.0, 138.6), Coordinates(0.0, 200.0), Coordinates(math.nan, 0.0)]
)
def test_bounding_box_rejects_invalid_center(center: Coordinates) -> None:
    with pytest.raises(InvalidArgumentError):
        compute_bounding_box(center, 10)
