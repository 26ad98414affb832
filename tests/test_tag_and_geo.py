"""Tests for TagSetResolver and the radius-search helpers."""

import math

import pytest
from pydantic import ValidationError

from marketplace_search.domain.filter_spec import FilterSpec, TagOperator
from marketplace_search.domain.filters import FilterOp
from marketplace_search.domain.geo import (
    EARTH_RADIUS_M,
    GeoCircle,
    GeoPredicateBuilder,
    meters_to_radians,
    point_of,
)
from marketplace_search.domain.tag_resolver import TagSetResolver


class TestTagSetResolver:
    def test_no_tags_no_predicate(self):
        assert TagSetResolver().build([], TagOperator.all) is None

    def test_or_is_intersection(self):
        f = TagSetResolver().build(["t1", "t2"], TagOperator.any)
        assert f.field == "tags"
        assert f.op == FilterOp.any_of
        assert f.value == ["t1", "t2"]

    def test_and_is_superset(self):
        f = TagSetResolver().build(["t1", "t2"], TagOperator.all)
        assert f.op == FilterOp.all_of
        assert f.value == ["t1", "t2"]

    def test_single_tag_ignores_operator(self):
        f = TagSetResolver().build(["t1"], TagOperator.all)
        assert f.op == FilterOp.any_of
        assert f.value == ["t1"]

    def test_duplicates_collapse_before_choosing(self):
        f = TagSetResolver().build(["t1", "t1"], TagOperator.all)
        assert f.op == FilterOp.any_of
        assert f.value == ["t1"]

    def test_default_operator_is_or(self):
        assert TagSetResolver().build(["a", "b"]).op == FilterOp.any_of


class TestRadiusConversion:
    def test_meters_to_radians_uses_equatorial_radius(self):
        assert EARTH_RADIUS_M == 6378137.0
        assert meters_to_radians(6378137.0) == pytest.approx(1.0)
        assert meters_to_radians(10_000) == pytest.approx(10_000 / 6378137.0)

    def test_circle_radius(self):
        circle = GeoCircle(longitude=0, latitude=0, radius_m=500)
        assert circle.radius_radians == pytest.approx(500 / 6378137.0)

    def test_circle_rejects_bad_center(self):
        with pytest.raises(ValidationError):
            GeoCircle(longitude=200, latitude=0, radius_m=1)


class TestGeoCircle:
    """Membership by great-circle angle against radius / Earth radius."""

    def test_center_is_inside(self):
        circle = GeoCircle(longitude=-74.006, latitude=40.7128, radius_m=0)
        assert circle.contains(-74.006, 40.7128)

    def test_one_degree_along_equator(self):
        circle = GeoCircle(longitude=0, latitude=0, radius_m=1)
        assert circle.central_angle(1, 0) == pytest.approx(math.radians(1))

    def test_boundary(self):
        one_degree_m = math.radians(1) * EARTH_RADIUS_M
        assert GeoCircle(longitude=0, latitude=0, radius_m=one_degree_m + 1).contains(0, 1)
        assert not GeoCircle(longitude=0, latitude=0, radius_m=one_degree_m - 1).contains(0, 1)

    def test_larger_radius_contains_more(self):
        small = GeoCircle(longitude=10, latitude=50, radius_m=1_000)
        large = GeoCircle(longitude=10, latitude=50, radius_m=50_000)
        points = [(10.0, 50.005), (10.2, 50.1), (11.0, 50.0), (10.0, 49.9)]
        assert {p for p in points if small.contains(*p)} <= {p for p in points if large.contains(*p)}


class TestPointOf:
    def test_geojson(self):
        assert point_of({"type": "Point", "coordinates": [1.5, 2.5]}) == (1.5, 2.5)

    def test_bare_pair(self):
        assert point_of([3, 4]) == (3.0, 4.0)

    def test_missing_or_malformed(self):
        assert point_of(None) is None
        assert point_of({"type": "Point"}) is None
        assert point_of(["x", "y"]) is None
        assert point_of([1]) is None


class TestGeoPredicateBuilder:
    def test_requires_both_coordinates(self):
        builder = GeoPredicateBuilder()
        assert builder.build(FilterSpec()) is None
        assert builder.build(FilterSpec(longitude=1.0)) is None
        assert builder.build(FilterSpec(latitude=1.0)) is None

    def test_builds_circle_with_spec_distance(self):
        f = GeoPredicateBuilder().build(FilterSpec(longitude=-74.0, latitude=40.7, max_distance=750))
        assert f.field == "coordinates"
        assert f.op == FilterOp.geo_within
        assert f.value == GeoCircle(longitude=-74.0, latitude=40.7, radius_m=750)
