"""Radius search on stored GeoJSON points.

Stored ``coordinates`` are GeoJSON points (``[longitude, latitude]``). The
radius is converted from meters to radians with the equatorial Earth radius
so it can be handed to a spherical-cap primitive (``$centerSphere``).
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

from .filter_spec import FilterSpec
from .filters import FieldFilter, FilterOp

EARTH_RADIUS_M = 6378137.0
GEO_FIELD = "coordinates"


def meters_to_radians(meters: float) -> float:
    return meters / EARTH_RADIUS_M


class GeoCircle(BaseModel):
    """A spherical cap: center (lng, lat) and radius."""

    model_config = ConfigDict(frozen=True)

    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)
    radius_m: float = Field(..., ge=0)

    @property
    def radius_radians(self) -> float:
        return meters_to_radians(self.radius_m)

    def central_angle(self, longitude: float, latitude: float) -> float:
        """Angle in radians between the center and a point (haversine)."""
        lat1, lat2 = math.radians(self.latitude), math.radians(latitude)
        dlat = lat2 - lat1
        dlng = math.radians(longitude - self.longitude)
        h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
        return 2 * math.asin(min(1.0, math.sqrt(h)))

    def contains(self, longitude: float, latitude: float) -> bool:
        return self.central_angle(longitude, latitude) <= self.radius_radians


def point_of(value: object) -> tuple[float, float] | None:
    """Extract (lng, lat) from a GeoJSON point or a bare ``[lng, lat]`` pair."""
    if isinstance(value, dict):
        value = value.get("coordinates")
    if isinstance(value, (list, tuple)) and len(value) >= 2:
        try:
            return float(value[0]), float(value[1])
        except (TypeError, ValueError):
            return None
    return None


class GeoPredicateBuilder:
    """Build the radius predicate; only when both longitude and latitude are given."""

    def build(self, spec: FilterSpec) -> FieldFilter | None:
        if spec.longitude is None or spec.latitude is None:
            return None
        circle = GeoCircle(
            longitude=spec.longitude,
            latitude=spec.latitude,
            radius_m=spec.max_distance,
        )
        return FieldFilter(field=GEO_FIELD, op=FilterOp.geo_within, value=circle)
