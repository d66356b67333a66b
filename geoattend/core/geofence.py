"""
Geofence evaluation: great-circle distance against the office perimeter.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from geoattend.core.config import Settings

EARTH_RADIUS_METERS = 6_371_000.0


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


# Stored when a mark is accepted without client coordinates (WFH).
NO_LOCATION = Coordinates(0.0, 0.0)


def haversine_distance(a: Coordinates, b: Coordinates) -> float:
    """Surface distance between two points in metres (haversine formula)."""
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


@dataclass(frozen=True)
class Geofence:
    """Circular office perimeter. The boundary itself counts as inside."""

    center: Coordinates
    radius_meters: float

    @classmethod
    def from_settings(cls, settings: Settings) -> Geofence:
        return cls(
            center=Coordinates(settings.OFFICE_LATITUDE, settings.OFFICE_LONGITUDE),
            radius_meters=settings.OFFICE_RADIUS_METERS,
        )

    def distance_to(self, point: Coordinates) -> float:
        return haversine_distance(point, self.center)

    def within_office(self, point: Coordinates) -> bool:
        return self.distance_to(point) <= self.radius_meters
