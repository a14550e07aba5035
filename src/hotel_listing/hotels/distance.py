"""Great-circle distance between a search origin and a hotel."""
from __future__ import annotations

import math

from .models import Excluded, GeoPoint, Matched

# Kilometres per degree of latitude on a spherical earth.
KM_PER_DEGREE = 111.111


def compute_distance(lat_from: float, lng_from: float, lat_to: float, lng_to: float) -> float:
    """Spherical law of cosines distance in kilometres."""
    if lat_from == lat_to and lng_from == lng_to:
        return 0.0
    cosine = (
        math.cos(math.radians(lat_to))
        * math.cos(math.radians(lat_from))
        * math.cos(math.radians(lng_to - lng_from))
        + math.sin(math.radians(lat_to)) * math.sin(math.radians(lat_from))
    )
    # rounding can push identical points slightly past 1.0
    cosine = min(1.0, max(-1.0, cosine))
    return KM_PER_DEGREE * math.degrees(math.acos(cosine))


class DistanceEvaluator:
    def evaluate(self, origin: GeoPoint, target: GeoPoint) -> float:
        return compute_distance(origin.lat, origin.lng, target.lat, target.lng)

    def check(self, origin: GeoPoint, target: GeoPoint, radius: float) -> Matched[float] | Excluded:
        distance = self.evaluate(origin, target)
        if distance > radius:
            return Excluded(f"{distance:.3f} km is outside the {radius} km radius")
        return Matched(distance)
