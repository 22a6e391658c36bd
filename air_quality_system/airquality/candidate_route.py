"""
Candidate route module for the Air Quality System.

This module defines the CandidateRoute dataclass which represents one driving
route returned by the routing service: the ordered polyline vertices and the
route length reported by the service. The first route of a response is the
reference route; the others are alternatives.
"""

import math
from dataclasses import dataclass
from typing import Sequence

from .geo_point import GeoPoint

# Fractional positions along the path at which air quality is sampled
SAMPLE_OFFSETS = (0.0, 0.16, 0.33, 0.5, 0.66, 0.83, 1.0)


@dataclass(frozen=True)
class CandidateRoute:
    """
    A driving route between two points.

    Attributes:
        path: Ordered polyline vertices from start to end
        length_meters: Route length as reported by the routing service
    """

    path: tuple[GeoPoint, ...]
    length_meters: float

    @property
    def length_km(self) -> float:
        return self.length_meters / 1000

    def sample_points(self, offsets: Sequence[float] = SAMPLE_OFFSETS) -> list[GeoPoint]:
        """
        Picks the path vertices at the given fractional offsets.

        Interior offsets map to ``path[floor(len(path) * offset)]``; an offset of
        1 (or anything that would index past the end) maps to the last vertex.
        An empty path yields no points.

        Args:
            offsets: Fractions between 0 and 1, in the order they are sampled

        Returns:
            One vertex per offset, in offset order
        """
        if not self.path:
            return []

        last = len(self.path) - 1
        points = []
        for offset in offsets:
            index = min(math.floor(len(self.path) * offset), last)
            points.append(self.path[index])
        return points
