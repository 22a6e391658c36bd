"""
Sample reading module for the Air Quality System.

A SampleReading pairs one sampling point of a route with the AQI category that
was measured there, or None when the air-quality request for that point failed.
"""

from dataclasses import dataclass
from typing import Optional

from .geo_point import GeoPoint


@dataclass(frozen=True)
class SampleReading:
    """
    Air-quality sample at one point of a route.

    Attributes:
        point: Where the sample was taken
        aqi_category: Category 1-5, or None if sampling failed
    """

    point: GeoPoint
    aqi_category: Optional[int] = None

    @property
    def is_valid(self) -> bool:
        return self.aqi_category is not None
