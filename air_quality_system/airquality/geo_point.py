"""
Geo point module for the Air Quality System.

This module defines the GeoPoint dataclass, the coordinate pair passed between
the geocoder, the routing service, and the air-quality service. Points are
immutable once obtained and can be validated before use.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GeoPoint:
    """
    A WGS84 coordinate pair.

    Attributes:
        latitude: Degrees north (must be between -90 and 90)
        longitude: Degrees east (must be between -180 and 180)
    """

    latitude: float
    longitude: float

    @classmethod
    def from_lonlat(cls, pair) -> "GeoPoint":
        """Builds a point from a GeoJSON ``[lon, lat]`` pair."""
        return cls(latitude=float(pair[1]), longitude=float(pair[0]))

    def validate(self) -> tuple[bool, Optional[str]]:
        """
        Validates the coordinate ranges.

        Returns:
            A tuple containing:
            - bool: True if both coordinates are in range, False otherwise
            - Optional[str]: None if valid, or a descriptive error message
        """
        if not -90.0 <= self.latitude <= 90.0:
            return (False, "latitude must be between -90 and 90")

        if not -180.0 <= self.longitude <= 180.0:
            return (False, "longitude must be between -180 and 180")

        return (True, None)

    def as_lonlat_string(self) -> str:
        """Formats the point as ``lon,lat`` with six decimals, the OSRM order."""
        return f"{self.longitude:.6f},{self.latitude:.6f}"
