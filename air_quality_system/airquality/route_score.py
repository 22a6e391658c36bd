"""
Route score module for the Air Quality System.

This module defines the RouteScore dataclass which aggregates the samples taken
along one candidate route into an average AQI category, together with the
route's distance increase relative to the reference route.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .candidate_route import CandidateRoute
from .sample_reading import SampleReading


def average_category(readings: Iterable[SampleReading]) -> Optional[float]:
    """
    Arithmetic mean of the valid readings.

    Args:
        readings: Samples of a single route; absent readings are ignored

    Returns:
        The mean category, or None if no reading is valid (route unscoreable)
    """
    values = [reading.aqi_category for reading in readings if reading.is_valid]
    if not values:
        return None
    return sum(values) / len(values)


@dataclass
class RouteScore:
    """
    Scoring result for one candidate route.

    Attributes:
        route: The scored route
        index: Position of the route in the routing response (0 = reference)
        readings: The samples taken along the route, in offset order
        average_aqi: Mean of the valid sample categories, None if unscoreable
        distance_increase_pct: (length - reference length) / reference length,
                               as a fraction; 0 for the reference route
        is_selected: True if this route is the final selection
    """

    route: CandidateRoute
    index: int
    readings: tuple[SampleReading, ...]
    average_aqi: Optional[float]
    distance_increase_pct: float = 0.0
    is_selected: bool = False

    @property
    def is_reference(self) -> bool:
        return self.index == 0

    @property
    def is_scoreable(self) -> bool:
        return self.average_aqi is not None

    @property
    def valid_reading_count(self) -> int:
        return sum(1 for reading in self.readings if reading.is_valid)

    def aqi_improvement_pct(self, baseline_aqi: Optional[float]) -> Optional[float]:
        """
        Relative AQI improvement of this route over a baseline, as a fraction.

        Returns None when either side has no average or the baseline is zero.
        """
        if self.average_aqi is None or not baseline_aqi:
            return None
        return (baseline_aqi - self.average_aqi) / baseline_aqi

    def to_dict(self) -> dict[str, object]:
        """Serialisable view of the score, used for debug tables and logs."""
        return {
            "index": self.index,
            "distance_km": round(self.route.length_km, 2),
            "average_aqi": round(self.average_aqi, 2) if self.average_aqi is not None else None,
            "distance_increase_pct": round(self.distance_increase_pct * 100, 1),
            "valid_readings": self.valid_reading_count,
            "is_reference": self.is_reference,
            "is_selected": self.is_selected,
            "samples": [
                {
                    "lat": reading.point.latitude,
                    "lng": reading.point.longitude,
                    "aqi": reading.aqi_category,
                }
                for reading in self.readings
            ],
        }
