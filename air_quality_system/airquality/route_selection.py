"""
Route selection module for the Air Quality System.

This module defines the RouteSelection dataclass which represents the result
of a cleanest-route query: the chosen route with its average AQI and distance,
the reference route figures it was compared against, and the score of every
route that was evaluated. It can render a short human-readable explanation
and a serialisable dictionary for logging.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .candidate_route import CandidateRoute
from .route_score import RouteScore


@dataclass
class RouteSelection:
    """
    Final result of a cleanest-route query.

    Attributes:
        route: The selected route
        average_aqi: Average AQI category along the selected route
        distance_km: Length of the selected route in km, rounded to 2 decimals
        reference_distance_km: Length of the reference route in km, rounded
        reference_aqi: Average AQI of the reference route, None if every
                       reference sample failed
        scores: Score of every evaluated route, in evaluation order
        selected_index: Routing-response index of the selected route
        timestamp: When the selection was made
    """

    route: CandidateRoute
    average_aqi: float
    distance_km: float
    reference_distance_km: float
    reference_aqi: Optional[float]
    scores: list[RouteScore]
    selected_index: int
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def total_routes(self) -> int:
        return len(self.scores)

    @property
    def is_reference(self) -> bool:
        return self.selected_index == 0

    @property
    def distance_increase_pct(self) -> float:
        """Distance increase of the selection over the reference, as a fraction."""
        for score in self.scores:
            if score.index == self.selected_index:
                return score.distance_increase_pct
        return 0.0

    @property
    def aqi_improvement_pct(self) -> Optional[float]:
        """AQI improvement of the selection over the reference, as a fraction."""
        if not self.reference_aqi:
            return None
        return (self.reference_aqi - self.average_aqi) / self.reference_aqi

    def summary(self) -> str:
        """
        Builds a human-readable explanation of the selection.

        Returns:
            One or more sentences describing the chosen route and, where it
            applies, why no alternative was taken
        """
        parts = [
            f"Cleanest route: {self.distance_km:.2f} km with average AQI {self.average_aqi:.2f}."
        ]

        if not self.is_reference and self.aqi_improvement_pct is not None:
            increase = self.distance_increase_pct
            if increase < 0:
                parts.append(
                    f"The cleanest route is {-increase * 100:.1f}% shorter "
                    f"and has {self.aqi_improvement_pct * 100:.1f}% better air quality."
                )
            else:
                parts.append(
                    f"The cleanest route is {increase * 100:.1f}% longer "
                    f"but has {self.aqi_improvement_pct * 100:.1f}% better air quality."
                )
        elif not self.is_reference:
            parts.append("The shortest route had no valid air-quality readings.")

        if self.total_routes <= 1:
            parts.append(
                "Only one route found. Try places that are farther apart for more alternative routes."
            )
        elif self.is_reference:
            parts.append(
                "No alternative route had at least 5% better air quality without being more than 30% longer."
            )

        return " ".join(parts)

    def to_dict(self) -> dict[str, object]:
        """
        Converts the selection to a serialisable dictionary.

        Returns:
            Dictionary with the selection figures and every route score
        """
        return {
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "selected_index": self.selected_index,
            "distance_km": self.distance_km,
            "average_aqi": round(self.average_aqi, 2),
            "reference_distance_km": self.reference_distance_km,
            "reference_aqi": round(self.reference_aqi, 2) if self.reference_aqi is not None else None,
            "total_routes": self.total_routes,
            "routes": [score.to_dict() for score in self.scores],
        }
