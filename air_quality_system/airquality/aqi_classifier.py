"""
AQI classifier module for the Air Quality System.

This module contains the AqiClassifier class which is a pure classifier for
air-quality values. It maps fine particulate concentrations to the 1-5 AQI
category used for route scoring, maps PM2.5 / PM10 readings to display bands,
and maps station AQI values and route averages to display colors. It performs
no I/O.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PollutantBand:
    """A named concentration band with its display color."""

    category: str
    color: str


NOT_AVAILABLE = PollutantBand("N/A", "bg-gray-100 text-gray-800")


class AqiClassifier:
    """
    Pure classifier for air-quality readings.

    The 1-5 category scale is derived from PM2.5 (µg/m³) with fixed
    breakpoints: <= 12 is 1 (Good), <= 35.4 is 2, <= 55.4 is 3, <= 150.4 is 4,
    anything higher is 5.
    """

    # Upper bound (inclusive) of categories 1-4; anything above is category 5
    PM25_CATEGORY_BREAKPOINTS = (12.0, 35.4, 55.4, 150.4)

    CATEGORY_LABELS = {
        1: "Good",
        2: "Moderate",
        3: "Unhealthy for Sensitive Groups",
        4: "Unhealthy",
        5: "Hazardous",
    }

    # (low, high) inclusive ranges; values falling between ranges are "N/A"
    POLLUTANT_BANDS = {
        "pm2_5": (
            ((0, 12), PollutantBand("Good", "bg-green-100 text-green-800")),
            ((12.1, 35.4), PollutantBand("Moderate", "bg-yellow-100 text-yellow-800")),
            ((35.5, 55.4), PollutantBand("Unhealthy for Sensitive Groups", "bg-orange-100 text-orange-800")),
            ((55.5, 150.4), PollutantBand("Unhealthy", "bg-red-100 text-red-800")),
            ((150.5, 250.4), PollutantBand("Very Unhealthy", "bg-purple-100 text-purple-800")),
            ((250.5, float("inf")), PollutantBand("Hazardous", "bg-gray-900 text-white")),
        ),
        "pm10": (
            ((0, 54), PollutantBand("Good", "bg-green-100 text-green-800")),
            ((55, 154), PollutantBand("Moderate", "bg-yellow-100 text-yellow-800")),
            ((155, 254), PollutantBand("Unhealthy for Sensitive Groups", "bg-orange-100 text-orange-800")),
            ((255, 354), PollutantBand("Unhealthy", "bg-red-100 text-red-800")),
            ((355, 424), PollutantBand("Very Unhealthy", "bg-purple-100 text-purple-800")),
            ((425, float("inf")), PollutantBand("Hazardous", "bg-gray-900 text-white")),
        ),
    }

    # US-AQI station scale: (inclusive upper bound, label, color)
    STATION_BANDS = (
        (50, "Good", "#00e400"),
        (100, "Moderate", "#ffff00"),
        (150, "Unhealthy for Sensitive Groups", "#ff7e00"),
        (200, "Unhealthy", "#ff0000"),
        (300, "Very Unhealthy", "#99004c"),
    )
    STATION_HAZARDOUS = ("Hazardous", "#7e0023")

    def pm25_category(self, concentration: float) -> int:
        """
        Converts a PM2.5 concentration to the 1-5 AQI category.

        Args:
            concentration: PM2.5 in µg/m³

        Returns:
            Category between 1 (Good) and 5 (Hazardous)
        """
        for category, upper in enumerate(self.PM25_CATEGORY_BREAKPOINTS, start=1):
            if concentration <= upper:
                return category
        return 5

    def category_label(self, category: int) -> str:
        return self.CATEGORY_LABELS.get(category, "N/A")

    def category_color(self, category: int) -> str:
        """Hex color for a 1-5 category, as used on the year comparison."""
        if category <= 1:
            return "#00e400"
        if category <= 2:
            return "#ffff00"
        if category <= 3:
            return "#ff7e00"
        if category <= 4:
            return "#ff0000"
        return "#7e0023"

    def pollutant_band(self, pollutant: str, value: Optional[float]) -> PollutantBand:
        """
        Looks up the display band of a pollutant reading.

        Args:
            pollutant: "pm2_5" or "pm10"
            value: Concentration in µg/m³, or None if unknown

        Returns:
            The matching band, or an "N/A" band for unknown pollutants, missing
            values and values between two ranges
        """
        bands = self.POLLUTANT_BANDS.get(pollutant)
        if bands is None or value is None:
            return NOT_AVAILABLE

        for (low, high), band in bands:
            if low <= value <= high:
                return band
        return NOT_AVAILABLE

    def station_band(self, aqi: Optional[int]) -> tuple[str, str]:
        """
        Label and hex color for a station's US-AQI value.

        Returns:
            (label, color); unknown AQI is reported as ("N/A", gray)
        """
        if aqi is None:
            return ("N/A", "#9ca3af")
        for upper, label, color in self.STATION_BANDS:
            if aqi <= upper:
                return (label, color)
        return self.STATION_HAZARDOUS

    def route_aqi_color(self, average: Optional[float]) -> str:
        """Hex text color for an average route AQI category."""
        # Zero and None both mean "no reading" here
        if not average:
            return "#6b7280"
        if average <= 1.5:
            return "#16a34a"
        if average <= 2.5:
            return "#22c55e"
        if average <= 3.5:
            return "#eab308"
        if average <= 4.5:
            return "#f97316"
        return "#dc2626"
