"""
Air quality report module for the Air Quality System.

This module builds the per-place air-quality report: the current (first hour)
concentration of each pollutant, the display band of PM2.5 and PM10, and a
24-hour PM2.5 / PM10 trend table.
"""

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .air_quality_service import AirQualityService
from .aqi_classifier import AqiClassifier, PollutantBand
from .errors import LookupFailure
from .geo_point import GeoPoint

TREND_HOURS = 24

POLLUTANT_NAMES = {
    "pm2_5": "PM2.5",
    "pm10": "PM10",
    "carbon_monoxide": "Carbon Monoxide",
    "ozone": "Ozone",
    "sulphur_dioxide": "Sulphur Dioxide",
    "nitrogen_dioxide": "Nitrogen Dioxide",
}


@dataclass
class AirQualityReport:
    """
    Current air quality and short-term trend for one place.

    Attributes:
        place_name: Name the user searched for
        point: Location of the place
        current: First-hour concentration per pollutant (µg/m³), None if missing
        bands: Display band of pm2_5 and pm10
        trend: DataFrame with columns hour ("H:00"), pm2_5 and pm10 for the
               first 24 hours
    """

    place_name: str
    point: GeoPoint
    current: dict[str, Optional[float]]
    bands: dict[str, PollutantBand]
    trend: pd.DataFrame

    def rows(self) -> list[dict[str, object]]:
        """One display row per pollutant, in report order."""
        return [
            {
                "pollutant": POLLUTANT_NAMES[key],
                "value": value,
                "unit": "µg/m³",
                "category": self.bands[key].category if key in self.bands else "",
            }
            for key, value in self.current.items()
        ]


def build_report(
    service: AirQualityService,
    point: GeoPoint,
    place_name: str,
    classifier: Optional[AqiClassifier] = None,
) -> AirQualityReport:
    """
    Loads the hourly data of a place and builds its report.

    Args:
        service: Air-quality client
        point: Location of the place
        place_name: Display name of the place
        classifier: Classifier for the pollutant bands, defaults to a new one

    Returns:
        The report

    Raises:
        LookupFailure: If the API returned no hourly rows
        ServiceUnavailable: If the API could not be reached
    """
    classifier = classifier or AqiClassifier()
    frame = service.hourly(point)
    if frame.empty:
        raise LookupFailure(f"No air-quality data for {place_name}")

    first = frame.iloc[0]
    # Display order: particulates first
    current = {
        key: None if pd.isna(first[key]) else float(first[key])
        for key in POLLUTANT_NAMES
    }

    bands = {
        key: classifier.pollutant_band(key, current[key])
        for key in ("pm2_5", "pm10")
    }

    head = frame.head(TREND_HOURS)
    trend = pd.DataFrame(
        {
            "hour": [f"{timestamp.hour}:00" for timestamp in head.index],
            "pm2_5": head["pm2_5"].to_numpy(),
            "pm10": head["pm10"].to_numpy(),
        }
    )

    return AirQualityReport(
        place_name=place_name,
        point=point,
        current=current,
        bands=bands,
        trend=trend,
    )
