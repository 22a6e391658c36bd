"""
Air quality service module for the Air Quality System.

This module contains the AirQualityService class, a client of the Open-Meteo
air-quality API. It loads hourly pollutant concentrations for a point into a
pandas DataFrame, samples the current PM2.5 category at a point for route
scoring, and computes the yearly PM2.5 average used by the year comparison.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

import pandas as pd

from .aqi_classifier import AqiClassifier
from .errors import AirQualityError, LookupFailure, NoValidReadings
from .geo_point import GeoPoint
from .http_service import HttpService

logger = logging.getLogger(__name__)

POLLUTANTS = (
    "pm10",
    "pm2_5",
    "carbon_monoxide",
    "ozone",
    "sulphur_dioxide",
    "nitrogen_dioxide",
)


@dataclass(frozen=True)
class YearAverage:
    """
    Average PM2.5 of one calendar year at one location.

    Attributes:
        year: Calendar year
        average_pm25: Mean PM2.5 in µg/m³, rounded to 2 decimals
        aqi: 1-5 category of the mean
        category: Label of the category
    """

    year: int
    average_pm25: float
    aqi: int
    category: str


class AirQualityService(HttpService):
    """
    Open-Meteo client for hourly pollutant data.

    The API answers with one value per hour per pollutant; the first hour is
    treated as the current reading.
    """

    SERVICE_NAME = "Air quality service"

    # Earliest year with historical data
    FIRST_YEAR = 2022

    def __init__(self, config=None, session=None, classifier: Optional[AqiClassifier] = None) -> None:
        super().__init__(config=config, session=session)
        self.classifier = classifier or AqiClassifier()

    def hourly(
        self,
        point: GeoPoint,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> pd.DataFrame:
        """
        Loads hourly pollutant concentrations for a point.

        Args:
            point: Location to query
            start_date: First day of the range, API default if None
            end_date: Last day of the range, API default if None

        Returns:
            DataFrame indexed by timestamp with one column per pollutant;
            missing values are NaN

        Raises:
            ServiceUnavailable: If the API cannot be reached or rejects the query
            LookupFailure: If the response has no hourly block
        """
        params = {
            "latitude": point.latitude,
            "longitude": point.longitude,
            "hourly": ",".join(POLLUTANTS),
        }
        if start_date is not None:
            params["start_date"] = start_date.isoformat()
        if end_date is not None:
            params["end_date"] = end_date.isoformat()

        data = self._get_json(self.config.air_api_url, params=params)
        hourly = data.get("hourly") if isinstance(data, dict) else None
        if not isinstance(hourly, dict) or "time" not in hourly:
            raise LookupFailure("No hourly air-quality data for this location")

        try:
            frame = pd.DataFrame(
                {column: hourly.get(column, [None] * len(hourly["time"])) for column in POLLUTANTS},
                index=pd.to_datetime(hourly["time"]),
            )
        except (TypeError, ValueError) as e:
            raise LookupFailure(f"Malformed hourly air-quality data: {e}") from e

        frame.index.name = "time"
        return frame.apply(pd.to_numeric, errors="coerce")

    def current_pm25(self, point: GeoPoint) -> Optional[float]:
        """First-hour PM2.5 at a point, None if the API has no value."""
        frame = self.hourly(point)
        if frame.empty:
            return None
        value = frame["pm2_5"].iloc[0]
        return None if pd.isna(value) else float(value)

    def sample_category(self, point: GeoPoint) -> Optional[int]:
        """
        Samples the current AQI category at a point.

        Never raises: any failure is logged and reported as an absent reading,
        so a single bad point only drops out of a route's average.

        Args:
            point: Location to sample

        Returns:
            Category 1-5, or None if the request failed or returned no data
        """
        try:
            pm25 = self.current_pm25(point)
        except AirQualityError as e:
            logger.warning(
                "Error fetching AQI at (%.5f, %.5f): %s", point.latitude, point.longitude, e
            )
            return None

        if pm25 is None:
            return None
        return self.classifier.pm25_category(pm25)

    def yearly_average(
        self,
        point: GeoPoint,
        year: Union[int, str],
        today: Optional[date] = None,
    ) -> YearAverage:
        """
        Average PM2.5 over one calendar year.

        For the current year the range ends today, since later days have no
        data yet.

        Args:
            point: Location to query
            year: Calendar year, between 2022 and the current year
            today: Reference date, defaults to today

        Returns:
            The year's mean PM2.5 with its category

        Raises:
            ValueError: If the year is not a number or is out of range
            NoValidReadings: If every hourly PM2.5 value is missing
            ServiceUnavailable, LookupFailure: As raised by hourly()
        """
        today = today or date.today()
        try:
            year = int(year)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid year: {year!r}") from e

        if year < self.FIRST_YEAR or year > today.year:
            raise ValueError(f"Data only available from {self.FIRST_YEAR} to {today.year}")

        end_date = min(date(year, 12, 31), today)
        frame = self.hourly(point, start_date=date(year, 1, 1), end_date=end_date)

        values = frame["pm2_5"].dropna()
        if values.empty:
            raise NoValidReadings("No PM2.5 data available for this location and time period")

        average = float(values.mean())
        aqi = self.classifier.pm25_category(average)
        return YearAverage(
            year=year,
            average_pm25=round(average, 2),
            aqi=aqi,
            category=self.classifier.category_label(aqi),
        )
