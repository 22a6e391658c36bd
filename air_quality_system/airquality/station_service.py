"""
Station service module for the Air Quality System.

This module contains the StationService class, a client of the WAQI (World
Air Quality Index) API. It lists the monitoring stations inside a bounding box
with their live AQI and enriches each station with its PM2.5, PM10 and NO2
readings, which is the data behind the live pollution heatmap.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Optional

from .errors import AirQualityError, ServiceUnavailable
from .geo_point import GeoPoint
from .http_service import HttpService

logger = logging.getLogger(__name__)

# (south, west, north, east) of the default heatmap area
INDIA_BOUNDS = (8.4, 68.7, 37.6, 97.25)


@dataclass(frozen=True)
class Station:
    """
    A monitoring station with its live readings.

    Attributes:
        uid: WAQI station identifier
        name: Station name
        point: Station location
        aqi: Live US-AQI value, None if the station reports none
        pm25: PM2.5 sub-index, None if unavailable
        pm10: PM10 sub-index, None if unavailable
        no2: NO2 sub-index, None if unavailable
    """

    uid: int
    name: str
    point: GeoPoint
    aqi: Optional[int] = None
    pm25: Optional[float] = None
    pm10: Optional[float] = None
    no2: Optional[float] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "uid": self.uid,
            "name": self.name,
            "lat": self.point.latitude,
            "lng": self.point.longitude,
            "aqi": self.aqi,
            "pm25": self.pm25,
            "pm10": self.pm10,
            "no2": self.no2,
        }


def _to_int(value) -> Optional[int]:
    # WAQI reports AQI as a string and uses "-" for stations without data
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class StationService(HttpService):
    """WAQI client for the live station heatmap."""

    SERVICE_NAME = "Station service"

    # Upper bound on concurrent detail requests
    MAX_WORKERS = 8

    def __init__(self, config=None, session=None) -> None:
        super().__init__(config=config, session=session)
        if not self.config.waqi_token:
            raise ValueError("The WAQI_TOKEN environment variable is not set.")

    def stations_in_bounds(self, bounds: tuple[float, float, float, float] = INDIA_BOUNDS) -> list[Station]:
        """
        Lists the stations inside a bounding box.

        Args:
            bounds: (south, west, north, east) in degrees

        Returns:
            Stations with their live AQI; pollutant fields are not filled

        Raises:
            ServiceUnavailable: If the API is unreachable or answers with a
                                status other than "ok"
        """
        url = f"{self.config.waqi_url}/v2/map/bounds"
        params = {
            "latlng": ",".join(str(value) for value in bounds),
            "token": self.config.waqi_token,
        }
        data = self._get_json(url, params=params)
        if not isinstance(data, dict) or data.get("status") != "ok" or data.get("data") is None:
            raise ServiceUnavailable("Invalid data format received from API")

        stations = []
        for raw in data["data"]:
            try:
                stations.append(
                    Station(
                        uid=int(raw["uid"]),
                        name=(raw.get("station") or {}).get("name", ""),
                        point=GeoPoint(latitude=float(raw["lat"]), longitude=float(raw["lon"])),
                        aqi=_to_int(raw.get("aqi")),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed station: %r", raw)
        return stations

    def station_detail(self, uid: int) -> dict[str, Optional[float]]:
        """
        Fetches the pollutant sub-indices of one station.

        Returns:
            Mapping with keys pm25, pm10 and no2; missing values are None

        Raises:
            ServiceUnavailable: If the station feed cannot be fetched
        """
        data = self._get_json(
            f"{self.config.waqi_url}/feed/@{uid}/", params={"token": self.config.waqi_token}
        )
        if not isinstance(data, dict) or data.get("status") != "ok":
            raise ServiceUnavailable(f"No detail available for station {uid}")

        iaqi = (data.get("data") or {}).get("iaqi") or {}
        return {
            key: _to_float((iaqi.get(key) or {}).get("v"))
            for key in ("pm25", "pm10", "no2")
        }

    def live_stations(self, bounds: tuple[float, float, float, float] = INDIA_BOUNDS) -> list[Station]:
        """
        Lists stations in a bounding box with their pollutant readings.

        Details are fetched concurrently. A failed detail request keeps the
        station with its pollutants left as None.

        Args:
            bounds: (south, west, north, east) in degrees

        Returns:
            Stations in the order the API listed them
        """
        stations = self.stations_in_bounds(bounds)
        if not stations:
            return []

        with ThreadPoolExecutor(max_workers=min(self.MAX_WORKERS, len(stations))) as executor:
            futures = [executor.submit(self.station_detail, station.uid) for station in stations]

            enriched = []
            for station, future in zip(stations, futures):
                try:
                    detail = future.result()
                except AirQualityError as e:
                    logger.warning("Error fetching details for station %s: %s", station.uid, e)
                    enriched.append(station)
                    continue
                enriched.append(replace(station, **detail))

        return enriched
