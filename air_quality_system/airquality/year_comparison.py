"""
Year comparison module for the Air Quality System.

This module compares the average PM2.5 of a place over two calendar years.
The place is geocoded first; both years are then fetched concurrently.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from .air_quality_service import AirQualityService, YearAverage
from .errors import AirQualityError
from .geocoding_service import GeocodingService
from .geo_point import GeoPoint


@dataclass(frozen=True)
class YearComparison:
    """
    Yearly PM2.5 averages of one place for two years.

    Attributes:
        place_name: Name the user searched for
        point: Geocoded location of the place
        first: Average of the first requested year
        second: Average of the second requested year
    """

    place_name: str
    point: GeoPoint
    first: YearAverage
    second: YearAverage

    @property
    def change_pct(self) -> Optional[float]:
        """Relative PM2.5 change from the first to the second year, as a fraction."""
        if not self.first.average_pm25:
            return None
        return (self.second.average_pm25 - self.first.average_pm25) / self.first.average_pm25


def _year_average(
    air_service: AirQualityService,
    point: GeoPoint,
    year: Union[int, str],
    today: Optional[date],
) -> YearAverage:
    try:
        return air_service.yearly_average(point, year, today=today)
    except (AirQualityError, ValueError) as e:
        raise ValueError(f"Error for year {year}: {e}") from e


def compare_years(
    geocoder: GeocodingService,
    air_service: AirQualityService,
    place: str,
    year1: Union[int, str],
    year2: Union[int, str],
    today: Optional[date] = None,
) -> YearComparison:
    """
    Compares the yearly PM2.5 average of a place for two years.

    Args:
        geocoder: Client used to resolve the place name
        air_service: Client used to fetch the hourly history
        place: Place name
        year1: First year (2022 or later)
        year2: Second year (2022 or later)
        today: Reference date for the year range, defaults to today

    Returns:
        The two yearly averages

    Raises:
        ValueError: If an input is missing, or a year fails (message prefixed
                    with "Error for year <year>:")
        LookupFailure: If the place cannot be geocoded
        ServiceUnavailable: If the geocoder cannot be reached
    """
    if not place or not str(year1 or "").strip() or not str(year2 or "").strip():
        raise ValueError("Please fill in all fields")

    point = geocoder.geocode(place)

    with ThreadPoolExecutor(max_workers=2) as executor:
        first_future = executor.submit(_year_average, air_service, point, year1, today)
        second_future = executor.submit(_year_average, air_service, point, year2, today)
        first = first_future.result()
        second = second_future.result()

    return YearComparison(place_name=place, point=point, first=first, second=second)
