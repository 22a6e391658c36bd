"""
Geocoding service module for the Air Quality System.

This module contains the GeocodingService class, a client of the Nominatim
search API. It resolves a place name to its first matching GeoPoint and
provides autocomplete suggestions for partial names.
"""

import logging
from dataclasses import dataclass

from .errors import LookupFailure, ServiceUnavailable
from .geo_point import GeoPoint
from .http_service import HttpService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaceSuggestion:
    """
    One autocomplete candidate.

    Attributes:
        place_id: Provider identifier of the place
        name: Full display name
        country: Country name, empty if the provider did not report one
        point: Coordinates of the place
    """

    place_id: str
    name: str
    country: str
    point: GeoPoint

    @property
    def label(self) -> str:
        return f"{self.name}, {self.country}" if self.country else self.name


class GeocodingService(HttpService):
    """Nominatim client for place lookup and autocomplete."""

    SERVICE_NAME = "Geocoding service"

    # Queries shorter than this do not trigger suggestions
    MIN_SUGGESTION_LENGTH = 2
    DEFAULT_SUGGESTION_LIMIT = 5

    @property
    def search_url(self) -> str:
        return f"{self.config.geocoder_url}/search"

    def geocode(self, query: str) -> GeoPoint:
        """
        Resolves a place name to the coordinates of its first match.

        Args:
            query: Free-form place name

        Returns:
            The first match's coordinates

        Raises:
            LookupFailure: If the query is blank or nothing matches
            ServiceUnavailable: If Nominatim cannot be reached
        """
        if not query or not query.strip():
            raise LookupFailure("Location not found: empty query")

        results = self._get_json(
            self.search_url, params={"q": query, "format": "json", "limit": 1}
        )
        if not results:
            raise LookupFailure(f"Location not found: {query}")

        try:
            return GeoPoint(latitude=float(results[0]["lat"]), longitude=float(results[0]["lon"]))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise LookupFailure(f"Could not parse location for: {query}") from e

    def suggest(self, query: str, limit: int = DEFAULT_SUGGESTION_LIMIT) -> list[PlaceSuggestion]:
        """
        Returns autocomplete suggestions for a partial place name.

        Failures are logged and yield an empty list, so a broken suggestion
        request only clears the dropdown.

        Args:
            query: Partial place name
            limit: Maximum number of suggestions

        Returns:
            Up to ``limit`` suggestions, empty for queries under two characters
        """
        if len(query or "") < self.MIN_SUGGESTION_LENGTH:
            return []

        try:
            results = self._get_json(
                self.search_url,
                params={"q": query, "format": "json", "limit": limit, "addressdetails": 1},
            )
        except ServiceUnavailable as e:
            logger.warning("Error fetching suggestions for %r: %s", query, e)
            return []

        suggestions = []
        for item in results or []:
            try:
                suggestions.append(
                    PlaceSuggestion(
                        place_id=str(item["place_id"]),
                        name=item["display_name"],
                        country=(item.get("address") or {}).get("country", ""),
                        point=GeoPoint(latitude=float(item["lat"]), longitude=float(item["lon"])),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed suggestion: %r", item)
        return suggestions
