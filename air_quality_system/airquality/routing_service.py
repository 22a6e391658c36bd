"""
Routing service module for the Air Quality System.

This module contains the RoutingService class, a client of the OSRM route API.
It requests a reference driving route plus alternatives between two points and
normalises the GeoJSON geometries into CandidateRoute objects.
"""

import logging

from .candidate_route import CandidateRoute
from .errors import NoRouteFound
from .geo_point import GeoPoint
from .http_service import HttpService

logger = logging.getLogger(__name__)


class RoutingService(HttpService):
    """OSRM client returning the reference route and its alternatives."""

    SERVICE_NAME = "Routing service"

    PROFILE = "driving"
    DEFAULT_ALTERNATIVES = 3

    def route_url(self, start: GeoPoint, end: GeoPoint) -> str:
        coordinates = f"{start.as_lonlat_string()};{end.as_lonlat_string()}"
        return f"{self.config.router_url}/route/v1/{self.PROFILE}/{coordinates}"

    def get_routes(
        self,
        start: GeoPoint,
        end: GeoPoint,
        alternatives: int = DEFAULT_ALTERNATIVES,
    ) -> list[CandidateRoute]:
        """
        Fetches the reference route and up to ``alternatives`` alternatives.

        Args:
            start: Route origin
            end: Route destination
            alternatives: Maximum number of alternative routes to request

        Returns:
            Routes in service order; index 0 is the reference route

        Raises:
            NoRouteFound: If OSRM reports a non-Ok code or returns no routes
            ServiceUnavailable: If OSRM cannot be reached or answers garbage
        """
        params = {
            "overview": "full",
            "geometries": "geojson",
            "alternatives": alternatives,
        }
        # OSRM reports "no route" as HTTP 400 with a JSON code, so keep error bodies
        data = self._get_json(self.route_url(start, end), params=params, accept_error_body=True)

        code = data.get("code") if isinstance(data, dict) else None
        if code != "Ok":
            message = data.get("message") if isinstance(data, dict) else None
            raise NoRouteFound(message or f"Failed to fetch routes (code: {code})")

        raw_routes = data.get("routes") or []
        if not raw_routes:
            raise NoRouteFound("No routes found between these points")

        routes = []
        for raw in raw_routes[: alternatives + 1]:
            try:
                path = tuple(GeoPoint.from_lonlat(pair) for pair in raw["geometry"]["coordinates"])
                routes.append(CandidateRoute(path=path, length_meters=float(raw["distance"])))
            except (KeyError, IndexError, TypeError, ValueError):
                logger.warning("Skipping malformed route in OSRM response")

        if not routes:
            raise NoRouteFound("No routes found between these points")

        logger.info(
            "Found %d route(s): %s km",
            len(routes),
            ", ".join(f"{route.length_km:.2f}" for route in routes),
        )
        return routes
