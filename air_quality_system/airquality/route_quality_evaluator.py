"""
Route quality evaluator module for the Air Quality System.

This module contains the RouteQualityEvaluator class, the core of the cleanest
route feature. It requests a reference route and alternatives between two
points, samples air quality at fixed fractional positions along each route,
averages the samples into a per-route score, and selects a route with a greedy
scan that trades distance increase against air-quality improvement.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from .air_quality_service import AirQualityService
from .candidate_route import SAMPLE_OFFSETS, CandidateRoute
from .errors import NoValidReadings
from .geo_point import GeoPoint
from .route_score import RouteScore, average_category
from .route_selection import RouteSelection
from .routing_service import RoutingService
from .sample_reading import SampleReading

logger = logging.getLogger(__name__)


class RouteQualityEvaluator:
    """
    Selects the cleanest of the candidate routes between two points.

    Selection rule: starting from the reference route (the first route of the
    routing response), alternatives are scanned in response order and an
    alternative replaces the current best if and only if its average AQI is
    below 95% of the current best's average AND it is at most 30% longer than
    the reference route. Each alternative is compared against the current best
    only, never re-compared against the reference.

    Routes are evaluated one after another; the samples of a single route are
    fetched concurrently and all of them are awaited before averaging.
    """

    SAMPLE_OFFSETS = SAMPLE_OFFSETS

    # Alternative must have an average below 95% of the current best (5% better)
    AQI_IMPROVEMENT_FACTOR = 0.95

    # Alternative may be at most 30% longer than the reference route
    MAX_DISTANCE_INCREASE = 0.30

    # Alternatives requested in addition to the reference route
    MAX_ALTERNATIVES = 3

    # Logging configuration
    LOG_DIR = Path("logs")
    LOG_FILE = LOG_DIR / "route_log.log"

    def __init__(self, routing_service: RoutingService, air_service: AirQualityService) -> None:
        self.routing_service = routing_service
        self.air_service = air_service

    def sample_route(self, route: CandidateRoute) -> tuple[SampleReading, ...]:
        """
        Samples the AQI category at each sampling point of a route.

        All point requests are issued concurrently; the call returns once every
        request has settled. Failed points are kept as absent readings.

        Args:
            route: Route to sample

        Returns:
            One reading per sampling point, in offset order
        """
        points = route.sample_points(self.SAMPLE_OFFSETS)
        if not points:
            return ()

        # Workers share the air service's session
        with ThreadPoolExecutor(max_workers=len(points)) as executor:
            categories = list(executor.map(self.air_service.sample_category, points))

        return tuple(
            SampleReading(point=point, aqi_category=category)
            for point, category in zip(points, categories)
        )

    def score_route(self, route: CandidateRoute, index: int, reference: CandidateRoute) -> RouteScore:
        """
        Samples a route and scores it against the reference route.

        Args:
            route: Route to score
            index: Position of the route in the routing response
            reference: The reference route, used for the distance increase

        Returns:
            The route's score; average_aqi is None if every sample failed
        """
        readings = self.sample_route(route)
        return RouteScore(
            route=route,
            index=index,
            readings=readings,
            average_aqi=average_category(readings),
            distance_increase_pct=self.distance_increase(route, reference),
        )

    @staticmethod
    def distance_increase(route: CandidateRoute, reference: CandidateRoute) -> float:
        """(route length - reference length) / reference length, as a fraction."""
        if reference.length_meters == 0:
            return 0.0 if route.length_meters == 0 else math.inf
        return (route.length_meters - reference.length_meters) / reference.length_meters

    def qualifies(self, candidate: RouteScore, best_aqi: float) -> bool:
        """
        Checks whether an alternative replaces the current best route.

        Args:
            candidate: Score of the alternative
            best_aqi: Average AQI of the current best; infinity if the
                      reference route could not be scored

        Returns:
            True if the alternative is at least 5% cleaner than the current best
            and at most 30% longer than the reference
        """
        if candidate.average_aqi is None:
            return False
        return (
            candidate.average_aqi < best_aqi * self.AQI_IMPROVEMENT_FACTOR
            and candidate.distance_increase_pct <= self.MAX_DISTANCE_INCREASE
        )

    def select_cleanest_route(
        self,
        start: GeoPoint,
        end: GeoPoint,
        enable_persistent_logging: bool = False,
    ) -> RouteSelection:
        """
        Computes the cleanest route between two geocoded points.

        Args:
            start: Route origin
            end: Route destination
            enable_persistent_logging: If True, append the selection to the
                                       persistent route log file

        Returns:
            The selected route with its average AQI and distance

        Raises:
            NoRouteFound: If the routing service returned no route
            NoValidReadings: If no route could be selected because no sample
                             on any eligible route succeeded
            ServiceUnavailable: If the routing service could not be reached
        """
        # Step 1: Candidate routes (reference first)
        routes = self.routing_service.get_routes(start, end, alternatives=self.MAX_ALTERNATIVES)
        reference = routes[0]
        if len(routes) <= 1:
            logger.info("Only one route found; alternatives need places farther apart")

        # Step 2: Reference route score initialises the running best
        scores = [self.score_route(reference, 0, reference)]
        best: Optional[RouteScore] = scores[0] if scores[0].is_scoreable else None
        best_aqi = best.average_aqi if best is not None else math.inf
        if best is None:
            logger.warning("No valid readings on the reference route")

        # Step 3: Greedy scan over the alternatives, in response order
        for index, route in enumerate(routes[1:], start=1):
            score = self.score_route(route, index, reference)
            scores.append(score)

            if not score.is_scoreable:
                logger.info("Route %d: no valid readings, skipped", index)
                continue

            logger.info(
                "Route %d: distance=%.2fkm, AQI=%.2f, increase=%.1f%%",
                index,
                route.length_km,
                score.average_aqi,
                score.distance_increase_pct * 100,
            )
            if self.qualifies(score, best_aqi):
                best = score
                best_aqi = score.average_aqi
                logger.info("New cleanest route selected: route %d", index)

        if best is None:
            raise NoValidReadings("No valid air-quality readings on any route")

        # Step 4: Result
        best.is_selected = True
        selection = RouteSelection(
            route=best.route,
            average_aqi=best.average_aqi,
            distance_km=round(best.route.length_km, 2),
            reference_distance_km=round(reference.length_km, 2),
            reference_aqi=scores[0].average_aqi,
            scores=scores,
            selected_index=best.index,
        )

        if enable_persistent_logging:
            self._log_selection(selection)

        return selection

    def _ensure_log_file_exists(self) -> None:
        """Create the log directory and the log file header if needed."""
        self.LOG_DIR.mkdir(exist_ok=True)

        if not self.LOG_FILE.exists():
            with open(self.LOG_FILE, "w", encoding="utf-8") as f:
                f.write("# Cleanest Route Log\n")
                f.write("# Format: [TIMESTAMP] ROUTE | DISTANCE | AQI | VS SHORTEST | ROUTES\n")
                f.write("# " + "=" * 80 + "\n\n")

    def _log_selection(self, selection: RouteSelection) -> None:
        """
        Append a selection to the persistent log file.

        Log-file I/O errors are reported through the module logger and do not
        affect the selection.
        """
        route_str = "shortest" if selection.is_reference else f"alternative {selection.selected_index}"

        improvement = selection.aqi_improvement_pct
        if selection.is_reference:
            comparison_str = "kept shortest"
        elif improvement is None:
            comparison_str = f"{selection.distance_increase_pct * 100:+.1f}% km, shortest unscored"
        else:
            comparison_str = (
                f"{selection.distance_increase_pct * 100:+.1f}% km, "
                f"{improvement * 100:.1f}% cleaner"
            )

        try:
            self._ensure_log_file_exists()
            with open(self.LOG_FILE, "a", encoding="utf-8") as f:
                timestamp_str = selection.timestamp.strftime("%Y-%m-%d %H:%M:%S")
                f.write(
                    f"[{timestamp_str}] {route_str:14s} | "
                    f"{selection.distance_km:8.2f} km | "
                    f"AQI {selection.average_aqi:4.2f} | "
                    f"{comparison_str:32s} | "
                    f"{selection.total_routes} route(s)\n"
                )
        except OSError as e:
            logger.warning("Could not write route log %s: %s", self.LOG_FILE, e)
