"""
Tests for RouteQualityEvaluator component.

Tests cover:
- Equivalence classes: reference kept, alternative selected, single route
- Boundary value analysis: 5% AQI improvement and 30% distance increase
- Error scenarios: no routes, every sample failing, unscoreable reference
- Full decision path coverage: greedy, order-dependent alternative scan
"""

import math
from unittest.mock import Mock

import pytest
from airquality.air_quality_service import AirQualityService
from airquality.candidate_route import CandidateRoute
from airquality.errors import NoRouteFound, NoValidReadings
from airquality.geo_point import GeoPoint
from airquality.route_quality_evaluator import RouteQualityEvaluator
from airquality.route_score import RouteScore
from airquality.routing_service import RoutingService

START = GeoPoint(latitude=48.8566, longitude=2.3522)
END = GeoPoint(latitude=45.7640, longitude=4.8357)


class TestRouteQualityEvaluator:
    """Test suite for RouteQualityEvaluator."""

    @pytest.fixture
    def categories(self):
        """Fixture providing the point → AQI category lookup used by the air service mock."""
        return {}

    @pytest.fixture
    def routing_service(self):
        """Fixture providing a mocked RoutingService."""
        return Mock(spec=RoutingService)

    @pytest.fixture
    def air_service(self, categories):
        """Fixture providing a mocked AirQualityService answering from the lookup."""
        service = Mock(spec=AirQualityService)
        service.sample_category.side_effect = lambda point: categories[point]
        return service

    @pytest.fixture
    def evaluator(self, routing_service, air_service):
        """Fixture providing a RouteQualityEvaluator with mocked services."""
        return RouteQualityEvaluator(routing_service, air_service)

    @pytest.fixture
    def make_route(self, categories):
        """
        Fixture providing a route factory.

        Each route gets 7 distinct vertices, so each vertex is one sampling
        point, and the given categories are registered for those vertices.
        """
        counter = iter(range(1000))

        def _make(length_km, *route_categories):
            route_id = next(counter)
            path = tuple(GeoPoint(latitude=float(route_id), longitude=float(i)) for i in range(7))
            categories.update(dict(zip(path, route_categories)))
            return CandidateRoute(path=path, length_meters=length_km * 1000)
        return _make

    # ==================== Equivalence Classes ====================

    def test_cleaner_alternative_selected(self, evaluator, routing_service, make_route):
        """Equivalence class: 2.8 vs 3.0 (6.7% better), 25% longer → selected."""
        reference = make_route(100, 3, 3, 3, 3, 3, 3, 3)
        alternative = make_route(125, 3, None, 3, 3, None, 2, 3)
        routing_service.get_routes.return_value = [reference, alternative]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is alternative
        assert selection.selected_index == 1
        assert selection.average_aqi == pytest.approx(2.8)
        assert selection.distance_km == 125.0
        assert selection.reference_aqi == pytest.approx(3.0)
        assert selection.scores[1].is_selected is True
        assert selection.scores[0].is_selected is False

    def test_marginal_alternative_rejected(self, evaluator, routing_service, make_route):
        """Equivalence class: 20/7 ≈ 2.857 vs 3.0 (4.8% better) → reference kept."""
        reference = make_route(100, 3, 3, 3, 3, 3, 3, 3)
        alternative = make_route(100, 3, 3, 3, 3, 3, 3, 2)
        routing_service.get_routes.return_value = [reference, alternative]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is reference
        assert selection.selected_index == 0
        assert selection.average_aqi == pytest.approx(3.0)

    def test_single_route(self, evaluator, routing_service, make_route):
        """Equivalence class: One route → its own average and 0% increase."""
        only = make_route(80, 2, 2, 3, 3, 2, 2, 2)
        routing_service.get_routes.return_value = [only]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is only
        assert selection.average_aqi == pytest.approx(16 / 7)
        assert selection.distance_increase_pct == 0.0
        assert selection.total_routes == 1

    def test_requests_three_alternatives(self, evaluator, routing_service, make_route):
        routing_service.get_routes.return_value = [make_route(100, *[1] * 7)]

        evaluator.select_cleanest_route(START, END)

        routing_service.get_routes.assert_called_once_with(START, END, alternatives=3)

    def test_seven_samples_per_route(self, evaluator, routing_service, air_service, make_route):
        """Every route is sampled at 7 points."""
        routing_service.get_routes.return_value = [
            make_route(100, *[3] * 7),
            make_route(110, *[2] * 7),
            make_route(120, *[1] * 7),
        ]

        selection = evaluator.select_cleanest_route(START, END)

        assert air_service.sample_category.call_count == 21
        assert all(len(score.readings) == 7 for score in selection.scores)

    def test_distance_is_rounded_to_two_decimals(self, evaluator, routing_service, make_route):
        routing_service.get_routes.return_value = [make_route(123.456789, *[1] * 7)]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.distance_km == 123.46

    # ==================== Boundary Value Analysis ====================

    def test_qualifies_with_spec_example(self, evaluator):
        """Boundary: 2.8 against 3.0 at 25% longer qualifies; 2.9 does not."""
        assert evaluator.qualifies(self._score(2.8, 0.25), 3.0) is True
        assert evaluator.qualifies(self._score(2.9, 0.25), 3.0) is False
        assert evaluator.qualifies(self._score(2.9, 0.0), 3.0) is False

    def test_exactly_five_percent_is_not_enough(self, evaluator):
        """Boundary: The improvement must be strictly below 95% of the best."""
        assert evaluator.qualifies(self._score(1.9, 0.0), 2.0) is False

    def test_exactly_thirty_percent_longer_qualifies(self, evaluator, routing_service, make_route):
        """Boundary: A 30% distance increase is still allowed."""
        reference = make_route(100, *[3] * 7)
        alternative = make_route(130, *[1] * 7)
        routing_service.get_routes.return_value = [reference, alternative]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is alternative
        assert selection.distance_increase_pct == pytest.approx(0.30)

    def test_over_thirty_percent_longer_rejected(self, evaluator, routing_service, make_route):
        """Boundary: 31% longer is rejected even with the best possible AQI."""
        reference = make_route(100, *[5] * 7)
        alternative = make_route(131, *[1] * 7)
        routing_service.get_routes.return_value = [reference, alternative]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is reference

    def test_zero_aqi_too_long_never_selected(self, evaluator):
        """Boundary: An AQI of zero does not offset a >30% detour."""
        assert evaluator.qualifies(self._score(0.0, 0.31), 3.0) is False

    def test_shorter_alternative_can_be_selected(self, evaluator, routing_service, make_route):
        """Edge case: A negative distance increase is within the limit."""
        reference = make_route(100, *[4] * 7)
        alternative = make_route(90, *[2] * 7)
        routing_service.get_routes.return_value = [reference, alternative]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is alternative
        assert selection.distance_increase_pct == pytest.approx(-0.1)

    # ==================== Decision Path Coverage ====================

    def test_later_alternative_compared_to_current_best(self, evaluator, routing_service, make_route):
        """Decision path: 17/7 beats the reference but not 95% of the current best (2.5)."""
        reference = make_route(100, *[3] * 7)
        first = make_route(110, 3, 2, None, None, None, None, None)
        second = make_route(105, 3, 3, 3, 2, 2, 2, 2)
        routing_service.get_routes.return_value = [reference, first, second]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is first
        assert selection.average_aqi == pytest.approx(2.5)
        assert selection.scores[2].average_aqi == pytest.approx(17 / 7)
        assert selection.scores[2].is_selected is False

    def test_later_alternative_replaces_current_best(self, evaluator, routing_service, make_route):
        """Decision path: Each qualifying improvement replaces the running best."""
        reference = make_route(100, *[4] * 7)
        first = make_route(110, *[3] * 7)
        second = make_route(120, *[2] * 7)
        routing_service.get_routes.return_value = [reference, first, second]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is second
        assert [score.is_selected for score in selection.scores] == [False, False, True]

    def test_too_long_alternative_skipped_then_next_selected(self, evaluator, routing_service, make_route):
        """Decision path: A rejected detour does not stop the scan."""
        reference = make_route(100, *[4] * 7)
        detour = make_route(200, *[1] * 7)
        modest = make_route(120, *[3] * 7)
        routing_service.get_routes.return_value = [reference, detour, modest]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is modest

    def test_unscoreable_alternative_skipped(self, evaluator, routing_service, make_route):
        """Decision path: An alternative whose samples all failed is never selected."""
        reference = make_route(100, *[3] * 7)
        broken = make_route(100, *[None] * 7)
        routing_service.get_routes.return_value = [reference, broken]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is reference
        assert selection.scores[1].average_aqi is None

    def test_unscoreable_reference_falls_back_to_alternative(self, evaluator, routing_service, make_route):
        """Decision path: Failed reference → any qualifying-distance alternative wins."""
        reference = make_route(100, *[None] * 7)
        alternative = make_route(110, *[4] * 7)
        routing_service.get_routes.return_value = [reference, alternative]

        selection = evaluator.select_cleanest_route(START, END)

        assert selection.route is alternative
        assert selection.reference_aqi is None
        assert selection.reference_distance_km == 100.0

    # ==================== Error Scenarios ====================

    def test_every_sample_fails(self, evaluator, routing_service, make_route):
        """Error scenario: No valid reading on any route → NoValidReadings."""
        routing_service.get_routes.return_value = [
            make_route(100, *[None] * 7),
            make_route(110, *[None] * 7),
        ]

        with pytest.raises(NoValidReadings):
            evaluator.select_cleanest_route(START, END)

    def test_unscoreable_reference_and_only_long_alternatives(self, evaluator, routing_service, make_route):
        """Error scenario: Failed reference and no alternative within 30% → NoValidReadings."""
        routing_service.get_routes.return_value = [
            make_route(100, *[None] * 7),
            make_route(150, *[1] * 7),
        ]

        with pytest.raises(NoValidReadings):
            evaluator.select_cleanest_route(START, END)

    def test_no_route_found_propagates(self, evaluator, routing_service, air_service):
        """Error scenario: Routing failure is terminal and nothing is sampled."""
        routing_service.get_routes.side_effect = NoRouteFound("No routes found")

        with pytest.raises(NoRouteFound):
            evaluator.select_cleanest_route(START, END)
        air_service.sample_category.assert_not_called()

    # ==================== Sampling ====================

    def test_sample_route_keeps_offset_order(self, evaluator, make_route):
        route = make_route(100, 1, 2, 3, 4, 5, None, 1)

        samples = evaluator.sample_route(route)

        assert [sample.aqi_category for sample in samples] == [1, 2, 3, 4, 5, None, 1]
        assert [sample.point for sample in samples] == list(route.path)

    def test_samples_share_one_session(self, routing_service, config, session, make_response):
        """Concurrent samples all go through the air service's single session."""
        pm25_by_longitude = {0.0: 5.0, 1.0: 20.0, 2.0: 40.0, 3.0: 100.0, 4.0: 500.0, 5.0: None, 6.0: 5.0}

        def get(url, params=None, timeout=None):
            pm25 = pm25_by_longitude[params["longitude"]]
            return make_response({"hourly": {"time": ["2024-01-01T00:00"], "pm2_5": [pm25]}})

        session.get.side_effect = get
        evaluator = RouteQualityEvaluator(routing_service, AirQualityService(config=config, session=session))
        path = tuple(GeoPoint(latitude=0.0, longitude=float(i)) for i in range(7))

        samples = evaluator.sample_route(CandidateRoute(path=path, length_meters=1000))

        assert [sample.aqi_category for sample in samples] == [1, 2, 3, 4, 5, None, 1]
        assert session.get.call_count == 7
        assert session.headers["User-Agent"] == config.user_agent

    def test_sample_empty_route(self, evaluator, air_service):
        assert evaluator.sample_route(CandidateRoute(path=(), length_meters=0)) == ()
        air_service.sample_category.assert_not_called()

    def test_distance_increase_with_zero_length_reference(self):
        zero = CandidateRoute(path=(), length_meters=0)
        longer = CandidateRoute(path=(), length_meters=10)
        assert RouteQualityEvaluator.distance_increase(zero, zero) == 0.0
        assert RouteQualityEvaluator.distance_increase(longer, zero) == math.inf

    # ==================== Persistent Logging ====================

    def test_persistent_log_written(self, evaluator, routing_service, make_route, tmp_path, monkeypatch):
        monkeypatch.setattr(RouteQualityEvaluator, "LOG_DIR", tmp_path / "logs")
        monkeypatch.setattr(RouteQualityEvaluator, "LOG_FILE", tmp_path / "logs" / "route_log.log")
        routing_service.get_routes.return_value = [
            make_route(100, *[3] * 7),
            make_route(120, *[2] * 7),
        ]

        evaluator.select_cleanest_route(START, END, enable_persistent_logging=True)

        content = (tmp_path / "logs" / "route_log.log").read_text(encoding="utf-8")
        assert content.startswith("# Cleanest Route Log")
        assert "alternative 1" in content
        assert "+20.0% km, 33.3% cleaner" in content

    def test_persistent_log_shorter_alternative(self, evaluator, routing_service, make_route, tmp_path, monkeypatch):
        """Edge case: A shorter alternative is logged with a minus sign only."""
        monkeypatch.setattr(RouteQualityEvaluator, "LOG_DIR", tmp_path / "logs")
        monkeypatch.setattr(RouteQualityEvaluator, "LOG_FILE", tmp_path / "logs" / "route_log.log")
        routing_service.get_routes.return_value = [
            make_route(100, *[4] * 7),
            make_route(90, *[2] * 7),
        ]

        evaluator.select_cleanest_route(START, END, enable_persistent_logging=True)

        content = (tmp_path / "logs" / "route_log.log").read_text(encoding="utf-8")
        assert "-10.0% km, 50.0% cleaner" in content
        assert "+-" not in content

    def test_no_log_by_default(self, evaluator, routing_service, make_route, tmp_path, monkeypatch):
        monkeypatch.setattr(RouteQualityEvaluator, "LOG_DIR", tmp_path / "logs")
        monkeypatch.setattr(RouteQualityEvaluator, "LOG_FILE", tmp_path / "logs" / "route_log.log")
        routing_service.get_routes.return_value = [make_route(100, *[3] * 7)]

        evaluator.select_cleanest_route(START, END)

        assert not (tmp_path / "logs").exists()

    @staticmethod
    def _score(average, increase):
        return RouteScore(
            route=CandidateRoute(path=(), length_meters=0),
            index=1,
            readings=(),
            average_aqi=average,
            distance_increase_pct=increase,
        )
