"""
Error types for the Air Quality System.

All failures raised by the service clients and the route evaluator derive from
AirQualityError so that the front end can catch them at the call site and show
an inline message. Input validation problems are reported with ValueError.
"""


class AirQualityError(Exception):
    """Base class for every failure surfaced by the airquality package."""


class LookupFailure(AirQualityError):
    """Geocoding or autocomplete produced no match for the query."""


class NoRouteFound(AirQualityError):
    """The routing service returned no route for the requested pair."""


class NoValidReadings(AirQualityError):
    """Every air-quality sample needed for a result failed or was empty."""


class ServiceUnavailable(AirQualityError):
    """A dependency answered with a non-success status or could not be reached."""
