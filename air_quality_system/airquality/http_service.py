"""
HTTP service base module for the Air Quality System.

This module contains the HttpService base class shared by the clients of the
external APIs (geocoding, routing, air quality, monitoring stations). It owns
the requests session and the configuration, and turns transport failures and
non-success statuses into ServiceUnavailable.
"""

import logging
from typing import Any, Optional

import requests

from .config import AirQualityConfig
from .errors import ServiceUnavailable

logger = logging.getLogger(__name__)


class HttpService:
    """
    Base class for the external API clients.

    Subclasses set SERVICE_NAME, which is used in log and error messages.
    A requests.Session can be injected, which is how tests replace the network.
    """

    SERVICE_NAME = "HTTP service"

    def __init__(
        self,
        config: Optional[AirQualityConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or AirQualityConfig.from_env()
        # Worker threads share this session and only send GET requests through it;
        # headers are set here, before any worker starts
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.config.user_agent})

    def _get_json(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        accept_error_body: bool = False,
    ) -> Any:
        """
        Performs a GET request and decodes the JSON body.

        Args:
            url: Absolute URL to request
            params: Query parameters
            accept_error_body: If True, a non-success status whose body is
                               valid JSON is returned instead of raising, so
                               callers can read API-specific error codes

        Returns:
            The decoded JSON body

        Raises:
            ServiceUnavailable: On transport errors, undecodable bodies, or
                                non-success statuses
        """
        try:
            response = self.session.get(url, params=params, timeout=self.config.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("%s: request to %s failed: %s", self.SERVICE_NAME, url, e)
            raise ServiceUnavailable(f"{self.SERVICE_NAME} could not be reached: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            if accept_error_body and data is not None:
                return data
            reason = data.get("reason") if isinstance(data, dict) else None
            logger.error("%s: HTTP %s from %s", self.SERVICE_NAME, response.status_code, url)
            raise ServiceUnavailable(
                reason or f"{self.SERVICE_NAME} returned HTTP {response.status_code}"
            )

        if data is None:
            raise ServiceUnavailable(f"{self.SERVICE_NAME} returned an invalid response")
        return data
