"""
Configuration module for the Air Quality System.

Service endpoints, the WAQI token, the HTTP timeout and the User-Agent are read
from environment variables. A ``.env`` file in the working directory is loaded
first, so local settings can live there instead of the shell environment.
Explicit values passed to ``AirQualityConfig.from_env`` take precedence over
the environment.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org"
DEFAULT_ROUTER_URL = "https://router.project-osrm.org"
DEFAULT_AIR_API_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"
DEFAULT_WAQI_URL = "https://api.waqi.info"
DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_USER_AGENT = "air-quality-system/0.1"


@dataclass(frozen=True)
class AirQualityConfig:
    """
    Settings shared by the service clients.

    Attributes:
        geocoder_url: Base URL of the Nominatim instance
        router_url: Base URL of the OSRM instance
        air_api_url: Full URL of the Open-Meteo air-quality endpoint
        waqi_url: Base URL of the WAQI API
        waqi_token: WAQI API token, None if station features are unavailable
        timeout: Per-request timeout in seconds
        user_agent: User-Agent header sent with every request
    """

    geocoder_url: str = DEFAULT_GEOCODER_URL
    router_url: str = DEFAULT_ROUTER_URL
    air_api_url: str = DEFAULT_AIR_API_URL
    waqi_url: str = DEFAULT_WAQI_URL
    waqi_token: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls, **overrides) -> "AirQualityConfig":
        """
        Builds a configuration from the environment.

        Args:
            **overrides: Field values that replace the environment; None values
                         are ignored

        Returns:
            A populated AirQualityConfig
        """
        values = {
            "geocoder_url": os.getenv("AIRQUALITY_GEOCODER_URL", DEFAULT_GEOCODER_URL),
            "router_url": os.getenv("AIRQUALITY_ROUTER_URL", DEFAULT_ROUTER_URL),
            "air_api_url": os.getenv("AIRQUALITY_AIR_API_URL", DEFAULT_AIR_API_URL),
            "waqi_url": os.getenv("AIRQUALITY_WAQI_URL", DEFAULT_WAQI_URL),
            "waqi_token": os.getenv("WAQI_TOKEN") or None,
            "timeout": _parse_timeout(os.getenv("AIRQUALITY_HTTP_TIMEOUT")),
            "user_agent": os.getenv("AIRQUALITY_USER_AGENT", DEFAULT_USER_AGENT),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})

        for key in ("geocoder_url", "router_url", "waqi_url"):
            values[key] = values[key].rstrip("/")

        return cls(**values)


def _parse_timeout(raw: Optional[str]) -> float:
    """Parses the timeout variable, falling back to the default on bad input."""
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        timeout = float(raw)
    except ValueError:
        logger.warning("Invalid AIRQUALITY_HTTP_TIMEOUT %r, using %s", raw, DEFAULT_TIMEOUT_SECONDS)
        return DEFAULT_TIMEOUT_SECONDS
    if timeout <= 0:
        logger.warning("Non-positive AIRQUALITY_HTTP_TIMEOUT %r, using %s", raw, DEFAULT_TIMEOUT_SECONDS)
        return DEFAULT_TIMEOUT_SECONDS
    return timeout
