"""
Reverse Geocoder

Resolves a coordinate to a human-readable address through a
Nominatim-compatible JSON endpoint. Optional collaborator: callers must
tolerate GeocodeUnavailable and fall back to a coordinate placeholder.
"""
from typing import Dict, Optional

import requests
from pydantic import BaseModel, Field

from config.settings import settings
from src.canvasser.exceptions import GeocodeUnavailable
from src.canvasser.utils.logger import get_logger

logger = get_logger(__name__)


class GeocodeResult(BaseModel):
    """
    Address resolved for a coordinate.

    Attributes:
        address: Full formatted address
        street_address: "<number> <street>" when both parts are known
        components: Raw address components keyed by type
    """

    address: str
    street_address: Optional[str] = None
    components: Dict[str, str] = Field(default_factory=dict)


def placeholder_address(lat: float, lng: float) -> str:
    """Coordinate-derived address used when geocoding is unavailable."""
    return f"Location: {lat:.6f}, {lng:.6f}"


class ReverseGeocoder:
    """
    HTTP reverse geocoder.

    Wraps a requests session; every transport, HTTP or payload failure is
    reported as GeocodeUnavailable.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the geocoder.

        Args:
            base_url: Override the default endpoint (for testing)
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with each request
        """
        self.base_url = base_url or settings.geocoder_url
        self.timeout = timeout or settings.geocoder_timeout_seconds
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent or settings.geocoder_user_agent})
        logger.info("reverse_geocoder_initialized", base_url=self.base_url)

    def reverse_geocode(self, lat: float, lng: float) -> GeocodeResult:
        """
        Look up the address at a coordinate.

        Args:
            lat: Latitude
            lng: Longitude

        Returns:
            GeocodeResult

        Raises:
            GeocodeUnavailable: On any failure or when no address is found
        """
        params = {"lat": lat, "lon": lng, "format": "jsonv2", "addressdetails": 1}

        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.warning("reverse_geocode_request_failed", lat=lat, lng=lng, error=str(e))
            raise GeocodeUnavailable(f"Geocoding request failed: {e}") from e
        except ValueError as e:
            logger.warning("reverse_geocode_invalid_json", lat=lat, lng=lng)
            raise GeocodeUnavailable("Geocoder returned invalid JSON") from e

        address = payload.get("display_name") if isinstance(payload, dict) else None
        if not address:
            logger.info("reverse_geocode_no_result", lat=lat, lng=lng)
            raise GeocodeUnavailable(f"No address found for {lat}, {lng}")

        components = {
            key: str(value)
            for key, value in (payload.get("address") or {}).items()
        }
        number = components.get("house_number")
        street = components.get("road")
        street_address = f"{number} {street}" if number and street else None

        logger.debug("reverse_geocode_resolved", lat=lat, lng=lng, address=address)
        return GeocodeResult(address=address, street_address=street_address, components=components)
