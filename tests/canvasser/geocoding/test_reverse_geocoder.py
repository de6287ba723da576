"""
Tests for the Reverse Geocoder

HTTP is mocked at the requests session.
"""
from unittest.mock import Mock, patch

import pytest
import requests

from src.canvasser.exceptions import GeocodeUnavailable
from src.canvasser.geocoding.reverse_geocoder import ReverseGeocoder, placeholder_address


def response(payload=None, status_error=None, json_error=None):
    mock_response = Mock()
    if status_error:
        mock_response.raise_for_status.side_effect = status_error
    if json_error:
        mock_response.json.side_effect = json_error
    else:
        mock_response.json.return_value = payload
    return mock_response


@pytest.fixture
def geocoder():
    return ReverseGeocoder(base_url="https://geo.test/reverse", timeout=2, user_agent="canvasser-tests")


class TestReverseGeocoder:
    """Tests for ReverseGeocoder."""

    def test_initialization(self, geocoder):
        assert geocoder.base_url == "https://geo.test/reverse"
        assert geocoder.timeout == 2
        assert geocoder.session.headers["User-Agent"] == "canvasser-tests"

    def test_resolves_address(self, geocoder):
        payload = {
            "display_name": "42, Elm Street, Salt Lake City, Utah, 84101, United States",
            "address": {"house_number": "42", "road": "Elm Street", "city": "Salt Lake City"},
        }
        with patch.object(geocoder.session, "get", return_value=response(payload)) as mock_get:
            result = geocoder.reverse_geocode(40.76, -111.89)

        mock_get.assert_called_once()
        _, kwargs = mock_get.call_args
        assert kwargs["params"]["lat"] == 40.76
        assert kwargs["params"]["lon"] == -111.89
        assert kwargs["timeout"] == 2

        assert result.address.startswith("42, Elm Street")
        assert result.street_address == "42 Elm Street"
        assert result.components["city"] == "Salt Lake City"

    def test_street_address_needs_number(self, geocoder):
        payload = {"display_name": "Elm Street, Salt Lake City", "address": {"road": "Elm Street"}}
        with patch.object(geocoder.session, "get", return_value=response(payload)):
            result = geocoder.reverse_geocode(40.76, -111.89)
        assert result.street_address is None

    def test_no_result(self, geocoder):
        with patch.object(geocoder.session, "get", return_value=response({"error": "Unable to geocode"})):
            with pytest.raises(GeocodeUnavailable):
                geocoder.reverse_geocode(0.0, 0.0)

    def test_http_error(self, geocoder):
        error = requests.HTTPError("503 Service Unavailable")
        with patch.object(geocoder.session, "get", return_value=response(status_error=error)):
            with pytest.raises(GeocodeUnavailable):
                geocoder.reverse_geocode(40.76, -111.89)

    def test_timeout(self, geocoder):
        with patch.object(geocoder.session, "get", side_effect=requests.Timeout("slow")):
            with pytest.raises(GeocodeUnavailable):
                geocoder.reverse_geocode(40.76, -111.89)

    def test_invalid_json(self, geocoder):
        with patch.object(geocoder.session, "get", return_value=response(json_error=ValueError("bad"))):
            with pytest.raises(GeocodeUnavailable):
                geocoder.reverse_geocode(40.76, -111.89)


def test_placeholder_address():
    assert placeholder_address(40.7608, -111.891) == "Location: 40.760800, -111.891000"
