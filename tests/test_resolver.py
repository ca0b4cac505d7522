# tests/test_resolver.py
import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from venue_search.exceptions import GeocodingError, LocationUnavailableError
from venue_search.geocoding.cities import UK_CITIES, match_cities
from venue_search.geocoding.resolver import CoordinateResolver
from venue_search.models import Coordinate, GeocodeCandidate, ResolutionFailure

LONDON = Coordinate(latitude=51.5074, longitude=-0.1278)
MANCHESTER = Coordinate(latitude=53.4808, longitude=-2.2426)


def _candidate(lat, lng, address="Somewhere, United Kingdom"):
    return GeocodeCandidate(latitude=lat, longitude=lng, formatted_address=address)


class TestCityTable:

    def test_ten_uk_cities(self):
        assert len(UK_CITIES) == 10
        assert UK_CITIES[0].name == "London"
        assert UK_CITIES[0].coordinate == LONDON

    def test_substring_match(self):
        assert [c.name for c in match_cities("ches")] == ["Manchester"]

    def test_bidirectional_match(self):
        assert match_cities("Soho, London") == []
        assert [c.name for c in match_cities("Soho, London", bidirectional=True)] == ["London"]

    def test_address_match(self):
        names = [c.name for c in match_cities("scotland", include_address=True)]
        assert names == ["Glasgow", "Edinburgh"]


@pytest.mark.asyncio
class TestResolve:

    async def test_device_position_takes_priority(self, resolver, mock_geocoder):
        outcome = await resolver.resolve("Manchester", device_position=LONDON)
        assert outcome == LONDON
        mock_geocoder.geocode.assert_not_called()

    async def test_invalid_device_position_falls_back_to_text(self, resolver, mock_geocoder):
        mock_geocoder.geocode.return_value = [_candidate(53.48, -2.24)]
        outcome = await resolver.resolve("Canal Street", device_position={"latitude": 999, "longitude": 0})
        assert outcome == Coordinate(latitude=53.48, longitude=-2.24)

    async def test_short_text_uses_city_table(self, resolver, mock_geocoder):
        outcome = await resolver.resolve("lon")
        assert outcome == LONDON
        mock_geocoder.geocode.assert_not_called()

    async def test_short_text_without_city_calls_geocoder(self, resolver, mock_geocoder):
        mock_geocoder.geocode.return_value = [_candidate(51.75, -1.26, "Oxford")]
        outcome = await resolver.resolve("OX1")
        assert outcome == Coordinate(latitude=51.75, longitude=-1.26)
        mock_geocoder.geocode.assert_awaited_once_with("OX1", "GB")

    async def test_geocoder_first_candidate_wins(self, resolver, mock_geocoder):
        mock_geocoder.geocode.return_value = [
            _candidate(53.4774, -2.2356, "Canal Street, Manchester"),
            _candidate(52.0, -1.0, "Canal Street, Elsewhere"),
        ]
        outcome = await resolver.resolve("Canal Street, Manchester")
        assert outcome == Coordinate(latitude=53.4774, longitude=-2.2356)
        assert mock_geocoder.geocode.await_count == 1

    async def test_geocoder_failure_falls_back_to_cities(self, resolver, mock_geocoder):
        mock_geocoder.geocode.side_effect = GeocodingError("Mapbox answered HTTP 503")
        outcome = await resolver.resolve("Central Manchester")
        assert outcome == MANCHESTER

    async def test_empty_geocoder_result_falls_back_to_cities(self, resolver, mock_geocoder):
        outcome = await resolver.resolve("Edinburgh")
        assert outcome == Coordinate(latitude=55.9533, longitude=-3.1883)
        mock_geocoder.geocode.assert_awaited_once()

    async def test_unresolvable_text_is_a_failure(self, resolver, mock_geocoder):
        mock_geocoder.geocode.side_effect = GeocodingError("unreachable")
        outcome = await resolver.resolve("Atlantis Xyz")
        assert isinstance(outcome, ResolutionFailure)
        assert "Atlantis" in outcome.reason

    async def test_no_input_is_a_failure(self, resolver, mock_geocoder):
        outcome = await resolver.resolve(None, None)
        assert isinstance(outcome, ResolutionFailure)
        mock_geocoder.geocode.assert_not_called()

    async def test_without_geocoder_uses_cities(self):
        resolver = CoordinateResolver(geocoder=None)
        assert await resolver.resolve("Greater London") == LONDON


@pytest.mark.asyncio
class TestDeviceLocation:

    async def test_provider_position(self):
        provider = MagicMock()
        provider.current_position = AsyncMock(return_value=LONDON)
        resolver = CoordinateResolver(device_provider=provider)
        assert await resolver.locate_device() == LONDON

    async def test_provider_failure_means_no_position(self):
        provider = MagicMock()
        provider.current_position = AsyncMock(side_effect=LocationUnavailableError("permission denied"))
        resolver = CoordinateResolver(device_provider=provider)
        assert await resolver.locate_device() is None

    @pytest.mark.parametrize("error", [
        asyncio.TimeoutError(),
        OSError("location service unreachable"),
    ])
    async def test_provider_timeouts_and_os_errors(self, error):
        provider = MagicMock()
        provider.current_position = AsyncMock(side_effect=error)
        resolver = CoordinateResolver(device_provider=provider)
        assert await resolver.locate_device() is None

    async def test_no_provider(self, resolver):
        assert await resolver.locate_device() is None


@pytest.mark.asyncio
class TestSuggest:

    async def test_too_short(self, resolver, mock_geocoder):
        assert await resolver.suggest("Le") == []
        mock_geocoder.geocode.assert_not_called()

    async def test_short_text_lists_cities(self, resolver, mock_geocoder):
        suggestions = await resolver.suggest("lee")
        assert [s.name for s in suggestions] == ["Leeds"]
        mock_geocoder.geocode.assert_not_called()

    async def test_geocoder_candidates(self, resolver, mock_geocoder):
        mock_geocoder.geocode.return_value = [
            GeocodeCandidate(
                latitude=53.4774, longitude=-2.2356,
                formatted_address="Canal Street, Manchester, England, United Kingdom",
                city="Manchester", region="England",
            )
        ]
        [suggestion] = await resolver.suggest("Canal Street")
        assert suggestion.name == "Canal Street, Manchester, England, United Kingdom"
        assert suggestion.city == "Manchester"

    async def test_geocoder_failure_uses_city_addresses(self, resolver, mock_geocoder):
        mock_geocoder.geocode.side_effect = GeocodingError("down")
        suggestions = await resolver.suggest("Wales")
        assert [s.name for s in suggestions] == ["Cardiff"]
