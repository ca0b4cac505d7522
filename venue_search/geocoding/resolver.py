"""Résolution d'un point de référence à partir d'un texte ou d'une position."""
import asyncio
from typing import List, Optional, Protocol, Union

from venue_search.config import settings
from venue_search.exceptions import GeocodingError, LocationUnavailableError
from venue_search.geocoding.cities import UK_CITIES, match_cities
from venue_search.geocoding.clients import Geocoder
from venue_search.logger import logger
from venue_search.models import (
    Coordinate,
    GeocodeCandidate,
    LocationSuggestion,
    ResolutionFailure,
)


class DeviceLocationProvider(Protocol):  # pylint: disable=too-few-public-methods
    """Fournit la position actuelle de l'appareil."""

    async def current_position(self) -> Coordinate:
        """Raises LocationUnavailableError (refus, position indisponible, délai dépassé)."""


class CoordinateResolver:
    """
    Convertit un texte libre ou une position d'appareil en coordonnée.

    Le géocodeur est optionnel : sans lui, ou en cas de panne, la table
    statique des villes sert de repli. Aucune nouvelle tentative n'est faite
    et au plus un appel sortant a lieu par résolution.
    """

    def __init__(
        self,
        geocoder: Optional[Geocoder] = None,
        cities: Optional[List[LocationSuggestion]] = None,
        device_provider: Optional[DeviceLocationProvider] = None,
        country: str = settings.GEOCODE_COUNTRY,
        short_query_length: int = settings.SHORT_LOCATION_QUERY_LENGTH,
        min_suggestion_length: int = settings.MIN_SUGGESTION_LENGTH,
    ):
        self.geocoder = geocoder
        self.cities = cities if cities is not None else UK_CITIES
        self.device_provider = device_provider
        self.country = country
        self.short_query_length = short_query_length
        self.min_suggestion_length = min_suggestion_length

    async def resolve(
        self,
        location_text: Optional[str] = None,
        device_position: Optional[Coordinate] = None,
    ) -> Union[Coordinate, ResolutionFailure]:
        """
        Résout le point de référence d'une recherche.

        Args:
            location_text: Lieu saisi (ville, adresse, code postal)
            device_position: Position actuelle, prioritaire si valide

        Returns:
            La coordonnée, ou ResolutionFailure si aucun point n'a été trouvé
        """
        position = Coordinate.parse(device_position)
        if position is not None:
            return position

        text = (location_text or "").strip()
        if not text:
            return ResolutionFailure(reason="no location supplied")

        if len(text) < self.short_query_length:
            cities = match_cities(text, self.cities)
            if cities:
                logger.debug("Resolved {text!r} from the city table", text=text)
                return cities[0].coordinate

        for candidate in await self._geocode(text):
            coordinate = candidate.coordinate
            if coordinate is not None:
                return coordinate

        cities = match_cities(text, self.cities, bidirectional=True)
        if cities:
            logger.warning(
                "Geocoder gave nothing for {text!r}, falling back to {city}",
                text=text, city=cities[0].name,
            )
            return cities[0].coordinate

        logger.info("Could not resolve location {text!r}", text=text)
        return ResolutionFailure(reason=f"could not resolve {text!r}")

    async def locate_device(self) -> Optional[Coordinate]:
        """Position de l'appareil, ou None en cas d'échec quel qu'il soit."""
        if self.device_provider is None:
            return None
        try:
            position = await self.device_provider.current_position()
        except (LocationUnavailableError, asyncio.TimeoutError, OSError) as e:
            logger.warning("Device location unavailable: {error}", error=e)
            return None
        return Coordinate.parse(position)

    async def suggest(self, text: str) -> List[LocationSuggestion]:
        """
        Propositions de lieux pendant la saisie.

        Texte trop court : aucune proposition. Texte court : villes de la
        table. Sinon : candidats du géocodeur, ou villes dont le nom ou
        l'adresse contient le texte.
        """
        text = (text or "").strip()
        if len(text) < self.min_suggestion_length:
            return []
        if len(text) < self.short_query_length:
            return match_cities(text, self.cities)

        suggestions = [
            self._to_suggestion(candidate)
            for candidate in await self._geocode(text)
            if candidate.coordinate is not None
        ]
        if suggestions:
            return suggestions
        return match_cities(text, self.cities, include_address=True)

    async def _geocode(self, text: str) -> List[GeocodeCandidate]:
        if self.geocoder is None:
            logger.debug("No geocoder configured, skipping lookup for {text!r}", text=text)
            return []
        try:
            return await self.geocoder.geocode(text, self.country)
        except GeocodingError as e:
            logger.warning("Geocoding failed for {text!r}: {error}", text=text, error=e)
            return []

    @staticmethod
    def _to_suggestion(candidate: GeocodeCandidate) -> LocationSuggestion:
        return LocationSuggestion(
            name=candidate.formatted_address or candidate.city or "",
            coordinate=candidate.coordinate,
            address=candidate.formatted_address,
            postcode=candidate.postcode,
            city=candidate.city,
            region=candidate.region,
        )
