"""Clients HTTP de géocodage (Mapbox, postcodes.io).

Chaque client expose `geocode(query, country)` et renvoie une liste ordonnée
de `GeocodeCandidate`. Les erreurs de transport, les réponses non-2xx et les
réponses illisibles sont converties en `GeocodingError`.
"""

import re
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from venue_search.config import settings
from venue_search.exceptions import GeocodingError
from venue_search.logger import logger
from venue_search.models import GeocodeCandidate

UK_POSTCODE_PATTERN = re.compile(r"^[A-Z]{1,2}\d[A-Z\d]?\d[A-Z]{2}$", re.IGNORECASE)


def is_uk_postcode(text: str) -> bool:
    """Vérifie le format d'un code postal britannique (espaces ignorés)."""
    return bool(UK_POSTCODE_PATTERN.match(re.sub(r"\s", "", text or "")))


class Geocoder(Protocol):  # pylint: disable=too-few-public-methods
    """Contrat d'un collaborateur de géocodage."""

    async def geocode(self, query: str, country: str = settings.GEOCODE_COUNTRY) -> List[GeocodeCandidate]:
        """Renvoie les candidats pour `query`, le meilleur en premier."""


class _HttpGeocoder:
    """Gestion commune du client httpx."""

    def __init__(self, timeout: Optional[float] = None, client: Optional[httpx.AsyncClient] = None):
        self._timeout = timeout if timeout is not None else settings.GEOCODER_TIMEOUT
        self._client = client

    async def __aenter__(self):
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    async def aclose(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, service: str, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        client = await self._ensure_client()
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise GeocodingError(
                f"{service} answered HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise GeocodingError(f"{service} unreachable: {e}") from e
        except ValueError as e:
            raise GeocodingError(f"{service} returned an invalid JSON body") from e


class MapboxGeocoder(_HttpGeocoder):
    """
    Géocodage direct via l'API Mapbox Places.

    Example:
        async with MapboxGeocoder(access_token="pk...") as geocoder:
            candidates = await geocoder.geocode("Canal Street, Manchester")
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        self._access_token = access_token if access_token is not None else settings.MAPBOX_ACCESS_TOKEN
        self._base_url = (base_url or settings.MAPBOX_GEOCODING_URL).rstrip("/")
        self._limit = limit or settings.GEOCODE_LIMIT

    async def geocode(self, query: str, country: str = settings.GEOCODE_COUNTRY) -> List[GeocodeCandidate]:
        if not self._access_token:
            raise GeocodingError("Mapbox access token not configured")

        url = f"{self._base_url}/{quote(query, safe='')}.json"
        payload = await self._get_json(
            "Mapbox",
            url,
            params={"country": country, "limit": self._limit, "access_token": self._access_token},
        )
        if not isinstance(payload, dict):
            raise GeocodingError("Mapbox returned an unexpected payload")

        candidates = [
            candidate
            for candidate in (self._parse_feature(f) for f in payload.get("features") or [])
            if candidate is not None
        ]
        logger.debug("Mapbox: {count} candidates for {query!r}", count=len(candidates), query=query)
        return candidates

    @staticmethod
    def _parse_feature(feature: Dict[str, Any]) -> Optional[GeocodeCandidate]:
        """Convertit une feature Mapbox (`center` = [lon, lat]) en candidat."""
        center = feature.get("center") or []
        if len(center) < 2:
            return None

        context: Dict[str, str] = {}
        for item in feature.get("context") or []:
            kind = str(item.get("id", "")).split(".")[0]
            if kind in ("postcode", "place", "region") and kind not in context:
                context[kind] = item.get("text")

        try:
            return GeocodeCandidate(
                latitude=center[1],
                longitude=center[0],
                formatted_address=feature.get("place_name") or "",
                postcode=context.get("postcode"),
                city=context.get("place"),
                region=context.get("region"),
            )
        except ValidationError:
            return None


class PostcodeGeocoder(_HttpGeocoder):
    """Recherche de codes postaux britanniques via postcodes.io."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        self._base_url = (base_url or settings.POSTCODES_IO_URL).rstrip("/")

    async def geocode(self, query: str, country: str = settings.GEOCODE_COUNTRY) -> List[GeocodeCandidate]:
        postcode = query.strip()
        url = f"{self._base_url}/{quote(postcode, safe='')}"
        try:
            payload = await self._get_json("postcodes.io", url)
        except GeocodingError as e:
            # Code postal inconnu : pas de candidat, ce n'est pas une panne
            cause = e.__cause__
            if isinstance(cause, httpx.HTTPStatusError) and cause.response.status_code == 404:
                return []
            raise

        result = payload.get("result") if isinstance(payload, dict) else None
        if not result:
            return []
        try:
            return [
                GeocodeCandidate(
                    latitude=result["latitude"],
                    longitude=result["longitude"],
                    formatted_address=result.get("postcode") or postcode.upper(),
                    postcode=result.get("postcode"),
                    city=result.get("admin_district"),
                    region=result.get("region"),
                )
            ]
        except (KeyError, ValidationError):
            # Certains codes postaux n'ont pas de coordonnées (latitude = null)
            return []


class UKGeocoder:
    """
    Aiguille vers postcodes.io pour un code postal, sinon vers Mapbox.

    Un seul appel sortant par requête.
    """

    def __init__(
        self,
        places: Optional[Geocoder] = None,
        postcodes: Optional[Geocoder] = None,
    ):
        self.places = places if places is not None else MapboxGeocoder()
        self.postcodes = postcodes if postcodes is not None else PostcodeGeocoder()

    async def geocode(self, query: str, country: str = settings.GEOCODE_COUNTRY) -> List[GeocodeCandidate]:
        if is_uk_postcode(query):
            return await self.postcodes.geocode(query, country)
        return await self.places.geocode(query, country)

    async def aclose(self) -> None:
        """Ferme les clients sous-jacents."""
        for geocoder in (self.places, self.postcodes):
            close = getattr(geocoder, "aclose", None)
            if close is not None:
                await close()
