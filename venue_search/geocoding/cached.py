"""Géocodeur avec cache Redis des candidats."""
from typing import List, Optional

from pydantic import ValidationError
from redis.exceptions import RedisError

from venue_search.cache import CacheManager, cache_manager
from venue_search.config import settings
from venue_search.geocoding.clients import Geocoder
from venue_search.logger import logger
from venue_search.models import GeocodeCandidate


class CachedGeocoder:
    """
    Enveloppe un géocodeur et met ses réponses non vides en cache.

    Une panne Redis n'empêche pas le géocodage : le cache est simplement
    contourné.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        cache: Optional[CacheManager] = None,
        ttl: int = settings.GEOCODE_CACHE_TTL,
    ):
        self.geocoder = geocoder
        self.cache = cache if cache is not None else cache_manager
        self.ttl = ttl

    @staticmethod
    def cache_key(query: str, country: str) -> str:
        normalized = " ".join(query.lower().split())
        return f"geocode:{country.upper()}:{normalized}"

    async def geocode(self, query: str, country: str = settings.GEOCODE_COUNTRY) -> List[GeocodeCandidate]:
        key = self.cache_key(query, country)

        try:
            cached = await self.cache.get_json(key)
        except RedisError as e:
            logger.warning("Geocode cache unavailable, bypassing: {error}", error=e)
            cached = None

        if cached:
            try:
                candidates = [GeocodeCandidate.model_validate(item) for item in cached]
            except (ValidationError, TypeError) as e:
                logger.warning("Unreadable geocode cache entry {key}, ignoring: {error}", key=key, error=e)
            else:
                logger.debug("Cache HIT for key: {key}", key=key)
                return candidates

        logger.debug("Cache MISS for key: {key}", key=key)
        candidates = await self.geocoder.geocode(query, country)

        if candidates:
            payload = [candidate.model_dump() for candidate in candidates]
            try:
                await self.cache.set_json(key, payload, expire=self.ttl)
            except RedisError as e:
                logger.warning("Could not store geocode result: {error}", error=e)

        return candidates

    async def aclose(self) -> None:
        close = getattr(self.geocoder, "aclose", None)
        if close is not None:
            await close()
