"""Cache Redis des réponses de géocodage."""
import json
from typing import Any, Optional

import redis.asyncio as redis

from venue_search.config import settings


class CacheManager:
    """
    Stocke des valeurs JSON dans Redis sous un préfixe commun.

    Les erreurs Redis (`RedisError`) sont propagées : c'est à l'appelant de
    décider s'il peut se passer du cache.
    """

    def __init__(self, redis_url: str = settings.REDIS_URL, prefix: str = "venue-search"):
        self.redis_url = redis_url
        self.prefix = prefix
        self.redis = redis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get_json(self, key: str) -> Optional[Any]:
        """Valeur décodée, ou None si la clé est absente ou illisible."""
        raw = await self.redis.get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return None

    async def set_json(self, key: str, value: Any, expire: int = settings.GEOCODE_CACHE_TTL) -> None:
        """Enregistre `value` (sérialisable en JSON) pour `expire` secondes."""
        await self.redis.set(self._key(key), json.dumps(value), ex=expire)

    async def ping(self) -> bool:
        return await self.redis.ping()

    async def close(self) -> None:
        await self.redis.aclose()


cache_manager = CacheManager()
