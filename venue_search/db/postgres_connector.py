"""PostgreSQL database connector."""
from typing import List, Dict, Any, Optional
import asyncpg

from venue_search.logger import logger


class PostgresConnector:
    """Gère un pool de connexions asynchrone à PostgreSQL en utilisant l'URL."""

    def __init__(self, database_url: str, max_size: int = 10):
        self.database_url = database_url
        self.max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None

    async def connect(self):
        """Initialise le pool de connexions avec l'URL et max_size."""
        self._pool = await asyncpg.create_pool(
            dsn=self.database_url,
            max_size=self.max_size
        )
        logger.info("asyncpg connection pool initialised (max_size={size})", size=self.max_size)

    async def execute_query(self, sql: str, *args) -> List[Dict[str, Any]]:
        """Exécute une requête SQL avec des paramètres variables."""
        if not self._pool:
            raise ConnectionError("Connection pool not initialized. Call .connect() first.")

        async with self._pool.acquire() as conn:
            rows = await conn.fetch(sql, *args)
            return [dict(row) for row in rows]

    async def execute(self, sql: str, *args) -> str:
        """Exécute une commande (UPDATE, INSERT...) et renvoie son statut."""
        if not self._pool:
            raise ConnectionError("Connection pool not initialized. Call .connect() first.")

        async with self._pool.acquire() as conn:
            return await conn.execute(sql, *args)

    async def close(self):
        """Ferme le pool de connexions proprement."""
        if self._pool:
            await self._pool.close()
            self._pool = None
