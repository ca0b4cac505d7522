"""Accès en lecture/écriture à la table `venues`."""
from typing import Any, Dict, List

from venue_search.db.postgres_connector import PostgresConnector
from venue_search.logger import logger
from venue_search.models import Coordinate, VenueRecord
from venue_search.venues.normalize import normalize_venues

VENUE_COLUMNS = (
    "id, business_name, business_type, address, latitude, longitude, "
    "rating, reviews_count, features, hours, description"
)


class VenueRepository:
    """Fournit l'instantané des lieux actifs et met à jour leurs coordonnées."""

    def __init__(self, db_connector: PostgresConnector):
        self.db = db_connector

    async def fetch_active_venues(self) -> List[VenueRecord]:
        """Lieux actifs, les plus récemment publiés en premier."""
        rows = await self.db.execute_query(
            f"SELECT {VENUE_COLUMNS} FROM venues "  # nosec B608
            "WHERE is_active = true ORDER BY published_at DESC"
        )
        venues = normalize_venues(rows)
        logger.debug("Fetched {count} active venues", count=len(venues))
        return venues

    async def fetch_venues_missing_coordinates(self) -> List[Dict[str, Any]]:
        """Lieux actifs sans latitude ou longitude."""
        return await self.db.execute_query(
            "SELECT id, business_name, address FROM venues "
            "WHERE is_active = true AND (latitude IS NULL OR longitude IS NULL)"
        )

    async def update_coordinates(self, venue_id: Any, coordinate: Coordinate) -> bool:
        """Enregistre la coordonnée d'un lieu. True si une ligne a été modifiée."""
        status = await self.db.execute(
            "UPDATE venues SET latitude = $1, longitude = $2 WHERE id = $3",
            coordinate.latitude,
            coordinate.longitude,
            venue_id,
        )
        return status == "UPDATE 1"
