"""Géocodage des lieux actifs qui n'ont pas encore de coordonnées."""
import asyncio
from typing import Optional

from pydantic import BaseModel

from venue_search.config import settings
from venue_search.exceptions import GeocodingError
from venue_search.geocoding.clients import Geocoder
from venue_search.logger import logger
from venue_search.models import Coordinate
from venue_search.venues.repository import VenueRepository


class BackfillReport(BaseModel):  # pylint: disable=too-few-public-methods
    """Bilan d'un passage de géocodage."""
    total: int = 0
    succeeded: int = 0
    failed: int = 0


async def geocode_missing_venues(
    repository: VenueRepository,
    geocoder: Geocoder,
    country: str = settings.GEOCODE_COUNTRY,
    delay: float = settings.BACKFILL_DELAY_SECONDS,
) -> BackfillReport:
    """
    Géocode l'adresse de chaque lieu sans coordonnées et enregistre le
    premier candidat.

    Args:
        repository: Accès à la table des lieux
        geocoder: Collaborateur de géocodage
        country: Restriction de pays
        delay: Pause entre deux appels au géocodeur (secondes)

    Returns:
        Nombre de lieux traités, réussis et en échec
    """
    rows = await repository.fetch_venues_missing_coordinates()
    report = BackfillReport(total=len(rows))
    if not rows:
        logger.info("All active venues already have coordinates")
        return report

    for index, row in enumerate(rows):
        name = row.get("business_name") or row.get("id")
        address = (row.get("address") or "").strip()

        coordinate: Optional[Coordinate] = None
        if address:
            try:
                candidates = await geocoder.geocode(address, country)
            except GeocodingError as e:
                logger.warning("Failed to geocode {name}: {error}", name=name, error=e)
                candidates = []
            coordinate = next(
                (c.coordinate for c in candidates if c.coordinate is not None), None
            )

        if coordinate is not None and await repository.update_coordinates(row["id"], coordinate):
            report.succeeded += 1
            logger.info("Geocoded {name}", name=name)
        else:
            report.failed += 1
            logger.warning("Could not geocode {name} at {address!r}", name=name, address=address)

        if delay > 0 and index < len(rows) - 1:
            await asyncio.sleep(delay)

    logger.info(
        "Geocoding complete: {ok}/{total} venues geocoded, {ko} failed",
        ok=report.succeeded, total=report.total, ko=report.failed,
    )
    return report


async def _main() -> None:
    from venue_search.db.postgres_connector import PostgresConnector
    from venue_search.geocoding.clients import UKGeocoder

    db_connector = PostgresConnector(settings.DATABASE_URL)
    geocoder = UKGeocoder()
    await db_connector.connect()
    try:
        await geocode_missing_venues(VenueRepository(db_connector), geocoder)
    finally:
        await geocoder.aclose()
        await db_connector.close()


if __name__ == "__main__":
    asyncio.run(_main())
