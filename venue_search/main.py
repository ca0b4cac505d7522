"""Main module for the FastAPI application."""
import json
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Query, status
from redis.exceptions import RedisError

from .cache import cache_manager
from .config import settings
from .db.postgres_connector import PostgresConnector
from .geocoding.cached import CachedGeocoder
from .geocoding.clients import UKGeocoder
from .geocoding.resolver import CoordinateResolver
from .logger import logger
from .models import (
    DistanceRequest,
    DistanceResponse,
    LocationSuggestion,
    SearchFilter,
    SearchResponse,
)
from .scoring.distance import distance_engine
from .search.pipeline import SearchPipeline
from .search.search_service import VenueSearchService
from .venues.repository import VenueRepository


# --- Initialisation des dépendances ---

db_connector: PostgresConnector = PostgresConnector(settings.DATABASE_URL)

geocoder: CachedGeocoder = CachedGeocoder(UKGeocoder(), cache=cache_manager)

search_service: VenueSearchService = VenueSearchService(
    repository=VenueRepository(db_connector),
    pipeline=SearchPipeline(resolver=CoordinateResolver(geocoder=geocoder)),
)
# Alias `service` pour les tests qui patchent `main.service`
service = search_service


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Handle FastAPI startup and shutdown events."""
    logger.info("Starting up venue search API...")

    try:
        await db_connector.connect()
        logger.info("PostgreSQL connection pool established successfully.")
    except (OSError, ConnectionError) as e:
        logger.error("Failed to connect to PostgreSQL: {error}", error=e)

    try:
        await cache_manager.ping()
        logger.info("Redis cache connected successfully.")
    except RedisError as e:
        logger.error("Failed to connect to Redis: {error}", error=e)

    yield

    logger.info("Shutting down venue search API...")
    await db_connector.close()
    logger.info("PostgreSQL connection pool closed.")
    await geocoder.aclose()
    await cache_manager.close()
    logger.info("Redis connection closed.")


app = FastAPI(
    title="Venue Search - Location-aware venue directory search",
    lifespan=lifespan
)


def get_service() -> VenueSearchService:
    """Dépendance FastAPI pour obtenir l'instance du service de recherche."""
    return service


@app.post("/search", response_model=SearchResponse)
async def search(search_filter: SearchFilter, svc: VenueSearchService = Depends(get_service)):
    """POST /search endpoint."""
    try:
        pretty_request_body = json.dumps(search_filter.model_dump(mode="json"), indent=2, ensure_ascii=False)
        logger.info("Received request:\n{request_body}", request_body=pretty_request_body)
        return await svc.search(search_filter)
    except Exception as e:
        logger.exception("Error processing search request")
        raise HTTPException(status_code=500, detail={"error": str(e)}) from e


@app.get("/locations/suggest", response_model=List[LocationSuggestion])
async def suggest_locations(
    q: str = Query("", description="Lieu saisi (ville, adresse, code postal)"),
    svc: VenueSearchService = Depends(get_service),
):
    """Location autocomplete."""
    return await svc.suggest_locations(q)


@app.post("/distance", response_model=DistanceResponse)
def distance(req: DistanceRequest):
    """Great-circle distance between two coordinates."""
    km = distance_engine.haversine_km(req.origin, req.destination)
    miles = distance_engine.km_to_miles(km)
    return DistanceResponse(
        kilometers=km,
        miles=miles,
        display=f"{distance_engine.display_distance(km)} miles",
    )


@app.get("/")
def root():
    """Root endpoint to check API status."""
    return {"status": "ok", "message": "Venue search API is running"}


@app.get("/health", status_code=status.HTTP_200_OK, tags=["Monitoring"])
async def health_check():
    """
    Health check endpoint.

    Checks connectivity to the database and Redis. Returns 200 OK if both
    are reachable, otherwise 503 Service Unavailable.
    """
    services_status = {"database": "ok", "redis": "ok"}
    try:
        await cache_manager.ping()
    except RedisError:
        services_status["redis"] = "error"
        logger.error("Health check failed: Redis connection error.")

    try:
        await db_connector.execute_query("SELECT 1")
    except (OSError, ConnectionError):
        services_status["database"] = "error"
        logger.error("Health check failed: Database connection error.")

    if "error" in services_status.values():
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=services_status)

    return services_status
