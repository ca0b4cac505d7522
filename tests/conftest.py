# tests/conftest.py
import os

# Pas de fichiers de logs pendant les tests
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from unittest.mock import MagicMock, AsyncMock

from venue_search.geocoding.resolver import CoordinateResolver
from venue_search.models import VenueRecord
from venue_search.search.pipeline import SearchPipeline


# --- Données de test ---

@pytest.fixture
def venue_factory():
    """Fabrique de VenueRecord avec des valeurs par défaut raisonnables."""
    counter = {"next": 0}

    def make(**overrides):
        counter["next"] += 1
        data = {
            "id": f"venue-{counter['next']}",
            "name": f"Venue {counter['next']}",
            "category": "other",
            "address": "1 High Street, London",
            "rating": 0.0,
            "review_count": 0,
            "features": [],
        }
        data.update(overrides)
        return VenueRecord(**data)

    return make


@pytest.fixture
def uk_venues(venue_factory):
    """Quelques lieux à Londres et Manchester, plus un lieu sans coordonnée."""
    return [
        venue_factory(
            id="soho", name="The Old Blue Bell", category="pub",
            address="12 Dean Street, Soho, London",
            coordinate={"latitude": 51.5136, "longitude": -0.1320},
            rating=4.5, review_count=20,
            features=["All-Gender Facilities", "Staff Training"],
        ),
        venue_factory(
            id="canal", name="Blue Moon Pub", category="pub",
            address="40 Canal Street, Manchester",
            coordinate={"latitude": 53.4774, "longitude": -2.2356},
            rating=4.5, review_count=12,
            features=["Safe Space Policy"],
        ),
        venue_factory(
            id="camden", name="Camden Kitchen", category="restaurant",
            address="8 Camden High Street, London",
            coordinate={"latitude": 51.5390, "longitude": -0.1426},
            rating=3.9, review_count=40,
            features=["Wheelchair Accessible", "All-Gender Facilities"],
        ),
        venue_factory(
            id="nowhere", name="Pop-up Market", category="shop",
            address="Address to be confirmed",
            rating=4.8, review_count=3,
            features=["Family Friendly"],
        ),
        venue_factory(
            id="gym", name="Iron Haven Gym", category="gym",
            address="3 Deansgate, Manchester",
            coordinate={"latitude": 53.4794, "longitude": -2.2453},
            rating=0.0, review_count=0,
        ),
    ]


# --- Mocks des collaborateurs ---

@pytest.fixture
def mock_geocoder():
    """Géocodeur mocké : par défaut, aucun candidat."""
    geocoder = MagicMock()
    geocoder.geocode = AsyncMock(return_value=[])
    return geocoder


@pytest.fixture
def resolver(mock_geocoder):
    return CoordinateResolver(geocoder=mock_geocoder)


@pytest.fixture
def pipeline(resolver):
    return SearchPipeline(resolver=resolver)


@pytest.fixture
def mock_db_connector():
    """Fixture pour un mock du connecteur PostgreSQL."""
    db_conn = MagicMock()
    db_conn.execute_query = AsyncMock(return_value=[])
    db_conn.execute = AsyncMock(return_value="UPDATE 1")
    return db_conn


@pytest.fixture
def mock_cache_manager():
    """Fixture pour un mock du gestionnaire de cache Redis."""
    cache = MagicMock()
    cache.get_json = AsyncMock(return_value=None)  # Par défaut, le cache est vide (miss)
    cache.set_json = AsyncMock()
    return cache
