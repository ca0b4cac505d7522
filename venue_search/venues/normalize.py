"""
Normalisation des lignes de la table `venues`.

Appliquée une fois à la lecture : le pipeline de recherche peut ensuite
supposer des enregistrements complets et valides (note bornée, nombre
d'avis positif, équipements en liste, coordonnée valide ou absente).
"""

import json
import math
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from venue_search.logger import logger
from venue_search.models import Coordinate, VenueRecord


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _rating(value: Any) -> float:
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(rating):
        return 0.0
    return min(5.0, max(0.0, rating))


def _review_count(value: Any) -> int:
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, count)


def _features(value: Any) -> List[str]:
    """Accepte une liste, un tableau JSON ou une chaîne séparée par des virgules."""
    if value is None:
        return []
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = value.split(",")
        value = parsed if isinstance(parsed, list) else [parsed]

    features: List[str] = []
    seen = set()
    for item in value:
        feature = _text(item)
        if feature and feature.casefold() not in seen:
            seen.add(feature.casefold())
            features.append(feature)
    return features


def _coordinate(row: Mapping[str, Any]) -> Optional[Coordinate]:
    if row.get("latitude") is not None or row.get("longitude") is not None:
        return Coordinate.parse({"latitude": row.get("latitude"), "longitude": row.get("longitude")})
    pair = row.get("coordinates")
    if pair is not None:
        # Format historique [longitude, latitude]
        try:
            lng, lat = pair
        except (TypeError, ValueError):
            return None
        return Coordinate.parse((lat, lng))
    return None


def normalize_venue(row: Mapping[str, Any]) -> VenueRecord:
    """
    Convertit une ligne brute en VenueRecord.

    Raises:
        ValidationError: si la ligne n'a pas d'identifiant
    """
    description = _text(row.get("description"))
    return VenueRecord(
        id=row.get("id"),
        name=_text(_first(row, "business_name", "name")),
        category=_first(row, "business_type", "type", "category"),
        address=_text(row.get("address")),
        coordinate=_coordinate(row),
        rating=_rating(row.get("rating")),
        review_count=_review_count(_first(row, "reviews_count", "review_count", "reviews")),
        features=_features(row.get("features")),
        hours=_text(row.get("hours")),
        open_now=row.get("open_now") is True,
        description=description or None,
    )


def normalize_venues(rows: Iterable[Mapping[str, Any]]) -> List[VenueRecord]:
    """Normalise des lignes ; une ligne inexploitable est ignorée et journalisée."""
    venues = []
    for row in rows:
        try:
            venues.append(normalize_venue(row))
        except ValidationError as e:
            logger.warning(
                "Skipping venue row {row_id}: {error}",
                row_id=row.get("id"), error=e,
            )
    return venues
