"""Calcul de distance haversine et annotation des lieux."""
import math
from functools import lru_cache
from typing import Iterable, List, Optional

from venue_search.config import settings
from venue_search.models import AnnotatedVenue, Coordinate, VenueRecord


class DistanceEngine:
    """Classe pour calculer les distances orthodromiques entre coordonnées."""

    def __init__(
        self,
        earth_radius_km: float = settings.EARTH_RADIUS_KM,
        km_to_miles_factor: float = settings.KM_TO_MILES,
    ):
        self.earth_radius_km = earth_radius_km
        self.km_to_miles_factor = km_to_miles_factor

    @lru_cache(maxsize=4096)
    def haversine_km(self, a: Coordinate, b: Coordinate) -> float:
        """
        Calcule la distance haversine entre deux coordonnées.

        Args:
            a: Premier point
            b: Second point

        Returns:
            Distance en kilomètres, non arrondie
        """
        lat1 = math.radians(a.latitude)
        lat2 = math.radians(b.latitude)
        d_lat = lat2 - lat1
        # Écart de longitude ramené dans [-180, 180] (antiméridien)
        d_lon = math.radians((b.longitude - a.longitude + 180.0) % 360.0 - 180.0)

        h = (
            math.sin(d_lat / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
        )
        h = min(1.0, max(0.0, h))
        return 2 * self.earth_radius_km * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    def km_to_miles(self, km: float) -> float:
        """Convertit des kilomètres en miles."""
        return km * self.km_to_miles_factor

    def display_distance(self, km: float) -> float:
        """Distance en miles arrondie à une décimale, pour l'affichage."""
        return round(self.km_to_miles(km), 1)

    def annotate(
        self,
        reference: Optional[Coordinate],
        venues: Iterable[VenueRecord],
    ) -> List[AnnotatedVenue]:
        """
        Annote chaque lieu avec sa distance (miles) depuis `reference`.

        Les lieux sans coordonnée, ou tous les lieux si `reference` est None,
        gardent une distance absente. Les lieux d'entrée ne sont pas modifiés.
        """
        annotated = []
        for venue in venues:
            distance = None
            if reference is not None and venue.coordinate is not None:
                distance = self.km_to_miles(self.haversine_km(reference, venue.coordinate))
            annotated.append(
                AnnotatedVenue.model_validate({**venue.model_dump(), "distance": distance})
            )
        return annotated


# Instance globale réutilisable
distance_engine = DistanceEngine()


def haversine_distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in kilometers between two coordinates."""
    return distance_engine.haversine_km(a, b)


def annotate(
    reference: Optional[Coordinate], venues: Iterable[VenueRecord]
) -> List[AnnotatedVenue]:
    """Annotates venues with their distance in miles from `reference`."""
    return distance_engine.annotate(reference, venues)
