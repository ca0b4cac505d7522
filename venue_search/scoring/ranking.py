"""Tri des lieux selon la clé demandée."""
from typing import List, Tuple

from venue_search.models import AnnotatedVenue, SortKey


def _distance_key(venue: AnnotatedVenue) -> Tuple[bool, float]:
    # Distance inconnue = la plus lointaine
    if venue.distance is None:
        return (True, 0.0)
    return (False, venue.distance)


class Ranker:
    """
    Ordonne des lieux annotés.

    Tous les tris sont stables : à clé égale, l'ordre d'entrée est conservé.
    """

    def rank(
        self,
        venues: List[AnnotatedVenue],
        sort_by: SortKey = SortKey.RELEVANCE,
        query: str = "",
        has_reference: bool = True,
    ) -> List[AnnotatedVenue]:
        """
        Trie les lieux.

        Args:
            venues: Lieux filtrés
            sort_by: Clé de tri
            query: Requête libre (utilisée par `relevance`)
            has_reference: False si aucun point de référence n'a été résolu ;
                le tri par distance retombe alors sur le tri par note

        Returns:
            Nouvelle liste triée
        """
        if sort_by == SortKey.DISTANCE and has_reference:
            return sorted(venues, key=_distance_key)
        if sort_by == SortKey.NAME:
            return sorted(venues, key=self.name_key)
        if sort_by == SortKey.RELEVANCE and query.strip():
            needle = query.strip().casefold()
            return sorted(venues, key=lambda venue: self.relevance_key(venue, needle))
        return sorted(venues, key=self.rating_key)

    @staticmethod
    def rating_key(venue: AnnotatedVenue) -> Tuple[float, int, str]:
        return (-venue.rating, -venue.review_count, venue.name.casefold())

    @staticmethod
    def name_key(venue: AnnotatedVenue) -> str:
        return venue.name.casefold()

    @staticmethod
    def relevance_key(venue: AnnotatedVenue, needle: str) -> Tuple[int, float, Tuple[bool, float], str]:
        """Préfixe du nom d'abord, puis note décroissante, distance croissante, nom."""
        bucket = 0 if venue.name.casefold().startswith(needle) else 1
        return (bucket, -venue.rating, _distance_key(venue), venue.name.casefold())


ranker = Ranker()
