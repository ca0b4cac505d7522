"""Pipeline résolution -> annotation -> filtrage -> tri."""
from typing import Iterable, List, Optional

from venue_search.geocoding.resolver import CoordinateResolver
from venue_search.logger import logger
from venue_search.models import (
    AnnotatedVenue,
    Coordinate,
    ResolutionFailure,
    SearchFilter,
    SortKey,
    VenueRecord,
)
from venue_search.scoring.distance import DistanceEngine, distance_engine
from venue_search.scoring.ranking import Ranker, ranker
from venue_search.search.search_utils import apply_filters


class SearchPipeline:
    """
    Recherche de lieux tenant compte de la position.

    Ne lève pas d'exception sur une entrée valide : un échec de résolution
    du lieu désactive simplement le filtrage et le tri par distance.
    """

    def __init__(
        self,
        resolver: Optional[CoordinateResolver] = None,
        engine: DistanceEngine = distance_engine,
        venue_ranker: Ranker = ranker,
    ):
        self.resolver = resolver if resolver is not None else CoordinateResolver()
        self.engine = engine
        self.ranker = venue_ranker

    @staticmethod
    def needs_reference(search_filter: SearchFilter) -> bool:
        """True si le filtre fait intervenir une position."""
        return (
            search_filter.location_text is not None
            or search_filter.device_position is not None
            or search_filter.near_me
            or search_filter.max_distance is not None
            or search_filter.sort_by == SortKey.DISTANCE
        )

    async def resolve_reference(self, search_filter: SearchFilter) -> Optional[Coordinate]:
        """Point de référence de la recherche, ou None s'il est indisponible."""
        if not self.needs_reference(search_filter):
            return None

        device_position = search_filter.device_position
        if device_position is None and search_filter.near_me:
            device_position = await self.resolver.locate_device()

        outcome = await self.resolver.resolve(search_filter.location_text, device_position)
        if isinstance(outcome, ResolutionFailure):
            logger.info("No reference coordinate ({reason}), distances disabled", reason=outcome.reason)
            return None
        return outcome

    def rank(
        self,
        venues: Iterable[VenueRecord],
        search_filter: SearchFilter,
        reference: Optional[Coordinate] = None,
    ) -> List[AnnotatedVenue]:
        """Annote, filtre et trie. Renvoie une nouvelle liste."""
        annotated = self.engine.annotate(reference, venues)
        kept = apply_filters(annotated, search_filter)
        return self.ranker.rank(
            kept,
            sort_by=search_filter.sort_by,
            query=search_filter.query,
            has_reference=reference is not None,
        )

    async def search(
        self, venues: Iterable[VenueRecord], search_filter: SearchFilter
    ) -> List[AnnotatedVenue]:
        """
        Effectue une recherche complète sur un instantané de lieux.

        Args:
            venues: Lieux actifs fournis par l'appelant
            search_filter: Critères de recherche

        Returns:
            Lieux annotés, filtrés et triés
        """
        reference = await self.resolve_reference(search_filter)
        return self.rank(venues, search_filter, reference)
