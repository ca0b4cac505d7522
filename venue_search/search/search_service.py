"""Module contenant le service de recherche principal."""
# venue_search/search/search_service.py
import time
from typing import List

import psutil

from venue_search.logger import logger
from venue_search.models import LocationSuggestion, SearchFilter, SearchResponse
from venue_search.search.pipeline import SearchPipeline
from venue_search.venues.repository import VenueRepository


class VenueSearchService:
    """Service de recherche : instantané des lieux actifs + pipeline de classement."""

    def __init__(self, repository: VenueRepository, pipeline: SearchPipeline):
        self.repository = repository
        self.pipeline = pipeline

    async def search(self, search_filter: SearchFilter) -> SearchResponse:
        """Effectue une recherche sur les lieux actifs.

        Args:
            search_filter: Critères de recherche (texte, lieu, rayon, tri...).

        Returns:
            Un objet SearchResponse avec les lieux classés.
        """
        start_time = time.time()

        venues = await self.repository.fetch_active_venues()
        reference = await self.pipeline.resolve_reference(search_filter)
        results = self.pipeline.rank(venues, search_filter, reference)

        duration = time.time() - start_time
        memory_mb = psutil.Process().memory_info().rss / 1024 / 1024

        logger.info(
            "Search (query: {query!r}, sort: {sort}) : {kept}/{total} venues | "
            "Durée = {duration:.4f}s | RAM = {memory:.2f} Mo",
            query=search_filter.query,
            sort=search_filter.sort_by.value,
            kept=len(results),
            total=len(venues),
            duration=duration,
            memory=memory_mb,
        )

        return SearchResponse(
            results=results,
            total=len(results),
            total_before_filter=len(venues),
            reference=reference,
            query_time_ms=duration * 1000,
            memory_used_mb=memory_mb,
        )

    async def suggest_locations(self, text: str) -> List[LocationSuggestion]:
        """Propositions de lieux pour la saisie de l'utilisateur."""
        return await self.pipeline.resolver.suggest(text)
