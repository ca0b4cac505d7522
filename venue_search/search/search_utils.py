"""
Prédicats de filtrage des lieux.

Chaque prédicat reçoit un lieu annoté et le filtre de recherche ; un lieu
n'est conservé que si tous les prédicats sont vrais.
"""

from typing import Iterable, List

from venue_search.models import AnnotatedVenue, SearchFilter


def searchable_fields(venue: AnnotatedVenue) -> List[str]:
    """Champs textuels sur lesquels porte la requête libre."""
    fields = [venue.name, venue.address, venue.category.value, *venue.features]
    if venue.description:
        fields.append(venue.description)
    return fields


def matches_query(venue: AnnotatedVenue, query: str) -> bool:
    """Sous-chaîne insensible à la casse dans le nom, l'adresse, la catégorie, les équipements ou la description."""
    needle = query.strip().casefold()
    if not needle:
        return True
    return any(needle in field.casefold() for field in searchable_fields(venue))


def matches_categories(venue: AnnotatedVenue, search_filter: SearchFilter) -> bool:
    """Catégories inconnues : aucune correspondance, jamais « tout accepter »."""
    if not search_filter.categories and not search_filter.category_requested:
        return True
    return venue.category in search_filter.categories


def matches_rating(venue: AnnotatedVenue, search_filter: SearchFilter) -> bool:
    return venue.rating >= search_filter.min_rating


def matches_features(venue: AnnotatedVenue, search_filter: SearchFilter) -> bool:
    """Tous les équipements requis doivent être présents (insensible à la casse)."""
    if not search_filter.required_features:
        return True
    available = {feature.casefold() for feature in venue.features}
    return all(feature.casefold() in available for feature in search_filter.required_features)


def within_distance(venue: AnnotatedVenue, search_filter: SearchFilter) -> bool:
    """
    Vérifie le rayon maximal.

    Un lieu sans distance connue est conservé : l'absence de coordonnées ne
    doit pas le faire disparaître des résultats.
    """
    if search_filter.max_distance is None or venue.distance is None:
        return True
    return venue.distance <= search_filter.max_distance


def matches_filter(venue: AnnotatedVenue, search_filter: SearchFilter) -> bool:
    """Applique l'ensemble des prédicats au lieu."""
    return (
        matches_query(venue, search_filter.query)
        and matches_categories(venue, search_filter)
        and matches_rating(venue, search_filter)
        and matches_features(venue, search_filter)
        and within_distance(venue, search_filter)
    )


def apply_filters(
    venues: Iterable[AnnotatedVenue], search_filter: SearchFilter
) -> List[AnnotatedVenue]:
    """Returns a new list holding the venues that pass every predicate."""
    return [venue for venue in venues if matches_filter(venue, search_filter)]
