"""Table statique des grandes villes du Royaume-Uni, utilisée en repli du géocodeur."""
from typing import List

from venue_search.models import Coordinate, LocationSuggestion


def _city(name: str, latitude: float, longitude: float, region: str) -> LocationSuggestion:
    return LocationSuggestion(
        name=name,
        coordinate=Coordinate(latitude=latitude, longitude=longitude),
        address=f"{name}, {region}, United Kingdom",
        city=name,
        region=region,
    )


UK_CITIES: List[LocationSuggestion] = [
    _city("London", 51.5074, -0.1278, "England"),
    _city("Manchester", 53.4808, -2.2426, "England"),
    _city("Birmingham", 52.4862, -1.8904, "England"),
    _city("Leeds", 53.8008, -1.5491, "England"),
    _city("Glasgow", 55.8642, -4.2518, "Scotland"),
    _city("Edinburgh", 55.9533, -3.1883, "Scotland"),
    _city("Cardiff", 51.4816, -3.1791, "Wales"),
    _city("Belfast", 54.5973, -5.9301, "Northern Ireland"),
    _city("Liverpool", 53.4084, -2.9916, "England"),
    _city("Sheffield", 53.3811, -1.4701, "England"),
]


def match_cities(
    text: str,
    cities: List[LocationSuggestion] = UK_CITIES,
    bidirectional: bool = False,
    include_address: bool = False,
) -> List[LocationSuggestion]:
    """
    Villes dont le nom contient `text` (insensible à la casse).

    Args:
        text: Texte saisi
        cities: Table à parcourir
        bidirectional: Accepte aussi un nom de ville contenu dans le texte
            ("Soho, London" -> London)
        include_address: Cherche également dans l'adresse complète

    Returns:
        Villes correspondantes, dans l'ordre de la table
    """
    needle = text.strip().casefold()
    if not needle:
        return []

    matches = []
    for city in cities:
        name = city.name.casefold()
        if needle in name or (bidirectional and name in needle):
            matches.append(city)
        elif include_address and needle in city.address.casefold():
            matches.append(city)
    return matches
