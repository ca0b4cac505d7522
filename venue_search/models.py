"""Modèles Pydantic pour les lieux, les coordonnées et les requêtes de recherche."""
import math
from enum import Enum
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)

from venue_search.config import settings


class Coordinate(BaseModel):  # pylint: disable=too-few-public-methods
    """Point géographique (latitude, longitude) immuable."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)

    @classmethod
    def parse(cls, value: Any) -> Optional['Coordinate']:
        """
        Builds a coordinate from a model, a mapping or a (lat, lng) pair.

        Supports the `latitude`/`longitude`, `lat`/`lng` and `lat`/`lon` key
        styles. Returns None instead of raising when the value is missing,
        non-finite or out of range.
        """
        if value is None:
            return None
        if isinstance(value, Coordinate):
            return value
        try:
            if isinstance(value, dict):
                lat = value.get("latitude", value.get("lat"))
                lng = value.get("longitude", value.get("lng", value.get("lon")))
            else:
                lat, lng = value
            if lat is None or lng is None:
                return None
            return cls(latitude=float(lat), longitude=float(lng))
        except (ValidationError, ValueError, TypeError):
            return None


class VenueCategory(str, Enum):
    """Catégories d'établissement reconnues."""
    PUB = "pub"
    RESTAURANT = "restaurant"
    SHOP = "shop"
    GYM = "gym"
    OTHER = "other"


def lookup_category(raw: Any) -> Optional[VenueCategory]:
    """Category for a free-form business type ("Pub / bar", "gym"), or None if unknown."""
    if isinstance(raw, VenueCategory):
        return raw
    if raw is None:
        return None

    text = str(raw).strip().lower()
    aliases = settings.CATEGORY_ALIASES
    value = aliases.get(text)
    if value is None and "/" in text:
        head = text.split("/")[0].strip()
        value = aliases.get(head, head)
    if value is None:
        value = text
    try:
        return VenueCategory(value)
    except ValueError:
        return None


def normalize_category(raw: Any) -> VenueCategory:
    """Like `lookup_category`, with unknown types stored as `other`."""
    category = lookup_category(raw)
    return category if category is not None else VenueCategory.OTHER


class SortKey(str, Enum):
    """Clés de tri acceptées par le pipeline."""
    RELEVANCE = "relevance"
    DISTANCE = "distance"
    RATING = "rating"
    NAME = "name"


class VenueRecord(BaseModel):  # pylint: disable=too-few-public-methods
    """Lieu tel que fourni par la base, invariants garantis."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: VenueCategory = VenueCategory.OTHER
    address: str = ""
    coordinate: Optional[Coordinate] = None
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    review_count: int = Field(default=0, ge=0)
    features: List[str] = Field(default_factory=list)
    hours: str = ""
    open_now: bool = False
    description: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> VenueCategory:
        return normalize_category(value)

    @field_validator("coordinate", mode="before")
    @classmethod
    def _drop_invalid_coordinate(cls, value: Any) -> Optional[Coordinate]:
        # Une coordonnée invalide équivaut à l'absence de coordonnée
        return Coordinate.parse(value)


class AnnotatedVenue(VenueRecord):  # pylint: disable=too-few-public-methods
    """Lieu enrichi de sa distance au point de référence (en miles)."""
    distance: Optional[float] = Field(default=None, ge=0.0)
    unit: str = "miles"

    @computed_field
    @property
    def display_distance(self) -> Optional[float]:
        """Distance arrondie à une décimale pour l'affichage."""
        if self.distance is None:
            return None
        return round(self.distance, 1)


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _category_items(value: Any) -> List[Any]:
    """Comme `_as_list`, mais garde les membres de VenueCategory tels quels."""
    if value is None:
        return []
    if not isinstance(value, (list, tuple, set)):
        value = [value]
    items: List[Any] = []
    for item in value:
        if isinstance(item, VenueCategory):
            items.append(item)
        elif item is not None and str(item).strip():
            items.append(str(item).strip())
    return items


class SearchFilter(BaseModel):  # pylint: disable=too-few-public-methods
    """
    Critères de recherche fournis par l'appelant.

    Les valeurs malformées sont ramenées dans leur domaine au lieu d'être
    rejetées : une note minimale hors [0, 5] est bornée, un rayon négatif
    devient 0, une clé de tri inconnue devient `relevance`.
    """
    query: str = ""
    location_text: Optional[str] = None
    device_position: Optional[Coordinate] = None
    near_me: bool = False
    max_distance: Optional[float] = None
    categories: List[VenueCategory] = Field(default_factory=list)
    category_requested: bool = False
    min_rating: float = 0.0
    required_features: List[str] = Field(default_factory=list)
    sort_by: SortKey = SortKey.RELEVANCE

    @field_validator("query", mode="before")
    @classmethod
    def _clean_query(cls, value: Any) -> str:
        return str(value).strip() if value is not None else ""

    @field_validator("location_text", mode="before")
    @classmethod
    def _clean_location_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("device_position", mode="before")
    @classmethod
    def _parse_device_position(cls, value: Any) -> Optional[Coordinate]:
        return Coordinate.parse(value)

    @field_validator("max_distance", mode="before")
    @classmethod
    def _clamp_max_distance(cls, value: Any) -> Optional[float]:
        if value is None:
            return None
        try:
            radius = float(value)
        except (TypeError, ValueError):
            return None
        if math.isnan(radius) or math.isinf(radius):
            return None
        return max(0.0, radius)

    @field_validator("min_rating", mode="before")
    @classmethod
    def _clamp_min_rating(cls, value: Any) -> float:
        try:
            rating = float(value)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(rating):
            return 0.0
        return min(5.0, max(0.0, rating))

    @model_validator(mode="before")
    @classmethod
    def _flag_category_request(cls, data: Any) -> Any:
        # Des catégories toutes inconnues ne doivent rien laisser passer
        if isinstance(data, dict) and _category_items(data.get("categories")):
            data = {**data, "category_requested": True}
        return data

    @field_validator("categories", mode="before")
    @classmethod
    def _normalize_categories(cls, value: Any) -> List[VenueCategory]:
        categories: List[VenueCategory] = []
        for item in _category_items(value):
            category = lookup_category(item)
            if category is not None and category not in categories:
                categories.append(category)
        return categories

    @field_validator("required_features", mode="before")
    @classmethod
    def _clean_features(cls, value: Any) -> List[str]:
        return _as_list(value)

    @field_validator("sort_by", mode="before")
    @classmethod
    def _default_sort_key(cls, value: Any) -> SortKey:
        if isinstance(value, SortKey):
            return value
        try:
            return SortKey(str(value).strip().lower())
        except ValueError:
            return SortKey.RELEVANCE


class ResolutionFailure(BaseModel):  # pylint: disable=too-few-public-methods
    """Aucun point de référence n'a pu être déterminé."""
    model_config = ConfigDict(frozen=True)

    reason: str


class GeocodeCandidate(BaseModel):  # pylint: disable=too-few-public-methods
    """Candidat renvoyé par un service de géocodage."""
    latitude: float
    longitude: float
    formatted_address: str = ""
    postcode: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None

    @property
    def coordinate(self) -> Optional[Coordinate]:
        return Coordinate.parse((self.latitude, self.longitude))


class LocationSuggestion(BaseModel):  # pylint: disable=too-few-public-methods
    """Lieu proposé à l'utilisateur pendant la saisie."""
    name: str
    coordinate: Coordinate
    address: str
    postcode: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None


class SearchResponse(BaseModel):  # pylint: disable=too-few-public-methods
    """Réponse de recherche."""
    results: List[AnnotatedVenue]
    total: int
    total_before_filter: int
    reference: Optional[Coordinate] = None
    query_time_ms: float
    memory_used_mb: Optional[float] = None

    model_config = ConfigDict(extra="allow")


class DistanceRequest(BaseModel):  # pylint: disable=too-few-public-methods
    """Requête de calcul de distance entre deux points."""
    origin: Coordinate
    destination: Coordinate


class DistanceResponse(BaseModel):  # pylint: disable=too-few-public-methods
    """Distance entre deux points."""
    kilometers: float
    miles: float
    display: str
