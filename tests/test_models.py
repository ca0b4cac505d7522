# tests/test_models.py
import math

import pytest
from pydantic import ValidationError

from venue_search.models import (
    Coordinate,
    SearchFilter,
    SortKey,
    VenueCategory,
    VenueRecord,
    lookup_category,
    normalize_category,
)


class TestCoordinate:

    @pytest.mark.parametrize("value", [
        {"latitude": 51.5, "longitude": -0.12},
        {"lat": 51.5, "lng": -0.12},
        {"lat": 51.5, "lon": -0.12},
        (51.5, -0.12),
        ("51.5", "-0.12"),
    ])
    def test_parse_accepted_formats(self, value):
        assert Coordinate.parse(value) == Coordinate(latitude=51.5, longitude=-0.12)

    @pytest.mark.parametrize("value", [
        None,
        {"latitude": 91.0, "longitude": 0.0},
        {"latitude": 0.0, "longitude": -180.5},
        {"latitude": math.nan, "longitude": 0.0},
        {"latitude": 0.0, "longitude": math.inf},
        {"latitude": 51.5},
        ("abc", 1.0),
        (1.0,),
        42,
    ])
    def test_parse_rejects_invalid(self, value):
        assert Coordinate.parse(value) is None

    def test_is_immutable_and_hashable(self):
        point = Coordinate(latitude=1.0, longitude=2.0)
        with pytest.raises(ValidationError):
            point.latitude = 3.0
        assert {point: "ok"}[Coordinate(latitude=1.0, longitude=2.0)] == "ok"


class TestVenueRecord:

    def test_invalid_coordinate_becomes_absent(self):
        venue = VenueRecord(id="v1", name="Test", coordinate={"latitude": 200, "longitude": 0})
        assert venue.coordinate is None

    def test_rating_out_of_range_is_rejected(self):
        with pytest.raises(ValidationError):
            VenueRecord(id="v1", name="Test", rating=5.5)

    def test_negative_review_count_is_rejected(self):
        with pytest.raises(ValidationError):
            VenueRecord(id="v1", name="Test", review_count=-1)

    def test_numeric_id_is_stringified(self):
        assert VenueRecord(id=12, name="Test").id == "12"

    @pytest.mark.parametrize("raw,expected", [
        ("pub", VenueCategory.PUB),
        ("Pub / bar", VenueCategory.PUB),
        ("Restaurant / café", VenueCategory.RESTAURANT),
        ("Restaurant / cafÃ©", VenueCategory.RESTAURANT),
        ("GYM", VenueCategory.GYM),
        ("Shop / retail", VenueCategory.SHOP),
        ("Cinema / theatre", VenueCategory.OTHER),
        ("bowling alley", VenueCategory.OTHER),
        (None, VenueCategory.OTHER),
    ])
    def test_category_normalisation(self, raw, expected):
        assert normalize_category(raw) == expected


class TestSearchFilterClamping:
    """Les valeurs malformées sont bornées, jamais rejetées."""

    def test_defaults(self):
        search_filter = SearchFilter()
        assert search_filter.query == ""
        assert search_filter.min_rating == 0.0
        assert search_filter.max_distance is None
        assert search_filter.categories == []
        assert search_filter.required_features == []
        assert search_filter.sort_by == SortKey.RELEVANCE

    @pytest.mark.parametrize("raw,expected", [(-2, 0.0), (7.5, 5.0), ("4", 4.0), ("high", 0.0), (None, 0.0)])
    def test_min_rating(self, raw, expected):
        assert SearchFilter(min_rating=raw).min_rating == expected

    @pytest.mark.parametrize("raw,expected", [(-10, 0.0), (25, 25.0), ("far", None), (math.inf, None)])
    def test_max_distance(self, raw, expected):
        assert SearchFilter(max_distance=raw).max_distance == expected

    def test_unknown_sort_key_defaults_to_relevance(self):
        assert SearchFilter(sort_by="popularity").sort_by == SortKey.RELEVANCE
        assert SearchFilter(sort_by="Distance").sort_by == SortKey.DISTANCE

    def test_invalid_device_position_is_dropped(self):
        assert SearchFilter(device_position={"latitude": 123, "longitude": 0}).device_position is None

    def test_categories_and_features_are_cleaned(self):
        search_filter = SearchFilter(
            categories=["Pub / bar", "PUB", "restaurant"],
            required_features=" Free WiFi ",
        )
        assert search_filter.categories == [VenueCategory.PUB, VenueCategory.RESTAURANT]
        assert search_filter.required_features == ["Free WiFi"]

    def test_blank_location_text_is_none(self):
        assert SearchFilter(location_text="   ").location_text is None
        assert SearchFilter(query=None).query == ""

    def test_unknown_categories_are_dropped_but_remembered(self):
        search_filter = SearchFilter(categories=["nightclub", "Pub / bar"])
        assert search_filter.categories == [VenueCategory.PUB]
        assert search_filter.category_requested is True

        only_unknown = SearchFilter(categories=["nightclub"])
        assert only_unknown.categories == []
        assert only_unknown.category_requested is True

        assert SearchFilter().category_requested is False
        assert SearchFilter(categories=[" "]).category_requested is False

    def test_category_members_are_accepted(self):
        search_filter = SearchFilter(categories=[VenueCategory.GYM, "gym"])
        assert search_filter.categories == [VenueCategory.GYM]


@pytest.mark.parametrize("raw,expected", [
    ("Pub / bar", VenueCategory.PUB),
    ("other", VenueCategory.OTHER),
    ("nightclub", None),
    (None, None),
])
def test_lookup_category_is_strict(raw, expected):
    assert lookup_category(raw) is expected
