"""
Unit tests for breadcrumb trails.
"""

import pytest

from blynt.breadcrumbs import (
    SearchOrigin,
    business_breadcrumbs,
    category_breadcrumbs,
    generate_breadcrumbs,
    location_breadcrumbs,
)


def _hrefs(crumbs):
    return [c.href for c in crumbs]


def _labels(crumbs):
    return [c.label for c in crumbs]


class TestLocationBreadcrumbs:
    """Test cases for location page trails."""

    def test_state_and_city(self, snapshot):
        crumbs = location_breadcrumbs("il", "downers grove", snapshot)
        assert _labels(crumbs) == ["Locations", "Illinois", "Downers Grove"]
        assert _hrefs(crumbs) == ["/locations", "/locations/il", "/locations/il/downers-grove"]
        assert [c.type for c in crumbs] == ["locations", "state", "city"]

    def test_variant_spelling_uses_display_name(self, snapshot):
        crumbs = location_breadcrumbs("CA", "St Louis Park", snapshot)
        assert crumbs[-1].label == "St. Louis Park"
        assert crumbs[-1].href == "/locations/ca/st-louis-park"

    def test_unknown_state(self, snapshot):
        assert _labels(location_breadcrumbs("ZZ", "Nowhere", snapshot)) == ["Locations"]

    def test_city_missing_from_taxonomy(self, snapshot):
        assert _labels(location_breadcrumbs("IL", "Naperville", snapshot)) == ["Locations", "Illinois"]

    def test_without_taxonomy(self):
        crumbs = location_breadcrumbs("IL", "Naperville")
        assert crumbs[-1].label == "Naperville"
        assert crumbs[-1].href == "/locations/il/naperville"


class TestCategoryBreadcrumbs:
    """Test cases for category page trails."""

    def test_category(self, category_index):
        crumbs = category_breadcrumbs(category_index["tire-shop"])
        assert _labels(crumbs) == ["Categories", "Tire Shop"]
        assert _hrefs(crumbs) == ["/categories", "/categories/tire-shop"]

    def test_category_city(self, category_index, snapshot):
        crumbs = generate_breadcrumbs(
            "category-city",
            category="tire-shop",
            state="il",
            city="Downers Grove",
            categories=category_index,
            taxonomy=snapshot,
        )
        assert _labels(crumbs) == ["Categories", "Tire Shop", "IL", "Downers Grove"]
        assert _hrefs(crumbs) == [
            "/categories",
            "/categories/tire-shop",
            "/categories/tire-shop/il",
            "/categories/tire-shop/il/downers-grove",
        ]
        assert crumbs[2].description == "Browse Tire Shop in Illinois"

    def test_category_city_invalid_state(self, category_index):
        crumbs = generate_breadcrumbs("category-city", category="tire-shop", state="ZZ", categories=category_index)
        assert _labels(crumbs) == ["Categories", "Tire Shop"]

    def test_unknown_category_is_formatted_from_slug(self):
        crumbs = generate_breadcrumbs("category", category="Pet Grooming")
        assert _labels(crumbs) == ["Categories", "Pet Grooming"]
        assert crumbs[1].href == "/categories/pet-grooming"

    def test_empty_category(self):
        assert _labels(generate_breadcrumbs("category", category="")) == ["Categories"]


class TestBusinessBreadcrumbs:
    """Test cases for business page trails."""

    def test_long_name_is_truncated(self):
        name = "Jeffersonville Family Law Attorneys Group"
        crumbs = business_breadcrumbs(name)
        assert crumbs[-1].label == name[:30] + "..."
        assert crumbs[-1].href == "#"
        assert crumbs[-1].description == f"View {name} details"

    def test_short_name_is_kept(self):
        assert business_breadcrumbs("Joe's Tires")[-1].label == "Joe's Tires"

    def test_with_search_origin(self, category_index, snapshot):
        origin = SearchOrigin(city="Downers Grove", state_abbr="IL", category="Tire Shop")
        crumbs = generate_breadcrumbs(
            "business", business="Joe's Tires", origin=origin, categories=category_index, taxonomy=snapshot
        )
        assert _labels(crumbs) == ["Categories", "Tire Shop", "IL", "Downers Grove", "Joe's Tires"]

    def test_origin_with_unknown_category(self, category_index):
        origin = SearchOrigin(category="Bakery")
        crumbs = business_breadcrumbs("Joe's Tires", origin, category_index)
        assert _labels(crumbs) == ["Categories", "Joe's Tires"]


def test_unknown_kind():
    with pytest.raises(ValueError):
        generate_breadcrumbs("homepage")
