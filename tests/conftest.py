"""
Shared pytest fixtures for the directory taxonomy test suite.

Provides location/category factories, a built snapshot and CSV data folders.
"""

from pathlib import Path
from typing import Optional

import pytest

from blynt.categories import build_category_index
from blynt.config import DirectoryPaths
from blynt.records import CategoryRecord, LocationRecord
from blynt.taxonomy import transform_to_state_city

LOCATION_HEADER = "city,state,state_abbr,county_fips,county_name,lat,lng,zips,id\n"
CATEGORY_HEADER = "name,slug,description,aliases,parentCategory\n"


@pytest.fixture
def create_location():
    """
    Return a function that creates LocationRecord objects with sensible defaults.

    Example:
        record = create_location(city="Azusa", state_abbr="CA")
    """
    counter = {"n": 0}

    def _create_location(
        city: str = "Downers Grove",
        state_abbr: str = "IL",
        id: Optional[str] = None,
        **kwargs,
    ) -> LocationRecord:
        counter["n"] += 1
        defaults = {
            "city": city,
            "state_abbr": state_abbr,
            "id": id or f"loc-{counter['n']}",
            "state": "",
            "county_name": "Test County",
            "lat": 40.0,
            "lng": -90.0,
        }
        defaults.update(kwargs)
        return LocationRecord(**defaults)

    return _create_location


@pytest.fixture
def sample_locations(create_location):
    """Downers Grove, Azusa and two spellings of St. Louis Park."""
    return [
        create_location("Downers Grove", "IL", state="Illinois", zips=frozenset({"60515"})),
        create_location("Azusa", "CA", state="California", zips=frozenset({"91702"})),
        create_location("St. Louis Park", "CA", zips=frozenset({"55416"})),
        create_location("St Louis Park", "CA", zips=frozenset({"55426"})),
    ]


@pytest.fixture
def snapshot(sample_locations):
    """A built snapshot over sample_locations (one slug collision in CA)."""
    with pytest.warns(Warning):
        return transform_to_state_city(sample_locations)


@pytest.fixture
def sample_categories():
    return [
        CategoryRecord(name="Tire Shop", slug="tire-shop", aliases=("Tire Store",)),
        CategoryRecord(name="Dollar Store", slug="dollar-store"),
        CategoryRecord(name="Family Law Attorney", slug="family-law-attorney", parent_category="Legal"),
        CategoryRecord(name="Construction Company", slug="construction"),
    ]


@pytest.fixture
def category_index(sample_categories):
    return build_category_index(sample_categories)


def write_data_dir(
    root: Path,
    location_rows: str,
    category_rows: str = "Tire Shop,tire-shop,Tires,,Automotive\n",
) -> DirectoryPaths:
    root.mkdir(parents=True, exist_ok=True)
    (root / "locations.csv").write_text(LOCATION_HEADER + location_rows)
    (root / "categories.csv").write_text(CATEGORY_HEADER + category_rows)
    return DirectoryPaths(data_dir=root, output_dir=root / "out")


@pytest.fixture
def make_data_dir():
    """Return write_data_dir so tests can lay out their own CSV folders."""
    return write_data_dir


@pytest.fixture
def data_paths(tmp_path):
    """DirectoryPaths pointing at a small, valid CSV pair."""
    return write_data_dir(
        tmp_path / "data",
        "Downers Grove,Illinois,IL,17043,DuPage,41.7949,-88.0172,60515 60516,1\n"
        "Azusa,California,CA,06037,Los Angeles,34.1386,-117.9124,91702,2\n",
        "Tire Shop,tire-shop,\"Tire sales, repair\",Tire Store|Tire Dealer,Automotive\n"
        "Dollar Store,dollar-store,,,\n",
    )


@pytest.fixture
def invalid_data_paths(tmp_path):
    """DirectoryPaths whose location CSV contains a ZZ jurisdiction."""
    return write_data_dir(
        tmp_path / "bad",
        "Downers Grove,Illinois,IL,17043,DuPage,41.7949,-88.0172,60515,1\n"
        "Nowhere,Nowhere,ZZ,00000,None,0,0,00000,2\n",
    )
