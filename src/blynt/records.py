from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Mapping, Optional, Tuple

import pandas as pd

from .config import DirectoryPaths
from .errors import CategoryDataError, LocationDataError
from .normalize import pluralize

LOGGER = logging.getLogger(__name__)

LOCATION_COLUMNS = (
    "city",
    "state",
    "state_abbr",
    "county_fips",
    "county_name",
    "lat",
    "lng",
    "zips",
    "id",
)
REQUIRED_LOCATION_COLUMNS = ("city", "state_abbr", "id")
REQUIRED_CATEGORY_COLUMNS = ("name", "slug")
ALIAS_SEPARATOR = "|"


@dataclass(frozen=True)
class CategoryRecord:
    name: str
    slug: str
    description: Optional[str] = None
    aliases: Tuple[str, ...] = ()
    parent_category: Optional[str] = None

    @property
    def plural_name(self) -> str:
        return pluralize(self.name)


@dataclass(frozen=True)
class LocationRecord:
    city: str
    state_abbr: str
    id: str
    state: str = ""
    county_fips: str = ""
    county_name: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    zips: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "state_abbr", self.state_abbr.strip().upper())

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> "LocationRecord":
        zips = row.get("zips") or ""
        if isinstance(zips, str):
            zips = _split_list(zips.replace(",", " "), None)
        return cls(
            city=str(row.get("city") or "").strip(),
            state_abbr=str(row.get("state_abbr") or ""),
            id=str(row.get("id") or ""),
            state=str(row.get("state") or "").strip(),
            county_fips=str(row.get("county_fips") or ""),
            county_name=str(row.get("county_name") or ""),
            lat=_optional_float(row.get("lat")),
            lng=_optional_float(row.get("lng")),
            zips=frozenset(zips),
        )


def _optional_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def _split_list(raw: str, sep: Optional[str]) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(sep) if part.strip())


def _read_table(path: Path, required: Tuple[str, ...], error_cls) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    df.columns = [c.strip() for c in df.columns]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise error_cls(f"{path} is missing required columns: {', '.join(missing)}")
    return df


def locations_from_frame(df: pd.DataFrame) -> List[LocationRecord]:
    df = df.copy()
    for column in LOCATION_COLUMNS:
        if column not in df.columns:
            df[column] = ""
    df["city"] = df["city"].astype(str).str.strip()
    blank = df["city"] == ""
    if blank.any():
        LOGGER.warning("Dropping %d location rows without a city name", int(blank.sum()))
        df = df[~blank]
    df["lat"] = pd.to_numeric(df["lat"], errors="coerce")
    df["lng"] = pd.to_numeric(df["lng"], errors="coerce")
    return [LocationRecord.from_row(row) for row in df.to_dict(orient="records")]


def load_locations(paths: DirectoryPaths) -> List[LocationRecord]:
    df = _read_table(paths.locations_csv(), REQUIRED_LOCATION_COLUMNS, LocationDataError)
    records = locations_from_frame(df)
    LOGGER.info("Loaded %d location records from %s", len(records), paths.locations_csv())
    return records


def categories_from_frame(df: pd.DataFrame) -> List[CategoryRecord]:
    parent_column = "parentCategory" if "parentCategory" in df.columns else "parent_category"
    categories: List[CategoryRecord] = []
    for row in df.to_dict(orient="records"):
        name = str(row.get("name") or "").strip()
        slug = str(row.get("slug") or "").strip()
        if not name or not slug:
            raise CategoryDataError(f"Category row without name or slug: {row!r}")
        categories.append(
            CategoryRecord(
                name=name,
                slug=slug,
                description=str(row.get("description") or "").strip() or None,
                aliases=_split_list(str(row.get("aliases") or ""), ALIAS_SEPARATOR),
                parent_category=str(row.get(parent_column) or "").strip() or None,
            )
        )
    return categories


def load_categories(paths: DirectoryPaths) -> List[CategoryRecord]:
    df = _read_table(paths.categories_csv(), REQUIRED_CATEGORY_COLUMNS, CategoryDataError)
    categories = categories_from_frame(df)
    LOGGER.info("Loaded %d categories from %s", len(categories), paths.categories_csv())
    return categories
