"""Fold flat location records into the state -> city directory taxonomy.

The result is an immutable snapshot keyed by upper-case state abbreviation.
Every state node holds its cities keyed by slug. Business aggregates start at
zero and are filled in later by :mod:`blynt.aggregates`, which returns a new
snapshot instead of mutating this one.
"""

from __future__ import annotations

import logging
import threading
import warnings
from collections import abc
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .config import DirectoryPaths
from .errors import InvalidJurisdictionError, LocationDataError, SlugCollisionWarning
from .jurisdictions import JURISDICTIONS, normalize_abbreviation
from .normalize import slugify
from .records import LocationRecord, load_locations

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CityNode:
    name: str
    slug: str
    business_count: int = 0
    average_rating: float = 0.0
    variants: Tuple[str, ...] = ()
    location_ids: Tuple[str, ...] = ()
    zips: FrozenSet[str] = frozenset()
    county_name: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass(frozen=True)
class StateNode:
    name: str
    abbr: str
    cities: Mapping[str, CityNode]
    total_businesses: int = 0
    average_rating: float = 0.0


@dataclass
class _CityDraft:
    name: str
    slug: str
    county_name: str
    lat: Optional[float]
    lng: Optional[float]
    variants: List[str] = field(default_factory=list)
    location_ids: List[str] = field(default_factory=list)
    zips: set = field(default_factory=set)

    def merge(self, record: LocationRecord) -> None:
        if record.city != self.name and record.city not in self.variants:
            self.variants.append(record.city)
        if record.id and record.id not in self.location_ids:
            self.location_ids.append(record.id)
        self.zips.update(record.zips)

    def freeze(self) -> CityNode:
        return CityNode(
            name=self.name,
            slug=self.slug,
            variants=tuple(self.variants),
            location_ids=tuple(self.location_ids),
            zips=frozenset(self.zips),
            county_name=self.county_name,
            lat=self.lat,
            lng=self.lng,
        )


def _report_collision(collision: SlugCollisionWarning, sink: Optional[List[SlugCollisionWarning]]) -> None:
    LOGGER.warning("City slug collision in %s", collision)
    warnings.warn(collision, stacklevel=3)
    if sink is not None:
        sink.append(collision)


def build_taxonomy(
    records: Iterable[LocationRecord],
    collisions: Optional[List[SlugCollisionWarning]] = None,
) -> Mapping[str, StateNode]:
    """Build the nested state -> city mapping from location records.

    Raises InvalidJurisdictionError on the first record whose abbreviation is
    not in the jurisdiction table; nothing built so far is returned. A second
    spelling of an existing city slug keeps the first-seen display name, is
    kept in ``CityNode.variants`` and merges its ids and zip codes.
    """
    drafts: Dict[str, Dict[str, _CityDraft]] = {}
    for record in records:
        abbr = normalize_abbreviation(record.state_abbr)
        if abbr not in JURISDICTIONS:
            raise InvalidJurisdictionError(abbr, record.id)
        city_slug = slugify(record.city)
        if not city_slug:
            raise LocationDataError(
                f"City name {record.city!r} (location id {record.id}) has no usable slug"
            )

        cities = drafts.setdefault(abbr, {})
        draft = cities.get(city_slug)
        if draft is None:
            draft = _CityDraft(
                name=record.city,
                slug=city_slug,
                county_name=record.county_name,
                lat=record.lat,
                lng=record.lng,
            )
            cities[city_slug] = draft
        elif record.city != draft.name and record.city not in draft.variants:
            _report_collision(
                SlugCollisionWarning(abbr, city_slug, draft.name, record.city), collisions
            )
        draft.merge(record)

    states: Dict[str, StateNode] = {}
    for abbr, cities in drafts.items():
        states[abbr] = StateNode(
            name=JURISDICTIONS[abbr],
            abbr=abbr,
            cities=MappingProxyType({slug: d.freeze() for slug, d in cities.items()}),
        )
    return MappingProxyType(states)


class TaxonomySnapshot(abc.Mapping):
    """Read-only taxonomy keyed by state abbreviation (case-insensitive)."""

    def __init__(
        self,
        states: Mapping[str, StateNode],
        collisions: Sequence[SlugCollisionWarning] = (),
        record_count: int = 0,
        built_at: Optional[datetime] = None,
    ):
        self._states = MappingProxyType(dict(states))
        self.collisions: Tuple[SlugCollisionWarning, ...] = tuple(collisions)
        self.record_count = record_count
        self.built_at = built_at or datetime.now(timezone.utc)

    def __getitem__(self, abbr: str) -> StateNode:
        if not isinstance(abbr, str):
            raise KeyError(abbr)
        return self._states[normalize_abbreviation(abbr)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self) -> str:
        return (
            f"TaxonomySnapshot(states={len(self)}, cities={self.city_count}, "
            f"collisions={len(self.collisions)})"
        )

    @property
    def states(self) -> Mapping[str, StateNode]:
        return self._states

    @property
    def city_count(self) -> int:
        return sum(len(state.cities) for state in self._states.values())

    def get_city(self, state_abbr: str, city: str) -> Optional[CityNode]:
        state = self.get(state_abbr)
        if state is None:
            return None
        return state.cities.get(slugify(city))

    def with_states(self, states: Mapping[str, StateNode]) -> "TaxonomySnapshot":
        return TaxonomySnapshot(states, self.collisions, self.record_count, self.built_at)


def transform_to_state_city(records: Iterable[LocationRecord]) -> TaxonomySnapshot:
    """Validate every jurisdiction up front, then build the snapshot."""
    records = list(records)
    invalid = [r for r in records if normalize_abbreviation(r.state_abbr) not in JURISDICTIONS]
    if invalid:
        bad = sorted({normalize_abbreviation(r.state_abbr) for r in invalid})
        LOGGER.error(
            "Refusing to build taxonomy: %d location records use unknown jurisdictions %s",
            len(invalid),
            ", ".join(repr(b) for b in bad),
        )
        raise InvalidJurisdictionError(normalize_abbreviation(invalid[0].state_abbr), invalid[0].id)

    collisions: List[SlugCollisionWarning] = []
    states = build_taxonomy(records, collisions)
    snapshot = TaxonomySnapshot(states, collisions, record_count=len(records))
    LOGGER.info(
        "Built taxonomy with %d states, %d cities from %d records (%d slug collisions)",
        len(snapshot),
        snapshot.city_count,
        len(records),
        len(collisions),
    )
    return snapshot


def load_taxonomy(paths: Optional[DirectoryPaths] = None) -> TaxonomySnapshot:
    return transform_to_state_city(load_locations(paths or DirectoryPaths()))


def sorted_states(taxonomy: Mapping[str, StateNode]) -> List[StateNode]:
    return sorted(taxonomy.values(), key=lambda s: s.name)


def sorted_cities(state: StateNode) -> List[CityNode]:
    return sorted(state.cities.values(), key=lambda c: (c.name.lower(), c.slug))


def taxonomy_to_dict(taxonomy: Mapping[str, StateNode]) -> Dict[str, dict]:
    out: Dict[str, dict] = {}
    for state in sorted_states(taxonomy):
        out[state.abbr] = {
            "name": state.name,
            "abbr": state.abbr,
            "total_businesses": state.total_businesses,
            "average_rating": state.average_rating,
            "cities": {
                city.slug: {
                    "name": city.name,
                    "slug": city.slug,
                    "business_count": city.business_count,
                    "average_rating": city.average_rating,
                    "variants": list(city.variants),
                }
                for city in sorted_cities(state)
            },
        }
    return out


def states_dataframe(taxonomy: Mapping[str, StateNode]) -> pd.DataFrame:
    rows = [
        {
            "state_abbr": state.abbr,
            "state_name": state.name,
            "n_cities": len(state.cities),
            "total_businesses": state.total_businesses,
            "average_rating": state.average_rating,
        }
        for state in sorted_states(taxonomy)
    ]
    return pd.DataFrame(
        rows, columns=["state_abbr", "state_name", "n_cities", "total_businesses", "average_rating"]
    )


def cities_dataframe(taxonomy: Mapping[str, StateNode]) -> pd.DataFrame:
    rows = []
    for state in sorted_states(taxonomy):
        for city in sorted_cities(state):
            rows.append(
                {
                    "state_abbr": state.abbr,
                    "city_slug": city.slug,
                    "city_name": city.name,
                    "variants": "|".join(city.variants),
                    "county_name": city.county_name,
                    "lat": city.lat,
                    "lng": city.lng,
                    "n_locations": len(city.location_ids),
                    "business_count": city.business_count,
                    "average_rating": city.average_rating,
                }
            )
    return pd.DataFrame(
        rows,
        columns=[
            "state_abbr",
            "city_slug",
            "city_name",
            "variants",
            "county_name",
            "lat",
            "lng",
            "n_locations",
            "business_count",
            "average_rating",
        ],
    )


class TaxonomyStore:
    """Holds the current snapshot and swaps it whole on reload."""

    def __init__(self, snapshot: Optional[TaxonomySnapshot] = None):
        self._snapshot = snapshot
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._snapshot is not None

    def get(self) -> TaxonomySnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise LookupError("Taxonomy has not been loaded")
        return snapshot

    def replace(self, snapshot: TaxonomySnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    def reload(self, loader: Callable[[], TaxonomySnapshot]) -> TaxonomySnapshot:
        """Build a new snapshot with ``loader``; the old one stays if it raises."""
        with self._lock:
            snapshot = loader()
            self._snapshot = snapshot
        return snapshot
