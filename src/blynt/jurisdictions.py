"""Fixed US jurisdiction table and the route helpers built on it.

The table covers the 50 states, the District of Columbia and five
territories. It is static configuration: nothing reloads or mutates it.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, NamedTuple, Optional

from .normalize import slugify


class Jurisdiction(NamedTuple):
    abbr: str
    name: str


JURISDICTIONS: Mapping[str, str] = MappingProxyType(
    {
        "AL": "Alabama",
        "AK": "Alaska",
        "AZ": "Arizona",
        "AR": "Arkansas",
        "CA": "California",
        "CO": "Colorado",
        "CT": "Connecticut",
        "DE": "Delaware",
        "FL": "Florida",
        "GA": "Georgia",
        "HI": "Hawaii",
        "ID": "Idaho",
        "IL": "Illinois",
        "IN": "Indiana",
        "IA": "Iowa",
        "KS": "Kansas",
        "KY": "Kentucky",
        "LA": "Louisiana",
        "ME": "Maine",
        "MD": "Maryland",
        "MA": "Massachusetts",
        "MI": "Michigan",
        "MN": "Minnesota",
        "MS": "Mississippi",
        "MO": "Missouri",
        "MT": "Montana",
        "NE": "Nebraska",
        "NV": "Nevada",
        "NH": "New Hampshire",
        "NJ": "New Jersey",
        "NM": "New Mexico",
        "NY": "New York",
        "NC": "North Carolina",
        "ND": "North Dakota",
        "OH": "Ohio",
        "OK": "Oklahoma",
        "OR": "Oregon",
        "PA": "Pennsylvania",
        "RI": "Rhode Island",
        "SC": "South Carolina",
        "SD": "South Dakota",
        "TN": "Tennessee",
        "TX": "Texas",
        "UT": "Utah",
        "VT": "Vermont",
        "VA": "Virginia",
        "WA": "Washington",
        "WV": "West Virginia",
        "WI": "Wisconsin",
        "WY": "Wyoming",
        "DC": "District of Columbia",
        "PR": "Puerto Rico",
        "VI": "Virgin Islands",
        "GU": "Guam",
        "MP": "Northern Mariana Islands",
        "AS": "American Samoa",
    }
)


def normalize_abbreviation(abbr: str) -> str:
    return abbr.strip().upper()


def validate_jurisdiction(abbr: Optional[str]) -> bool:
    if not abbr:
        return False
    return normalize_abbreviation(abbr) in JURISDICTIONS


def get_state_name(abbr: str) -> Optional[str]:
    return JURISDICTIONS.get(normalize_abbreviation(abbr))


def get_state_abbreviation(name: str) -> Optional[str]:
    """Exact, case-insensitive full-name lookup. No prefix matching."""
    wanted = name.strip().lower()
    for abbr, full_name in JURISDICTIONS.items():
        if full_name.lower() == wanted:
            return abbr
    return None


def resolve_jurisdiction(abbr_or_name: Optional[str]) -> Optional[str]:
    """Map an abbreviation to its full name, or a full name to its abbreviation.

    Returns None when the value is neither. Applying it twice to a valid
    abbreviation gives the abbreviation back.
    """
    if not abbr_or_name or not abbr_or_name.strip():
        return None
    name = get_state_name(abbr_or_name)
    if name is not None:
        return name
    return get_state_abbreviation(abbr_or_name)


def to_abbreviation(abbr_or_name: Optional[str]) -> Optional[str]:
    """Canonical upper-case abbreviation for either form, or None."""
    if validate_jurisdiction(abbr_or_name):
        return normalize_abbreviation(abbr_or_name)  # type: ignore[arg-type]
    if not abbr_or_name:
        return None
    return get_state_abbreviation(abbr_or_name)


def build_location_path(state: str, city: Optional[str] = None, prefix: str = "") -> str:
    """Canonical route path for a state or a state/city pair.

    Casing and surrounding whitespace do not change the result, so
    ("il", "Downers Grove") and ("IL", "downers grove") give the same path.
    A city that slugifies to nothing yields the state path.
    """
    state_slug = state.strip().lower()
    path = f"{prefix.rstrip('/')}/{state_slug}"
    city_slug = slugify(city) if city else ""
    if city_slug:
        path = f"{path}/{city_slug}"
    return path


def all_jurisdictions() -> List[Jurisdiction]:
    return [Jurisdiction(abbr, name) for abbr, name in JURISDICTIONS.items()]
