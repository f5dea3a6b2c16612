from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional

from .categories import find_category
from .config import BUSINESS_LABEL_MAX
from .jurisdictions import build_location_path, get_state_name, normalize_abbreviation, validate_jurisdiction
from .normalize import format_category_name, slugify
from .records import CategoryRecord
from .taxonomy import TaxonomySnapshot


@dataclass(frozen=True)
class Breadcrumb:
    type: str
    label: str
    href: str
    description: str


@dataclass(frozen=True)
class SearchOrigin:
    """Where a visitor came from before landing on a business page."""

    city: Optional[str] = None
    state_abbr: Optional[str] = None
    category: Optional[str] = None


def _categories_root() -> Breadcrumb:
    return Breadcrumb("categories", "Categories", "/categories", "Browse all business categories")


def _city_label(taxonomy: Optional[TaxonomySnapshot], state_abbr: str, city: str) -> Optional[str]:
    if taxonomy is None:
        return city
    node = taxonomy.get_city(state_abbr, city)
    return node.name if node is not None else None


def _category_trail(
    category_slug: str,
    category_name: str,
    state: Optional[str],
    city: Optional[str],
    taxonomy: Optional[TaxonomySnapshot],
) -> List[Breadcrumb]:
    prefix = f"/categories/{category_slug}"
    crumbs = [
        _categories_root(),
        Breadcrumb("category", category_name, prefix, f"Browse all {category_name} businesses"),
    ]
    if not state or not validate_jurisdiction(state):
        return crumbs
    abbr = normalize_abbreviation(state)
    crumbs.append(
        Breadcrumb(
            "state",
            abbr,
            build_location_path(abbr, prefix=prefix),
            f"Browse {category_name} in {get_state_name(abbr)}",
        )
    )
    if city:
        label = _city_label(taxonomy, abbr, city)
        if label is not None:
            crumbs.append(
                Breadcrumb(
                    "city",
                    label,
                    build_location_path(abbr, city, prefix=prefix),
                    f"{category_name} in {label}, {abbr}",
                )
            )
    return crumbs


def category_breadcrumbs(category: CategoryRecord) -> List[Breadcrumb]:
    return _category_trail(category.slug, category.name, None, None, None)


def category_city_breadcrumbs(
    category: CategoryRecord,
    state: str,
    city: Optional[str] = None,
    taxonomy: Optional[TaxonomySnapshot] = None,
) -> List[Breadcrumb]:
    return _category_trail(category.slug, category.name, state, city, taxonomy)


def location_breadcrumbs(
    state: Optional[str],
    city: Optional[str] = None,
    taxonomy: Optional[TaxonomySnapshot] = None,
) -> List[Breadcrumb]:
    crumbs = [Breadcrumb("locations", "Locations", "/locations", "Browse all locations")]
    if not state or not validate_jurisdiction(state):
        return crumbs
    abbr = normalize_abbreviation(state)
    state_name = get_state_name(abbr)
    crumbs.append(
        Breadcrumb(
            "state",
            state_name,
            build_location_path(abbr, prefix="/locations"),
            f"Browse businesses in {state_name}",
        )
    )
    if city:
        label = _city_label(taxonomy, abbr, city)
        if label is not None:
            crumbs.append(
                Breadcrumb(
                    "city",
                    label,
                    build_location_path(abbr, city, prefix="/locations"),
                    f"Browse businesses in {label}, {abbr}",
                )
            )
    return crumbs


def business_breadcrumbs(
    business_name: Optional[str],
    origin: Optional[SearchOrigin] = None,
    categories: Optional[Mapping[str, CategoryRecord]] = None,
    taxonomy: Optional[TaxonomySnapshot] = None,
) -> List[Breadcrumb]:
    crumbs = [_categories_root()]
    if origin is not None and origin.category and categories is not None:
        category = find_category(categories, origin.category)
        if category is not None:
            crumbs = _category_trail(
                category.slug, category.name, origin.state_abbr, origin.city, taxonomy
            )
    if business_name:
        label = business_name
        if len(label) > BUSINESS_LABEL_MAX:
            label = f"{label[:BUSINESS_LABEL_MAX]}..."
        crumbs.append(Breadcrumb("business", label, "#", f"View {business_name} details"))
    return crumbs


def generate_breadcrumbs(
    kind: str,
    *,
    category: Optional[str] = None,
    state: Optional[str] = None,
    city: Optional[str] = None,
    business: Optional[str] = None,
    origin: Optional[SearchOrigin] = None,
    categories: Optional[Mapping[str, CategoryRecord]] = None,
    taxonomy: Optional[TaxonomySnapshot] = None,
) -> List[Breadcrumb]:
    """Breadcrumb trail for a page kind: category, category-city, location or business."""
    if kind == "location":
        return location_breadcrumbs(state, city, taxonomy)
    if kind == "business":
        return business_breadcrumbs(business, origin, categories, taxonomy)
    if kind in ("category", "category-city"):
        record = find_category(categories, category) if categories is not None else None
        if record is None:
            slug = slugify(category)
            if not slug:
                return [_categories_root()]
            record = CategoryRecord(name=format_category_name(slug), slug=slug)
        if kind == "category":
            return category_breadcrumbs(record)
        return category_city_breadcrumbs(record, state or "", city, taxonomy)
    raise ValueError(f"Unknown breadcrumb kind: {kind!r}")
