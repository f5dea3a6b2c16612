from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

import pandas as pd

from .errors import CategoryDataError
from .normalize import slugify
from .records import CategoryRecord


def build_category_index(categories: Iterable[CategoryRecord]) -> Mapping[str, CategoryRecord]:
    """Index categories by slug, rejecting duplicate or non URL-safe slugs."""
    index: Dict[str, CategoryRecord] = {}
    for category in categories:
        if slugify(category.slug) != category.slug:
            raise CategoryDataError(
                f"Category slug {category.slug!r} for {category.name!r} is not URL-safe"
            )
        if category.slug in index:
            raise CategoryDataError(
                f"Duplicate category slug {category.slug!r} "
                f"({index[category.slug].name!r} and {category.name!r})"
            )
        index[category.slug] = category
    return MappingProxyType(index)


def find_category(index: Mapping[str, CategoryRecord], value: Optional[str]) -> Optional[CategoryRecord]:
    if not value:
        return None
    found = index.get(value.strip().lower())
    if found is not None:
        return found
    return index.get(slugify(value))


def match_business_category(
    index: Mapping[str, CategoryRecord],
    category: Optional[str],
    additional: Iterable[str] = (),
) -> Optional[CategoryRecord]:
    """The business's primary category if listed, else its first listed additional one."""
    found = find_category(index, category)
    if found is not None:
        return found
    for extra in additional:
        found = find_category(index, extra)
        if found is not None:
            return found
    return None


def category_dataframe(categories: Iterable[CategoryRecord]) -> pd.DataFrame:
    rows = []
    for category in categories:
        rows.append(
            {
                "slug": category.slug,
                "name": category.name,
                "plural_name": category.plural_name,
                "description": category.description or "",
                "aliases": "|".join(category.aliases),
                "parent_category": category.parent_category or "",
            }
        )
    return pd.DataFrame(
        rows,
        columns=["slug", "name", "plural_name", "description", "aliases", "parent_category"],
    )
