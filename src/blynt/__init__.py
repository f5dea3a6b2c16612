"""
Location & category taxonomy for the Blynt local-business directory.

The package provides utilities for:
    * normalizing city and category names into URL slugs and plural labels,
    * resolving and validating US jurisdiction abbreviations,
    * folding the location CSV into an immutable state -> city taxonomy,
    * merging business counts/ratings and deriving breadcrumbs and sitemaps.

Everything runs against CSV files; Supabase is only needed for the optional
business aggregates.
"""

from __future__ import annotations

from .errors import InvalidJurisdictionError, SlugCollisionWarning, TaxonomyError
from .jurisdictions import build_location_path, resolve_jurisdiction, validate_jurisdiction
from .normalize import pluralize, slugify
from .taxonomy import CityNode, StateNode, TaxonomySnapshot, load_taxonomy, transform_to_state_city

__all__ = [
    "CityNode",
    "InvalidJurisdictionError",
    "SlugCollisionWarning",
    "StateNode",
    "TaxonomyError",
    "TaxonomySnapshot",
    "build_location_path",
    "load_taxonomy",
    "pluralize",
    "resolve_jurisdiction",
    "run_pipeline",
    "slugify",
    "transform_to_state_city",
    "validate_jurisdiction",
]


def run_pipeline(*args, **kwargs):
    """Lazy wrapper so importing blynt doesn't pull in the Supabase client."""

    from .pipeline import run_pipeline as _run_pipeline

    return _run_pipeline(*args, **kwargs)
