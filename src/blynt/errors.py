"""Error types raised while loading and building the directory taxonomy."""

from __future__ import annotations

from typing import Optional


class TaxonomyError(Exception):
    """Base class for data faults that abort a taxonomy load."""


class InvalidJurisdictionError(TaxonomyError, ValueError):
    def __init__(self, state_abbr: str, record_id: Optional[str] = None):
        self.state_abbr = state_abbr
        self.record_id = record_id
        where = f" (location id {record_id})" if record_id else ""
        super().__init__(f"Unrecognized jurisdiction abbreviation {state_abbr!r}{where}")


class LocationDataError(TaxonomyError, ValueError):
    """A location record cannot be turned into a route segment."""


class CategoryDataError(TaxonomyError, ValueError):
    """Duplicate or malformed category slug."""


class TableStoreError(RuntimeError):
    """A query against the remote business table failed."""


class SlugCollisionWarning(UserWarning):
    """Two distinct city spellings in one state normalize to the same slug.

    The builder keeps ``kept_name`` as the display name and merges the
    record spelled ``merged_name`` into the same city node.
    """

    def __init__(self, state_abbr: str, slug: str, kept_name: str, merged_name: str):
        self.state_abbr = state_abbr
        self.slug = slug
        self.kept_name = kept_name
        self.merged_name = merged_name
        super().__init__(
            f"{state_abbr}/{slug}: {merged_name!r} merged into {kept_name!r}"
        )
