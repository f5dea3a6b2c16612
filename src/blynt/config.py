from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

load_dotenv()


@dataclass
class DirectoryPaths:
    """Input/output paths required by the taxonomy pipeline."""

    data_dir: Path = Path("data")
    output_dir: Path = Path("output/blynt")
    categories_file: str = "categories.csv"
    locations_file: str = "locations.csv"

    def categories_csv(self) -> Path:
        return self.data_dir / self.categories_file

    def locations_csv(self) -> Path:
        return self.data_dir / self.locations_file

    def sitemap_dir(self) -> Path:
        return self.output_dir / "sitemaps"


DEFAULT_SITE_URL = "https://getblynt.com"

# changefreq / priority per sitemap group
SITEMAP_SETTINGS: Dict[str, Dict[str, object]] = {
    "static": {"changefreq": "daily", "priority": 1.0},
    "categories": {"changefreq": "daily", "priority": 0.9},
    "states": {"changefreq": "daily", "priority": 0.8},
    "cities": {"changefreq": "daily", "priority": 0.7},
    "businesses": {"changefreq": "daily", "priority": 0.9},
}

SITEMAP_MAX_URLS = 50000
BUSINESS_LABEL_MAX = 30
TABLE_PAGE_SIZE = 1000


def _site_url_from_env() -> str:
    return os.getenv("BLYNT_SITE_URL", DEFAULT_SITE_URL).rstrip("/")


@dataclass
class SiteConfig:
    base_url: str = field(default_factory=_site_url_from_env)


@dataclass
class PipelineConfig:
    paths: DirectoryPaths = field(default_factory=DirectoryPaths)
    site: SiteConfig = field(default_factory=SiteConfig)
    include_business_aggregates: bool = False
    include_business_sitemap: bool = False
    sitemap_max_urls: int = SITEMAP_MAX_URLS
