"""Sitemap URL lists for category, location and business pages.

Location URLs come from the taxonomy rather than raw location rows, so each
canonical city slug is listed exactly once even when spellings collided.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import SITEMAP_MAX_URLS, SITEMAP_SETTINGS
from .jurisdictions import build_location_path
from .records import CategoryRecord
from .taxonomy import StateNode, sorted_cities, sorted_states

LOGGER = logging.getLogger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

STATIC_PAGES = (
    ("", "static", None),
    ("/categories", "categories", None),
    ("/locations", "states", None),
    ("/add-business", "static", ("monthly", 0.8)),
    ("/claim-business", "static", ("monthly", 0.8)),
    ("/privacy", "static", ("yearly", 0.3)),
    ("/terms", "static", ("yearly", 0.3)),
)


@dataclass(frozen=True)
class SitemapUrl:
    loc: str
    lastmod: str
    changefreq: str
    priority: float


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _url(base_url: str, path: str, group: str, lastmod: str) -> SitemapUrl:
    settings = SITEMAP_SETTINGS[group]
    return SitemapUrl(
        loc=f"{base_url.rstrip('/')}{path}",
        lastmod=lastmod,
        changefreq=str(settings["changefreq"]),
        priority=float(settings["priority"]),
    )


def static_urls(base_url: str, lastmod: Optional[str] = None) -> List[SitemapUrl]:
    lastmod = lastmod or _now()
    urls = []
    for path, group, override in STATIC_PAGES:
        url = _url(base_url, path, group, lastmod)
        if override is not None:
            url = SitemapUrl(url.loc, lastmod, override[0], override[1])
        urls.append(url)
    return urls


def category_urls(
    base_url: str, categories: Iterable[CategoryRecord], lastmod: Optional[str] = None
) -> List[SitemapUrl]:
    lastmod = lastmod or _now()
    return [_url(base_url, f"/categories/{c.slug}", "categories", lastmod) for c in categories]


def location_urls(
    base_url: str, taxonomy: Mapping[str, StateNode], lastmod: Optional[str] = None
) -> List[SitemapUrl]:
    lastmod = lastmod or _now()
    urls = []
    for state in sorted_states(taxonomy):
        urls.append(_url(base_url, build_location_path(state.abbr, prefix="/locations"), "states", lastmod))
        for city in sorted_cities(state):
            path = build_location_path(state.abbr, city.slug, prefix="/locations")
            urls.append(_url(base_url, path, "cities", lastmod))
    return urls


def category_location_urls(
    base_url: str,
    categories: Iterable[CategoryRecord],
    taxonomy: Mapping[str, StateNode],
    lastmod: Optional[str] = None,
) -> Tuple[List[SitemapUrl], List[SitemapUrl]]:
    """Category pages scoped to each state and each city, as two URL lists."""
    lastmod = lastmod or _now()
    states = sorted_states(taxonomy)
    state_urls: List[SitemapUrl] = []
    city_urls: List[SitemapUrl] = []
    for category in categories:
        prefix = f"/categories/{category.slug}"
        for state in states:
            state_urls.append(_url(base_url, build_location_path(state.abbr, prefix=prefix), "states", lastmod))
            for city in sorted_cities(state):
                path = build_location_path(state.abbr, city.slug, prefix=prefix)
                city_urls.append(_url(base_url, path, "cities", lastmod))
    return state_urls, city_urls


def business_urls(base_url: str, businesses: Iterable[Mapping[str, object]]) -> List[SitemapUrl]:
    urls = []
    fallback = _now()
    for business in businesses:
        slug = business.get("slug")
        if not slug:
            continue
        lastmod = str(business.get("updated_at") or fallback)
        urls.append(_url(base_url, f"/biz/{slug}", "businesses", lastmod))
    return urls


def chunk_urls(urls: Sequence[SitemapUrl], max_urls: int = SITEMAP_MAX_URLS) -> List[List[SitemapUrl]]:
    if max_urls <= 0:
        raise ValueError("max_urls must be positive")
    return [list(urls[i : i + max_urls]) for i in range(0, len(urls), max_urls)]


def _urlset(urls: Iterable[SitemapUrl]) -> ET.ElementTree:
    root = ET.Element("urlset", xmlns=SITEMAP_NS)
    for url in urls:
        node = ET.SubElement(root, "url")
        ET.SubElement(node, "loc").text = url.loc
        ET.SubElement(node, "lastmod").text = url.lastmod
        ET.SubElement(node, "changefreq").text = url.changefreq
        ET.SubElement(node, "priority").text = f"{url.priority:.1f}"
    return ET.ElementTree(root)


def write_sitemaps(
    groups: Dict[str, Sequence[SitemapUrl]],
    out_dir: Path,
    base_url: str,
    max_urls: int = SITEMAP_MAX_URLS,
) -> List[Path]:
    """Write one urlset file per chunk of each group plus a sitemap.xml index."""
    out_dir.mkdir(parents=True, exist_ok=True)
    for stale in out_dir.glob("sitemap-*.xml"):
        stale.unlink()
    written: List[Path] = []
    for group, urls in groups.items():
        chunks = chunk_urls(urls, max_urls)
        for n, chunk in enumerate(chunks, start=1):
            suffix = f"-{n}" if len(chunks) > 1 else ""
            path = out_dir / f"sitemap-{group}{suffix}.xml"
            _urlset(chunk).write(path, encoding="utf-8", xml_declaration=True)
            written.append(path)

    index = ET.Element("sitemapindex", xmlns=SITEMAP_NS)
    lastmod = _now()
    for path in written:
        node = ET.SubElement(index, "sitemap")
        ET.SubElement(node, "loc").text = f"{base_url.rstrip('/')}/sitemaps/{path.name}"
        ET.SubElement(node, "lastmod").text = lastmod
    index_path = out_dir / "sitemap.xml"
    ET.ElementTree(index).write(index_path, encoding="utf-8", xml_declaration=True)
    LOGGER.info("Wrote %d sitemap files to %s", len(written), out_dir)
    return [index_path, *written]
