"""
Unit tests for sitemap URL generation and file output.
"""

import xml.etree.ElementTree as ET

import pytest

from blynt.sitemap import (
    SITEMAP_NS,
    SitemapUrl,
    business_urls,
    category_location_urls,
    category_urls,
    chunk_urls,
    location_urls,
    static_urls,
    write_sitemaps,
)

BASE = "https://example.com/"
NS = {"sm": SITEMAP_NS}


def _urls(n):
    return [SitemapUrl(f"https://example.com/{i}", "2024-01-01", "daily", 0.5) for i in range(n)]


class TestUrlBuilders:
    """Test cases for per-group URL lists."""

    def test_static_urls(self):
        urls = {u.loc: u for u in static_urls(BASE, "2024-01-01")}
        home = urls["https://example.com"]
        assert (home.changefreq, home.priority) == ("daily", 1.0)
        assert urls["https://example.com/locations"].priority == 0.8
        assert urls["https://example.com/claim-business"].changefreq == "monthly"
        privacy = urls["https://example.com/privacy"]
        assert (privacy.changefreq, privacy.priority) == ("yearly", 0.3)
        assert all(u.lastmod == "2024-01-01" for u in urls.values())

    def test_category_urls(self, sample_categories):
        urls = category_urls(BASE, sample_categories, "2024-01-01")
        assert urls[0].loc == "https://example.com/categories/tire-shop"
        assert {u.priority for u in urls} == {0.9}

    def test_location_urls_list_each_slug_once(self, snapshot):
        locs = [u.loc for u in location_urls(BASE, snapshot, "2024-01-01")]
        assert locs == [
            "https://example.com/locations/ca",
            "https://example.com/locations/ca/azusa",
            "https://example.com/locations/ca/st-louis-park",
            "https://example.com/locations/il",
            "https://example.com/locations/il/downers-grove",
        ]

    def test_category_location_urls(self, snapshot, sample_categories):
        state_urls, city_urls = category_location_urls(BASE, sample_categories[:2], snapshot, "2024-01-01")
        assert [u.loc for u in state_urls] == [
            "https://example.com/categories/tire-shop/ca",
            "https://example.com/categories/tire-shop/il",
            "https://example.com/categories/dollar-store/ca",
            "https://example.com/categories/dollar-store/il",
        ]
        city_locs = [u.loc for u in city_urls]
        assert len(city_locs) == 6
        assert len(set(city_locs)) == 6
        assert "https://example.com/categories/tire-shop/ca/azusa" in city_locs
        assert "https://example.com/categories/dollar-store/ca/st-louis-park" in city_locs
        assert "https://example.com/categories/tire-shop/il/downers-grove" in city_locs
        assert {u.priority for u in state_urls} == {0.8}
        assert {u.priority for u in city_urls} == {0.7}

    def test_business_urls_skip_missing_slugs(self):
        urls = business_urls(
            BASE,
            [
                {"slug": "joes-tires", "updated_at": "2024-03-01T00:00:00"},
                {"slug": None, "updated_at": "2024-02-01T00:00:00"},
                {"slug": "dollar-plus"},
            ],
        )
        assert [u.loc for u in urls] == ["https://example.com/biz/joes-tires", "https://example.com/biz/dollar-plus"]
        assert urls[0].lastmod == "2024-03-01T00:00:00"
        assert urls[1].lastmod


class TestChunkUrls:
    """Test cases for chunk_urls."""

    def test_chunk_sizes(self):
        assert [len(c) for c in chunk_urls(_urls(5), 2)] == [2, 2, 1]

    def test_empty(self):
        assert chunk_urls([], 10) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            chunk_urls(_urls(1), 0)


class TestWriteSitemaps:
    """Test cases for write_sitemaps."""

    def test_files_and_index(self, tmp_path):
        written = write_sitemaps({"static": _urls(1), "cities": _urls(3)}, tmp_path / "maps", BASE, max_urls=2)
        names = [p.name for p in written]
        assert names == ["sitemap.xml", "sitemap-static.xml", "sitemap-cities-1.xml", "sitemap-cities-2.xml"]

        urlset = ET.parse(tmp_path / "maps" / "sitemap-cities-1.xml").getroot()
        assert urlset.tag == f"{{{SITEMAP_NS}}}urlset"
        entries = urlset.findall("sm:url", NS)
        assert len(entries) == 2
        assert entries[0].find("sm:priority", NS).text == "0.5"

        index = ET.parse(written[0]).getroot()
        locs = [e.text for e in index.findall("sm:sitemap/sm:loc", NS)]
        assert locs == [f"https://example.com/sitemaps/{name}" for name in names[1:]]

    def test_rewrite_removes_stale_chunks(self, tmp_path):
        out_dir = tmp_path / "maps"
        write_sitemaps({"cities": _urls(3)}, out_dir, BASE, max_urls=2)
        assert (out_dir / "sitemap-cities-2.xml").exists()

        written = write_sitemaps({"cities": _urls(1)}, out_dir, BASE, max_urls=2)
        assert sorted(p.name for p in out_dir.glob("*.xml")) == ["sitemap-cities.xml", "sitemap.xml"]
        assert [p.name for p in written] == ["sitemap.xml", "sitemap-cities.xml"]
