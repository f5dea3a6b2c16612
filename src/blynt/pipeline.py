from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Optional

from .aggregates import apply_business_aggregates
from .categories import build_category_index, category_dataframe
from .config import SITEMAP_MAX_URLS, DirectoryPaths, PipelineConfig, SiteConfig
from .records import load_categories
from .sitemap import (
    business_urls,
    category_location_urls,
    category_urls,
    location_urls,
    static_urls,
    write_sitemaps,
)
from .supabase_client import SupabaseService, get_supabase_service
from .taxonomy import cities_dataframe, load_taxonomy, states_dataframe, taxonomy_to_dict

LOGGER = logging.getLogger(__name__)


def run_pipeline(config: PipelineConfig, service: Optional[SupabaseService] = None) -> Dict[str, Path]:
    """Build the taxonomy and write its artifacts.

    Everything is loaded and validated before the first file is written, so a
    fatal data error leaves the output directory untouched.
    """
    paths = config.paths
    categories = load_categories(paths)
    category_index = build_category_index(categories)
    taxonomy = load_taxonomy(paths)

    business_rows = []
    if config.include_business_aggregates or config.include_business_sitemap:
        service = service or get_supabase_service()
        if config.include_business_aggregates:
            taxonomy = apply_business_aggregates(taxonomy, service.business_aggregate_frame())
        if config.include_business_sitemap:
            business_rows = service.get_business_slugs()

    output_dir = paths.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    outputs = {
        "taxonomy": output_dir / "taxonomy.json",
        "states": output_dir / "states.csv",
        "cities": output_dir / "cities.csv",
        "categories": output_dir / "categories.csv",
        "metadata": output_dir / "metadata.json",
    }

    outputs["taxonomy"].write_text(json.dumps(taxonomy_to_dict(taxonomy), indent=2))
    states_dataframe(taxonomy).to_csv(outputs["states"], index=False)
    cities_dataframe(taxonomy).to_csv(outputs["cities"], index=False)
    category_dataframe(category_index.values()).to_csv(outputs["categories"], index=False)

    base_url = config.site.base_url
    category_state_urls, category_city_urls = category_location_urls(base_url, category_index.values(), taxonomy)
    groups = {
        "static": static_urls(base_url),
        "categories": category_urls(base_url, category_index.values()),
        "locations": location_urls(base_url, taxonomy),
        "category-states": category_state_urls,
        "category-cities": category_city_urls,
    }
    if business_rows:
        groups["businesses"] = business_urls(base_url, business_rows)
    sitemap_files = write_sitemaps(groups, paths.sitemap_dir(), base_url, config.sitemap_max_urls)
    outputs["sitemap"] = sitemap_files[0]

    metadata = {
        "built_at": taxonomy.built_at.isoformat(),
        "n_location_records": taxonomy.record_count,
        "n_states": len(taxonomy),
        "n_cities": taxonomy.city_count,
        "n_categories": len(category_index),
        "n_slug_collisions": len(taxonomy.collisions),
        "slug_collisions": [
            {"state_abbr": c.state_abbr, "slug": c.slug, "kept": c.kept_name, "merged": c.merged_name}
            for c in taxonomy.collisions
        ],
        "business_aggregates": config.include_business_aggregates,
        "n_sitemap_files": len(sitemap_files),
    }
    outputs["metadata"].write_text(json.dumps(metadata, indent=2))
    return outputs


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build the state/city directory taxonomy from the location and category CSVs."
    )
    parser.add_argument("--data-dir", type=str, default="data", help="Directory containing CSV inputs.")
    parser.add_argument("--output-dir", type=str, default="output/blynt", help="Where to place generated tables.")
    parser.add_argument("--locations-file", type=str, default="locations.csv", help="Location CSV file name.")
    parser.add_argument("--categories-file", type=str, default="categories.csv", help="Category CSV file name.")
    parser.add_argument("--base-url", type=str, default="", help="Site URL for sitemaps (defaults to BLYNT_SITE_URL).")
    parser.add_argument("--with-aggregates", action="store_true", help="Merge business counts/ratings from Supabase.")
    parser.add_argument("--with-business-sitemap", action="store_true", help="Add business pages from Supabase to the sitemap.")
    parser.add_argument("--sitemap-max-urls", type=int, default=SITEMAP_MAX_URLS, help="Max URLs per sitemap file.")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level.")
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    paths = DirectoryPaths(
        data_dir=Path(args.data_dir),
        output_dir=Path(args.output_dir),
        locations_file=args.locations_file,
        categories_file=args.categories_file,
    )
    site = SiteConfig(base_url=args.base_url.rstrip("/")) if args.base_url else SiteConfig()
    config = PipelineConfig(
        paths=paths,
        site=site,
        include_business_aggregates=args.with_aggregates,
        include_business_sitemap=args.with_business_sitemap,
        sitemap_max_urls=args.sitemap_max_urls,
    )
    run_pipeline(config)
    print(f"[blynt] Taxonomy artifacts saved to: {paths.output_dir.resolve()}")


if __name__ == "__main__":
    main()
