import logging
import os
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd
from dotenv import load_dotenv
from supabase import Client, create_client

from ..config import TABLE_PAGE_SIZE
from ..errors import TableStoreError

# Load environment variables
load_dotenv()

LOGGER = logging.getLogger(__name__)

BUSINESSES_TABLE = "businesses"


class SupabaseService:
    """Thin access layer for the directory's business table"""

    def __init__(self, client: Optional[Client] = None):
        if client is not None:
            self.client = client
            return

        url = os.getenv("SUPABASE_URL")
        # Use service role key for full access
        key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in environment")

        self.client: Client = create_client(url, key)

    def _execute(self, query, action: str):
        try:
            return query.execute()
        except Exception as exc:
            raise TableStoreError(f"Failed to {action}: {exc}") from exc

    # ==================== BUSINESSES READ ====================

    def get_businesses(self, columns: str = "*", limit: int = TABLE_PAGE_SIZE,
                       offset: int = 0, **filters) -> List[Dict[str, Any]]:
        """Get one page of businesses with optional equality filters"""
        query = (self.client.table(BUSINESSES_TABLE)
                 .select(columns)
                 .range(offset, offset + limit - 1))
        for key, value in filters.items():
            query = query.eq(key, value)
        response = self._execute(query, "read businesses")
        return response.data or []

    def iter_businesses(self, columns: str = "*", page_size: int = TABLE_PAGE_SIZE,
                        **filters) -> Iterator[Dict[str, Any]]:
        """Page through every business row"""
        offset = 0
        while True:
            page = self.get_businesses(columns, limit=page_size, offset=offset, **filters)
            yield from page
            if len(page) < page_size:
                return
            offset += page_size

    def business_aggregate_frame(self) -> pd.DataFrame:
        """city/state/rating rows used to fill taxonomy aggregates"""
        rows = list(self.iter_businesses("city, state, rating"))
        LOGGER.info("Fetched %d business rows for aggregates", len(rows))
        return pd.DataFrame(rows, columns=["city", "state", "rating"])

    def get_business_slugs(self) -> List[Dict[str, Any]]:
        """slug/updated_at pairs for the sitemap, newest first"""
        rows = list(self.iter_businesses("slug, updated_at"))
        rows.sort(key=lambda r: r.get("updated_at") or "", reverse=True)
        return rows

    # ==================== BUSINESSES UPDATE ====================

    def mark_all_claimed(self) -> int:
        """Set is_claimed on every unclaimed business, returning the update count"""
        query = (self.client.table(BUSINESSES_TABLE)
                 .update({"is_claimed": True})
                 .eq("is_claimed", False))
        response = self._execute(query, "mark businesses claimed")
        updated = len(response.data or [])
        LOGGER.info("Marked %d businesses as claimed", updated)
        return updated

    def test_connection(self) -> bool:
        """Check that the business table answers a trivial query"""
        try:
            self.get_businesses("id", limit=1)
        except TableStoreError as exc:
            LOGGER.error("Supabase connection test failed: %s", exc)
            return False
        return True


# Singleton instance
_supabase_service = None


def get_supabase_service() -> SupabaseService:
    """Get or create the singleton SupabaseService instance"""
    global _supabase_service
    if _supabase_service is None:
        _supabase_service = SupabaseService()
    return _supabase_service
