"""
FastAPI service exposing the directory taxonomy.
Serves state/city lookups, jurisdiction resolution, canonical paths and the
claim update against the business table.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..categories import build_category_index, find_category
from ..config import DirectoryPaths
from ..errors import TableStoreError, TaxonomyError
from ..jurisdictions import build_location_path, get_state_name, resolve_jurisdiction, validate_jurisdiction
from ..records import load_categories
from ..supabase_client import SupabaseService, get_supabase_service
from ..taxonomy import TaxonomyStore, load_taxonomy, sorted_cities, sorted_states

LOGGER = logging.getLogger(__name__)


# Pydantic models for responses
class CityResponse(BaseModel):
    name: str
    slug: str
    path: str
    business_count: int = 0
    average_rating: float = 0.0
    variants: List[str] = Field(default_factory=list)


class StateSummary(BaseModel):
    abbr: str
    name: str
    path: str
    city_count: int
    total_businesses: int = 0
    average_rating: float = 0.0


class StateResponse(StateSummary):
    cities: List[CityResponse]


class ResolveResponse(BaseModel):
    query: str
    result: Optional[str] = None
    found: bool


class PathResponse(BaseModel):
    state: str
    city: Optional[str] = None
    path: str


class CategoryResponse(BaseModel):
    name: str
    slug: str
    plural_name: str
    description: Optional[str] = None
    parent_category: Optional[str] = None


class ClaimResponse(BaseModel):
    success: bool
    updated_count: int
    message: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    data_loaded: bool
    total_states: int
    total_cities: int
    total_categories: int
    slug_collisions: int


# Initialize FastAPI app
app = FastAPI(
    title="Blynt Directory Taxonomy API",
    description="State/city taxonomy and route helpers for the local-business directory",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global data storage (loaded on startup)
STORE = TaxonomyStore()
DATA_CACHE: Dict[str, Any] = {
    "categories": None,
}


def _paths() -> DirectoryPaths:
    return DirectoryPaths(data_dir=Path(os.getenv("BLYNT_DATA_DIR", "data")))


def load_data(force: bool = False):
    """Load the taxonomy and category index unless already present."""
    if STORE.loaded and DATA_CACHE["categories"] is not None and not force:
        return

    paths = _paths()
    LOGGER.info("Loading directory data from %s", paths.data_dir)
    categories = build_category_index(load_categories(paths))
    snapshot = STORE.reload(lambda: load_taxonomy(paths))
    DATA_CACHE["categories"] = categories
    LOGGER.info("Loaded %d states, %d cities, %d categories",
                len(snapshot), snapshot.city_count, len(DATA_CACHE["categories"]))


@app.on_event("startup")
async def startup_event():
    """Load data when API starts."""
    load_data()


def _require_loaded():
    if not STORE.loaded or DATA_CACHE["categories"] is None:
        raise HTTPException(status_code=503, detail="Data still loading, please try again")


def _city_response(abbr: str, city) -> CityResponse:
    return CityResponse(
        name=city.name,
        slug=city.slug,
        path=build_location_path(abbr, city.slug, prefix="/locations"),
        business_count=city.business_count,
        average_rating=city.average_rating,
        variants=list(city.variants),
    )


def _state_summary(state) -> StateSummary:
    return StateSummary(
        abbr=state.abbr,
        name=state.name,
        path=build_location_path(state.abbr, prefix="/locations"),
        city_count=len(state.cities),
        total_businesses=state.total_businesses,
        average_rating=state.average_rating,
    )


@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint."""
    return {
        "message": "Blynt Directory Taxonomy API",
        "version": "1.0.0",
        "docs": "/docs"
    }


def _health() -> HealthResponse:
    loaded = STORE.loaded and DATA_CACHE["categories"] is not None
    snapshot = STORE.get() if loaded else None
    return HealthResponse(
        status="healthy" if loaded else "loading",
        timestamp=datetime.now(timezone.utc).isoformat(),
        data_loaded=loaded,
        total_states=len(snapshot) if snapshot is not None else 0,
        total_cities=snapshot.city_count if snapshot is not None else 0,
        total_categories=len(DATA_CACHE["categories"]) if loaded else 0,
        slug_collisions=len(snapshot.collisions) if snapshot is not None else 0,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return _health()


@app.get("/states", response_model=List[StateSummary])
async def list_states():
    """All states present in the taxonomy, sorted by name."""
    _require_loaded()
    return [_state_summary(state) for state in sorted_states(STORE.get())]


@app.get("/states/{abbr}", response_model=StateResponse)
async def get_state(abbr: str):
    """A state with its cities sorted by name."""
    _require_loaded()
    if not validate_jurisdiction(abbr):
        raise HTTPException(status_code=404, detail=f"Unknown jurisdiction '{abbr}'")
    state = STORE.get().get(abbr)
    if state is None:
        raise HTTPException(status_code=404, detail=f"No locations listed in {get_state_name(abbr)}")
    summary = _state_summary(state)
    return StateResponse(
        **summary.model_dump(),
        cities=[_city_response(state.abbr, city) for city in sorted_cities(state)],
    )


@app.get("/states/{abbr}/cities/{city}", response_model=CityResponse)
async def get_city(abbr: str, city: str):
    """One city by name or slug."""
    _require_loaded()
    if not validate_jurisdiction(abbr):
        raise HTTPException(status_code=404, detail=f"Unknown jurisdiction '{abbr}'")
    node = STORE.get().get_city(abbr, city)
    if node is None:
        raise HTTPException(status_code=404, detail=f"City '{city}' not found in {abbr.upper()}")
    return _city_response(abbr.upper(), node)


@app.get("/resolve/{value}", response_model=ResolveResponse)
async def resolve(value: str):
    """Abbreviation -> full name or full name -> abbreviation."""
    result = resolve_jurisdiction(value)
    return ResolveResponse(query=value, result=result, found=result is not None)


@app.get("/paths", response_model=PathResponse)
async def location_path(
    state: str = Query(..., description="Jurisdiction abbreviation"),
    city: Optional[str] = Query(None, description="City display name or slug"),
    prefix: str = Query("/locations", description="Route prefix"),
):
    """Canonical route path for a state or state/city pair."""
    if not validate_jurisdiction(state):
        raise HTTPException(status_code=400, detail=f"Unknown jurisdiction '{state}'")
    return PathResponse(state=state.strip().upper(), city=city, path=build_location_path(state, city, prefix))


@app.get("/categories", response_model=List[CategoryResponse])
async def list_categories():
    """All categories with their plural display names."""
    _require_loaded()
    return [
        CategoryResponse(
            name=c.name,
            slug=c.slug,
            plural_name=c.plural_name,
            description=c.description,
            parent_category=c.parent_category,
        )
        for c in sorted(DATA_CACHE["categories"].values(), key=lambda c: c.name)
    ]


@app.get("/categories/{slug}", response_model=CategoryResponse)
async def get_category(slug: str):
    """One category by slug or name."""
    _require_loaded()
    category = find_category(DATA_CACHE["categories"], slug)
    if category is None:
        raise HTTPException(status_code=404, detail=f"Category '{slug}' not found")
    return CategoryResponse(
        name=category.name,
        slug=category.slug,
        plural_name=category.plural_name,
        description=category.description,
        parent_category=category.parent_category,
    )


@app.post("/businesses/claim", response_model=ClaimResponse)
async def claim_businesses(service: SupabaseService = Depends(get_supabase_service)):
    """Mark every unclaimed business as claimed."""
    try:
        updated = service.mark_all_claimed()
    except TableStoreError as exc:
        LOGGER.error("Claim update failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))
    return ClaimResponse(
        success=True,
        updated_count=updated,
        message=f"Successfully updated {updated} businesses",
    )


@app.post("/admin/reload", response_model=HealthResponse)
def reload_data():
    """Rebuild the taxonomy from the CSVs; the old snapshot stays on failure."""
    try:
        load_data(force=True)
    except TaxonomyError as exc:
        LOGGER.error("Taxonomy reload failed: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        LOGGER.error("Directory data unreadable: %s", exc)
        raise HTTPException(status_code=503, detail=f"Directory data unavailable: {exc}")
    return _health()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
