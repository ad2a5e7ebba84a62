import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from listing_browse import SCHEMAS, BrowseSession, InMemoryListingStore
from listing_browse.config import CATALOG_PATH, LOG_LEVEL
from listing_browse.schema import NAVIGATION_FIELDS
from listing_browse.session import load_select_options
from listing_browse.store import AbstractListingStore
from listing_browse.utils import serialize_record

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI()

# Enable CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify the exact origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class FilterChip(BaseModel):
    key: str
    label: str


class BrowseResponse(BaseModel):
    records: List[Dict[str, Any]]
    loaded_count: int
    matched_count: int
    total_count: Optional[int] = None
    has_more: bool
    loading_more: bool
    error: Optional[str] = None
    view_size: int
    sort: str
    view_mode: str
    url: str
    filters: List[FilterChip]


@lru_cache(maxsize=1)
def get_store() -> AbstractListingStore:
    """Shared store loaded once from the catalog file."""
    if not Path(CATALOG_PATH).exists():
        logger.warning("Catalog %s not found; serving an empty store", CATALOG_PATH)
        return InMemoryListingStore([])
    return InMemoryListingStore.from_json(CATALOG_PATH)


@app.get("/browse/{variant}/{slug}", response_model=BrowseResponse)
async def browse(
    variant: str,
    slug: str,
    request: Request,
    store: AbstractListingStore = Depends(get_store),
):
    schema = SCHEMAS.get(variant)
    if schema is None or not slug.strip():
        raise HTTPException(status_code=404, detail=f"Unknown listing page: {variant}/{slug}")

    # Each request is one navigation: hydrate from the query string, load, respond.
    session = BrowseSession(store, schema=schema)
    view = await session.navigate(
        f"/browse/{variant}/{slug}",
        {NAVIGATION_FIELDS[variant]: slug},
        request.url.query,
        select_options=await load_select_options(store, variant, slug),
    )
    return BrowseResponse(
        records=[serialize_record(r) for r in view.records],
        loaded_count=view.loaded_count,
        matched_count=view.matched_count,
        total_count=view.total_count,
        has_more=view.has_more,
        loading_more=view.loading_more,
        error=view.error,
        view_size=view.view_size,
        sort=view.sort.value,
        view_mode=view.view_mode.value,
        url=view.url,
        filters=[FilterChip(key=k, label=label) for k, label in session.active_filters()],
    )


@app.get("/")
async def root():
    return {"status": "Listing browse API is running", "docs": "/docs"}


@app.get("/health")
async def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
