"""REST endpoint for reloading the store from the feed."""

import asyncio

from fastapi import APIRouter, HTTPException, Request

from ...config import get_section
from ...database import StoreError
from ...seed import SeedError, seed_database
from ..models import SeedResponse

router = APIRouter()


@router.post("/seed", response_model=SeedResponse)
async def seed(request: Request) -> SeedResponse:
    """Replace all transactions with the contents of the configured feed."""
    seed_config = get_section(request.app.state.config, "seed")
    db = request.app.state.db

    try:
        count = await asyncio.to_thread(
            seed_database,
            db,
            seed_config["url"],
            seed_config["timeout"],
        )
    except SeedError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return SeedResponse(message="Database initialized successfully", count=count)
