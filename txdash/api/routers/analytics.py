"""REST endpoints for monthly statistics and chart data."""

from fastapi import APIRouter, HTTPException, Query, Request

from ...config import get_section
from ...dashboard import CombinedQueryError, build_combined
from ...database import StoreError
from ..models import CombinedResponse, StatisticsResponse
from ..params import filter_from_request

router = APIRouter()


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    request: Request,
    month: str | None = Query(None, description="Month of sale, 1-12 (default 3)"),
) -> StatisticsResponse:
    """Get total sale amount and sold/unsold item counts for a month."""
    tx_filter = filter_from_request(request, month)
    try:
        stats = request.app.state.db.get_statistics(tx_filter)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return StatisticsResponse(**stats)


@router.get("/bar-chart", response_model=dict[str, int])
async def get_bar_chart(
    request: Request,
    month: str | None = Query(None, description="Month of sale, 1-12 (default 3)"),
) -> dict[str, int]:
    """Get the number of a month's transactions in each price range."""
    tx_filter = filter_from_request(request, month)
    try:
        return request.app.state.db.get_price_histogram(tx_filter)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.get("/pie-chart", response_model=dict[str, int])
async def get_pie_chart(
    request: Request,
    month: str | None = Query(None, description="Month of sale, 1-12 (default 3)"),
) -> dict[str, int]:
    """Get the number of a month's transactions in each category."""
    tx_filter = filter_from_request(request, month)
    try:
        return request.app.state.db.get_category_breakdown(tx_filter)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.get("/combined-data", response_model=CombinedResponse)
async def get_combined_data(
    request: Request,
    month: str | None = Query(None, description="Month of sale, 1-12 (default 3)"),
    search: str | None = Query(None, description="Text matched against title, description and price"),
    page: str | None = Query(None, description="1-based page number"),
    per_page: str | None = Query(None, alias="perPage", description="Transactions per page"),
) -> CombinedResponse:
    """Get listing, statistics, bar chart and pie chart data in one response."""
    tx_filter = filter_from_request(request, month, search, page, per_page)
    api_config = get_section(request.app.state.config, "api")

    try:
        combined = await build_combined(
            request.app.state.db,
            tx_filter,
            max_concurrency=api_config["max_concurrent_queries"],
        )
    except CombinedQueryError as e:
        raise HTTPException(
            status_code=500,
            detail={"error": "Error combining data", "details": e.details},
        ) from e

    return CombinedResponse(**combined)
