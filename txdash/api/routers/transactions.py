"""REST endpoints for transaction queries."""

from fastapi import APIRouter, HTTPException, Query, Request

from ...dashboard import build_listing
from ...database import StoreError
from ..models import TransactionListResponse
from ..params import filter_from_request

router = APIRouter()


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    request: Request,
    month: str | None = Query(None, description="Month of sale, 1-12 (default 3)"),
    search: str | None = Query(None, description="Text matched against title, description and price"),
    page: str | None = Query(None, description="1-based page number"),
    per_page: str | None = Query(None, alias="perPage", description="Transactions per page"),
) -> TransactionListResponse:
    """Get one page of a month's transactions, optionally filtered by search text."""
    tx_filter = filter_from_request(request, month, search, page, per_page)
    db = request.app.state.db

    try:
        listing = build_listing(db, tx_filter)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return TransactionListResponse(**listing)
