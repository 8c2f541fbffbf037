"""Shared query-parameter handling for the REST routers."""

from fastapi import HTTPException, Request

from ..config import get_section
from ..query import InvalidQueryError, TransactionFilter, build_filter


def filter_from_request(
    request: Request,
    month: str | None = None,
    search: str | None = None,
    page: str | None = None,
    per_page: str | None = None,
) -> TransactionFilter:
    """Build a filter from raw query strings, answering 400 on bad input."""
    api_config = get_section(request.app.state.config, "api")
    try:
        return build_filter(
            month=month,
            search=search,
            page=page,
            per_page=per_page,
            default_month=api_config["default_month"],
            default_per_page=api_config["default_per_page"],
            max_per_page=api_config["max_per_page"],
        )
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
