"""Dashboard views composed from store queries."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from .database import Database
from .query import TransactionFilter, total_pages

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4


class CombinedQueryError(Exception):
    """Raised when any query behind the combined view fails."""

    def __init__(self, details: str):
        self.details = details
        super().__init__(f"Error combining data: {details}")


def build_listing(db: Database, tx_filter: TransactionFilter) -> dict:
    """Get one page of matching transactions with pagination totals."""
    total, data = db.get_listing_page(tx_filter)
    return {
        "data": data,
        "total": total,
        "page": tx_filter.page,
        "per_page": tx_filter.per_page,
        "total_pages": total_pages(total, tx_filter.per_page),
    }


async def gather_bounded(calls: dict[str, Callable[[], Any]], limit: int) -> dict[str, Any]:
    """Run blocking calls on worker threads, at most ``limit`` at a time.

    Waits for every call; the first failure is raised after all have finished.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def run(call: Callable[[], Any]) -> Any:
        async with semaphore:
            return await asyncio.to_thread(call)

    names = list(calls)
    results = await asyncio.gather(
        *(run(calls[name]) for name in names), return_exceptions=True
    )
    for name, result in zip(names, results):
        if isinstance(result, BaseException):
            logger.error("Combined view query %r failed: %s", name, result)
            raise result
    return dict(zip(names, results))


async def build_combined(
    db: Database,
    tx_filter: TransactionFilter,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> dict:
    """Listing, statistics, histogram and category breakdown in one payload."""
    try:
        return await gather_bounded(
            {
                "transactions": lambda: build_listing(db, tx_filter),
                "statistics": lambda: db.get_statistics(tx_filter),
                "bar_chart": lambda: db.get_price_histogram(tx_filter),
                "pie_chart": lambda: db.get_category_breakdown(tx_filter),
            },
            limit=max_concurrency,
        )
    except Exception as e:
        raise CombinedQueryError(str(e)) from e
