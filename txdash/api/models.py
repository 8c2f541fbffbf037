"""Pydantic models for API request/response schemas."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransactionSchema(CamelModel):
    """Schema for a single transaction."""

    id: int
    title: str
    description: str
    price: float
    category: str
    sold: bool
    date_of_sale: str
    image: str | None = None


class TransactionListResponse(CamelModel):
    """Response for paginated transaction list."""

    data: list[TransactionSchema]
    total: int
    page: int
    per_page: int
    total_pages: int


class StatisticsResponse(CamelModel):
    """Sale totals for a month."""

    total_sale_amount: float
    total_sold_items: int
    total_unsold_items: int


class CombinedResponse(CamelModel):
    """Listing, statistics and both charts for one request."""

    transactions: TransactionListResponse
    statistics: StatisticsResponse
    bar_chart: dict[str, int]
    pie_chart: dict[str, int]


class SeedResponse(BaseModel):
    """Result of reloading the store from the feed."""

    message: str
    count: int
