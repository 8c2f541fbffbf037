"""Load the transaction store from the remote JSON feed."""

import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .database import Database
from .query import normalize_sale_date

logger = logging.getLogger(__name__)

DEFAULT_FEED_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"
DEFAULT_TIMEOUT = 30.0


class SeedError(Exception):
    """Raised when the feed cannot be fetched or validated."""


class TransactionRecord(BaseModel):
    """One transaction as published by the feed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    description: str = ""
    price: float = Field(ge=0)
    category: str
    sold: bool
    date_of_sale: str
    image: str | None = None

    @field_validator("date_of_sale")
    @classmethod
    def _valid_iso_date(cls, value: str) -> str:
        return normalize_sale_date(value)


def fetch_feed(url: str = DEFAULT_FEED_URL, timeout: float = DEFAULT_TIMEOUT) -> list:
    """Download the feed and return its JSON array."""
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPError as e:
        raise SeedError(f"Failed to fetch feed from {url}: {e}") from e
    except ValueError as e:
        raise SeedError(f"Feed at {url} is not valid JSON: {e}") from e

    if not isinstance(payload, list):
        raise SeedError(f"Feed at {url} must be a JSON array, got {type(payload).__name__}")
    return payload


def parse_records(raw: list) -> list[dict]:
    """Validate feed items and convert them to store rows.

    The whole feed is rejected if any item is invalid.
    """
    records = []
    for index, item in enumerate(raw):
        try:
            record = TransactionRecord.model_validate(item)
        except ValidationError as e:
            raise SeedError(f"Invalid transaction at index {index}: {e}") from e
        records.append(record.model_dump())
    return records


def seed_database(db: Database, url: str = DEFAULT_FEED_URL, timeout: float = DEFAULT_TIMEOUT) -> int:
    """Replace the store contents with the feed. Returns the number of rows."""
    logger.info("Seeding transactions from %s", url)
    records = parse_records(fetch_feed(url, timeout=timeout))
    count = db.replace_all_transactions(records)
    logger.info("Seeded %d transactions", count)
    return count
