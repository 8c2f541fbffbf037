"""Shared fixtures for transaction dashboard tests."""

import pytest

from txdash.database import Database


SAMPLE_TRANSACTIONS = [
    {
        "title": "Slim Fit Shirt",
        "description": "Cotton casual shirt",
        "price": 50.0,
        "category": "men's clothing",
        "sold": True,
        "date_of_sale": "2024-03-05T10:00:00+05:30",
        "image": "https://example.com/shirt.jpg",
    },
    {
        "title": "Gold Ring",
        "description": "Classic jewelery piece",
        "price": 150.0,
        "category": "jewelery",
        "sold": False,
        "date_of_sale": "2024-03-10",
        "image": "https://example.com/ring.jpg",
    },
    {
        "title": "Laptop",
        "description": "Fast ultrabook",
        "price": 950.0,
        "category": "electronics",
        "sold": True,
        "date_of_sale": "2023-03-20T08:00:00Z",
        "image": None,
    },
    {
        "title": "Backpack",
        "description": "Travel bag",
        "price": 100.5,
        "category": "men's clothing",
        "sold": True,
        "date_of_sale": "2022-03-01",
        "image": "https://example.com/bag.jpg",
    },
    {
        "title": "Monitor",
        "description": "4K display",
        "price": 320.0,
        "category": "electronics",
        "sold": False,
        "date_of_sale": "2024-11-27T20:29:54+05:30",
        "image": "https://example.com/monitor.jpg",
    },
]


@pytest.fixture
def db(tmp_path):
    """Create a temporary database for testing."""
    return Database(tmp_path / "test.db")


@pytest.fixture
def db_with_data(db):
    """Create a database with sample data (four March sales, one November)."""
    db.insert_transactions_batch(SAMPLE_TRANSACTIONS)
    return db
