"""Tests for seed module."""

from unittest.mock import Mock, patch

import httpx
import pytest

from txdash.query import TransactionFilter
from txdash.seed import SeedError, TransactionRecord, fetch_feed, parse_records, seed_database


FEED = [
    {
        "id": 1,
        "title": "Fjallraven Backpack",
        "price": 329.85,
        "description": "Your perfect pack for everyday use",
        "category": "men's clothing",
        "image": "https://fakestoreapi.com/img/81fPKd-2AYL._AC_SL1500_.jpg",
        "sold": False,
        "dateOfSale": "2021-11-27T20:29:54+05:30",
    },
    {
        "id": 2,
        "title": "Mens Casual T-Shirt",
        "price": 22.3,
        "description": "Slim-fitting style",
        "category": "men's clothing",
        "image": "https://fakestoreapi.com/img/71-3HjGNDUL._AC_SY879._SX._UX._SY._UY_.jpg",
        "sold": True,
        "dateOfSale": "2021-03-27T20:29:54+05:30",
    },
]


def _response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestTransactionRecord:
    """Tests for feed record validation."""

    def test_camel_case_feed_item(self):
        """Test a feed item maps to snake_case fields."""
        record = TransactionRecord.model_validate(FEED[0])
        assert record.date_of_sale == "2021-11-27T20:29:54+05:30"
        assert record.price == 329.85
        assert record.sold is False

    def test_negative_price_rejected(self):
        """Test price must not be negative."""
        with pytest.raises(ValueError):
            TransactionRecord.model_validate(dict(FEED[0], price=-1))

    def test_invalid_date_rejected(self):
        """Test dateOfSale must be an ISO date."""
        with pytest.raises(ValueError):
            TransactionRecord.model_validate(dict(FEED[0], dateOfSale="27/11/2021"))

    def test_date_only_accepted(self):
        """Test a plain calendar date is accepted."""
        record = TransactionRecord.model_validate(dict(FEED[0], dateOfSale="2021-11-27"))
        assert record.date_of_sale == "2021-11-27"

    def test_compact_date_normalized(self):
        """Test a basic-format date is rewritten with dashes."""
        record = TransactionRecord.model_validate(dict(FEED[0], dateOfSale="20240305"))
        assert record.date_of_sale == "2024-03-05"


class TestFetchFeed:
    """Tests for fetch_feed function."""

    @patch("txdash.seed.httpx.get")
    def test_fetch_success(self, mock_get):
        """Test the JSON array is returned."""
        mock_get.return_value = _response(FEED)

        assert fetch_feed("https://feed.test/tx.json", timeout=5) == FEED
        mock_get.assert_called_once_with("https://feed.test/tx.json", timeout=5, follow_redirects=True)

    @patch("txdash.seed.httpx.get")
    def test_fetch_http_error(self, mock_get):
        """Test transport errors become SeedError."""
        mock_get.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(SeedError) as exc:
            fetch_feed("https://feed.test/tx.json")
        assert "connection refused" in str(exc.value)

    @patch("txdash.seed.httpx.get")
    def test_fetch_invalid_json(self, mock_get):
        """Test a non-JSON body becomes SeedError."""
        response = _response(None)
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response

        with pytest.raises(SeedError) as exc:
            fetch_feed("https://feed.test/tx.json")
        assert "not valid JSON" in str(exc.value)

    @patch("txdash.seed.httpx.get")
    def test_fetch_requires_array(self, mock_get):
        """Test an object payload is rejected."""
        mock_get.return_value = _response({"items": FEED})

        with pytest.raises(SeedError) as exc:
            fetch_feed("https://feed.test/tx.json")
        assert "JSON array" in str(exc.value)


class TestParseRecords:
    """Tests for parse_records function."""

    def test_parse_valid(self):
        """Test records become store rows."""
        rows = parse_records(FEED)
        assert len(rows) == 2
        assert rows[1]["date_of_sale"] == "2021-03-27T20:29:54+05:30"
        assert rows[1]["sold"] is True
        assert "id" not in rows[0]

    def test_parse_reports_index(self):
        """Test the failing item index is reported."""
        with pytest.raises(SeedError) as exc:
            parse_records([FEED[0], {"title": "missing fields"}])
        assert "index 1" in str(exc.value)


class TestSeedDatabase:
    """Tests for seed_database function."""

    @patch("txdash.seed.httpx.get")
    def test_seed_replaces_contents(self, mock_get, db_with_data):
        """Test seeding replaces existing rows with the feed."""
        mock_get.return_value = _response(FEED)

        count = seed_database(db_with_data, "https://feed.test/tx.json")

        assert count == 2
        assert db_with_data.get_stats()["total_transactions"] == 2

    @patch("txdash.seed.httpx.get")
    def test_seed_invalid_feed_writes_nothing(self, mock_get, db_with_data):
        """Test an invalid feed leaves the store untouched."""
        mock_get.return_value = _response([FEED[0], dict(FEED[1], price=-3)])

        with pytest.raises(SeedError):
            seed_database(db_with_data, "https://feed.test/tx.json")

        assert db_with_data.get_stats()["total_transactions"] == 5

    @patch("txdash.seed.httpx.get")
    def test_seed_compact_date_found_by_month(self, mock_get, db):
        """Test a compact feed date lands in its month."""
        mock_get.return_value = _response([dict(FEED[0], dateOfSale="20240305")])

        seed_database(db, "https://feed.test/tx.json")

        assert db.count_transactions(TransactionFilter(month=3)) == 1
        assert db.list_transactions(TransactionFilter(month=3))[0]["date_of_sale"] == "2024-03-05"
