"""SQLite storage for seeded sale transactions."""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .query import PRICE_BUCKETS, TransactionFilter, normalize_sale_date

logger = logging.getLogger(__name__)

_COLUMNS = ("title", "description", "price", "category", "sold", "date_of_sale", "image")


class StoreError(Exception):
    """Raised when the transaction store cannot answer a query."""


class Database:
    """SQLite database manager for sale transactions.

    The handle is opened explicitly and closed with :meth:`close`. Every
    operation runs on its own short-lived connection, so one handle can be
    shared by worker threads.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._closed = False
        self._init_schema()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the handle; later operations raise StoreError."""
        self._closed = True

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory."""
        if self._closed:
            raise StoreError("Transaction store is closed")
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside a transaction, translating sqlite errors."""
        conn = self._get_connection()
        try:
            with conn:
                yield conn
        except (sqlite3.Error, OverflowError) as e:
            logger.error("Store query failed: %s", e)
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema if not exists."""
        with self._connect() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    price REAL NOT NULL CHECK(price >= 0),
                    category TEXT NOT NULL,
                    sold INTEGER NOT NULL CHECK(sold IN (0, 1)),
                    date_of_sale TEXT NOT NULL,
                    image TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                CREATE INDEX IF NOT EXISTS idx_transactions_month
                    ON transactions(substr(date_of_sale, 6, 2));
                CREATE INDEX IF NOT EXISTS idx_transactions_category
                    ON transactions(category);
            """)

    @staticmethod
    def _row_values(transaction: dict) -> tuple:
        try:
            date_of_sale = normalize_sale_date(str(transaction.get("date_of_sale") or ""))
        except ValueError as e:
            raise StoreError(f"Invalid date_of_sale: {e}") from e
        return (
            transaction.get("title"),
            transaction.get("description") or "",
            transaction.get("price"),
            transaction.get("category"),
            1 if transaction.get("sold") else 0,
            date_of_sale,
            transaction.get("image"),
        )

    @staticmethod
    def _to_record(row: sqlite3.Row) -> dict:
        record = {key: row[key] for key in ("id",) + _COLUMNS}
        record["sold"] = bool(record["sold"])
        return record

    def insert_transaction(
        self,
        title: str,
        price: float,
        category: str,
        sold: bool,
        date_of_sale: str,
        description: str = "",
        image: str | None = None,
    ) -> int:
        """Insert a single transaction and return its ID."""
        values = self._row_values({
            "title": title,
            "description": description,
            "price": price,
            "category": category,
            "sold": sold,
            "date_of_sale": date_of_sale,
            "image": image,
        })
        with self._connect() as conn:
            cursor = conn.execute(
                f"INSERT INTO transactions ({', '.join(_COLUMNS)}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                values,
            )
            return cursor.lastrowid

    def insert_transactions_batch(self, transactions: list[dict]) -> int:
        """Insert multiple transactions in a single batch."""
        rows = [self._row_values(t) for t in transactions]
        with self._connect() as conn:
            conn.executemany(
                f"INSERT INTO transactions ({', '.join(_COLUMNS)}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                rows,
            )
        return len(rows)

    def replace_all_transactions(self, transactions: list[dict]) -> int:
        """Delete every transaction and insert the given ones atomically."""
        rows = [self._row_values(t) for t in transactions]
        with self._connect() as conn:
            conn.execute("DELETE FROM transactions")
            conn.executemany(
                f"INSERT INTO transactions ({', '.join(_COLUMNS)}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                rows,
            )
        logger.info("Replaced store contents with %d transactions", len(rows))
        return len(rows)

    @staticmethod
    def _count(conn: sqlite3.Connection, tx_filter: TransactionFilter) -> int:
        where, params = tx_filter.where()
        return conn.execute(
            f"SELECT COUNT(*) FROM transactions WHERE {where}", params
        ).fetchone()[0]

    def _select_page(self, conn: sqlite3.Connection, tx_filter: TransactionFilter) -> list[dict]:
        where, params = tx_filter.where()
        logger.debug("Listing transactions where %s %s", where, params)
        rows = conn.execute(
            f"""SELECT id, {', '.join(_COLUMNS)}
                FROM transactions
                WHERE {where}
                ORDER BY id
                LIMIT ? OFFSET ?""",
            params + [tx_filter.limit, tx_filter.offset],
        ).fetchall()
        return [self._to_record(row) for row in rows]

    def count_transactions(self, tx_filter: TransactionFilter) -> int:
        """Count transactions matching the month and search filter."""
        with self._connect() as conn:
            return self._count(conn, tx_filter)

    def list_transactions(self, tx_filter: TransactionFilter) -> list[dict]:
        """Get one page of matching transactions in seed order."""
        with self._connect() as conn:
            return self._select_page(conn, tx_filter)

    def get_listing_page(self, tx_filter: TransactionFilter) -> tuple[int, list[dict]]:
        """Get the match count and one page from the same read snapshot."""
        with self._connect() as conn:
            conn.execute("BEGIN")
            return self._count(conn, tx_filter), self._select_page(conn, tx_filter)

    def get_statistics(self, tx_filter: TransactionFilter) -> dict:
        """Get sale totals for the filter's month."""
        where, params = tx_filter.month_only().where()
        with self._connect() as conn:
            row = conn.execute(
                f"""SELECT COALESCE(SUM(CASE WHEN sold = 1 THEN price END), 0) AS total_sale_amount,
                           COALESCE(SUM(sold = 1), 0) AS total_sold_items,
                           COALESCE(SUM(sold = 0), 0) AS total_unsold_items
                    FROM transactions
                    WHERE {where}""",
                params,
            ).fetchone()
            return {
                "total_sale_amount": round(row["total_sale_amount"], 2),
                "total_sold_items": row["total_sold_items"],
                "total_unsold_items": row["total_unsold_items"],
            }

    def get_price_histogram(self, tx_filter: TransactionFilter) -> dict[str, int]:
        """Count the month's transactions in each fixed price bucket."""
        where, params = tx_filter.month_only().where()
        cases = " ".join(
            f"WHEN price <= {upper} THEN {index}"
            for index, (_lower, upper, _label) in enumerate(PRICE_BUCKETS)
            if upper is not None
        )
        with self._connect() as conn:
            rows = conn.execute(
                f"""SELECT CASE {cases} ELSE {len(PRICE_BUCKETS) - 1} END AS bucket,
                           COUNT(*) AS count
                    FROM transactions
                    WHERE {where}
                    GROUP BY bucket""",
                params,
            ).fetchall()

        counts = {row["bucket"]: row["count"] for row in rows}
        return {label: counts.get(index, 0) for index, (_, _, label) in enumerate(PRICE_BUCKETS)}

    def get_category_breakdown(self, tx_filter: TransactionFilter) -> dict[str, int]:
        """Count the month's transactions per category, in discovery order."""
        where, params = tx_filter.month_only().where()
        with self._connect() as conn:
            rows = conn.execute(
                f"""SELECT category, COUNT(*) AS count
                    FROM transactions
                    WHERE {where}
                    GROUP BY category
                    ORDER BY MIN(id)""",
                params,
            ).fetchall()
            return {row["category"]: row["count"] for row in rows}

    def get_stats(self) -> dict:
        """Get overall store statistics."""
        with self._connect() as conn:
            stats = {}
            stats["total_transactions"] = conn.execute(
                "SELECT COUNT(*) FROM transactions"
            ).fetchone()[0]
            stats["categories_count"] = conn.execute(
                "SELECT COUNT(DISTINCT category) FROM transactions"
            ).fetchone()[0]
            return stats
