"""Request parsing and SQL filter construction for transaction queries."""

import math
from datetime import date, datetime
from dataclasses import dataclass, replace

DEFAULT_MONTH = 3
DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100
MAX_OFFSET = 2**63 - 1

# (lower, upper, label); a bucket holds lower < price <= upper, the first also holds 0
PRICE_BUCKETS: list[tuple[float, float | None, str]] = [
    (0, 100, "0-100"),
    (100, 200, "101-200"),
    (200, 300, "201-300"),
    (300, 400, "301-400"),
    (400, 500, "401-500"),
    (500, 600, "501-600"),
    (600, 700, "601-700"),
    (700, 800, "701-800"),
    (800, 900, "801-900"),
    (900, None, "901-above"),
]


class InvalidQueryError(ValueError):
    """Raised when request parameters cannot be turned into a filter."""


@dataclass(frozen=True)
class TransactionFilter:
    """Month filter plus optional free-text search and pagination."""

    month: int
    search: str = ""
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    @property
    def limit(self) -> int:
        return self.per_page

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def month_only(self) -> "TransactionFilter":
        """Same month, without search text or pagination."""
        return replace(self, search="", page=DEFAULT_PAGE, per_page=DEFAULT_PER_PAGE)

    def where(self) -> tuple[str, list]:
        """Render the WHERE clause body and its parameters."""
        # Month of year as written in the stored date; the year is ignored
        clauses = ["substr(date_of_sale, 6, 2) = ?"]
        params: list = [f"{self.month:02d}"]

        if self.search:
            pattern = f"%{escape_like(self.search)}%"
            clauses.append(
                "(title LIKE ? ESCAPE '\\'"
                " OR description LIKE ? ESCAPE '\\'"
                " OR CAST(price AS TEXT) LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern, pattern])

        return " AND ".join(clauses), params


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so the text matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_digits(value: str | int) -> int | None:
    """Parse plain ASCII digits, or return None for anything else."""
    if isinstance(value, int):
        return value
    text = value.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def parse_month(value: str | int | None, default: int = DEFAULT_MONTH) -> int:
    """Normalize a month parameter to an integer 1-12.

    Only numeric input is accepted ("3", "03", 3). Missing or blank values
    fall back to ``default``.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default

    month = _parse_digits(value)
    if month is None or not 1 <= month <= 12:
        raise InvalidQueryError(f"Invalid month: {value!r} (expected a number from 1 to 12)")
    return month


def parse_positive_int(
    value: str | int | None,
    message: str,
    default: int,
    maximum: int | None = None,
) -> int:
    """Parse a 1-based integer parameter, rejecting anything non-positive."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default

    number = _parse_digits(value)
    if number is None or number < 1:
        raise InvalidQueryError(f"{message}: {value!r}")
    if maximum is not None and number > maximum:
        raise InvalidQueryError(f"{message}: {value!r} (maximum is {maximum})")
    return number


def build_filter(
    month: str | int | None = None,
    search: str | None = None,
    page: str | int | None = None,
    per_page: str | int | None = None,
    default_month: int = DEFAULT_MONTH,
    default_per_page: int = DEFAULT_PER_PAGE,
    max_per_page: int = MAX_PER_PAGE,
) -> TransactionFilter:
    """Validate raw request parameters and build a TransactionFilter."""
    tx_filter = TransactionFilter(
        month=parse_month(month, default=default_month),
        search=(search or "").strip(),
        page=parse_positive_int(page, "Invalid page number", DEFAULT_PAGE),
        per_page=parse_positive_int(
            per_page, "Invalid per page value", default_per_page, maximum=max_per_page
        ),
    )
    # SQLite binds OFFSET as a signed 64-bit integer
    if tx_filter.offset > MAX_OFFSET:
        raise InvalidQueryError(f"Invalid page number: {page!r} (page is too large)")
    return tx_filter


def normalize_sale_date(value: str) -> str:
    """Return a sale date in extended ISO-8601 form (YYYY-MM-DD...).

    Compact forms such as "20240305" are rewritten so the month always sits
    at characters 6-7, which the month filter relies on.
    """
    text = value.strip()
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).isoformat()
    except ValueError:
        raise ValueError(f"not an ISO-8601 date: {value!r}") from None


def total_pages(total: int, per_page: int) -> int:
    """Number of pages needed to show ``total`` rows at ``per_page`` each."""
    return math.ceil(total / per_page)
