"""Configuration loader for the transaction dashboard."""

from pathlib import Path
import yaml

from .dashboard import DEFAULT_MAX_CONCURRENCY
from .query import DEFAULT_MONTH, DEFAULT_PER_PAGE, MAX_PER_PAGE
from .seed import DEFAULT_FEED_URL, DEFAULT_TIMEOUT

DEFAULT_CONFIG = {
    "paths": {"database": "./data/transactions.db"},
    "seed": {"url": DEFAULT_FEED_URL, "timeout": DEFAULT_TIMEOUT},
    "api": {
        "default_month": DEFAULT_MONTH,
        "default_per_page": DEFAULT_PER_PAGE,
        "max_per_page": MAX_PER_PAGE,
        "max_concurrent_queries": DEFAULT_MAX_CONCURRENCY,
        "cors_origins": ["*"],
    },
    "logging": {"level": "INFO"},
}


def apply_defaults(config: dict | None) -> dict:
    """Fill missing sections and keys from DEFAULT_CONFIG.

    Values in ``config`` win; unknown sections are kept as-is.
    """
    config = config or {}
    if not isinstance(config, dict):
        raise ValueError(f"Config must be a mapping, got {type(config).__name__}")

    merged = dict(config)
    for name in DEFAULT_CONFIG:
        merged[name] = get_section(config, name)
    return merged


def load_config(config_path: str | Path = "config.yaml") -> dict:
    """Load configuration from YAML file, with defaults applied."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        return apply_defaults(yaml.safe_load(f))


def get_config() -> dict:
    """Get configuration from the working directory or the project root."""
    for path in (Path("config.yaml"), Path(__file__).parent.parent / "config.yaml"):
        if path.exists():
            return load_config(path)

    raise FileNotFoundError("Could not find config.yaml in any expected location")  # pragma: no cover


def get_section(config: dict | None, name: str) -> dict:
    """Return a config section with its defaults filled in."""
    section = (config or {}).get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return {**DEFAULT_CONFIG.get(name, {}), **section}
