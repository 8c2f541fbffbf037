#!/usr/bin/env python3
import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import get_config, get_section, load_config
from .dashboard import build_listing
from .database import Database, StoreError
from .query import InvalidQueryError, TransactionFilter, build_filter
from .seed import SeedError, seed_database


console = Console()


def setup_logging(config: dict, verbose: bool = False) -> None:
    """Route log records through rich at the configured level."""
    level = "DEBUG" if verbose else get_section(config, "logging")["level"]
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _filter_from_args(args: argparse.Namespace, config: dict) -> TransactionFilter:
    """Build a query filter from CLI arguments, exiting on invalid input."""
    api_config = get_section(config, "api")
    try:
        return build_filter(
            month=getattr(args, "month", None),
            search=getattr(args, "search", None),
            page=getattr(args, "page", None),
            per_page=getattr(args, "per_page", None),
            default_month=api_config["default_month"],
            default_per_page=api_config["default_per_page"],
            max_per_page=api_config["max_per_page"],
        )
    except InvalidQueryError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def cmd_seed(args: argparse.Namespace, config: dict) -> None:
    """Replace the stored transactions with the remote feed."""
    seed_config = get_section(config, "seed")
    url = args.url or seed_config["url"]

    db = Database(get_section(config, "paths")["database"])
    console.print(f"[dim]Fetching transactions from: {url}[/dim]")

    try:
        count = seed_database(db, url, timeout=seed_config["timeout"])
    except (SeedError, StoreError) as e:
        console.print(f"[red]Seeding failed: {e}[/red]")
        sys.exit(1)
    finally:
        db.close()

    console.print(f"[bold green]Seeded {count} transaction(s)[/bold green]")


def cmd_list(args: argparse.Namespace, config: dict) -> None:
    """List one page of a month's transactions."""
    tx_filter = _filter_from_args(args, config)
    db = Database(get_section(config, "paths")["database"])

    try:
        listing = build_listing(db, tx_filter)
    except StoreError as e:
        console.print(f"[red]Query failed: {e}[/red]")
        sys.exit(1)
    finally:
        db.close()

    if not listing["data"]:
        console.print("[yellow]No transactions found.[/yellow]")
        return

    table = Table(
        title=(
            f"Transactions for month {tx_filter.month} "
            f"(page {listing['page']} of {listing['total_pages']}, {listing['total']} total)"
        )
    )
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Title")
    table.add_column("Price", justify="right")
    table.add_column("Category", style="magenta")
    table.add_column("Sold")
    table.add_column("Date of Sale", style="cyan")

    for tx in listing["data"]:
        table.add_row(
            str(tx["id"]),
            tx["title"][:40],
            f"{tx['price']:.2f}",
            tx["category"],
            "[green]yes[/green]" if tx["sold"] else "[red]no[/red]",
            tx["date_of_sale"][:10],
        )

    console.print(table)


def cmd_stats(args: argparse.Namespace, config: dict) -> None:
    """Show sale statistics for a month."""
    tx_filter = _filter_from_args(args, config)
    db = Database(get_section(config, "paths")["database"])

    try:
        stats = db.get_statistics(tx_filter)
    except StoreError as e:
        console.print(f"[red]Query failed: {e}[/red]")
        sys.exit(1)
    finally:
        db.close()

    table = Table(title=f"Statistics for month {tx_filter.month}")
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    table.add_row("Total Sale Amount", f"{stats['total_sale_amount']:.2f}")
    table.add_row("Total Sold Items", str(stats["total_sold_items"]))
    table.add_row("Total Unsold Items", str(stats["total_unsold_items"]))

    console.print(table)


def cmd_bar_chart(args: argparse.Namespace, config: dict) -> None:
    """Show the price range histogram for a month."""
    tx_filter = _filter_from_args(args, config)
    db = Database(get_section(config, "paths")["database"])

    try:
        histogram = db.get_price_histogram(tx_filter)
    except StoreError as e:
        console.print(f"[red]Query failed: {e}[/red]")
        sys.exit(1)
    finally:
        db.close()

    peak = max(histogram.values()) or 1

    table = Table(title=f"Price Ranges for month {tx_filter.month}")
    table.add_column("Range")
    table.add_column("Count", justify="right")
    table.add_column("")

    for label, count in histogram.items():
        table.add_row(label, str(count), "[cyan]" + "#" * round(count / peak * 30) + "[/cyan]")

    console.print(table)


def cmd_pie_chart(args: argparse.Namespace, config: dict) -> None:
    """Show the category breakdown for a month."""
    tx_filter = _filter_from_args(args, config)
    db = Database(get_section(config, "paths")["database"])

    try:
        breakdown = db.get_category_breakdown(tx_filter)
    except StoreError as e:
        console.print(f"[red]Query failed: {e}[/red]")
        sys.exit(1)
    finally:
        db.close()

    if not breakdown:
        console.print("[yellow]No transactions found.[/yellow]")
        return

    total = sum(breakdown.values())

    table = Table(title=f"Categories for month {tx_filter.month}")
    table.add_column("Category", style="magenta")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")

    for category, count in breakdown.items():
        table.add_row(category, str(count), f"{count / total * 100:.0f}%")

    console.print(table)


def cmd_serve(args: argparse.Namespace, config: dict) -> None:
    """Start the API server."""
    import uvicorn

    from .api.app import create_app

    host = args.host
    port = args.port

    console.print("[bold green]Starting API server...[/bold green]")
    console.print(f"[dim]REST API:  http://{host}:{port}/api/...[/dim]")
    console.print(f"[dim]API Docs:  http://{host}:{port}/docs[/dim]")
    console.print()

    uvicorn.run(create_app(config), host=host, port=port, log_level="info")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Transaction Dashboard - Monthly sales listings, statistics and charts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s seed                       Load transactions from the remote feed
  %(prog)s list --month 3             List March transactions
  %(prog)s list --search shirt        Search this month's transactions
  %(prog)s stats --month 11           Show November sale statistics
  %(prog)s bar-chart                  Show price ranges for the default month
  %(prog)s serve --port 5000          Start the REST API
        """
    )

    parser.add_argument(
        "-c", "--config",
        default="config.yaml",
        help="Path to config file (default: config.yaml)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Seed command
    seed_parser = subparsers.add_parser("seed", help="Load transactions from the feed")
    seed_parser.add_argument("--url", help="Feed URL (overrides config)")

    # List command
    list_parser = subparsers.add_parser("list", help="List a month's transactions")
    list_parser.add_argument("-m", "--month", help="Month number 1-12")
    list_parser.add_argument("-s", "--search", help="Match title, description or price")
    list_parser.add_argument("-p", "--page", help="Page number (default: 1)")
    list_parser.add_argument("-n", "--per-page", dest="per_page", help="Transactions per page")

    # Chart commands
    for name, help_text in (
        ("stats", "Show sale statistics"),
        ("bar-chart", "Show price range counts"),
        ("pie-chart", "Show category counts"),
    ):
        chart_parser = subparsers.add_parser(name, help=help_text)
        chart_parser.add_argument("-m", "--month", help="Month number 1-12")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=5000, help="Port to bind to (default: 5000)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Load config
    try:
        config = get_config() if args.config == "config.yaml" else load_config(args.config)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {args.config}[/red]")
        console.print("[dim]Create config.yaml or specify path with -c[/dim]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]Invalid config: {e}[/red]")
        sys.exit(1)

    setup_logging(config, verbose=args.verbose)

    # Dispatch command
    commands = {
        "seed": cmd_seed,
        "list": cmd_list,
        "stats": cmd_stats,
        "bar-chart": cmd_bar_chart,
        "pie-chart": cmd_pie_chart,
        "serve": cmd_serve,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        cmd_func(args, config)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
