#!/usr/bin/env python3
"""Bestseller Explorer CLI - weekly regional list parsing and comparison."""
import argparse
import asyncio
import sys
import json
from tabulate import tabulate
from bestsellers.async_client import AsyncBestsellerFileClient
from bestsellers.client import BestsellerFileClient
from bestsellers.compare import compare_lists_sync, summarize_changes
from bestsellers.config import Config
from bestsellers.database import Database
from bestsellers.dates import most_recent_wednesday, normalize_to_wednesday, parse_list_filename
from bestsellers.export import EXPORT_TYPES, generate_csv
from bestsellers.models import BestsellerList
from bestsellers.parse import parse_list_file
from bestsellers.regions import active_regions
from bestsellers.service import BestsellerService
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def setup_database(config: Config) -> Database:
    """Initialize database."""
    db = Database(config.DATABASE_URL)
    db.init_schema()
    return db


def truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def change_label(book) -> str:
    """Human-readable movement for the table view."""
    if book.was_dropped:
        return "DROPPED"
    if book.is_new:
        return "NEW"
    change = book.rank_change
    if change is None:
        return ""
    if change > 0:
        return f"+{change}"
    return str(change) if change < 0 else "="


def display_list(bestseller_list, format_type: str):
    """Display a list in specified format."""
    if format_type == "table":
        print(f"\n{bestseller_list.title}")
        if bestseller_list.date:
            print(f"Week ended {bestseller_list.date}")

        headers = ["Rank", "Change", "Title", "Author", "Publisher", "ISBN", "Price", "Weeks"]
        for category in bestseller_list.categories:
            if not category.books:
                continue
            rows = [
                [
                    book.rank,
                    change_label(book),
                    truncate(book.title, 45),
                    truncate(book.author, 25),
                    truncate(book.publisher, 20),
                    book.isbn or "N/A",
                    book.price or "N/A",
                    book.weeks_on_list if book.weeks_on_list is not None else ""
                ]
                for book in category.books
            ]
            print(f"\n{category.name}")
            print(tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps(bestseller_list.to_dict(), indent=2))

    elif format_type == "compact":
        for category in bestseller_list.categories:
            print(f"\n{category.name}")
            for book in category.books:
                label = change_label(book)
                suffix = f" [{label}]" if label else ""
                print(f"{book.rank}. {book.title} - {book.author}{suffix}")


def display_summary(compared):
    summary = summarize_changes(compared)
    rows = [[status, count] for status, count in summary.items()]
    print("\n" + tabulate(rows, headers=["Status", "Books"], tablefmt="grid"))


def write_export(compared, export_type: str, region, output):
    """Write a CSV export next to the given output path."""
    result = generate_csv(compared, export_type, region=region)
    output_file = output or result.filename
    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(result.content)
    logger.info(f"✅ Exported {result.book_count} books to {output_file}")


def parse_command(args, config: Config):
    """Parse a local list file."""
    bestseller_list = parse_list_file(args.file)
    logger.info(f"Parsed {bestseller_list.book_count} books in {len(bestseller_list.categories)} categories")
    display_list(bestseller_list, args.format)


def compare_command(args, config: Config):
    """Compare two local list files."""
    current = parse_list_file(args.current)
    previous = parse_list_file(args.previous)

    compared = compare_lists_sync(current, previous)
    display_list(compared, args.format)
    if args.format == "table":
        display_summary(compared)

    if args.export:
        region = args.region
        if region is None:
            # Fall back to the region in a name like 250115pn.txt
            parsed = parse_list_filename(args.current)
            region = parsed[1].abbreviation if parsed else None
        write_export(compared, args.export, region, args.output)


def week_command(args, config: Config):
    """Fetch and show a single week's list."""
    week = normalize_to_wednesday(args.week) if args.week else most_recent_wednesday()
    db = None if args.no_db else setup_database(config)

    try:
        with BestsellerFileClient(
            config.BESTSELLER_BASE_URL,
            proxies=config.PROXIES,
            timeout=config.DEFAULT_TIMEOUT,
            max_retries=config.DEFAULT_MAX_RETRIES
        ) as client:
            data = client.fetch_with_cache(week, args.region, cache_db=db, cache_ttl=config.DEFAULT_CACHE_TTL)

        if data is None:
            print(f"No {args.region} list found for the week of {week.isoformat()}")
            return

        display_list(BestsellerList.from_dict(data), args.format)

    finally:
        if db:
            db.close()


async def fetch_command(args, config: Config):
    """Fetch this week's list and compare it with an earlier week."""
    db = None if args.no_db else setup_database(config)

    try:
        async with AsyncBestsellerFileClient(
            config.BESTSELLER_BASE_URL,
            proxies=config.PROXIES,
            timeout=config.DEFAULT_TIMEOUT,
            max_concurrent=args.parallel
        ) as client:
            service = BestsellerService(config, client, db)
            compared, previous = await service.fetch_bestseller_data(
                refresh=args.refresh,
                comparison_week=args.week,
                region=args.region
            )

            logger.info(f"Current list: {compared.date} / previous list: {previous.date}")
            display_list(compared, args.format)
            if args.format == "table":
                display_summary(compared)

            if args.export:
                write_export(compared, args.export, args.region, args.output)

    finally:
        if db:
            db.close()


async def backfill_command(args, config: Config):
    """Store earlier weeks so weeks-on-list counts have history."""
    db = setup_database(config)

    try:
        async with AsyncBestsellerFileClient(
            config.BESTSELLER_BASE_URL,
            proxies=config.PROXIES,
            timeout=config.DEFAULT_TIMEOUT,
            max_concurrent=args.parallel
        ) as client:
            service = BestsellerService(config, client, db)
            stored = await service.backfill(region=args.region, weeks=args.weeks)
            print(f"✅ Stored {len(stored)} weeks: {', '.join(week.isoformat() for week in stored)}")

    finally:
        db.close()


def show_history(args, config: Config):
    """Show a book's weekly positions."""
    db = setup_database(config)

    try:
        history = db.get_book_history(args.isbn, args.region)
        if not history:
            print(f"No history for {args.isbn}")
            return

        rows = [[h["date"], h["region"], h["category"], h["position"]] for h in history]
        print("\n" + tabulate(rows, headers=["Week", "Region", "Category", "Rank"], tablefmt="grid"))

    finally:
        db.close()


def show_stats(args, config: Config):
    """Show database statistics."""
    db = setup_database(config)

    try:
        stats = db.get_stats()

        print("\n" + "=" * 50)
        print("DATABASE STATISTICS")
        print("=" * 50)
        print(f"Stored positions: {stats['total_positions']}")
        print(f"Stored region-weeks: {stats['stored_weeks']}")
        print(f"Cached entries: {stats['cached_entries']}")
        print(f"Expired cache entries: {stats['expired_cache_entries']}")
        print("=" * 50 + "\n")

        # Cleanup if requested
        if args.cleanup:
            deleted = db.cleanup_expired_cache()
            print(f"✅ Cleaned up {deleted} expired cache entries\n")

    finally:
        db.close()


def main():
    """Main CLI entry point."""
    config = Config()
    region_codes = [region.abbreviation for region in active_regions()]

    parser = argparse.ArgumentParser(
        description="Bestseller Explorer - weekly regional list comparison CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Parse a downloaded list file
  %(prog)s parse 250115pn.txt

  # Compare two local files and export the new titles
  %(prog)s compare 250115pn.txt 250108pn.txt --export adds

  # Fetch this week's SIBA list, compared against a custom week
  %(prog)s fetch --region SIBA --week 2025-01-01 --refresh

  # Show one week without comparing
  %(prog)s week --region MIBA --week 2025-01-01

  # Show statistics
  %(prog)s stats --cleanup
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse a local list file")
    parse_parser.add_argument("file", help="Path to a list .txt file")
    parse_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    # Compare command
    compare_parser = subparsers.add_parser("compare", help="Compare two local list files")
    compare_parser.add_argument("current", help="This week's list file")
    compare_parser.add_argument("previous", help="The list file to compare against")
    compare_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    compare_parser.add_argument("--export", choices=EXPORT_TYPES, help="Also write a CSV export")
    compare_parser.add_argument("--region", choices=region_codes, help="Region prefix for the export filename (default: from the current file name)")
    compare_parser.add_argument("--output", help="Export file (default: dated filename)")

    # Fetch command
    fetch_parser = subparsers.add_parser("fetch", help="Fetch and compare the current week")
    fetch_parser.add_argument("--region", choices=region_codes, default=config.DEFAULT_REGION, help="Region (default: %(default)s)")
    fetch_parser.add_argument("--week", help="Compare against the week containing this YYYY-MM-DD date")
    fetch_parser.add_argument("--refresh", action="store_true", help="Ignore cached results")
    fetch_parser.add_argument("--no-db", action="store_true", help="Run without the database")
    fetch_parser.add_argument("--parallel", type=int, default=3, help="Concurrent requests (default: 3)")
    fetch_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    fetch_parser.add_argument("--export", choices=EXPORT_TYPES, help="Also write a CSV export")
    fetch_parser.add_argument("--output", help="Export file (default: dated filename)")

    # Week command
    week_parser = subparsers.add_parser("week", help="Fetch and show one week's list")
    week_parser.add_argument("--region", choices=region_codes, default=config.DEFAULT_REGION, help="Region (default: %(default)s)")
    week_parser.add_argument("--week", help="Any YYYY-MM-DD date inside the week (default: current week)")
    week_parser.add_argument("--no-db", action="store_true", help="Run without the database")
    week_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    # Backfill command
    backfill_parser = subparsers.add_parser("backfill", help="Store earlier weeks")
    backfill_parser.add_argument("--region", choices=region_codes, default=config.DEFAULT_REGION, help="Region (default: %(default)s)")
    backfill_parser.add_argument("--weeks", type=int, default=8, help="Weeks to fetch (default: 8)")
    backfill_parser.add_argument("--parallel", type=int, default=3, help="Concurrent requests (default: 3)")

    # History command
    history_parser = subparsers.add_parser("history", help="Show a book's weekly positions")
    history_parser.add_argument("isbn", help="ISBN-13")
    history_parser.add_argument("--region", choices=region_codes, help="Restrict to one region")

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Show database statistics")
    stats_parser.add_argument("--cleanup", action="store_true", help="Clean up expired cache")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "parse":
            parse_command(args, config)

        elif args.command == "compare":
            compare_command(args, config)

        elif args.command == "fetch":
            asyncio.run(fetch_command(args, config))

        elif args.command == "week":
            week_command(args, config)

        elif args.command == "backfill":
            asyncio.run(backfill_command(args, config))

        elif args.command == "history":
            show_history(args, config)

        elif args.command == "stats":
            show_stats(args, config)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
