"""
CLI script to import books into the catalog.

Reads a JSON file holding a list of book objects (title, author, subject,
level, type, publisher, description, year, optional id) and stores them.
Optionally computes embeddings for every book that has none.

Usage:
    python scripts/import_books.py books.json            # Import only
    python scripts/import_books.py books.json --embed    # Import and embed
    python scripts/import_books.py books.json --reset    # Replace the catalog
    python scripts/import_books.py --embed-only          # Embed missing books
"""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from library_search.core import get_config, get_logger, ConfigurationError, LibrarySearchError
from library_search.core.config_loader import reload_config
from library_search.database import CatalogEntry, CatalogRepository, get_statistics, init_schema, reset_schema
from library_search.indexer import EmbeddingIndexer


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Import books into the catalog and compute embeddings"
    )

    parser.add_argument(
        "input",
        type=str,
        nargs="?",
        help="JSON file with a list of books"
    )

    parser.add_argument(
        "--embed",
        action="store_true",
        help="Compute embeddings for books without one after importing"
    )

    parser.add_argument(
        "--embed-only",
        action="store_true",
        help="Skip the import and only compute missing embeddings"
    )

    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete the whole catalog before importing"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to custom config.json file"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output"
    )

    return parser.parse_args()


def progress_callback(current: int, total: int, message: str) -> None:
    """Print progress to console."""
    percent = (current / total) * 100 if total > 0 else 0
    bar_width = 30
    filled = int(bar_width * current / total) if total > 0 else 0
    bar = "=" * filled + "-" * (bar_width - filled)

    print(f"\r[{bar}] {percent:5.1f}% ({current}/{total}) {message[:40]:<40}", end="", flush=True)


def load_books(path: Path) -> list:
    """Load and convert the book list from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("books", [])

    if not isinstance(data, list):
        raise ValueError("Expected a list of books")

    return [CatalogEntry.from_dict(item) for item in data if isinstance(item, dict)]


def main():
    """Main entry point for the import CLI."""
    args = parse_args()

    if not args.input and not args.embed_only:
        print("Error: an input file is required unless --embed-only is given")
        sys.exit(1)

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}")
            sys.exit(1)
        reload_config(config_path)

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}")
        sys.exit(1)

    logger = get_logger(__name__)

    print("=" * 60)
    print("Library Search - Catalog Import")
    print("=" * 60)
    print(f"Database path:     {config.paths.database_path}")
    print(f"Input file:        {args.input or '-'}")
    print(f"Reset mode:        {args.reset}")
    print(f"Embeddings:        {'yes' if args.embed or args.embed_only else 'no'}")
    print("=" * 60)

    if args.reset:
        response = input("This will DELETE all books in the catalog. Continue? [y/N] ")
        if response.lower() != "y":
            print("Aborted.")
            sys.exit(0)
        reset_schema()
    else:
        init_schema()

    if not args.embed_only:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Error: Input file not found: {input_path}")
            sys.exit(1)

        try:
            books = load_books(input_path)
        except (json.JSONDecodeError, ValueError) as e:
            print(f"Error: Could not read books from {input_path}: {e}")
            sys.exit(1)

        written = CatalogRepository().insert_batch(books)
        logger.info(f"Imported {written} books from {input_path}")
        print(f"\nImported {written:,} books")

    exit_code = 0

    if args.embed or args.embed_only:
        callback = None if args.quiet else progress_callback

        try:
            stats = EmbeddingIndexer(progress_callback=callback).index_missing()
        except LibrarySearchError as e:
            print(f"\nEmbedding failed: {e.message}")
            sys.exit(1)

        if not args.quiet:
            print("\n")

        print("-" * 60)
        print(f"Books processed:   {stats.processed:,}")
        print(f"Embeddings stored: {stats.succeeded:,}")
        print(f"Failures:          {stats.failed:,}")

        if stats.errors:
            print(f"\nErrors ({len(stats.errors)}):")
            for error in stats.errors[:20]:
                print(f"  - {error}")
            if len(stats.errors) > 20:
                print(f"  ... and {len(stats.errors) - 20} more errors")
            exit_code = 1

    catalog = get_statistics()
    print("=" * 60)
    print(f"Books in catalog:  {catalog['total_books']:,}")
    print(f"With embedding:    {catalog['embedded_books']:,}")
    print("=" * 60)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
