"""
CLI script to launch the search API server.

Usage:
    python scripts/run_server.py              # Host/port from config
    python scripts/run_server.py --port 8080  # Custom port
    python scripts/run_server.py --config path/to/config.json
"""

import argparse
import sys
from pathlib import Path

import uvicorn

sys.path.insert(0, str(Path(__file__).parent.parent))

from library_search.core import get_config, get_logger, ConfigurationError
from library_search.core.config_loader import reload_config
from library_search.database import init_schema


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Launch the library book search API"
    )

    parser.add_argument(
        "--host",
        type=str,
        help="Host to bind to (default: api.host from config)"
    )

    parser.add_argument(
        "--port",
        type=int,
        help="Port to run the server on (default: api.port from config)"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to custom config.json file"
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change"
    )

    return parser.parse_args()


def main():
    """Main entry point for launching the server."""
    args = parse_args()

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

    host = args.host or config.api.host
    port = args.port or config.api.port

    init_schema()

    print("=" * 60)
    print("Library Search - API Server")
    print("=" * 60)
    print(f"Database path:     {config.paths.database_path}")
    print(f"Embedding model:   {config.embedding.model}")
    print(f"Authentication:    {'enabled' if config.auth.enabled else 'disabled'}")
    print(f"Starting server on http://{host}:{port}")
    print("Press Ctrl+C to stop")
    print("=" * 60)

    logger.info(f"Starting API server on {host}:{port}")

    uvicorn.run(
        "library_search.api.app:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level=config.logging.level.lower()
    )


if __name__ == "__main__":
    main()
