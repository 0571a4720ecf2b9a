#!/usr/bin/env python3
"""
stockdb Server Entry Point

This is the main entry point for starting the stockdb server.

Usage:
    python -m stockdb.server AAPL.csv MSFT.csv               # Default settings (0.0.0.0:7272)
    python -m stockdb.server AAPL.csv --port 8080            # Custom port
    python -m stockdb.server AAPL.csv --host 127.0.0.1       # Custom host
    python -m stockdb.server AAPL.csv --debug                # Enable debug logging
    python -m stockdb.server AAPL.csv --quiet                # Do not echo requests

Environment Variables:
    STOCKDB_HOST            - Server bind address
    STOCKDB_PORT            - Server port
    STOCKDB_DEBUG           - Enable debug mode (true/false)
    STOCKDB_ECHO_REQUESTS   - Print request lines to stdout (true/false)
"""

import argparse
import asyncio
import logging
import signal
import sys

from .config.settings import settings
from .network.tcp_server import StockServer
from .store.catalog import Catalog
from .store.errors import LoadError


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="stockdb: Stock Price Query Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "files",
        nargs="+",
        metavar="CSV",
        help="Price files to serve, one symbol per file",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not print received requests to stdout",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    # stdout carries the request echo
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def main(argv=None) -> int:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    try:
        catalog = Catalog.load(args.files)
    except LoadError as e:
        logger.error(f"Failed to load price files: {e}")
        return 1

    server = StockServer(
        catalog,
        host=args.host,
        port=args.port,
        echo=not args.quiet and settings.ECHO_REQUESTS,
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    async def shutdown(sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        await server.stop()

    # Register signal handlers (Unix only)
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.create_task(shutdown(s))
            )

    logger.info("Starting stockdb server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")
    logger.info(f"  Symbols: {', '.join(catalog.list_symbols())}")
    logger.info(f"  Debug: {args.debug}")

    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    except OSError as e:
        logger.error(f"Server error: {e}")
        return 1
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        logger.info("Server shutdown complete")

    return 0


if __name__ == "__main__":
    sys.exit(main())
