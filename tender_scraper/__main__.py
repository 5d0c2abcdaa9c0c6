"""
CLI entry point for tender-scraper.

Usage:
    python -m tender_scraper --mode scrape --max-pages 2
    python -m tender_scraper --mode scrape --test
    python -m tender_scraper --mode import --input output/tenders.json
    python -m tender_scraper --mode refresh
    python -m tender_scraper --mode serve --port 8080
"""

import argparse
import asyncio
import json
import logging
import random
import sys

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        renderer = structlog.processors.JSONRenderer()
        timestamper = structlog.processors.TimeStamper(fmt="iso")
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
        timestamper = structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S")

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            timestamper,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Tender portal scraper and importer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape the default portal (3 pages) and save JSON
  python -m tender_scraper --mode scrape

  # Scrape a custom listing URL
  python -m tender_scraper --mode scrape --url https://example.gov.in/tenders --max-pages 5

  # Import a previously saved scrape into the store
  python -m tender_scraper --mode import --input output/tenders_20251015_120000.json

  # Scrape the default portal and import in one go
  python -m tender_scraper --mode refresh

  # Run the HTTP endpoints
  python -m tender_scraper --mode serve --port 8080
        """,
    )

    parser.add_argument(
        "--mode",
        choices=["scrape", "import", "refresh", "stats", "serve"],
        default="scrape",
        help="What to run (default: scrape)",
    )

    parser.add_argument(
        "--url",
        type=str,
        help="Listing URL to scrape (default: configured source)",
    )

    parser.add_argument(
        "--max-pages",
        type=int,
        help="Maximum pages to scrape (default: from settings)",
    )

    parser.add_argument(
        "--test",
        action="store_true",
        help="Use the built-in mock tenders instead of scraping",
    )

    parser.add_argument(
        "--input",
        type=str,
        help="JSON file with tenders to import (scrape output or a plain list)",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to settings.yml",
    )

    parser.add_argument(
        "--store",
        type=str,
        help="Path to the tender store JSON file (default: from settings)",
    )

    parser.add_argument(
        "--output",
        type=str,
        default="output",
        help="Output directory for scrape results (default: output)",
    )

    parser.add_argument("--host", type=str, help="Bind host for serve mode")
    parser.add_argument("--port", type=int, help="Bind port for serve mode")

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


def load_input(path: str):
    """Read wire-format tenders from a scrape envelope or a bare list."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    items = data.get("tenders", []) if isinstance(data, dict) else data
    return list(items)


async def main_async(args) -> int:
    """Async main function."""
    from .config.loader import load_settings
    from .core.classifier import TenderClassifier, TenderEstimator
    from .orchestrator import TenderScraper
    from .pipeline.importer import TenderImporter
    from .storage import JsonFileTenderRepository

    logger = structlog.get_logger(__name__)

    settings = load_settings(args.config)
    scraper = TenderScraper(settings.scraper)

    logger.info("starting_tender_scraper", mode=args.mode, url=args.url, max_pages=args.max_pages)

    if args.mode == "scrape":
        run = scraper.mock_run() if args.test else await scraper.scrape(url=args.url, max_pages=args.max_pages)
        if not run.tenders:
            logger.warning("no_tenders_scraped")
            return 1
        scraper.save_json(run, output_dir=args.output)
        return 0

    repository = JsonFileTenderRepository(args.store or settings.storage.path)
    importer = TenderImporter(
        repository,
        classifier=TenderClassifier(TenderEstimator(random.SystemRandom())),
        scraper=scraper,
        settings=settings.importer,
    )

    if args.mode == "import":
        if not args.input:
            logger.error("input_required", mode=args.mode)
            return 1
        result = await importer.import_tenders(load_input(args.input))
        logger.info("import_finished", imported=result.imported, total=result.total)
        return 0

    if args.mode == "refresh":
        result = await importer.refresh(max_pages=args.max_pages)
        logger.info("refresh_finished", imported=result.imported, total=result.total)
        return 0

    if args.mode == "stats":
        stats = await repository.count_by_origin()
        print(json.dumps(stats, indent=2))
        return 0

    from .web.server import create_app, start_web_server

    app = create_app(scraper, importer)
    await start_web_server(
        app,
        host=args.host or settings.server.host,
        port=args.port or settings.server.port,
    )
    return 0


def main():
    """Main entry point."""
    args = parse_args()

    # Version check
    if args.version:
        from . import __version__
        print(f"tender-scraper {__version__}")
        sys.exit(0)

    setup_logging(args.log_level, args.json_logs)

    try:
        sys.exit(asyncio.run(main_async(args)))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
