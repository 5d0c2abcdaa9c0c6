"""
HTTP trigger endpoints for scraping and importing tenders.

Routes:
- GET  /api/scrape-tenders   scrape default source (or mock data with test=true)
- POST /api/scrape-tenders   scrape an arbitrary URL
- POST /api/tenders/import   import given tenders, or refresh from the source
- GET  /api/tenders/import   scraped vs manual tender counts
- GET  /health               liveness probe
"""

import asyncio
import json
from datetime import datetime, timezone

import structlog
from aiohttp import web

from tender_scraper.orchestrator import TenderScraper
from tender_scraper.pipeline.importer import TenderImporter

logger = structlog.get_logger(__name__)


SCRAPER_KEY = web.AppKey("scraper", TenderScraper)
IMPORTER_KEY = web.AppKey("importer", TenderImporter)

DEFAULT_MAX_PAGES = 3


def error_response(error: str, exc: Exception, status: int = 500) -> web.Response:
    """Failure envelope shared by all endpoints."""
    return web.json_response(
        {
            "success": False,
            "error": error,
            "message": str(exc) or exc.__class__.__name__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        status=status,
    )


def parse_max_pages(value) -> int:
    """maxPages from query or body; falls back to the default on junk."""
    try:
        pages = int(value)
    except (TypeError, ValueError):
        return DEFAULT_MAX_PAGES
    return pages if pages > 0 else DEFAULT_MAX_PAGES


async def read_json(request: web.Request) -> dict:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return {}
    return body if isinstance(body, dict) else {}


async def handle_scrape(request: web.Request) -> web.Response:
    """Scrape the default source, or return the mock fixture in test mode."""
    scraper = request.app[SCRAPER_KEY]
    test_mode = request.query.get("test") == "true"
    max_pages = parse_max_pages(request.query.get("maxPages", DEFAULT_MAX_PAGES))

    if test_mode:
        run = scraper.mock_run()
        return web.json_response({
            "success": True,
            "count": run.count,
            "tenders": [t.to_dict() for t in run.tenders],
            "message": "Test mode - returning mock data",
        })

    try:
        run = await scraper.scrape(max_pages=max_pages)
    except Exception as e:
        logger.error("scrape_request_failed", error=str(e))
        return error_response("Failed to scrape tender data", e)

    return web.json_response(run.to_dict())


async def handle_scrape_custom(request: web.Request) -> web.Response:
    """Scrape a caller-supplied URL."""
    scraper = request.app[SCRAPER_KEY]
    body = await read_json(request)

    url = body.get("url")
    if not url:
        return web.json_response({"success": False, "error": "URL is required"}, status=400)

    logger.info("custom_scrape_requested", url=url)

    try:
        run = await scraper.scrape(url=url, max_pages=parse_max_pages(body.get("maxPages", DEFAULT_MAX_PAGES)))
    except Exception as e:
        logger.error("custom_scrape_failed", url=url, error=str(e))
        return error_response("Failed to scrape tender data from custom URL", e)

    return web.json_response(run.to_dict())


async def handle_import(request: web.Request) -> web.Response:
    """Import supplied tenders or refresh from the live source."""
    importer = request.app[IMPORTER_KEY]
    body = await read_json(request)
    action = body.get("action")
    tenders = body.get("tenders")

    try:
        if action == "import" and isinstance(tenders, list):
            result = await importer.import_tenders(tenders)
            message = result.message
        elif action == "refresh":
            result = await importer.refresh()
            message = f"Successfully refreshed tender data. Imported {result.imported} new tenders"
        else:
            return web.json_response(
                {
                    "success": False,
                    "error": (
                        'Invalid action. Use "import" with tenders data '
                        'or "refresh" to scrape new data'
                    ),
                },
                status=400,
            )
    except Exception as e:
        logger.error("import_request_failed", action=action, error=str(e))
        return error_response("Failed to process tender data", e)

    return web.json_response({"success": True, "message": message, **result.to_dict()})


async def handle_import_stats(request: web.Request) -> web.Response:
    """Counts of scraped and manually entered tenders."""
    importer = request.app[IMPORTER_KEY]
    try:
        stats = await importer.repository.count_by_origin()
    except Exception as e:
        logger.error("stats_request_failed", error=str(e))
        return error_response("Failed to get tender statistics", e)

    return web.json_response({"success": True, "stats": stats})


async def handle_health(request: web.Request) -> web.Response:
    return web.Response(text="OK", status=200)


def create_app(scraper: TenderScraper, importer: TenderImporter) -> web.Application:
    """
    Build the aiohttp application.

    Args:
        scraper: Scraper used by the scrape endpoints
        importer: Importer used by the import endpoints

    Returns:
        Configured web.Application
    """
    app = web.Application()
    app[SCRAPER_KEY] = scraper
    app[IMPORTER_KEY] = importer

    app.router.add_get("/api/scrape-tenders", handle_scrape)
    app.router.add_post("/api/scrape-tenders", handle_scrape_custom)
    app.router.add_get("/api/tenders/import", handle_import_stats)
    app.router.add_post("/api/tenders/import", handle_import)
    app.router.add_get("/health", handle_health)

    return app


async def start_web_server(app: web.Application, host: str = "0.0.0.0", port: int = 8080) -> None:
    """Run the app until cancelled."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info("web_server_running", url=f"http://{host}:{port}")

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
