"""
URL-pattern guesses for paginated listings.

Portals paginate in different ways and nothing on the page says which,
so each page is tried under several URL shapes until one returns data.
"""

from typing import Awaitable, Callable, Iterable, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

UrlBuilder = Callable[[str, int], str]


def query_page(base_url: str, page: int) -> str:
    return f"{base_url}?page={page}"


def appended_page(base_url: str, page: int) -> str:
    return f"{base_url}&page={page}"


def path_page(base_url: str, page: int) -> str:
    return f"{base_url}/page/{page}"


URL_BUILDERS: list[UrlBuilder] = [query_page, appended_page, path_page]


def page_url_guesses(
    base_url: str,
    page: int,
    builders: Optional[list[UrlBuilder]] = None,
) -> list[str]:
    """
    Build candidate URLs for one page.

    Page 1 is always the bare base URL, once per builder, so a failing
    first page is effectively retried.

    Args:
        base_url: Listing URL
        page: 1-based page number
        builders: URL builders in trial order

    Returns:
        Candidate URLs in trial order
    """
    builders = builders or URL_BUILDERS
    if page == 1:
        return [base_url for _ in builders]
    return [build(base_url, page) for build in builders]


async def first_success(
    candidates: Iterable[Callable[[], Awaitable[list[T]]]],
    on_error: Optional[Callable[[int, Exception], None]] = None,
) -> list[T]:
    """
    Run candidates in order and return the first non-empty result.

    A candidate that raises is reported to on_error and skipped.

    Args:
        candidates: Zero-argument coroutine factories
        on_error: Called with (candidate_index, exception)

    Returns:
        First non-empty result, or [] if every candidate was empty or failed
    """
    for index, candidate in enumerate(candidates):
        try:
            result = await candidate()
        except Exception as e:
            if on_error:
                on_error(index, e)
            else:
                logger.warning("candidate_failed", index=index, error=str(e))
            continue
        if result:
            return result
    return []
