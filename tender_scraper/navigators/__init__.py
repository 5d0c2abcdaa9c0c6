"""
Navigators - walk multi-page listings.
"""

from .pagination import PaginationDriver
from .url_patterns import URL_BUILDERS, first_success, page_url_guesses

__all__ = ["PaginationDriver", "URL_BUILDERS", "first_success", "page_url_guesses"]
