"""Job fetching functionality.

The module is organized into:
- base_fetcher: Fetcher class downloading pages and scraping whole sites
- parsers: Listing extraction driven by per-site selectors
"""

from .base_fetcher import Fetcher, USER_AGENT
from .parsers import extract_listings

__all__ = [
    'Fetcher',
    'USER_AGENT',
    'extract_listings',
]
