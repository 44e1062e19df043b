"""jobhunt - scrape job sites into a normalized, queryable job list."""

from .core import ScrapeReport, scrape_all
from .errors import DecodeError, RequestError, ScrapeError, SelectorError
from .models import Job
from .sites import SITES, SiteDescriptor, SiteId, get_site

__version__ = "0.1.0"

__all__ = [
    'DecodeError',
    'Job',
    'RequestError',
    'SITES',
    'ScrapeError',
    'ScrapeReport',
    'SelectorError',
    'SiteDescriptor',
    'SiteId',
    'get_site',
    'scrape_all',
]
