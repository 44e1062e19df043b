"""Errors raised while scraping job sites.

Every failure that aborts a site's scrape is a ``ScrapeError``. Field-level
normalization never raises; unparseable values fall back to empty strings
or to the current date instead.
"""
from typing import Optional


class ScrapeError(Exception):
    """Base class for errors that abort a site's scrape.

    Attributes:
        site: Identifier of the site being scraped, attached by the
            orchestrator once the error leaves the fetcher
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.site = None

    def __str__(self) -> str:
        if self.site is not None:
            return f"[{self.site.value}] {self.message}"
        return self.message


class SelectorError(ScrapeError):
    """A structural query string could not be compiled.

    This is a configuration mistake, so it is never retried.
    """

    def __init__(self, field: str, query: str, cause: str):
        super().__init__(f"Selector error for field '{field}' ({query!r}): {cause}")
        self.field = field
        self.query = query
        self.cause = cause


class RequestError(ScrapeError):
    """The request failed in transport or returned a non-2xx status."""

    def __init__(self, url: str, cause: str, status_code: Optional[int] = None):
        super().__init__(f"Error making request to '{url}'. {cause}")
        self.url = url
        self.cause = cause
        self.status_code = status_code


class DecodeError(ScrapeError):
    """The response body could not be decoded to text."""

    def __init__(self, url: str, cause: str):
        super().__init__(f"Error decoding HTML from '{url}'. {cause}")
        self.url = url
        self.cause = cause
