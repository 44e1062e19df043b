"""Core job fetching functionality.

This module contains the Fetcher class, which downloads job site pages,
extracts their listings and normalizes them into Job objects.
"""

from datetime import datetime
from typing import List, Optional
import logging
import threading

import requests
from bs4 import BeautifulSoup
from requests.exceptions import ChunkedEncodingError, ContentDecodingError, RequestException

from ..errors import DecodeError, RequestError, ScrapeError
from ..models import Job
from ..normalize import normalize_listing
from ..sites import SiteDescriptor
from .parsers import extract_listings

logger = logging.getLogger(__name__)

# Several sites reject default client identifiers or serve degraded markup
USER_AGENT = (
    "Mozilla/5.0 (iPad; CPU OS 12_2 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Mobile/15E148"
)


class Fetcher:
    """Fetches job site pages and turns them into jobs.

    Every request is a single attempt: there are no retries and no rate
    limiting, and a failure on any page aborts the whole site.

    Without an injected session each thread gets its own ``requests.Session``,
    so one fetcher can be shared by the workers of ``scrape_all``. An
    injected session is used by every thread as is.
    """

    def __init__(self, session: Optional[requests.Session] = None,
                 user_agent: str = USER_AGENT, timeout: Optional[float] = None) -> None:
        """Initialize the fetcher.

        Args:
            session: Session to send all requests with (one per thread by default)
            user_agent: User-Agent header sent with every request
            timeout: Per-request timeout in seconds, None for the client default
        """
        self.user_agent = user_agent
        self.timeout = timeout
        self._session = session
        if session is not None:
            session.headers.update({'User-Agent': user_agent})
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """Session for the calling thread."""
        if self._session is not None:
            return self._session
        session = getattr(self._local, 'session', None)
        if session is None:
            session = requests.Session()
            session.headers.update({'User-Agent': self.user_agent})
            self._local.session = session
            with self._lock:
                self._sessions.append(session)
        return session

    def get_document(self, url: str) -> BeautifulSoup:
        """Download a page and parse it.

        Args:
            url: Page URL

        Returns:
            Parsed document

        Raises:
            RequestError: On transport failure or non-2xx status
            DecodeError: If the body is truncated, has a corrupt content
                encoding or is not valid text in its declared charset
        """
        logger.info(f"Fetching HTML from {url}")
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
        except RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise RequestError(url, str(e)) from e

        try:
            if not 200 <= response.status_code < 300:
                logger.error(f"Request to {url} returned {response.status_code}")
                raise RequestError(url, f"Request failed with code {response.status_code}",
                                   status_code=response.status_code)

            try:
                content = response.content
            except (ChunkedEncodingError, ContentDecodingError) as e:
                logger.error(f"Could not read body from {url}: {e}")
                raise DecodeError(url, str(e)) from e
            except RequestException as e:
                logger.error(f"Request to {url} failed while reading the body: {e}")
                raise RequestError(url, str(e)) from e
        finally:
            response.close()

        # requests falls back to ISO-8859-1 for text/* without a charset,
        # which never fails; the sites serve UTF-8.
        content_type = response.headers.get('Content-Type', '')
        encoding = response.encoding if 'charset' in content_type.lower() else 'utf-8'
        try:
            body = content.decode(encoding or 'utf-8')
        except (UnicodeDecodeError, LookupError) as e:
            logger.error(f"Could not decode body from {url}: {e}")
            raise DecodeError(url, str(e)) from e

        return BeautifulSoup(body, 'html.parser')

    def scrape(self, site: SiteDescriptor, now: Optional[datetime] = None) -> List[Job]:
        """Scrape every page of a site.

        Args:
            site: Site to scrape
            now: Reference time for relative dates (defaults to the local time)

        Returns:
            Jobs in the order the site displays them, page after page

        Raises:
            ScrapeError: If a selector is malformed or any page fails; the
                error's ``site`` is set to the site being scraped
        """
        if now is None:
            now = datetime.now()

        jobs: List[Job] = []
        try:
            selectors = site.selectors.compile()
            for url in site.page_urls():
                soup = self.get_document(url)
                listings = extract_listings(soup, selectors, site.rules)
                page_jobs = [normalize_listing(raw, site, now) for raw in listings]
                logger.info(f"Parsed {len(page_jobs)} jobs from {url}")
                jobs.extend(page_jobs)
        except ScrapeError as e:
            e.site = site.site_id
            logger.error(f"Scrape of {site.name} aborted: {e.message}")
            raise

        logger.info(f"Successfully scraped {len(jobs)} jobs from {site.name}")
        return jobs

    def close(self) -> None:
        """Close the injected session or every per-thread session opened so far."""
        if self._session is not None:
            self._session.close()
            return
        with self._lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        self._local = threading.local()

    def __enter__(self) -> 'Fetcher':
        return self

    def __exit__(self, *exc) -> None:
        self.close()
