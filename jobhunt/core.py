"""Main orchestration logic for jobhunt."""
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence
import logging

from .errors import ScrapeError
from .fetchers import Fetcher
from .filters import JobFilter
from .models import Job
from .sites import SITES, SiteDescriptor, SiteId

logger = logging.getLogger(__name__)


@dataclass
class ScrapeReport:
    """Outcome of scraping a set of sites.

    Attributes:
        jobs: Jobs from every successful site, in registry order, after filtering
        counts: Number of jobs scraped per site, before filtering
        errors: Failed sites (only populated when not failing fast)
    """
    jobs: List[Job] = field(default_factory=list)
    counts: Dict[SiteId, int] = field(default_factory=dict)
    errors: Dict[SiteId, ScrapeError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def scrape_all(sites: Sequence[SiteDescriptor] = SITES,
               fetcher: Optional[Fetcher] = None,
               job_filter: Optional[JobFilter] = None,
               workers: int = 1,
               fail_fast: bool = True,
               clock: Callable[[], datetime] = datetime.now) -> ScrapeReport:
    """Scrape every site and combine the results.

    Args:
        sites: Sites to scrape, in the order results are combined. A site
            listed more than once is scraped once.
        fetcher: Fetcher to use (a new one is created and closed if omitted).
            Worker threads share it, so an injected session must be thread-safe.
        job_filter: Inclusion predicate applied to the combined jobs
        workers: Number of sites scraped concurrently
        fail_fast: Raise the first site failure instead of collecting it
        clock: Source of the reference time for relative dates

    Returns:
        ScrapeReport with the combined jobs

    Raises:
        ScrapeError: The first site failure, when ``fail_fast`` is set
    """
    unique: Dict[SiteId, SiteDescriptor] = {}
    for site in sites:
        unique.setdefault(site.site_id, site)
    sites = list(unique.values())

    now = clock()
    own_fetcher = fetcher is None
    if own_fetcher:
        fetcher = Fetcher()

    report = ScrapeReport()
    results: Dict[SiteId, List[Job]] = {}

    def record_failure(site: SiteDescriptor, error: ScrapeError) -> None:
        if fail_fast:
            raise error
        logger.warning(f"Skipping {site.name}: {error}")
        report.errors[site.site_id] = error

    try:
        if workers <= 1 or len(sites) <= 1:
            for site in sites:
                logger.info(f"Scraping {site.name}")
                try:
                    results[site.site_id] = fetcher.scrape(site, now)
                except ScrapeError as e:
                    record_failure(site, e)
        else:
            with ThreadPoolExecutor(max_workers=min(workers, len(sites))) as pool:
                futures = {pool.submit(fetcher.scrape, site, now): site for site in sites}
                try:
                    for future in as_completed(futures):
                        site = futures[future]
                        try:
                            results[site.site_id] = future.result()
                        except ScrapeError as e:
                            record_failure(site, e)
                except ScrapeError:
                    for pending in futures:
                        pending.cancel()
                    raise
    finally:
        if own_fetcher:
            fetcher.close()

    for site in sites:
        if site.site_id in results:
            site_jobs = results[site.site_id]
            report.counts[site.site_id] = len(site_jobs)
            report.jobs.extend(site_jobs)

    logger.info(f"Scraped {len(report.jobs)} jobs from {len(results)} sites")

    if job_filter is not None:
        report.jobs = job_filter.filter_jobs(report.jobs)

    return report
