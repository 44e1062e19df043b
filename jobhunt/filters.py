"""Job filtering functionality."""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
import logging

from .models import Job
from .sites import SiteId

logger = logging.getLogger(__name__)

# Titles must mention one of these to be kept
DEFAULT_KEYWORDS = ("developer", "engineer", "engineering", "technical")


@dataclass
class FilterConfig:
    """Configuration for job filtering.

    Attributes:
        keywords: Keep jobs whose title contains one of these (empty keeps all)
        exclude: Drop jobs whose title contains one of these
        sites: Keep only jobs from these sites (empty keeps all)
    """
    keywords: List[str] = field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    exclude: List[str] = field(default_factory=list)
    sites: List[str] = field(default_factory=list)


class JobFilter:
    """Inclusion predicate applied to the aggregated job list."""

    def __init__(self, config: Optional[FilterConfig] = None):
        """Initialize the job filter.

        Args:
            config: Filter configuration (defaults to the title keywords)
        """
        self.config = config or FilterConfig()
        self.keywords = [kw.lower() for kw in self.config.keywords if kw]
        self.exclude = [ex.lower() for ex in self.config.exclude if ex]
        self.sites = {SiteId(s) for s in self.config.sites}

    def matches_keywords(self, job: Job) -> bool:
        """Check if the job title contains any configured keyword, ignoring case."""
        return keyword_match(job, self.keywords)

    def is_excluded(self, job: Job) -> bool:
        """Check if the job title contains any excluded word, ignoring case."""
        title = job.title.lower()
        return any(ex in title for ex in self.exclude)

    def matches_site(self, job: Job) -> bool:
        if not self.sites:
            return True
        return job.site in self.sites

    def matches(self, job: Job) -> bool:
        return (not self.is_excluded(job)
                and self.matches_keywords(job)
                and self.matches_site(job))

    def filter_jobs(self, jobs: List[Job]) -> List[Job]:
        """Filter a list of jobs, preserving order.

        Args:
            jobs: List of jobs to filter

        Returns:
            List[Job]: Jobs matching every rule
        """
        filtered_jobs = []
        for job in jobs:
            if self.matches(job):
                filtered_jobs.append(job)
            else:
                logger.debug(f"Filtering out job: {job.title} at {job.company}")

        logger.info(f"{len(filtered_jobs)} of {len(jobs)} jobs kept after filtering")
        return filtered_jobs


def create_filter_from_config(config: Dict[str, Any]) -> JobFilter:
    """Create a JobFilter from the ``filters`` section of the YAML config.

    Args:
        config: Configuration dictionary

    Returns:
        JobFilter: Configured job filter
    """
    filter_config = FilterConfig(
        keywords=config.get('keywords', list(DEFAULT_KEYWORDS)),
        exclude=config.get('exclude', []),
        sites=config.get('sites', []),
    )
    return JobFilter(filter_config)


def keyword_match(job: Job, keywords: List[str]) -> bool:
    """Check if a job title contains any of the given keywords.

    Args:
        job: Job to check
        keywords: List of keywords to match against

    Returns:
        True if any keyword matches (or no keywords are given), False otherwise
    """
    if not keywords:
        return True

    title = job.title.lower()
    return any(keyword.lower() in title for keyword in keywords)
