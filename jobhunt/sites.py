"""Registry of the job sites jobhunt scrapes.

Each site is described by an immutable ``SiteDescriptor``: where to fetch
from, how to paginate, which selectors to use and which normalization rules
apply. The registry is fixed at import time and is not configurable.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

from .selectors import FieldSelector, SelectorSet


class SiteId(Enum):
    """Enumeration of the supported job sites."""
    WEB3_CAREERS = "web3careers"
    CRYPTO_JOBS_LIST = "cryptojobslist"
    SOLANA_JOBS = "solanajobs"
    SUBSTRATE_JOBS = "substratejobs"
    NEAR_JOBS = "nearjobs"


class DateFormat(Enum):
    """How a site displays the posting date."""
    # "2024-05-06 12:05:50+07:00"
    ABSOLUTE_TIMESTAMP = "absolute_timestamp"
    # "3d", "2w", "1m", "today"
    RELATIVE_ELAPSED = "relative_elapsed"
    # Already ISO formatted in a meta tag
    ATTRIBUTE_CONTENT = "attribute_content"


class LinkFormat(Enum):
    """How a site exposes the apply link."""
    # tableTurboRowClick(event, '/some-job/123')
    ONCLICK = "onclick"
    # /some-job/123
    RELATIVE_PATH = "relative_path"
    # Absolute URL, or a relative path that doubles the "jobs/" segment
    MAYBE_ABSOLUTE = "maybe_absolute"


@dataclass(frozen=True)
class NormalizationRules:
    """Bundle of normalization rules shared by a site family.

    Attributes:
        date_format: How raw dates are converted to YYYY-MM-DD
        link_format: How raw apply links are made absolute
        drop_first_tag: Whether the first tag match duplicates another field
            and has to be removed
    """
    date_format: DateFormat
    link_format: LinkFormat
    drop_first_tag: bool = False


@dataclass(frozen=True)
class PageRange:
    """Fixed range of pages requested with a ``page`` query parameter."""
    first: int = 1
    last: int = 5

    def urls(self, base_url: str) -> List[str]:
        return [f"{base_url}?page={page}" for page in range(self.first, self.last + 1)]


@dataclass(frozen=True)
class FixedPath:
    """Single page reached by appending a fixed path to the base URL."""
    suffix: str

    def urls(self, base_url: str) -> List[str]:
        return [f"{base_url}{self.suffix}"]


@dataclass(frozen=True)
class FilterQuery:
    """Single page filtered with an opaque ``filter`` query parameter."""
    token: str

    def urls(self, base_url: str) -> List[str]:
        return [f"{base_url}?filter={self.token}"]


Pagination = Union[PageRange, FixedPath, FilterQuery]


@dataclass(frozen=True)
class SiteDescriptor:
    """Static description of a job site.

    Attributes:
        site_id: Identifier stored on every job scraped from this site
        url: Base URL, also used as prefix for relative apply links
        pagination: Strategy producing the page URLs to fetch
        selectors: Field selectors for the site's markup
        rules: Normalization rules for the site's raw values
    """
    site_id: SiteId
    url: str
    pagination: Pagination
    selectors: SelectorSet
    rules: NormalizationRules

    @property
    def name(self) -> str:
        return self.site_id.value

    def page_urls(self) -> List[str]:
        """Return the URLs to fetch, in the order they must be fetched."""
        return self.pagination.urls(self.url)


# Base64 of {"job_functions":["Software Engineering"]}
SOFTWARE_ENGINEERING_FILTER = "eyJqb2JfZnVuY3Rpb25zIjpbIlNvZnR3YXJlIEVuZ2luZWVyaW5nIl19"

TABLE_TURBO_RULES = NormalizationRules(
    date_format=DateFormat.ABSOLUTE_TIMESTAMP,
    link_format=LinkFormat.ONCLICK,
)

TABLE_RELATIVE_RULES = NormalizationRules(
    date_format=DateFormat.RELATIVE_ELAPSED,
    link_format=LinkFormat.RELATIVE_PATH,
    # The first span of each row is the location, not a tag
    drop_first_tag=True,
)

CARD_COMMON_RULES = NormalizationRules(
    date_format=DateFormat.ATTRIBUTE_CONTENT,
    link_format=LinkFormat.MAYBE_ABSOLUTE,
)

_WEB3_ROW = "body > main > div > div > div > div > div > table > tbody > tr"

WEB3_CAREERS_SELECTORS = SelectorSet(
    listing=_WEB3_ROW,
    title=FieldSelector(f"{_WEB3_ROW} > td > div > div > div > a > h2"),
    company=FieldSelector(f"{_WEB3_ROW} > td > a > h3"),
    location=FieldSelector(f"{_WEB3_ROW} > td:nth-child(4)"),
    date=FieldSelector(f"{_WEB3_ROW} > td > time", attribute="datetime"),
    remuneration=FieldSelector(f"{_WEB3_ROW} > td:nth-child(5) > p"),
    tags=FieldSelector(f"{_WEB3_ROW} > td > div > span"),
    apply=FieldSelector(attribute="onclick"),
)

_CJL_ROW = "main > section > section > table > tbody > tr"

CRYPTO_JOBS_LIST_SELECTORS = SelectorSet(
    listing=_CJL_ROW,
    title=FieldSelector(f"{_CJL_ROW} > td > div > a"),
    company=FieldSelector(f"{_CJL_ROW} > td > a"),
    location=FieldSelector(f"{_CJL_ROW} > td > span"),
    date=FieldSelector(f"{_CJL_ROW} > td.job-time-since-creation"),
    remuneration=FieldSelector(f"{_CJL_ROW} > td > span.job-salary-text"),
    tags=FieldSelector(f"{_CJL_ROW} > td > span:not(.job-salary-text)"),
    apply=FieldSelector(f"{_CJL_ROW} > td > div > a", attribute="href"),
)

_CARD = "#content > div > div > div > div > div > div"

CARD_COMMON_SELECTORS = SelectorSet(
    listing=_CARD,
    title=FieldSelector(f"{_CARD} > div > div > h4 > a > div > div"),
    company=FieldSelector(f"{_CARD} > div > div > div > div > a"),
    location=FieldSelector(f"{_CARD} > div > div > div > div > div > meta", attribute="content"),
    date=FieldSelector(f"{_CARD} > div > div > div > div > div > div > meta", attribute="content"),
    apply=FieldSelector(f"{_CARD} > div > div.sc-beqWaB.sc-gueYoa.hcVvkM.MYFxR > a", attribute="href"),
)

SITES: Tuple[SiteDescriptor, ...] = (
    SiteDescriptor(
        site_id=SiteId.WEB3_CAREERS,
        url="https://web3.career",
        pagination=PageRange(first=1, last=5),
        selectors=WEB3_CAREERS_SELECTORS,
        rules=TABLE_TURBO_RULES,
    ),
    SiteDescriptor(
        site_id=SiteId.CRYPTO_JOBS_LIST,
        url="https://cryptojobslist.com",
        pagination=FixedPath("/engineering?sort=recent"),
        selectors=CRYPTO_JOBS_LIST_SELECTORS,
        rules=TABLE_RELATIVE_RULES,
    ),
    SiteDescriptor(
        site_id=SiteId.SOLANA_JOBS,
        url="https://jobs.solana.com/jobs",
        pagination=FilterQuery(SOFTWARE_ENGINEERING_FILTER),
        selectors=CARD_COMMON_SELECTORS,
        rules=CARD_COMMON_RULES,
    ),
    SiteDescriptor(
        site_id=SiteId.SUBSTRATE_JOBS,
        url="https://careers.substrate.io/jobs",
        pagination=FilterQuery(SOFTWARE_ENGINEERING_FILTER),
        selectors=CARD_COMMON_SELECTORS,
        rules=CARD_COMMON_RULES,
    ),
    SiteDescriptor(
        site_id=SiteId.NEAR_JOBS,
        url="https://careers.near.org/jobs",
        pagination=FilterQuery(SOFTWARE_ENGINEERING_FILTER),
        selectors=CARD_COMMON_SELECTORS,
        rules=CARD_COMMON_RULES,
    ),
)


def get_site(site_id: Union[SiteId, str]) -> SiteDescriptor:
    """Look up a site descriptor by identifier.

    Args:
        site_id: Site identifier or its string value

    Returns:
        The registered SiteDescriptor

    Raises:
        ValueError: If the identifier is not registered
    """
    site_id = SiteId(site_id)
    for site in SITES:
        if site.site_id is site_id:
            return site
    raise ValueError(f"No site registered for {site_id.value}")
