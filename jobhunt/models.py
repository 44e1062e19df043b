"""Data models for the jobhunt application."""
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any

from .sites import SiteId


@dataclass
class Job:
    """Represents a normalized job posting.

    Attributes:
        title: Job title
        company: Company name ("" when the site does not show one)
        date_posted: Posting date as "YYYY-MM-DD" (the card-based sites may
            append a time suffix)
        site: Identifier of the site the posting was scraped from
        location: Job location ("" if absent)
        remuneration: Salary range such as "$90k - $140k" or "€50k - €70k"
            ("" if absent or unparseable)
        tags: Ordered list of tags shown next to the posting
        apply: Absolute URL or mailto link to apply ("" if absent)
    """
    title: str
    company: str
    date_posted: str
    site: SiteId
    location: str = ""
    remuneration: str = ""
    tags: List[str] = field(default_factory=list)
    apply: str = ""

    def __post_init__(self):
        """Coerce the site identifier and validate required fields."""
        if not isinstance(self.site, SiteId):
            self.site = SiteId(self.site)

        if not self.title or not isinstance(self.title, str) or not self.title.strip():
            raise ValueError("Job title is required and must be a non-empty string")

    def to_dict(self) -> Dict[str, Any]:
        """Return the job as a plain dictionary with the site as a string."""
        data = asdict(self)
        data['site'] = self.site.value
        return data
