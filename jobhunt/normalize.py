"""Normalization of raw listing values.

Every function here is total: input that cannot be understood maps to a
defined fallback (an empty string, or the current date for relative dates)
instead of raising, so a single odd listing never interrupts a scrape.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple
import logging
import re

from .models import Job
from .sites import DateFormat, LinkFormat, SiteDescriptor

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}')
RELATIVE_DATE_RE = re.compile(r'^(\d+)\s*([a-z])', re.IGNORECASE)
BOUND_RE = re.compile(r'[$€]\s*(\d+(?:\.\d+)?)\s*(k?)', re.IGNORECASE)

# Unit character -> days per unit
ELAPSED_UNITS = {
    'd': 1,
    'w': 7,
    'm': 30,
}

ABSOLUTE_PREFIXES = ('https://', 'http://', 'mailto:')


def format_date_from(raw: str, date_format: DateFormat, now: Optional[datetime] = None) -> str:
    """Convert a raw posting date to YYYY-MM-DD.

    Args:
        raw: Date as displayed by the site
        date_format: How the site formats dates
        now: Reference time for relative dates (defaults to the local time)

    Returns:
        Normalized date string. Relative dates that cannot be parsed resolve
        to ``now``; an empty absolute timestamp stays empty.
    """
    raw = (raw or '').strip()

    if date_format is DateFormat.ATTRIBUTE_CONTENT:
        return raw

    if date_format is DateFormat.ABSOLUTE_TIMESTAMP:
        return raw.split(' ', 1)[0]

    if ISO_DATE_RE.match(raw):
        return raw

    if now is None:
        now = datetime.now()

    delta = timedelta()
    match = RELATIVE_DATE_RE.match(raw)
    if match:
        amount, unit = match.groups()
        days = ELAPSED_UNITS.get(unit.lower())
        if days is not None:
            delta = timedelta(days=int(amount) * days)
        else:
            logger.debug(f"Unknown elapsed-time unit in {raw!r}, using current date")

    return (now - delta).strftime('%Y-%m-%d')


def format_remuneration_from(raw: str) -> str:
    """Convert free-text remuneration to "$Nk - $Mk" or "€Nk - €Mk".

    Args:
        raw: Remuneration text, e.g. "$ 90k-140k" or "EUR 90k-140k"

    Returns:
        Canonical range, or "" when no currency or no two-sided range is found
    """
    text = (raw or '').strip()
    if not text:
        return ''

    if 'EUR' in text or '€' in text:
        symbol = '€'
        text = text.replace('EUR', '').replace('€', '')
    elif '$' in text:
        symbol = '$'
        text = text.replace('$', '')
    else:
        return ''

    parts = text.split('-')
    if len(parts) != 2:
        return ''

    low, high = (part.strip() for part in parts)
    if not low or not high:
        return ''

    return f"{symbol}{low} - {symbol}{high}"


def remuneration_bounds(remuneration: str) -> Tuple[Optional[int], Optional[int]]:
    """Parse a canonical remuneration range into numeric bounds.

    Args:
        remuneration: Canonical range such as "$90k - $140k"

    Returns:
        (lower, upper) in thousands, or (None, None) if either bound is missing
    """
    bounds = BOUND_RE.findall(remuneration or '')
    if len(bounds) != 2:
        return None, None

    values = []
    for amount, suffix in bounds:
        value = float(amount)
        if not suffix and value >= 1000:
            value /= 1000
        values.append(int(value))
    return values[0], values[1]


def format_apply_url_from(raw: str, base_url: str, link_format: LinkFormat) -> str:
    """Convert a raw apply link to an absolute URL.

    Args:
        raw: Link as found in the page (onclick handler, href, ...)
        base_url: Site base URL used as prefix for relative paths
        link_format: How the site exposes apply links

    Returns:
        Absolute URL or mailto link, or "" if the raw value cannot be used
    """
    raw = (raw or '').strip()
    if not raw or raw.startswith(ABSOLUTE_PREFIXES):
        return raw

    if link_format is LinkFormat.ONCLICK:
        # tableTurboRowClick(event, '/some-job/123')
        tokens = raw.split()
        if len(tokens) != 2:
            return ''
        path = tokens[1].strip('\'");')
        if not path:
            return ''
        if path.startswith(ABSOLUTE_PREFIXES):
            return path
        return f"{base_url}{path}"

    if link_format is LinkFormat.RELATIVE_PATH:
        return f"{base_url}{raw}"

    # The card sites link relative to the domain while the base URL already
    # ends in /jobs, so the joined URL carries one "jobs/" too many.
    return f"{base_url}{raw}".replace('jobs/', '', 1)


def normalize_listing(raw: Dict[str, Any], site: SiteDescriptor, now: Optional[datetime] = None) -> Job:
    """Build a Job from one extracted listing.

    Args:
        raw: Field map produced by the listing extractor
        site: Site the listing was scraped from
        now: Reference time for relative dates

    Returns:
        Normalized Job
    """
    rules = site.rules

    date_raw = raw.get('date')
    date_posted = format_date_from(date_raw, rules.date_format, now) if date_raw is not None else ''

    return Job(
        title=raw['title'].strip(),
        company=(raw.get('company') or '').strip(),
        date_posted=date_posted,
        site=site.site_id,
        location=(raw.get('location') or '').strip(),
        remuneration=format_remuneration_from(raw.get('remuneration') or ''),
        tags=[tag for tag in raw.get('tags', []) if tag],
        apply=format_apply_url_from(raw.get('apply') or '', site.url, rules.link_format),
    )
