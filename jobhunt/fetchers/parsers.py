"""Listing extraction from parsed HTML.

This module walks the listing containers of a parsed page and pulls the raw
text or attribute value of every field using a compiled selector set. The
result is a list of raw field maps, one per listing, in document order;
normalization happens afterwards in ``jobhunt.normalize``.
"""

from typing import Any, Dict, List, Optional
import logging

from bs4 import Tag

from ..selectors import CompiledField, CompiledSelectorSet
from ..sites import NormalizationRules

logger = logging.getLogger(__name__)

OPTIONAL_FIELDS = ('company', 'location', 'date', 'remuneration', 'apply')


def extract_listings(soup: Tag, selectors: CompiledSelectorSet,
                     rules: NormalizationRules) -> List[Dict[str, Any]]:
    """Extract the raw fields of every listing on a page.

    Args:
        soup: Parsed page
        selectors: Compiled selectors of the site family
        rules: Normalization rules of the site family

    Returns:
        List of raw field maps. Each map has a non-empty ``title`` and a
        ``tags`` list; the other fields are present only when found.
    """
    listings = []

    for node in selectors.listing.select(soup):
        title = extract_first(node, selectors.get('title'))
        if not title or not title.strip():
            logger.debug("Skipping listing without title")
            continue

        raw: Dict[str, Any] = {'title': title}
        for name in OPTIONAL_FIELDS:
            value = extract_first(node, selectors.get(name))
            if value is not None:
                raw[name] = value

        tags = extract_all(node, selectors.get('tags'))
        # Only drop after collecting, the list may be empty
        if rules.drop_first_tag and tags:
            tags.pop(0)
        raw['tags'] = tags

        listings.append(raw)

    logger.debug(f"Extracted {len(listings)} listings")
    return listings


def extract_first(node: Tag, selector: Optional[CompiledField]) -> Optional[str]:
    """Return the value of the first match of ``selector`` under ``node``.

    Returns None if the selector is not defined for the site, matches
    nothing, or the requested attribute is missing.
    """
    if selector is None:
        return None
    if selector.pattern is None:
        target = node
    else:
        target = selector.pattern.select_one(node)
    if target is None:
        return None
    return _read(target, selector.attribute)


def extract_all(node: Tag, selector: Optional[CompiledField]) -> List[str]:
    """Return the values of every match of ``selector`` under ``node``, in order."""
    if selector is None:
        return []
    if selector.pattern is None:
        matches = [node]
    else:
        matches = selector.pattern.select(node)
    values = []
    for match in matches:
        value = _read(match, selector.attribute)
        if value is not None:
            values.append(value)
    return values


def _read(element: Tag, attribute: Optional[str]) -> Optional[str]:
    if attribute is None:
        return element.get_text().strip()
    value = element.get(attribute)
    if isinstance(value, list):
        # Multi-valued attributes such as class
        value = ' '.join(value)
    return value
