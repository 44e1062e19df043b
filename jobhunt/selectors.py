"""Per-site field selectors.

A ``SelectorSet`` maps each job field to a CSS query (and optionally an
attribute to read). The queries are compiled with soupsieve once per scrape
and reused for every listing on every page of that scrape.
"""
from dataclasses import dataclass, fields
from typing import Dict, Optional
import logging

import soupsieve
from soupsieve import SoupSieve

from .errors import SelectorError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldSelector:
    """How to locate one field inside a listing.

    Attributes:
        query: CSS query evaluated against the listing node. ``None`` targets
            the listing node itself.
        attribute: Attribute to read from the matched node. ``None`` reads
            the node's trimmed text.
    """
    query: Optional[str] = None
    attribute: Optional[str] = None


@dataclass(frozen=True)
class CompiledField:
    """A ``FieldSelector`` with its query compiled."""
    pattern: Optional[SoupSieve]
    attribute: Optional[str] = None


@dataclass(frozen=True)
class SelectorSet:
    """The structural queries used to scrape one site family.

    Only ``listing`` and ``title`` are mandatory. Fields left as ``None`` are
    never extracted and stay empty on every job.
    """
    listing: str
    title: FieldSelector
    company: Optional[FieldSelector] = None
    location: Optional[FieldSelector] = None
    date: Optional[FieldSelector] = None
    remuneration: Optional[FieldSelector] = None
    tags: Optional[FieldSelector] = None
    apply: Optional[FieldSelector] = None

    def compile(self) -> 'CompiledSelectorSet':
        """Compile every query in the set.

        Returns:
            CompiledSelectorSet ready to be used by the listing extractor

        Raises:
            SelectorError: If any query is malformed
        """
        listing = _compile('listing', self.listing)
        compiled: Dict[str, CompiledField] = {}
        for f in fields(self):
            if f.name == 'listing':
                continue
            selector = getattr(self, f.name)
            if selector is None:
                continue
            pattern = _compile(f.name, selector.query) if selector.query is not None else None
            compiled[f.name] = CompiledField(pattern=pattern, attribute=selector.attribute)
        logger.debug(f"Compiled {len(compiled) + 1} selectors")
        return CompiledSelectorSet(listing=listing, fields=compiled)


@dataclass(frozen=True)
class CompiledSelectorSet:
    """Compiled form of a ``SelectorSet``."""
    listing: SoupSieve
    fields: Dict[str, CompiledField]

    def get(self, name: str) -> Optional[CompiledField]:
        return self.fields.get(name)


def _compile(field_name: str, query: str) -> SoupSieve:
    try:
        return soupsieve.compile(query)
    except soupsieve.SelectorSyntaxError as e:
        logger.error(f"Invalid selector for {field_name}: {query!r}")
        raise SelectorError(field_name, query, str(e)) from e
