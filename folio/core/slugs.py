"""Slug registry - normalization and advisory availability checks.

The record store's unique index is the authority on uniqueness; the check
here only lets the UI warn early.
"""

import logging
import re
from typing import Optional, Protocol

from ..errors import InvalidSlug

logger = logging.getLogger(__name__)

MAX_SLUG_LENGTH = 100  # hosting repository names are capped at 100 chars

# Slugs that would shadow the product's own routes
RESERVED_SLUGS = frozenset({
    "check-slug",
    "portfolio",
    "portfolios",
    "health",
    "docs",
    "redoc",
})

_SEPARATORS = re.compile(r"[\s_]+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_DASH_RUNS = re.compile(r"-{2,}")


class SlugLookup(Protocol):
    def slug_in_use(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        ...


def normalize(candidate: str) -> str:
    """Turn a user-typed candidate into a URL-safe slug.

    "  Jane  Doe_CV! " -> "jane-doe-cv"

    Raises:
        InvalidSlug: if nothing usable remains.
    """
    slug = (candidate or "").strip().lower()
    slug = _SEPARATORS.sub("-", slug)
    slug = _DISALLOWED.sub("", slug)
    slug = _DASH_RUNS.sub("-", slug).strip("-")
    slug = slug[:MAX_SLUG_LENGTH].rstrip("-")

    if not slug:
        raise InvalidSlug(candidate)
    return slug


class SlugRegistry:
    """Availability checks against active portfolios."""

    def __init__(self, lookup: SlugLookup):
        self.lookup = lookup

    def is_reserved(self, slug: str) -> bool:
        return slug.lower() in RESERVED_SLUGS

    def check_availability(self, slug: str, exclude_portfolio_id: Optional[int] = None) -> bool:
        """True iff no other active portfolio uses the slug (case-insensitive).

        `exclude_portfolio_id` lets a republish keep its own slug.
        """
        if self.is_reserved(slug):
            logger.debug(f"Slug '{slug}' is reserved")
            return False
        return not self.lookup.slug_in_use(slug, exclude_id=exclude_portfolio_id)
