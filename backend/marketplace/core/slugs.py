"""Slugs and Lookup Keys - pure helpers for human-readable item addresses.

Invariants:
    - normalize_slug output only contains [a-z0-9-]
    - build_item_slug never returns the empty string for an alphanumeric suffix
    - parse_id_or_slug returns exactly one of {"id": UUID} or {"slug": str}
"""

import re
from uuid import UUID

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")


def normalize_slug(value: str) -> str:
    """Lowercase, whitespace runs -> '-', drop anything outside [a-z0-9-]."""
    slug = _WHITESPACE.sub("-", value.lower())
    return _DISALLOWED.sub("", slug)


def build_item_slug(name: str, requested_slug: str | None, suffix: str) -> str:
    """Slug for a new item: the requested one, else name plus a random suffix.

    `suffix` is supplied by the caller so this stays deterministic.
    """
    if requested_slug:
        slug = normalize_slug(requested_slug)
        if slug:
            return slug
    slug = normalize_slug(f"{name}-{suffix}")
    return slug or normalize_slug(suffix)


def parse_id_or_slug(value: str) -> dict:
    """Route parameter that is either a UUID or a slug."""
    try:
        return {"id": UUID(value)}
    except ValueError:
        return {"slug": value}
