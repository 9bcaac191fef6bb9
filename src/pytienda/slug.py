"""URL slug helpers for category and product names."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Container

_INVALID = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")


def generate_slug(name: str) -> str:
    """Lowercase ASCII slug: accents stripped, spaces to dashes.

    >>> generate_slug("Electrónicos y Más")
    'electronicos-y-mas'
    """
    decomposed = unicodedata.normalize("NFD", name.lower())
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = _INVALID.sub("", ascii_only).strip()
    slug = _WHITESPACE.sub("-", slug)
    return _DASHES.sub("-", slug)


def unique_slug(name: str, taken: Container[str]) -> str:
    """Slug for *name* not present in *taken* (``base``, ``base-1``, ...)."""
    base = generate_slug(name)
    slug = base
    counter = 1
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug
