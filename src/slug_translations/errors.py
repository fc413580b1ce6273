"""Exceptions raised by the slug translation layer."""

from __future__ import annotations

from typing import Optional


class SlugError(Exception):
    """Base class for errors surfaced to callers of the slug service."""


class RetryableConflict(SlugError):
    """Another record already holds ``slug`` in ``locale``.

    Raised by stores when the ``(locale, slug)`` uniqueness guard rejects a
    write. Callers should recompute the next available slug and try again.
    """

    def __init__(self, locale: str, slug: str) -> None:
        super().__init__(f"Slug {slug!r} is already taken in locale {locale!r}")
        self.locale = locale
        self.slug = slug


class RecordNotFound(SlugError, LookupError):
    """No record matches the given slug or primary key."""

    def __init__(self, identifier: object, locale: Optional[str] = None) -> None:
        where = f" in locale {locale!r}" if locale else ""
        super().__init__(f"No record found for {identifier!r}{where}")
        self.identifier = identifier
        self.locale = locale
