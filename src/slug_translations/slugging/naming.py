"""Utilities for turning free text into URL-friendly slugs."""

from __future__ import annotations

import re
import unicodedata


_HYPHEN_RUN_RE = re.compile(r"-{2,}")
_WORD_MARK_CATEGORIES = ("Mn", "Mc")
MAX_SLUG_LENGTH = 120


def slugify(value: str, *, fallback: str = "") -> str:
    """Return a URL-safe slug derived from ``value``.

    The input is lowercased and accents on latin letters are stripped.
    Letters and digits of any script survive together with their combining
    vowel signs and viramas; every other run of characters collapses into a
    single hyphen. The result never contains two consecutive hyphens, which
    keeps it apart from sequenced variants such as ``title--2``.
    """

    value = unicodedata.normalize("NFKD", value.lower().strip())
    value = unicodedata.normalize("NFC", _strip_latin_accents(value))
    value = "".join(char if _is_slug_char(char) else "-" for char in value)
    value = _HYPHEN_RUN_RE.sub("-", value)
    value = value.strip("-")
    if not value:
        return fallback
    return value[:MAX_SLUG_LENGTH].rstrip("-")


def _is_slug_char(char: str) -> bool:
    return char.isalnum() or unicodedata.category(char) in _WORD_MARK_CATEGORIES


def _strip_latin_accents(value: str) -> str:
    kept: list[str] = []
    for char in value:
        if unicodedata.combining(char) and kept and kept[-1].isascii():
            continue
        kept.append(char)
    return "".join(kept)


def sequenced(base: str, number: int, *, separator: str) -> str:
    return f"{base}{separator}{number}"
