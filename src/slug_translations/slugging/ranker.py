"""Pick the next free sequenced slug within a locale."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional

from .models import RecordId, Translation
from .naming import sequenced

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from slug_translations.stores.base import TranslatableSlugStore


DEFAULT_SEPARATOR = "--"
FIRST_SEQUENCE = 2


class ConflictRanker:
    """Rank slugs that collide with a candidate and derive the next free one."""

    def __init__(self, store: "TranslatableSlugStore", *, separator: str = DEFAULT_SEPARATOR) -> None:
        if not separator:
            raise ValueError("Sequence separator must not be empty")
        self.store = store
        self.separator = separator

    def conflicts(
        self,
        base: str,
        locale: str,
        exclude_record_id: Optional[RecordId] = None,
    ) -> list[Translation]:
        """Return translations in ``locale`` holding ``base`` or a numbered variant of it.

        The longest, then highest, slug comes first. Translations owned by
        ``exclude_record_id`` are ignored so a record never conflicts with itself.
        """

        pattern = re.compile(rf"{re.escape(base)}(?:{re.escape(self.separator)}[1-9][0-9]*)?")
        candidates = self.store.find_translations_by_prefix(
            locale,
            base,
            separator=self.separator,
            exclude_record_id=exclude_record_id,
        )
        return [
            translation
            for translation in candidates
            if translation.record_id != exclude_record_id
            and translation.slug is not None
            and pattern.fullmatch(translation.slug)
        ]

    def next_available_slug(
        self,
        base: str,
        locale: str,
        exclude_record_id: Optional[RecordId] = None,
    ) -> str:
        conflicts = self.conflicts(base, locale, exclude_record_id)
        if not conflicts:
            return base
        return sequenced(base, self._next_sequence(base, conflicts[0]), separator=self.separator)

    def _next_sequence(self, base: str, highest: Translation) -> int:
        if highest.slug == base:
            return FIRST_SEQUENCE
        last = int((highest.slug or "")[len(base) + len(self.separator):])
        return max(last + 1, FIRST_SEQUENCE)
