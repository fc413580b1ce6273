"""In-process translation store backed by dictionaries."""

from __future__ import annotations

import itertools
import logging
from dataclasses import replace
from typing import Iterable, Optional

from slug_translations.errors import RetryableConflict
from slug_translations.slugging.models import RecordId, SluggableRecord, Translation

from .base import SortKey, ranking_key

log = logging.getLogger(__name__)


class MemoryTranslationStore:
    """Keep records and their translations in memory.

    Two indexes are maintained: ``(record_id, locale)`` to translation, and
    ``(locale, slug)`` to owning record id, the latter acting as the
    uniqueness guard.
    """

    def __init__(self) -> None:
        self._records: dict[RecordId, None] = {}
        self._translations: dict[tuple[RecordId, str], Translation] = {}
        self._slug_owner: dict[tuple[str, str], RecordId] = {}
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def find_translation(self, locale: str, slug: str) -> Optional[Translation]:
        owner = self._slug_owner.get((locale, slug))
        if owner is None:
            return None
        return replace(self._translations[(owner, locale)])

    def find_translations(
        self,
        locales: Iterable[str],
        slug: str,
        *,
        sort_key: Optional[SortKey] = None,
    ) -> list[Translation]:
        found = [
            translation
            for translation in (self.find_translation(locale, slug) for locale in dict.fromkeys(locales))
            if translation is not None
        ]
        if sort_key is not None:
            found.sort(key=sort_key)
        return found

    def find_translations_by_prefix(
        self,
        locale: str,
        base: str,
        *,
        separator: str,
        exclude_record_id: Optional[RecordId] = None,
    ) -> list[Translation]:
        prefix = base + separator
        matches = [
            replace(self._translations[(owner, slug_locale)])
            for (slug_locale, slug), owner in self._slug_owner.items()
            if slug_locale == locale
            and (slug == base or slug.startswith(prefix))
            and owner != exclude_record_id
        ]
        matches.sort(key=ranking_key, reverse=True)
        return matches

    def load_all_translations(self, record_id: RecordId) -> list[Translation]:
        return [
            replace(translation)
            for (owner, _), translation in sorted(self._translations.items(), key=lambda item: item[0][1])
            if owner == record_id
        ]

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------
    def get_record(self, record_id: RecordId) -> Optional[SluggableRecord]:
        if record_id not in self._records:
            return None
        return SluggableRecord(id=record_id, translations=self.load_all_translations(record_id))

    def create_record(self) -> SluggableRecord:
        record_id = self._next_id()
        self._records[record_id] = None
        log.debug("Created record %s", record_id)
        return SluggableRecord(id=record_id)

    def save_translation(self, translation: Translation) -> Translation:
        if translation.record_id not in self._records:
            raise KeyError(f"Unknown record id {translation.record_id!r}")

        key = (translation.record_id, translation.locale)
        if translation.slug:
            owner = self._slug_owner.get((translation.locale, translation.slug))
            if owner is not None and owner != translation.record_id:
                raise RetryableConflict(translation.locale, translation.slug)

        previous = self._translations.get(key)
        if previous is not None and previous.slug:
            self._release_slug(previous)

        stored = replace(translation)
        self._translations[key] = stored
        if stored.slug:
            self._slug_owner[(stored.locale, stored.slug)] = stored.record_id
        self._after_save(stored.record_id)
        return replace(stored)

    def delete_record(self, record_id: RecordId) -> None:
        for key in [key for key in self._translations if key[0] == record_id]:
            translation = self._translations.pop(key)
            if translation.slug:
                self._release_slug(translation)
        self._records.pop(record_id, None)

    def close(self) -> None:
        """Nothing to release; records live only in this process."""

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------
    def _next_id(self) -> RecordId:
        record_id = next(self._ids)
        while record_id in self._records:
            record_id = next(self._ids)
        return record_id

    def _register(self, record_id: RecordId, translations: Iterable[Translation]) -> None:
        self._records[record_id] = None
        for translation in translations:
            self._translations[(record_id, translation.locale)] = translation
            if not translation.slug:
                continue
            key = (translation.locale, translation.slug)
            owner = self._slug_owner.setdefault(key, record_id)
            if owner != record_id:
                log.warning(
                    "Slug %r in locale %s is held by records %s and %s; keeping %s",
                    translation.slug,
                    translation.locale,
                    owner,
                    record_id,
                    owner,
                )

    def _release_slug(self, translation: Translation) -> None:
        key = (translation.locale, translation.slug or "")
        if self._slug_owner.get(key) == translation.record_id:
            del self._slug_owner[key]

    def _after_save(self, record_id: RecordId) -> None:
        """Hook for persistent subclasses."""
