"""Interface every translation store backend implements."""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Protocol, runtime_checkable

from slug_translations.slugging.models import RecordId, SluggableRecord, Translation

SortKey = Callable[[Translation], object]


@runtime_checkable
class TranslatableSlugStore(Protocol):
    """Storage of one translation row per record and locale."""

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def find_translation(self, locale: str, slug: str) -> Optional[Translation]:
        ...

    def find_translations(
        self,
        locales: Iterable[str],
        slug: str,
        *,
        sort_key: Optional[SortKey] = None,
    ) -> list[Translation]:
        ...

    def find_translations_by_prefix(
        self,
        locale: str,
        base: str,
        *,
        separator: str,
        exclude_record_id: Optional[RecordId] = None,
    ) -> list[Translation]:
        """Return translations whose slug is ``base`` or starts with ``base + separator``.

        Results are ordered by slug length descending, then by slug descending.
        """
        ...

    def load_all_translations(self, record_id: RecordId) -> list[Translation]:
        ...

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------
    def get_record(self, record_id: RecordId) -> Optional[SluggableRecord]:
        ...

    def create_record(self) -> SluggableRecord:
        ...

    def save_translation(self, translation: Translation) -> Translation:
        """Insert or replace the record's translation for ``translation.locale``.

        Raises :class:`~slug_translations.errors.RetryableConflict` when another
        record already holds the slug in that locale.
        """
        ...

    def delete_record(self, record_id: RecordId) -> None:
        ...

    def close(self) -> None:
        ...


def ranking_key(translation: Translation) -> tuple[int, str]:
    slug = translation.slug or ""
    return len(slug), slug
