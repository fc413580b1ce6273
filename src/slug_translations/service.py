"""High-level workflows for finding and slugging translated records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, TypeVar

from slug_translations.errors import RecordNotFound, RetryableConflict
from slug_translations.slugging.models import LocaleContext, RecordId, SluggableRecord, Translation
from slug_translations.slugging.naming import slugify
from slug_translations.slugging.ranker import DEFAULT_SEPARATOR, ConflictRanker
from slug_translations.slugging.resolver import SlugResolver
from slug_translations.stores.base import TranslatableSlugStore
from slug_translations.stores.memory import MemoryTranslationStore

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from slug_translations.config import SlugConfig, StoreSettings

log = logging.getLogger(__name__)

T = TypeVar("T")

CONFLICT_RETRIES = 1


@dataclass(slots=True)
class SlugAssignment:
    """Slug chosen for a record in one locale."""

    record_id: Optional[RecordId]
    locale: str
    base: str
    slug: str

    @property
    def sequenced(self) -> bool:
        return self.slug != self.base


class SlugService:
    """Coordinate slug resolution and slug assignment over a translation store."""

    def __init__(
        self,
        store: TranslatableSlugStore,
        *,
        locales: LocaleContext,
        separator: str = DEFAULT_SEPARATOR,
        available_locales: Optional[list[str]] = None,
    ) -> None:
        self.store = store
        self.locales = locales
        self.available_locales = available_locales
        self.resolver = SlugResolver(store)
        self.ranker = ConflictRanker(store, separator=separator)

    # ------------------------------------------------------------------
    # Finds
    # ------------------------------------------------------------------
    def find(self, identifier: object, *, locale: Optional[str] = None) -> SluggableRecord:
        """Look a record up by slug, falling back to its primary key.

        The slug is searched in ``locale`` (or the current locale) first and
        then in the default locale. The returned record always carries the
        translations of every locale.
        """

        context = self._context(locale)
        if isinstance(identifier, str) and not _is_unfriendly(identifier):
            record = self.resolver.resolve_record(identifier, context.current, context.default)
            if record is not None:
                return record
        return self.get(identifier, locale=context.current)

    def get(self, record_id: object, *, locale: Optional[str] = None) -> SluggableRecord:
        record = self.store.get_record(_coerce_record_id(record_id))
        if record is None:
            raise RecordNotFound(record_id, locale)
        return record

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def create(self, title: str, *, locale: Optional[str] = None) -> SluggableRecord:
        """Create a record whose slug is generated for one locale only."""

        context = self._context(locale)
        self._normalize(title)
        record = self.store.create_record()
        try:
            self.save_translation(record.id, title, locale=context.current)
        except Exception:
            self.store.delete_record(record.id)
            raise
        return self.get(record.id)

    def save_translation(
        self,
        record_id: RecordId,
        title: str,
        *,
        locale: Optional[str] = None,
    ) -> Translation:
        """Set the translated title, generating a slug if the locale has none yet."""

        context = self._context(locale)
        record = self.get(record_id, locale=context.current)
        existing = record.translation_for(context.current)
        if existing is not None and existing.slug:
            return self.store.save_translation(
                Translation(record_id=record.id, locale=context.current, slug=existing.slug, title=title)
            )
        return self._assign(record.id, title, context.current, title=title)

    def set_friendly_id(
        self,
        record_id: RecordId,
        text: str,
        *,
        locale: Optional[str] = None,
    ) -> Translation:
        """Normalize ``text`` and store it, sequenced if needed, as the slug in ``locale``."""

        context = self._context(locale)
        record = self.get(record_id, locale=context.current)
        existing = record.translation_for(context.current)
        title = existing.title if existing is not None else None
        return self._assign(record.id, text, context.current, title=title)

    def delete(self, record_id: RecordId) -> None:
        record = self.get(record_id)
        self.store.delete_record(record.id)

    def preview_slug(
        self,
        text: str,
        *,
        locale: Optional[str] = None,
        exclude_record_id: Optional[RecordId] = None,
    ) -> SlugAssignment:
        context = self._context(locale)
        base = self._normalize(text)
        exclude = _coerce_record_id(exclude_record_id) if exclude_record_id is not None else None
        slug = self.ranker.next_available_slug(base, context.current, exclude)
        return SlugAssignment(record_id=exclude, locale=context.current, base=base, slug=slug)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _assign(self, record_id: RecordId, text: str, locale: str, *, title: Optional[str]) -> Translation:
        base = self._normalize(text)

        def _attempt() -> Translation:
            slug = self.ranker.next_available_slug(base, locale, record_id)
            saved = self.store.save_translation(
                Translation(record_id=record_id, locale=locale, slug=slug, title=title)
            )
            log.info("Assigned slug %r to record %s in locale %s", slug, record_id, locale)
            return saved

        return self._with_conflict_retry(_attempt)

    def _with_conflict_retry(self, operation: Callable[[], T]) -> T:
        attempts = 0
        while True:
            try:
                return operation()
            except RetryableConflict as exc:
                if attempts >= CONFLICT_RETRIES:
                    raise
                attempts += 1
                log.warning("%s; recomputing slug and retrying", exc)

    def _normalize(self, text: str) -> str:
        base = slugify(text)
        if not base:
            raise ValueError(f"Cannot derive a slug from {text!r}")
        return base

    def _context(self, locale: Optional[str]) -> LocaleContext:
        context = self.locales.with_locale(locale)
        if self.available_locales and context.current not in self.available_locales:
            raise ValueError(
                f"Locale {context.current!r} is not one of {', '.join(self.available_locales)}"
            )
        return context


def _is_unfriendly(identifier: str) -> bool:
    return _is_integer_text(identifier)


def _coerce_record_id(value: object) -> RecordId:
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text) if _is_integer_text(text) else text


def _is_integer_text(text: str) -> bool:
    return text.isascii() and text.isdigit()


def create_store(settings: "StoreSettings") -> TranslatableSlugStore:
    if settings.backend == "sql":
        from slug_translations.stores.sql import SqlTranslationStore

        return SqlTranslationStore(settings.url or "")
    if settings.backend == "files":
        from slug_translations.stores.files import FrontmatterTranslationStore

        return FrontmatterTranslationStore(settings.path)
    return MemoryTranslationStore()


def create_service(config: "SlugConfig") -> SlugService:
    return SlugService(
        create_store(config.store),
        locales=config.locales.context(),
        separator=config.slugging.separator,
        available_locales=config.locales.available_locales,
    )
