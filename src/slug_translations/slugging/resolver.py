"""Locale-aware lookup of records by slug."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .models import RecordId, Resolution, ResolutionState, SluggableRecord

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from slug_translations.stores.base import TranslatableSlugStore


class SlugResolver:
    """Find the record owning a slug in the current locale or the default one."""

    def __init__(self, store: "TranslatableSlugStore") -> None:
        self.store = store

    def resolve_state(self, candidate: str, current_locale: str, default_locale: str) -> Resolution:
        """Run the lookup and report which branch matched.

        An exact hit in ``current_locale`` wins. Otherwise, when the locales
        differ, a hit in either locale is accepted, current locale first.
        """

        translation = self.store.find_translation(current_locale, candidate)
        if translation is not None:
            return Resolution(ResolutionState.EXACT_LOCALE_HIT, translation)

        if current_locale != default_locale:
            matches = self.store.find_translations(
                (current_locale, default_locale),
                candidate,
                sort_key=lambda t: t.locale != current_locale,
            )
            if matches:
                return Resolution(ResolutionState.DEFAULT_LOCALE_HIT, matches[0])

        return Resolution(ResolutionState.NOT_FOUND)

    def resolve(self, candidate: str, current_locale: str, default_locale: str) -> Optional[RecordId]:
        return self.resolve_state(candidate, current_locale, default_locale).record_id

    def resolve_record(
        self, candidate: str, current_locale: str, default_locale: str
    ) -> Optional[SluggableRecord]:
        """Resolve ``candidate`` and return the record with every locale's translation."""

        record_id = self.resolve(candidate, current_locale, default_locale)
        if record_id is None:
            return None
        return SluggableRecord(id=record_id, translations=self.store.load_all_translations(record_id))
