"""Dataclasses representing translated, sluggable records."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Union

RecordId = Union[int, str]


@dataclass(slots=True)
class Translation:
    """Locale-scoped translatable fields of a single record."""

    record_id: RecordId
    locale: str
    slug: Optional[str] = None
    title: Optional[str] = None


@dataclass(slots=True)
class SluggableRecord:
    """A record addressable by a per-locale slug as well as by its primary key."""

    id: RecordId
    translations: list[Translation] = field(default_factory=list)

    def translation_for(self, locale: str) -> Optional[Translation]:
        for translation in self.translations:
            if translation.locale == locale:
                return translation
        return None

    def slug_for(self, locale: str) -> Optional[str]:
        translation = self.translation_for(locale)
        return translation.slug if translation else None

    @property
    def locales(self) -> list[str]:
        return sorted(translation.locale for translation in self.translations)

    def iter_slugs(self) -> Iterable[tuple[str, str]]:
        """Yield ``(locale, slug)`` pairs for every translation holding a slug."""

        for translation in self.translations:
            if translation.slug:
                yield translation.locale, translation.slug


@dataclass(frozen=True, slots=True)
class LocaleContext:
    """Current locale of an operation together with the fixed fallback locale."""

    current: str
    default: str

    def with_locale(self, locale: Optional[str]) -> "LocaleContext":
        if not locale or locale == self.current:
            return self
        return replace(self, current=locale)

    @property
    def falls_back(self) -> bool:
        return self.current != self.default


class ResolutionState(str, enum.Enum):
    EXACT_LOCALE_HIT = "exact_locale_hit"
    DEFAULT_LOCALE_HIT = "default_locale_hit"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of a single slug lookup."""

    state: ResolutionState
    translation: Optional[Translation] = None

    @property
    def record_id(self) -> Optional[RecordId]:
        return self.translation.record_id if self.translation else None

    @property
    def found(self) -> bool:
        return self.state is not ResolutionState.NOT_FOUND
