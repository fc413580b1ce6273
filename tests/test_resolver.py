"""Tests for locale-aware slug resolution."""

from slug_translations.slugging.models import ResolutionState
from slug_translations.slugging.resolver import SlugResolver


class TestResolve:
    def test_exact_locale_hit(self, store, add):
        record_id = add(en="a-title")
        resolver = SlugResolver(store)

        assert resolver.resolve("a-title", "en", "en") == record_id
        assert resolver.resolve_state("a-title", "en", "en").state is ResolutionState.EXACT_LOCALE_HIT

    def test_falls_back_to_default_locale(self, store, add):
        record_id = add(en="a-title")
        resolver = SlugResolver(store)

        resolution = resolver.resolve_state("a-title", "de", "en")
        assert resolution.state is ResolutionState.DEFAULT_LOCALE_HIT
        assert resolution.record_id == record_id

    def test_not_found_in_either_locale(self, store, add):
        add(en="a-title", fr="un-titre")
        resolver = SlugResolver(store)

        resolution = resolver.resolve_state("un-titre", "de", "en")
        assert resolution.state is ResolutionState.NOT_FOUND
        assert not resolution.found
        assert resolver.resolve("un-titre", "de", "en") is None

    def test_no_fallback_when_current_is_default(self, store, add):
        add(de="titel")
        resolver = SlugResolver(store)

        assert resolver.resolve("titel", "en", "en") is None

    def test_current_locale_wins_over_default(self, store, add):
        english = add(en="titel")
        german = add(de="titel")
        resolver = SlugResolver(store)

        assert resolver.resolve("titel", "en", "en") == english
        assert resolver.resolve("titel", "de", "en") == german

    def test_slugs_of_other_records_in_current_locale(self, store, add):
        english = add(en="a-title")
        german = add(de="titel")
        resolver = SlugResolver(store)

        assert resolver.resolve("titel", "de", "en") == german
        assert resolver.resolve("a-title", "de", "en") == english


class TestResolveRecord:
    def test_record_carries_every_translation(self, store, add):
        record_id = add(en="a-title", ja="タイトル", de="titel")
        resolver = SlugResolver(store)

        record = resolver.resolve_record("titel", "de", "en")

        assert record is not None
        assert record.id == record_id
        assert record.locales == ["de", "en", "ja"]
        assert record.slug_for("ja") == "タイトル"

    def test_missing_slug_returns_none(self, store):
        assert SlugResolver(store).resolve_record("nothing", "en", "en") is None
