"""Backend-specific behaviour of translation stores."""

import frontmatter
import pytest
from sqlalchemy import select

from slug_translations.errors import RetryableConflict
from slug_translations.slugging.models import Translation
from slug_translations.stores.base import TranslatableSlugStore
from slug_translations.stores.files import FrontmatterTranslationStore
from slug_translations.stores.sql import SqlTranslationStore, TranslationRow


class TestContract:
    def test_implements_protocol(self, store):
        assert isinstance(store, TranslatableSlugStore)

    def test_slug_unique_per_locale(self, store, add):
        add(en="a-title")
        other = store.create_record()

        with pytest.raises(RetryableConflict) as excinfo:
            store.save_translation(Translation(record_id=other.id, locale="en", slug="a-title"))

        assert excinfo.value.locale == "en"
        assert excinfo.value.slug == "a-title"

    def test_same_slug_in_other_locale_allowed(self, store, add):
        add(en="a-title")
        other = store.create_record()

        saved = store.save_translation(Translation(record_id=other.id, locale="de", slug="a-title"))

        assert saved.record_id == other.id

    def test_one_translation_per_locale(self, store, add):
        record_id = add(en="first")
        store.save_translation(Translation(record_id=record_id, locale="en", slug="second", title="Second"))

        translations = store.load_all_translations(record_id)

        assert translations == [Translation(record_id=record_id, locale="en", slug="second", title="Second")]
        assert store.find_translation("en", "first") is None

    def test_find_translations_uses_sort_key(self, store, add):
        english = add(en="titel")
        german = add(de="titel")

        found = store.find_translations(["en", "de"], "titel", sort_key=lambda t: t.locale != "de")

        assert [t.record_id for t in found] == [german, english]

    def test_prefix_lookup_ordering_and_exclusion(self, store, add):
        add(en="post")
        second = add(en="post--2")
        add(en="post--12")
        add(de="post--99")

        found = store.find_translations_by_prefix("en", "post", separator="--", exclude_record_id=second)

        assert [t.slug for t in found] == ["post--12", "post"]

    def test_unknown_record_rejected(self, store):
        with pytest.raises(KeyError):
            store.save_translation(Translation(record_id=404, locale="en", slug="x"))

    def test_get_record(self, store, add):
        record_id = add(en="a-title", de="titel")

        record = store.get_record(record_id)

        assert record.id == record_id
        assert record.locales == ["de", "en"]
        assert store.get_record(12345) is None


class TestFrontmatterStore:
    def test_writes_translations_to_frontmatter(self, tmp_path):
        store = FrontmatterTranslationStore(tmp_path)
        record = store.create_record()
        store.save_translation(Translation(record_id=record.id, locale="en", slug="a-title", title="A title"))

        post = frontmatter.load(tmp_path / f"{record.id}.md")

        assert post.metadata["id"] == record.id
        assert post.metadata["translations"] == [{"locale": "en", "slug": "a-title", "title": "A title"}]

    def test_reloads_from_disk(self, tmp_path):
        store = FrontmatterTranslationStore(tmp_path)
        first = store.create_record()
        store.save_translation(Translation(record_id=first.id, locale="de", slug="titel"))
        second = store.create_record()

        reloaded = FrontmatterTranslationStore(tmp_path)

        assert reloaded.find_translation("de", "titel").record_id == first.id
        assert reloaded.get_record(second.id).translations == []
        assert reloaded.create_record().id not in (first.id, second.id)

    def test_duplicate_slug_on_disk_keeps_first_owner(self, tmp_path, caplog):
        for record_id in (1, 2):
            post = frontmatter.Post("")
            post.metadata.update({"id": record_id, "translations": [{"locale": "en", "slug": "a-title"}]})
            with (tmp_path / f"{record_id}.md").open("w", encoding="utf-8") as handle:
                frontmatter.dump(post, handle)

        with caplog.at_level("WARNING"):
            store = FrontmatterTranslationStore(tmp_path)

        assert store.find_translation("en", "a-title").record_id == 1
        assert "held by records 1 and 2" in caplog.text

        store.delete_record(2)

        assert store.find_translation("en", "a-title").record_id == 1

    def test_delete_removes_file(self, tmp_path):
        store = FrontmatterTranslationStore(tmp_path)
        record = store.create_record()

        store.delete_record(record.id)

        assert not (tmp_path / f"{record.id}.md").exists()


class TestSqlStore:
    def test_deleting_record_cascades(self):
        store = SqlTranslationStore("sqlite://")
        record = store.create_record()
        store.save_translation(Translation(record_id=record.id, locale="en", slug="a-title"))

        store.delete_record(record.id)

        with store._sessions() as session:
            assert session.scalars(select(TranslationRow)).all() == []
        store.close()

    def test_non_integer_ids_are_not_found(self):
        store = SqlTranslationStore("sqlite://")
        assert store.get_record("a-title") is None
        store.close()
