"""Shared fixtures: every store backend behind the same interface."""

import pytest

from slug_translations.service import SlugService
from slug_translations.slugging.models import LocaleContext, Translation
from slug_translations.stores.files import FrontmatterTranslationStore
from slug_translations.stores.memory import MemoryTranslationStore
from slug_translations.stores.sql import SqlTranslationStore


@pytest.fixture(params=["memory", "files", "sql"])
def store(request, tmp_path):
    if request.param == "memory":
        yield MemoryTranslationStore()
    elif request.param == "files":
        yield FrontmatterTranslationStore(tmp_path / "records")
    else:
        sql_store = SqlTranslationStore("sqlite://")
        yield sql_store
        sql_store.close()


@pytest.fixture
def service(store):
    return SlugService(store, locales=LocaleContext(current="en", default="en"))


@pytest.fixture
def add(store):
    """Create a record holding the given ``{locale: slug}`` translations."""

    def _add(**slugs):
        record = store.create_record()
        for locale, slug in slugs.items():
            store.save_translation(Translation(record_id=record.id, locale=locale, slug=slug))
        return record.id

    return _add
