"""Translation store persisted as Markdown files with YAML frontmatter."""

from __future__ import annotations

import itertools
import logging
from pathlib import Path
from typing import Optional

import frontmatter

from slug_translations.slugging.models import RecordId, SluggableRecord, Translation

from .memory import MemoryTranslationStore

log = logging.getLogger(__name__)

RECORD_SUFFIX = ".md"


class FrontmatterTranslationStore(MemoryTranslationStore):
    """Persist each record as ``<root>/<id>.md``.

    The frontmatter holds the record id and a ``translations`` list; the
    Markdown body is a human-readable summary. Lookups are served from the
    in-memory indexes, which are rebuilt from disk on construction.
    """

    def __init__(self, root: Path) -> None:
        super().__init__()
        self.root = root
        if self.root.exists():
            self._register_existing_records()

    def create_record(self) -> SluggableRecord:
        self.root.mkdir(parents=True, exist_ok=True)
        record = super().create_record()
        self._dump_record(record.id)
        return record

    def delete_record(self, record_id: RecordId) -> None:
        super().delete_record(record_id)
        record_file = self._record_path(record_id)
        if record_file.exists():
            record_file.unlink()
            log.debug("Removed %s", record_file)

    def _after_save(self, record_id: RecordId) -> None:
        self._dump_record(record_id)

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------
    def _record_path(self, record_id: RecordId) -> Path:
        return self.root / f"{record_id}{RECORD_SUFFIX}"

    def _dump_record(self, record_id: RecordId) -> None:
        translations = self.load_all_translations(record_id)
        lines = [f"- {t.locale}: {t.title or ''} ({t.slug or '-'})" for t in translations]
        post = frontmatter.Post("\n".join(lines))
        post.metadata.update(
            {
                "id": record_id,
                "translations": [
                    {"locale": t.locale, "slug": t.slug, "title": t.title} for t in translations
                ],
            }
        )
        with self._record_path(record_id).open("w", encoding="utf-8") as handle:
            frontmatter.dump(post, handle)

    def _register_existing_records(self) -> None:
        for record_file in sorted(self.root.glob(f"*{RECORD_SUFFIX}")):
            post = frontmatter.load(record_file)
            record_id = _as_record_id(post.metadata.get("id", record_file.stem))
            if record_id is None:
                log.warning("Skipping %s: missing record id", record_file)
                continue
            translations = [
                Translation(
                    record_id=record_id,
                    locale=str(entry["locale"]),
                    slug=_as_optional_str(entry.get("slug")),
                    title=_as_optional_str(entry.get("title")),
                )
                for entry in post.metadata.get("translations") or []
                if entry.get("locale")
            ]
            self._register(record_id, translations)
        numeric_ids = [record_id for record_id in self._records if isinstance(record_id, int)]
        self._ids = itertools.count(max(numeric_ids, default=0) + 1)
        log.debug("Loaded %d records from %s", len(self._records), self.root)


def _as_record_id(value: object) -> Optional[RecordId]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return str(value)


def _as_optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    return str(value)
