"""Relational translation store built on SQLAlchemy."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from sqlalchemy import (
    Engine,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    event,
    func,
    or_,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker

from slug_translations.errors import RetryableConflict
from slug_translations.slugging.models import RecordId, SluggableRecord, Translation

from .base import SortKey

log = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class RecordRow(Base):
    __tablename__ = "sluggable_records"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    translations: Mapped[list["TranslationRow"]] = relationship(
        back_populates="record",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TranslationRow(Base):
    __tablename__ = "slug_translations"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    record_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sluggable_records.id", ondelete="CASCADE"), index=True
    )
    locale: Mapped[str] = mapped_column(String(16))
    slug: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    record: Mapped[RecordRow] = relationship(back_populates="translations")
    __table_args__ = (
        UniqueConstraint("record_id", "locale", name="uq_slug_translations_record_locale"),
        UniqueConstraint("locale", "slug", name="uq_slug_translations_locale_slug"),
    )


class SqlTranslationStore:
    """Store translations in ``slug_translations``, one row per record and locale.

    Dialect differences stay in here: the prefix match is escaped by
    SQLAlchemy's ``autoescape`` and the length ordering goes through
    ``char_length``, which each dialect renders with its own function name.
    """

    def __init__(self, url: Union[str, Engine], *, create_schema: bool = True) -> None:
        self.engine = url if isinstance(url, Engine) else create_engine(url)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self._sessions = sessionmaker(self.engine, expire_on_commit=False)
        if create_schema:
            Base.metadata.create_all(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def find_translation(self, locale: str, slug: str) -> Optional[Translation]:
        stmt = select(TranslationRow).where(
            TranslationRow.locale == locale,
            TranslationRow.slug == slug,
        )
        with self._sessions() as session:
            row = session.scalars(stmt.limit(1)).first()
            return _to_translation(row) if row is not None else None

    def find_translations(
        self,
        locales: Iterable[str],
        slug: str,
        *,
        sort_key: Optional[SortKey] = None,
    ) -> list[Translation]:
        stmt = select(TranslationRow).where(
            TranslationRow.locale.in_(list(locales)),
            TranslationRow.slug == slug,
        )
        with self._sessions() as session:
            found = [_to_translation(row) for row in session.scalars(stmt)]
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
        stmt = select(TranslationRow).where(
            TranslationRow.locale == locale,
            or_(
                TranslationRow.slug == base,
                TranslationRow.slug.startswith(base + separator, autoescape=True),
            ),
        )
        if exclude_record_id is not None:
            stmt = stmt.where(TranslationRow.record_id != exclude_record_id)
        stmt = stmt.order_by(func.char_length(TranslationRow.slug).desc(), TranslationRow.slug.desc())
        with self._sessions() as session:
            return [_to_translation(row) for row in session.scalars(stmt)]

    def load_all_translations(self, record_id: RecordId) -> list[Translation]:
        stmt = (
            select(TranslationRow)
            .where(TranslationRow.record_id == record_id)
            .order_by(TranslationRow.locale)
        )
        with self._sessions() as session:
            return [_to_translation(row) for row in session.scalars(stmt)]

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------
    def get_record(self, record_id: RecordId) -> Optional[SluggableRecord]:
        if not isinstance(record_id, int):
            return None
        with self._sessions() as session:
            if session.get(RecordRow, record_id) is None:
                return None
        return SluggableRecord(id=record_id, translations=self.load_all_translations(record_id))

    def create_record(self) -> SluggableRecord:
        with self._sessions() as session:
            row = RecordRow()
            session.add(row)
            session.commit()
            log.debug("Created record %s", row.id)
            return SluggableRecord(id=row.id)

    def save_translation(self, translation: Translation) -> Translation:
        stmt = select(TranslationRow).where(
            TranslationRow.record_id == translation.record_id,
            TranslationRow.locale == translation.locale,
        )
        with self._sessions() as session:
            row = session.scalars(stmt).first()
            if row is None:
                if session.get(RecordRow, translation.record_id) is None:
                    raise KeyError(f"Unknown record id {translation.record_id!r}")
                row = TranslationRow(record_id=translation.record_id, locale=translation.locale)
                session.add(row)
            row.slug = translation.slug
            row.title = translation.title
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if translation.slug and self._slug_taken_by_other(translation):
                    raise RetryableConflict(translation.locale, translation.slug) from exc
                raise
            return _to_translation(row)

    def delete_record(self, record_id: RecordId) -> None:
        with self._sessions() as session:
            row = session.get(RecordRow, record_id)
            if row is None:
                return
            session.delete(row)
            session.commit()

    def _slug_taken_by_other(self, translation: Translation) -> bool:
        holder = self.find_translation(translation.locale, translation.slug or "")
        return holder is not None and holder.record_id != translation.record_id


def _to_translation(row: TranslationRow) -> Translation:
    return Translation(record_id=row.record_id, locale=row.locale, slug=row.slug, title=row.title)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # noqa: ANN001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
