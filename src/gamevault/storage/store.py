"""
Authoritative library store backed by SQLAlchemy.

Every public method is a self-contained transaction. Methods return
``LibraryEntry`` domain models, never ORM records.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import and_, create_engine, func, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from gamevault.logger import get_logger
from gamevault.storage.models import Base, GameRecord
from gamevault.storage.schemas import LibraryEntry, LibraryStats, MatchStatus
from gamevault.storage.timestamps import next_timestamp, utc_now


class StoreError(Exception):
    """Raised when the database cannot complete an operation."""


class EntryNotFoundError(StoreError):
    """Raised when an entry id does not exist."""

    def __init__(self, entry_id: int) -> None:
        super().__init__(f"Library entry {entry_id} not found")
        self.entry_id = entry_id


# Fields a sidecar import may write
IMPORTABLE_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "steam_app_id",
        "summary",
        "genres",
        "developers",
        "publishers",
        "release_date",
        "review_score",
        "review_summary",
        "hltb_main_mins",
        "hltb_extra_mins",
        "hltb_completionist_mins",
    }
)

# Fields a human may change through a manual edit
EDITABLE_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "summary",
        "genres",
        "developers",
        "publishers",
        "release_date",
        "review_score",
    }
)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def _coalesce(record: GameRecord, field: str, value: Any, *, keep_existing: bool = False) -> bool:
    """
    Write ``value`` into ``field`` unless it is None.

    With ``keep_existing`` a non-empty current value wins. Returns
    True when the record changed.
    """
    if value is None:
        return False
    current = getattr(record, field)
    if keep_existing and not _is_empty(current):
        return False
    if current == value:
        return False
    setattr(record, field, value)
    return True


def _touch(record: GameRecord) -> None:
    record.updated_at = next_timestamp(record.updated_at)


def _ensure_sqlite_path(database_url: str) -> None:
    """Create parent directories when using a file-backed SQLite URL."""
    if database_url.startswith("sqlite:///"):
        path_part = database_url.removeprefix("sqlite:///").split("?")[0]
        if path_part and path_part != ":memory:":
            Path(path_part).parent.mkdir(parents=True, exist_ok=True)


class LibraryStore:
    """
    Row store for library entries.

    Example:
        >>> store = LibraryStore.from_url("sqlite:///./data/gamevault.db")
        >>> entry_id = store.upsert("/games/Hades", "Hades", "Hades", None)
        >>> store.get(entry_id).match_status
        <MatchStatus.PENDING: 'pending'>
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(engine, expire_on_commit=False)
        self._logger = get_logger(__name__, component="store")

    @classmethod
    def from_url(cls, database_url: str, *, echo: bool = False) -> "LibraryStore":
        """Create a store for ``database_url`` and make sure the schema exists."""
        _ensure_sqlite_path(database_url)
        connect_args = (
            {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        )
        engine = create_engine(database_url, echo=echo, connect_args=connect_args)
        store = cls(engine)
        store.init_schema()
        return store

    def init_schema(self) -> None:
        """Create missing tables."""
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise StoreError(f"Schema creation failed: {e}") from e

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            with self._session_factory.begin() as session:
                yield session
        except SQLAlchemyError as e:
            self._logger.error("Database operation failed", error=str(e))
            raise StoreError(str(e)) from e

    @staticmethod
    def _require(session: Session, entry_id: int) -> GameRecord:
        record = session.get(GameRecord, entry_id)
        if record is None:
            raise EntryNotFoundError(entry_id)
        return record

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, entry_id: int) -> LibraryEntry | None:
        """Fetch one entry by id."""
        with self._transaction() as session:
            record = session.get(GameRecord, entry_id)
            return LibraryEntry.model_validate(record) if record else None

    def get_by_folder(self, folder_path: str) -> LibraryEntry | None:
        """Fetch one entry by its folder path."""
        with self._transaction() as session:
            record = session.scalar(
                select(GameRecord).where(GameRecord.folder_path == folder_path)
            )
            return LibraryEntry.model_validate(record) if record else None

    def get_folder_for(self, entry_id: int) -> str | None:
        """Return the folder path of an entry."""
        with self._transaction() as session:
            return session.scalar(
                select(GameRecord.folder_path).where(GameRecord.id == entry_id)
            )

    def list_all(self) -> list[LibraryEntry]:
        """All entries ordered by title."""
        with self._transaction() as session:
            records = session.scalars(select(GameRecord).order_by(GameRecord.title))
            return [LibraryEntry.model_validate(r) for r in records]

    def list_eligible_for_enrichment(self) -> list[LibraryEntry]:
        """
        Entries that an enrichment pass should look at.

        Pending or unresolved entries, plus matched entries still
        missing a cached cover or background.
        """
        stmt = (
            select(GameRecord)
            .where(
                or_(
                    GameRecord.match_status == MatchStatus.PENDING.value,
                    GameRecord.steam_app_id.is_(None),
                    and_(
                        GameRecord.match_status == MatchStatus.MATCHED.value,
                        or_(
                            GameRecord.local_cover_path.is_(None),
                            GameRecord.local_background_path.is_(None),
                        ),
                    ),
                )
            )
            .order_by(GameRecord.title)
        )
        with self._transaction() as session:
            return [LibraryEntry.model_validate(r) for r in session.scalars(stmt)]

    def search(self, query: str, *, limit: int = 50) -> list[LibraryEntry]:
        """Case-insensitive substring search on titles."""
        pattern = f"%{query.strip().lower()}%"
        stmt = (
            select(GameRecord)
            .where(func.lower(GameRecord.title).like(pattern))
            .order_by(GameRecord.title)
            .limit(limit)
        )
        with self._transaction() as session:
            return [LibraryEntry.model_validate(r) for r in session.scalars(stmt)]

    def list_recent(self, limit: int = 10) -> list[LibraryEntry]:
        """Most recently discovered entries first."""
        stmt = select(GameRecord).order_by(GameRecord.created_at.desc()).limit(limit)
        with self._transaction() as session:
            return [LibraryEntry.model_validate(r) for r in session.scalars(stmt)]

    def stats(self) -> LibraryStats:
        """Aggregate counts over the whole library."""

        def count(session: Session, *criteria: Any) -> int:
            stmt = select(func.count()).select_from(GameRecord)
            if criteria:
                stmt = stmt.where(*criteria)
            return int(session.scalar(stmt) or 0)

        with self._transaction() as session:
            return LibraryStats(
                total_games=count(session),
                matched_games=count(
                    session, GameRecord.match_status == MatchStatus.MATCHED.value
                ),
                pending_games=count(
                    session, GameRecord.match_status == MatchStatus.PENDING.value
                ),
                enriched_games=count(session, GameRecord.steam_app_id.is_not(None)),
                manually_edited_games=count(session, GameRecord.manually_edited.is_(True)),
            )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(
        self,
        folder_path: str,
        folder_name: str,
        title: str,
        size_bytes: int | None,
    ) -> int:
        """
        Insert a scanned folder or refresh an existing row.

        Safe to repeat. A manually edited title is kept, and
        ``updated_at`` only moves when something actually changed.

        Returns:
            int: Entry id
        """
        with self._transaction() as session:
            record = session.scalar(
                select(GameRecord).where(GameRecord.folder_path == folder_path)
            )
            if record is None:
                now = utc_now()
                record = GameRecord(
                    folder_path=folder_path,
                    folder_name=folder_name,
                    title=title,
                    size_bytes=size_bytes,
                    match_status=MatchStatus.PENDING.value,
                    manually_edited=False,
                    created_at=now,
                    updated_at=now,
                )
                session.add(record)
                session.flush()
                return record.id

            changed = _coalesce(record, "folder_name", folder_name)
            changed |= _coalesce(record, "size_bytes", size_bytes)
            if not record.manually_edited:
                changed |= _coalesce(record, "title", title)
            if changed:
                _touch(record)
            return record.id

    def update_resolution(
        self,
        entry_id: int,
        steam_app_id: int,
        confidence: float,
        *,
        summary: str | None = None,
        cover_url: str | None = None,
        background_url: str | None = None,
        genres: list[str] | None = None,
        developers: list[str] | None = None,
        publishers: list[str] | None = None,
        release_date: str | None = None,
        overwrite_edited: bool = False,
    ) -> LibraryEntry:
        """
        Record a catalog match and its descriptive details.

        Provided fields replace stored ones. On a manually edited entry
        an automated write only fills empty fields, unless
        ``overwrite_edited`` is set by a human-confirmed rematch.
        """
        if steam_app_id <= 0:
            raise ValueError(f"Invalid Steam app id: {steam_app_id}")
        if not 0.0 <= confidence <= 1.0:
            raise ValueError(f"Confidence out of range: {confidence}")

        with self._transaction() as session:
            record = self._require(session, entry_id)
            keep = record.manually_edited and not overwrite_edited

            if not (keep and record.steam_app_id is not None):
                record.steam_app_id = steam_app_id
                record.match_confidence = confidence
            record.match_status = MatchStatus.MATCHED.value

            for field, value in (
                ("summary", summary),
                ("cover_url", cover_url),
                ("background_url", background_url),
                ("genres", genres),
                ("developers", developers),
                ("publishers", publishers),
                ("release_date", release_date),
            ):
                _coalesce(record, field, value, keep_existing=keep)

            _touch(record)
            session.flush()
            return LibraryEntry.model_validate(record)

    def update_reviews(
        self,
        entry_id: int,
        score: int,
        count: int,
        summary: str,
        *,
        overwrite_edited: bool = False,
    ) -> None:
        """Store aggregate review statistics."""
        with self._transaction() as session:
            record = self._require(session, entry_id)
            keep = record.manually_edited and not overwrite_edited
            _coalesce(record, "review_score", score, keep_existing=keep)
            _coalesce(record, "review_count", count)
            _coalesce(record, "review_summary", summary)
            _touch(record)

    def update_local_images(
        self,
        entry_id: int,
        local_cover_path: str | None,
        local_background_path: str | None,
    ) -> None:
        """Record cached image paths. None never clears a stored path."""
        with self._transaction() as session:
            record = self._require(session, entry_id)
            changed = _coalesce(record, "local_cover_path", local_cover_path)
            changed |= _coalesce(record, "local_background_path", local_background_path)
            if changed:
                _touch(record)

    def update_manual_edit(self, entry_id: int, **fields: Any) -> LibraryEntry:
        """
        Apply a human edit and return the entry as stored.

        The update and the re-read share one transaction, so the caller
        always sees its own write. The entry is flagged as manually
        edited even when no field value changed.
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable: {sorted(unknown)}")

        with self._transaction() as session:
            record = self._require(session, entry_id)
            for field, value in fields.items():
                _coalesce(record, field, value)
            record.manually_edited = True
            _touch(record)
            session.flush()
            session.refresh(record)
            return LibraryEntry.model_validate(record)

    def apply_import(
        self,
        entry_id: int,
        fields: dict[str, Any],
        *,
        manually_edited: bool = False,
    ) -> LibraryEntry:
        """
        Merge fields read from a sidecar file.

        Only non-null values are written. An imported Steam id marks the
        entry matched; ``manually_edited`` can set the flag but never
        clears it.
        """
        unknown = set(fields) - IMPORTABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not importable: {sorted(unknown)}")

        with self._transaction() as session:
            record = self._require(session, entry_id)
            for field, value in fields.items():
                _coalesce(record, field, value)
            if fields.get("steam_app_id") is not None:
                record.match_status = MatchStatus.MATCHED.value
                if record.match_confidence is None:
                    record.match_confidence = 1.0
            if manually_edited:
                record.manually_edited = True
            _touch(record)
            session.flush()
            return LibraryEntry.model_validate(record)
