"""Database models for the library store."""

from sqlalchemy import JSON, Boolean, Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all tables."""


class GameRecord(Base):
    """One row per discovered game folder."""

    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    folder_path: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    folder_name: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    steam_app_id: Mapped[int | None] = mapped_column(Integer, index=True)
    match_confidence: Mapped[float | None] = mapped_column(Float)
    match_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="pending", index=True
    )

    summary: Mapped[str | None] = mapped_column(Text)
    release_date: Mapped[str | None] = mapped_column(String(64))
    genres: Mapped[list[str] | None] = mapped_column(JSON)
    developers: Mapped[list[str] | None] = mapped_column(JSON)
    publishers: Mapped[list[str] | None] = mapped_column(JSON)

    # Remote CDN URLs
    cover_url: Mapped[str | None] = mapped_column(Text)
    background_url: Mapped[str | None] = mapped_column(Text)

    # Cached copies inside the game folder
    local_cover_path: Mapped[str | None] = mapped_column(Text)
    local_background_path: Mapped[str | None] = mapped_column(Text)

    review_score: Mapped[int | None] = mapped_column(Integer)
    review_count: Mapped[int | None] = mapped_column(Integer)
    review_summary: Mapped[str | None] = mapped_column(String(64))

    hltb_main_mins: Mapped[int | None] = mapped_column(Integer)
    hltb_extra_mins: Mapped[int | None] = mapped_column(Integer)
    hltb_completionist_mins: Mapped[int | None] = mapped_column(Integer)

    size_bytes: Mapped[int | None] = mapped_column(Integer)
    manually_edited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # RFC3339 UTC strings assigned by the store
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)
    updated_at: Mapped[str] = mapped_column(String(40), nullable=False)

    def __repr__(self) -> str:
        return f"GameRecord(id={self.id!r}, title={self.title!r}, status={self.match_status!r})"
