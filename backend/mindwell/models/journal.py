"""
MindWell Backend — Journal & Mood Entry SQLAlchemy Models
=========================================================

What:  ORM models for `journal_entries` and `mood_entries`.
Who:   SQLAlchemyStore and Alembic.

Query Patterns:
    - List a user's entries newest first:
      SELECT ... WHERE user_id = :uid ORDER BY created_at DESC, id DESC
      → served by the (user_id, created_at) composite indexes.
    - Single entry by id: primary key lookup.

AUTOINCREMENT on SQLite keeps deleted ids from being handed out again;
PostgreSQL sequences already behave that way.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mindwell.database import Base


class JournalEntryModel(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="Owning user; only the owner may read, change or delete the entry",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # One of: happy, calm, neutral, sad, stressed
    mood: Mapped[str] = mapped_column(String(20), nullable=False)

    # Assigned by the store at creation; never updated
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_journal_entries_user_created", "user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<JournalEntryModel(id={self.id}, user_id={self.user_id}, mood='{self.mood}')>"


class MoodEntryModel(Base):
    """Append-only mood log; no update or delete path exists."""

    __tablename__ = "mood_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    mood: Mapped[str] = mapped_column(String(20), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_mood_entries_user_created", "user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<MoodEntryModel(id={self.id}, user_id={self.user_id}, mood='{self.mood}')>"
