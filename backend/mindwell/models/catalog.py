"""
MindWell Backend — Catalog SQLAlchemy Models
============================================

What:  ORM models for the read-only catalog: `mindfulness_sessions` and
       `reflection_prompts`.
How:   Seeded by SQLAlchemyStore.initialize() when the tables are empty.
       Neither table references users; premium gating compares the row's
       is_premium flag with the requesting user's flag at read time.
"""

from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from mindwell.database import Base


class MindfulnessSessionModel(Base):
    __tablename__ = "mindfulness_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    duration: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Length in minutes",
    )

    audio_url: Mapped[str] = mapped_column(String(500), nullable=False)
    is_premium: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    def __repr__(self) -> str:
        return f"<MindfulnessSessionModel(id={self.id}, title='{self.title}')>"


class ReflectionPromptModel(Base):
    __tablename__ = "reflection_prompts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    is_premium: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    def __repr__(self) -> str:
        return f"<ReflectionPromptModel(id={self.id}, premium={self.is_premium})>"
