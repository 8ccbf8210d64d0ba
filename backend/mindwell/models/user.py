"""
MindWell Backend — User SQLAlchemy Model
========================================

What:  ORM model for the `users` table.
Who:   SQLAlchemyStore (reads/writes) and Alembic (schema management).

Table Design:
    - username is unique ignoring case: a unique index on lower(username)
      backs the store's lookup, so concurrent inserts of "Bob" and "bob"
      cannot both commit.
    - password holds a werkzeug hash, never the plain credential.
    - is_premium is the single source of truth for premium gating.
"""

from typing import Optional

from sqlalchemy import Boolean, Index, Integer, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from mindwell.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
        comment="Login name; unique ignoring case",
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Password hash",
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    is_premium: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
        comment="Premium tier flag; gates premium catalog content",
    )

    # Billing references attached once a payment is confirmed
    stripe_customer_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("uq_users_username_lower", func.lower(username), unique=True),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, username='{self.username}', premium={self.is_premium})>"
