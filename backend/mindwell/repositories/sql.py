"""
MindWell Backend — SQLAlchemy Entity Store
==========================================

What:  Durable EntityStore on async SQLAlchemy (asyncpg in production,
       aiosqlite in tests).
How:   Every public operation opens its own session and transaction through
       `_transaction()`, which commits on success, rolls back on error and
       wraps driver errors in DatabaseError. ORM rows are converted into the
       frozen records of `mindwell.repositories.records` before they leave
       the store.
Who:   Selected with STORAGE_BACKEND=database.

Atomicity:
    Journal updates are a single `UPDATE ... SET <provided columns> WHERE id`
    statement, so two concurrent PATCH requests that touch disjoint fields
    both survive. Premium/billing updates and payment transitions work the
    same way; payment transitions additionally lock the row (SELECT ... FOR
    UPDATE on PostgreSQL) before validating the state change.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, List, Mapping, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from mindwell.database import Base, build_engine, build_session_factory, dispose_engine
from mindwell.exceptions import (
    DatabaseError,
    DuplicateUsernameError,
    MindWellError,
    NotFoundError,
    PaymentStateError,
    ValidationError,
)
from mindwell.models.catalog import MindfulnessSessionModel, ReflectionPromptModel
from mindwell.models.journal import JournalEntryModel, MoodEntryModel
from mindwell.models.payment import PaymentModel
from mindwell.models.user import UserModel
from mindwell.repositories.base import EntityStore
from mindwell.repositories.memory import utc_now
from mindwell.repositories.records import (
    JOURNAL_MUTABLE_FIELDS,
    JournalEntry,
    MindfulnessSession,
    MoodEntry,
    NewJournalEntry,
    NewMoodEntry,
    NewUser,
    Payment,
    PaymentStatus,
    ReflectionPrompt,
    User,
)
from mindwell.repositories.seed import MINDFULNESS_SESSIONS, REFLECTION_PROMPTS

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ── Row → record conversion ───────────────────────────────────────────────

def _to_user(row: UserModel) -> User:
    return User(
        id=row.id,
        username=row.username,
        password=row.password,
        email=row.email,
        is_premium=bool(row.is_premium),
        stripe_customer_id=row.stripe_customer_id,
        stripe_subscription_id=row.stripe_subscription_id,
    )


def _to_journal_entry(row: JournalEntryModel) -> JournalEntry:
    return JournalEntry(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        content=row.content,
        mood=row.mood,
        created_at=_aware(row.created_at),
    )


def _to_mood_entry(row: MoodEntryModel) -> MoodEntry:
    return MoodEntry(
        id=row.id,
        user_id=row.user_id,
        mood=row.mood,
        note=row.note,
        created_at=_aware(row.created_at),
    )


def _to_session(row: MindfulnessSessionModel) -> MindfulnessSession:
    return MindfulnessSession(
        id=row.id,
        title=row.title,
        description=row.description,
        duration=row.duration,
        audio_url=row.audio_url,
        is_premium=bool(row.is_premium),
    )


def _to_prompt(row: ReflectionPromptModel) -> ReflectionPrompt:
    return ReflectionPrompt(id=row.id, prompt=row.prompt, is_premium=bool(row.is_premium))


def _to_payment(row: PaymentModel) -> Payment:
    return Payment(
        id=row.id,
        user_id=row.user_id,
        intent_id=row.intent_id,
        amount=row.amount,
        currency=row.currency,
        status=PaymentStatus(row.status),
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


class SQLAlchemyStore(EntityStore):
    """
    EntityStore backed by a relational database.

    Args:
        engine: Existing async engine (tests); built from settings when omitted.
        clock: Source of "now" for created_at/updated_at.
        create_schema: Run `Base.metadata.create_all` during initialize()
                       instead of relying on Alembic migrations.
    """

    def __init__(
        self,
        engine: Optional[AsyncEngine] = None,
        clock: Optional[Callable[[], datetime]] = None,
        create_schema: bool = False,
    ):
        self._engine = engine or build_engine()
        self._session_factory = build_session_factory(self._engine)
        self._clock = clock or utc_now
        self._last_timestamp: Optional[datetime] = None
        self._create_schema = create_schema

    def _now(self) -> datetime:
        # Timestamps handed out by this process never decrease, even if the
        # wall clock steps backwards.
        now = self._clock()
        if self._last_timestamp is not None and now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except MindWellError:
                raise
            except SQLAlchemyError as e:
                logger.error("Database error: %s", str(e), exc_info=True)
                raise DatabaseError(context={"error_type": type(e).__name__})

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def initialize(self) -> None:
        if self._create_schema:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema created")

        async with self._transaction() as session:
            sessions = await session.scalar(select(func.count(MindfulnessSessionModel.id)))
            if not sessions:
                session.add_all(MindfulnessSessionModel(**data) for data in MINDFULNESS_SESSIONS)
            prompts = await session.scalar(select(func.count(ReflectionPromptModel.id)))
            if not prompts:
                session.add_all(ReflectionPromptModel(**data) for data in REFLECTION_PROMPTS)
        if not sessions or not prompts:
            logger.info("Catalog seeded")

    async def close(self) -> None:
        await dispose_engine(self._engine)

    async def health_check(self) -> bool:
        try:
            async with self._transaction() as session:
                await session.execute(select(1))
            return True
        except DatabaseError:
            return False

    # ── Users ─────────────────────────────────────────────────────────────

    async def get_user(self, user_id: int) -> Optional[User]:
        async with self._transaction() as session:
            row = await session.get(UserModel, user_id)
            return _to_user(row) if row else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        async with self._transaction() as session:
            row = await session.scalar(
                select(UserModel).where(func.lower(UserModel.username) == username.lower())
            )
            return _to_user(row) if row else None

    async def create_user(self, candidate: NewUser) -> User:
        try:
            async with self._transaction() as session:
                existing = await session.scalar(
                    select(UserModel.id).where(
                        func.lower(UserModel.username) == candidate.username.lower()
                    )
                )
                if existing is not None:
                    raise DuplicateUsernameError(candidate.username)
                row = UserModel(
                    username=candidate.username,
                    password=candidate.password,
                    email=candidate.email,
                    is_premium=False,
                )
                session.add(row)
                await session.flush()
                user = _to_user(row)
        except DatabaseError as e:
            # Lost a race against a concurrent insert of the same name
            if e.context.get("error_type") == IntegrityError.__name__:
                raise DuplicateUsernameError(candidate.username)
            raise
        logger.info("User %d created (%s)", user.id, user.username)
        return user

    async def _update_user(self, user_id: int, **values: Any) -> User:
        async with self._transaction() as session:
            result = await session.execute(
                update(UserModel).where(UserModel.id == user_id).values(**values)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="user", resource_id=str(user_id))
            row = await session.get(UserModel, user_id, populate_existing=True)
            return _to_user(row)

    async def update_user_premium_status(self, user_id: int, is_premium: bool) -> User:
        return await self._update_user(user_id, is_premium=is_premium)

    async def update_user_stripe_info(
        self, user_id: int, customer_id: str, subscription_id: Optional[str] = None
    ) -> User:
        return await self._update_user(
            user_id,
            stripe_customer_id=customer_id,
            stripe_subscription_id=subscription_id,
            is_premium=True,
        )

    # ── Journal entries ───────────────────────────────────────────────────

    async def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        async with self._transaction() as session:
            row = await session.get(JournalEntryModel, entry_id)
            return _to_journal_entry(row) if row else None

    async def get_journal_entries_by_user_id(self, user_id: int) -> List[JournalEntry]:
        async with self._transaction() as session:
            rows = await session.scalars(
                select(JournalEntryModel)
                .where(JournalEntryModel.user_id == user_id)
                .order_by(JournalEntryModel.created_at.desc(), JournalEntryModel.id.desc())
            )
            return [_to_journal_entry(row) for row in rows]

    async def create_journal_entry(self, draft: NewJournalEntry) -> JournalEntry:
        async with self._transaction() as session:
            if await session.get(UserModel, draft.user_id) is None:
                raise NotFoundError(resource="user", resource_id=str(draft.user_id))
            row = JournalEntryModel(
                user_id=draft.user_id,
                title=draft.title,
                content=draft.content,
                mood=draft.mood,
                created_at=self._now(),
            )
            session.add(row)
            await session.flush()
            return _to_journal_entry(row)

    async def update_journal_entry(
        self, entry_id: int, fields: Mapping[str, Any]
    ) -> JournalEntry:
        unknown = set(fields) - JOURNAL_MUTABLE_FIELDS
        if unknown:
            raise ValidationError(context={"fields": sorted(unknown)})

        async with self._transaction() as session:
            if fields:
                result = await session.execute(
                    update(JournalEntryModel)
                    .where(JournalEntryModel.id == entry_id)
                    .values(**dict(fields))
                )
                if result.rowcount == 0:
                    raise NotFoundError(resource="journal entry", resource_id=str(entry_id))
            row = await session.get(JournalEntryModel, entry_id, populate_existing=True)
            if row is None:
                raise NotFoundError(resource="journal entry", resource_id=str(entry_id))
            return _to_journal_entry(row)

    async def delete_journal_entry(self, entry_id: int) -> None:
        async with self._transaction() as session:
            result = await session.execute(
                delete(JournalEntryModel).where(JournalEntryModel.id == entry_id)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="journal entry", resource_id=str(entry_id))

    # ── Mood entries ──────────────────────────────────────────────────────

    async def get_mood_entry(self, entry_id: int) -> Optional[MoodEntry]:
        async with self._transaction() as session:
            row = await session.get(MoodEntryModel, entry_id)
            return _to_mood_entry(row) if row else None

    async def get_mood_entries_by_user_id(self, user_id: int) -> List[MoodEntry]:
        async with self._transaction() as session:
            rows = await session.scalars(
                select(MoodEntryModel)
                .where(MoodEntryModel.user_id == user_id)
                .order_by(MoodEntryModel.created_at.desc(), MoodEntryModel.id.desc())
            )
            return [_to_mood_entry(row) for row in rows]

    async def create_mood_entry(self, draft: NewMoodEntry) -> MoodEntry:
        async with self._transaction() as session:
            if await session.get(UserModel, draft.user_id) is None:
                raise NotFoundError(resource="user", resource_id=str(draft.user_id))
            row = MoodEntryModel(
                user_id=draft.user_id,
                mood=draft.mood,
                note=draft.note,
                created_at=self._now(),
            )
            session.add(row)
            await session.flush()
            return _to_mood_entry(row)

    # ── Catalog ───────────────────────────────────────────────────────────

    async def get_mindfulness_sessions(self) -> List[MindfulnessSession]:
        async with self._transaction() as session:
            rows = await session.scalars(
                select(MindfulnessSessionModel).order_by(MindfulnessSessionModel.id)
            )
            return [_to_session(row) for row in rows]

    async def get_mindfulness_session(self, session_id: int) -> Optional[MindfulnessSession]:
        async with self._transaction() as session:
            row = await session.get(MindfulnessSessionModel, session_id)
            return _to_session(row) if row else None

    async def get_reflection_prompts(self) -> List[ReflectionPrompt]:
        async with self._transaction() as session:
            rows = await session.scalars(
                select(ReflectionPromptModel).order_by(ReflectionPromptModel.id)
            )
            return [_to_prompt(row) for row in rows]

    async def get_reflection_prompt(self, prompt_id: int) -> Optional[ReflectionPrompt]:
        async with self._transaction() as session:
            row = await session.get(ReflectionPromptModel, prompt_id)
            return _to_prompt(row) if row else None

    # ── Payments ──────────────────────────────────────────────────────────

    async def create_payment(
        self, user_id: int, intent_id: str, amount: int, currency: str
    ) -> Payment:
        async with self._transaction() as session:
            if await session.get(UserModel, user_id) is None:
                raise NotFoundError(resource="user", resource_id=str(user_id))
            now = self._now()
            row = PaymentModel(
                user_id=user_id,
                intent_id=intent_id,
                amount=amount,
                currency=currency,
                status=PaymentStatus.PENDING.value,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            await session.flush()
            return _to_payment(row)

    async def get_payment_by_intent_id(self, intent_id: str) -> Optional[Payment]:
        async with self._transaction() as session:
            row = await session.scalar(
                select(PaymentModel).where(PaymentModel.intent_id == intent_id)
            )
            return _to_payment(row) if row else None

    async def update_payment_status(self, payment_id: int, status: PaymentStatus) -> Payment:
        async with self._transaction() as session:
            row = await session.scalar(
                select(PaymentModel).where(PaymentModel.id == payment_id).with_for_update()
            )
            if row is None:
                raise NotFoundError(resource="payment", resource_id=str(payment_id))
            current = PaymentStatus(row.status)
            if not current.can_transition_to(status):
                raise PaymentStateError(current.value, status.value)
            row.status = status.value
            row.updated_at = self._now()
            await session.flush()
            return _to_payment(row)
