"""
MindWell Backend — SQLAlchemy Entity Store Tests
================================================

What:  Runs the durable store against a temporary SQLite database (aiosqlite).
How:   Schema created with create_schema=True; the catalog is seeded by
       initialize(), exactly as on a fresh PostgreSQL deployment.

What we test:
    ✅ Catalog seeding is idempotent
    ✅ Case-insensitive username uniqueness, enforced by a unique index
    ✅ UTC-aware, non-decreasing timestamps and newest-first listings
    ✅ Single-statement partial updates (concurrent disjoint PATCHes)
    ✅ Payment transitions and NotFound handling
"""

import asyncio
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError

from mindwell.database import build_engine
from mindwell.exceptions import (
    DuplicateUsernameError,
    NotFoundError,
    PaymentStateError,
    ValidationError,
)
from mindwell.models.user import UserModel
from mindwell.repositories.records import (
    NewJournalEntry,
    NewMoodEntry,
    NewUser,
    PaymentStatus,
)
from mindwell.repositories.sql import SQLAlchemyStore


@pytest_asyncio.fixture
async def sql_store(tmp_path, store_clock):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'mindwell.db'}")
    store = SQLAlchemyStore(engine=engine, clock=store_clock, create_schema=True)
    await store.initialize()
    yield store
    await store.close()


async def make_user(store, username="alice"):
    return await store.create_user(
        NewUser(username=username, password="hash", email=f"{username}@example.com")
    )


class TestSchemaAndCatalog:

    @pytest.mark.asyncio
    async def test_initialize_seeds_catalog_once(self, sql_store):
        await sql_store.initialize()
        sessions = await sql_store.get_mindfulness_sessions()
        prompts = await sql_store.get_reflection_prompts()
        assert len(sessions) == 6
        assert len(prompts) == 7
        assert sessions[2].title == "Deep Sleep Guide"
        assert sessions[2].is_premium is True

    @pytest.mark.asyncio
    async def test_single_catalog_lookups(self, sql_store):
        session = await sql_store.get_mindfulness_session(1)
        assert session.duration == 10
        assert await sql_store.get_mindfulness_session(100) is None
        assert (await sql_store.get_reflection_prompt(3)).is_premium is True

    @pytest.mark.asyncio
    async def test_health_check(self, sql_store):
        assert await sql_store.health_check() is True


class TestUsers:

    @pytest.mark.asyncio
    async def test_duplicate_username_ignores_case(self, sql_store):
        await make_user(sql_store, "Alice")
        with pytest.raises(DuplicateUsernameError):
            await make_user(sql_store, "alice")

    @pytest.mark.asyncio
    async def test_concurrent_spellings_only_one_wins(self, sql_store):
        results = await asyncio.gather(
            make_user(sql_store, "BOB"),
            make_user(sql_store, "bob"),
            make_user(sql_store, "Bob"),
            return_exceptions=True,
        )
        created = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, Exception)]
        assert len(created) == 1
        assert len(rejected) == 2
        assert all(isinstance(e, DuplicateUsernameError) for e in rejected)
        assert (await sql_store.get_user_by_username("bob")).id == created[0].id

    @pytest.mark.asyncio
    async def test_unique_index_ignores_case(self, sql_store, tmp_path):
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'mindwell.db'}")
        try:
            async with engine.begin() as conn:
                await conn.execute(
                    insert(UserModel).values(username="Carol", password="h", email="c@example.com")
                )
            with pytest.raises(IntegrityError):
                async with engine.begin() as conn:
                    await conn.execute(
                        insert(UserModel).values(username="carol", password="h", email="c@example.com")
                    )
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_lookup_and_premium_update(self, sql_store):
        user = await make_user(sql_store)
        assert (await sql_store.get_user_by_username("ALICE")).id == user.id

        updated = await sql_store.update_user_stripe_info(user.id, "cus_1", "sub_1")
        assert updated.is_premium is True
        assert updated.stripe_customer_id == "cus_1"

        with pytest.raises(NotFoundError):
            await sql_store.update_user_premium_status(999, True)


class TestJournalEntries:

    @pytest.mark.asyncio
    async def test_create_list_update_delete(self, sql_store):
        user = await make_user(sql_store)
        first = await sql_store.create_journal_entry(
            NewJournalEntry(user_id=user.id, title="One", content="a", mood="calm")
        )
        second = await sql_store.create_journal_entry(
            NewJournalEntry(user_id=user.id, title="Two", content="b", mood="sad")
        )
        assert first.created_at.tzinfo is not None

        listed = await sql_store.get_journal_entries_by_user_id(user.id)
        assert [e.id for e in listed] == [second.id, first.id]

        updated = await sql_store.update_journal_entry(first.id, {"mood": "happy"})
        assert updated.mood == "happy"
        assert updated.title == "One"
        assert updated.created_at == first.created_at

        await sql_store.delete_journal_entry(first.id)
        assert await sql_store.get_journal_entry(first.id) is None
        with pytest.raises(NotFoundError):
            await sql_store.delete_journal_entry(first.id)

    @pytest.mark.asyncio
    async def test_create_for_unknown_owner(self, sql_store):
        with pytest.raises(NotFoundError):
            await sql_store.create_journal_entry(
                NewJournalEntry(user_id=5, title="x", content="y", mood="calm")
            )

    @pytest.mark.asyncio
    async def test_timestamps_never_go_backwards(self, tmp_path):
        times = iter([
            datetime(2026, 1, 2, 12, tzinfo=timezone.utc),
            datetime(2026, 1, 2, 11, tzinfo=timezone.utc),
            datetime(2026, 1, 2, 10, tzinfo=timezone.utc),
        ])
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'clock.db'}")
        store = SQLAlchemyStore(engine=engine, clock=lambda: next(times), create_schema=True)
        await store.initialize()
        try:
            user = await make_user(store)
            first = await store.create_journal_entry(
                NewJournalEntry(user_id=user.id, title="One", content="a", mood="calm")
            )
            second = await store.create_journal_entry(
                NewJournalEntry(user_id=user.id, title="Two", content="b", mood="calm")
            )
            mood = await store.create_mood_entry(NewMoodEntry(user_id=user.id, mood="sad"))
        finally:
            await store.close()
        assert first.created_at == second.created_at == mood.created_at
        assert second.created_at == datetime(2026, 1, 2, 12, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_update_errors(self, sql_store):
        with pytest.raises(NotFoundError):
            await sql_store.update_journal_entry(41, {"title": "x"})
        with pytest.raises(ValidationError):
            await sql_store.update_journal_entry(41, {"created_at": "now"})

    @pytest.mark.asyncio
    async def test_concurrent_disjoint_updates_both_survive(self, sql_store):
        user = await make_user(sql_store)
        entry = await sql_store.create_journal_entry(
            NewJournalEntry(user_id=user.id, title="Old", content="c", mood="calm")
        )
        await asyncio.gather(
            sql_store.update_journal_entry(entry.id, {"title": "New"}),
            sql_store.update_journal_entry(entry.id, {"mood": "stressed"}),
        )
        final = await sql_store.get_journal_entry(entry.id)
        assert final.title == "New"
        assert final.mood == "stressed"


class TestMoodAndPayments:

    @pytest.mark.asyncio
    async def test_mood_entries(self, sql_store):
        user = await make_user(sql_store)
        entry = await sql_store.create_mood_entry(
            NewMoodEntry(user_id=user.id, mood="neutral", note=None)
        )
        assert await sql_store.get_mood_entry(entry.id) == entry
        assert await sql_store.get_mood_entries_by_user_id(user.id) == [entry]

    @pytest.mark.asyncio
    async def test_payment_transitions(self, sql_store):
        user = await make_user(sql_store)
        payment = await sql_store.create_payment(user.id, "pi_1", 499, "usd")
        assert payment.status == PaymentStatus.PENDING

        with pytest.raises(PaymentStateError):
            await sql_store.update_payment_status(payment.id, PaymentStatus.PREMIUM_GRANTED)

        await sql_store.update_payment_status(payment.id, PaymentStatus.CONFIRMED)
        granted = await sql_store.update_payment_status(payment.id, PaymentStatus.PREMIUM_GRANTED)
        assert granted.status == PaymentStatus.PREMIUM_GRANTED
        assert granted.updated_at > payment.updated_at
        assert (await sql_store.get_payment_by_intent_id("pi_1")).status == PaymentStatus.PREMIUM_GRANTED
