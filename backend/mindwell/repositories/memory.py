"""
MindWell Backend — In-Memory Entity Store
=========================================

What:  Process-local EntityStore backed by dictionaries and per-entity counters.
How:   Each entity type has its own dict and counter; records are frozen
       dataclasses, so an update stores a replacement record.
       Mutations hold an asyncio.Lock, which makes every read-modify-write
       atomic for concurrent requests on the same event loop.
Who:   Default store (STORAGE_BACKEND=memory) and the store used by tests.
When:  One instance per application; nothing survives a restart.
"""

import asyncio
import dataclasses
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

from mindwell.exceptions import DuplicateUsernameError, NotFoundError, PaymentStateError, ValidationError
from mindwell.repositories.base import EntityStore
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

Clock = Callable[[], datetime]
T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first(records: List[T]) -> List[T]:
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


class InMemoryStore(EntityStore):
    """
    Dictionary-backed store, seeded with the catalog at construction.

    Args:
        clock: Source of "now" for created_at/updated_at. Tests pass a fixed
               or stepping clock; production uses UTC wall time.
        seed_catalog: Load the mindfulness sessions and reflection prompts.
    """

    def __init__(self, clock: Optional[Clock] = None, seed_catalog: bool = True):
        self._clock: Clock = clock or utc_now
        self._lock = asyncio.Lock()
        self._last_timestamp: Optional[datetime] = None

        self._users: Dict[int, User] = {}
        self._journal_entries: Dict[int, JournalEntry] = {}
        self._mood_entries: Dict[int, MoodEntry] = {}
        self._mindfulness_sessions: Dict[int, MindfulnessSession] = {}
        self._reflection_prompts: Dict[int, ReflectionPrompt] = {}
        self._payments: Dict[int, Payment] = {}

        self._counters: Dict[str, int] = {
            "user": 0,
            "journal": 0,
            "mood": 0,
            "session": 0,
            "prompt": 0,
            "payment": 0,
        }

        if seed_catalog:
            self._seed_catalog()

    # ── Internals ─────────────────────────────────────────────────────────

    def _next_id(self, kind: str) -> int:
        self._counters[kind] += 1
        return self._counters[kind]

    def _now(self) -> datetime:
        # Never hand out a timestamp older than the previous one, even if the
        # wall clock steps backwards.
        now = self._clock()
        if self._last_timestamp is not None and now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    def _seed_catalog(self) -> None:
        for data in MINDFULNESS_SESSIONS:
            session_id = self._next_id("session")
            self._mindfulness_sessions[session_id] = MindfulnessSession(id=session_id, **data)
        for data in REFLECTION_PROMPTS:
            prompt_id = self._next_id("prompt")
            self._reflection_prompts[prompt_id] = ReflectionPrompt(id=prompt_id, **data)
        logger.debug(
            "Seeded %d mindfulness sessions and %d reflection prompts",
            len(self._mindfulness_sessions),
            len(self._reflection_prompts),
        )

    def _find_username(self, username: str) -> Optional[User]:
        wanted = username.lower()
        for user in self._users.values():
            if user.username.lower() == wanted:
                return user
        return None

    def _require_user(self, user_id: int) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    # ── Users ─────────────────────────────────────────────────────────────

    async def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return self._find_username(username)

    async def create_user(self, candidate: NewUser) -> User:
        async with self._lock:
            if self._find_username(candidate.username) is not None:
                raise DuplicateUsernameError(candidate.username)
            user = User(
                id=self._next_id("user"),
                username=candidate.username,
                password=candidate.password,
                email=candidate.email,
                is_premium=False,
            )
            self._users[user.id] = user
        logger.info("User %d created (%s)", user.id, user.username)
        return user

    async def update_user_premium_status(self, user_id: int, is_premium: bool) -> User:
        async with self._lock:
            user = dataclasses.replace(self._require_user(user_id), is_premium=is_premium)
            self._users[user_id] = user
        return user

    async def update_user_stripe_info(
        self, user_id: int, customer_id: str, subscription_id: Optional[str] = None
    ) -> User:
        async with self._lock:
            user = dataclasses.replace(
                self._require_user(user_id),
                stripe_customer_id=customer_id,
                stripe_subscription_id=subscription_id,
                is_premium=True,
            )
            self._users[user_id] = user
        return user

    # ── Journal entries ───────────────────────────────────────────────────

    async def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        return self._journal_entries.get(entry_id)

    async def get_journal_entries_by_user_id(self, user_id: int) -> List[JournalEntry]:
        return _newest_first(
            [e for e in self._journal_entries.values() if e.user_id == user_id]
        )

    async def create_journal_entry(self, draft: NewJournalEntry) -> JournalEntry:
        async with self._lock:
            self._require_user(draft.user_id)
            entry = JournalEntry(
                id=self._next_id("journal"),
                user_id=draft.user_id,
                title=draft.title,
                content=draft.content,
                mood=draft.mood,
                created_at=self._now(),
            )
            self._journal_entries[entry.id] = entry
        return entry

    async def update_journal_entry(
        self, entry_id: int, fields: Mapping[str, Any]
    ) -> JournalEntry:
        unknown = set(fields) - JOURNAL_MUTABLE_FIELDS
        if unknown:
            raise ValidationError(context={"fields": sorted(unknown)})

        async with self._lock:
            entry = self._journal_entries.get(entry_id)
            if entry is None:
                raise NotFoundError(resource="journal entry", resource_id=str(entry_id))
            entry = dataclasses.replace(entry, **dict(fields))
            self._journal_entries[entry_id] = entry
        return entry

    async def delete_journal_entry(self, entry_id: int) -> None:
        async with self._lock:
            if entry_id not in self._journal_entries:
                raise NotFoundError(resource="journal entry", resource_id=str(entry_id))
            del self._journal_entries[entry_id]

    # ── Mood entries ──────────────────────────────────────────────────────

    async def get_mood_entry(self, entry_id: int) -> Optional[MoodEntry]:
        return self._mood_entries.get(entry_id)

    async def get_mood_entries_by_user_id(self, user_id: int) -> List[MoodEntry]:
        return _newest_first(
            [e for e in self._mood_entries.values() if e.user_id == user_id]
        )

    async def create_mood_entry(self, draft: NewMoodEntry) -> MoodEntry:
        async with self._lock:
            self._require_user(draft.user_id)
            entry = MoodEntry(
                id=self._next_id("mood"),
                user_id=draft.user_id,
                mood=draft.mood,
                note=draft.note,
                created_at=self._now(),
            )
            self._mood_entries[entry.id] = entry
        return entry

    # ── Catalog ───────────────────────────────────────────────────────────

    async def get_mindfulness_sessions(self) -> List[MindfulnessSession]:
        return list(self._mindfulness_sessions.values())

    async def get_mindfulness_session(self, session_id: int) -> Optional[MindfulnessSession]:
        return self._mindfulness_sessions.get(session_id)

    async def get_reflection_prompts(self) -> List[ReflectionPrompt]:
        return list(self._reflection_prompts.values())

    async def get_reflection_prompt(self, prompt_id: int) -> Optional[ReflectionPrompt]:
        return self._reflection_prompts.get(prompt_id)

    # ── Payments ──────────────────────────────────────────────────────────

    async def create_payment(
        self, user_id: int, intent_id: str, amount: int, currency: str
    ) -> Payment:
        async with self._lock:
            self._require_user(user_id)
            now = self._now()
            payment = Payment(
                id=self._next_id("payment"),
                user_id=user_id,
                intent_id=intent_id,
                amount=amount,
                currency=currency,
                status=PaymentStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            self._payments[payment.id] = payment
        return payment

    async def get_payment_by_intent_id(self, intent_id: str) -> Optional[Payment]:
        for payment in self._payments.values():
            if payment.intent_id == intent_id:
                return payment
        return None

    async def update_payment_status(self, payment_id: int, status: PaymentStatus) -> Payment:
        async with self._lock:
            payment = self._payments.get(payment_id)
            if payment is None:
                raise NotFoundError(resource="payment", resource_id=str(payment_id))
            if not payment.status.can_transition_to(status):
                raise PaymentStateError(payment.status.value, status.value)
            payment = dataclasses.replace(payment, status=status, updated_at=self._now())
            self._payments[payment_id] = payment
        return payment
