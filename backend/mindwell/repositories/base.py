"""
MindWell Backend — Abstract Entity Store Interface
==================================================

What:  Abstract base class defining the repository contract for every entity.
How:   Concrete stores (InMemoryStore, SQLAlchemyStore) inherit from
       EntityStore and implement each coroutine.
Who:   Injected into routes and services through `mindwell.dependencies.get_store`.
When:  Constructed once per application by `create_app()` and kept on
       `app.state.store`; tests build a fresh instance per test case.

Contract shared by all implementations:
    - Identifiers are store-assigned, per-entity monotonic, never reused.
    - `created_at` is assigned once, by the store, in UTC.
    - Lookups return None for unknown ids; mutations raise NotFoundError.
    - Owner listings are ordered newest first.
    - Ownership is NOT checked here; routes use `dependencies.load_owned`.
    - Each operation is atomic with respect to concurrent requests for the
      same id; no operation spans more than one entity type atomically.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from mindwell.repositories.records import (
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


class EntityStore(ABC):
    """Repository for users, journal/mood entries, payments and the catalog."""

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Prepare the backend (schema, catalog seed). Default: nothing to do."""
        return None

    async def close(self) -> None:
        """Release backend resources. Default: nothing to release."""
        return None

    async def health_check(self) -> bool:
        """True when the backend can serve queries."""
        return True

    # ── Users ─────────────────────────────────────────────────────────────

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Case-insensitive match; None when absent."""
        ...

    @abstractmethod
    async def create_user(self, candidate: NewUser) -> User:
        """
        Store a new user with is_premium=False.

        Raises:
            DuplicateUsernameError: a case-insensitive match already exists.
        """
        ...

    @abstractmethod
    async def update_user_premium_status(self, user_id: int, is_premium: bool) -> User:
        ...

    @abstractmethod
    async def update_user_stripe_info(
        self, user_id: int, customer_id: str, subscription_id: Optional[str] = None
    ) -> User:
        """
        Attach billing references and set is_premium=True.

        `subscription_id` stays None for one-off payments, which have no
        Stripe subscription object.
        """
        ...

    # ── Journal entries ───────────────────────────────────────────────────

    @abstractmethod
    async def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        ...

    @abstractmethod
    async def get_journal_entries_by_user_id(self, user_id: int) -> List[JournalEntry]:
        ...

    @abstractmethod
    async def create_journal_entry(self, draft: NewJournalEntry) -> JournalEntry:
        """
        Raises:
            NotFoundError: the owning user does not exist.
        """
        ...

    @abstractmethod
    async def update_journal_entry(
        self, entry_id: int, fields: Mapping[str, Any]
    ) -> JournalEntry:
        """
        Merge `fields` (subset of title/content/mood) into the entry.

        Raises:
            NotFoundError: unknown entry id.
            ValidationError: a key outside the mutable fields.
        """
        ...

    @abstractmethod
    async def delete_journal_entry(self, entry_id: int) -> None:
        ...

    # ── Mood entries ──────────────────────────────────────────────────────

    @abstractmethod
    async def get_mood_entry(self, entry_id: int) -> Optional[MoodEntry]:
        ...

    @abstractmethod
    async def get_mood_entries_by_user_id(self, user_id: int) -> List[MoodEntry]:
        ...

    @abstractmethod
    async def create_mood_entry(self, draft: NewMoodEntry) -> MoodEntry:
        ...

    # ── Catalog ───────────────────────────────────────────────────────────

    @abstractmethod
    async def get_mindfulness_sessions(self) -> List[MindfulnessSession]:
        ...

    @abstractmethod
    async def get_mindfulness_session(self, session_id: int) -> Optional[MindfulnessSession]:
        ...

    @abstractmethod
    async def get_reflection_prompts(self) -> List[ReflectionPrompt]:
        ...

    @abstractmethod
    async def get_reflection_prompt(self, prompt_id: int) -> Optional[ReflectionPrompt]:
        ...

    # ── Payments ──────────────────────────────────────────────────────────

    @abstractmethod
    async def create_payment(
        self, user_id: int, intent_id: str, amount: int, currency: str
    ) -> Payment:
        """New payment in PENDING state."""
        ...

    @abstractmethod
    async def get_payment_by_intent_id(self, intent_id: str) -> Optional[Payment]:
        ...

    @abstractmethod
    async def update_payment_status(self, payment_id: int, status: PaymentStatus) -> Payment:
        """
        Raises:
            NotFoundError: unknown payment id.
            PaymentStateError: the transition is not allowed.
        """
        ...
