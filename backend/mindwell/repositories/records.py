"""
MindWell Backend — Domain Records
=================================

What:  Immutable value objects returned by every EntityStore implementation.
How:   Frozen dataclasses; updates produce a new record with
       `dataclasses.replace`, so a record handed to a caller never changes
       underneath it.
Who:   Produced by repositories, consumed by services, dependencies and the
       Pydantic response schemas (which read them with from_attributes=True).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

# Closed, case-sensitive set shared by journal and mood entries.
# Order is significant: distributions and charts list moods in this order.
MOOD_LABELS: Tuple[str, ...] = ("happy", "calm", "neutral", "sad", "stressed")

# Journal fields an owner may change after creation
JOURNAL_MUTABLE_FIELDS: FrozenSet[str] = frozenset({"title", "content", "mood"})


class PaymentStatus(str, Enum):
    """Lifecycle of a premium payment."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREMIUM_GRANTED = "premium_granted"
    FAILED = "failed"

    def can_transition_to(self, target: "PaymentStatus") -> bool:
        return target in _PAYMENT_TRANSITIONS[self]


_PAYMENT_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.CONFIRMED, PaymentStatus.FAILED}),
    # Stripe lets a customer retry on the same intent after a decline
    PaymentStatus.FAILED: frozenset({PaymentStatus.CONFIRMED}),
    PaymentStatus.CONFIRMED: frozenset({PaymentStatus.PREMIUM_GRANTED}),
    PaymentStatus.PREMIUM_GRANTED: frozenset(),
}


# ── Stored entities ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class User:
    id: int
    username: str
    password: str  # werkzeug password hash, never serialized
    email: str
    is_premium: bool = False
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None


@dataclass(frozen=True)
class JournalEntry:
    id: int
    user_id: int
    title: str
    content: str
    mood: str
    created_at: datetime


@dataclass(frozen=True)
class MoodEntry:
    id: int
    user_id: int
    mood: str
    created_at: datetime
    note: Optional[str] = None


@dataclass(frozen=True)
class MindfulnessSession:
    id: int
    title: str
    duration: int
    audio_url: str
    description: Optional[str] = None
    is_premium: bool = False


@dataclass(frozen=True)
class ReflectionPrompt:
    id: int
    prompt: str
    is_premium: bool = False


@dataclass(frozen=True)
class Payment:
    id: int
    user_id: int
    intent_id: str
    amount: int
    currency: str
    status: PaymentStatus
    created_at: datetime
    updated_at: datetime


# ── Creation candidates (no id / timestamp yet) ───────────────────────────

@dataclass(frozen=True)
class NewUser:
    username: str
    password: str
    email: str


@dataclass(frozen=True)
class NewJournalEntry:
    user_id: int
    title: str
    content: str
    mood: str


@dataclass(frozen=True)
class NewMoodEntry:
    user_id: int
    mood: str
    note: Optional[str] = None
