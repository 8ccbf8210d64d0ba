"""Premium filtering for the mindfulness session and reflection prompt catalog."""

from typing import Iterable, List, TypeVar

from mindwell.repositories.base import EntityStore
from mindwell.repositories.records import MindfulnessSession, ReflectionPrompt, User

T = TypeVar("T", MindfulnessSession, ReflectionPrompt)


def available_to(items: Iterable[T], user: User) -> List[T]:
    """Free items for everyone; premium items only for premium users."""
    return [item for item in items if not item.is_premium or user.is_premium]


async def available_sessions(store: EntityStore, user: User) -> List[MindfulnessSession]:
    return available_to(await store.get_mindfulness_sessions(), user)


async def available_prompts(store: EntityStore, user: User) -> List[ReflectionPrompt]:
    return available_to(await store.get_reflection_prompts(), user)
