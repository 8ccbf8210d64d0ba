"""Mood check-in routes. Mood entries are append-only."""

from typing import Any, List

from fastapi import APIRouter, Body, Depends

from mindwell.dependencies import get_current_user, get_store
from mindwell.repositories.base import EntityStore
from mindwell.repositories.records import MoodEntry, NewMoodEntry, User
from mindwell.schemas.common import ErrorResponse
from mindwell.schemas.entries import MoodEntryResponse
from mindwell.validation import validate_mood_create

router = APIRouter(prefix="/api/mood", tags=["Mood"])


@router.get("", response_model=List[MoodEntryResponse], summary="List my mood entries")
async def list_mood_entries(
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> List[MoodEntry]:
    return await store.get_mood_entries_by_user_id(user.id)


@router.post(
    "",
    response_model=MoodEntryResponse,
    status_code=201,
    responses={400: {"description": "Invalid data", "model": ErrorResponse}},
    summary="Record a mood",
)
async def create_mood_entry(
    body: Any = Body(default=None),
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> MoodEntry:
    mood, note = validate_mood_create(body)
    return await store.create_mood_entry(NewMoodEntry(user_id=user.id, mood=mood, note=note))
