"""
MindWell Backend — Catalog Routes
=================================

What:  Mindfulness sessions and reflection prompts.
How:   The full catalog and single items are public; the `/available`
       views need a user and drop premium items for non-premium users.
       `/available` is declared before `/{id}` so it is not parsed as an id.
"""

from typing import List

from fastapi import APIRouter, Depends

from mindwell.dependencies import get_current_user, get_store
from mindwell.exceptions import NotFoundError
from mindwell.repositories.base import EntityStore
from mindwell.repositories.records import MindfulnessSession, ReflectionPrompt, User
from mindwell.schemas.catalog import MindfulnessSessionResponse, ReflectionPromptResponse
from mindwell.services.catalog_service import available_prompts, available_sessions

router = APIRouter(prefix="/api", tags=["Catalog"])


# ── Mindfulness sessions ──────────────────────────────────────────────────

@router.get("/mindfulness-sessions", response_model=List[MindfulnessSessionResponse])
async def list_mindfulness_sessions(
    store: EntityStore = Depends(get_store),
) -> List[MindfulnessSession]:
    return await store.get_mindfulness_sessions()


@router.get("/mindfulness-sessions/available", response_model=List[MindfulnessSessionResponse])
async def list_available_mindfulness_sessions(
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> List[MindfulnessSession]:
    return await available_sessions(store, user)


@router.get("/mindfulness-sessions/{session_id}", response_model=MindfulnessSessionResponse)
async def get_mindfulness_session(
    session_id: int,
    store: EntityStore = Depends(get_store),
) -> MindfulnessSession:
    session = await store.get_mindfulness_session(session_id)
    if session is None:
        raise NotFoundError(resource="mindfulness session", resource_id=str(session_id))
    return session


# ── Reflection prompts ────────────────────────────────────────────────────

@router.get("/reflection-prompts", response_model=List[ReflectionPromptResponse])
async def list_reflection_prompts(
    store: EntityStore = Depends(get_store),
) -> List[ReflectionPrompt]:
    return await store.get_reflection_prompts()


@router.get("/reflection-prompts/available", response_model=List[ReflectionPromptResponse])
async def list_available_reflection_prompts(
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> List[ReflectionPrompt]:
    return await available_prompts(store, user)


@router.get("/reflection-prompts/{prompt_id}", response_model=ReflectionPromptResponse)
async def get_reflection_prompt(
    prompt_id: int,
    store: EntityStore = Depends(get_store),
) -> ReflectionPrompt:
    prompt = await store.get_reflection_prompt(prompt_id)
    if prompt is None:
        raise NotFoundError(resource="reflection prompt", resource_id=str(prompt_id))
    return prompt
