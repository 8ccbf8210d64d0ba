"""
MindWell Backend — Journal Entry Routes
=======================================

What:  CRUD for the requester's journal entries.
How:   Every per-entry route resolves the entry through
       `get_owned_journal_entry`, so 404/403 are decided before any write.

Ownership:
    The owner of a new entry is always the authenticated user; a `userId`
    in the body is ignored. PATCH cannot change the owner or the timestamp.
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, Response

from mindwell.dependencies import get_current_user, get_owned_journal_entry, get_store
from mindwell.repositories.base import EntityStore
from mindwell.repositories.records import JournalEntry, NewJournalEntry, User
from mindwell.schemas.common import ErrorResponse
from mindwell.schemas.entries import JournalEntryResponse
from mindwell.validation import validate_journal_create, validate_journal_patch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/journal-entries", tags=["Journal"])

ENTRY_ERRORS = {
    403: {"description": "Entry belongs to another user", "model": ErrorResponse},
    404: {"description": "No entry with this id", "model": ErrorResponse},
}


@router.get("", response_model=List[JournalEntryResponse], summary="List my entries")
async def list_journal_entries(
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> List[JournalEntry]:
    return await store.get_journal_entries_by_user_id(user.id)


@router.post(
    "",
    response_model=JournalEntryResponse,
    status_code=201,
    responses={400: {"description": "Invalid data", "model": ErrorResponse}},
    summary="Create an entry",
)
async def create_journal_entry(
    body: Any = Body(default=None),
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
) -> JournalEntry:
    fields = validate_journal_create(body)
    entry = await store.create_journal_entry(NewJournalEntry(user_id=user.id, **fields))
    logger.info("User %d created journal entry %d", user.id, entry.id)
    return entry


@router.get(
    "/{entry_id}",
    response_model=JournalEntryResponse,
    responses=ENTRY_ERRORS,
    summary="Read one entry",
)
async def get_journal_entry(
    entry: JournalEntry = Depends(get_owned_journal_entry),
) -> JournalEntry:
    return entry


@router.patch(
    "/{entry_id}",
    response_model=JournalEntryResponse,
    responses={400: {"description": "Invalid data", "model": ErrorResponse}, **ENTRY_ERRORS},
    summary="Change title, content or mood",
)
async def update_journal_entry(
    body: Any = Body(default=None),
    entry: JournalEntry = Depends(get_owned_journal_entry),
    store: EntityStore = Depends(get_store),
) -> JournalEntry:
    fields = validate_journal_patch(body)
    return await store.update_journal_entry(entry.id, fields)


@router.delete(
    "/{entry_id}",
    status_code=204,
    response_class=Response,
    responses=ENTRY_ERRORS,
    summary="Delete an entry",
)
async def delete_journal_entry(
    entry: JournalEntry = Depends(get_owned_journal_entry),
    store: EntityStore = Depends(get_store),
) -> Response:
    await store.delete_journal_entry(entry.id)
    logger.info("User %d deleted journal entry %d", entry.user_id, entry.id)
    return Response(status_code=204)
