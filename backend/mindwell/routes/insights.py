"""
MindWell Backend — Insight Routes
=================================

What:  Read-only summaries over the requester's journal and mood entries.
How:   Loads the requester's entries once, then hands them to the pure
       helpers in `insights_service` with today's UTC date from the app clock.
"""

from datetime import datetime
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, Query

from mindwell.dependencies import get_clock, get_current_user, get_store
from mindwell.repositories.base import EntityStore
from mindwell.repositories.records import User
from mindwell.schemas.insights import (
    JournalActivityResponse,
    JournalGroupResponse,
    MoodCalendarResponse,
    MoodSummaryResponse,
)
from mindwell.services import insights_service

router = APIRouter(prefix="/api/insights", tags=["Insights"])


@router.get("/journal-activity", response_model=JournalActivityResponse)
async def journal_activity(
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> JournalActivityResponse:
    entries = await store.get_journal_entries_by_user_id(user.id)
    today = clock().date()
    return JournalActivityResponse(
        streak=insights_service.journal_streak(entries, today),
        entries_this_week=insights_service.entries_this_week(entries, today),
        total_entries=len(entries),
    )


@router.get("/journal-groups", response_model=List[JournalGroupResponse])
async def journal_groups(
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    entries = await store.get_journal_entries_by_user_id(user.id)
    return insights_service.group_entries_by_date(entries, clock().date())


@router.get("/mood-summary", response_model=MoodSummaryResponse)
async def mood_summary(
    days: int = Query(default=7, ge=1, le=90),
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    entries = await store.get_mood_entries_by_user_id(user.id)
    return {
        "daily_scores": insights_service.daily_mood_scores(entries, clock().date(), days),
        "distribution": insights_service.mood_distribution(entries),
        "total_entries": len(entries),
    }


@router.get("/mood-calendar", response_model=MoodCalendarResponse)
async def mood_calendar(
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    today = clock().date()
    year = year or today.year
    month = month or today.month
    entries = await store.get_mood_entries_by_user_id(user.id)
    return {
        "year": year,
        "month": month,
        "weeks": insights_service.mood_calendar(entries, year, month, today),
    }
