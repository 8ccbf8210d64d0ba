"""
MindWell Backend — Insight Schemas
==================================

What:  Response shapes for the dashboard, journal history and mood tracker
       summaries computed by `mindwell.services.insights_service`.
"""

import datetime as dt
from typing import Dict, List, Optional

from pydantic import Field

from mindwell.schemas.common import CamelModel
from mindwell.schemas.entries import JournalEntryResponse


class JournalActivityResponse(CamelModel):
    streak: int = Field(description="Consecutive days, ending today, with at least one entry")
    entries_this_week: int = Field(description="Entries since the most recent Sunday 00:00 UTC")
    total_entries: int


class JournalGroupResponse(CamelModel):
    label: str = Field(description='"Today", "Yesterday" or "<Month> <YYYY>"')
    entries: List[JournalEntryResponse]


class DailyMoodScoreResponse(CamelModel):
    date: str = Field(description='Short weekday name, e.g. "Mon"')
    day: dt.date
    score: float = Field(description="Mean mood score rounded to one decimal; 0 when no data")
    mood: Optional[str] = Field(default=None, description="The day's most recent mood")
    has_data: bool


class MoodSummaryResponse(CamelModel):
    daily_scores: List[DailyMoodScoreResponse]
    distribution: Dict[str, int] = Field(description="Entry count per mood label")
    total_entries: int


class CalendarDayResponse(CamelModel):
    date: dt.date
    is_current_month: bool
    mood: Optional[str] = None
    is_today: bool


class MoodCalendarResponse(CamelModel):
    year: int
    month: int
    weeks: List[List[CalendarDayResponse]]
