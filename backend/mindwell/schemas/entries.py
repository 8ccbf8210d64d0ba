"""
MindWell Backend — Journal & Mood Entry Schemas
===============================================

What:  Response shapes for journal entries and mood check-ins.
Who:   Returned by the /api/journal-entries and /api/mood routes.

Request bodies are NOT modeled here: they are checked by the explicit
validators in `mindwell.validation`, which report every failure as a 400
"Invalid data" response.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from mindwell.schemas.common import CamelModel


class JournalEntryResponse(CamelModel):
    id: int
    user_id: int
    title: str
    content: str
    mood: str = Field(description="One of happy, calm, neutral, sad, stressed")
    created_at: datetime = Field(description="Creation timestamp (UTC ISO 8601)")


class MoodEntryResponse(CamelModel):
    id: int
    user_id: int
    mood: str = Field(description="One of happy, calm, neutral, sad, stressed")
    note: Optional[str] = None
    created_at: datetime = Field(description="Creation timestamp (UTC ISO 8601)")
