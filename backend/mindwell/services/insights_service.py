"""
MindWell Backend — Journal & Mood Insights
==========================================

What:  Date-bucketing helpers behind the dashboard, journal history and mood
       tracker views.
How:   Pure functions over lists of entries and an explicit `today`, so they
       are tested without a clock. All dates are UTC calendar dates of
       `created_at`; weeks start on Sunday.
Who:   The /api/insights routes.
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Union

from mindwell.repositories.records import MOOD_LABELS, JournalEntry, MoodEntry

Entry = Union[JournalEntry, MoodEntry]

MOOD_SCORES: Dict[str, int] = {
    "happy": 5,
    "calm": 4,
    "neutral": 3,
    "sad": 2,
    "stressed": 1,
}
DEFAULT_MOOD_SCORE = 3


@dataclass(frozen=True)
class JournalGroup:
    label: str
    entries: List[JournalEntry]


@dataclass(frozen=True)
class DailyMoodScore:
    date: str
    day: date
    score: float
    mood: Optional[str]
    has_data: bool


@dataclass(frozen=True)
class CalendarDay:
    date: date
    is_current_month: bool
    mood: Optional[str]
    is_today: bool


def _day_of(entry: Entry) -> date:
    return entry.created_at.date()


def _week_start(day: date) -> date:
    # date.weekday(): Monday=0 ... Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _latest(entries: Sequence[Entry]) -> Optional[Entry]:
    if not entries:
        return None
    return max(entries, key=lambda e: (e.created_at, e.id))


def _by_day(entries: Iterable[Entry]) -> Dict[date, List[Entry]]:
    buckets: Dict[date, List[Entry]] = {}
    for entry in entries:
        buckets.setdefault(_day_of(entry), []).append(entry)
    return buckets


# ── Journal ───────────────────────────────────────────────────────────────

def journal_streak(entries: Iterable[JournalEntry], today: date) -> int:
    """Consecutive days with at least one entry, counting back from today."""
    days = {_day_of(e) for e in entries}
    streak = 0
    current = today
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def entries_this_week(entries: Iterable[JournalEntry], today: date) -> int:
    start = _week_start(today)
    return sum(1 for e in entries if _day_of(e) >= start)


def group_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{calendar.month_name[day.month]} {day.year}"


def group_entries_by_date(entries: Iterable[JournalEntry], today: date) -> List[JournalGroup]:
    """
    Group entries under "Today", "Yesterday" or "<Month> <YYYY>".

    Groups appear in the order their first entry appears; with the newest-first
    listing from the store that is newest group first.
    """
    groups: Dict[str, List[JournalEntry]] = {}
    for entry in entries:
        groups.setdefault(group_label(_day_of(entry), today), []).append(entry)
    return [JournalGroup(label=label, entries=items) for label, items in groups.items()]


# ── Mood ──────────────────────────────────────────────────────────────────

def mood_score(mood: str) -> int:
    return MOOD_SCORES.get(mood, DEFAULT_MOOD_SCORE)


def daily_mood_scores(
    entries: Iterable[MoodEntry], today: date, days: int = 7
) -> List[DailyMoodScore]:
    """
    One point per day for the `days` days ending today, oldest first.

    score is the mean of the day's mood scores rounded to one decimal (0 for
    days without entries); mood is the day's most recent entry.
    """
    buckets = _by_day(entries)
    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_entries = buckets.get(day, [])
        # Most recent check-in wins, not the first one of the day
        latest = _latest(day_entries)
        score = (
            round(sum(mood_score(e.mood) for e in day_entries) / len(day_entries), 1)
            if day_entries else 0
        )
        series.append(DailyMoodScore(
            date=calendar.day_abbr[day.weekday()],
            day=day,
            score=score,
            mood=latest.mood if latest else None,
            has_data=bool(day_entries),
        ))
    return series


def mood_distribution(entries: Iterable[MoodEntry]) -> Dict[str, int]:
    counts = {label: 0 for label in MOOD_LABELS}
    for entry in entries:
        if entry.mood in counts:
            counts[entry.mood] += 1
    return counts


def mood_calendar(
    entries: Iterable[MoodEntry], year: int, month: int, today: date
) -> List[List[CalendarDay]]:
    """
    Sunday-first weeks covering `month`, padded with days of the adjacent
    months so every week has seven days.
    """
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    start = _week_start(first)
    end = _week_start(last) + timedelta(days=6)

    buckets = _by_day(entries)
    weeks: List[List[CalendarDay]] = []
    day = start
    while day <= end:
        if not weeks or len(weeks[-1]) == 7:
            weeks.append([])
        # Same rule as daily_mood_scores: most recent check-in wins
        latest = _latest(buckets.get(day, []))
        weeks[-1].append(CalendarDay(
            date=day,
            is_current_month=day.month == month,
            mood=latest.mood if latest else None,
            is_today=day == today,
        ))
        day += timedelta(days=1)
    return weeks
