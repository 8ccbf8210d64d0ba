"""
MindWell Backend — Journal & Mood Insight Tests
===============================================

Reference dates: today is Wednesday 2026-10-14; that week began on
Sunday 2026-10-11. October 2026 starts on a Thursday.
"""

from datetime import date, datetime, timezone
from itertools import count

import pytest

from mindwell.repositories.records import JournalEntry, MoodEntry, NewMoodEntry
from mindwell.services.insights_service import (
    daily_mood_scores,
    entries_this_week,
    group_entries_by_date,
    group_label,
    journal_streak,
    mood_calendar,
    mood_distribution,
    mood_score,
)

TODAY = date(2026, 10, 14)
_ids = count(1)


def at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


def journal(day: date, hour: int = 12) -> JournalEntry:
    return JournalEntry(
        id=next(_ids), user_id=1, title="t", content="c", mood="calm", created_at=at(day, hour)
    )


def mood(day: date, label: str, hour: int = 12) -> MoodEntry:
    return MoodEntry(id=next(_ids), user_id=1, mood=label, created_at=at(day, hour))


class TestJournalActivity:

    def test_streak_counts_back_from_today(self):
        entries = [
            journal(date(2026, 10, 14)),
            journal(date(2026, 10, 14), hour=8),
            journal(date(2026, 10, 13)),
            journal(date(2026, 10, 12)),
            journal(date(2026, 10, 10)),
        ]
        assert journal_streak(entries, TODAY) == 3

    def test_streak_is_zero_without_entry_today(self):
        assert journal_streak([journal(date(2026, 10, 13))], TODAY) == 0

    def test_week_starts_on_sunday(self):
        entries = [
            journal(date(2026, 10, 11), hour=0),
            journal(date(2026, 10, 14)),
            journal(date(2026, 10, 10), hour=23),
        ]
        assert entries_this_week(entries, TODAY) == 2

    def test_group_labels(self):
        assert group_label(TODAY, TODAY) == "Today"
        assert group_label(date(2026, 10, 13), TODAY) == "Yesterday"
        assert group_label(date(2026, 10, 1), TODAY) == "October 2026"
        assert group_label(date(2025, 12, 31), TODAY) == "December 2025"

    def test_groups_keep_listing_order(self):
        entries = [
            journal(date(2026, 10, 14)),
            journal(date(2026, 10, 13)),
            journal(date(2026, 10, 2)),
            journal(date(2026, 10, 1)),
            journal(date(2026, 9, 30)),
        ]
        groups = group_entries_by_date(entries, TODAY)
        assert [g.label for g in groups] == ["Today", "Yesterday", "October 2026", "September 2026"]
        assert len(groups[2].entries) == 2


class TestMoodSummary:

    def test_scores(self):
        assert mood_score("happy") == 5
        assert mood_score("stressed") == 1

    def test_daily_scores_cover_last_seven_days(self):
        entries = [
            mood(date(2026, 10, 14), "happy", hour=9),
            mood(date(2026, 10, 14), "sad", hour=18),
            mood(date(2026, 10, 8), "calm"),
            mood(date(2026, 10, 7), "stressed"),
        ]
        series = daily_mood_scores(entries, TODAY)
        assert len(series) == 7
        assert series[0].day == date(2026, 10, 8)
        assert series[0].date == "Thu"
        assert series[0].score == 4
        assert series[-1].date == "Wed"
        assert series[-1].score == 3.5
        assert series[-1].mood == "sad"
        assert series[3].has_data is False
        assert series[3].score == 0
        assert series[3].mood is None

    def test_score_rounds_to_one_decimal(self):
        entries = [mood(TODAY, "happy"), mood(TODAY, "happy"), mood(TODAY, "calm")]
        assert daily_mood_scores(entries, TODAY, days=1)[0].score == 4.7

    def test_distribution_lists_every_mood(self):
        entries = [mood(TODAY, "happy"), mood(TODAY, "happy"), mood(TODAY, "sad")]
        assert mood_distribution(entries) == {
            "happy": 2, "calm": 0, "neutral": 0, "sad": 1, "stressed": 0,
        }


class TestMoodCalendar:

    def test_october_2026_layout(self):
        weeks = mood_calendar([], 2026, 10, TODAY)
        assert len(weeks) == 5
        assert all(len(week) == 7 for week in weeks)
        assert weeks[0][0].date == date(2026, 9, 27)
        assert weeks[0][0].is_current_month is False
        assert weeks[0][4].date == date(2026, 10, 1)
        assert weeks[-1][-1].date == date(2026, 10, 31)

    def test_marks_today_and_latest_mood(self):
        entries = [mood(TODAY, "calm", hour=7), mood(TODAY, "stressed", hour=20)]
        days = [day for week in mood_calendar(entries, 2026, 10, TODAY) for day in week]
        today = next(d for d in days if d.date == TODAY)
        assert today.is_today is True
        assert today.mood == "stressed"
        assert sum(d.is_today for d in days) == 1

    def test_same_day_in_other_year_is_not_today(self):
        days = [day for week in mood_calendar([], 2025, 10, TODAY) for day in week]
        assert not any(d.is_today for d in days)


class TestInsightRoutes:

    @pytest.mark.asyncio
    async def test_journal_activity_and_groups(self, client, make_user):
        _, headers = await make_user("alice")
        for title in ("one", "two"):
            await client.post(
                "/api/journal-entries",
                json={"title": title, "content": "c", "mood": "calm"},
                headers=headers,
            )

        activity = (await client.get("/api/insights/journal-activity", headers=headers)).json()
        assert activity == {"streak": 1, "entriesThisWeek": 2, "totalEntries": 2}

        groups = (await client.get("/api/insights/journal-groups", headers=headers)).json()
        assert [g["label"] for g in groups] == ["Today"]
        assert [e["title"] for e in groups[0]["entries"]] == ["two", "one"]

    @pytest.mark.asyncio
    async def test_mood_summary_and_calendar(self, client, make_user, store):
        alice, headers = await make_user("alice")
        await store.create_mood_entry(NewMoodEntry(user_id=alice.id, mood="happy"))

        summary = (await client.get(
            "/api/insights/mood-summary", params={"days": 3}, headers=headers
        )).json()
        assert len(summary["dailyScores"]) == 3
        assert summary["dailyScores"][-1] == {
            "date": "Wed", "day": "2026-10-14", "score": 5.0, "mood": "happy", "hasData": True,
        }
        assert summary["distribution"]["happy"] == 1
        assert summary["totalEntries"] == 1

        calendar = (await client.get("/api/insights/mood-calendar", headers=headers)).json()
        assert (calendar["year"], calendar["month"]) == (2026, 10)
        today = [d for week in calendar["weeks"] for d in week if d["isToday"]]
        assert today == [
            {"date": "2026-10-14", "isCurrentMonth": True, "mood": "happy", "isToday": True}
        ]

    @pytest.mark.asyncio
    async def test_query_bounds(self, client, make_user):
        _, headers = await make_user("alice")
        bad_days = await client.get(
            "/api/insights/mood-summary", params={"days": 0}, headers=headers
        )
        bad_month = await client.get(
            "/api/insights/mood-calendar", params={"year": 2026, "month": 13}, headers=headers
        )
        assert bad_days.status_code == bad_month.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        assert (await client.get("/api/insights/mood-summary")).status_code == 401
