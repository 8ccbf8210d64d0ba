"""MindWell Backend — Mindfulness Session & Reflection Prompt Tests"""

import pytest

from mindwell.repositories.records import MindfulnessSession, User
from mindwell.services.catalog_service import available_to


def user(is_premium: bool) -> User:
    return User(id=1, username="u", password="h", email="u@example.com", is_premium=is_premium)


class TestAvailableTo:

    def test_free_user_sees_only_free_items(self):
        items = [
            MindfulnessSession(id=1, title="Free", duration=5, audio_url="/a.mp3"),
            MindfulnessSession(id=2, title="Paid", duration=5, audio_url="/b.mp3", is_premium=True),
        ]
        assert [i.id for i in available_to(items, user(False))] == [1]
        assert [i.id for i in available_to(items, user(True))] == [1, 2]


class TestCatalogRoutes:

    @pytest.mark.asyncio
    async def test_full_lists_are_public(self, client):
        sessions = await client.get("/api/mindfulness-sessions")
        prompts = await client.get("/api/reflection-prompts")
        assert sessions.status_code == prompts.status_code == 200
        assert len(sessions.json()) == 6
        assert len(prompts.json()) == 7
        assert {"id", "title", "duration", "audioUrl", "isPremium"} <= set(
            sessions.json()[0]
        )

    @pytest.mark.asyncio
    async def test_available_filters_premium_for_free_users(self, client, make_user, store):
        free, free_headers = await make_user("free")
        premium, premium_headers = await make_user("premium")
        await store.update_user_premium_status(premium.id, True)

        free_view = (await client.get(
            "/api/mindfulness-sessions/available", headers=free_headers
        )).json()
        premium_view = (await client.get(
            "/api/mindfulness-sessions/available", headers=premium_headers
        )).json()
        assert len(free_view) == 4
        assert not any(s["isPremium"] for s in free_view)
        assert len(premium_view) == 6

        prompts = (await client.get(
            "/api/reflection-prompts/available", headers=free_headers
        )).json()
        assert len(prompts) == 4

    @pytest.mark.asyncio
    async def test_available_requires_token(self, client):
        assert (await client.get("/api/reflection-prompts/available")).status_code == 401

    @pytest.mark.asyncio
    async def test_single_items(self, client):
        session = await client.get("/api/mindfulness-sessions/1")
        assert session.status_code == 200
        assert session.json()["title"] == "Morning Meditation"
        assert (await client.get("/api/mindfulness-sessions/99")).status_code == 404
        assert (await client.get("/api/reflection-prompts/99")).status_code == 404
        assert (await client.get("/api/reflection-prompts/1")).status_code == 200
