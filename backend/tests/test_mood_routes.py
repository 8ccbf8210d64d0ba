"""MindWell Backend — Mood Route Tests"""

import pytest


class TestMoodRoutes:

    @pytest.mark.asyncio
    async def test_create_and_list(self, client, make_user):
        alice, headers = await make_user("alice")
        created = await client.post(
            "/api/mood", json={"mood": "happy", "note": "Walk in the park"}, headers=headers
        )
        assert created.status_code == 201
        body = created.json()
        assert body["userId"] == alice.id
        assert body["note"] == "Walk in the park"

        second = await client.post("/api/mood", json={"mood": "calm"}, headers=headers)
        assert second.json()["note"] is None

        listed = (await client.get("/api/mood", headers=headers)).json()
        assert [m["mood"] for m in listed] == ["calm", "happy"]

    @pytest.mark.asyncio
    async def test_unknown_mood_rejected_without_record(self, client, make_user, store):
        alice, headers = await make_user("alice")
        response = await client.post("/api/mood", json={"mood": "giddy"}, headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid data"
        assert await store.get_mood_entries_by_user_id(alice.id) == []

    @pytest.mark.asyncio
    async def test_listing_is_private(self, client, make_user):
        _, alice_headers = await make_user("alice")
        _, bob_headers = await make_user("bob")
        await client.post("/api/mood", json={"mood": "sad"}, headers=alice_headers)
        assert (await client.get("/api/mood", headers=bob_headers)).json() == []

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        assert (await client.post("/api/mood", json={"mood": "calm"})).status_code == 401
