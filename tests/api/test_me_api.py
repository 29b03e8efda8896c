"""Profile aggregate, profile updates and achievements."""

from __future__ import annotations

import pytest

from tests.api.helpers import signup


@pytest.mark.asyncio
class TestMe:
    async def test_new_learner(self, client, content):
        headers = await signup(client)
        me = (await client.get("/api/me", headers=headers)).json()

        assert me["user"]["email"] == "learner@example.com"
        assert me["total_xp"] == 0
        assert me["today_xp"] == 0
        assert me["completed_lessons"] == 0
        assert me["achievements"] == []
        assert me["progress"] == []
        assert me["streak"]["effective_current"] == 0
        assert me["next_lesson"]["lesson"]["id"] == content.lesson(0, 0).id
        assert me["next_lesson"]["path"]["id"] == content.path.id

    async def test_after_activity(self, client, content):
        headers = await signup(client)
        lesson = content.lesson(0, 0)
        exercise = content.exercises[lesson.id][1]  # true_false, correct=True

        await client.post(
            "/api/attempts",
            json={"exerciseId": exercise.id, "answer": {"selected": True}},
            headers=headers,
        )
        await client.post(f"/api/lessons/{lesson.id}/complete", headers=headers)

        me = (await client.get("/api/me", headers=headers)).json()
        assert me["total_xp"] == 7
        assert me["today_xp"] == 7
        assert me["profile"]["total_xp"] == 7
        assert me["completed_lessons"] == 1
        assert me["today_lessons"] == 1
        assert me["streak"]["current"] == 1
        assert me["streak"]["effective_current"] == 1
        assert [a["key"] for a in me["achievements"]] == ["first_lesson"]
        assert me["next_lesson"]["lesson"]["id"] == content.lesson(0, 1).id
        assert [p["lesson_id"] for p in me["progress"]] == [lesson.id]

    async def test_update_profile(self, client):
        headers = await signup(client)
        resp = await client.put(
            "/api/me/profile",
            json={"daily_goal_minutes": 25, "focus_area": "saving"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json() == {"daily_goal_minutes": 25, "focus_area": "saving", "total_xp": 0}

    async def test_partial_update_keeps_other_fields(self, client):
        headers = await signup(client)
        await client.put("/api/me/profile", json={"focus_area": "debt"}, headers=headers)
        resp = await client.put("/api/me/profile", json={"daily_goal_minutes": 15}, headers=headers)
        assert resp.json()["focus_area"] == "debt"

    @pytest.mark.parametrize("minutes", [0, 241])
    async def test_daily_goal_bounds(self, client, minutes):
        headers = await signup(client)
        resp = await client.put("/api/me/profile", json={"daily_goal_minutes": minutes}, headers=headers)
        assert resp.status_code == 400


@pytest.mark.asyncio
async def test_achievement_catalog(client):
    resp = await client.get("/api/achievements")
    assert resp.status_code == 200
    keys = {a["key"] for a in resp.json()}
    assert keys == {"first_lesson", "streak_3", "streak_7", "xp_100", "first_project"}
