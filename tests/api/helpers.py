"""HTTP helpers shared by the API tests."""

from __future__ import annotations

from httpx import AsyncClient

from tests.factories import PASSWORD


async def signup(client: AsyncClient, email: str = "learner@example.com") -> dict[str, str]:
    """Create an account and return bearer auth headers for it."""
    resp = await client.post(
        "/api/auth/signup",
        json={"email": email, "password": PASSWORD, "display_name": "Learner"},
    )
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}
