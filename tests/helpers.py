"""HTTP helpers shared by the endpoint tests."""
from httpx import AsyncClient

API = "/api"
PASSWORD = "secret123"


async def register(client: AsyncClient, name: str) -> dict:
    """Register ``<name>@example.com`` and return the auth response body."""
    resp = await client.post(f"{API}/auth/register", json={
        "email": f"{name}@example.com",
        "password": PASSWORD,
        "name": name.title(),
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


async def auth_headers(client: AsyncClient, name: str) -> dict[str, str]:
    body = await register(client, name)
    return {"Authorization": f"Bearer {body['access_token']}"}


async def create_blog(
    client: AsyncClient,
    headers: dict[str, str],
    title: str = "Hello World",
    content: str = "Some long enough blog content.",
    published: bool = True,
) -> dict:
    resp = await client.post(
        f"{API}/blogs",
        json={"title": title, "content": content, "isPublished": published},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
