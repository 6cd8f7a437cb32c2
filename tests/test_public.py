"""
Public endpoint tests: feed pagination, popular ranking and slug detail.
None of these routes require a token.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import cache
from helpers import API, auth_headers, create_blog


# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_feed_second_page(async_client: AsyncClient):
    alice = await auth_headers(async_client, "alice")
    for i in range(15):
        await create_blog(async_client, alice, title=f"Post number {i}")
    await create_blog(async_client, alice, title="Hidden draft", published=False)

    resp = await async_client.get(f"{API}/public/feed?page=2&limit=10")
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["data"]) == 5
    assert body["meta"] == {
        "total": 15,
        "page": 2,
        "limit": 10,
        "totalPages": 2,
        "hasNext": False,
        "hasPrevious": True,
    }
    # Oldest five, newest first.
    assert [b["title"] for b in body["data"]] == [f"Post number {i}" for i in range(4, -1, -1)]


@pytest.mark.asyncio
async def test_feed_items_carry_summary_not_content(async_client: AsyncClient):
    alice = await auth_headers(async_client, "alice")
    content = "## Heading\n\n" + "word " * 100
    await create_blog(async_client, alice, content=content)

    item = (await async_client.get(f"{API}/public/feed")).json()["data"][0]
    assert "content" not in item
    assert item["summary"].startswith("Heading word")
    assert item["summary"].endswith("...")
    assert len(item["summary"]) <= 150
    assert item["author"]["name"] == "Alice"
    assert item["likesCount"] == 0
    assert item["commentsCount"] == 0


@pytest.mark.asyncio
async def test_feed_limit_above_50_rejected(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/public/feed?limit=51")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_feed_empty(async_client: AsyncClient):
    body = (await async_client.get(f"{API}/public/feed")).json()
    assert body["data"] == []
    assert body["meta"]["totalPages"] == 0
    assert body["meta"]["hasNext"] is False
    assert body["meta"]["hasPrevious"] is False


# ---------------------------------------------------------------------------
# Popular
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_popular_ranked_by_likes_then_comments(async_client: AsyncClient):
    alice = await auth_headers(async_client, "alice")
    bob = await auth_headers(async_client, "bob")
    carol = await auth_headers(async_client, "carol")

    quiet = await create_blog(async_client, alice, title="Quiet post")
    discussed = await create_blog(async_client, alice, title="Discussed post")
    loved = await create_blog(async_client, alice, title="Loved post")
    await create_blog(async_client, alice, title="Draft post", published=False)

    for headers in (bob, carol):
        await async_client.post(f"{API}/blogs/{loved['id']}/likes", headers=headers)
    await async_client.post(f"{API}/blogs/{discussed['id']}/likes", headers=bob)
    await async_client.post(f"{API}/blogs/{quiet['id']}/likes", headers=bob)
    await async_client.post(
        f"{API}/blogs/{discussed['id']}/comments", json={"content": "Hmm"}, headers=carol
    )

    resp = await async_client.get(f"{API}/public/popular")
    assert resp.status_code == 200
    assert [b["title"] for b in resp.json()] == ["Loved post", "Discussed post", "Quiet post"]
    assert resp.json()[0]["likesCount"] == 2


@pytest.mark.asyncio
async def test_popular_limit_is_capped_at_20(async_client: AsyncClient):
    alice = await auth_headers(async_client, "alice")
    for i in range(22):
        await create_blog(async_client, alice, title=f"Popular candidate {i}")

    assert len((await async_client.get(f"{API}/public/popular")).json()) == 5
    assert len((await async_client.get(f"{API}/public/popular?limit=100")).json()) == 20


# ---------------------------------------------------------------------------
# Blog by slug
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_blog_by_slug_anonymous(async_client: AsyncClient):
    alice = await auth_headers(async_client, "alice")
    blog = await create_blog(async_client, alice, title="Readable Post")
    await async_client.post(
        f"{API}/blogs/{blog['id']}/comments", json={"content": "First!"}, headers=alice
    )

    resp = await async_client.get(f"{API}/public/blogs/readable-post")
    assert resp.status_code == 200
    body = resp.json()
    assert body["content"] == blog["content"]
    assert body["likedByUser"] is False
    assert body["commentsCount"] == 1
    assert body["comments"][0]["content"] == "First!"
    assert body["comments"][0]["user"]["name"] == "Alice"
    assert "commentsMeta" not in body


@pytest.mark.asyncio
async def test_blog_by_slug_liked_by_viewer(async_client: AsyncClient):
    alice = await auth_headers(async_client, "alice")
    bob = await auth_headers(async_client, "bob")
    blog = await create_blog(async_client, alice, title="Likeable")
    await async_client.post(f"{API}/blogs/{blog['id']}/likes", headers=bob)

    as_bob = await async_client.get(f"{API}/public/blogs/likeable", headers=bob)
    as_alice = await async_client.get(f"{API}/public/blogs/likeable", headers=alice)
    assert as_bob.json()["likedByUser"] is True
    assert as_alice.json()["likedByUser"] is False
    assert as_bob.json()["likesCount"] == 1


@pytest.mark.asyncio
async def test_blog_by_slug_bad_token_treated_as_anonymous(async_client: AsyncClient):
    alice = await auth_headers(async_client, "alice")
    await create_blog(async_client, alice, title="Open Post")

    resp = await async_client.get(
        f"{API}/public/blogs/open-post", headers={"Authorization": "Bearer garbage"}
    )
    assert resp.status_code == 200
    assert resp.json()["likedByUser"] is False


@pytest.mark.asyncio
async def test_blog_by_slug_with_paginated_comments(async_client: AsyncClient):
    alice = await auth_headers(async_client, "alice")
    blog = await create_blog(async_client, alice, title="Chatty")
    for i in range(12):
        await async_client.post(
            f"{API}/blogs/{blog['id']}/comments", json={"content": f"c{i}"}, headers=alice
        )

    default = (await async_client.get(f"{API}/public/blogs/chatty")).json()
    assert len(default["comments"]) == 10

    resp = await async_client.get(f"{API}/public/blogs/chatty?comments=true&page=2&limit=5")
    body = resp.json()
    assert [c["content"] for c in body["comments"]] == ["c6", "c5", "c4", "c3", "c2"]
    assert body["commentsMeta"] == {
        "total": 12,
        "page": 2,
        "limit": 5,
        "totalPages": 3,
        "hasNext": True,
        "hasPrevious": True,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("flag", ["1", "yes", "True", "on"])
async def test_comments_flag_only_accepts_literal_true(async_client: AsyncClient, flag: str):
    alice = await auth_headers(async_client, "alice")
    blog = await create_blog(async_client, alice, title="Chatty")
    for i in range(12):
        await async_client.post(
            f"{API}/blogs/{blog['id']}/comments", json={"content": f"c{i}"}, headers=alice
        )

    resp = await async_client.get(f"{API}/public/blogs/chatty?comments={flag}&page=2&limit=5")
    assert resp.status_code == 200
    body = resp.json()
    assert "commentsMeta" not in body
    assert len(body["comments"]) == 10
    assert body["comments"][0]["content"] == "c11"


@pytest.mark.asyncio
async def test_unpublished_blog_by_slug_is_404(async_client: AsyncClient):
    alice = await auth_headers(async_client, "alice")
    await create_blog(async_client, alice, title="Secret Draft", published=False)

    resp = await async_client.get(f"{API}/public/blogs/secret-draft", headers=alice)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_unknown_slug_is_404(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/public/blogs/nope")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Blog not found"


# ---------------------------------------------------------------------------
# Cache invalidation
# ---------------------------------------------------------------------------

@pytest.fixture
def write_events(monkeypatch):
    """Record commits and public-listing invalidations in the order they happen."""
    events: list[str] = []
    real_commit = AsyncSession.commit

    async def commit(self):
        await real_commit(self)
        events.append("commit")

    async def invalidate_public():
        events.append("invalidate")

    monkeypatch.setattr(AsyncSession, "commit", commit)
    monkeypatch.setattr(cache, "invalidate_public", invalidate_public)
    return events


@pytest.mark.asyncio
async def test_listings_invalidated_after_commit(async_client: AsyncClient, write_events):
    alice = await auth_headers(async_client, "alice")
    blog = await create_blog(async_client, alice)
    write_events.clear()

    resp = await async_client.post(f"{API}/blogs/{blog['id']}/likes", headers=alice)
    assert resp.status_code == 201
    assert write_events == ["commit", "invalidate"]


@pytest.mark.asyncio
async def test_failed_write_does_not_invalidate(async_client: AsyncClient, write_events):
    alice = await auth_headers(async_client, "alice")
    blog = await create_blog(async_client, alice)
    await async_client.post(f"{API}/blogs/{blog['id']}/likes", headers=alice)
    write_events.clear()

    resp = await async_client.post(f"{API}/blogs/{blog['id']}/likes", headers=alice)
    assert resp.status_code == 409
    assert "invalidate" not in write_events


@pytest.mark.asyncio
async def test_reads_do_not_invalidate(async_client: AsyncClient, write_events):
    alice = await auth_headers(async_client, "alice")
    await create_blog(async_client, alice, title="Quiet")
    write_events.clear()

    assert (await async_client.get(f"{API}/public/feed")).status_code == 200
    assert (await async_client.get(f"{API}/public/blogs/quiet")).status_code == 200
    assert "commit" in write_events
    assert "invalidate" not in write_events
