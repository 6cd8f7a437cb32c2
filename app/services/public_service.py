"""
Public service: read-only views of published blogs.

Design notes
------------
- Listings (feed pages, popular ranking) are identical for every caller,
  so they go through the cache-aside layer in ``app.cache``.  Every write
  that can change them calls ``cache.mark_public_stale(db)``; ``get_db``
  drops the cached listings only after that transaction commits.
- Slug detail carries ``likedByUser`` for the current viewer and is never
  cached.
- Listing items carry a plain-text ``summary``; full content is only
  returned by the slug detail.
"""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.cache import cache
from app.config import settings
from app.exceptions import NotFoundError
from app.models import Blog, Comment, Like
from app.services.queries import BLOG_NOT_FOUND, blogs_with_counts
from app.services.serializers import (
    author_to_dict,
    comment_item_to_dict,
    feed_item_to_dict,
    isoformat,
    page_meta,
)
from app.text import summarize

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _published_blog_by_slug(db: AsyncSession, slug: str) -> tuple[Blog, int, int]:
    query, _, _ = blogs_with_counts()
    q = query.where(Blog.slug == slug, Blog.is_published.is_(True))
    row = (await db.execute(q)).one_or_none()
    if row is None:
        raise NotFoundError(BLOG_NOT_FOUND)
    blog, likes_count, comments_count = row
    return blog, likes_count, comments_count


async def _liked_by(db: AsyncSession, viewer_id: int | None, blog_id: int) -> bool:
    if viewer_id is None:
        return False
    return await db.get(Like, (viewer_id, blog_id)) is not None


def _recent_comments_query(blog_id: int):
    return (
        select(Comment)
        .where(Comment.blog_id == blog_id)
        .options(joinedload(Comment.user))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )


def _blog_detail_to_dict(
    blog: Blog,
    likes_count: int,
    comments_count: int,
    liked_by_user: bool,
    comments: list[Comment],
) -> dict:
    return {
        "id": blog.id,
        "title": blog.title,
        "slug": blog.slug,
        "content": blog.content,
        "summary": summarize(blog.content),
        "createdAt": isoformat(blog.created_at),
        "updatedAt": isoformat(blog.updated_at),
        "author": author_to_dict(blog.author),
        "likesCount": likes_count,
        "commentsCount": comments_count,
        "likedByUser": liked_by_user,
        "comments": [comment_item_to_dict(c) for c in comments],
    }


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def get_feed(db: AsyncSession, page: int = 1, limit: int = 10) -> dict:
    """
    Return one page of published blogs, newest first.

    Two SQL statements are issued on a cache miss: a COUNT of published
    blogs and the page itself with counts and the author joined.
    """
    cache_key = cache.feed_key(page, limit)
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    count_q = select(func.count()).select_from(Blog).where(Blog.is_published.is_(True))
    total: int = (await db.execute(count_q)).scalar_one()

    query, _, _ = blogs_with_counts()
    q = (
        query.where(Blog.is_published.is_(True))
        .order_by(Blog.created_at.desc(), Blog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    rows = (await db.execute(q)).all()

    response = {
        "data": [feed_item_to_dict(blog, likes, comments) for blog, likes, comments in rows],
        "meta": page_meta(total, page, limit, navigation=True),
    }
    await cache.set(cache_key, response, ttl=settings.CACHE_TTL_FEED)
    return response


async def get_popular(db: AsyncSession, limit: int = 5) -> list[dict]:
    """
    Published blogs ranked by likes, then comments, then recency.

    *limit* is clamped to ``settings.POPULAR_MAX_LIMIT`` whatever the
    caller asks for.
    """
    limit = max(1, min(limit, settings.POPULAR_MAX_LIMIT))
    cache_key = cache.popular_key(limit)
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    query, likes_col, comments_col = blogs_with_counts()
    q = (
        query.where(Blog.is_published.is_(True))
        .order_by(
            likes_col.desc(),
            comments_col.desc(),
            Blog.created_at.desc(),
            Blog.id.desc(),
        )
        .limit(limit)
    )
    rows = (await db.execute(q)).all()

    items = [feed_item_to_dict(blog, likes, comments) for blog, likes, comments in rows]
    await cache.set(cache_key, items, ttl=settings.CACHE_TTL_POPULAR)
    return items


async def get_blog_by_slug(db: AsyncSession, slug: str, viewer_id: int | None = None) -> dict:
    """Published blog detail with its most recent comments inline."""
    blog, likes_count, comments_count = await _published_blog_by_slug(db, slug)

    q = _recent_comments_query(blog.id).limit(settings.RECENT_ITEMS_LIMIT)
    comments = (await db.execute(q)).scalars().all()

    return _blog_detail_to_dict(
        blog,
        likes_count,
        comments_count,
        await _liked_by(db, viewer_id, blog.id),
        comments,
    )


async def get_blog_by_slug_with_comments(
    db: AsyncSession,
    slug: str,
    page: int = 1,
    limit: int = 10,
    viewer_id: int | None = None,
) -> dict:
    """Published blog detail with one page of comments and ``commentsMeta``."""
    blog, likes_count, comments_count = await _published_blog_by_slug(db, slug)

    q = _recent_comments_query(blog.id).offset((page - 1) * limit).limit(limit)
    comments = (await db.execute(q)).scalars().all()

    data = _blog_detail_to_dict(
        blog,
        likes_count,
        comments_count,
        await _liked_by(db, viewer_id, blog.id),
        comments,
    )
    data["commentsMeta"] = page_meta(comments_count, page, limit, navigation=True)
    return data
