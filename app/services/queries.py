"""
Query building blocks shared by the blog, like and public services.

Like/comment counts are correlated scalar subqueries so a listing is a
single SELECT (plus the joined author) regardless of page size.
"""
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.exceptions import NotFoundError
from app.models import Blog, Comment, Like

BLOG_NOT_FOUND = "Blog not found"


def likes_count_column():
    return (
        select(func.count())
        .select_from(Like)
        .where(Like.blog_id == Blog.id)
        .correlate(Blog)
        .scalar_subquery()
        .label("likes_count")
    )


def comments_count_column():
    return (
        select(func.count())
        .select_from(Comment)
        .where(Comment.blog_id == Blog.id)
        .correlate(Blog)
        .scalar_subquery()
        .label("comments_count")
    )


def blogs_with_counts() -> tuple[Select, object, object]:
    """
    Return ``(query, likes_col, comments_col)`` selecting
    ``(Blog, likes_count, comments_count)`` rows with the author joined.

    The count columns are returned so callers can order by them.
    """
    likes_col = likes_count_column()
    comments_col = comments_count_column()
    query = select(Blog, likes_col, comments_col).options(joinedload(Blog.author))
    return query, likes_col, comments_col


async def get_blog_or_404(db: AsyncSession, blog_id: int) -> Blog:
    blog = await db.get(Blog, blog_id)
    if blog is None:
        raise NotFoundError(BLOG_NOT_FOUND)
    return blog


async def count_likes(db: AsyncSession, blog_id: int) -> int:
    q = select(func.count()).select_from(Like).where(Like.blog_id == blog_id)
    return (await db.execute(q)).scalar_one()


async def count_comments(db: AsyncSession, blog_id: int) -> int:
    q = select(func.count()).select_from(Comment).where(Comment.blog_id == blog_id)
    return (await db.execute(q)).scalar_one()
