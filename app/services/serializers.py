"""
Serialisation helpers shared by the services.

Responses use the camelCase keys the API has always exposed; datetimes
are ISO-8601 strings in UTC.
"""
import math
from datetime import datetime, timezone

from app.models import Blog, Comment, Like, User
from app.text import summarize


def isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; every stored timestamp is UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def author_to_dict(user: User | None) -> dict | None:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def blog_to_dict(
    blog: Blog,
    likes_count: int | None = None,
    comments_count: int | None = None,
) -> dict:
    """Owner view of a blog; counts are included only when supplied."""
    data = {
        "id": blog.id,
        "title": blog.title,
        "slug": blog.slug,
        "content": blog.content,
        "isPublished": blog.is_published,
        "createdAt": isoformat(blog.created_at),
        "updatedAt": isoformat(blog.updated_at),
        "author": author_to_dict(blog.author),
    }
    if likes_count is not None and comments_count is not None:
        data["likesCount"] = likes_count
        data["commentsCount"] = comments_count
    return data


def feed_item_to_dict(blog: Blog, likes_count: int, comments_count: int) -> dict:
    """Public listing item: summary instead of the full content."""
    return {
        "id": blog.id,
        "title": blog.title,
        "slug": blog.slug,
        "summary": summarize(blog.content),
        "createdAt": isoformat(blog.created_at),
        "author": author_to_dict(blog.author),
        "likesCount": likes_count,
        "commentsCount": comments_count,
    }


def comment_to_dict(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "content": comment.content,
        "createdAt": isoformat(comment.created_at),
        "updatedAt": isoformat(comment.updated_at),
        "blogId": comment.blog_id,
        "user": author_to_dict(comment.user),
    }


def comment_item_to_dict(comment: Comment) -> dict:
    """Compact comment shape embedded in public blog detail."""
    return {
        "id": comment.id,
        "content": comment.content,
        "createdAt": isoformat(comment.created_at),
        "user": author_to_dict(comment.user),
    }


def like_to_dict(like: Like) -> dict:
    return {"user": author_to_dict(like.user), "likedAt": isoformat(like.created_at)}


def page_meta(total: int, page: int, limit: int, navigation: bool = False) -> dict:
    """Pagination metadata; ``navigation`` adds hasNext/hasPrevious."""
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    meta = {"total": total, "page": page, "limit": limit, "totalPages": total_pages}
    if navigation:
        meta["hasNext"] = page < total_pages
        meta["hasPrevious"] = page > 1
    return meta
