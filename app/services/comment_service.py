"""
Comment service: comments on published blogs.

Authors may edit or delete their own comments; the owner of a blog may
clear every comment on it regardless of who wrote them.  Writes drop the
cached public listings because they carry comment counts.
"""
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.cache import cache
from app.exceptions import NotFoundError
from app.models import Blog, Comment
from app.schemas import CommentCreate, CommentUpdate
from app.services.ownership import assert_owner
from app.services.queries import BLOG_NOT_FOUND, get_blog_or_404
from app.services.serializers import comment_to_dict, page_meta

COMMENT_NOT_FOUND = "Comment not found"


async def _load_comment(db: AsyncSession, comment_id: int) -> Comment:
    q = (
        select(Comment)
        .where(Comment.id == comment_id)
        .options(joinedload(Comment.user))
        .execution_options(populate_existing=True)
    )
    comment = (await db.execute(q)).scalar_one_or_none()
    if comment is None:
        raise NotFoundError(COMMENT_NOT_FOUND)
    return comment


async def create_comment(
    db: AsyncSession,
    user_id: int,
    blog_id: int,
    data: CommentCreate,
) -> dict:
    """
    Add a comment to *blog_id*.

    Unpublished blogs are reported as Not-Found to everyone, including
    their owner.
    """
    blog = await get_blog_or_404(db, blog_id)
    if not blog.is_published:
        raise NotFoundError("Cannot comment on unpublished blog")

    comment = Comment(content=data.content, user_id=user_id, blog_id=blog_id)
    db.add(comment)
    await db.flush()

    cache.mark_public_stale(db)
    return comment_to_dict(await _load_comment(db, comment.id))


async def list_comments(db: AsyncSession, blog_id: int, page: int = 1, limit: int = 10) -> dict:
    """Return one page of comments on *blog_id*, newest first, with metadata."""
    await get_blog_or_404(db, blog_id)

    total_q = select(func.count()).select_from(Comment).where(Comment.blog_id == blog_id)
    total: int = (await db.execute(total_q)).scalar_one()

    q = (
        select(Comment)
        .where(Comment.blog_id == blog_id)
        .options(joinedload(Comment.user))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    comments = (await db.execute(q)).scalars().all()

    return {
        "data": [comment_to_dict(c) for c in comments],
        "meta": page_meta(total, page, limit),
    }


async def get_comment(db: AsyncSession, comment_id: int) -> dict:
    return comment_to_dict(await _load_comment(db, comment_id))


async def update_comment(
    db: AsyncSession,
    comment_id: int,
    user_id: int,
    data: CommentUpdate,
) -> dict:
    """Replace the content of a comment; only its author may do so."""
    comment = await _load_comment(db, comment_id)
    assert_owner(user_id, comment.user_id, "You can only edit your own comments")

    comment.content = data.content
    await db.flush()
    return comment_to_dict(comment)


async def delete_comment(db: AsyncSession, comment_id: int, user_id: int) -> None:
    comment = await _load_comment(db, comment_id)
    assert_owner(user_id, comment.user_id, "You can only delete your own comments")

    await db.delete(comment)
    await db.flush()
    cache.mark_public_stale(db)


async def delete_comments_for_blog(db: AsyncSession, blog_id: int, user_id: int) -> int:
    """
    Remove every comment on *blog_id*.  Allowed for the blog's owner only;
    returns the number of rows deleted.
    """
    owner_id = (await db.execute(select(Blog.user_id).where(Blog.id == blog_id))).scalar_one_or_none()
    if owner_id is None:
        raise NotFoundError(BLOG_NOT_FOUND)
    assert_owner(user_id, owner_id, "You can only delete comments on your own blogs")

    result = await db.execute(delete(Comment).where(Comment.blog_id == blog_id))
    await db.flush()
    cache.mark_public_stale(db)
    return result.rowcount
