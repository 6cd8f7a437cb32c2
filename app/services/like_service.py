"""
Like service: one like per (user, blog), on published blogs only.

The compound primary key on ``likes`` is the source of truth for
uniqueness: a concurrent duplicate insert surfaces as an IntegrityError,
which is reported as Conflict just like the duplicate found up front.
Counts in responses are recomputed after the write.
"""
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.cache import cache
from app.config import settings
from app.exceptions import ConflictError, NotFoundError
from app.models import Like
from app.services.queries import count_likes, get_blog_or_404
from app.services.serializers import like_to_dict

logger = logging.getLogger(__name__)

ALREADY_LIKED = "You have already liked this post"
NOT_LIKED = "You have not liked this post"


async def like_blog(db: AsyncSession, user_id: int, blog_id: int) -> dict:
    blog = await get_blog_or_404(db, blog_id)
    if not blog.is_published:
        raise NotFoundError("Blog is not published")

    if await db.get(Like, (user_id, blog_id)) is not None:
        raise ConflictError(ALREADY_LIKED)

    db.add(Like(user_id=user_id, blog_id=blog_id))
    try:
        await db.flush()
    except IntegrityError as exc:
        raise ConflictError(ALREADY_LIKED) from exc

    logger.info("User %d liked blog %d", user_id, blog_id)
    cache.mark_public_stale(db)
    return {"liked": True, "likesCount": await count_likes(db, blog_id)}


async def unlike_blog(db: AsyncSession, user_id: int, blog_id: int) -> dict:
    await get_blog_or_404(db, blog_id)

    result = await db.execute(
        delete(Like).where(Like.user_id == user_id, Like.blog_id == blog_id)
    )
    if result.rowcount == 0:
        raise NotFoundError(NOT_LIKED)

    cache.mark_public_stale(db)
    return {"liked": False, "likesCount": await count_likes(db, blog_id)}


async def like_status(db: AsyncSession, user_id: int, blog_id: int) -> dict:
    """Whether *user_id* likes *blog_id*, plus the blog's like count."""
    await get_blog_or_404(db, blog_id)
    liked = await db.get(Like, (user_id, blog_id)) is not None
    return {"liked": liked, "likesCount": await count_likes(db, blog_id)}


async def recent_likes(db: AsyncSession, blog_id: int) -> dict:
    """
    Total likes plus the most recent likers, newest first.

    Unlike the other operations this does not check that the blog exists:
    an unknown blog simply has no likes.
    """
    q = (
        select(Like)
        .where(Like.blog_id == blog_id)
        .options(joinedload(Like.user))
        .order_by(Like.created_at.desc())
        .limit(settings.RECENT_ITEMS_LIMIT)
    )
    likes = (await db.execute(q)).scalars().all()
    return {
        "count": await count_likes(db, blog_id),
        "recent": [like_to_dict(like) for like in likes],
    }
