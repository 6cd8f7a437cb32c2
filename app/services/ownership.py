"""
Ownership authorization.

Ownership is immutable after creation, so a single fresh read of the
owner id is enough to gate a mutation.  ``ensure_blog_owner`` reports a
missing blog as Not-Found and a foreign one as Forbidden; this differs
from the owner-scoped reads in ``blog_service``, which report both cases
as Not-Found.  Callers rely on both behaviours.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ForbiddenError, NotFoundError
from app.models import Blog, User
from app.services.queries import BLOG_NOT_FOUND


def assert_owner(principal_id: int | None, owner_id: int, message: str) -> None:
    """Raise ForbiddenError unless *principal_id* is *owner_id*."""
    if principal_id is None or principal_id != owner_id:
        raise ForbiddenError(message)


async def ensure_blog_owner(db: AsyncSession, blog_id: int, principal: User | None) -> None:
    if principal is None:
        raise ForbiddenError("User not authenticated")

    q = select(Blog.user_id).where(Blog.id == blog_id)
    owner_id = (await db.execute(q)).scalar_one_or_none()
    if owner_id is None:
        raise NotFoundError(BLOG_NOT_FOUND)

    assert_owner(principal.id, owner_id, "You do not have permission to modify this blog")
