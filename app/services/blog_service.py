"""
Blog service: owner-scoped CRUD for the Blog aggregate.

Design notes
------------
- Slugs are derived from the title and made unique by probing
  ``base``, ``base-1``, ``base-2`` … against the database.  Probing never
  writes; the unique index on ``blogs.slug`` still settles concurrent
  creators racing on the same base.
- Reads are scoped to the owner: a blog that exists but belongs to someone
  else is reported exactly like a missing one.
- Update and delete run behind ``ensure_blog_owner`` (see the router), and
  re-check ``(id, owner)`` here as well.
- Service functions flush but do not commit; the transaction boundary is
  owned by the ``get_db`` dependency in the router layer.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.cache import cache
from app.config import settings
from app.exceptions import ConflictError, NotFoundError
from app.models import Blog
from app.schemas import BlogCreate, BlogUpdate
from app.services.queries import BLOG_NOT_FOUND, blogs_with_counts
from app.services.serializers import blog_to_dict
from app.text import slugify

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Slug generation
# ---------------------------------------------------------------------------

async def slug_exists(db: AsyncSession, slug: str, exclude_id: int | None = None) -> bool:
    """True when *slug* is taken by a blog other than *exclude_id*."""
    owner = (await db.execute(select(Blog.id).where(Blog.slug == slug))).scalar_one_or_none()
    if owner is None:
        return False
    return exclude_id is None or owner != exclude_id


async def generate_unique_slug(
    db: AsyncSession,
    title: str,
    exclude_id: int | None = None,
    max_attempts: int | None = None,
) -> str:
    """
    Return the first free slug among ``slugify(title)``, ``-1``, ``-2`` ….

    A blog being updated (*exclude_id*) may keep its own slug.  Gives up
    with ConflictError after *max_attempts* numbered suffixes.
    """
    limit = settings.SLUG_MAX_ATTEMPTS if max_attempts is None else max_attempts
    base = slugify(title)
    candidate = base
    counter = 1
    while await slug_exists(db, candidate, exclude_id):
        if counter > limit:
            raise ConflictError(
                f"Could not generate a unique slug for {title!r} after {limit} attempts"
            )
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate


# ---------------------------------------------------------------------------
# Internal fetch helpers
# ---------------------------------------------------------------------------

async def _owned_blog(db: AsyncSession, blog_id: int, owner_id: int) -> Blog:
    q = select(Blog).where(Blog.id == blog_id, Blog.user_id == owner_id)
    blog = (await db.execute(q)).scalar_one_or_none()
    if blog is None:
        raise NotFoundError(BLOG_NOT_FOUND)
    return blog


async def _owned_blog_with_counts(db: AsyncSession, blog_id: int, owner_id: int) -> dict:
    query, _, _ = blogs_with_counts()
    q = (
        query.where(Blog.id == blog_id, Blog.user_id == owner_id)
        .execution_options(populate_existing=True)
    )
    row = (await db.execute(q)).one_or_none()
    if row is None:
        raise NotFoundError(BLOG_NOT_FOUND)
    blog, likes_count, comments_count = row
    return blog_to_dict(blog, likes_count, comments_count)


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_blog(db: AsyncSession, owner_id: int, data: BlogCreate) -> dict:
    """Create a blog for *owner_id* and return it with its author (no counts)."""
    slug = await generate_unique_slug(db, data.title)
    blog = Blog(
        title=data.title,
        slug=slug,
        content=data.content,
        is_published=data.is_published,
        user_id=owner_id,
    )
    db.add(blog)
    await db.flush()

    q = (
        select(Blog)
        .where(Blog.id == blog.id)
        .options(joinedload(Blog.author))
        .execution_options(populate_existing=True)
    )
    blog = (await db.execute(q)).scalar_one()

    logger.info("Blog %d created by user %d with slug %r", blog.id, owner_id, slug)
    if blog.is_published:
        cache.mark_public_stale(db)
    return blog_to_dict(blog)


async def list_blogs_for_owner(db: AsyncSession, owner_id: int) -> list[dict]:
    """All blogs owned by *owner_id*, newest first, with like/comment counts."""
    query, _, _ = blogs_with_counts()
    q = query.where(Blog.user_id == owner_id).order_by(Blog.created_at.desc(), Blog.id.desc())
    rows = (await db.execute(q)).all()
    return [blog_to_dict(blog, likes, comments) for blog, likes, comments in rows]


async def get_blog_for_owner(db: AsyncSession, blog_id: int, owner_id: int) -> dict:
    """Return the blog only if *owner_id* owns it; Not-Found otherwise."""
    return await _owned_blog_with_counts(db, blog_id, owner_id)


async def update_blog(db: AsyncSession, blog_id: int, owner_id: int, data: BlogUpdate) -> dict:
    """
    Apply a partial update.  Only fields present in the payload change; a
    new title regenerates the slug, exempting the blog's current slug.
    """
    blog = await _owned_blog(db, blog_id, owner_id)

    update_data = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }
    if "title" in update_data:
        update_data["slug"] = await generate_unique_slug(db, update_data["title"], blog.id)

    for field, value in update_data.items():
        setattr(blog, field, value)

    await db.flush()
    cache.mark_public_stale(db)
    return await _owned_blog_with_counts(db, blog_id, owner_id)


async def delete_blog(db: AsyncSession, blog_id: int, owner_id: int) -> None:
    """Hard-delete the blog; comments and likes go with it via ON DELETE CASCADE."""
    blog = await _owned_blog(db, blog_id, owner_id)
    await db.delete(blog)
    await db.flush()
    logger.info("Blog %d deleted by user %d", blog_id, owner_id)
    cache.mark_public_stale(db)
