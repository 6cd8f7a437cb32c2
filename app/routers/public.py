from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies import FeedPaginationParams, get_optional_user
from app.models import User
from app.rate_limit import limiter
from app.services import public_service

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/feed")
@limiter.limit(settings.RATE_LIMIT_PUBLIC_FEED)
async def get_feed(
    request: Request,
    pagination: FeedPaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await public_service.get_feed(db, pagination.page, pagination.limit)


@router.get("/popular")
@limiter.limit(settings.RATE_LIMIT_PUBLIC_POPULAR)
async def get_popular(
    request: Request,
    limit: int = Query(settings.POPULAR_DEFAULT_LIMIT, ge=1),
    db: AsyncSession = Depends(get_db),
):
    return await public_service.get_popular(db, min(limit, settings.POPULAR_MAX_LIMIT))


@router.get("/blogs/{slug}")
@limiter.limit(settings.RATE_LIMIT_PUBLIC_BLOG)
async def get_blog_by_slug(
    request: Request,
    slug: str,
    comments: str | None = Query(None, description="Pass `true` to paginate comments instead of the latest 10."),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    viewer_id = viewer.id if viewer else None
    if comments == "true":
        return await public_service.get_blog_by_slug_with_comments(
            db, slug, page, min(limit, settings.FEED_MAX_PAGE_SIZE), viewer_id
        )
    return await public_service.get_blog_by_slug(db, slug, viewer_id)
