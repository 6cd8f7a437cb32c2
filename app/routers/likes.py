from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.rate_limit import limiter
from app.services import like_service

router = APIRouter(prefix="/blogs/{blog_id}/likes", tags=["likes"])


@router.post("", status_code=201)
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def like_blog(
    request: Request,
    blog_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await like_service.like_blog(db, user.id, blog_id)


@router.delete("")
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def unlike_blog(
    request: Request,
    blog_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await like_service.unlike_blog(db, user.id, blog_id)


@router.get("/status")
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def like_status(
    request: Request,
    blog_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await like_service.like_status(db, user.id, blog_id)


@router.get("")
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def recent_likes(request: Request, blog_id: int, db: AsyncSession = Depends(get_db)):
    return await like_service.recent_likes(db, blog_id)
