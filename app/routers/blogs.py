from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies import get_current_user, require_blog_owner
from app.models import User
from app.rate_limit import limiter
from app.schemas import BlogCreate, BlogUpdate
from app.services import blog_service

router = APIRouter(prefix="/blogs", tags=["blogs"])


@router.post("", status_code=201)
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def create_blog(
    request: Request,
    data: BlogCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await blog_service.create_blog(db, user.id, data)


@router.get("")
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def list_blogs(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await blog_service.list_blogs_for_owner(db, user.id)


@router.get("/{blog_id}")
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def get_blog(
    request: Request,
    blog_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await blog_service.get_blog_for_owner(db, blog_id, user.id)


@router.patch("/{blog_id}")
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def update_blog(
    request: Request,
    blog_id: int,
    data: BlogUpdate,
    user: User = Depends(require_blog_owner),
    db: AsyncSession = Depends(get_db),
):
    return await blog_service.update_blog(db, blog_id, user.id, data)


@router.delete("/{blog_id}", status_code=204)
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def delete_blog(
    request: Request,
    blog_id: int,
    user: User = Depends(require_blog_owner),
    db: AsyncSession = Depends(get_db),
):
    await blog_service.delete_blog(db, blog_id, user.id)
