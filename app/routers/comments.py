from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies import PaginationParams, get_current_user
from app.models import User
from app.rate_limit import limiter
from app.schemas import CommentCreate, CommentUpdate
from app.services import comment_service

router = APIRouter(prefix="/blogs/{blog_id}/comments", tags=["comments"])


@router.post("", status_code=201)
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def create_comment(
    request: Request,
    blog_id: int,
    data: CommentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.create_comment(db, user.id, blog_id, data)


@router.get("")
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def list_comments(
    request: Request,
    blog_id: int,
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.list_comments(db, blog_id, pagination.page, pagination.limit)


@router.get("/{comment_id}")
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def get_comment(
    request: Request,
    blog_id: int,
    comment_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.get_comment(db, comment_id)


@router.patch("/{comment_id}")
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def update_comment(
    request: Request,
    blog_id: int,
    comment_id: int,
    data: CommentUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.update_comment(db, comment_id, user.id, data)


@router.delete("/{comment_id}", status_code=204)
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def delete_comment(
    request: Request,
    blog_id: int,
    comment_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, comment_id, user.id)


@router.delete("", status_code=204)
@limiter.limit(settings.RATE_LIMIT_GLOBAL)
async def delete_blog_comments(
    request: Request,
    blog_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comments_for_blog(db, blog_id, user.id)
