from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.exceptions import UnauthorizedError
from app.models import User
from app.security import decode_access_token
from app.services import auth_service
from app.services.ownership import ensure_blog_owner

# auto_error=False so a missing header goes through our own 401 path
# (and so public routes can treat it as an anonymous viewer).
bearer_scheme = HTTPBearer(auto_error=False, description="JWT access token")


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the authenticated principal from the ``Authorization: Bearer``
    header.  The user row is loaded fresh on every request so a deleted
    account cannot keep using an unexpired token.
    """
    if credentials is None:
        raise UnauthorizedError("Missing authentication token")

    user_id = decode_access_token(credentials.credentials)
    user = await auth_service.get_user(db, user_id)
    if user is None:
        raise UnauthorizedError("Invalid authentication token")

    request.state.user_id = user.id
    return user


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like ``get_current_user`` but anonymous (None) instead of 401."""
    if credentials is None:
        return None
    try:
        return await get_current_user(request, credentials, db)
    except UnauthorizedError:
        return None


async def require_blog_owner(
    blog_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Ownership guard for blog mutations: 404 when the blog does not exist,
    403 when it belongs to someone else.  Returns the principal.
    """
    await ensure_blog_owner(db, blog_id, user)
    return user


class PaginationParams:
    """
    Reusable FastAPI dependency that parses ``page`` / ``limit`` query
    parameters.

    Attributes
    ----------
    page:
        1-based page number (minimum 1).
    limit:
        Items per page, clamped to ``settings.MAX_PAGE_SIZE`` regardless
        of the value supplied by the caller.
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)."),
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            description="Number of items returned per page.",
        ),
    ) -> None:
        self.page = page
        self.limit = min(limit, settings.MAX_PAGE_SIZE)


class FeedPaginationParams(PaginationParams):
    """Pagination for the public feed: ``limit`` is validated to 1..50."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)."),
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=settings.FEED_MAX_PAGE_SIZE,
            description="Number of blogs per page (max 50).",
        ),
    ) -> None:
        super().__init__(page, limit)
