"""
Auth service: registration, login and principal lookup for the User
aggregate.  Passwords are stored as bcrypt hashes; the API only ever
hands out signed access tokens.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, UnauthorizedError
from app.models import User
from app.schemas import LoginRequest, RegisterRequest
from app.security import create_access_token, hash_password, verify_password
from app.services.serializers import isoformat

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists"
INVALID_CREDENTIALS = "Invalid credentials"


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "createdAt": isoformat(user.created_at),
    }


def _auth_response(user: User) -> dict:
    return {
        "access_token": create_access_token(user.id, user.email),
        "user": user_to_dict(user),
    }


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    q = select(User).where(User.email == email.lower())
    return (await db.execute(q)).scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def register(db: AsyncSession, data: RegisterRequest) -> dict:
    """
    Create a user and return an access token for it.

    Email uniqueness is checked up front and enforced by the unique index;
    both paths report Conflict.
    """
    if await get_user_by_email(db, data.email) is not None:
        raise ConflictError(EMAIL_TAKEN)

    user = User(
        email=data.email.lower(),
        name=data.name,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise ConflictError(EMAIL_TAKEN) from exc

    logger.info("User %d registered", user.id)
    return _auth_response(user)


async def login(db: AsyncSession, data: LoginRequest) -> dict:
    user = await get_user_by_email(db, data.email)
    # Same answer for unknown email and wrong password.
    if user is None or not verify_password(data.password, user.password_hash):
        raise UnauthorizedError(INVALID_CREDENTIALS)
    return _auth_response(user)
