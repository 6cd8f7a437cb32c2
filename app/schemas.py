import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# At least one letter and one digit, drawn from letters, digits and @$!%*#?&.
_PASSWORD_CHARSET_RE = re.compile(r"^[A-Za-z\d@$!%*#?&]+$")
_HAS_LETTER_RE = re.compile(r"[A-Za-z]")
_HAS_DIGIT_RE = re.compile(r"\d")


def _check_password_strength(value: str) -> str:
    # Lookahead patterns are not supported by pydantic's regex engine.
    if not (
        _PASSWORD_CHARSET_RE.match(value)
        and _HAS_LETTER_RE.search(value)
        and _HAS_DIGIT_RE.search(value)
    ):
        raise ValueError("Password must contain at least one letter and one number")
    return value


# --- Auth ---

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=20)
    name: str = Field(min_length=2, max_length=50)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return _check_password_strength(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


# --- Blog ---

class BlogCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    content: str = Field(min_length=10)
    is_published: bool = Field(False, alias="isPublished")

    model_config = ConfigDict(populate_by_name=True)


class BlogUpdate(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    title: str | None = Field(None, min_length=3, max_length=200)
    content: str | None = Field(None, min_length=10)
    is_published: bool | None = Field(None, alias="isPublished")

    model_config = ConfigDict(populate_by_name=True)


# --- Comment ---

class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=1000)


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=1000)
