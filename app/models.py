from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, utcnow


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships: lazy="noload" enforces explicit eager loading in services
    blogs: Mapped[List["Blog"]] = relationship(
        "Blog", back_populates="author", lazy="noload", passive_deletes=True
    )


# ---------------------------------------------------------------------------
# Blog
# ---------------------------------------------------------------------------
class Blog(Base):
    __tablename__ = "blogs"

    __table_args__ = (
        # Owner's dashboard, newest first
        Index("ix_blogs_user_id_created_at", "user_id", "created_at"),
        # Public feed
        Index("ix_blogs_is_published_created_at", "is_published", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Comment/like rows are removed by ON DELETE CASCADE, never loaded by the ORM.
    author: Mapped["User"] = relationship("User", back_populates="blogs", lazy="noload")
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="blog", lazy="noload", passive_deletes=True
    )
    likes: Mapped[List["Like"]] = relationship(
        "Like", back_populates="blog", lazy="noload", passive_deletes=True
    )


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    __table_args__ = (
        Index("ix_comments_blog_id_created_at", "blog_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    blog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False
    )

    user: Mapped["User"] = relationship("User", lazy="noload")
    blog: Mapped["Blog"] = relationship("Blog", back_populates="comments", lazy="noload")


# ---------------------------------------------------------------------------
# Like: one row per (user, blog); the compound primary key enforces it
# ---------------------------------------------------------------------------
class Like(Base):
    __tablename__ = "likes"

    __table_args__ = (
        Index("ix_likes_blog_id_created_at", "blog_id", "created_at"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    blog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("blogs.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    user: Mapped["User"] = relationship("User", lazy="noload")
    blog: Mapped["Blog"] = relationship("Blog", back_populates="likes", lazy="noload")
