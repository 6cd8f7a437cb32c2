"""Database seeder: users, blogs (some drafts), comments and likes."""
import argparse
import asyncio
import logging
import random
import time

from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base, async_session, engine
from app.logging_config import configure_logging
from app.models import Blog, Comment, Like, User
from app.security import hash_password
from app.services.blog_service import generate_unique_slug

logger = logging.getLogger("app.seed")

TOPICS = ["python", "fastapi", "postgresql", "redis", "docker", "testing",
          "performance", "security", "typescript", "devops"]

SEED_PASSWORD = "Passw0rd"


async def seed(session: AsyncSession, users: int = 10, blogs: int = 50, rng: random.Random | None = None) -> dict:
    """
    Fill *session* with sample data and flush it; the caller commits.

    Roughly one blog in ten is left unpublished.  Every account shares
    ``SEED_PASSWORD`` so the seeded users can log in.
    """
    rng = rng or random.Random()
    password_hash = hash_password(SEED_PASSWORD)

    authors = [
        User(email=f"user_{i:04d}@example.com", name=f"User {i}", password_hash=password_hash)
        for i in range(users)
    ]
    session.add_all(authors)
    await session.flush()

    # Added one by one so each slug lookup sees the posts before it.
    posts = []
    for i in range(blogs):
        title = f"Post {i}: notes on {rng.choice(TOPICS)}"
        post = Blog(
            title=title,
            slug=await generate_unique_slug(session, title),
            content=f"# {title}\n\nThis is the **full content** of post {i}. " * 5,
            is_published=rng.random() > 0.1,
            user_id=rng.choice(authors).id,
        )
        session.add(post)
        posts.append(post)
    await session.flush()

    total_comments = 0
    total_likes = 0
    for post in posts:
        if not post.is_published:
            continue
        for _ in range(rng.randint(0, 4)):
            session.add(Comment(
                content=f"Thanks for writing about this, post {post.id} helped me.",
                user_id=rng.choice(authors).id,
                blog_id=post.id,
            ))
            total_comments += 1
        for liker in rng.sample(authors, k=rng.randint(0, len(authors))):
            session.add(Like(user_id=liker.id, blog_id=post.id))
            total_likes += 1
    await session.flush()

    return {"users": len(authors), "blogs": len(posts), "comments": total_comments, "likes": total_likes}


async def run(users: int, blogs: int) -> None:
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        counts = await seed(session, users=users, blogs=blogs)
        await session.commit()

    await engine.dispose()
    logger.info("Seeding complete in %.1fs: %s", time.perf_counter() - start, counts)


def main():
    parser = argparse.ArgumentParser(description="Recreate the schema and seed the blog database")
    parser.add_argument("--users", type=int, default=10, help="Number of users (default 10)")
    parser.add_argument("--blogs", type=int, default=50, help="Number of blogs (default 50)")
    args = parser.parse_args()
    configure_logging()
    asyncio.run(run(args.users, args.blogs))


if __name__ == "__main__":
    main()
