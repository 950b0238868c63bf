"""Database seeder for local development of the blog API."""
import asyncio
import argparse
import random
import time
from datetime import datetime, timezone, timedelta

from blog_api.cache import cache
from blog_api.database import engine, async_session, Base, create_tables
from blog_api.models import User, Post, Comment
from blog_api.security import hash_password

TOPICS = ["python", "fastapi", "postgresql", "redis", "docker", "testing",
          "performance", "security", "caching", "authentication"]

# Every seeded account shares this password so they can log in locally.
SEED_PASSWORD = "Seed1234"


async def seed(small: bool = False):
    num_users = 5 if small else 25
    num_posts = 20 if small else 500
    max_comments_per_post = 2 if small else 5

    print(f"Seeding: {num_users} users, {num_posts} posts, up to {max_comments_per_post} comments each")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await create_tables()

    password_hash = hash_password(SEED_PASSWORD)

    async with async_session() as session:
        users = []
        for i in range(num_users):
            user = User(
                name=f"User {i}",
                email=f"user_{i:04d}@example.com",
                password=password_hash,
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users")

        posts = []
        for i in range(num_posts):
            created = datetime.now(timezone.utc) - timedelta(days=random.randint(0, 365))
            topic = random.choice(TOPICS)
            post = Post(
                title=f"Post {i}: notes on {topic}",
                content=f"This is the full content of post {i} about {topic}. " * 10,
                published=random.random() > 0.2,  # 80% published
                created_at=created,
                updated_at=created,
                author_id=random.choice(users).id,
            )
            session.add(post)
            posts.append(post)
        await session.flush()
        print(f"  Created {len(posts)} posts")

        total_comments = 0
        for post in posts:
            for _ in range(random.randint(0, max_comments_per_post)):
                session.add(Comment(
                    content=f"Thanks for writing about this! ({random.randint(1, 999)})",
                    post_id=post.id,
                    author_id=random.choice(users).id,
                ))
                total_comments += 1
        await session.commit()

    # Cached pages were computed from the previous data set.
    await cache.connect()
    await cache.invalidate_post()
    await cache.delete_pattern("post:*")
    await cache.disconnect()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {num_users} (password: {SEED_PASSWORD})")
    print(f"  Posts: {num_posts}")
    print(f"  Comments: {total_comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset (20 posts)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
