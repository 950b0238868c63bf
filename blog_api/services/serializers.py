"""
ORM → plain dict conversion.

Output dicts are what the API returns and what the cache stores, so every
value must be JSON-serialisable.  Keys are camelCase to match the public
wire format.  ``User.password`` is never read here.
"""
from datetime import datetime

from blog_api.models import Comment, Post, User


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at),
    }


def author_summary(user: User | None) -> dict | None:
    """Minimal author identity embedded in posts and comments."""
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def post_to_dict(post: Post, *, with_author: bool = True) -> dict:
    data = {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "published": post.published,
        "authorId": post.author_id,
        "createdAt": _iso(post.created_at),
        "updatedAt": _iso(post.updated_at),
    }
    if with_author:
        data["author"] = author_summary(post.author)
    return data


def comment_to_dict(
    comment: Comment,
    *,
    with_author: bool = True,
    with_post: bool = False,
) -> dict:
    data = {
        "id": comment.id,
        "content": comment.content,
        "postId": comment.post_id,
        "authorId": comment.author_id,
        "createdAt": _iso(comment.created_at),
        "updatedAt": _iso(comment.updated_at),
    }
    if with_author:
        data["author"] = author_summary(comment.author)
    if with_post:
        data["post"] = (
            {"id": comment.post.id, "title": comment.post.title} if comment.post else None
        )
    return data
