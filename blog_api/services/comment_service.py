"""
Comment service: comments on a Post.

Comments are not cached on their own, but the parent post's detail entry
embeds them and list entries embed a comment count, so every comment write
invalidates the parent post's caches.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from blog_api.cache import cache
from blog_api.exceptions import NotFoundError
from blog_api.models import Comment, Post
from blog_api.schemas import CommentCreate, CommentUpdate
from blog_api.services.ownership import ensure_owner
from blog_api.services.serializers import comment_to_dict

logger = logging.getLogger(__name__)


async def _require_post(db: AsyncSession, post_id: int) -> Post:
    post = await db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


async def _load_comment(db: AsyncSession, comment_id: int) -> Comment | None:
    q = (
        select(Comment)
        .where(Comment.id == comment_id)
        .options(joinedload(Comment.author), joinedload(Comment.post))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    return result.unique().scalar_one_or_none()


async def create_comment(
    db: AsyncSession,
    data: CommentCreate,
    post_id: int,
    author_id: int,
) -> dict:
    """
    Add a comment by *author_id* to the post identified by *post_id*.

    Raises ``NotFoundError`` when the post does not exist.
    """
    await _require_post(db, post_id)

    comment = Comment(content=data.content, post_id=post_id, author_id=author_id)
    db.add(comment)
    await db.flush()
    await db.commit()

    await cache.invalidate_post(post_id)
    logger.info("Comment id=%s added to post id=%s", comment.id, post_id)

    created = await _load_comment(db, comment.id)
    return comment_to_dict(created, with_post=True)


async def get_comments_by_post(db: AsyncSession, post_id: int) -> list[dict]:
    """Return the comments on *post_id*, newest first."""
    await _require_post(db, post_id)

    q = (
        select(Comment)
        .where(Comment.post_id == post_id)
        .options(joinedload(Comment.author))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    result = await db.execute(q)
    return [comment_to_dict(c) for c in result.scalars().all()]


async def get_comment(db: AsyncSession, comment_id: int) -> dict:
    comment = await _load_comment(db, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment_to_dict(comment, with_post=True)


async def update_comment(
    db: AsyncSession,
    comment_id: int,
    data: CommentUpdate,
    requester_id: int,
) -> dict:
    """Replace the comment's content.  Only its author may do this."""
    comment = ensure_owner(
        await db.get(Comment, comment_id), requester_id, "update", "comment"
    )
    comment.content = data.content
    await db.flush()
    await db.commit()

    await cache.invalidate_post(comment.post_id)
    logger.info("Comment id=%s updated by user id=%s", comment_id, requester_id)

    updated = await _load_comment(db, comment_id)
    return comment_to_dict(updated, with_post=True)


async def delete_comment(db: AsyncSession, comment_id: int, requester_id: int) -> dict:
    """Delete the comment and return the deleted record.  Author only."""
    comment = ensure_owner(
        await db.get(Comment, comment_id), requester_id, "delete", "comment"
    )
    deleted = comment_to_dict(comment, with_author=False)

    await db.delete(comment)
    await db.flush()
    await db.commit()

    await cache.invalidate_post(deleted["postId"])
    logger.info("Comment id=%s deleted by user id=%s", comment_id, requester_id)
    return deleted
