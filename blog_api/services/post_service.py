"""
Post service: business logic for the Post aggregate.

Design notes
------------
- List and detail reads go through ``cache.read_through``.  List keys
  encode page, limit and both filters so distinct queries never share an
  entry; detail keys are ``post:<id>``.
- Writes commit before invalidating.  Invalidating first would leave a
  window in which a concurrent reader repopulates the cache from the
  pre-commit row.
- Every write drops all list pages plus the post's own detail entry.
- Update and delete load the bare row first and run the ownership check
  before touching anything (404 before 403).
- Relationships are ``noload`` on the models; eager loading is explicit
  here via ``joinedload`` (author) and ``selectinload`` (comments).
"""
import logging
import math

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from blog_api.cache import cache, post_key, posts_list_key
from blog_api.config import settings
from blog_api.exceptions import NotFoundError
from blog_api.models import Comment, Post
from blog_api.schemas import PaginationMeta, PostCreate, PostPage, PostUpdate
from blog_api.services.ownership import ensure_owner
from blog_api.services.serializers import comment_to_dict, post_to_dict

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Loading helpers
# ---------------------------------------------------------------------------

async def _load_post(db: AsyncSession, post_id: int, *, with_comments: bool = False) -> Post | None:
    options = [joinedload(Post.author)]
    if with_comments:
        options.append(selectinload(Post.comments).joinedload(Comment.author))
    q = select(Post).where(Post.id == post_id).options(*options).execution_options(
        populate_existing=True
    )
    result = await db.execute(q)
    return result.unique().scalar_one_or_none()


def _post_detail_to_dict(post: Post) -> dict:
    data = post_to_dict(post)
    data["comments"] = [comment_to_dict(c) for c in post.comments]
    return data


def _list_filters(published: bool | None, author_id: int | None) -> list:
    filters = []
    if published is not None:
        filters.append(Post.published.is_(published))
    if author_id is not None:
        filters.append(Post.author_id == author_id)
    return filters


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_post(db: AsyncSession, data: PostCreate, author_id: int) -> dict:
    """Create a post owned by *author_id* and return it with its author."""
    post = Post(
        title=data.title,
        content=data.content,
        published=data.published,
        author_id=author_id,
    )
    db.add(post)
    await db.flush()
    await db.commit()

    await cache.invalidate_post()
    logger.info("Post id=%s created by user id=%s", post.id, author_id)

    created = await _load_post(db, post.id)
    return post_to_dict(created)


async def get_posts(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    published: bool | None = None,
    author_id: int | None = None,
) -> PostPage:
    """
    Return one page of posts, newest first, with pagination metadata.

    Two SQL statements are issued on a cache miss: the COUNT and the page
    SELECT (author joined, comment count as a correlated subquery).
    """
    cache_key = posts_list_key(page, limit, published, author_id)

    async def load() -> dict:
        filters = _list_filters(published, author_id)

        count_q = select(func.count()).select_from(Post).where(*filters)
        total: int = (await db.execute(count_q)).scalar_one()

        comment_count = (
            select(func.count(Comment.id))
            .where(Comment.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
        )
        posts_q = (
            select(Post, comment_count.label("comment_count"))
            .where(*filters)
            .options(joinedload(Post.author))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = (await db.execute(posts_q)).all()

        items = []
        for post, count in rows:
            item = post_to_dict(post)
            item["commentCount"] = count
            items.append(item)

        return PostPage(
            posts=items,
            pagination=PaginationMeta(
                current_page=page,
                total_pages=math.ceil(total / limit),
                total_items=total,
                items_per_page=limit,
            ),
        ).model_dump(by_alias=True)

    cached = await cache.read_through(cache_key, settings.CACHE_TTL_LIST, load)
    return PostPage(**cached)


async def get_post(db: AsyncSession, post_id: int) -> dict:
    """
    Return the detail dict for *post_id*, including author and comments.

    Raises ``NotFoundError`` when the post exists in neither the cache nor
    the database.
    """
    async def load() -> dict:
        post = await _load_post(db, post_id, with_comments=True)
        if post is None:
            raise NotFoundError("Post not found")
        return _post_detail_to_dict(post)

    return await cache.read_through(post_key(post_id), settings.CACHE_TTL_DETAIL, load)


async def update_post(
    db: AsyncSession,
    post_id: int,
    data: PostUpdate,
    requester_id: int,
) -> dict:
    """
    Apply the fields explicitly set in *data* and return the updated post.

    Only the author may update a post.
    """
    post = ensure_owner(await db.get(Post, post_id), requester_id, "update", "post")

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(post, field, value)

    await db.flush()
    await db.commit()

    await cache.invalidate_post(post_id)
    logger.info("Post id=%s updated by user id=%s", post_id, requester_id)

    updated = await _load_post(db, post_id)
    return post_to_dict(updated)


async def delete_post(db: AsyncSession, post_id: int, requester_id: int) -> dict:
    """
    Delete the post and return the deleted record.

    Its comments go with it through the ``ON DELETE CASCADE`` foreign key.
    Only the author may delete a post.
    """
    post = ensure_owner(await db.get(Post, post_id), requester_id, "delete", "post")
    deleted = post_to_dict(post, with_author=False)

    await db.delete(post)
    await db.flush()
    await db.commit()

    await cache.invalidate_post(post_id)
    logger.info("Post id=%s deleted by user id=%s", post_id, requester_id)
    return deleted
