from fastapi import Query, Request

from blog_api.config import settings
from blog_api.exceptions import AppError, MalformedCredentials, MissingCredentials
from blog_api.schemas import TokenClaim
from blog_api.security import token_service

BEARER_SCHEME = "Bearer"


# ---------------------------------------------------------------------------
# Authorization guard
# ---------------------------------------------------------------------------

def extract_bearer_token(header: str | None) -> str:
    """
    Return the token from an ``Authorization`` header value.

    Raises ``MissingCredentials`` when there is no header and
    ``MalformedCredentials`` unless the value is exactly
    ``"Bearer <token>"``.
    """
    if not header:
        raise MissingCredentials()
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_SCHEME or not parts[1]:
        raise MalformedCredentials()
    return parts[1]


async def get_current_user(request: Request) -> TokenClaim:
    """
    FastAPI dependency for routes that require an authenticated caller.

    The verified claim is returned to the route and stored on
    ``request.state.user``.  Any failure raises a 401 error and leaves the
    request state untouched.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    claim = token_service.verify(token)
    request.state.user = claim
    return claim


async def get_optional_user(request: Request) -> TokenClaim | None:
    """
    Like ``get_current_user`` but never rejects: on any credential failure
    the request proceeds anonymously with nothing attached.
    """
    try:
        return await get_current_user(request)
    except AppError:
        return None


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

class PaginationParams:
    """
    Reusable FastAPI dependency that parses the post-list query string.

    Attributes
    ----------
    page:
        1-based page number (minimum 1).
    limit:
        Number of items per page, clamped to ``settings.MAX_PAGE_SIZE``.
    published:
        Tri-state filter; ``None`` means published and draft posts alike.
    author_id:
        Exact-match author filter (query name ``authorId``).
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)."),
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            description="Number of posts per page.",
        ),
        published: bool | None = Query(None, description="Filter by published status."),
        author_id: int | None = Query(
            None, alias="authorId", ge=1, description="Filter by author id."
        ),
    ) -> None:
        self.page = page
        self.limit = min(limit, settings.MAX_PAGE_SIZE)
        self.published = published
        self.author_id = author_id
